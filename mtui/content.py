"""
Rendering of Matrix message content as one line of text.

Each ``msgtype`` gets a short descriptive line. Media messages carry the
download URL of the attachment, resolved from its ``mxc://`` reference
against the homeserver.
"""

import logging
from urllib.parse import quote, urlsplit

from .util import one_line


logger = logging.getLogger(__name__)

UNSUPPORTED = 'Unsupported message type'
ENCRYPTED_NOT_IMPLEMENTED = 'encrypted attachments are not implemented'

MEDIA_DOWNLOAD_PATH = '/_matrix/media/v3/download/%(server)s/%(media_id)s'

MEDIA_KINDS = {
    'm.image': 'Image',
    'm.video': 'Video',
    'm.audio': 'Audio',
    'm.file': 'File',
}


def mxc_to_http(mxc, homeserver):
    """Resolve an ``mxc://server/media_id`` reference to a download URL.

    Returns `None` for anything that is not a well-formed mxc URI.

    >>> mxc_to_http('mxc://example.org/abc', 'https://matrix.example.org/')
    'https://matrix.example.org/_matrix/media/v3/download/example.org/abc'
    """
    if not isinstance(mxc, str) or not mxc.startswith('mxc://'):
        return None
    parts = urlsplit(mxc)
    media_id = parts.path.lstrip('/')
    if not parts.netloc or not media_id or '/' in media_id:
        return None
    return homeserver.rstrip('/') + MEDIA_DOWNLOAD_PATH % {
        'server': quote(parts.netloc, safe=':'),
        'media_id': quote(media_id, safe=''),
    }


def _render_media(kind, content, homeserver):
    body = one_line(content.get('body', ''))
    if 'url' not in content and 'file' in content:
        return '%s: %s' % (kind, ENCRYPTED_NOT_IMPLEMENTED)
    url = mxc_to_http(content.get('url'), homeserver)
    if url is None:
        return '%s: %s' % (kind, body)
    return '%s: %s (%s)' % (kind, body, url)


def render_content(content, homeserver):
    """Render the content of an ``m.room.message`` event.

    Parameters
    ----------
    content : `dict`
        Event content.
    homeserver : `str`
        Homeserver base URL used to resolve media references.

    Returns
    -------
    `str`
    """
    if not isinstance(content, dict):
        return UNSUPPORTED
    msgtype = content.get('msgtype')
    body = content.get('body')

    if msgtype in ('m.text', 'm.notice'):
        return one_line(body or '')
    if msgtype == 'm.emote':
        return '* %s' % one_line(body or '')
    if msgtype in MEDIA_KINDS:
        return _render_media(MEDIA_KINDS[msgtype], content, homeserver)
    if msgtype == 'm.location':
        return 'Location: %s (%s)' % (
            one_line(body or ''), content.get('geo_uri', '')
        )

    logger.debug('unsupported msgtype %r', msgtype)
    return UNSUPPORTED
