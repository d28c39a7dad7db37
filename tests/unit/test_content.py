"""
Unit tests for mtui/content.py

Tests one-line rendering of every supported msgtype.
"""
import pytest
from mtui.content import (
    render_content,
    mxc_to_http,
    UNSUPPORTED,
    ENCRYPTED_NOT_IMPLEMENTED
)


HS = 'https://matrix.example.org'
DOWNLOAD = HS + '/_matrix/media/v3/download/example.org/abc123'


class TestText:

    def test_text(self):
        assert render_content({'msgtype': 'm.text', 'body': 'hello'}, HS) == 'hello'

    def test_notice(self):
        assert render_content({'msgtype': 'm.notice', 'body': 'bot says'}, HS) == 'bot says'

    def test_multiline_body_is_flattened(self):
        content = {'msgtype': 'm.text', 'body': 'line one\nline two\n\n  end'}
        assert render_content(content, HS) == 'line one line two end'

    def test_missing_body(self):
        assert render_content({'msgtype': 'm.text'}, HS) == ''

    def test_emote(self):
        assert render_content({'msgtype': 'm.emote', 'body': 'waves'}, HS) == '* waves'


class TestMedia:

    @pytest.mark.parametrize('msgtype, kind', [
        ('m.image', 'Image'),
        ('m.video', 'Video'),
        ('m.audio', 'Audio'),
        ('m.file', 'File'),
    ])
    def test_media_with_url(self, msgtype, kind):
        content = {'msgtype': msgtype, 'body': 'cat.png', 'url': 'mxc://example.org/abc123'}
        assert render_content(content, HS) == '%s: cat.png (%s)' % (kind, DOWNLOAD)

    def test_encrypted_media(self):
        content = {'msgtype': 'm.image', 'body': 'x', 'file': {'url': 'mxc://example.org/abc'}}
        assert render_content(content, HS) == 'Image: ' + ENCRYPTED_NOT_IMPLEMENTED

    def test_bad_mxc(self):
        content = {'msgtype': 'm.file', 'body': 'doc.pdf', 'url': 'https://elsewhere/doc.pdf'}
        assert render_content(content, HS) == 'File: doc.pdf'


def test_location():
    content = {'msgtype': 'm.location', 'body': 'Office', 'geo_uri': 'geo:51.5,-0.1'}
    assert render_content(content, HS) == 'Location: Office (geo:51.5,-0.1)'


@pytest.mark.parametrize('content', [
    {'msgtype': 'm.poll', 'body': 'x'},
    {'body': 'no type'},
    None,
    'text',
])
def test_unsupported(content):
    assert render_content(content, HS) == UNSUPPORTED


class TestMxc:

    def test_resolve(self):
        assert mxc_to_http('mxc://example.org/abc123', HS + '/') == DOWNLOAD

    @pytest.mark.parametrize('mxc', [
        None, '', 'mxc://', 'mxc://example.org', 'mxc://example.org/a/b', 'http://x/y'
    ])
    def test_malformed(self, mxc):
        assert mxc_to_http(mxc, HS) is None
