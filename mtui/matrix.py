#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import asyncio
import logging
from urllib.parse import urlsplit

import aiohttp
import requests
from nio import (
    AsyncClient, AsyncClientConfig, ErrorResponse, InviteMemberEvent,
    LocalProtocolError, LoginResponse, MessageDirection, RoomMemberEvent,
    RoomMessage, SyncResponse
)
from nio.events import BadEvent, UnknownBadEvent

from .error import ConfigError, LoginError, SyncError, ProtocolError
from .events import BAN, INVITE, LEAVE, MessageEvent, MembershipEvent, InviteEvent
from .util import get as default_get

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)
REQUEST_ERRORS = TRANSPORT_ERRORS + (LocalProtocolError,)

logger = logging.getLogger(__name__)

WELL_KNOWN_URL = '%(base)s/.well-known/matrix/client'


async def resolve_homeserver(address, get=default_get):
    """Turn a configured homeserver address into a base URL.

    A full URL (with scheme) is used as is. A bare server name is looked up
    through ``/.well-known/matrix/client`` and falls back to
    ``https://<name>`` when the lookup fails.

    Parameters
    ----------
    address : `str`
    get : `function` (url), optional
        HTTP GET coroutine returning a `requests.Response`.

    Raises
    ------
    `mtui.error.ConfigError`
        The address cannot be parsed.
    """
    address = (address or '').strip()
    explicit = '://' in address
    url = address if explicit else 'https://' + address
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError as ex:
        raise ConfigError('invalid homeserver address %r: %s' % (address, ex))
    if parts.scheme not in ('http', 'https') or not parts.hostname:
        raise ConfigError('invalid homeserver address %r' % address)
    base = url.rstrip('/')
    if explicit:
        return base

    well_known = WELL_KNOWN_URL % {'base': base}
    logger.info('resolve_homeserver %s', well_known)
    try:
        res = await get(well_known)
        res.raise_for_status()
        server = res.json()['m.homeserver']['base_url']
    except (requests.RequestException, ValueError, KeyError, TypeError) as ex:
        logger.info('no usable well-known for %s: %r', address, ex)
        return base
    if not isinstance(server, str) or not server.startswith('http'):
        logger.warning('ignoring well-known base_url %r', server)
        return base
    logger.info('homeserver %s', server)
    return server.rstrip('/')


class RoomHandle:
    """Read access to one joined room for building a `mtui.room.RoomEntry`.

    Attributes
    ----------
    client : `MatrixClient`
    room : `nio.MatrixRoom`
    """

    PAGE_SIZE = 20

    def __init__(self, client, room):
        self.client = client
        self.room = room

    @property
    def room_id(self):
        return self.room.room_id

    def __str__(self):
        return '<room handle %s>' % self.room_id

    __repr__ = __str__

    async def display_name(self):
        return self.room.display_name

    async def joined_members(self):
        """Return joined members as (display name, user id) pairs.

        Raises
        ------
        `mtui.error.ProtocolError`
        """
        try:
            res = await self.client.nio.joined_members(self.room_id)
        except REQUEST_ERRORS as ex:
            raise ProtocolError('joined_members %s: %r' % (self.room_id, ex))
        if isinstance(res, ErrorResponse):
            raise ProtocolError('joined_members %s: %s' % (self.room_id, res.message))
        return [(member.display_name, member.user_id) for member in res.members]

    async def historical_messages_reverse(self, limit):
        """Yield up to `limit` past messages, newest first.

        Pages backwards from the current sync position. Events that are
        not room messages are skipped.

        Raises
        ------
        `mtui.error.ProtocolError`
            A page request fails or an event cannot be decoded. Messages
            yielded before that stay valid.
        """
        token = self.client.nio.next_batch
        count = 0
        while token and count < limit:
            try:
                res = await self.client.nio.room_messages(
                    self.room_id,
                    start=token,
                    direction=MessageDirection.back,
                    limit=min(self.PAGE_SIZE, limit - count)
                )
            except REQUEST_ERRORS as ex:
                raise ProtocolError('room_messages %s: %r' % (self.room_id, ex))
            if isinstance(res, ErrorResponse):
                raise ProtocolError('room_messages %s: %s' % (self.room_id, res.message))
            if not res.chunk:
                return
            for event in res.chunk:
                if isinstance(event, (BadEvent, UnknownBadEvent)):
                    raise ProtocolError('undecodable event in %s: %r' % (self.room_id, event))
                if not isinstance(event, RoomMessage):
                    continue
                yield message_event(self.room_id, event)
                count += 1
                if count >= limit:
                    return
            if res.end is None or res.end == token:
                return
            token = res.end


def message_event(room_id, event):
    """`mtui.events.MessageEvent` from a nio room message."""
    return MessageEvent(
        room_id,
        event.sender,
        event.server_timestamp,
        event.source.get('content', {}),
        event.event_id
    )


class MatrixClient:
    """Matrix session on top of `nio.AsyncClient`.

    Setup calls (`login`, `sync_once`) raise; actions (`send_message`,
    `kick_user`, `accept_invitation`) log failures and return `False`.

    Attributes
    ----------
    homeserver : `str`
    nio : `nio.AsyncClient`
    device_name : `str`
    invite_initial_delay : `float`
        First delay in seconds before retrying an invitation.
    invite_max_delay : `float`
        Invitation retries stop once the delay would exceed this.
    sync_timeout : `int`
        Long-poll timeout in milliseconds.
    restart_delay : `None` or `float`
        Delay in seconds before restarting a failed sync loop.
        `None` or < 0 - do not restart.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, homeserver, user,
                 device_name='mtui',
                 invite_initial_delay=2,
                 invite_max_delay=3600,
                 sync_timeout=30000,
                 restart_delay=5,
                 max_timeouts=3,
                 nio_client=None):
        self.homeserver = homeserver
        self.device_name = device_name
        self.invite_initial_delay = invite_initial_delay
        self.invite_max_delay = invite_max_delay
        self.sync_timeout = sync_timeout
        self.restart_delay = restart_delay
        if nio_client is None:
            nio_client = AsyncClient(
                homeserver, user,
                config=AsyncClientConfig(max_timeouts=max_timeouts)
            )
        self.nio = nio_client

    @property
    def user_id(self):
        return self.nio.user_id

    async def login(self, password):
        """Log in with a password.

        Raises
        ------
        `mtui.error.LoginError`
        """
        self.logger.info('login %s on %s', self.nio.user, self.homeserver)
        try:
            res = await self.nio.login(password, device_name=self.device_name)
        except TRANSPORT_ERRORS as ex:
            raise LoginError('cannot reach %s: %r' % (self.homeserver, ex))
        if not isinstance(res, LoginResponse):
            raise LoginError(getattr(res, 'message', '<no error message>'))
        self.logger.info('logged in as %s', res.user_id)

    async def sync_once(self):
        """Initial sync.

        Raises
        ------
        `mtui.error.SyncError`
        """
        try:
            res = await self.nio.sync(timeout=self.sync_timeout, full_state=True)
        except TRANSPORT_ERRORS as ex:
            raise SyncError('initial sync failed: %r' % ex)
        if isinstance(res, ErrorResponse):
            raise SyncError('initial sync failed: %s' % res.message)
        self.logger.info('initial sync done, %d joined rooms', len(self.nio.rooms))

    async def sync_forever(self):
        """Background sync loop; callbacks feed the event queues."""
        while True:
            try:
                await self.nio.sync_forever(timeout=self.sync_timeout)
            except asyncio.CancelledError:
                self.logger.info('sync cancelled')
                raise
            except TRANSPORT_ERRORS as ex:
                self.logger.error('sync error: %r', ex)
                if self.restart_delay is None or self.restart_delay < 0:
                    return
                self.logger.error('restarting sync')
                await asyncio.sleep(self.restart_delay)

    def joined_rooms(self):
        return [RoomHandle(self, room) for room in self.nio.rooms.values()]

    def pending_invites(self):
        """`mtui.events.InviteEvent` for invitations known after the initial sync."""
        return [InviteEvent(room_id) for room_id in self.nio.invited_rooms]

    def register_queues(self, message_queue, member_queue):
        """Feed protocol events into the application queues.

        Parameters
        ----------
        message_queue : `asyncio.Queue`
            Receives `mtui.events.MessageEvent`.
        member_queue : `asyncio.Queue`
            Receives `mtui.events.MembershipEvent` and
            `mtui.events.InviteEvent`. Rooms the local user left or was
            banned from are read from each sync response.
        """
        async def on_message(room, event):
            await message_queue.put(message_event(room.room_id, event))

        async def on_member(room, event):
            await member_queue.put(MembershipEvent(
                room.room_id,
                event.state_key,
                event.membership,
                display_name=(event.content or {}).get('displayname'),
                room=RoomHandle(self, room)
            ))

        async def on_invite(room, event):
            if event.state_key != self.user_id or event.membership != INVITE:
                return
            await member_queue.put(InviteEvent(room.room_id, event.sender))

        async def on_sync(response):
            # nio runs no event callbacks for left rooms
            for room_id, info in response.rooms.leave.items():
                await member_queue.put(MembershipEvent(
                    room_id,
                    self.user_id,
                    self.left_membership(info)
                ))

        self.nio.add_event_callback(on_message, RoomMessage)
        self.nio.add_event_callback(on_member, RoomMemberEvent)
        self.nio.add_event_callback(on_invite, InviteMemberEvent)
        self.nio.add_response_callback(on_sync, SyncResponse)

    def left_membership(self, info):
        """'leave' or 'ban', from the local user's last membership event
        in the timeline of a left room."""
        membership = LEAVE
        for event in info.timeline.events:
            if (isinstance(event, RoomMemberEvent)
                    and event.state_key == self.user_id
                    and event.membership in (LEAVE, BAN)):
                membership = event.membership
        return membership

    async def send_message(self, room_id, text):
        """Send a plain text message; empty text is never sent."""
        if not text:
            return False
        try:
            res = await self.nio.room_send(
                room_id,
                'm.room.message',
                {'msgtype': 'm.text', 'body': text},
                ignore_unverified_devices=True
            )
        except REQUEST_ERRORS as ex:
            self.logger.warning('send_message %s: %r', room_id, ex)
            return False
        if isinstance(res, ErrorResponse):
            self.logger.warning('send_message %s: %s', room_id, res.message)
            return False
        return True

    async def kick_user(self, room_id, user_id):
        try:
            res = await self.nio.room_kick(room_id, user_id)
        except TRANSPORT_ERRORS as ex:
            self.logger.warning('kick_user %s %s: %r', room_id, user_id, ex)
            return False
        if isinstance(res, ErrorResponse):
            self.logger.warning('kick_user %s %s: %s', room_id, user_id, res.message)
            return False
        self.logger.info('kicked %s from %s', user_id, room_id)
        return True

    async def _join(self, room_id):
        try:
            res = await self.nio.join(room_id)
        except TRANSPORT_ERRORS as ex:
            self.logger.warning('join %s: %r', room_id, ex)
            return False
        if isinstance(res, ErrorResponse):
            self.logger.warning('join %s: %s', room_id, res.message)
            return False
        return True

    async def accept_invitation(self, room_id):
        """Join an invited room, retrying with exponential backoff.

        Returns
        -------
        `bool`
            `True` once joined, `False` after giving up.
        """
        delay = self.invite_initial_delay
        while not await self._join(room_id):
            if delay > self.invite_max_delay:
                self.logger.error('giving up on invitation to %s', room_id)
                return False
            self.logger.warning('retry join %s in %ss', room_id, delay)
            await asyncio.sleep(delay)
            delay *= 2
        self.logger.info('joined %s', room_id)
        return True

    async def close(self):
        try:
            await self.nio.close()
        except TRANSPORT_ERRORS as ex:
            self.logger.error('close: %r', ex)
