#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import asyncio
import collections
import logging

from .events import MessageEvent, MembershipEvent, InviteEvent, RoomLoaded
from .room import RoomDirectory, RoomEntry
from .tabs import Tab, TabState
from .timeline import Message


Snapshot = collections.namedtuple('Snapshot', [
    'tab',
    'rooms',
    'selected_room',
    'room_name',
    'messages',
    'selected_message',
    'view_mode',
    'members',
    'selected_member',
    'input',
])
Snapshot.__doc__ = 'Render-ready, immutable view of the application state.'


class InputBuffer:
    """Text typed in the input tab."""

    def __init__(self):
        self._chars = []

    def __str__(self):
        return ''.join(self._chars)

    def __len__(self):
        return len(self._chars)

    @property
    def text(self):
        return str(self)

    def push(self, text):
        self._chars.extend(text)

    def pop(self):
        if self._chars:
            self._chars.pop()

    def drain(self):
        """Return the text and clear the buffer."""
        text = ''.join(self._chars)
        self._chars = []
        return text


class App:
    """Application state controller.

    Single writer of the room directory, the tab state and the input
    buffer. Protocol events and key commands are applied one at a time by
    the home loop; nothing here raises on unknown rooms, members or bad
    timestamps.

    Attributes
    ----------
    client : `mtui.matrix.MatrixClient`
        Send, kick and invitation capability.
    user_id : `str`
        Local user id, cached at session start.
    homeserver : `str`
        Homeserver base URL for media references.
    notifier : `None` or `mtui.notify.Notifier`
    rooms : `mtui.room.RoomDirectory`
    tabs : `mtui.tabs.TabState`
    input : `InputBuffer`
    running : `bool`
    message_queue : `asyncio.Queue`
        Inbound `mtui.events.MessageEvent`.
    member_queue : `asyncio.Queue`
        Inbound membership, invitation and room-loaded events.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, client, user_id, homeserver,
                 notifier=None, backfill_limit=50):
        self.client = client
        self.user_id = user_id
        self.homeserver = homeserver
        self.notifier = notifier
        self.rooms = RoomDirectory(homeserver, backfill_limit)
        self.tabs = TabState()
        self.input = InputBuffer()
        self.running = True
        self.message_queue = asyncio.Queue()
        self.member_queue = asyncio.Queue()
        self._tasks = set()
        # Rooms being loaded -> messages received for them meanwhile
        self._loading = {}

    @property
    def current_tab(self):
        return self.tabs.current

    def current_room(self):
        return self.rooms.current()

    # Protocol events

    def handle_event(self, event):
        """Apply one protocol event."""
        if isinstance(event, MessageEvent):
            self.on_message_event(event)
        elif isinstance(event, MembershipEvent):
            self.on_membership_event(event)
        elif isinstance(event, InviteEvent):
            self.on_invite_event(event)
        elif isinstance(event, RoomLoaded):
            self.on_room_loaded(event)
        else:
            self.logger.warning('handle_event: unknown event %r', event)

    def on_message_event(self, event):
        pending = self._loading.get(event.room_id)
        if pending is not None:
            pending.append(event)
            return
        room = self.rooms.find_by_id(event.room_id)
        if room is None:
            self.logger.debug('drop %s: unknown room', event)
            return
        message = Message.from_event(event, self.homeserver)
        if message is None:
            self.logger.debug('drop %s: bad timestamp', event)
            return
        if not room.messages.append_message(message):
            self.logger.debug('drop %s: already shown', event)
            return
        if event.sender != self.user_id and self.notifier is not None:
            self.notifier.notify(event.sender, message.body)

    def on_membership_event(self, event):
        """Apply a membership change.

        A room the local user joined is loaded by a background task, which
        reports back with a `mtui.events.RoomLoaded` event.
        """
        is_self = event.target == self.user_id
        room = self.rooms.find_by_id(event.room_id)

        if event.is_join:
            if room is None:
                if is_self and event.room is not None:
                    self.load_room(event.room)
                else:
                    self.logger.debug('drop %s: unknown room', event)
            elif not is_self:
                room.members.upsert_or_ignore(event.display_name, event.target)
        elif event.is_leave:
            if is_self:
                self.leave_room(event.room_id)
            elif room is not None:
                room.members.remove_by_user_id(event.target)
            else:
                self.logger.debug('drop %s: unknown room', event)
        else:
            self.logger.debug('ignore %s', event)

    def load_room(self, room):
        """Start loading a joined room unless it is already loading."""
        if room.room_id in self._loading:
            return
        self._loading[room.room_id] = []
        self.spawn(self._load_room(room))

    async def _load_room(self, room):
        try:
            entry = await RoomEntry.load(
                room, self.homeserver, self.rooms.backfill_limit
            )
        except Exception as ex:  # pylint: disable=broad-except
            self.logger.error('loading %s failed: %r', room.room_id, ex)
            entry = None
        await self.member_queue.put(RoomLoaded(room.room_id, entry))

    def on_room_loaded(self, event):
        if event.room_id not in self._loading:
            # Left while it was loading
            self.logger.debug('drop %s: no longer joined', event)
            return
        pending = self._loading.pop(event.room_id)
        if event.entry is None or not self.rooms.add_entry(event.entry):
            return
        self.logger.info('joined %s', event.entry)
        # Messages already in the backfill are skipped by event id
        for message_event in pending:
            self.on_message_event(message_event)

    def leave_room(self, room_id):
        """Forget a room the local user left.

        The tab resets to the room list when the removed room was the
        selected one.
        """
        self._loading.pop(room_id, None)
        was_selected = (
            self.current_room() is not None and self.current_room().id == room_id
        )
        removed = self.rooms.remove_by_id(room_id)
        if removed is None:
            return
        self.logger.info('left %s', removed)
        if was_selected:
            self.tabs.reset()

    def on_invite_event(self, event):
        self.logger.info('invited to %s by %s', event.room_id, event.sender)
        self.spawn(self.client.accept_invitation(event.room_id))

    def spawn(self, coro):
        """Run `coro` as a background task owned by the application."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def close(self):
        """Abandon background tasks."""
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # Key commands

    def next_tab(self):
        if self.tabs.current == Tab.MEMBERS:
            room = self.current_room()
            if room is not None:
                room.members.select(None)
        return self.tabs.advance(self.current_room() is not None)

    def _active_collection(self):
        tab = self.tabs.current
        if tab == Tab.ROOM:
            return self.rooms
        room = self.current_room()
        if room is None:
            return None
        if tab == Tab.MESSAGES:
            return room.messages
        if tab == Tab.MEMBERS:
            return room.members
        return None

    def next(self):
        collection = self._active_collection()
        if collection is not None:
            collection.next()

    def previous(self):
        collection = self._active_collection()
        if collection is not None:
            collection.previous()

    def type_text(self, text):
        if self.tabs.current == Tab.INPUT:
            self.input.push(text)

    def backspace(self):
        if self.tabs.current == Tab.INPUT:
            self.input.pop()

    async def submit_input(self):
        """Send the input buffer to the selected room.

        Returns
        -------
        `bool`
            `True` if a message was sent.
        """
        if self.tabs.current != Tab.INPUT:
            return False
        text = self.input.drain()
        room = self.current_room()
        if not text or room is None:
            return False
        return await self.client.send_message(room.id, text)

    async def kick_selected_member(self):
        """Kick the selected member of the selected room.

        Returns
        -------
        `bool`
            `True` if the kick succeeded.
        """
        if self.tabs.current != Tab.MEMBERS:
            return False
        room = self.current_room()
        if room is None:
            return False
        member = room.members.get_selected()
        if member is None:
            return False
        return await self.client.kick_user(room.id, member.user_id)

    def quit(self):
        self.running = False

    def snapshot(self):
        room = self.current_room()
        if room is None:
            messages, selected_message, view_mode = (), None, None
            members, selected_member, room_name = (), None, None
        else:
            messages = tuple(room.messages)
            selected_message = room.messages.selected
            view_mode = room.messages.mode
            members = tuple(room.members)
            selected_member = room.members.selected
            room_name = room.name
        return Snapshot(
            tab=self.tabs.current,
            rooms=tuple(r.name for r in self.rooms),
            selected_room=self.rooms.selected,
            room_name=room_name,
            messages=messages,
            selected_message=selected_message,
            view_mode=view_mode,
            members=members,
            selected_member=selected_member,
            input=self.input.text,
        )
