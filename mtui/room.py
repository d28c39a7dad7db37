#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import asyncio
import logging

from .collection import ScrollableCollection
from .error import MatrixTuiError
from .roster import MemberRoster
from .timeline import Message, MessageTimeline


UNKNOWN_NAME = 'Unknown name'


class RoomEntry:
    """Local state of one room.

    Attributes
    ----------
    name : `str`
    id : `str`
        Room id, fixed for the lifetime of the entry.
    messages : `mtui.timeline.MessageTimeline`
    members : `mtui.roster.MemberRoster`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, name, room_id, messages=None, members=None):
        self.name = name
        self._id = room_id
        self.messages = messages if messages is not None else MessageTimeline()
        self.members = members if members is not None else MemberRoster()

    @property
    def id(self):
        return self._id

    def __str__(self):
        return '<room "%s" %s>' % (self.name, self._id)

    __repr__ = __str__

    @classmethod
    async def load(cls, room, homeserver, backfill_limit=50):
        """Build an entry from a room handle.

        The display name falls back to `UNKNOWN_NAME`, an unavailable
        member list to an empty roster. History is read newest first and
        reversed once; a failure mid-way keeps what was already read.

        Parameters
        ----------
        room : `mtui.matrix.RoomHandle`
        homeserver : `str`
            Base URL used to resolve media references.
        backfill_limit : `int`, optional
            Maximum number of historical messages, 0 disables backfill.
        """
        try:
            name = await room.display_name()
        except (MatrixTuiError, asyncio.TimeoutError) as ex:
            cls.logger.warning('display name of %s: %r', room.room_id, ex)
            name = None
        name = name or UNKNOWN_NAME

        try:
            members = await room.joined_members()
        except (MatrixTuiError, asyncio.TimeoutError) as ex:
            cls.logger.warning('members of %s: %r', room.room_id, ex)
            members = []

        history = []
        if backfill_limit > 0:
            try:
                async for event in room.historical_messages_reverse(backfill_limit):
                    message = Message.from_event(event, homeserver)
                    if message is not None:
                        history.append(message)
            except (MatrixTuiError, asyncio.TimeoutError) as ex:
                cls.logger.warning(
                    'backfill of %s stopped after %d messages: %r',
                    room.room_id, len(history), ex
                )
        history.reverse()

        cls.logger.info(
            'loaded room %s: %d members, %d messages',
            room.room_id, len(members), len(history)
        )
        return cls(
            name,
            room.room_id,
            MessageTimeline.with_messages(history),
            MemberRoster.with_members(members)
        )


class RoomDirectory(ScrollableCollection):
    """All known rooms. Room ids are unique."""
    logger = logging.getLogger(__name__)

    def __init__(self, homeserver='', backfill_limit=50):
        super().__init__()
        self.homeserver = homeserver
        self.backfill_limit = backfill_limit

    @property
    def rooms(self):
        return self.items

    def index_of(self, room_id):
        return self.index_where(lambda r: r.id == room_id)

    def find_by_id(self, room_id):
        """Return the `RoomEntry` with `room_id` or `None`."""
        index = self.index_of(room_id)
        return None if index is None else self.items[index]

    def __contains__(self, room_id):
        return self.index_of(room_id) is not None

    def current(self):
        """Selected `RoomEntry` or `None`."""
        return self.get_selected()

    def add_entry(self, entry):
        """Append a built entry unless its id is already known.

        Returns
        -------
        `bool`
            `True` if the entry was added.
        """
        if entry.id in self:
            self.logger.debug('add_entry: %s already known', entry.id)
            return False
        self.items.append(entry)
        return True

    async def add(self, room):
        """Load a room handle into a new entry and append it.

        Returns
        -------
        `RoomEntry` or `None`
            The new entry, `None` if the room was already known.
        """
        if room.room_id in self:
            return None
        entry = await RoomEntry.load(room, self.homeserver, self.backfill_limit)
        # The room may have been added while it was loading
        if not self.add_entry(entry):
            return None
        return entry

    def remove_by_id(self, room_id):
        """Remove a room; deselects if it was the selected one.

        Returns
        -------
        `RoomEntry` or `None`
            The removed entry.
        """
        index = self.index_of(room_id)
        if index is None:
            return None
        return self.remove_at(index)
