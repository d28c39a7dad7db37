#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Protocol events delivered to the application.

The set of event types is closed: `MessageEvent`, `MembershipEvent`,
`InviteEvent` and `RoomLoaded`. `mtui.app.App.handle_event` dispatches over
exactly these.
"""

JOIN = 'join'
LEAVE = 'leave'
BAN = 'ban'
INVITE = 'invite'


class MessageEvent:
    """A room message.

    Attributes
    ----------
    room_id : `str`
    sender : `str`
        Sender user id.
    server_timestamp : `int` or `None`
        Milliseconds since the epoch.
    content : `dict`
        Raw ``m.room.message`` content.
    event_id : `None` or `str`
    """

    def __init__(self, room_id, sender, server_timestamp, content,
                 event_id=None):
        self.room_id = room_id
        self.sender = sender
        self.server_timestamp = server_timestamp
        self.content = content
        self.event_id = event_id

    def __str__(self):
        return '<message %s from %s at %s>' % (
            self.room_id, self.sender, self.server_timestamp
        )

    __repr__ = __str__


class MembershipEvent:
    """A membership change of `target` in a room.

    Attributes
    ----------
    room_id : `str`
    target : `str`
        User id whose membership changed.
    membership : `str`
        'join', 'leave', 'ban', ...
    display_name : `None` or `str`
    room : `None` or `mtui.matrix.RoomHandle`
        Handle used to load the room when the local user joins it.
    """

    def __init__(self, room_id, target, membership,
                 display_name=None, room=None):
        self.room_id = room_id
        self.target = target
        self.membership = membership
        self.display_name = display_name
        self.room = room

    @property
    def is_join(self):
        return self.membership == JOIN

    @property
    def is_leave(self):
        return self.membership in (LEAVE, BAN)

    def __str__(self):
        return '<membership %s %s %s>' % (
            self.room_id, self.target, self.membership
        )

    __repr__ = __str__


class InviteEvent:
    """The local user was invited to a room."""

    def __init__(self, room_id, sender=None):
        self.room_id = room_id
        self.sender = sender

    def __str__(self):
        return '<invite %s from %s>' % (self.room_id, self.sender)

    __repr__ = __str__


class RoomLoaded:
    """A room the local user joined finished loading in the background.

    Attributes
    ----------
    room_id : `str`
    entry : `None` or `mtui.room.RoomEntry`
        `None` if loading failed.
    """

    def __init__(self, room_id, entry):
        self.room_id = room_id
        self.entry = entry

    def __str__(self):
        return '<room loaded %s>' % self.room_id

    __repr__ = __str__
