#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import collections

from .collection import ScrollableCollection
from .content import render_content
from .util import format_timestamp


FOLLOW = 'follow'
SCROLL = 'scroll'


class Message(collections.namedtuple('Message', 'timestamp sender body event_id',
                                     defaults=(None,))):
    """Immutable chat line: formatted timestamp, sender id, rendered body.

    `event_id` is `None` for lines that did not come from the homeserver.
    """

    __slots__ = ()

    @classmethod
    def from_event(cls, event, homeserver):
        """Build a message from a `mtui.events.MessageEvent`.

        Returns
        -------
        `Message` or `None`
            `None` if the event timestamp cannot be formatted.
        """
        timestamp = format_timestamp(event.server_timestamp)
        if timestamp is None:
            return None
        return cls(
            timestamp,
            event.sender,
            render_content(event.content, homeserver),
            event.event_id
        )


class MessageTimeline(ScrollableCollection):
    """Messages of one room in chronological order.

    In follow mode every appended message becomes the selection. Moving
    up switches to scroll mode, which pins the selection until the user
    moves back down onto the newest message. A message whose event id is
    already in the timeline is not appended again.

    Attributes
    ----------
    mode : `str`
        `FOLLOW` or `SCROLL`.
    """

    def __init__(self, messages=None):
        super().__init__(messages)
        self.mode = FOLLOW
        self._event_ids = {m.event_id for m in self.items if m.event_id is not None}
        if self.items:
            self._selected = len(self.items) - 1

    @classmethod
    def with_messages(cls, messages):
        """Timeline from messages in ascending order, newest selected."""
        return cls(messages)

    @property
    def messages(self):
        return self.items

    def __contains__(self, event_id):
        return event_id in self._event_ids

    def append_message(self, message):
        """Append a message.

        Returns
        -------
        `bool`
            `False` if a message with the same event id is already shown.
        """
        if message.event_id is not None:
            if message.event_id in self._event_ids:
                return False
            self._event_ids.add(message.event_id)
        self.items.append(message)
        if self.mode == FOLLOW:
            self._selected = len(self.items) - 1
        return True

    def append(self, timestamp, sender, body):
        return self.append_message(Message(timestamp, sender, body))

    def next(self):
        if not self.items:
            return
        last = len(self.items) - 1
        if self._selected is None:
            self._selected = 0
        elif self._selected >= last:
            self._selected = last
            self.mode = FOLLOW
        else:
            self._selected += 1
            self.mode = FOLLOW if self._selected == last else SCROLL

    def previous(self):
        if not self.items:
            return
        if self._selected is None:
            self._selected = 0
        else:
            self._selected = max(self._selected - 1, 0)
        if self._selected < len(self.items) - 1:
            self.mode = SCROLL
