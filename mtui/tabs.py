#!/usr/bin/env python3
# -*- coding: utf-8 -*-


class Tab:
    """Tab names."""
    ROOM = 'room'
    MESSAGES = 'messages'
    MEMBERS = 'members'
    INPUT = 'input'

    ALL = (ROOM, MESSAGES, MEMBERS, INPUT)


class TabState:
    """Active tab.

    Only `advance` and `reset` change the tab:

        room -> messages -> input -> members -> room

    with messages going straight back to room while no room is selected.
    """

    def __init__(self):
        self._current = Tab.ROOM

    @property
    def current(self):
        return self._current

    def __eq__(self, other):
        if isinstance(other, TabState):
            return self._current == other._current
        return self._current == other

    def __hash__(self):
        return hash(self._current)

    def __str__(self):
        return '<tab %s>' % self._current

    __repr__ = __str__

    def advance(self, room_selected):
        """Move to the next tab.

        Parameters
        ----------
        room_selected : `bool`
            Whether a room is currently selected.

        Returns
        -------
        `str`
            The new tab.
        """
        if self._current == Tab.ROOM:
            self._current = Tab.MESSAGES
        elif self._current == Tab.MESSAGES:
            self._current = Tab.INPUT if room_selected else Tab.ROOM
        elif self._current == Tab.INPUT:
            self._current = Tab.MEMBERS
        else:
            self._current = Tab.ROOM
        return self._current

    def reset(self):
        self._current = Tab.ROOM
