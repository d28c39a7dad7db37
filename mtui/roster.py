#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import collections

from .collection import ScrollableCollection


class Member(collections.namedtuple('Member', 'name user_id')):
    """Room member: display name and user id."""

    __slots__ = ()

    @classmethod
    def create(cls, display_name, user_id):
        # Users without a display name are shown by id
        return cls(display_name or user_id, user_id)


class MemberRoster(ScrollableCollection):
    """Members of one room, at most one entry per user id."""

    @classmethod
    def with_members(cls, members):
        roster = cls()
        for display_name, user_id in members:
            roster.upsert_or_ignore(display_name, user_id)
        return roster

    @property
    def members(self):
        return self.items

    def find(self, user_id):
        """Return the `Member` with `user_id` or `None`."""
        index = self.index_where(lambda m: m.user_id == user_id)
        return None if index is None else self.items[index]

    def upsert_or_ignore(self, display_name, user_id):
        """Insert a member unless one with `user_id` is already present.

        Returns
        -------
        `bool`
            `True` if the member was inserted.
        """
        if self.find(user_id) is not None:
            return False
        self.items.append(Member.create(display_name, user_id))
        return True

    def remove_by_user_id(self, user_id):
        """Remove the member with `user_id`.

        Returns
        -------
        `bool`
            `True` if a member was removed.
        """
        index = self.index_where(lambda m: m.user_id == user_id)
        if index is None:
            return False
        self.remove_at(index)
        return True
