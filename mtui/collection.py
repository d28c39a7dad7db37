#!/usr/bin/env python3
# -*- coding: utf-8 -*-


class ScrollableCollection:
    """Ordered list with an optional selected index.

    The selected index, when set, always points inside the list. An empty
    collection never has a selection. Every operation is total: nothing
    here raises for an empty list or an out-of-range index.

    Attributes
    ----------
    items : `list`
        Items in display order.
    """

    def __init__(self, items=None):
        self.items = list(items) if items is not None else []
        self._selected = None

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def __str__(self):
        return '<%s %d items, selected=%s>' % (
            type(self).__name__.lower(), len(self.items), self._selected
        )

    __repr__ = __str__

    @property
    def selected(self):
        """`None` or `int`: selected index."""
        return self._selected

    def select(self, index):
        """Select an index, or deselect with `None`.

        Out-of-range indices are ignored.
        """
        if index is None:
            self._selected = None
        elif 0 <= index < len(self.items):
            self._selected = index

    def get_selected(self):
        """Return the selected item or `None`."""
        if self._selected is None:
            return None
        return self.items[self._selected]

    def next(self):
        if not self.items:
            return
        if self._selected is None:
            self._selected = 0
        else:
            self._selected = min(self._selected + 1, len(self.items) - 1)

    def previous(self):
        if not self.items:
            return
        if self._selected is None:
            self._selected = 0
        else:
            self._selected = max(self._selected - 1, 0)

    def append(self, item):
        self.items.append(item)

    def remove_at(self, index):
        """Remove the item at `index` and keep the selection consistent.

        Removing the selected item deselects; removing an item above the
        selection shifts the index so the same item stays selected.

        Returns
        -------
        `object` or `None`
            The removed item.
        """
        if not 0 <= index < len(self.items):
            return None
        item = self.items.pop(index)
        if self._selected is not None:
            if self._selected == index:
                self._selected = None
            elif self._selected > index:
                self._selected -= 1
        return item

    def index_where(self, predicate):
        """Return the index of the first item matching `predicate` or `None`."""
        for i, item in enumerate(self.items):
            if predicate(item):
                return i
        return None
