#!/usr/bin/env python3
"""mtui - a terminal chat client for Matrix.

Three panes show the joined rooms, the messages of the selected room and
its members, with an input line at the bottom. Tab cycles through the
panes; the arrow keys move within the active one only.

Usage:
    python -m clients.tui.client config.json

Keybindings:
    - Tab: Next pane (Rooms -> Messages -> Input -> Members)
    - Up/Down: Move within the active pane
    - Enter: Send the input line (Input pane)
    - k: Kick the selected member (Members pane)
    - q: Quit (outside the Input pane)
    - Escape: Quit
"""

import sys
import signal
import asyncio
import logging

from blessed import Terminal

from mtui import App, Tab
from mtui.error import MatrixTuiError
from mtui.matrix import MatrixClient, resolve_homeserver
from mtui.notify import Notifier
from mtui.timeline import FOLLOW

from common import get_config, get_password


WELCOME_TEXT = [
    'This is a Matrix terminal client',
    '',
    'Select a room in the Rooms pane with the up and down arrow keys',
    'Press Tab to move between Rooms, Messages, Input and Members',
    'Press Enter in the Input pane to send a message',
    'Press k in the Members pane to kick the selected member',
    'Press q or Escape to quit',
]

TAB_TITLES = {
    Tab.ROOM: 'Rooms',
    Tab.MESSAGES: 'Messages',
    Tab.MEMBERS: 'Members',
    Tab.INPUT: 'Input',
}


def visible_range(count, selected, height):
    """Window of `height` rows over `count` items keeping `selected` in view.

    Without a selection the window shows the end of the list.

    >>> visible_range(10, None, 4)
    (6, 10)
    >>> visible_range(10, 2, 4)
    (0, 4)
    >>> visible_range(10, 7, 4)
    (4, 8)
    """
    if height <= 0 or count == 0:
        return 0, 0
    if selected is None:
        end = count
    else:
        end = max(min(selected + 1, count), min(height, count))
    start = max(0, end - height)
    return start, end


def fit(text, width):
    """Cut or pad `text` to exactly `width` columns."""
    if width <= 0:
        return ''
    if len(text) > width:
        return text[:width - 1] + '…'
    return text.ljust(width)


def format_message(message):
    return '%s %s: %s' % (message.timestamp, message.sender, message.body)


class TUIClient:
    """Home loop and renderer.

    Each tick applies at most one event from each inbound queue, handles at
    most one key press and redraws when the application snapshot changed.

    Attributes:
        app (App): Application state controller
        matrix (MatrixClient): Protocol session
        term (Terminal): Blessed terminal instance for rendering
        message_queue (asyncio.Queue): Inbound message events
        member_queue (asyncio.Queue): Inbound membership and invite events
        poll_timeout (float): Keyboard poll timeout in seconds
    """
    logger = logging.getLogger(__name__)

    KICK_KEY = 'k'
    QUIT_KEY = 'q'

    def __init__(self, app, matrix, tui_config=None, term=None):
        self.app = app
        self.matrix = matrix
        self.term = term if term is not None else Terminal()

        self.tui_config = tui_config or {}
        self.room_list_width = self.tui_config.get('room_list_width', 24)
        self.member_list_width = self.tui_config.get('member_list_width', 24)
        self.poll_timeout = self.tui_config.get('poll_timeout', 0.01)

        self.message_queue = app.message_queue
        self.member_queue = app.member_queue

        self._last_snapshot = None
        self._force_render = True

        if hasattr(signal, 'SIGWINCH'):
            signal.signal(signal.SIGWINCH, self._handle_resize)

    def _handle_resize(self, signum=None, frame=None):
        self._force_render = True

    # Home loop

    async def process_events(self):
        """Apply at most one pending event from each queue.

        Returns:
            int: Number of events applied
        """
        handled = 0
        for queue in (self.message_queue, self.member_queue):
            try:
                event = queue.get_nowait()
            except asyncio.QueueEmpty:
                continue
            handled += 1
            try:
                self.app.handle_event(event)
            except Exception as ex:  # pylint: disable=broad-except
                self.logger.error('event %s: %r', event, ex)
        return handled

    async def handle_key(self, key):
        """Route one key press to the application."""
        tab = self.app.current_tab
        name = key.name

        if name == 'KEY_ESCAPE':
            self.app.quit()
        elif name == 'KEY_TAB':
            self.app.next_tab()
        elif name == 'KEY_UP':
            self.app.previous()
        elif name == 'KEY_DOWN':
            self.app.next()
        elif name == 'KEY_ENTER':
            await self.app.submit_input()
        elif name in ('KEY_BACKSPACE', 'KEY_DELETE'):
            self.app.backspace()
        elif key.is_sequence:
            pass
        elif tab == Tab.INPUT:
            self.app.type_text(str(key))
        elif key == self.QUIT_KEY:
            self.app.quit()
        elif key == self.KICK_KEY and tab == Tab.MEMBERS:
            await self.app.kick_selected_member()

    async def tick(self):
        await self.process_events()

        key = self.term.inkey(timeout=self.poll_timeout)
        if key:
            try:
                await self.handle_key(key)
            except Exception as ex:  # pylint: disable=broad-except
                self.logger.error('key %r: %r', key, ex)

        # Let the sync task run
        await asyncio.sleep(0)
        self.render()

    async def run_loop(self):
        while self.app.running:
            await self.tick()

    async def run(self):
        """Start syncing and run the home loop until quit."""
        self.matrix.register_queues(self.message_queue, self.member_queue)
        sync_task = asyncio.create_task(self.matrix.sync_forever())
        sync_task.add_done_callback(self._on_sync_done)
        try:
            with self.term.fullscreen(), self.term.cbreak(), self.term.hidden_cursor():
                await self.run_loop()
        finally:
            # Abandoned, there is nothing to flush
            sync_task.cancel()

    def _on_sync_done(self, task):
        if task.cancelled():
            return
        ex = task.exception()
        if ex is not None:
            self.logger.error('sync stopped: %r', ex)
        else:
            self.logger.warning('sync stopped')

    # Rendering

    def render(self):
        snapshot = self.app.snapshot()
        if snapshot == self._last_snapshot and not self._force_render:
            return
        out = []
        if self._force_render:
            out.append(self.term.clear)
        self._force_render = False
        self._last_snapshot = snapshot

        out.extend(self.render_status(snapshot))
        out.extend(self.render_rooms(snapshot))
        out.extend(self.render_messages(snapshot))
        out.extend(self.render_members(snapshot))
        out.extend(self.render_input(snapshot))
        print(''.join(out), end='', flush=True)

    def _pane_height(self):
        # Status bar on top, header row, input line at the bottom
        return max(0, self.term.height - 3)

    def _header(self, tab, snapshot, width, extra=''):
        title = ' %s%s ' % (TAB_TITLES[tab], extra)
        if snapshot.tab == tab:
            return self.term.black_on_cyan(fit(title, width))
        return self.term.bold(fit(title, width))

    def _list_rows(self, x, width, lines, selected, active):
        out = []
        height = self._pane_height()
        start, end = visible_range(len(lines), selected, height)
        for row in range(height):
            i = start + row
            y = row + 2
            if i < end:
                marker = '> ' if i == selected else '  '
                text = fit(marker + lines[i], width)
                if i == selected:
                    text = self.term.reverse(text) if active else self.term.bold(text)
            else:
                text = ' ' * width
            out.append(self.term.move_xy(x, y) + text)
        return out

    def render_status(self, snapshot):
        user = self.app.user_id or ''
        parts = [' mtui', user, 'tab: %s' % TAB_TITLES[snapshot.tab]]
        if snapshot.room_name is not None:
            parts.append(snapshot.room_name)
        line = fit('  │  '.join(parts), self.term.width)
        return [self.term.move_xy(0, 0) + self.term.black_on_white(line)]

    def render_rooms(self, snapshot):
        width = self.room_list_width
        out = [self.term.move_xy(0, 1) + self._header(Tab.ROOM, snapshot, width)]
        out.extend(self._list_rows(
            0, width, list(snapshot.rooms), snapshot.selected_room,
            snapshot.tab == Tab.ROOM
        ))
        return out

    def _message_pane(self):
        x = self.room_list_width + 1
        width = self.term.width - self.room_list_width - self.member_list_width - 2
        return x, max(0, width)

    def render_messages(self, snapshot):
        x, width = self._message_pane()
        if snapshot.room_name is None:
            out = [self.term.move_xy(x, 1) + self._header(Tab.MESSAGES, snapshot, width)]
            for row in range(self._pane_height()):
                text = WELCOME_TEXT[row] if row < len(WELCOME_TEXT) else ''
                out.append(self.term.move_xy(x, row + 2) + fit(text, width))
            return out

        mode = '' if snapshot.view_mode == FOLLOW else ' [scroll]'
        out = [self.term.move_xy(x, 1) + self._header(Tab.MESSAGES, snapshot, width, mode)]
        out.extend(self._list_rows(
            x, width, [format_message(m) for m in snapshot.messages],
            snapshot.selected_message, snapshot.tab == Tab.MESSAGES
        ))
        return out

    def render_members(self, snapshot):
        width = self.member_list_width
        x = self.term.width - width
        count = ' (%d)' % len(snapshot.members) if snapshot.room_name is not None else ''
        out = [self.term.move_xy(x, 1) + self._header(Tab.MEMBERS, snapshot, width, count)]
        out.extend(self._list_rows(
            x, width, [m.name for m in snapshot.members],
            snapshot.selected_member, snapshot.tab == Tab.MEMBERS
        ))
        return out

    def render_input(self, snapshot):
        y = self.term.height - 1
        width = self.term.width
        prompt = '> '
        visible = snapshot.input[-(width - len(prompt) - 1):] if width > 3 else ''
        line = fit(prompt + visible, width)
        if snapshot.tab == Tab.INPUT:
            line = self.term.bright_white(line)
        else:
            line = self.term.bright_black(line)
        return [self.term.move_xy(0, y) + line]


async def run_client():
    """Load configuration, log in, load rooms and run the TUI.

    Returns:
        int: Exit code (0 for success, 1 for a setup failure)
    """
    conf, kwargs = get_config()
    logger = logging.getLogger(__name__)

    try:
        kwargs['homeserver'] = await resolve_homeserver(kwargs['homeserver'])
    except MatrixTuiError as ex:
        print('Setup error: %s' % ex, file=sys.stderr)
        return 1

    matrix = MatrixClient(**kwargs)
    try:
        await matrix.login(get_password(conf))
        print('Syncing with %s...' % matrix.homeserver)
        await matrix.sync_once()
    except MatrixTuiError as ex:
        logger.error('setup failed: %s', ex)
        print('Setup error: %s' % ex, file=sys.stderr)
        await matrix.close()
        return 1

    app = App(
        matrix,
        matrix.user_id,
        matrix.homeserver,
        notifier=Notifier(conf.get('notifications', True)),
        backfill_limit=conf.get('backfill_limit', 50)
    )

    print('Loading rooms...')
    for room in matrix.joined_rooms():
        await app.rooms.add(room)

    client = TUIClient(app, matrix, tui_config=conf.get('tui', {}))
    for invite in matrix.pending_invites():
        client.member_queue.put_nowait(invite)

    try:
        await client.run()
    except KeyboardInterrupt:
        app.quit()
    finally:
        app.close()
        await matrix.close()
        print(client.term.normal)
        print('Goodbye!')
    return 0


def main():
    """Main entry point for the TUI client.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        return asyncio.run(run_client())
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        print(f'\nFatal error: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
