"""
Shared fixtures for integration tests.

Integration tests drive a real MatrixClient, App and TUIClient together.
Only the nio client and the terminal are mocked, so protocol callbacks
travel through the real queues into the application state.
"""

import pytest
import pytest_asyncio
from unittest.mock import MagicMock, Mock, AsyncMock

from clients.tui.client import TUIClient
from mtui.app import App
from mtui.matrix import MatrixClient


SELF_ID = '@me:example.org'
HOMESERVER = 'https://matrix.example.org'


def nio_room(room_id, name):
    room = Mock()
    room.room_id = room_id
    room.display_name = name
    return room


@pytest.fixture
def integration_nio():
    """nio client mock holding one joined room."""
    nio = Mock()
    nio.user = SELF_ID
    nio.user_id = SELF_ID
    nio.next_batch = 's1'
    nio.rooms = {'!general:example.org': nio_room('!general:example.org', 'General')}
    nio.invited_rooms = {}
    for name in ('login', 'sync', 'sync_forever', 'room_messages',
                 'room_send', 'room_kick', 'join', 'close'):
        setattr(nio, name, AsyncMock())
    nio.joined_members = AsyncMock(return_value=Mock(members=[
        Mock(display_name='Me', user_id=SELF_ID),
        Mock(display_name='Alice', user_id='@alice:example.org'),
    ]))
    nio.room_messages.return_value = Mock(chunk=[], end=None)
    return nio


@pytest.fixture
def integration_matrix(integration_nio):
    return MatrixClient(HOMESERVER, SELF_ID, invite_initial_delay=0,
                        invite_max_delay=0, nio_client=integration_nio)


@pytest.fixture
def integration_term():
    term = MagicMock()
    term.width = 100
    term.height = 20
    term.clear = ''
    term.move_xy = lambda x, y: ''
    for style in ('black_on_cyan', 'black_on_white', 'bold', 'reverse',
                  'bright_white', 'bright_black'):
        setattr(term, style, lambda text: text)
    return term


@pytest_asyncio.fixture
async def integration_client(integration_matrix, integration_term):
    """TUIClient with the joined rooms loaded and queues registered."""
    app = App(integration_matrix, integration_matrix.user_id, HOMESERVER,
              notifier=Mock())
    for room in integration_matrix.joined_rooms():
        await app.rooms.add(room)
    client = TUIClient(app, integration_matrix, term=integration_term)
    integration_matrix.register_queues(client.message_queue, client.member_queue)
    yield client
    app.close()


@pytest.fixture
def callbacks(integration_nio):
    """Registered nio callbacks by event class name."""
    def get():
        return {
            c.args[1].__name__: c.args[0]
            for c in integration_nio.add_event_callback.call_args_list
        }
    return get
