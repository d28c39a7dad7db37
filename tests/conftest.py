"""
Shared pytest fixtures for the mtui test suite.

This file contains fixtures that are available to all test files.
"""
import pytest
import json
from unittest.mock import Mock, AsyncMock

from mtui.app import App
from mtui.error import ProtocolError
from mtui.events import MessageEvent


SELF_ID = '@me:example.org'
HOMESERVER = 'https://matrix.example.org'

# 11/11/2023 22:40:00 UTC
BASE_TS = 1699742400000


@pytest.fixture
def make_message():
    """Factory for text MessageEvents."""
    def make(room_id='!r1:example.org', sender='@alice:example.org',
             ts=BASE_TS, body='hi', event_id=None):
        return MessageEvent(room_id, sender, ts, {'msgtype': 'm.text', 'body': body},
                            event_id)
    return make


class FakeRoomHandle:
    """Room handle with canned answers.

    `history` is given newest first, the way the homeserver returns it.
    `fail_after` makes the history stream fail after that many events.
    """

    def __init__(self, room_id, name='Room', members=(), history=(),
                 fail_after=None, name_error=False, members_error=False):
        self.room_id = room_id
        self.name = name
        self.members = list(members)
        self.history = list(history)
        self.fail_after = fail_after
        self.name_error = name_error
        self.members_error = members_error
        self.requested_limit = None

    async def display_name(self):
        if self.name_error:
            raise ProtocolError('no name')
        return self.name

    async def joined_members(self):
        if self.members_error:
            raise ProtocolError('no members')
        return list(self.members)

    async def historical_messages_reverse(self, limit):
        self.requested_limit = limit
        for i, event in enumerate(self.history[:limit]):
            if self.fail_after is not None and i >= self.fail_after:
                raise ProtocolError('stream broken')
            yield event


@pytest.fixture
def make_room():
    """Factory for FakeRoomHandle instances."""
    return FakeRoomHandle


@pytest.fixture
def mock_matrix():
    """
    Mock MatrixClient capability.

    Returns:
        Mock: send/kick/accept as AsyncMocks returning True
    """
    matrix = Mock()
    matrix.user_id = SELF_ID
    matrix.homeserver = HOMESERVER
    matrix.send_message = AsyncMock(return_value=True)
    matrix.kick_user = AsyncMock(return_value=True)
    matrix.accept_invitation = AsyncMock(return_value=True)
    matrix.sync_forever = AsyncMock()
    matrix.register_queues = Mock()
    return matrix


@pytest.fixture
def mock_notifier():
    notifier = Mock()
    notifier.notify = Mock(return_value=True)
    return notifier


@pytest.fixture
def app(mock_matrix, mock_notifier):
    """App with no rooms, mocked protocol and notifier."""
    return App(mock_matrix, SELF_ID, HOMESERVER, notifier=mock_notifier)


@pytest.fixture
def sample_config():
    """
    Sample client configuration for testing.

    Returns:
        dict: Configuration with required fields
    """
    return {
        'homeserver': 'example.org',
        'user': '@me:example.org',
        'password': 'test_password',
        'backfill_limit': 20,
        'notifications': False,
        'invite_retry': {'initial_delay': 1, 'max_delay': 8},
        'log_level': 'warning',
        'tui': {'room_list_width': 20}
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config):
    """
    Create temporary config file for testing.

    Returns:
        Path: Path to temporary config.json file
    """
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(sample_config, indent=2))
    return config_file


def pytest_configure(config):
    """
    Pytest configuration hook.

    Registers custom markers.
    """
    config.addinivalue_line("markers", "integration: Integration tests")
