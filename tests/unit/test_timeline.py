"""
Unit tests for mtui/timeline.py

Tests follow/scroll behavior of MessageTimeline and Message construction.
"""
import pytest
from mtui.events import MessageEvent
from mtui.timeline import Message, MessageTimeline, FOLLOW, SCROLL


HS = 'https://matrix.example.org'


def timeline_of(count):
    return MessageTimeline.with_messages([
        Message('01/01/1970 00:00:%02d' % i, '@a:x', 'm%d' % i)
        for i in range(count)
    ])


class TestMessage:
    """Test Message.from_event."""

    def test_from_event(self):
        event = MessageEvent('!r:x', '@a:x', 60000, {'msgtype': 'm.text', 'body': 'hello'})
        message = Message.from_event(event, HS)
        assert message == Message('01/01/1970 00:01:00', '@a:x', 'hello')

    def test_bad_timestamp(self):
        event = MessageEvent('!r:x', '@a:x', None, {'msgtype': 'm.text', 'body': 'x'})
        assert Message.from_event(event, HS) is None

    def test_unsupported_content(self):
        event = MessageEvent('!r:x', '@a:x', 0, {'msgtype': 'm.poll'})
        assert Message.from_event(event, HS).body == 'Unsupported message type'


class TestConstruction:

    def test_empty(self):
        timeline = MessageTimeline()
        assert timeline.mode == FOLLOW
        assert timeline.selected is None
        assert timeline.messages == []

    def test_with_messages_selects_newest(self):
        timeline = timeline_of(3)
        assert timeline.mode == FOLLOW
        assert timeline.selected == 2


class TestAppend:

    def test_follow_moves_selection(self):
        timeline = timeline_of(2)
        timeline.append('t', '@b:x', 'new')
        assert timeline.selected == 2
        assert timeline.get_selected().body == 'new'

    def test_first_append_selects(self):
        timeline = MessageTimeline()
        timeline.append('t', '@b:x', 'first')
        assert timeline.selected == 0

    def test_scroll_pins_selection(self):
        timeline = timeline_of(3)
        timeline.previous()
        assert timeline.mode == SCROLL
        timeline.append('t', '@b:x', 'new')
        assert timeline.selected == 1
        assert len(timeline) == 4


class TestMovement:

    def test_previous_enters_scroll(self):
        timeline = timeline_of(3)
        timeline.previous()
        assert timeline.selected == 1
        assert timeline.mode == SCROLL

    def test_previous_at_top_stays(self):
        timeline = timeline_of(3)
        timeline.select(0)
        timeline.previous()
        assert timeline.selected == 0
        assert timeline.mode == SCROLL

    def test_next_onto_last_returns_to_follow(self):
        timeline = timeline_of(3)
        timeline.previous()
        timeline.previous()
        timeline.next()
        assert timeline.selected == 1
        assert timeline.mode == SCROLL
        timeline.next()
        assert timeline.selected == 2
        assert timeline.mode == FOLLOW

    def test_next_at_last_follows(self):
        timeline = timeline_of(3)
        timeline.mode = SCROLL
        timeline.next()
        assert timeline.selected == 2
        assert timeline.mode == FOLLOW

    def test_next_from_unset(self):
        timeline = MessageTimeline()
        timeline.items.append(Message('t', '@a:x', 'x'))
        timeline.next()
        assert timeline.selected == 0

    @pytest.mark.parametrize('move', ['next', 'previous'])
    def test_empty_noop(self, move):
        timeline = MessageTimeline()
        getattr(timeline, move)()
        assert timeline.selected is None
        assert timeline.mode == FOLLOW


class TestEventIds:
    """Messages carrying an event id are shown once."""

    def test_from_event_keeps_event_id(self):
        event = MessageEvent('!r:x', '@a:x', 0, {'msgtype': 'm.text', 'body': 'x'}, '$1')
        assert Message.from_event(event, HS).event_id == '$1'

    def test_duplicate_skipped(self):
        timeline = MessageTimeline.with_messages([Message('t', '@a:x', 'a', '$a')])
        assert '$a' in timeline
        assert not timeline.append_message(Message('t', '@a:x', 'a', '$a'))
        assert timeline.append_message(Message('t', '@a:x', 'b', '$b'))
        assert [m.body for m in timeline] == ['a', 'b']

    def test_duplicate_does_not_move_selection(self):
        timeline = MessageTimeline.with_messages([
            Message('t', '@a:x', 'a', '$a'), Message('t', '@a:x', 'b', '$b')
        ])
        timeline.previous()
        timeline.append_message(Message('t', '@a:x', 'b', '$b'))
        assert timeline.selected == 0
        assert len(timeline) == 2

    def test_messages_without_id_always_appended(self):
        timeline = MessageTimeline()
        timeline.append('t', '@a:x', 'same')
        timeline.append('t', '@a:x', 'same')
        assert len(timeline) == 2


class TestBackwardFromUnset:

    def test_previous_from_unset_scrolls(self):
        timeline = timeline_of(3)
        timeline.select(None)
        timeline.previous()
        assert timeline.selected == 0
        assert timeline.mode == SCROLL

    def test_previous_on_single_message_keeps_follow(self):
        timeline = timeline_of(1)
        timeline.previous()
        assert timeline.selected == 0
        assert timeline.mode == FOLLOW
