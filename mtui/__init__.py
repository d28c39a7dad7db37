from .app import App, Snapshot
from .room import RoomEntry, RoomDirectory
from .tabs import Tab, TabState
from .timeline import Message, MessageTimeline
from .roster import Member, MemberRoster
from .events import MessageEvent, MembershipEvent, InviteEvent

__version__ = '0.1.0'
