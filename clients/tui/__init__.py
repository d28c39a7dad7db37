"""
TUI (Terminal User Interface) Chat Client for Matrix

A terminal-based Matrix client built on blessed, with three panes:

- Joined rooms
- Messages of the selected room, following new messages or scrolled back
- Members of the selected room, with kick support

Usage:
    python -m clients.tui.client path/to/config.json

See README.md for full documentation.
"""

__version__ = "0.1.0"
