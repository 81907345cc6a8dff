"""Unit Tests: journal command registration.

Invariants:
    - Only the documented journal commands are registered
"""

from telegram.ext import CommandHandler

from modules.journal import journal_handlers


def test_journal_commands():
    commands = set()
    for handler in journal_handlers:
        if isinstance(handler, CommandHandler):
            commands |= set(handler.commands)

    assert commands == {"mythoughts", "archive"}
