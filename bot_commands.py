"""
Bot command definitions for Telegram bot menu.
"""

# Command definitions with descriptions
# Format: command_name: description
BOT_COMMANDS = {
    "thought": "Write a new thought record",
    "mythoughts": "View your journal, grouped by day",
    "archive": "View archived thoughts (restore or delete)",
    "settings": "Choose what the journal list shows",

    # General
    "start": "Welcome message and quick start guide",
    "help": "Show available commands",
    "cancel": "Cancel current operation",
}


def get_commands_list():
    """Get commands formatted for BotFather setcommands."""
    return [(cmd, desc) for cmd, desc in BOT_COMMANDS.items()]


def get_help_text(retention_days: float = 7):
    """Generate help text message."""
    lines = ["<b>Available Commands:</b>\n"]

    lines.append("\n<b>Journal:</b>")
    lines.append("/thought - Write a thought record")
    lines.append("/mythoughts - View your journal")
    lines.append("/archive - View archived thoughts")
    lines.append("/settings - Choose what the journal list shows")

    lines.append("\n<b>Tips:</b>")
    lines.append("- Use /cancel to cancel any operation")
    lines.append("- Use /skip to skip the challenge step")
    lines.append(f"- Archived thoughts are deleted for good after {retention_days:g} days")

    return "\n".join(lines)
