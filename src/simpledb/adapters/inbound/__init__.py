"""Inbound adapters - entry points into the application.

The interactive command shell translates user text into Database calls.
"""

from simpledb.adapters.inbound.command_parser import CommandSyntaxError, parse_command
from simpledb.adapters.inbound.command_shell import CommandShell

__all__ = [
    "CommandShell",
    "CommandSyntaxError",
    "parse_command",
]
