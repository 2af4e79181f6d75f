from __future__ import annotations

import pytest

from discovery_flow.commands import HELP_RESPONSE, ParsedCommand, parse_command, resolve_command
from discovery_flow.errors import UnknownCommand
from discovery_flow.schemas import Command


def test_parse_command_splits_keyword_and_args() -> None:
    assert parse_command("@brainstorm smart garden app") == ParsedCommand("brainstorm", "smart garden app")
    assert parse_command("  @PM  ") == ParsedCommand("pm", "")
    assert parse_command("@architect\nmulti-line\nbrief") == ParsedCommand("architect", "multi-line\nbrief")


def test_plain_text_is_not_a_command() -> None:
    assert parse_command("brainstorm please") is None
    assert parse_command("email me @ noon") is None


def test_resolve_command_accepts_prefix_and_case() -> None:
    assert resolve_command("@Validator") is Command.VALIDATOR
    assert resolve_command(" help ") is Command.HELP

    with pytest.raises(UnknownCommand):
        resolve_command("juggle")


def test_help_lists_every_command() -> None:
    for command in Command:
        assert f"@{command.value}" in HELP_RESPONSE
