"""Tests for user command parsing."""

import pytest

from washrelay import messages
from washrelay.commands import Help, Usage, parse_command
from washrelay.machine import Register, Release


@pytest.mark.parametrize(
    "text",
    ["use A1", "useA1", "Use A1", "register A1", "  use   A1  ", "使用A1", "使用 A1"],
)
def test_register_commands(text):
    assert parse_command(text, "U1") == Register("A1", "U1")


@pytest.mark.parametrize(
    "text",
    ["pickup A1", "PICKUP A1", "collect A1", "collectA1", "取衣A1", "取衣 A1"],
)
def test_release_commands(text):
    assert parse_command(text, "U1") == Release("A1", "U1")


@pytest.mark.parametrize("text", ["use", "use   ", "register", "使用"])
def test_register_without_machine_id(text):
    assert parse_command(text, "U1") == Usage(messages.REGISTER_USAGE)


@pytest.mark.parametrize("text", ["pickup", "collect ", "取衣"])
def test_release_without_machine_id(text):
    assert parse_command(text, "U1") == Usage(messages.RELEASE_USAGE)


@pytest.mark.parametrize("text", ["hello", "", "status A1", "A1 use"])
def test_other_text_gets_help(text):
    command = parse_command(text, "U1")
    assert isinstance(command, Help)
    assert "use A1" in command.text


def test_machine_id_keeps_its_case():
    assert parse_command("use b-12", "U9") == Register("b-12", "U9")


def test_prefix_match_is_literal():
    """Anything after the prefix is the machine id, even without a space."""
    assert parse_command("user", "U1") == Register("r", "U1")
