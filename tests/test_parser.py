"""Tests for IAC command window parsing."""

import pytest

from rxtelnet.protocol import Command, Option, ParseStatus, parse_command

IAC, SB, SE = 0xFF, 0xFA, 0xF0


def test_empty_and_lone_iac_need_more():
    assert parse_command(b"").status is ParseStatus.NEED_MORE
    result = parse_command(bytes([IAC]))
    assert result.status is ParseStatus.NEED_MORE
    assert result.length == 0


def test_escaped_iac():
    result = parse_command(bytes([IAC, IAC, 23]))
    assert result.status is ParseStatus.ESCAPED
    assert result.length == 2


@pytest.mark.parametrize("command", [Command.WILL, Command.WONT, Command.DO, Command.DONT])
def test_negotiation_without_option_needs_more(command):
    assert parse_command(bytes([IAC, command])).status is ParseStatus.NEED_MORE


def test_negotiation_decoded():
    result = parse_command(bytes([IAC, Command.DO, Option.ECHO, 0x41]))
    assert result.status is ParseStatus.NEGOTIATION
    assert result.length == 3
    assert result.command is Command.DO
    assert result.option == Option.ECHO


def test_unknown_option_kept_as_int():
    result = parse_command(bytes([IAC, Command.WILL, 200]))
    assert result.option == 200


@pytest.mark.parametrize("command", [Command.NOP, Command.GA, Command.AYT, Command.SE])
def test_option_less_commands(command):
    result = parse_command(bytes([IAC, command, 0x41]))
    assert result.status is ParseStatus.COMMAND
    assert result.length == 2
    assert result.command is command
    assert result.option is None


def test_code_outside_enumeration():
    result = parse_command(bytes([IAC, 0x05]))
    assert result.status is ParseStatus.COMMAND
    assert result.length == 2
    assert result.command is None


def test_subnegotiation_block():
    window = bytes([IAC, SB, 24, 0, ord("x"), IAC, SE, ord("y")])
    result = parse_command(window)
    assert result.status is ParseStatus.SUBNEGOTIATION
    assert result.length == 7
    assert result.option == 24


def test_subnegotiation_waits_for_terminator():
    assert parse_command(bytes([IAC, SB])).status is ParseStatus.NEED_MORE
    assert parse_command(bytes([IAC, SB, 24, 0])).status is ParseStatus.NEED_MORE
    assert parse_command(bytes([IAC, SB, 24, 0, IAC])).status is ParseStatus.NEED_MORE


def test_subnegotiation_skips_escaped_iac():
    window = bytes([IAC, SB, 24, IAC, IAC, SE, IAC, SE])
    result = parse_command(window)
    assert result.status is ParseStatus.SUBNEGOTIATION
    assert result.length == 8


def test_window_not_mutated():
    window = bytearray([IAC, Command.DO, Option.ECHO])
    parse_command(window)
    assert window == bytearray([IAC, Command.DO, Option.ECHO])


def test_window_must_start_with_iac():
    with pytest.raises(ValueError):
        parse_command(b"\x01\xff")


def test_empty_subnegotiation_block():
    window = bytes([IAC, SB, IAC, SE]) + b"hello"
    result = parse_command(window)
    assert result.status is ParseStatus.SUBNEGOTIATION
    assert result.length == 4
    assert result.option is None


def test_subnegotiation_option_then_terminator():
    result = parse_command(bytes([IAC, SB, 24, IAC, SE]))
    assert result.status is ParseStatus.SUBNEGOTIATION
    assert result.length == 5
    assert result.option == 24
    assert parse_command(bytes([IAC, SB, IAC])).status is ParseStatus.NEED_MORE
