"""Popping ``--name=value`` options out of a command-line argument list."""

from collections.abc import MutableSequence
from typing import Any


class OptionError(ValueError):
    """Raised when an option's value cannot be converted."""


def _convert(name: str, text: str, kind: type) -> Any:
    if kind is bool:
        if text == "true":
            return True
        if text == "false":
            return False
        raise OptionError(f"--{name}: expected true or false, got {text!r}")
    try:
        return kind(text)
    except (TypeError, ValueError) as error:
        raise OptionError(
            f"--{name}: cannot read {text!r} as {kind.__name__}"
        ) from error


def pop_argument(args: MutableSequence[str], name: str, kind: type = str) -> Any:
    """Remove the first ``--name=value`` from ``args`` and return its value.

    The value is converted to ``kind`` (``bool`` accepts ``true`` and
    ``false``). Returns None, leaving ``args`` untouched, when the option
    is absent.
    """
    prefix = f"--{name}="
    position = next(
        (index for index, arg in enumerate(args) if arg.startswith(prefix)), None
    )
    if position is None:
        return None
    text = args[position][len(prefix):]
    del args[position]
    return _convert(name, text, kind)


def _index(name: str, text: str) -> int:
    digits = text.strip()
    if not digits.isascii() or not digits.isdigit():
        raise OptionError(f"--{name}: expected a non-negative integer, got {text!r}")
    return int(digits)


def pop_range(args: MutableSequence[str], name: str) -> tuple[int, int] | None:
    """Remove ``--name=begin:end`` from ``args`` and return ``(begin, end)``.

    A value without a colon stands for both ends. Returns None when the
    option is absent.
    """
    text = pop_argument(args, name, str)
    if text is None:
        return None
    begin, separator, end = text.partition(":")
    if not separator:
        end = begin
    return _index(name, begin), _index(name, end)