"""Command-line entry point and mode dispatch for ``mill``."""

import logging
import sys
from collections.abc import Callable, Sequence

from coffeemill.calc_pca import mode_calc_pca
from coffeemill.calc_rmsd import RangeError, mode_calc_rmsd
from coffeemill.pdb_seq import mode_pdb_seq

_log = logging.getLogger(__name__)


def main_usage() -> str:
    """Return the top-level usage text."""
    return (
        "Usage: mill [--debug|--quiet] [mode] [parameters...]\n"
        "# Log options\n"
        " - `--debug` shows debug informations.\n"
        " - `--quiet` disables all the status logs.\n"
        "# List of modes\n"
        " - calc\n"
        " - pdb\n"
        " - help\n"
        "for more information, try `mill help [mode]`.\n"
    )


def pdb_help_usage() -> str:
    """Return the usage text of ``mill pdb``."""
    return (
        "usage: mill pdb [command] [parameters...]\n\n"
        "    avaiable commands\n"
        "    - seq\n"
        "        print a sequence of each chain\n"
        "    - help\n"
        "        print detailed explanation of each command\n"
    )


def _calc_help_usage() -> str:
    return (
        "usage: mill calc [command] [parameters...]\n\n"
        "    avaiable commands\n"
        "    - rmsd\n"
        "        calculate RMSD between a reference and each snapshot\n"
        "    - pca\n"
        "        principal component analysis of a trajectory\n"
        "    - help\n"
        "        print detailed explanation of each command\n"
    )


def mode_pdb_help(args) -> int:
    """Print help for ``mill pdb`` or one of its commands; return an exit code."""
    args = list(args)
    if not args:
        print(pdb_help_usage())
        return 0

    command = args[0]
    if command == "seq":
        return mode_pdb_seq(["help"])
    _log.error("mill pdb help: unknown command : %s", command)
    _log.error(pdb_help_usage())
    return 1


def mode_pdb(args) -> int:
    """Run a ``mill pdb`` command; ``args`` starts with the command name."""
    args = list(args)
    if not args:
        _log.error("mill pdb mode: too few arguments")
        mode_pdb_help([])
        return 1

    command, rest = args[0], args[1:]
    if command == "seq":
        return mode_pdb_seq(rest)
    if command == "help":
        return mode_pdb_help(rest)
    _log.error("mill pdb mode: unknown command: %s", command)
    _log.error(pdb_help_usage())
    return 1


_CALC_COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "rmsd": mode_calc_rmsd,
    "pca": mode_calc_pca,
}


def _mode_calc_help(args) -> int:
    args = list(args)
    if not args:
        print(_calc_help_usage())
        return 0
    command = args[0]
    handler = _CALC_COMMANDS.get(command)
    if handler is not None:
        return handler(["help"])
    _log.error("mill calc help: unknown command : %s", command)
    _log.error(_calc_help_usage())
    return 1


def mode_calc(args) -> int:
    """Run a ``mill calc`` command; ``args`` starts with the command name."""
    args = list(args)
    if not args:
        _log.error("mill calc mode: too few arguments")
        _mode_calc_help([])
        return 1

    command, rest = args[0], args[1:]
    if command == "help":
        return _mode_calc_help(rest)
    handler = _CALC_COMMANDS.get(command)
    if handler is not None:
        return handler(rest)
    _log.error("mill calc mode: unknown command: %s", command)
    _log.error(_calc_help_usage())
    return 1


def mode_help(args) -> int:
    """Print help for a mode; return an exit code."""
    args = list(args)
    if not args:
        print(main_usage())
        return 0

    command, rest = args[0], args[1:]
    if command == "pdb":
        return mode_pdb_help(rest)
    if command == "calc":
        return _mode_calc_help(rest)
    _log.error("mill help mode: unknown command %s", command)
    _log.error(main_usage())
    return 1


_MODES: dict[str, Callable[[list[str]], int]] = {
    "calc": mode_calc,
    "pdb": mode_pdb,
    "help": mode_help,
}


def _configure_logging(level: int) -> None:
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger("coffeemill").setLevel(level)


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``mill`` with ``argv`` (without the program name); return an exit code."""
    args = list(sys.argv[1:] if argv is None else argv)

    level = logging.INFO
    while args and args[0] in ("--debug", "--quiet"):
        level = logging.DEBUG if args.pop(0) == "--debug" else logging.WARNING
    _configure_logging(level)

    if not args:
        _log.error("mill: too few arguments")
        _log.error(main_usage())
        return 1

    mode, rest = args[0], args[1:]
    handler = _MODES.get(mode)
    if handler is None:
        _log.error("mill: unknown mode: %s", mode)
        _log.error(main_usage())
        return 1

    try:
        return handler(rest)
    except (OSError, ValueError, RangeError) as error:
        _log.error("mill %s: %s", mode, error)
        return 1


if __name__ == "__main__":
    sys.exit(main())