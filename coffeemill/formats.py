"""File-name helpers and selection of a reader or writer by extension."""

import os

from coffeemill.pdb import PDBReader, PDBWriter
from coffeemill.trr import TRRReader, TRRWriter

_READERS = {".pdb": PDBReader, ".trr": TRRReader}
_WRITERS = {".pdb": PDBWriter, ".trr": TRRWriter}


class UnknownFormatError(ValueError):
    """Raised for a file whose extension names no supported format."""


def extension_of(path) -> str:
    """Return the extension of the last path component, dot included, or ''."""
    text = os.fspath(path)
    name_start = max(text.rfind("/"), text.rfind(os.sep)) + 1
    dot = text.rfind(".", name_start)
    return text[dot:] if dot >= 0 else ""


def base_name_of(path) -> str:
    """Return ``path`` without its extension."""
    text = os.fspath(path)
    extension = extension_of(text)
    return text[: len(text) - len(extension)]


def open_reader(path):
    """Open a reader chosen by the extension of ``path``."""
    extension = extension_of(path)
    try:
        reader_type = _READERS[extension]
    except KeyError:
        raise UnknownFormatError(f"unknown file extension: {os.fspath(path)}") from None
    return reader_type(path)


def open_writer(path):
    """Open a writer chosen by the extension of ``path``."""
    extension = extension_of(path)
    try:
        writer_type = _WRITERS[extension]
    except KeyError:
        raise UnknownFormatError(f"unknown file extension: {os.fspath(path)}") from None
    return writer_type(path)