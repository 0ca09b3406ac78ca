"""Reading and writing of small sysfs attribute files."""

from __future__ import annotations

import os
import re
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

READ_LIMIT = 256
U32_MAX = 0xFFFF_FFFF

_UNSIGNED = re.compile(r"\+?[0-9]+")


def read_text(path: PathLike) -> str:
    """Read the start of an attribute file as UTF-8 text."""
    with open(path, "rb", buffering=0) as file:
        data = os.pread(file.fileno(), READ_LIMIT, 0)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise ValueError(f"{os.fspath(path)}: invalid UTF-8 content") from err


def _parse_u32(value: str) -> int:
    if not _UNSIGNED.fullmatch(value):
        raise ValueError(f"invalid unsigned integer: {value!r}")
    number = int(value)
    if number > U32_MAX:
        raise ValueError(f"number too large: {value!r}")
    return number


def read_int_list(path: PathLike) -> list[int]:
    """Read a space separated list of unsigned integers."""
    values = [_parse_u32(part.strip()) for part in read_text(path).split(" ")]
    if not values:
        raise ValueError("Empty file")
    return values


def read_string_list(path: PathLike) -> list[str]:
    """Read a space separated list of words."""
    return [part.strip() for part in read_text(path).split(" ")]


def write_text(path: PathLike, value: str) -> None:
    """Write text at the start of an existing attribute file."""
    fd = os.open(path, os.O_WRONLY)
    try:
        os.pwrite(fd, value.encode("utf-8"), 0)
    finally:
        os.close(fd)


def write_int(path: PathLike, value: int) -> None:
    """Write an unsigned integer to an existing attribute file."""
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"value out of range: {value}")
    write_text(path, str(value))