"""Named JSON profile files stored below a base directory."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Union

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base error of profile storage."""


class InvalidArgumentError(StorageError):
    """A profile name or argument is not acceptable."""


class StorageIOError(StorageError):
    """Reading or writing a file failed."""


class FailedError(StorageError):
    """Serialising or parsing data failed."""


class InvalidFileContentError(StorageError):
    """A stored file does not hold what it should."""


class ProfileNotFoundError(StorageError):
    """A named profile does not exist."""


def normalize_json_path(base_path: str, name: str) -> str:
    """Path of the JSON file for profile *name* below *base_path*."""
    if "/" in name:
        raise InvalidArgumentError(f"Can't use '/' in profile names: `{name}`")
    if "." in name:
        raise InvalidArgumentError(f"Can't use '.' in profile names: `{name}`")
    if not base_path:
        return f"{name}.json"
    base = base_path.strip().rstrip("/")
    return f"{base}/{name}.json"


def write_file(base_path: str, name: str, data: Union[str, bytes]) -> None:
    """Write raw data to the profile file."""
    path = normalize_json_path(base_path, name)
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    try:
        with open(path, "wb") as file:
            file.write(payload)
    except OSError as err:
        raise StorageIOError(str(err)) from err


def _to_pretty_json(data: Any) -> str:
    try:
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as err:
        raise FailedError(str(err)) from err


def write_json(base_path: str, name: str, data: Any) -> None:
    """Serialise *data* as indented JSON into the profile file."""
    write_file(base_path, name, _to_pretty_json(data))


def read_file(base_path: str, name: str) -> str:
    """Read the profile file as text."""
    path = normalize_json_path(base_path, name)
    try:
        with open(path, encoding="utf-8") as file:
            return file.read()
    except (OSError, UnicodeDecodeError) as err:
        raise StorageIOError(str(err)) from err


def read_json(base_path: str, name: str) -> Any:
    """Read and parse the profile file."""
    text = read_file(base_path, name)
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise FailedError(str(err)) from err


def remove_file(base_path: str, name: str) -> None:
    """Delete the profile file."""
    try:
        os.remove(normalize_json_path(base_path, name))
    except OSError as err:
        raise StorageIOError(str(err)) from err


def move_file(base_path: str, source: str, target: str) -> None:
    """Rename profile *source* to *target*."""
    source_path = normalize_json_path(base_path, source)
    target_path = normalize_json_path(base_path, target)
    try:
        os.rename(source_path, target_path)
    except OSError as err:
        raise StorageIOError(str(err)) from err


def list_profiles(base_path: str) -> list[str]:
    """Names of the JSON profiles stored in *base_path*."""
    try:
        with os.scandir(base_path) as entries:
            files = [entry for entry in entries if _is_file(entry)]
    except OSError as err:
        raise StorageIOError(str(err)) from err

    names = []
    for entry in files:
        try:
            entry.name.encode("utf-8")
        except UnicodeEncodeError:
            logger.warning("Couldn't convert file name to UTF8: `%r`", entry.path)
            continue
        if ".json" in entry.name:
            if "active_profile" not in entry.name:
                names.append(entry.name.replace(".json", ""))
        else:
            logger.warning("Unknown file type (expected JSON): `%s`", entry.path)
    return sorted(names)


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file(follow_symlinks=False)
    except OSError:
        return False