"""Exceptions raised while talking to the hardware control driver."""

from __future__ import annotations


class IoctlError(Exception):
    """Base error for every failure of the driver interface."""

    default_message = "ioctl request failed"

    def __init__(self, message: str | None = None, *, errno: int | None = None) -> None:
        super().__init__(message or self.default_message)
        self.errno = errno


class DeviceNotAvailableError(IoctlError):
    """The requested device (or fan, or TDP slot) does not exist."""

    default_message = "Device not available"


class InvalidArgsError(IoctlError):
    """An argument is not accepted by the device."""

    default_message = "Invalid args"


class FeatureNotAvailableError(IoctlError):
    """The device does not support the requested feature."""

    default_message = "Feature not available"


class Utf8DecodeError(IoctlError):
    """A string returned by the driver is not valid UTF-8."""

    default_message = "Parsing to UTF8 failed"