"""Low level ioctl requests to the hardware control character device."""

from __future__ import annotations

import enum
import fcntl
import struct
from typing import BinaryIO, Union

from .errors import IoctlError, Utf8DecodeError

TUXEDO_IO_DEVICE_FILE = "/dev/tuxedo_io"

IOCTL_MAGIC = 0xEC
MAGIC_READ_CL = IOCTL_MAGIC + 1
MAGIC_WRITE_CL = IOCTL_MAGIC + 2
MAGIC_READ_UW = IOCTL_MAGIC + 3
MAGIC_WRITE_UW = IOCTL_MAGIC + 4

POINTER_SIZE = struct.calcsize("P")

_IOC_WRITE = 1
_IOC_READ = 2

STRING_BUFFER_SIZE = 30
_OVERFLOW_CANARY = bytes([0b10011001, 0b10101010, 0b11111111, 0b10010010])

_INT = struct.Struct("=i")


def _ioc(direction: int, magic: int, number: int, size: int) -> int:
    return (direction << 30) | (size << 16) | (magic << 8) | number


def read_request_code(magic: int, number: int) -> int:
    """Request code of a read request carrying a pointer-sized argument."""
    return _ioc(_IOC_READ, magic, number, POINTER_SIZE)


def write_request_code(magic: int, number: int) -> int:
    """Request code of a write request carrying a pointer-sized argument."""
    return _ioc(_IOC_WRITE, magic, number, POINTER_SIZE)


class Request(enum.Enum):
    """Every request understood by the driver."""

    MOD_VERSION = (_IOC_READ, IOCTL_MAGIC, 0x00)

    # Clevo reads
    CL_HW_CHECK = (_IOC_READ, IOCTL_MAGIC, 0x05)
    CL_HW_INTERFACE_ID = (_IOC_READ, MAGIC_READ_CL, 0x00)
    CL_FAN_INFO_0 = (_IOC_READ, MAGIC_READ_CL, 0x10)
    CL_FAN_INFO_1 = (_IOC_READ, MAGIC_READ_CL, 0x11)
    CL_FAN_INFO_2 = (_IOC_READ, MAGIC_READ_CL, 0x12)
    CL_WEBCAM_SW = (_IOC_READ, MAGIC_READ_CL, 0x13)

    # Clevo writes
    CL_WRITE_FAN_SPEED = (_IOC_WRITE, MAGIC_WRITE_CL, 0x10)
    CL_WRITE_FAN_AUTO = (_IOC_WRITE, MAGIC_WRITE_CL, 0x11)
    CL_WRITE_WEBCAM_SW = (_IOC_WRITE, MAGIC_WRITE_CL, 0x12)
    CL_WRITE_PERF_PROFILE = (_IOC_WRITE, MAGIC_WRITE_CL, 0x15)

    # Uniwill reads
    UW_HW_CHECK = (_IOC_READ, IOCTL_MAGIC, 0x06)
    UW_HW_INTERFACE_ID = (_IOC_READ, MAGIC_READ_UW, 0x00)
    UW_MODEL_ID = (_IOC_READ, MAGIC_READ_UW, 0x01)
    UW_FAN_SPEED_0 = (_IOC_READ, MAGIC_READ_UW, 0x10)
    UW_FAN_SPEED_1 = (_IOC_READ, MAGIC_READ_UW, 0x11)
    UW_FAN_TEMP_0 = (_IOC_READ, MAGIC_READ_UW, 0x12)
    UW_FAN_TEMP_1 = (_IOC_READ, MAGIC_READ_UW, 0x13)
    UW_FANS_OFF_AVAILABLE = (_IOC_READ, MAGIC_READ_UW, 0x16)
    UW_FANS_MIN_SPEED = (_IOC_READ, MAGIC_READ_UW, 0x17)
    UW_TDP_0 = (_IOC_READ, MAGIC_READ_UW, 0x18)
    UW_TDP_1 = (_IOC_READ, MAGIC_READ_UW, 0x19)
    UW_TDP_2 = (_IOC_READ, MAGIC_READ_UW, 0x1A)
    UW_TDP_MIN_0 = (_IOC_READ, MAGIC_READ_UW, 0x1B)
    UW_TDP_MIN_1 = (_IOC_READ, MAGIC_READ_UW, 0x1C)
    UW_TDP_MIN_2 = (_IOC_READ, MAGIC_READ_UW, 0x1D)
    UW_TDP_MAX_0 = (_IOC_READ, MAGIC_READ_UW, 0x1E)
    UW_TDP_MAX_1 = (_IOC_READ, MAGIC_READ_UW, 0x1F)
    UW_TDP_MAX_2 = (_IOC_READ, MAGIC_READ_UW, 0x20)
    UW_PROFS_AVAILABLE = (_IOC_READ, MAGIC_READ_UW, 0x21)

    # Uniwill writes
    UW_WRITE_FAN_SPEED_0 = (_IOC_WRITE, MAGIC_WRITE_UW, 0x10)
    UW_WRITE_FAN_SPEED_1 = (_IOC_WRITE, MAGIC_WRITE_UW, 0x11)
    UW_WRITE_MODE_ENABLE = (_IOC_WRITE, MAGIC_WRITE_UW, 0x13)
    UW_WRITE_FAN_AUTO = (_IOC_WRITE, MAGIC_WRITE_UW, 0x14)
    UW_WRITE_TDP_0 = (_IOC_WRITE, MAGIC_WRITE_UW, 0x15)
    UW_WRITE_TDP_1 = (_IOC_WRITE, MAGIC_WRITE_UW, 0x16)
    UW_WRITE_TDP_2 = (_IOC_WRITE, MAGIC_WRITE_UW, 0x17)
    UW_WRITE_PERF_PROFILE = (_IOC_WRITE, MAGIC_WRITE_UW, 0x18)

    def __init__(self, direction: int, magic: int, number: int) -> None:
        self.direction = direction
        self.magic = magic
        self.number = number

    @property
    def code(self) -> int:
        """The numeric request code passed to ioctl."""
        return _ioc(self.direction, self.magic, self.number, POINTER_SIZE)


FileLike = Union[int, BinaryIO]
RequestLike = Union[Request, int]


def open_device_file(path: str = TUXEDO_IO_DEVICE_FILE) -> BinaryIO:
    """Open the driver's character device for reading and writing."""
    try:
        return open(path, "r+b", buffering=0)
    except OSError as err:
        raise IoctlError(str(err), errno=err.errno) from err


def _fileno(file: FileLike) -> int:
    return file if isinstance(file, int) else file.fileno()


def _code(request: RequestLike) -> int:
    return request.code if isinstance(request, Request) else int(request)


def _call(file: FileLike, request: RequestLike, arg) -> None:
    try:
        fcntl.ioctl(_fileno(file), _code(request), arg)
    except OSError as err:
        raise IoctlError(str(err), errno=err.errno) from err


def read_int(file: FileLike, request: RequestLike) -> int:
    """Issue a read request returning a 32-bit signed integer."""
    buffer = bytearray(_INT.size)
    _call(file, request, buffer)
    return _INT.unpack(buffer)[0]


def read_string(file: FileLike, request: RequestLike) -> str:
    """Issue a read request returning a NUL-terminated string.

    A guard pattern after the buffer detects a driver writing too much;
    that is treated as a fatal fault.
    """
    buffer = bytearray(STRING_BUFFER_SIZE) + bytearray(_OVERFLOW_CANARY)
    _call(file, request, buffer)
    if bytes(buffer[STRING_BUFFER_SIZE:]) != _OVERFLOW_CANARY:
        raise RuntimeError("Buffer overflow detected!")
    raw = bytes(buffer[:STRING_BUFFER_SIZE]).split(b"\0", 1)[0]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise Utf8DecodeError() from err


def write_int(file: FileLike, request: RequestLike, value: int) -> None:
    """Issue a write request carrying a 32-bit signed integer."""
    _call(file, request, _INT.pack(value))


def mod_version(file: FileLike) -> str:
    """Version string of the loaded kernel module."""
    return read_string(file, Request.MOD_VERSION)