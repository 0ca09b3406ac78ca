"""Detection of the hardware behind the driver's device file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from . import ioctl
from .devices import ClevoHardware, HardwareDevice, TdpDevice, WebcamDevice
from .errors import DeviceNotAvailableError, IoctlError
from .ioctl import TUXEDO_IO_DEVICE_FILE, Request
from .uniwill import UniwillHardware


@dataclass
class IoInterface:
    """The detected device together with its optional capabilities."""

    module_version: str
    device: HardwareDevice
    webcam: Optional[WebcamDevice] = None
    tdp: Optional[TdpDevice] = None
    file: Optional[BinaryIO] = field(default=None, repr=False)

    def __enter__(self) -> "IoInterface":
        return self

    def __exit__(self, *exc_info) -> None:
        if self.file is not None:
            self.file.close()


def _check(file: BinaryIO, request: Request) -> bool:
    try:
        return ioctl.read_int(file, request) == 1
    except IoctlError:
        return False


def open_interface(path: str = TUXEDO_IO_DEVICE_FILE) -> IoInterface:
    """Open the driver and detect whether a Clevo or Uniwill device is present."""
    file = ioctl.open_device_file(path)
    try:
        module_version = ioctl.mod_version(file)
        if _check(file, Request.CL_HW_CHECK):
            clevo = ClevoHardware(file)
            return IoInterface(module_version, clevo, webcam=clevo, file=file)
        if _check(file, Request.UW_HW_CHECK):
            uniwill = UniwillHardware(file)
            return IoInterface(module_version, uniwill, tdp=uniwill, file=file)
        raise DeviceNotAvailableError()
    except BaseException:
        file.close()
        raise