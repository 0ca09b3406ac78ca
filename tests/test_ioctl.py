import errno
import fcntl
import struct
from unittest import mock

import pytest

from tailord import ioctl
from tailord.errors import IoctlError, Utf8DecodeError
from tailord.ioctl import Request

FD = 42


def test_read_request_code_layout():
    value = ioctl.read_request_code(ioctl.IOCTL_MAGIC, 0x05)
    assert value >> 30 == 2
    assert (value >> 16) & 0x3FFF == struct.calcsize("P")
    assert (value >> 8) & 0xFF == 0xEC
    assert value & 0xFF == 0x05


def test_write_request_code_layout():
    value = ioctl.write_request_code(ioctl.MAGIC_WRITE_CL, 0x10)
    assert value >> 30 == 1
    assert (value >> 16) & 0x3FFF == struct.calcsize("P")
    assert (value >> 8) & 0xFF == 0xEC + 2
    assert value & 0xFF == 0x10


def test_uniwill_magic_in_request_codes():
    read_value = ioctl.read_request_code(ioctl.MAGIC_READ_UW, 0x01)
    write_value = ioctl.write_request_code(ioctl.MAGIC_WRITE_UW, 0x18)
    assert (read_value >> 8) & 0xFF == 0xEC + 3
    assert (write_value >> 8) & 0xFF == 0xEC + 4


def test_requests_use_their_request_codes():
    seen = []

    def fake(fd, request_code, arg):
        seen.append(request_code)
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        ioctl.read_int(FD, Request.CL_FAN_INFO_0)
        ioctl.write_int(FD, Request.UW_WRITE_PERF_PROFILE, 1)
    assert seen == [
        ioctl.read_request_code(ioctl.MAGIC_READ_CL, 0x10),
        ioctl.write_request_code(ioctl.MAGIC_WRITE_UW, 0x18),
    ]


def test_every_request_issues_a_distinct_code():
    seen = []

    def fake(fd, request_code, arg):
        seen.append(request_code)
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        values = [ioctl.read_int(FD, request) for request in Request]
    assert len(seen) == len(values)
    assert len(set(seen)) == len(seen)


def test_read_int_returns_value_from_driver():
    calls = []

    def fake(fd, request_code, arg):
        calls.append((fd, request_code))
        arg[:4] = struct.pack("=i", -5)
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        value = ioctl.read_int(FD, Request.UW_TDP_0)
    assert value == -5
    assert calls == [(FD, ioctl.read_request_code(ioctl.MAGIC_READ_UW, 0x18))]


def test_read_int_accepts_file_objects(tmp_path):
    def fake(fd, request_code, arg):
        arg[:4] = struct.pack("=i", 7)
        return 0

    with open(tmp_path / "dev", "wb") as handle, mock.patch.object(fcntl, "ioctl", side_effect=fake):
        assert ioctl.read_int(handle, Request.CL_HW_CHECK) == 7


def test_mod_version_strips_at_nul():
    seen = []

    def fake(fd, request_code, arg):
        seen.append(request_code)
        payload = b"0.3.6\0"
        arg[: len(payload)] = payload
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        assert ioctl.mod_version(FD) == "0.3.6"
    assert seen == [ioctl.read_request_code(ioctl.IOCTL_MAGIC, 0x00)]


def test_read_string_detects_overflow():
    def fake(fd, request_code, arg):
        arg[:] = b"x" * len(arg)
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        with pytest.raises(RuntimeError, match="Buffer overflow detected!"):
            ioctl.read_string(FD, Request.CL_HW_INTERFACE_ID)


def test_read_string_full_buffer_without_nul():
    def fake(fd, request_code, arg):
        arg[: ioctl.STRING_BUFFER_SIZE] = b"a" * ioctl.STRING_BUFFER_SIZE
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        assert ioctl.read_string(FD, Request.UW_HW_INTERFACE_ID) == "a" * ioctl.STRING_BUFFER_SIZE


def test_read_string_invalid_utf8():
    def fake(fd, request_code, arg):
        arg[:2] = b"\xff\xfe"
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake):
        with pytest.raises(Utf8DecodeError):
            ioctl.read_string(FD, Request.MOD_VERSION)


def test_driver_error_is_wrapped():
    with mock.patch.object(fcntl, "ioctl", side_effect=OSError(errno.ENODEV, "no device")):
        with pytest.raises(IoctlError) as info:
            ioctl.read_int(FD, Request.CL_HW_CHECK)
    assert info.value.errno == errno.ENODEV


def test_write_int_passes_value():
    registers = {}

    def fake_write(fd, request_code, arg):
        registers[request_code] = struct.unpack("=i", arg)[0]
        return 0

    def fake_read(fd, request_code, arg):
        struct.pack_into("=i", arg, 0, registers[request_code])
        return 0

    with mock.patch.object(fcntl, "ioctl", side_effect=fake_write):
        ioctl.write_int(FD, Request.CL_WRITE_PERF_PROFILE, 3)
        ioctl.write_int(FD, Request.UW_WRITE_TDP_1, -19)
    with mock.patch.object(fcntl, "ioctl", side_effect=fake_read):
        assert ioctl.read_int(FD, Request.CL_WRITE_PERF_PROFILE) == 3
        assert ioctl.read_int(FD, Request.UW_WRITE_TDP_1) == -19
    assert set(registers) == {
        ioctl.write_request_code(ioctl.MAGIC_WRITE_CL, 0x15),
        ioctl.write_request_code(ioctl.MAGIC_WRITE_UW, 0x16),
    }


def test_open_missing_device_file(tmp_path):
    with pytest.raises(IoctlError) as info:
        ioctl.open_device_file(str(tmp_path / "missing"))
    assert info.value.errno == errno.ENOENT


def test_open_device_file_read_write(tmp_path):
    path = tmp_path / "device"
    path.write_bytes(b"abc")
    with ioctl.open_device_file(str(path)) as handle:
        assert handle.read() == b"abc"
        handle.write(b"def")
    assert path.read_bytes() == b"abcdef"