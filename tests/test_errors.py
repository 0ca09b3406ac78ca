import pytest

from tailord.errors import (
    DeviceNotAvailableError,
    FeatureNotAvailableError,
    InvalidArgsError,
    IoctlError,
    Utf8DecodeError,
)


@pytest.mark.parametrize(
    ("error_class", "message"),
    [
        (DeviceNotAvailableError, "Device not available"),
        (InvalidArgsError, "Invalid args"),
        (FeatureNotAvailableError, "Feature not available"),
        (Utf8DecodeError, "Parsing to UTF8 failed"),
    ],
)
def test_default_messages(error_class, message):
    assert str(error_class()) == message


@pytest.mark.parametrize(
    "error_class",
    [DeviceNotAvailableError, InvalidArgsError, FeatureNotAvailableError, Utf8DecodeError],
)
def test_subclasses_are_caught_as_ioctl_error(error_class):
    with pytest.raises(IoctlError) as info:
        raise error_class()
    assert info.value.errno is None
    assert str(info.value) == error_class.default_message


def test_custom_message_and_errno():
    err = IoctlError("boom", errno=19)
    assert str(err) == "boom"
    assert err.errno == 19


def test_custom_message_overrides_default():
    assert str(DeviceNotAvailableError("fan 3 missing")) == "fan 3 missing"