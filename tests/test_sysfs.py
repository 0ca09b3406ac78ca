import pytest

from tailord.sysfs import (
    READ_LIMIT,
    read_int_list,
    read_string_list,
    read_text,
    write_int,
    write_text,
)


@pytest.fixture
def attribute(tmp_path):
    path = tmp_path / "attribute"
    path.write_bytes(b"")
    return path


def test_read_text(attribute):
    attribute.write_text("Battery\n")
    assert read_text(attribute) == "Battery\n"


def test_read_text_is_limited(attribute):
    attribute.write_text("x" * (READ_LIMIT + 50))
    assert len(read_text(attribute)) == READ_LIMIT


def test_read_text_invalid_utf8(attribute):
    attribute.write_bytes(b"\xff\xfe")
    with pytest.raises(ValueError):
        read_text(attribute)


def test_read_text_missing(tmp_path):
    with pytest.raises(OSError):
        read_text(tmp_path / "missing")


def test_read_int_list(attribute):
    attribute.write_text("255 100 0\n")
    assert read_int_list(attribute) == [255, 100, 0]


@pytest.mark.parametrize("content", ["", "1  2", "abc", "-1", "4294967296"])
def test_read_int_list_invalid(attribute, content):
    attribute.write_text(content)
    with pytest.raises(ValueError):
        read_int_list(attribute)


def test_read_string_list(attribute):
    attribute.write_text("high_capacity balanced stationary\n")
    assert read_string_list(attribute) == ["high_capacity", "balanced", "stationary"]


def test_write_text_round_trip(attribute):
    write_text(attribute, "Custom")
    assert read_text(attribute) == "Custom"


def test_write_int_round_trip(attribute):
    write_int(attribute, 80)
    assert read_int_list(attribute) == [80]


def test_write_int_rejects_negative(attribute):
    with pytest.raises(ValueError):
        write_int(attribute, -1)


def test_write_requires_existing_file(tmp_path):
    path = tmp_path / "missing"
    with pytest.raises(FileNotFoundError):
        write_text(path, "x")
    assert not path.exists()