import pytest

from tailord.storage import (
    FailedError,
    InvalidArgumentError,
    StorageIOError,
    list_profiles,
    move_file,
    normalize_json_path,
    read_file,
    read_json,
    remove_file,
    write_file,
    write_json,
)


def test_normalize_with_base_path():
    assert normalize_json_path("/etc/tailord/profiles/", "default") == "/etc/tailord/profiles/default.json"


def test_normalize_without_base_path():
    assert normalize_json_path("", "default") == "default.json"


def test_normalize_relative_base():
    assert normalize_json_path("profiles", "default") == "profiles/default.json"


@pytest.mark.parametrize("name", ["a/b", "../default", "a.b", "default.json"])
def test_normalize_rejects_illegal_names(name):
    with pytest.raises(InvalidArgumentError):
        normalize_json_path("/tmp", name)


def test_json_round_trip(tmp_path):
    data = {"fans": ["default"], "leds": [], "performance_profile": None}
    write_json(str(tmp_path), "work", data)
    assert read_json(str(tmp_path), "work") == data
    assert (tmp_path / "work.json").is_file()


def test_write_file_and_read_file(tmp_path):
    write_file(str(tmp_path), "raw", "[1, 2]")
    assert read_file(str(tmp_path), "raw") == "[1, 2]"


def test_write_json_unserialisable_raises(tmp_path):
    with pytest.raises(FailedError):
        write_json(str(tmp_path), "bad", {1, 2})


def test_read_json_invalid_raises(tmp_path):
    write_file(str(tmp_path), "broken", b"{not json")
    with pytest.raises(FailedError):
        read_json(str(tmp_path), "broken")


def test_read_missing_raises(tmp_path):
    with pytest.raises(StorageIOError):
        read_file(str(tmp_path), "missing")


def test_remove_file(tmp_path):
    write_json(str(tmp_path), "gone", [])
    remove_file(str(tmp_path), "gone")
    assert not (tmp_path / "gone.json").exists()
    with pytest.raises(StorageIOError):
        remove_file(str(tmp_path), "gone")


def test_move_file(tmp_path):
    write_json(str(tmp_path), "old", {"k": 1})
    move_file(str(tmp_path), "old", "new")
    assert read_json(str(tmp_path), "new") == {"k": 1}
    assert not (tmp_path / "old.json").exists()


def test_list_profiles_filters_entries(tmp_path):
    write_json(str(tmp_path), "b", [])
    write_json(str(tmp_path), "a", [])
    (tmp_path / "active_profile.json").write_text("{}")
    (tmp_path / "notes.txt").write_text("x")
    (tmp_path / "sub.json").mkdir()
    assert list_profiles(str(tmp_path)) == ["a", "b"]


def test_list_profiles_missing_directory(tmp_path):
    with pytest.raises(StorageIOError):
        list_profiles(str(tmp_path / "missing"))