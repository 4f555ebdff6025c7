from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

import pytest

from newscheck.feed import Entry
from newscheck.read_list import HASH_SIZE, ReadList

TS = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
FIRST = Entry("First", "one", TS)
SECOND = Entry("Second", "two", TS)


def test_load_missing_creates_file(tmp_path):
    path = tmp_path / "data"
    read_list = ReadList.load(path)
    assert read_list.to_bytes() == b""
    assert path.exists()
    assert path.read_bytes() == b""


def test_load_existing(tmp_path):
    path = tmp_path / "data"
    path.write_bytes(FIRST.digest())
    read_list = ReadList.load(path)
    assert FIRST in read_list
    assert SECOND not in read_list


def test_overwrite_truncates(tmp_path):
    path = tmp_path / "data"
    path.write_bytes(FIRST.digest())
    read_list = ReadList.load(path, True)
    assert read_list.to_bytes() == b""
    assert path.read_bytes() == b""


def test_load_directory_fails(tmp_path):
    with pytest.raises(OSError):
        ReadList.load(tmp_path)


def test_add_is_idempotent():
    read_list = ReadList()
    read_list.add(FIRST)
    read_list.add(FIRST)
    assert read_list.to_bytes() == FIRST.digest()
    assert len(read_list) == 1


def test_unread_filters_and_keeps_order():
    read_list = ReadList()
    third = Entry("Third", "three", TS)
    read_list.add(SECOND)
    assert read_list.unread([FIRST, SECOND, third]) == [FIRST, third]


def test_partial_trailing_chunk_ignored():
    digest = FIRST.digest()
    read_list = ReadList(digest + digest[:5])
    assert FIRST in read_list
    read_list.add(SECOND)
    assert read_list.to_bytes() == digest + digest[:5] + SECOND.digest()


def test_misaligned_digest_not_matched():
    read_list = ReadList(b"\x00" * 3 + FIRST.digest())
    assert FIRST not in read_list
    assert read_list.unread([FIRST]) == [FIRST]


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "data"
    read_list = ReadList()
    read_list.add(FIRST)
    read_list.add(SECOND)
    read_list.save(path)
    loaded = ReadList.load(path)
    assert loaded.to_bytes() == read_list.to_bytes()
    assert len(loaded.to_bytes()) == 2 * HASH_SIZE
    assert loaded.unread([FIRST, SECOND]) == []


def test_save_permission_denied_warns(tmp_path, capsys):
    read_list = ReadList()
    with mock.patch.object(Path, "write_bytes", side_effect=PermissionError("denied")):
        with pytest.raises(PermissionError):
            read_list.save(tmp_path / "data")
    assert '"newscheck" group' in capsys.readouterr().err