"""The list of digests of news items that have been read."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from newscheck.feed import Entry
from newscheck.term import print_warning

HASH_SIZE = 16


class ReadList:
    """Concatenated 16-byte digests of entries already read."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)

    def _digests(self) -> Iterator[bytes]:
        for start in range(0, len(self._data), HASH_SIZE):
            chunk = bytes(self._data[start:start + HASH_SIZE])
            if len(chunk) == HASH_SIZE:
                yield chunk

    def __contains__(self, entry: Entry) -> bool:
        digest = entry.digest()
        return any(chunk == digest for chunk in self._digests())

    def __len__(self) -> int:
        return len(self._data) // HASH_SIZE

    @classmethod
    def load(cls, path: str | Path, overwrite: bool = False) -> ReadList:
        """Read the list at ``path``, creating an empty file if needed."""
        path = Path(path)
        if overwrite:
            path.write_bytes(b"")
            return cls()
        try:
            return cls(path.read_bytes())
        except FileNotFoundError:
            path.write_bytes(b"")
            return cls()

    def add(self, entry: Entry) -> None:
        """Mark ``entry`` as read."""
        if entry not in self:
            self._data.extend(entry.digest())

    def unread(self, entries: Iterable[Entry]) -> list[Entry]:
        """Return the entries not yet read, in their original order."""
        return [entry for entry in entries if entry not in self]

    def save(self, path: str | Path) -> None:
        """Write the list to ``path``."""
        try:
            Path(path).write_bytes(bytes(self._data))
        except PermissionError:
            print_warning(
                'Could not write to the read list. You must be in the "newscheck" group to do this.'
            )
            raise

    def to_bytes(self) -> bytes:
        return bytes(self._data)