"""Entry tree: directories and files held in memory.

A tree is a root ``Directory`` owning its children. Children only keep a
weak reference back to their parent, which is used to derive ``path``.
"""

from __future__ import annotations

import enum
import time
import weakref
from typing import Iterator

from .errors import EntryExists, InvalidArgument, InvalidName, InvalidPath

SEP = "/"

_RESERVED_NAMES = frozenset({"", ".", ".."})


class EntryKind(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"


class Entry:
    """A named node of the tree.

    Attributes:
        name: Entry name, ``None`` for the root.
        mode: Stored permission bits, or ``None`` to report the default.
        uid: Stored owner id, or ``None`` for the serving process's uid.
        gid: Stored group id, or ``None`` for the serving process's gid.
        atime: Stored access time (epoch seconds), or ``None`` for "now".
        mtime: Stored modification time, or ``None`` for "now".
        ctime: Stored change time, or ``None`` for "now".
    """

    kind: EntryKind

    def __init__(self, parent: Directory | None = None, name: str | None = None):
        if parent is not None and (name is None or name in _RESERVED_NAMES):
            raise InvalidName(name, f"Invalid entry name: {name!r}")
        if name is not None and SEP in name:
            raise InvalidName(name, f"{self.kind.value.capitalize()} name cannot include a /")

        self._parent = weakref.ref(parent) if parent is not None else None
        self._name = name

        self.mode: int | None = None
        self.uid: int | None = None
        self.gid: int | None = None
        self.atime: float | None = None
        self.mtime: float | None = None
        self.ctime: float | None = None

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def parent(self) -> Directory | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def path(self) -> str:
        if self.is_root:
            return SEP
        parent = self._parent()
        if parent is None:
            raise ReferenceError(f"parent of {self._name!r} no longer exists")

        parent_path = parent.path
        if parent_path == SEP:
            return parent_path + self._name
        return parent_path + SEP + self._name

    def touch(self) -> None:
        """Record a content change."""
        now = time.time()
        self.mtime = now
        self.ctime = now

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


class File(Entry):
    """A file entry backed by a byte buffer."""

    kind = EntryKind.FILE

    def __init__(self, parent: Directory | None, name: str | None, content: bytes = b""):
        super().__init__(parent, name)
        self._content = bytearray(content)

    @property
    def content(self) -> bytearray:
        return self._content

    @property
    def size(self) -> int:
        return len(self._content)

    def read(self, buffer: bytearray | memoryview, length: int, offset: int) -> int:
        """Copy up to ``length`` bytes at ``offset`` into the start of ``buffer``.

        Reads are bounded by the end of the content and by the size of
        ``buffer``; bytes of ``buffer`` past the copied count are left alone.

        Returns:
            Number of bytes copied.
        """
        _check_non_negative(length=length, offset=offset)
        count = max(0, min(length, len(buffer), len(self._content) - offset))
        if count:
            buffer[:count] = self._content[offset : offset + count]
        return count

    def write(self, buffer: bytes | bytearray | memoryview, length: int, offset: int) -> int:
        """Copy ``length`` bytes of ``buffer`` into the content at ``offset``.

        Content grows to ``offset + length`` if needed; a gap between the old
        end and ``offset`` is zero-filled.

        Returns:
            Number of bytes written.
        """
        _check_non_negative(length=length, offset=offset)
        data = bytes(memoryview(buffer)[:length])
        end = offset + len(data)
        if end > len(self._content):
            self._content.extend(bytes(end - len(self._content)))
        self._content[offset:end] = data
        self.touch()
        return len(data)

    def truncate(self, size: int) -> None:
        """Resize content to exactly ``size`` bytes, zero-filling growth."""
        _check_non_negative(size=size)
        current = len(self._content)
        if size < current:
            del self._content[size:]
        elif size > current:
            self._content.extend(bytes(size - current))
        self.touch()


class Directory(Entry):
    """A directory entry: an ordered collection of uniquely named children."""

    kind = EntryKind.DIRECTORY

    def __init__(self, parent: Directory | None = None, name: str | None = None):
        super().__init__(parent, name)
        self._entries: list[Entry] = []

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    @property
    def directories(self) -> list[Directory]:
        return [e for e in self._entries if e.kind is EntryKind.DIRECTORY]  # type: ignore[misc]

    @property
    def files(self) -> list[File]:
        return [e for e in self._entries if e.kind is EntryKind.FILE]  # type: ignore[misc]

    def names(self) -> list[str]:
        return [e.name for e in self._entries]  # type: ignore[misc]

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, name: str) -> Entry | None:
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def add_directory(self, name: str) -> Directory:
        """Append a new child directory.

        Raises:
            EntryExists: If a child with this name already exists.
            InvalidName: If ``name`` is empty, reserved or contains ``/``.
        """
        self._check_free(name)
        directory = Directory(self, name)
        self._entries.append(directory)
        return directory

    def add_file(self, name: str, content: bytes = b"") -> File:
        """Append a new child file holding ``content``.

        Raises:
            EntryExists: If a child with this name already exists.
            InvalidName: If ``name`` is empty, reserved or contains ``/``.
        """
        self._check_free(name)
        file = File(self, name, content)
        self._entries.append(file)
        return file

    def get_entry(self, path: str) -> Entry | None:
        """Resolve an absolute path below this directory.

        ``"/"`` is this directory itself. A missing component, or a file
        where a directory is expected, resolves to ``None``.

        Raises:
            InvalidPath: If ``path`` does not start with ``/``.
        """
        if not path.startswith(SEP):
            raise InvalidPath(path)
        if path == SEP:
            return self
        return self._walk(path.split(SEP)[1:])

    def _walk(self, parts: list[str]) -> Entry | None:
        current: Entry = self
        for part in parts:
            if current.kind is not EntryKind.DIRECTORY:
                return None
            child = current.find(part)  # type: ignore[attr-defined]
            if child is None:
                return None
            current = child
        return current

    def _check_free(self, name: str) -> None:
        if self.find(name) is not None:
            raise EntryExists(name)


def _check_non_negative(**values: int) -> None:
    for key, value in values.items():
        if value < 0:
            raise InvalidArgument(None, f"{key} must be non-negative, got {value}")
