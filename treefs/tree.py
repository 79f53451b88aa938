"""Filesystem adapter over an in-memory entry tree.

TreeFS exposes the POSIX-like operation set driven by the bridge (readdir,
getattr, open, read, write, ...) on top of a single ``Directory`` root, and
owns the descriptor table for open entries.

Example:
    >>> fs = TreeFS()
    >>> fs.mkdir("/docs", 0o755)
    0
    >>> fs.create("/docs/notes.txt", 0o644)
    0
    >>> fd = fs.open("/docs/notes.txt", os.O_RDWR)
    >>> fs.write("/docs/notes.txt", fd, b"hello", 5, 0)
    5
    >>> fs.readdir("/docs")
    ['notes.txt']
"""

from __future__ import annotations

import logging
import os
import stat as stat_mod
import time

from .base import EntryStat
from .config import TreeFSConfig
from .descriptors import DescriptorTable
from .entry import SEP, Directory, Entry, EntryKind, File
from .errors import (
    BadDescriptor,
    EntryExists,
    EntryNotFound,
    IsDirectory,
    NoSpace,
    NotDirectory,
)

logger = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


def split_path(path: str) -> tuple[str | None, str | None]:
    """Split a path into (parent path, final component).

    The parent is ``/`` when the only separator is the first character. The
    name is None when the path ends with a separator. Both are None when
    there is no separator at all.

    >>> split_path("/foo/bar")
    ('/foo', 'bar')
    >>> split_path("/foo")
    ('/', 'foo')
    >>> split_path("/")
    ('/', None)
    """
    index = path.rfind(SEP)
    if index < 0:
        return None, None

    parent = SEP if index == 0 else path[:index]
    name = path[index + 1 :] or None
    return parent, name


def _uid() -> int:
    return os.getuid() if hasattr(os, "getuid") else 0


def _gid() -> int:
    return os.getgid() if hasattr(os, "getgid") else 0


class TreeFS:
    """In-memory filesystem driven through FUSE-style operations.

    All paths are absolute and resolved against the root directory.
    Expected failures raise ``treefs.errors.FSError`` subclasses; any other
    exception escaping an operation is a bug.

    Attributes:
        root: Root directory of the tree (owned by this filesystem).
        config: Filesystem configuration.
    """

    def __init__(
        self,
        root: Directory | None = None,
        config: TreeFSConfig | None = None,
    ):
        """Initialize the filesystem.

        Args:
            root: Existing tree to serve. Defaults to an empty root directory.
            config: Filesystem configuration. Defaults to ``TreeFSConfig()``.
        """
        self.root = root if root is not None else Directory()
        self.config = config if config is not None else TreeFSConfig()
        self.fds = DescriptorTable(recycle=self.config.recycle_descriptors)

    # -------------------------------------------------------------------------
    # Lookup helpers
    # -------------------------------------------------------------------------

    def _resolve(self, path: str) -> Entry:
        entry = self.root.get_entry(path)
        if entry is None:
            raise EntryNotFound(path)
        return entry

    def _open_entry(self, path: str, fd: int) -> Entry:
        entry = self.fds.get(fd)
        if entry is None or entry.path != path:
            raise BadDescriptor(path)
        return entry

    def _open_file(self, path: str, fd: int) -> File:
        entry = self._open_entry(path, fd)
        if entry.kind is not EntryKind.FILE:
            raise BadDescriptor(path)
        return entry  # type: ignore[return-value]

    def _open_directory(self, path: str, fd: int) -> Directory:
        entry = self._open_entry(path, fd)
        if entry.kind is not EntryKind.DIRECTORY:
            raise BadDescriptor(path)
        return entry  # type: ignore[return-value]

    def _parent_for_new(self, path: str) -> tuple[Directory, str]:
        """Resolve the parent directory of an entry about to be created."""
        if self.root.get_entry(path) is not None:
            raise EntryExists(path)

        parent_path, name = split_path(path)
        if parent_path is None or name is None:
            raise EntryNotFound(path)

        parent = self.root.get_entry(parent_path)
        if parent is None or parent.kind is not EntryKind.DIRECTORY:
            raise NotDirectory(parent_path)
        return parent, name  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Size accounting
    # -------------------------------------------------------------------------

    def total_size(self) -> int:
        """Total bytes held by all files in the tree."""
        total = 0
        pending = [self.root]
        while pending:
            directory = pending.pop()
            for entry in directory:
                if entry.kind is EntryKind.DIRECTORY:
                    pending.append(entry)  # type: ignore[arg-type]
                else:
                    total += entry.size  # type: ignore[attr-defined]
        return total

    def _check_size_limit(self, path: str, growth: int) -> None:
        limit = self.config.max_size_bytes
        if limit is None or growth <= 0:
            return

        new_total = self.total_size() + growth
        if new_total > limit:
            raise NoSpace(
                path,
                f"Tree size limit exceeded: {new_total / 1024 / 1024:.1f}MB > "
                f"{limit / 1024 / 1024:.1f}MB",
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def init(self) -> None:
        logger.info("Tree filesystem initialized (%d top-level entries)", len(self.root))

    def flush(self, path: str, fd: int) -> int:
        self._open_entry(path, fd)
        return 0

    def readdir(self, path: str) -> list[str]:
        """List child names of a directory in insertion order.

        Raises:
            EntryNotFound: If the path is missing or not a directory.
        """
        entry = self.root.get_entry(path)
        if entry is None or entry.kind is not EntryKind.DIRECTORY:
            raise EntryNotFound(path)
        return entry.names()  # type: ignore[attr-defined]

    def getattr(self, path: str) -> EntryStat:
        """Synthesize attributes for an entry.

        Unset timestamps report the current time; unset owner and group
        report the identity of the serving process.

        Raises:
            EntryNotFound: If the path does not resolve.
        """
        entry = self._resolve(path)
        now = time.time()

        if entry.kind is EntryKind.DIRECTORY:
            kind_bits = stat_mod.S_IFDIR
            perms = DEFAULT_DIR_MODE if entry.mode is None else entry.mode
            size = self.config.directory_size
            nlink = 2
        else:
            kind_bits = stat_mod.S_IFREG
            perms = DEFAULT_FILE_MODE if entry.mode is None else entry.mode
            size = entry.size  # type: ignore[attr-defined]
            nlink = 1

        return EntryStat(
            st_mode=kind_bits | perms,
            st_size=size,
            st_uid=_uid() if entry.uid is None else entry.uid,
            st_gid=_gid() if entry.gid is None else entry.gid,
            st_atime=now if entry.atime is None else entry.atime,
            st_mtime=now if entry.mtime is None else entry.mtime,
            st_ctime=now if entry.ctime is None else entry.ctime,
            st_nlink=nlink,
        )

    def truncate(self, path: str, size: int) -> int:
        entry = self._resolve(path)
        if entry.kind is EntryKind.DIRECTORY:
            raise IsDirectory(path)

        self._check_size_limit(path, size - entry.size)  # type: ignore[attr-defined]
        entry.truncate(size)  # type: ignore[attr-defined]
        logger.debug("truncate %s -> %d bytes", path, size)
        return 0

    def open(self, path: str, flags: int = os.O_RDONLY) -> int:
        """Open a file and return its descriptor.

        Raises:
            EntryNotFound: If the path does not resolve.
            IsDirectory: If the path is a directory.
        """
        entry = self._resolve(path)
        if entry.kind is EntryKind.DIRECTORY:
            raise IsDirectory(path)

        fd = self.fds.allocate(entry)
        logger.debug("open %s -> fd %d", path, fd)
        return fd

    def opendir(self, path: str, flags: int = os.O_RDONLY) -> int:
        """Open a directory and return its descriptor.

        Raises:
            NotDirectory: If the path is missing or not a directory.
        """
        entry = self.root.get_entry(path)
        if entry is None or entry.kind is not EntryKind.DIRECTORY:
            raise NotDirectory(path)

        fd = self.fds.allocate(entry)
        logger.debug("opendir %s -> fd %d", path, fd)
        return fd

    def release(self, path: str, fd: int) -> int:
        self._open_entry(path, fd)
        self.fds.release(fd)
        logger.debug("release %s fd %d", path, fd)
        return 0

    def releasedir(self, path: str, fd: int) -> int:
        self._open_directory(path, fd)
        self.fds.release(fd)
        logger.debug("releasedir %s fd %d", path, fd)
        return 0

    def read(self, path: str, fd: int, buffer: bytearray, length: int, offset: int) -> int:
        return self._open_file(path, fd).read(buffer, length, offset)

    def write(self, path: str, fd: int, buffer: bytes, length: int, offset: int) -> int:
        file = self._open_file(path, fd)
        self._check_size_limit(path, offset + min(length, len(buffer)) - file.size)
        written = file.write(buffer, length, offset)
        logger.debug("write %s fd %d: %d bytes at %d", path, fd, written, offset)
        return written

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> int:
        """Create a directory.

        Raises:
            EntryExists: If the path already resolves.
            EntryNotFound: If the path has no parent or no final component.
            NotDirectory: If the parent path is not a directory.
        """
        parent, name = self._parent_for_new(path)
        directory = parent.add_directory(name)
        directory.mode = stat_mod.S_IMODE(mode)
        logger.debug("mkdir %s (mode %o)", path, directory.mode)
        return 0

    def create(self, path: str, mode: int = DEFAULT_FILE_MODE) -> int:
        """Create an empty file. Same contract as ``mkdir``."""
        parent, name = self._parent_for_new(path)
        file = parent.add_file(name, b"")
        file.mode = stat_mod.S_IMODE(mode)
        logger.debug("create %s (mode %o)", path, file.mode)
        return 0

    # Stored attributes are reported back by getattr, never enforced.

    def chmod(self, path: str, mode: int) -> int:
        entry = self._resolve(path)
        entry.mode = stat_mod.S_IMODE(mode)
        entry.ctime = time.time()
        return 0

    def chown(self, path: str, uid: int, gid: int) -> int:
        entry = self._resolve(path)
        if uid != -1:
            entry.uid = uid
        if gid != -1:
            entry.gid = gid
        entry.ctime = time.time()
        return 0

    def utimens(self, path: str, times: tuple[float, float] | None = None) -> int:
        entry = self._resolve(path)
        if times is None:
            now = time.time()
            times = (now, now)
        entry.atime, entry.mtime = times
        return 0

    # Extended attributes are accepted but not kept.

    def setxattr(
        self, path: str, name: str, value: bytes, options: int, position: int = 0
    ) -> None:
        self._resolve(path)

    def getxattr(self, path: str, name: str, position: int = 0) -> bytes:
        self._resolve(path)
        return b""

    def listxattr(self, path: str) -> list[str]:
        self._resolve(path)
        return []

    def removexattr(self, path: str, name: str) -> None:
        self._resolve(path)
