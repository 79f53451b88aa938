"""Attribute record and the operation interface driven by the bridge.

Defines the contract between a filesystem implementation (TreeFS) and the
kernel-facing bridge that calls it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Protocol, TypeVar, Union, runtime_checkable

T = TypeVar("T")

# Operations may answer directly or hand back something to await.
MaybeAwaitable = Union[T, Awaitable[T]]


@dataclass
class EntryStat:
    """Attributes of a single file or directory, as reported by ``getattr``.

    Field names follow ``os.stat_result`` so the record can be handed to
    FUSE bindings unchanged (see ``as_dict``).

    Attributes:
        st_mode: File type and permission bits.
        st_size: Size in bytes (a nominal block size for directories).
        st_uid: Owner id.
        st_gid: Group id.
        st_atime: Last access time, seconds since the epoch.
        st_mtime: Last modification time, seconds since the epoch.
        st_ctime: Last status change time, seconds since the epoch.
        st_nlink: Number of links (2 for directories, 1 for files).
    """

    st_mode: int
    st_size: int
    st_uid: int
    st_gid: int
    st_atime: float
    st_mtime: float
    st_ctime: float
    st_nlink: int = 1

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@runtime_checkable
class Filesystem(Protocol):
    """Operations the bridge forwards to a filesystem implementation.

    Each operation takes an absolute ``/``-rooted path first. Expected
    failures are signalled by raising ``treefs.errors.FSError``; results
    may be returned directly or as an awaitable.
    """

    def init(self) -> MaybeAwaitable[None]:
        """Called once at mount time."""
        ...

    def flush(self, path: str, fd: int) -> MaybeAwaitable[int]:
        ...

    def readdir(self, path: str) -> MaybeAwaitable[list[str]]:
        ...

    def truncate(self, path: str, size: int) -> MaybeAwaitable[int]:
        ...

    def getattr(self, path: str) -> MaybeAwaitable[EntryStat]:
        ...

    def setxattr(
        self, path: str, name: str, value: bytes, options: int, position: int = 0
    ) -> MaybeAwaitable[None]:
        ...

    def getxattr(self, path: str, name: str, position: int = 0) -> MaybeAwaitable[bytes]:
        ...

    def listxattr(self, path: str) -> MaybeAwaitable[list[str]]:
        ...

    def removexattr(self, path: str, name: str) -> MaybeAwaitable[None]:
        ...

    def open(self, path: str, flags: int) -> MaybeAwaitable[int]:
        ...

    def opendir(self, path: str, flags: int) -> MaybeAwaitable[int]:
        ...

    def release(self, path: str, fd: int) -> MaybeAwaitable[int]:
        ...

    def releasedir(self, path: str, fd: int) -> MaybeAwaitable[int]:
        ...

    def create(self, path: str, mode: int) -> MaybeAwaitable[int]:
        ...

    def read(
        self, path: str, fd: int, buffer: bytearray, length: int, offset: int
    ) -> MaybeAwaitable[int]:
        ...

    def write(
        self, path: str, fd: int, buffer: bytes, length: int, offset: int
    ) -> MaybeAwaitable[int]:
        ...

    def mkdir(self, path: str, mode: int) -> MaybeAwaitable[int]:
        ...

    def chmod(self, path: str, mode: int) -> MaybeAwaitable[int]:
        ...

    def chown(self, path: str, uid: int, gid: int) -> MaybeAwaitable[int]:
        ...

    def utimens(
        self, path: str, times: tuple[float, float] | None = None
    ) -> MaybeAwaitable[int]:
        ...
