"""Error taxonomy for tree operations.

Every expected failure of an operation is an ``FSError``: an ``OSError``
carrying the POSIX errno the bridge reports to the kernel. Each class also
derives from the matching builtin (``FileNotFoundError`` and friends) so
callers can catch them the usual way.

Anything raised by an operation that is *not* an ``FSError`` is a bug, and
the bridge treats it as such.
"""

from __future__ import annotations

import errno


class FSError(OSError):
    """Base class for expected filesystem outcomes."""

    code: int = errno.EIO
    message: str = "Input/output error"

    def __init__(self, path: str | None = None, message: str | None = None):
        super().__init__(self.code, message or self.message, path)


class EntryNotFound(FSError, FileNotFoundError):
    code = errno.ENOENT
    message = "No such file or directory"


class EntryExists(FSError, FileExistsError):
    code = errno.EEXIST
    message = "File exists"


class IsDirectory(FSError, IsADirectoryError):
    code = errno.EISDIR
    message = "Is a directory"


class NotDirectory(FSError, NotADirectoryError):
    code = errno.ENOTDIR
    message = "Not a directory"


class BadDescriptor(FSError):
    code = errno.EBADF
    message = "Bad file descriptor"


class NoSpace(FSError):
    code = errno.ENOSPC
    message = "No space left on device"


class InvalidArgument(FSError, ValueError):
    code = errno.EINVAL
    message = "Invalid argument"


class InvalidName(InvalidArgument):
    """Entry name contains a separator or is reserved."""

    message = "Invalid entry name"


class InvalidPath(InvalidArgument):
    """Path is not absolute."""

    message = "Path must be absolute"


class Unsupported(FSError):
    """Operation the filesystem does not implement."""

    code = errno.ENOSYS
    message = "Function not implemented"
