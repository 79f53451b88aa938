"""Request/response bridge between a kernel interface and a Filesystem.

The bridge turns each incoming filesystem request into a call on a
``Filesystem`` implementation and maps the outcome to a reply code:

- success: ``Reply(0, value)``
- an expected ``FSError``: ``Reply(-errno)``
- anything else: a fault. It is logged, and ``OperationFault`` is raised
  carrying ``Reply(-ECANCELED)`` for the caller to send before it
  propagates further.

Requests are serialized: at most one operation runs at a time, so the
tree never sees interleaved mutations.
"""

from __future__ import annotations

import asyncio
import errno
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .base import Filesystem
from .errors import FSError, Unsupported

logger = logging.getLogger(__name__)

# Operations forwarded to the filesystem.
OPERATIONS = (
    "init",
    "flush",
    "readdir",
    "truncate",
    "getattr",
    "setxattr",
    "getxattr",
    "listxattr",
    "removexattr",
    "open",
    "opendir",
    "release",
    "releasedir",
    "read",
    "write",
    "mkdir",
    "create",
    "chmod",
    "chown",
    "utimens",
)

# Operations the kernel may send that no filesystem here implements.
UNIMPLEMENTED = (
    "access",
    "statfs",
    "fgetattr",
    "fsync",
    "fsyncdir",
    "ftruncate",
    "readlink",
    "mknod",
    "unlink",
    "rename",
    "link",
    "symlink",
    "rmdir",
)


@dataclass
class Reply:
    """Outcome of one request: 0 or a negated errno, plus a payload."""

    code: int
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.code == 0


class OperationFault(Exception):
    """An operation failed outside the error taxonomy.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, name: str):
        super().__init__(f"{name}: unexpected failure")
        self.name = name
        self.reply = Reply(-errno.ECANCELED)


def _not_implemented(name: str) -> Callable[..., Any]:
    def handler(*args: Any) -> Any:
        raise Unsupported(args[0] if args else None, f"{name}: not implemented")

    handler.__name__ = name
    return handler


class OperationBridge:
    """Dispatches named filesystem requests to a Filesystem.

    Example:
        >>> bridge = OperationBridge(TreeFS())
        >>> asyncio.run(bridge.request("readdir", "/"))
        Reply(code=0, value=[])
        >>> asyncio.run(bridge.request("readdir", "/missing"))
        Reply(code=-2, value=None)
    """

    def __init__(self, fs: Filesystem):
        self.fs = fs
        self._lock = asyncio.Lock()

    def handler(self, name: str) -> Callable[..., Any]:
        """Return the callable serving operation ``name``.

        Unknown and unimplemented operations get a stub that fails with
        ENOSYS rather than silently succeeding.
        """
        if name in OPERATIONS:
            method = getattr(self.fs, name, None)
            if method is not None:
                return method
        return _not_implemented(name)

    async def request(self, name: str, *args: Any) -> Reply:
        """Run one operation and return its reply.

        Raises:
            OperationFault: If the operation raised something other than
                an FSError. The fault is logged before it is raised.
        """
        handler = self.handler(name)
        async with self._lock:
            try:
                value = handler(*args)
                if inspect.isawaitable(value):
                    value = await value
            except FSError as exc:
                logger.debug("%s%r -> %s", name, _brief(args), exc)
                return Reply(-exc.errno)
            except Exception as exc:
                logger.exception("%s%r failed unexpectedly", name, _brief(args))
                raise OperationFault(name) from exc

        return Reply(0, value)

    async def call(
        self,
        name: str,
        *args: Any,
        callback: Callable[[int, Optional[Any]], None],
    ) -> None:
        """Completion-callback form of ``request``.

        ``callback(code, value)`` is invoked exactly once. On a fault it
        receives ``-ECANCELED`` and the fault is re-raised afterwards.
        """
        try:
            reply = await self.request(name, *args)
        except OperationFault as fault:
            callback(fault.reply.code, None)
            raise
        callback(reply.code, reply.value)


def _brief(args: tuple[Any, ...]) -> tuple[Any, ...]:
    """Abbreviate buffer arguments for log lines."""
    return tuple(
        f"<{len(a)} bytes>" if isinstance(a, (bytes, bytearray, memoryview)) else a
        for a in args
    )
