"""Expose a tree filesystem through FUSE (fusepy).

fusepy calls ``TreeOperations`` from its own worker threads. Every call is
submitted as a request to an ``OperationBridge`` running on an event loop
thread, and the calling thread blocks on the resulting future.

The loop thread is started from ``init``, which libfuse calls in the
serving process. When mounting in the background libfuse forks first, and
a thread started before the fork does not exist in the child.

Importing this module loads libfuse, so it is kept out of the package
namespace and only imported by the command line entry point.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import threading
from typing import Any

from fuse import FUSE, FuseOSError, Operations

from .base import Filesystem
from .bridge import OperationBridge, OperationFault
from .config import MountConfig

logger = logging.getLogger(__name__)


class TreeOperations(Operations):
    """fusepy operations backed by an OperationBridge."""

    def __init__(self, bridge: OperationBridge):
        self.bridge = bridge
        self.loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the bridge loop thread in the current process, once."""
        with self._lock:
            if self.running:
                return
            self.loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self.loop.run_forever, name="treefs-bridge", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            if self._thread is None:
                return
            if self._thread.is_alive():
                self.loop.call_soon_threadsafe(self.loop.stop)
                self._thread.join()
            self.loop.close()
            self.loop = None
            self._thread = None

    def _call(self, name: str, *args: Any) -> Any:
        self.start()
        future = asyncio.run_coroutine_threadsafe(self.bridge.request(name, *args), self.loop)
        try:
            reply = future.result()
        except OperationFault as fault:
            # Already logged by the bridge; the kernel only sees ECANCELED.
            raise FuseOSError(-fault.reply.code) from fault
        if not reply.ok:
            raise FuseOSError(-reply.code)
        return reply.value

    def __call__(self, op: str, *args: Any) -> Any:
        if not hasattr(self, op):
            raise FuseOSError(errno.ENOSYS)
        return getattr(self, op)(*args)

    def init(self, path: str) -> None:
        self.start()
        self._call("init")

    def destroy(self, path: str) -> None:
        logger.info("Unmounted")
        self.stop()

    def getattr(self, path: str, fh: int | None = None) -> dict[str, Any]:
        return self._call("getattr", path).as_dict()

    def readdir(self, path: str, fh: int) -> list[str]:
        return [".", ".."] + self._call("readdir", path)

    def open(self, path: str, flags: int) -> int:
        return self._call("open", path, flags)

    def opendir(self, path: str) -> int:
        return self._call("opendir", path, 0)

    def release(self, path: str, fh: int) -> int:
        return self._call("release", path, fh)

    def releasedir(self, path: str, fh: int) -> int:
        return self._call("releasedir", path, fh)

    def flush(self, path: str, fh: int) -> int:
        return self._call("flush", path, fh)

    def read(self, path: str, size: int, offset: int, fh: int) -> bytes:
        buffer = bytearray(size)
        count = self._call("read", path, fh, buffer, size, offset)
        return bytes(buffer[:count])

    def write(self, path: str, data: bytes, offset: int, fh: int) -> int:
        return self._call("write", path, fh, data, len(data), offset)

    def truncate(self, path: str, length: int, fh: int | None = None) -> int:
        return self._call("truncate", path, length)

    def mkdir(self, path: str, mode: int) -> int:
        return self._call("mkdir", path, mode)

    def create(self, path: str, mode: int, fi: Any = None) -> int:
        # The kernel expects create to hand back an open descriptor.
        self._call("create", path, mode)
        return self._call("open", path, 0)

    def chmod(self, path: str, mode: int) -> int:
        return self._call("chmod", path, mode)

    def chown(self, path: str, uid: int, gid: int) -> int:
        return self._call("chown", path, uid, gid)

    def utimens(self, path: str, times: tuple[float, float] | None = None) -> int:
        return self._call("utimens", path, times)

    def setxattr(self, path: str, name: str, value: bytes, options: int, position: int = 0) -> int:
        self._call("setxattr", path, name, value, options, position)
        return 0

    def getxattr(self, path: str, name: str, position: int = 0) -> bytes:
        return self._call("getxattr", path, name, position)

    def listxattr(self, path: str) -> list[str]:
        return self._call("listxattr", path)

    def removexattr(self, path: str, name: str) -> int:
        self._call("removexattr", path, name)
        return 0

    # Reported as not implemented by the bridge.

    def access(self, path: str, amode: int) -> int:
        return self._call("access", path, amode)

    def statfs(self, path: str) -> dict[str, Any]:
        return self._call("statfs", path)

    def readlink(self, path: str) -> str:
        return self._call("readlink", path)

    def mknod(self, path: str, mode: int, dev: int) -> int:
        return self._call("mknod", path, mode, dev)

    def unlink(self, path: str) -> int:
        return self._call("unlink", path)

    def rmdir(self, path: str) -> int:
        return self._call("rmdir", path)

    def rename(self, old: str, new: str) -> int:
        return self._call("rename", old, new)

    def link(self, target: str, source: str) -> int:
        return self._call("link", target, source)

    def symlink(self, target: str, source: str) -> int:
        return self._call("symlink", target, source)

    def fsync(self, path: str, datasync: int, fh: int) -> int:
        return self._call("fsync", path, datasync, fh)

    def fsyncdir(self, path: str, datasync: int, fh: int) -> int:
        return self._call("fsyncdir", path, datasync, fh)


def mount(fs: Filesystem, config: MountConfig) -> None:
    """Mount ``fs`` at ``config.mountpoint`` and serve until unmounted."""
    operations = TreeOperations(OperationBridge(fs))
    logger.info("Mounting tree filesystem at %s", config.mountpoint)
    try:
        FUSE(
            operations,
            config.mountpoint,
            foreground=config.foreground,
            allow_other=config.allow_other,
            debug=config.debug,
        )
    finally:
        operations.stop()
