"""Configuration for the tree filesystem and its FUSE mount.

Provides configuration dataclasses and a ``configure`` factory function.
"""

from dataclasses import dataclass


@dataclass
class TreeFSConfig:
    """Configuration for an in-memory tree filesystem.

    Attributes:
        directory_size: Nominal size reported by getattr for directories.
        recycle_descriptors: Reuse released fd slots (lowest first) instead
            of always appending a new one.
        max_size_mb: Maximum total size of all files in megabytes.
            None means unlimited.
    """

    directory_size: int = 4096
    recycle_descriptors: bool = False
    max_size_mb: int | None = None

    @property
    def max_size_bytes(self) -> int | None:
        if self.max_size_mb is None:
            return None
        return self.max_size_mb * 1024 * 1024


@dataclass
class MountConfig:
    """Configuration for exposing a tree through FUSE.

    Attributes:
        mountpoint: Directory to mount the tree on.
        foreground: Keep the FUSE loop in the calling process.
        debug: Enable FUSE debug output and DEBUG logging.
        allow_other: Let users other than the mounter access the tree.
        seed: Optional JSON file used to populate the tree before mounting.
    """

    mountpoint: str
    foreground: bool = True
    debug: bool = False
    allow_other: bool = False
    seed: str | None = None


def configure(**kwargs) -> TreeFSConfig:
    """Build a TreeFSConfig, rejecting unknown options.

    Examples:
        >>> configure()
        TreeFSConfig(directory_size=4096, recycle_descriptors=False, max_size_mb=None)

        >>> configure(recycle_descriptors=True, max_size_mb=64)
        TreeFSConfig(directory_size=4096, recycle_descriptors=True, max_size_mb=64)
    """
    directory_size = kwargs.pop("directory_size", 4096)
    recycle_descriptors = kwargs.pop("recycle_descriptors", False)
    max_size_mb = kwargs.pop("max_size_mb", None)

    if kwargs:
        raise ValueError(f"Unexpected arguments for tree fs: {list(kwargs.keys())}")

    if directory_size < 0:
        raise ValueError(f"directory_size must be non-negative, got {directory_size}")

    if max_size_mb is not None and max_size_mb < 0:
        raise ValueError(f"max_size_mb must be non-negative, got {max_size_mb}")

    return TreeFSConfig(
        directory_size=directory_size,
        recycle_descriptors=recycle_descriptors,
        max_size_mb=max_size_mb,
    )
