"""treefs: an in-memory hierarchical filesystem servable through FUSE."""

from .base import EntryStat, Filesystem
from .bridge import OperationBridge, OperationFault, Reply
from .builder import build_tree, dump_tree, load_tree
from .config import MountConfig, TreeFSConfig, configure
from .descriptors import DescriptorTable
from .entry import Directory, Entry, EntryKind, File
from .errors import (
    BadDescriptor,
    EntryExists,
    EntryNotFound,
    FSError,
    InvalidArgument,
    InvalidName,
    InvalidPath,
    IsDirectory,
    NoSpace,
    NotDirectory,
    Unsupported,
)
from .tree import TreeFS, split_path

__all__ = [
    "BadDescriptor",
    "build_tree",
    "configure",
    "DescriptorTable",
    "Directory",
    "dump_tree",
    "Entry",
    "EntryExists",
    "EntryKind",
    "EntryNotFound",
    "EntryStat",
    "File",
    "Filesystem",
    "FSError",
    "InvalidArgument",
    "InvalidName",
    "InvalidPath",
    "IsDirectory",
    "load_tree",
    "MountConfig",
    "NoSpace",
    "NotDirectory",
    "OperationBridge",
    "OperationFault",
    "Reply",
    "split_path",
    "TreeFS",
    "TreeFSConfig",
    "Unsupported",
]
