"""Command line entry point: mount an in-memory tree.

Usage:
    python -m treefs /tmp/mnt
    python -m treefs /tmp/mnt --seed tree.json --debug
"""

from __future__ import annotations

import argparse
import logging
import sys

from .builder import load_tree
from .config import MountConfig, configure
from .tree import TreeFS

logger = logging.getLogger("treefs")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="treefs",
        description="Mount an in-memory filesystem tree through FUSE.",
    )
    parser.add_argument("mountpoint", help="Directory to mount on")
    parser.add_argument("--seed", help="JSON document used to populate the tree")
    parser.add_argument("--debug", action="store_true", help="Verbose FUSE and log output")
    parser.add_argument("--background", action="store_true", help="Detach after mounting")
    parser.add_argument("--allow-other", action="store_true", help="Allow access by other users")
    parser.add_argument(
        "--recycle-fds",
        action="store_true",
        help="Reuse released file descriptor numbers",
    )
    parser.add_argument("--max-size-mb", type=int, default=None, help="Cap total file bytes")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    mount_config = MountConfig(
        mountpoint=args.mountpoint,
        foreground=not args.background,
        debug=args.debug,
        allow_other=args.allow_other,
        seed=args.seed,
    )
    fs_config = configure(recycle_descriptors=args.recycle_fds, max_size_mb=args.max_size_mb)

    root = load_tree(mount_config.seed) if mount_config.seed else None
    fs = TreeFS(root, fs_config)

    # Imported here: loading fusepy requires libfuse on the host.
    from .mount import mount

    try:
        mount(fs, mount_config)
    except RuntimeError as exc:
        logger.error("Mount failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
