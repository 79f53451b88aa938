"""Build entry trees from nested mappings and JSON documents.

A tree document maps names to either file content (``str`` or ``bytes``)
or a nested mapping for a subdirectory::

    {"docs": {"readme.txt": "hello"}, "empty": {}}
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from .entry import Directory, EntryKind

TreeLayout = Mapping[str, Union[str, bytes, "TreeLayout"]]


def build_tree(layout: TreeLayout, root: Directory | None = None) -> Directory:
    """Populate ``root`` (or a new root) from a nested mapping.

    Entries are added in mapping order, so that order is what readdir
    reports afterwards.

    Raises:
        TypeError: If a value is neither content nor a mapping.
        EntryExists: If a name already exists in ``root``.
    """
    root = root if root is not None else Directory()
    _fill(root, layout)
    return root


def _fill(directory: Directory, layout: TreeLayout) -> None:
    for name, value in layout.items():
        if isinstance(value, str):
            directory.add_file(name, value.encode("utf-8"))
        elif isinstance(value, (bytes, bytearray)):
            directory.add_file(name, bytes(value))
        elif isinstance(value, Mapping):
            _fill(directory.add_directory(name), value)
        else:
            raise TypeError(
                f"Expected str, bytes or mapping for {name!r}, got {type(value).__name__}"
            )


def dump_tree(directory: Directory) -> dict[str, Any]:
    """Inverse of ``build_tree``.

    File content is returned as ``str`` when it decodes as UTF-8, otherwise
    as ``bytes``.
    """
    result: dict[str, Any] = {}
    for entry in directory:
        if entry.kind is EntryKind.DIRECTORY:
            result[entry.name] = dump_tree(entry)  # type: ignore[arg-type]
            continue
        content = bytes(entry.content)  # type: ignore[attr-defined]
        try:
            result[entry.name] = content.decode("utf-8")  # type: ignore[index]
        except UnicodeDecodeError:
            result[entry.name] = content  # type: ignore[index]
    return result


def load_tree(path: str | Path) -> Directory:
    """Build a tree from a JSON file.

    Raises:
        ValueError: If the document is not a JSON object.
    """
    with open(path, encoding="utf-8") as fh:
        document = json.load(fh)

    if not isinstance(document, dict):
        raise ValueError(f"Tree document must be a JSON object: '{path}'")
    return build_tree(document)
