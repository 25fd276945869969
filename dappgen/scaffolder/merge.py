"""Dotted-path deep merge for JSON configuration files.

Several steps (and the wrapped tools themselves) write to the same JSON
manifests.  Each step contributes a flat ``{"a.b.c": value}`` update set and
``merge_into`` is the only place those updates meet the file on disk:

* the existing document is flattened to ``{("a", "b", "c"): leaf}``; lists
  and empty objects are leaves, so arrays are replaced wholesale;
* each update replaces the leaf at its path together with anything nested
  below it or sitting on one of its prefixes;
* the result is unflattened and an optional structured overlay is
  shallow-merged over the top level.

Flattening works on key tuples, so existing keys that contain a ``.`` (for
example a ``socket.io`` dependency) are written back unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dappgen.utils import load_json, save_json

KeyPath = tuple[str, ...]


def flatten(document: Mapping[str, Any]) -> dict[KeyPath, Any]:
    """Flatten a nested mapping into ``{key_path: leaf}``."""
    flat: dict[KeyPath, Any] = {}

    def _walk(node: Mapping[str, Any], prefix: KeyPath) -> None:
        for key, value in node.items():
            path = prefix + (key,)
            if isinstance(value, Mapping) and value:
                _walk(value, path)
            else:
                flat[path] = value

    _walk(document, ())
    return flat


def unflatten(flat: Mapping[KeyPath, Any]) -> dict[str, Any]:
    """Rebuild a nested dict from ``{key_path: leaf}``."""
    root: dict[str, Any] = {}
    for path, value in flat.items():
        node = root
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value
    return root


def _overlaps(a: KeyPath, b: KeyPath) -> bool:
    shorter = min(len(a), len(b))
    return a[:shorter] == b[:shorter]


def merge_documents(
    document: Mapping[str, Any],
    flat_updates: Mapping[str, Any],
    structured_overlay: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Return *document* with *flat_updates* and *structured_overlay* applied.

    Args:
        document: The existing nested document.  Not modified.
        flat_updates: Updates keyed by dotted path (``"expo.ios.bundleIdentifier"``).
        structured_overlay: Nested mapping merged over the top level; colliding
            top-level keys are replaced entirely.
    """
    merged = flatten(document)
    for dotted, value in flat_updates.items():
        path: KeyPath = tuple(dotted.split("."))
        for existing in [p for p in merged if p != path and _overlaps(p, path)]:
            del merged[existing]
        # An exact match is assigned in place so key order is stable.
        merged[path] = value

    result = unflatten(merged)
    if structured_overlay:
        result.update(structured_overlay)
    return result


def _read_document(file_path: Path) -> dict[str, Any]:
    if not file_path.exists():
        return {}
    return load_json(file_path)


async def merge_into(
    file_path: str | Path,
    flat_updates: Mapping[str, Any],
    structured_overlay: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge updates into the JSON file at *file_path* and write it back.

    A missing file is treated as an empty document.  Invalid JSON
    (``json.JSONDecodeError``) or a non-object top level (``ValueError``)
    propagates to the caller.

    Returns:
        The document that was written.
    """
    path = Path(file_path)
    document = await asyncio.to_thread(_read_document, path)
    result = merge_documents(document, flat_updates, structured_overlay)
    await save_json(result, path)
    return result
