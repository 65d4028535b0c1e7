"""Directory discovery and input -> output path planning."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from jcat.infrastructure.io.codecs import CompressionKind, extension_for
from jcat.models.errors import MappingError, TraversalError
from jcat.models.run import PathMapping

OUTPUT_BASE_NAME = "out"


def _list_subdirs(directory: Path) -> list[Path]:
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise TraversalError(f"unable to read directory {directory}", path=directory) from exc
    return sorted(entry for entry in entries if entry.is_dir())


def plan_paths(root: Path, recursive: bool) -> list[Path]:
    """Return the input directories to concatenate, in a deterministic order.

    Non-recursive mode yields ``[root]`` as-is. Recursive mode walks the tree
    depth-first (pre-order), visiting sorted subdirectories, and includes
    ``root`` and every directory beneath it exactly once.
    """

    if not recursive:
        return [root]

    planned: list[Path] = []
    seen: set[Path] = set()
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            key = current.resolve(strict=True)
        except OSError as exc:
            raise TraversalError(f"no such directory {current}", path=current) from exc
        if key in seen:
            continue
        seen.add(key)

        subdirs = _list_subdirs(current)
        planned.append(current)
        stack.extend(reversed(subdirs))

    return planned


def map_outputs(root_in: Path, root_out: Path, candidates: Sequence[Path]) -> list[Path]:
    """Re-root every candidate directory from ``root_in`` onto ``root_out``."""

    outputs: list[Path] = []
    for candidate in candidates:
        try:
            relative = candidate.relative_to(root_in)
        except ValueError as exc:
            raise MappingError(
                f"unable to strip prefix {root_in} of path {candidate}",
                path=candidate,
            ) from exc
        outputs.append(root_out / relative)
    return outputs


def plan_mappings(root_in: Path, root_out: Path, recursive: bool) -> list[PathMapping]:
    candidates = plan_paths(root_in, recursive)
    outputs = map_outputs(root_in, root_out, candidates)
    return [PathMapping(input_dir=src, output_dir=dst) for src, dst in zip(candidates, outputs)]


def output_path_for(output_dir: Path, kind: CompressionKind) -> Path:
    """Return ``<output_dir>/out.<extension>`` for ``kind``."""

    return output_dir / f"{OUTPUT_BASE_NAME}.{extension_for(kind)}"


__all__ = [
    "OUTPUT_BASE_NAME",
    "map_outputs",
    "output_path_for",
    "plan_mappings",
    "plan_paths",
]
