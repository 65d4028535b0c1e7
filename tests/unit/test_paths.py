from __future__ import annotations

import os
from pathlib import Path

import pytest

from jcat.infrastructure.io.codecs import CompressionKind
from jcat.infrastructure.io.paths import map_outputs, output_path_for, plan_mappings, plan_paths
from jcat.models.errors import MappingError, TraversalError
from jcat.models.run import PathMapping


def _make_tree(root: Path) -> None:
    for rel in ("b/x", "a/z", "a/y", "c"):
        (root / rel).mkdir(parents=True)
    (root / "a" / "file.json").write_text("{}", encoding="utf-8")
    (root / "top.json").write_text("{}", encoding="utf-8")


def test_plan_paths_non_recursive_returns_root_only(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    assert plan_paths(tmp_path, recursive=False) == [tmp_path]


def test_plan_paths_non_recursive_does_not_touch_filesystem(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    assert plan_paths(missing, recursive=False) == [missing]


def test_plan_paths_recursive_visits_every_directory_in_sorted_order(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    planned = plan_paths(tmp_path, recursive=True)

    assert planned == [
        tmp_path,
        tmp_path / "a",
        tmp_path / "a" / "y",
        tmp_path / "a" / "z",
        tmp_path / "b",
        tmp_path / "b" / "x",
        tmp_path / "c",
    ]


def test_plan_paths_recursive_is_deterministic(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    assert plan_paths(tmp_path, recursive=True) == plan_paths(tmp_path, recursive=True)


def test_plan_paths_recursive_leaf_root(tmp_path: Path) -> None:
    assert plan_paths(tmp_path, recursive=True) == [tmp_path]


def test_plan_paths_recursive_missing_root_raises(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(TraversalError) as excinfo:
        plan_paths(missing, recursive=True)

    assert excinfo.value.path == missing


def test_plan_paths_recursive_file_root_raises(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "file.json"
    not_a_dir.write_text("{}", encoding="utf-8")

    with pytest.raises(TraversalError):
        plan_paths(not_a_dir, recursive=True)


def test_plan_paths_does_not_loop_on_symlinked_directories(tmp_path: Path) -> None:
    (tmp_path / "a").mkdir()
    try:
        os.symlink(tmp_path, tmp_path / "a" / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    planned = plan_paths(tmp_path, recursive=True)

    assert planned == [tmp_path, tmp_path / "a"]


def test_map_outputs_preserves_relative_structure(tmp_path: Path) -> None:
    root_in = tmp_path / "in"
    root_out = tmp_path / "out"
    candidates = [root_in, root_in / "a", root_in / "a" / "b"]

    assert map_outputs(root_in, root_out, candidates) == [
        root_out,
        root_out / "a",
        root_out / "a" / "b",
    ]


def test_map_outputs_rejects_paths_outside_root(tmp_path: Path) -> None:
    root_in = tmp_path / "in"
    stray = tmp_path / "elsewhere" / "a"

    with pytest.raises(MappingError) as excinfo:
        map_outputs(root_in, tmp_path / "out", [root_in / "a", stray])

    assert excinfo.value.path == stray
    assert "unable to strip prefix" in str(excinfo.value)


def test_plan_mappings_pairs_inputs_with_outputs(tmp_path: Path) -> None:
    root_in = tmp_path / "in"
    (root_in / "a").mkdir(parents=True)
    root_out = tmp_path / "out"

    assert plan_mappings(root_in, root_out, recursive=True) == [
        PathMapping(input_dir=root_in, output_dir=root_out),
        PathMapping(input_dir=root_in / "a", output_dir=root_out / "a"),
    ]


@pytest.mark.parametrize(
    ("kind", "name"),
    [
        (CompressionKind.RAW, "out.json"),
        (CompressionKind.GZIP, "out.json.gz"),
        (CompressionKind.SNAPPY, "out.json.sz"),
        (CompressionKind.ZLIB, "out.json.zz"),
    ],
)
def test_output_path_for_extensions(kind: CompressionKind, name: str) -> None:
    assert output_path_for(Path("/tmp"), kind) == Path("/tmp") / name


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="needs a non-root POSIX user")
def test_plan_paths_unreadable_subdirectory_raises(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    locked = tmp_path / "a" / "y"
    locked.chmod(0)
    try:
        with pytest.raises(TraversalError) as excinfo:
            plan_paths(tmp_path, recursive=True)
    finally:
        locked.chmod(0o755)

    assert excinfo.value.path == locked
    assert "unable to read directory" in str(excinfo.value)
