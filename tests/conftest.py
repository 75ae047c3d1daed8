#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, List

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pd_closure import module_key
from pd_imports import ImportEntry, ModuleOpenError
from pd_paths import ModuleSearchPaths


class FakeImage:
    def __init__(self, enumerator: "FakeEnumerator", path: str, names: List[str]):
        self.enumerator = enumerator
        self.path = path
        self.names = names

    def imports(self):
        for name in self.names:
            yield ImportEntry(name, "SomeFunction")

    def close(self) -> None:
        self.enumerator.closed.append(module_key(self.path))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FakeEnumerator:
    """
    Import enumerator over a synthetic graph: file name (any case) -> imported names.
    Files not in the graph fail to open, like non-PE files.
    """

    def __init__(self, graph: Dict[str, List[str]]):
        self.graph = {name.lower(): names for name, names in graph.items()}
        self.opened: List[str] = []
        self.closed: List[str] = []

    def open(self, path: str) -> FakeImage:
        names = self.graph.get(os.path.basename(path).lower())
        if names is None:
            raise ModuleOpenError(path, "not a PE image")
        self.opened.append(module_key(path))
        return FakeImage(self, path, names)

    def open_count(self, path) -> int:
        return self.opened.count(module_key(str(path)))


@pytest.fixture
def write_module():
    """Write a placeholder binary named name into directory (created if needed)."""

    def _write(directory: Path, name: str, content: bytes | None = None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(content if content is not None else b"MZ" + name.encode("ascii"))
        return path

    return _write


@pytest.fixture
def system_root(tmp_path: Path) -> Path:
    root = tmp_path / "windows"
    (root / "System32" / "downlevel").mkdir(parents=True)
    return root


@pytest.fixture
def system32(system_root: Path) -> Path:
    return system_root / "System32"


@pytest.fixture
def search_paths(system32: Path) -> ModuleSearchPaths:
    return ModuleSearchPaths((str(system32),))


def has_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic carries the given code, e.g. "RES-0010"."""
    return any(d.code == code for d in diagnostics)


def keys(paths) -> set:
    return {module_key(str(p)) for p in paths}
