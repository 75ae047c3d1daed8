#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set

from pd_closure import DependencyClosure, module_key
from pd_context import StagingContext
from pd_diagnostics import Diagnostic, error, warning
from pd_imports import ImportEnumerator, ModuleOpenError, PeImportEnumerator, module_names
from pd_logger import log_debug, log_info, log_stage
from pd_paths import ModuleSearchPaths
from pd_sysdirs import is_under_system_directory, is_virtual_module


@dataclass
class _Frame:
    """One module being expanded: its path, remaining import names, depth below the root."""
    path: str
    pending: Iterator[str]
    depth: int

    @property
    def preferred_dir(self) -> str:
        return os.path.dirname(os.path.abspath(self.path))


class DependencyWalker:
    """
    Dependency walker:
      - open a module image and list its imports
      - resolve each import (module's own directory first, then search path)
      - record every resolved module once in the closure
      - in recursive mode, expand newly found modules outside the system directory

    Entry points:
      - add_root(path): register and expand one root module.
      - walk(paths): process all roots and return the closure.

    Expansion is depth-first over an explicit stack, so the visiting order is
    that of a recursive walk while the depth is bounded only by the heap.
    """

    def __init__(
        self,
        search_paths: ModuleSearchPaths | None = None,
        enumerator: ImportEnumerator | None = None,
        system_dir: str | None = None,
        context: StagingContext | None = None,
    ):
        self.search_paths = search_paths or ModuleSearchPaths()
        self.enumerator = enumerator or PeImportEnumerator()
        self.system_dir = system_dir
        self.context = context or StagingContext.default()
        self.closure = DependencyClosure()
        # Keys of modules whose imports were already listed.
        self._expanded: Set[str] = set()
        # Shallowest depth each module was reached at; a module first met past
        # max_depth is expanded once a shorter path to it turns up.
        self._depths: Dict[str, int] = {}
        self._depth_warnings: Dict[str, Diagnostic] = {}

    # --- Public API ---

    def walk(self, paths: Iterable[str]) -> DependencyClosure:
        for path in paths:
            self.add_root(path)
        log_info(
            self.context,
            f"Walk complete: {len(self.closure.discovered)} module(s) discovered, "
            f"{len(self.closure.roots)} root(s)",
        )
        return self.closure

    def add_root(self, path: str) -> bool:
        """
        Register path as a root module and expand it.

        Returns False (and records a diagnostic) if path is not an existing file.
        """
        if not os.path.isfile(path):
            self.closure.diagnostics.append(error(f"[ARG-0030] File not found: {path}"))
            return False

        self.closure.add_root(path)
        log_stage(self.context, "Expanding root", path)
        self._expand(path)
        return True

    # --- Internal helpers ---

    def _expand(self, root: str) -> None:
        key = module_key(root)
        if self._reached_shallower(key, 0):
            self._expanded.discard(key)
        self._reached(key, 0)
        self._clear_depth_warning(key)
        names = self._list_imports(root)
        if names is None:
            return

        stack: List[_Frame] = [_Frame(root, iter(names), 0)]
        while stack:
            frame = stack[-1]
            name = next(frame.pending, None)
            if name is None:
                stack.pop()
                continue

            path = self._resolve_import(frame, name)
            if path is None:
                continue
            depth = frame.depth + 1
            key = module_key(path)
            if self.closure.discovered.add(path):
                log_debug(self.context, f"Found '{name}' -> {path}")
            elif not self._reached_shallower(key, depth):
                # already listed, and expanded if it ever will be
                continue
            else:
                log_debug(self.context, f"Reached '{path}' again at depth {depth}")
                self._expanded.discard(key)
            self._reached(key, depth)

            if not self._should_expand(path, depth):
                continue
            child_names = self._list_imports(path)
            if child_names is not None:
                stack.append(_Frame(path, iter(child_names), depth))

    def _reached(self, key: str, depth: int) -> None:
        self._depths[key] = min(depth, self._depths.get(key, depth))

    def _reached_shallower(self, key: str, depth: int) -> bool:
        """True if a depth-limited walk now reaches key closer to a root than before."""
        if self.context.max_depth is None or not self.context.recursive:
            return False
        return key in self._depths and depth < self._depths[key]

    def _clear_depth_warning(self, key: str) -> None:
        diag = self._depth_warnings.pop(key, None)
        if diag is not None:
            self.closure.diagnostics.remove(diag)

    def _list_imports(self, path: str) -> Optional[List[str]]:
        key = module_key(path)
        if key in self._expanded:
            log_debug(self.context, f"Module '{path}' already expanded")
            return None
        self._expanded.add(key)

        try:
            with self.enumerator.open(path) as image:
                names = module_names(image)
        except ModuleOpenError as e:
            self.closure.diagnostics.append(error(f"[PE-0010] {e.reason}", filename=path))
            return None

        log_debug(self.context, f"Module '{path}' imports {len(names)} module(s)")
        return names

    def _resolve_import(self, frame: _Frame, name: str) -> Optional[str]:
        path = self.search_paths.resolve(name, preferred=frame.preferred_dir)
        if path is not None:
            return path
        if is_virtual_module(name):
            log_debug(self.context, f"Virtual module '{name}' not found, ignored")
        else:
            self.closure.diagnostics.append(
                warning(f"[RES-0010] unable to locate '{name}' in search path", filename=frame.path)
            )
        return None

    def _should_expand(self, path: str, depth: int) -> bool:
        if not self.context.recursive:
            return False
        if is_under_system_directory(path, self.system_dir):
            log_debug(self.context, f"Not expanding system module {path}")
            return False
        key = module_key(path)
        max_depth = self.context.max_depth
        if max_depth is not None and depth > max_depth:
            if key not in self._depth_warnings:
                diag = warning(f"[WLK-0010] depth limit {max_depth} reached, imports not followed", filename=path)
                self._depth_warnings[key] = diag
                self.closure.diagnostics.append(diag)
            return False
        self._clear_depth_warning(key)
        return True
