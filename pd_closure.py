#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set

from pd_diagnostics import Diagnostic


def module_key(path: str) -> str:
    """Canonical key of a module path: absolute, normalized, platform case."""
    return os.path.normcase(os.path.abspath(path))


class DiscoveredSet:
    """
    Every module found so far in one run, keyed by module_key().

    add() is idempotent; its return value tells the walker whether the
    module is new (and may be expanded) or already handled.
    Iteration yields module paths in key order.
    """

    def __init__(self) -> None:
        self._paths: Dict[str, str] = {}

    def add(self, path: str) -> bool:
        key = module_key(path)
        if key in self._paths:
            return False
        self._paths[key] = os.path.abspath(path)
        return True

    def __contains__(self, path: str) -> bool:
        return module_key(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        for key in sorted(self._paths):
            yield self._paths[key]


@dataclass
class DependencyClosure:
    """
    Result of a dependency walk.

    - discovered: every module found, roots included
    - roots: keys of the modules named by the caller
    - diagnostics: recoverable problems met during the walk
    """
    discovered: DiscoveredSet = field(default_factory=DiscoveredSet)
    roots: Set[str] = field(default_factory=set)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add_root(self, path: str) -> bool:
        self.roots.add(module_key(path))
        return self.discovered.add(path)

    def is_root(self, path: str) -> bool:
        return module_key(path) in self.roots

    @property
    def dependencies(self) -> List[str]:
        """Discovered modules minus roots, in key order."""
        return [p for p in self.discovered if not self.is_root(p)]

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)
