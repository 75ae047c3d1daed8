#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


def system_search_dirs(system_root: Optional[str]) -> List[str]:
    """
    Platform directories searched before the environment path list:
    System32 and its 'downlevel' sub-directory below the system root.
    """
    if not system_root:
        return []
    system32 = os.path.join(system_root, "System32")
    return [system32, os.path.join(system32, "downlevel")]


def build_search_path(
        root_dirs: Iterable[str],
        env_path_list: Optional[str],
        separator: str = os.pathsep,
) -> Tuple[str, ...]:
    """
    Build the ordered search path: root_dirs first, then every non-empty
    segment of env_path_list split on separator.

    Duplicates are kept; the first match still wins during resolution.
    """
    dirs = list(root_dirs)
    if env_path_list:
        dirs.extend(p for p in env_path_list.split(separator) if p)
    return tuple(dirs)


@dataclass(frozen=True)
class ModuleSearchPaths:
    """
    Search configuration for binary modules.

    - directories: ordered directories consulted for bare module names

    Resolution rule: an existing file name resolves to itself; otherwise the
    preferred directory is tried, then each directory in order.
    """
    directories: Tuple[str, ...] = ()

    @staticmethod
    def from_environment(system_root: Optional[str], env_path_list: Optional[str]) -> 'ModuleSearchPaths':
        return ModuleSearchPaths(build_search_path(system_search_dirs(system_root), env_path_list))

    def resolve(self, name: str, preferred: Optional[str] = None) -> Optional[str]:
        """
        Find the first existing regular file for name.

        Search order:
          1. name itself, if it is an existing file
          2. preferred directory
          3. directories, in order

        Returns None if not found.
        """
        if not name:
            return None
        if os.path.isfile(name):
            return name

        candidates: List[str] = []
        if preferred:
            candidates.append(preferred)
        candidates.extend(self.directories)

        for directory in candidates:
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate):
                return candidate
        return None
