"""
System-directory and virtual-module exclusion rules.

Modules below the platform's protected system directory are assumed to be
present on every target, so they are neither expanded nor staged. API-set
modules ("api-ms-win-*") are resolved virtually by the loader and never
exist as real files worth copying.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from typing import Optional

VIRTUAL_MODULE_PREFIX = "api-ms-win"


def _canonical(path: str) -> str:
    # strict: a path that cannot be resolved raises OSError
    return os.path.normcase(os.path.realpath(path, strict=True))


def _is_separator(ch: str) -> bool:
    return ch == os.sep or (os.altsep is not None and ch == os.altsep)


def is_under_system_directory(path: str, system_dir: Optional[str]) -> bool:
    """
    True if path's canonical form lies inside system_dir's canonical form.

    If either path cannot be canonicalized the answer is False: the file is
    treated as a regular dependency and left to the caller.
    """
    if not path or not system_dir:
        return False
    try:
        full_path = _canonical(path)
        full_system = _canonical(system_dir)
    except (OSError, ValueError):
        return False
    if not full_path.startswith(full_system):
        return False
    if len(full_path) == len(full_system):
        return True
    # the root directory itself already ends with a separator
    if _is_separator(full_system[-1]):
        return True
    return _is_separator(full_path[len(full_system)])


def is_virtual_module(path: str) -> bool:
    """True if the file name of path starts with the API-set prefix (any case)."""
    name = os.path.basename(path)
    return name.lower().startswith(VIRTUAL_MODULE_PREFIX)
