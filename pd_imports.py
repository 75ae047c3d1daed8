"""
Import enumeration for PE images.

The dependency walker only needs one capability from a binary parser: open
a module image and list the names of the modules it imports. This module
defines that seam (ImportEnumerator / ModuleImage) and the default
implementation on top of pefile.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol

import pefile


class ModuleOpenError(Exception):
    """Raised when a module image cannot be opened or parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot open '{path}': {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class ImportEntry:
    module_name: str
    # None for imports by ordinal
    entry_point: Optional[str] = None


class ModuleImage(Protocol):
    def imports(self) -> Iterator[ImportEntry]: ...

    def close(self) -> None: ...

    def __enter__(self) -> "ModuleImage": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...


class ImportEnumerator(Protocol):
    def open(self, path: str) -> ModuleImage:
        """Open path for import enumeration; raises ModuleOpenError."""
        ...


def _decode(raw: bytes | str | None) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    return raw.decode("ascii", errors="replace")


class PeModuleImage:
    """An opened PE file. Use as a context manager; close() is idempotent."""

    def __init__(self, path: str):
        self.path = path
        try:
            self._pe = pefile.PE(path, fast_load=True)
        except (OSError, pefile.PEFormatError) as e:
            raise ModuleOpenError(path, str(e)) from e

    def imports(self) -> Iterator[ImportEntry]:
        if self._pe is None:
            raise ValueError(f"image '{self.path}' is closed")
        try:
            self._pe.parse_data_directories(
                directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_IMPORT"]]
            )
        except pefile.PEFormatError as e:
            raise ModuleOpenError(self.path, str(e)) from e

        for descriptor in getattr(self._pe, "DIRECTORY_ENTRY_IMPORT", []):
            module_name = _decode(descriptor.dll)
            if not module_name:
                continue
            if not descriptor.imports:
                yield ImportEntry(module_name)
                continue
            for symbol in descriptor.imports:
                yield ImportEntry(module_name, _decode(symbol.name))

    def close(self) -> None:
        if self._pe is not None:
            self._pe.close()
            self._pe = None

    def __enter__(self) -> "PeModuleImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class PeImportEnumerator:
    def open(self, path: str) -> PeModuleImage:
        return PeModuleImage(path)


def module_names(image: ModuleImage) -> List[str]:
    """
    Drain the image's imports into the ordered list of distinct module names.
    Entry point names are dropped.
    """
    names: List[str] = []
    seen = set()
    for entry in image.imports():
        if entry.module_name in seen:
            continue
        seen.add(entry.module_name)
        names.append(entry.module_name)
    return names
