#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
import shutil
from dataclasses import dataclass, field
from typing import List

from pd_closure import DependencyClosure, module_key
from pd_context import StagingContext
from pd_diagnostics import Diagnostic, error, warning
from pd_logger import log_debug, log_info, log_stage
from pd_sysdirs import is_under_system_directory, is_virtual_module

MIN_COPY_BUFFER = 4096


def copy_file(source: str, destination: str, overwrite: bool = True) -> None:
    """
    Copy source to destination byte for byte, then give destination the
    source's access and modification times.

    With overwrite=False an existing destination raises FileExistsError.
    Copying a file onto itself raises shutil.SameFileError before anything is opened.
    A destination created by this call is removed again if the copy fails.
    Raises OSError on any I/O failure.
    """
    if os.path.exists(destination) and os.path.samefile(source, destination):
        raise shutil.SameFileError(f"{source} and {destination} are the same file")
    source_stat = os.stat(source)
    buffer_size = max(MIN_COPY_BUFFER, getattr(source_stat, "st_blksize", 0) or 0)

    with open(source, "rb") as src:
        dst = open(destination, "wb" if overwrite else "xb")
        try:
            with dst:
                shutil.copyfileobj(src, dst, buffer_size)
        except BaseException:
            try:
                os.unlink(destination)
            except OSError:
                pass
            raise

    os.utime(destination, ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns))


def destination_folder(path: str) -> str:
    """path with a trailing separator appended if it has none."""
    if path.endswith(os.sep) or (os.altsep is not None and path.endswith(os.altsep)):
        return path
    return path + os.sep


@dataclass(frozen=True)
class CopyAction:
    source: str
    destination: str

    def format(self) -> str:
        return f"{self.source} -> {self.destination}"


@dataclass
class StageResult:
    """
    Outcome of staging a closure.

    - actions: copies performed (or, in a dry run, that would be performed)
    - copied: destinations actually written
    - skipped: modules left out by the system or virtual-module rules
    - diagnostics: recoverable problems, one per module at most
    """
    actions: List[CopyAction] = field(default_factory=list)
    copied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)


class StagingCopier:
    """Copies the dependencies of a closure (never its roots) into one folder."""

    def __init__(self, system_dir: str | None = None, context: StagingContext | None = None):
        self.system_dir = system_dir
        self.context = context or StagingContext.default()

    def stage(self, closure: DependencyClosure, destination: str) -> StageResult:
        result = StageResult()
        folder = destination_folder(destination)
        log_stage(self.context, "Staging dependencies into", folder)
        # targets a dry run would have written, keyed like the discovered set
        planned = set()

        for source in closure.dependencies:
            if is_under_system_directory(source, self.system_dir):
                log_debug(self.context, f"Skipping system module {source}")
                result.skipped.append(source)
                continue
            if is_virtual_module(source):
                log_debug(self.context, f"Skipping virtual module {source}")
                result.skipped.append(source)
                continue

            target = folder + os.path.basename(source)
            if os.path.exists(target) and os.path.samefile(source, target):
                result.diagnostics.append(
                    warning(f"[STG-0030] Source and destination are the same file: {target}")
                )
                continue
            exists = os.path.isfile(target) or module_key(target) in planned
            if not self.context.overwrite and exists:
                result.diagnostics.append(warning(f"[STG-0010] Not overwriting existing file: {target}"))
                continue

            action = CopyAction(source, target)
            result.actions.append(action)
            if self.context.dry_run:
                planned.add(module_key(target))
                print(action.format())
                continue

            try:
                copy_file(source, target, self.context.overwrite)
            except OSError as e:
                result.diagnostics.append(
                    error(f"[STG-0020] Error copying {source} to {target}: {e.strerror or e}")
                )
                continue
            result.copied.append(target)
            log_info(self.context, f"Copied {action.format()}")

        return result
