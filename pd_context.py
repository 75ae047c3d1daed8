"""
Staging context for cross-cutting run options.

This module defines the StagingContext dataclass which holds the options
that affect several stages of a run (dependency walk, staging, logging).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    """Hierarchical logging levels for copypedeps."""
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class StagingContext:
    """
    Holds the run options shared by the dependency walker and the staging copier.

    Attributes:
        recursive:          If True, dependencies of dependencies are expanded too.
        overwrite:          If False, existing destination files are left alone.
        dry_run:            If True, copy actions are only reported.
        max_depth:          Optional limit on expansion depth below a root (None = unlimited).
        log_rich_format:    If True, emit logs in rich format: timestamps and log level.
        log_level:          Current logging level.
    """
    recursive: bool = False
    overwrite: bool = True
    dry_run: bool = False
    max_depth: Optional[int] = None
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'StagingContext':
        """Create a StagingContext with default settings."""
        return StagingContext(log_level=LogLevel.WARNING)
