"""
Logging utilities for copypedeps.

This module provides logging functions that respect the StagingContext
flags (log level and rich format).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from pd_context import StagingContext, LogLevel


def log(context: StagingContext, log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context admits the given level.

    Args:
        context:    The staging context containing the logging level.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        return
    prefix = ""
    if context.log_rich_format:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = {
            LogLevel.ERROR: f"{timestamp} [ERROR] ",
            LogLevel.WARNING: f"{timestamp} [WARNING] ",
            LogLevel.INFO: f"{timestamp} [INFO] ",
            LogLevel.DEBUG: f"{timestamp} [DEBUG] ",
        }.get(log_level, "")
    if context.log_level >= log_level:
        print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: StagingContext, message: str) -> None:
    """
    Log an error-level message if logging level is ERROR or higher.

    Args:
        context: The staging context containing logging level.
        message: The message to log.
    """
    log(context, LogLevel.ERROR, message)


def log_warning(context: StagingContext, message: str) -> None:
    """Log a warning-level message; shown unless the level is ERROR."""
    log(context, LogLevel.WARNING, message)


def log_info(context: StagingContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: StagingContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: StagingContext, stage: str, module: Optional[str] = None) -> None:
    """
    Log the start of a run stage.

    Args:
        context: The staging context containing logging flags.
        stage: The name of the stage (e.g., "Expanding", "Staging").
        module: Optional module path being processed.
    """
    if module:
        log(context, LogLevel.INFO, f"{stage} '{module}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
