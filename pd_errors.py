#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations


class FatalError(RuntimeError):
    """
    A condition that aborts the whole run (bad destination, out of memory).
    Per-module problems are Diagnostics, not FatalErrors.
    """

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def format(self) -> str:
        return f"fatal: {self.message}"
