#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Optional


DIAGNOSTIC_CODE_FAMILIES = {
    "ARG": [
        "ARG-0010",  # empty destination folder name (fatal)
        "ARG-0020",  # destination folder not found (fatal)
        "ARG-0030",  # source file not found
    ],
    "RES": [
        "RES-0010",  # import not found in preferred directory or search path
    ],
    "PE": [
        "PE-0010",   # module image could not be opened for import enumeration
    ],
    "WLK": [
        "WLK-0010",  # expansion depth limit reached
    ],
    "STG": [
        "STG-0010",  # existing destination file not overwritten
        "STG-0020",  # copy failed
        "STG-0030",  # dependency already lives in the destination folder
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None  # module the condition was found in

    def format(self) -> str:
        loc = f"{self.filename}: " if self.filename is not None else ""
        return f"{loc}{self.kind}: {self.message}"

    @property
    def code(self) -> Optional[str]:
        """The bracketed diagnostic code embedded in the message, if any."""
        if not self.message.startswith("["):
            return None
        end = self.message.find("]")
        if end < 0:
            return None
        return self.message[1:end]


def error(message: str, filename: Optional[str] = None) -> Diagnostic:
    return Diagnostic(kind="error", message=message, filename=filename)


def warning(message: str, filename: Optional[str] = None) -> Diagnostic:
    return Diagnostic(kind="warning", message=message, filename=filename)
