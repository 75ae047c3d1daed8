# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2026 gwz

"""Check Python and shell source files of copypedeps for a copyright notice."""

from __future__ import annotations

import re
import subprocess
import sys
from pathlib import Path
from typing import Iterable

COPYRIGHT_RE = re.compile(r"Copyright\s*\(c\)\s*\d{4}(?:-\d{4})?\b")
SHELL_SHEBANG_RE = re.compile(r"^#!.*\b(?:bash|sh|zsh)\b")
TARGET_SUFFIXES = {".py", ".sh"}
SKIPPED_DIRS = {".git", ".venv", "build", "dist", "__pycache__"}
MAX_SCAN_LINES = 80


def _tracked_files(repo_root: Path) -> list[Path]:
    """Files known to git, or every file below repo_root outside a checkout."""
    try:
        result = subprocess.run(
            ["git", "ls-files", "-z"],
            cwd=repo_root,
            check=True,
            capture_output=True,
            text=False,
        )
    except (OSError, subprocess.CalledProcessError):
        return [
            path for path in repo_root.rglob("*")
            if not SKIPPED_DIRS.intersection(path.relative_to(repo_root).parts)
        ]
    files = []
    for raw in result.stdout.split(b"\0"):
        if not raw:
            continue
        files.append(repo_root / raw.decode("utf-8"))
    return files


def _read_head(path: Path, max_lines: int) -> str:
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            lines = []
            for _ in range(max_lines):
                line = f.readline()
                if line == "":
                    break
                lines.append(line)
    except OSError:
        return ""
    return "".join(lines)


def _is_shell_script(path: Path) -> bool:
    if path.suffix == ".sh":
        return True
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            first = f.readline()
    except OSError:
        return False
    return bool(SHELL_SHEBANG_RE.search(first))


def _is_target_source(path: Path) -> bool:
    if path.suffix in TARGET_SUFFIXES:
        return True
    return _is_shell_script(path)


def find_missing(paths: Iterable[Path]) -> tuple[list[Path], int]:
    """Return (sources without a copyright notice, number of sources scanned)."""
    missing: list[Path] = []
    scanned = 0
    for path in paths:
        if not path.is_file():
            continue
        if not _is_target_source(path):
            continue
        scanned += 1
        if not COPYRIGHT_RE.search(_read_head(path, MAX_SCAN_LINES)):
            missing.append(path)
    return missing, scanned


def main() -> int:
    repo_root = Path(__file__).resolve().parent.parent.parent
    missing, scanned = find_missing(_tracked_files(repo_root))

    if missing:
        print("Missing copyright notice in:")
        for path in sorted(p.relative_to(repo_root).as_posix() for p in missing):
            print(f"  - {path}")
        print(f"\nChecked {scanned} files. Missing: {len(missing)}.")
        return 1

    print(f"Checked {scanned} files. All have copyright notices.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
