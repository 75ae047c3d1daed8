#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import os
import sys
from typing import List, Optional, Tuple

from pd_closure import DependencyClosure
from pd_context import LogLevel, StagingContext
from pd_diagnostics import Diagnostic
from pd_errors import FatalError
from pd_imports import PeImportEnumerator
from pd_logger import log_error, log_info, log_warning
from pd_paths import ModuleSearchPaths
from pd_stage import StagingCopier, destination_folder
from pd_walker import DependencyWalker

APPLICATION_NAME = "copypedeps"
VERSION = "0.1.0"

DESCRIPTION = (
    "Copies .exe and .dll files and all their dependencies to the destination folder.\n"
    f"Version: {VERSION}"
)


def system_root_from_env() -> Optional[str]:
    return os.getenv("windir") or os.getenv("SystemRoot") or None


def print_diagnostics(diagnostics: List[Diagnostic], context: StagingContext) -> None:
    for diag in diagnostics:
        if diag.kind == "warning":
            log_warning(context, diag.format())
        else:
            log_error(context, diag.format())


def build_search_paths(context: StagingContext, system_root: Optional[str]) -> ModuleSearchPaths:
    search_paths = ModuleSearchPaths.from_environment(system_root, os.getenv("PATH"))
    log_info(context, f"System root: {system_root or '<none>'}")
    log_info(context, f"Search path: {len(search_paths.directories)} director(ies)")
    return search_paths


def build_staging_context(args: argparse.Namespace) -> StagingContext:
    """Build a StagingContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING

    return StagingContext(
        recursive=args.recursive,
        overwrite=not args.no_overwrite,
        dry_run=args.dry_run,
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
    )


def check_destination(path: str) -> str:
    """Validate the destination folder; returns it with a trailing separator."""
    if not path:
        raise FatalError("[ARG-0010] Empty destination folder name not allowed", exit_code=1)
    folder = destination_folder(path)
    if not os.path.isdir(path):
        raise FatalError(f"[ARG-0020] Destination folder not found: {folder}", exit_code=2)
    return folder


def collect(sources: List[str], context: StagingContext, system_root: Optional[str]) -> DependencyClosure:
    """Walk the dependencies of every source file."""
    search_paths = build_search_paths(context, system_root)
    walker = DependencyWalker(
        search_paths=search_paths,
        enumerator=PeImportEnumerator(),
        system_dir=system_root,
        context=context,
    )
    return walker.walk(sources)


def run(args: argparse.Namespace) -> int:
    context = build_staging_context(args)
    sources, destination = args.sources, args.destination
    try:
        folder = check_destination(destination)
    except FatalError as e:
        log_error(context, e.format())
        return e.exit_code

    system_root = system_root_from_env()
    closure = collect(sources, context, system_root)
    print_diagnostics(closure.diagnostics, context)

    copier = StagingCopier(system_dir=system_root, context=context)
    result = copier.stage(closure, folder)
    print_diagnostics(result.diagnostics, context)

    log_info(
        context,
        f"{len(result.actions)} copy action(s), {len(result.skipped)} module(s) excluded, "
        f"{len(result.diagnostics)} problem(s)",
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APPLICATION_NAME,
        usage="%(prog)s [-h|-?] [-r] [-n] [-d] [-v] [-l] srcfile [srcfile...] dstfolder",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-h", "-?", action="help", help="display command line help")
    parser.add_argument("-r", dest="recursive", action="store_true",
                        help="recursively copy dependencies")
    parser.add_argument("-n", dest="no_overwrite", action="store_true",
                        help="don't overwrite existing files")
    parser.add_argument("-d", dest="dry_run", action="store_true",
                        help="dry run: don't actually copy, just display copy actions")
    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")
    parser.add_argument("paths", nargs="*", metavar="path",
                        help="files to analyze, followed by the destination folder")
    return parser


def split_paths(argv: List[str], paths: List[str], unknown: List[str]) -> Tuple[List[str], str]:
    """
    Split the file arguments into (sources, destination).

    Dash tokens that are not options are file names too; the last command-line
    argument names the destination when it is one of them.
    """
    if unknown and (not paths or argv[-1] == unknown[-1]):
        return unknown[:-1] + paths, unknown[-1]
    return unknown + paths[:-1], paths[-1]


def main(argv=None) -> None:
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)
    args, unknown = parser.parse_known_intermixed_args(argv)

    # nothing to copy: same as asking for help
    if len(args.paths) + len(unknown) < 2:
        parser.print_help()
        raise SystemExit(0)
    args.sources, args.destination = split_paths(argv, args.paths, unknown)

    try:
        rc = run(args)
    except MemoryError:
        log_error(build_staging_context(args), "fatal: Memory allocation error")
        rc = 1
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
