# src/htmlpack/core/handlers/pack_handler.py
from __future__ import annotations

import argparse
import glob
import logging
import os
from typing import List, Optional

from tqdm import tqdm

from htmlpack.core.managers.config_manager import config_manager
from packer.controllers.pack_controller import BatchPackController
from packer.model import PackError, PackResult

logger = logging.getLogger(__name__)

GLOB_CHARS = set("*?[")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="htmlpack",
        description="Pack HTML files into self-contained documents by inlining their images.",
    )
    parser.add_argument("inputs", metavar="INPUT", nargs="+", help="HTML source file(s)")
    parser.add_argument("-o", "--out-dir", dest="outdir", required=True, help="Set output directory")
    parser.add_argument("-p", "--path", dest="paths", action="append", default=None,
                        help="Set search paths for linked files")
    parser.add_argument("-w", "--overwrite", action="store_true", help="Overwrite existing output files")
    parser.add_argument("--keep-going", action="store_true",
                        help="Continue with the next input after an I/O error.")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar over the inputs.")
    parser.add_argument("--log-level", default=None, help="Log level (overrides debug.level from settings).")
    return parser


def expand_inputs(patterns: List[str]) -> List[str]:
    """Expands glob patterns the shell left alone (e.g. on Windows). Order is preserved."""
    expanded: List[str] = []
    for pattern in patterns:
        if not os.path.exists(pattern) and GLOB_CHARS.intersection(pattern):
            matches = sorted(glob.glob(pattern))
            if matches:
                expanded.extend(matches)
                continue
        expanded.append(pattern)
    return expanded


def validate_arguments(inputs: List[str], outdir: str, paths: List[str]) -> Optional[str]:
    """Returns an error message for the first invalid argument, or None."""
    for filename in inputs:
        if not os.path.isfile(filename):
            return f"The file \"{filename}\" does not exist"
    for directory in [outdir] + paths:
        if not os.path.isdir(directory):
            return f"The directory \"{directory}\" does not exist"
    return None


def _configured_search_paths() -> List[str]:
    paths = []
    for path in config_manager.get_nested("packer.search_paths", []) or []:
        if os.path.isdir(path):
            paths.append(path)
        else:
            logger.warning("Ignoring configured search path '%s': not a directory.", path)
    return paths


def _print_result(result: PackResult) -> None:
    for warning in result.warnings:
        tqdm.write(warning.message)


def handle_pack(args: List[str]) -> int:
    """
    Parses the command line and packs every input file in order.

    Returns:
        0 for success, 1 for argument errors or failed inputs.
    """
    parser = build_parser()
    try:
        pargs = parser.parse_args(args)
    except SystemExit as e:
        # --help exits with 0, usage errors with 2
        return 0 if e.code == 0 else 1

    inputs = expand_inputs(pargs.inputs)
    search_paths = list(pargs.paths or [])

    error = validate_arguments(inputs, pargs.outdir, search_paths)
    if error:
        print(error)
        return 1

    search_paths += _configured_search_paths()
    overwrite = pargs.overwrite or bool(config_manager.get_nested("packer.overwrite", False))
    stop_on_error = False if pargs.keep_going else bool(config_manager.get_nested("packer.stop_on_error", True))

    try:
        report = BatchPackController().run(
            inputs,
            pargs.outdir,
            search_paths,
            overwrite,
            stop_on_error=stop_on_error,
            show_progress=pargs.progress,
            on_start=lambda path: tqdm.write(f"packing {path}"),
            on_result=_print_result,
        )
    except PackError as e:
        logger.error("Pack failed: %s", e, exc_info=True)
        print(e)
        return 1

    for failure in report.failures:
        print(f"❌ {failure.input_path}: {failure.message}")
    return 0 if report.ok else 1
