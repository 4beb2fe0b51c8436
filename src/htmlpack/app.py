# src/htmlpack/app.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from htmlpack.core.handlers.pack_handler import handle_pack
from htmlpack.core.managers.config_manager import config_manager
from htmlpack.core.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)


def _requested_log_level(argv: List[str]) -> Optional[str]:
    """Peeks at --log-level before the full parse so logging is ready first."""
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--log-level", default=None)
    known, _ = pre.parse_known_args(argv)
    return known.log_level


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for running htmlpack from the command line."""
    argv = list(sys.argv[1:] if argv is None else argv)
    level = _requested_log_level(argv) or config_manager.get_nested("debug.level", "ERROR")
    configure_logger(level)
    logger.debug("Starting htmlpack with arguments: %s", argv)
    return handle_pack(argv)


if __name__ == "__main__":
    sys.exit(main())
