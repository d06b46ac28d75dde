"""Command-line entry point: pack or unpack one mod tree."""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional

from modpacker.config import env
from modpacker.config.settings import load_tool_paths
from modpacker.core.errors import InvariantViolation, ModPackerError, PipelineCancelled
from modpacker.core.logger import set_level, setup_logger
from modpacker.pipeline import ModPackPipeline, ModUnpackPipeline
from modpacker.tools import Toolchain

logger = setup_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVARIANT = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modpacker",
        description="Pack a mod source tree into a distributable mod, or unpack one back into source form",
    )
    parser.add_argument("-s", "--source", type=Path, required=True, help="Mod folder to read")
    parser.add_argument("-d", "--destination", type=Path, required=True, help="Folder to write; it is cleared first")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-p", "--pack", action="store_true", help="Build archives from a source tree")
    mode.add_argument("-u", "--unpack", action="store_true", help="Expand archives into a source tree")

    parser.add_argument(
        "--path-json",
        type=Path,
        default=None,
        help="Tool settings file (default: path.json next to the program, created if missing)",
    )
    parser.add_argument("--prefix", default=None, help="Prefix header written into every build manifest")
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=env.MAX_WORKERS,
        help="Build units packed and signed in parallel (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Seconds an external tool may run (default: {env.TOOL_TIMEOUT})",
    )
    parser.add_argument(
        "--allow-nested-units",
        action="store_true",
        help="Ignore build manifests nested inside another build unit instead of failing",
    )
    parser.add_argument("--progress", action="store_true", help="Show progress bars")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def run(args: argparse.Namespace, cancel_flag: Optional[threading.Event] = None) -> None:
    tool_paths = load_tool_paths(args.path_json)
    toolchain = Toolchain.from_settings(tool_paths, prefix=args.prefix, timeout=args.timeout)

    if args.pack:
        pipeline = ModPackPipeline(
            toolchain,
            max_workers=args.jobs,
            cancel_flag=cancel_flag,
            allow_nested_units=args.allow_nested_units,
            show_progress=args.progress,
        )
        pipeline.pack(args.source, args.destination)
    else:
        ModUnpackPipeline(toolchain, cancel_flag=cancel_flag).unpack(args.source, args.destination)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    mode = "pack" if args.pack else "unpack"
    cancel_flag = threading.Event()
    try:
        run(args, cancel_flag)
    except KeyboardInterrupt:
        cancel_flag.set()
        logger.warning("Interrupted, %s aborted", mode)
        return EXIT_CANCELLED
    except PipelineCancelled as e:
        logger.warning(f"{mode.capitalize()} cancelled: {e}")
        return EXIT_CANCELLED
    except InvariantViolation as e:
        logger.error_trace(f"Internal error during {mode}: {e}")
        return EXIT_INVARIANT
    except (ModPackerError, OSError) as e:
        logger.error(f"{mode.capitalize()} failed: {e}")
        return EXIT_FAILURE

    logger.info(f"{mode.capitalize()} finished: {args.destination}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
