#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
# -*- coding: utf-8 -*-
#

import io
import logging
import os
import pathlib
import re
import sys
from typing import Callable, Iterable, TextIO

import coloredlogs
from termcolor import colored as c

from movie_info import MovieEntry, split_extension

LOG = logging.getLogger(__name__)

EXTENSIONS: tuple[str, ...] = ("mkv", "mp4", "webm")

MATCHED = "matched"
IGNORED = "ignored"
FAILED = "failed"


def natural_sort(items: Iterable) -> list:
    def convert(text):
        return int(text) if text.isdigit() else text.lower()

    def alphanum_key(key):
        return [convert(c) for c in re.split("([0-9]+)", str(key))]

    return sorted(items, key=alphanum_key)


def visit_dir(
    directory: str | os.PathLike, callback: Callable[[pathlib.Path], object]
) -> None:
    """
    Recursively walk a directory and call the callback for every non directory entry.

    :param directory: Directory to walk, silently skipped if it's not a directory.
    :param callback: Called with the path of each file.

    :raises OSError: If a directory can't be listed, the walk stops there.
    """
    directory = pathlib.Path(directory)
    if not directory.is_dir():
        return

    LOG.debug(f"Scanning '{directory}'.")

    for entry in natural_sort(directory.iterdir()):
        if entry.is_dir():
            visit_dir(entry, callback)
        else:
            callback(entry)


def process(file: pathlib.Path, output: TextIO | None = None) -> str:
    """
    Extract the movie info of a single file and write it as a JSON line.

    Files without any extension are not filtered and go through extraction.

    :param file: The file to process.
    :param output: Stream for the JSON line, defaults to stdout.

    :return: One of MATCHED, IGNORED or FAILED.
    """
    _, ext = split_extension(file.name)
    if ext is not None and ext not in EXTENSIONS:
        LOG.warning(f"ignored: {c(str(file), 'yellow')}")
        return IGNORED

    entry = MovieEntry.from_path(file)
    if not entry:
        LOG.warning(f"movie info extraction failed: {c(str(file), 'yellow')}")
        return FAILED

    print(entry.to_json(), file=output or sys.stdout, flush=True)
    return MATCHED


def scan(
    roots: Iterable[str | os.PathLike], output: TextIO | None = None
) -> dict[str, int]:
    """
    Scan each root directory independently.

    A root that fails to be read is logged and the remaining roots are still scanned.

    :param roots: Directories to scan.
    :param output: Stream for the JSON lines, defaults to stdout.

    :return: Counters for parsed, matched, ignored, failed files and aborted roots.
    """
    stats = {"parsed": 0, MATCHED: 0, IGNORED: 0, FAILED: 0, "errors": 0}

    def handle(file: pathlib.Path) -> None:
        stats["parsed"] += 1
        stats[process(file, output)] += 1

    for root in roots:
        try:
            visit_dir(root, handle)
        except OSError as e:
            stats["errors"] += 1
            LOG.error(f"Scanning '{c(str(root), 'yellow')}' aborted: {e}")

    return stats


def cli(argv: list[str] | None = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Extract movie info from file paths.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    opt_input = parser.add_argument_group("Input")
    opt_input.add_argument(
        "roots", nargs="*", default=[], help="Directories to scan."
    )

    log_grp = parser.add_argument_group("Logging")
    log_grp.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug messages."
    )
    log_grp.add_argument(
        "-l",
        "--log",
        type=str,
        choices=["DEBUG", "INFO", "WARNING"],
        help="Log level",
        default="INFO",
    )

    args = parser.parse_args(argv).__dict__

    # JSON lines are UTF-8 whatever the locale says.
    if isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding="utf-8")

    loglevel: str = "DEBUG" if args.get("verbose") else args.get("log")
    coloredlogs.install(
        level=getattr(logging, loglevel.upper()),
        stream=sys.stderr,
        datefmt="%H:%M:%S",
        fmt="%(asctime)s [%(levelname)-5.5s] %(message)s",
    )

    stats = scan(args.get("roots"))

    LOG.info(
        f"Total files parsed: '{c(stats['parsed'],'cyan')}', matched: '{c(stats[MATCHED],'cyan')}', "
        f"ignored: '{c(stats[IGNORED],'cyan')}', failed: '{c(stats[FAILED],'cyan')}'."
    )

    return 0


if __name__ == "__main__":
    sys.exit(cli())
