"""
s3helper command line.

Maps argparse subcommands onto Filestore calls. Settings come from the same
environment variables the library reads.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence

import structlog

from s3helper.filestore import Filestore
from s3helper.storage import StorageError
from s3helper.utils.env_config import get_settings
from s3helper.utils.logging_config import setup_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser."""
    parser = argparse.ArgumentParser(prog="s3helper", description="Simple file operations on an S3 bucket")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ls_parser = subparsers.add_parser("ls", help="List files in a directory")
    ls_parser.add_argument("dirpath", nargs="?", default=None, help="Directory, no leading slash")
    ls_parser.add_argument("--match", default="*", help="Filename glob (* and ?)")

    lsdir_parser = subparsers.add_parser("lsdir", help="List subdirectories of a directory")
    lsdir_parser.add_argument("dirpath", nargs="?", default=None, help="Directory, no leading slash")

    put_parser = subparsers.add_parser("put", help="Upload a local file")
    put_parser.add_argument("local", help="Local file path")
    put_parser.add_argument("key", help="Destination key")
    put_parser.add_argument("--no-clobber", action="store_true", help="Pick a free name instead of overwriting")

    get_parser = subparsers.add_parser("get", help="Download an object")
    get_parser.add_argument("key", help="Object key")
    get_parser.add_argument("local", nargs="?", default=None, help="Local file path (stdout when omitted)")

    rm_parser = subparsers.add_parser("rm", help="Delete an object")
    rm_parser.add_argument("key", help="Object key")

    mv_parser = subparsers.add_parser("mv", help="Rename an object")
    mv_parser.add_argument("source", help="Current key")
    mv_parser.add_argument("destination", help="New key")
    mv_parser.add_argument("--no-clobber", action="store_true", help="Pick a free name instead of overwriting")

    exists_parser = subparsers.add_parser("exists", help="Exit 0 when the object exists, 1 otherwise")
    exists_parser.add_argument("key", help="Object key")

    url_parser = subparsers.add_parser("url", help="Print the public URL of an object")
    url_parser.add_argument("key", help="Object key")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the s3helper CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(get_settings())

    try:
        return _run_command(args)
    except StorageError as e:
        logger.error("command failed", command=args.command, error=e.message, error_code=e.error_code)
        print(f"s3helper: {e.message}", file=sys.stderr)
        return 1


def _run_command(args: Any) -> int:
    if args.command == "ls":
        for name in Filestore.ls(args.dirpath, args.match):
            print(name)
        return 0
    if args.command == "lsdir":
        for name in Filestore.lsdir(args.dirpath):
            print(name)
        return 0
    if args.command == "put":
        if args.no_clobber:
            print(Filestore.writenc(args.key, Path(args.local)))
        else:
            Filestore.write(args.key, Path(args.local))
            print(args.key)
        return 0
    if args.command == "get":
        content = Filestore.read(args.key)
        if args.local:
            Path(args.local).write_bytes(content)
        else:
            sys.stdout.buffer.write(content)
            sys.stdout.flush()
        return 0
    if args.command == "rm":
        Filestore.delete(args.key)
        return 0
    if args.command == "mv":
        if args.no_clobber:
            print(Filestore.renamenc(args.source, args.destination))
        else:
            Filestore.rename(args.source, args.destination)
            print(args.destination)
        return 0
    if args.command == "exists":
        return 0 if Filestore.exists(args.key) else 1
    if args.command == "url":
        print(Filestore.public_url(args.key))
        return 0
    raise ValueError(f"Unsupported command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
