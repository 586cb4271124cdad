"""Command line front end for pathkeep.

Usage:
    pathkeep [--root DIR] [--strict] [--dir KEY=PATH ...] resolve SEGMENT...
    pathkeep sanitize NAME [--path] [--replacement R] [--max-length N]
    pathkeep glob PATTERN [--cwd DIR] [--relative] [--dot] [--ignore PATTERN]
    pathkeep check PATH

Exit status is 0 on success, 1 when ``check`` finds a path outside the root or
another pathkeep error occurs, and 2 when strict mode rejects a path.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pathkeep.config import Settings, resolve_default_root
from pathkeep.errors import BoundaryViolation, PathKeepError
from pathkeep.resolver import PathResolver
from pathkeep.security import SanitizeOptions, sanitize_filename, sanitize_path


def _parse_directories(items: Sequence[str]) -> Dict[str, str]:
    directories: Dict[str, str] = {}
    for item in items:
        key, sep, base = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--dir expects KEY=PATH, got {item!r}")
        directories[key] = base
    return directories


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pathkeep", description="Safe path resolution under a root")
    ap.add_argument("--root", default=None, help="Project root (default: $PK_ROOT or cwd)")
    ap.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject paths that leave the root (default: $PK_STRICT)",
    )
    ap.add_argument(
        "--dir",
        dest="directories",
        action="append",
        default=[],
        metavar="KEY=PATH",
        help="Register a directory key relative to the root",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve segments to an absolute path")
    p_resolve.add_argument("segments", nargs="*")
    p_resolve.add_argument("--in", dest="directory", default=None, help="Directory key")
    p_resolve.add_argument("--url", action="store_true", help="Print a file:// URL")

    p_sanitize = sub.add_parser("sanitize", help="Sanitize a filename or path")
    p_sanitize.add_argument("name")
    p_sanitize.add_argument("--path", action="store_true", help="Treat NAME as a path")
    p_sanitize.add_argument("--replacement", default="_")
    p_sanitize.add_argument("--max-length", type=int, default=255)

    p_glob = sub.add_parser("glob", help="Find files matching a glob pattern")
    p_glob.add_argument("pattern")
    p_glob.add_argument("--cwd", default=None)
    p_glob.add_argument("--relative", action="store_true")
    p_glob.add_argument("--dot", action="store_true", help="Include hidden entries")
    p_glob.add_argument("--ignore", action="append", default=[])

    p_check = sub.add_parser("check", help="Report whether PATH is inside the root")
    p_check.add_argument("path")

    return ap


def _make_resolver(args: argparse.Namespace) -> PathResolver:
    root = args.root if args.root is not None else resolve_default_root()
    strict = args.strict if args.strict is not None else Settings().strict
    return PathResolver(root, strict=strict, directories=_parse_directories(args.directories))


def _run(args: argparse.Namespace) -> int:
    if args.command == "sanitize":
        options = SanitizeOptions(replacement=args.replacement, max_length=args.max_length)
        fn = sanitize_path if args.path else sanitize_filename
        print(fn(args.name, options))
        return 0

    resolver = _make_resolver(args)
    try:
        return _run_with_resolver(args, resolver)
    finally:
        resolver.close()


def _run_with_resolver(args: argparse.Namespace, resolver: PathResolver) -> int:
    if args.command == "resolve":
        segments: List[str] = list(args.segments)
        if args.directory is not None:
            resolved = resolver.path_for(args.directory, *segments)
        else:
            resolved = resolver.resolve(*segments)
        print(Path(resolved).as_uri() if args.url else resolved)
        return 0

    if args.command == "glob":
        for match in resolver.glob(
            args.pattern,
            cwd=args.cwd,
            absolute=not args.relative,
            dot=args.dot,
            ignore=args.ignore,
        ):
            print(match)
        return 0

    inside = resolver.is_within_root(args.path)
    print("inside" if inside else "outside")
    return 0 if inside else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        return _run(args)
    except BoundaryViolation as e:
        print(f"[pathkeep] boundary violation: {e}", file=sys.stderr)
        return 2
    except (PathKeepError, argparse.ArgumentTypeError) as e:
        print(f"[pathkeep] error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
