"""Command-line interface for unitypackage-util.

WHY: Engine plugins and scripts need package contents without linking a
library: a subprocess call that prints JSON is the lowest common
denominator. The CLI wires the container layer, the dialect transformer,
the aggregator, the formatters and the adapters behind one command.

HOW: argparse with a positional PACKAGE followed by a required
subcommand. Each subcommand handler returns an exit code; main() maps
the error taxonomy to sysexits codes. Payloads go to stdout (or the
--output-file), status and errors go to stderr.

RULES:
- Commands: info, name, dump, debug, list, extract, xx-hash
- Missing package/entry or not a container -> exit 66 (EX_NOINPUT)
- Malformed dialect -> exit 65 (EX_DATAERR); other failures -> exit 1
- Status output goes to stderr (not stdout) so output can be piped
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from unitypackage_util import __version__, config
from unitypackage_util.adapters import base64_encode, convert_fbx2gltf, xx_hash
from unitypackage_util.core.aggregator import (
    collect_records,
    find_pathname,
    list_pathnames,
    read_package_file,
)
from unitypackage_util.core.decode import decode_asset, decode_meta
from unitypackage_util.core.errors import (
    MalformedDialectError,
    NotAContainerError,
    PackageNotFoundError,
    UnityPackageError,
)
from unitypackage_util.core.package import Package
from unitypackage_util.core.sniff import is_dialect_yaml
from unitypackage_util.formatters import FORMATTERS
from unitypackage_util.formatters.json_output import JSONFormatter

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _write_text(text: str, output_file: Optional[Path] = None) -> None:
    if not text.endswith("\n"):
        text += "\n"
    if output_file is not None:
        output_file.write_text(text, encoding="utf-8")
        _status("Saved: {}".format(output_file))
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def _write_bytes(data: bytes, output_file: Optional[Path] = None) -> None:
    if output_file is not None:
        output_file.write_bytes(data)
        _status("Saved: {}".format(output_file))
    else:
        sys.stdout.flush()
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def _open_package(args: argparse.Namespace) -> Package:
    return Package.from_path(args.package)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_info(args: argparse.Namespace) -> int:
    print("Package: {}".format(_open_package(args)))
    return config.EXIT_OK


def _cmd_name(args: argparse.Namespace) -> int:
    print(find_pathname(_open_package(args), args.guid))
    return config.EXIT_OK


def _cmd_dump(args: argparse.Namespace) -> int:
    records = collect_records(_open_package(args), keep_going=args.keep_going)
    payload = {guid: record.to_dict() for guid, record in records.items()}
    output = FORMATTERS[args.format](pretty=args.pretty).format(payload)
    _write_text(output.content)
    return config.EXIT_OK


def _cmd_debug(args: argparse.Namespace) -> int:
    def _trace(guid: str, name: str) -> None:
        print("{}/{}".format(guid, name), flush=True)

    collect_records(_open_package(args), on_entry=_trace)
    return config.EXIT_OK


def _cmd_list(args: argparse.Namespace) -> int:
    contents = list_pathnames(_open_package(args), directory=args.dir)
    if args.no_guid:
        payload = [pathname for _, pathname in contents]
    else:
        payload = [[guid, pathname] for guid, pathname in contents]
    output = FORMATTERS[args.format](pretty=args.pretty).format(payload)
    _write_text(output.content)
    return config.EXIT_OK


def _cmd_extract(args: argparse.Namespace) -> int:
    data = read_package_file(_open_package(args), args.guid, meta=args.meta)
    output_file = Path(args.output_file) if args.output_file else None

    if args.json:
        source = "{}/{}".format(args.guid, config.ASSET_META_FILE if args.meta else config.ASSET_FILE)
        if not args.meta and not is_dialect_yaml(data):
            raise MalformedDialectError("asset is not a YAML-dialect body", source=source)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDialectError("body is not valid UTF-8 text", source=source) from e

        try:
            payload = decode_meta(text) if args.meta else decode_asset(text)
        except MalformedDialectError as e:
            raise e.with_source(source) from e
        _write_text(JSONFormatter(pretty=args.pretty).format(payload).content, output_file)
        return config.EXIT_OK

    if args.fbx2gltf:
        data = convert_fbx2gltf(data)

    if args.base64:
        _write_text(base64_encode(data), output_file)
    else:
        _write_bytes(data, output_file)
    return config.EXIT_OK


def _cmd_xx_hash(args: argparse.Namespace) -> int:
    print(xx_hash(args.text))
    return config.EXIT_OK


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without opening a package.
    """
    parser = argparse.ArgumentParser(
        prog="unitypackage-util",
        description="Inspect and extract Unity packages (tar, tar.gz, or extracted folder).",
    )
    parser.add_argument("--version", action="version", version="%(prog)s {}".format(__version__))
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug information to stderr.",
    )
    parser.add_argument(
        "package",
        help="Unity Package (Tar, TarGz, or Folder).",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    info = commands.add_parser("info", help="Show package info.")
    info.set_defaults(handler=_cmd_info)

    name = commands.add_parser("name", help="Display path from guid/pathname file.")
    name.add_argument("guid")
    name.set_defaults(handler=_cmd_name)

    dump = commands.add_parser("dump", help="Dump package contents.")
    dump.add_argument("-p", "--pretty", action="store_true", help="Pretty print output.")
    dump.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        default=config.DEFAULT_OUTPUT_FORMAT,
        help="Output format (default: %(default)s).",
    )
    dump.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip entries that fail to read or decode instead of stopping.",
    )
    dump.set_defaults(handler=_cmd_dump)

    debug = commands.add_parser("debug", help="Find source of dump crashes.")
    debug.set_defaults(handler=_cmd_debug)

    list_ = commands.add_parser("list", help="List package contents.")
    list_.add_argument("-n", "--no-guid", action="store_true", help="Hide GUIDs.")
    list_.add_argument("-p", "--pretty", action="store_true", help="Pretty print output.")
    list_.add_argument("-d", "--dir", default=None, help="Directory filter.")
    list_.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        default=config.DEFAULT_OUTPUT_FORMAT,
        help="Output format (default: %(default)s).",
    )
    list_.set_defaults(handler=_cmd_list)

    extract = commands.add_parser("extract", help="Extract package file.")
    extract.add_argument("guid")
    extract.add_argument("-o", "--output-file", default=None, help="Extract to file.")
    extract.add_argument(
        "-m", "--meta",
        action="store_true",
        help="Extract /asset.meta file instead of /asset.",
    )
    extract.add_argument("-j", "--json", action="store_true", help="Process yaml to json.")
    extract.add_argument("-p", "--pretty", action="store_true", help="Pretty print JSON.")
    extract.add_argument("-f", "--fbx2gltf", action="store_true", help="Convert FBX to glTF.")
    extract.add_argument("-b", "--base64", action="store_true", help="Base64 encode output.")
    extract.set_defaults(handler=_cmd_extract)

    xx = commands.add_parser("xx-hash", help="Calculate xxhash 64 of string.")
    xx.add_argument("text")
    xx.set_defaults(handler=_cmd_xx_hash)

    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return args.handler(args)
    except (PackageNotFoundError, NotAContainerError) as e:
        _status("Error: {}".format(e))
        return config.EXIT_NOINPUT
    except MalformedDialectError as e:
        _status("Error: {}".format(e))
        return config.EXIT_DATAERR
    except UnityPackageError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        _status("Error: {}".format(e))
        return config.EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
