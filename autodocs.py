import argparse
import json
import os
import sys

from analyzer import get_export, metadata_parser, path_finder, set_verbose
from scanner.config import write_default_config
from scanner.errors import AutodocsError

CONFIG_FILE = "autodocs.json"


def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)


def fail(message):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def emit(result):
    print(json.dumps(result, indent=2))


def read_source(filename):
    """Source text from a file, or stdin for '-'."""
    if filename is None or filename == "-":
        return sys.stdin.read(), os.getcwd()
    if not os.path.exists(filename):
        fail(f"File '{filename}' not found.")
    with open(filename, 'r', encoding='utf-8') as f:
        return f.read(), os.path.dirname(os.path.abspath(filename))


def cmd_metadata(args):
    emit(metadata_parser(args.path))


def cmd_path(args):
    source, base_dir = read_source(args.filename)
    emit(path_finder(source, base_dir=base_dir))


def cmd_testkit(args):
    emit(get_export(path=args.path))


def cmd_init(args):
    log("Initializing project...")
    try:
        write_default_config(CONFIG_FILE)
    except FileExistsError:
        fail(f"{CONFIG_FILE} already exists")
    log(f"Created {CONFIG_FILE}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="autodocs: static metadata for JavaScript components")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("metadata", help="Print component metadata").add_argument("path", help="Component file or directory")
    subparsers.add_parser("path", help="Print the component path of a story config").add_argument(
        "filename", nargs="?", default="-", help="Story config file (default: read from stdin)")
    subparsers.add_parser("testkit", help="Print the shape of a testkit module").add_argument("path", help="Testkit file or directory")
    subparsers.add_parser("init", help="Write default autodocs.json")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    commands = {
        "metadata": cmd_metadata,
        "path": cmd_path,
        "testkit": cmd_testkit,
        "init": cmd_init,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return

    try:
        command(args)
    except AutodocsError as e:
        fail(e)


if __name__ == "__main__":
    main()
