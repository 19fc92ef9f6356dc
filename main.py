#!/usr/bin/env python3
"""
PLC - A small statically typed procedural language with a tree-walking interpreter.

Usage:
    plc <file.plc>              Analyze and run the program
    plc <file.plc> --check      Only run semantic checks
    plc <file.plc> --ast        Print the parsed AST (for debugging)
"""

import argparse
import json
import sys
from pathlib import Path

from tatsu.exceptions import FailedParse
from tatsu.util import asjson

from plc.PlcAnalyzer import PlcAnalyzer
from plc.PlcErrors import PlcError
from plc.PlcInterpreter import PlcInterpreter
from plc.PlcParser import parser

# Version
VERSION = "0.1.0"


# Colors for terminal output
class Colors:
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"


def color_enabled():
    """Check if colors should be enabled."""
    return sys.stdout.isatty() and sys.stderr.isatty()


def c(text, color):
    """Colorize text if colors are enabled."""
    if color_enabled():
        return f"{color}{text}{Colors.ENDC}"
    return text


def get_header():
    """One-line program header for the help text."""
    name = c(f"plc {VERSION}", Colors.CYAN + Colors.BOLD)
    return f"{name}  {c('a small typed language with a tree-walking interpreter', Colors.DIM)}"


def print_error(msg):
    """Print an error message."""
    print(c("error:", Colors.RED + Colors.BOLD), msg, file=sys.stderr)


def print_warning(msg):
    """Print a warning message."""
    print(c("warning:", Colors.YELLOW + Colors.BOLD), msg, file=sys.stderr)


def print_info(msg):
    """Print an info message."""
    print(c("info:", Colors.CYAN + Colors.BOLD), msg, file=sys.stderr)


def print_success(msg):
    """Print a success message."""
    print(c("✓", Colors.GREEN + Colors.BOLD), msg, file=sys.stderr)


def print_help():
    """Print custom help message with proper alignment."""
    if color_enabled():
        Y = Colors.YELLOW + Colors.BOLD  # Options
        G = Colors.GREEN  # Args
        C = Colors.CYAN + Colors.BOLD  # Headers
        D = Colors.DIM  # Dim
        E = Colors.ENDC  # End
    else:
        Y = G = C = D = E = ""

    print(f"""{get_header()}

{C}Usage:{E} plc {G}FILE{E} [{Y}OPTIONS{E}]

{C}Arguments:{E}
  {G}FILE{E}                   PLC source file (.plc)

{C}Options:{E}
  {Y}-h{E}, {Y}--help{E}             Show this help message and exit
  {Y}-v{E}, {Y}--version{E}          Show version and exit
  {Y}--check{E}                Only run semantic checks
  {Y}--ast{E}                  Print the parsed AST
  {Y}--no-color{E}             Disable colored output
  {Y}-q{E}, {Y}--quiet{E}            Suppress info messages

{C}Examples:{E}
  {D}${E} plc hello.plc                  {D}# Run the program{E}
  {D}${E} plc hello.plc {Y}--check{E}          {D}# Check for errors{E}

{C}Types:{E}
  {G}Nil{E}  {G}Any{E}  {G}Comparable{E}  {G}Boolean{E}  {G}Integer{E}  {G}Decimal{E}  {G}Character{E}  {G}String{E}

{D}The exit status is the Integer returned by main().{E}
""")


def parse_args(argv=None):
    """Parse command line arguments."""
    argv = sys.argv[1:] if argv is None else argv
    if "-h" in argv or "--help" in argv:
        print_help()
        sys.exit(0)

    if "-v" in argv or "--version" in argv:
        print(f"plc {VERSION} - A small typed language with a tree-walking interpreter")
        sys.exit(0)

    arg_parser = argparse.ArgumentParser(prog="plc", add_help=False)
    arg_parser.add_argument("file", metavar="FILE")
    arg_parser.add_argument("--check", action="store_true")
    arg_parser.add_argument("--ast", action="store_true")
    arg_parser.add_argument("--no-color", action="store_true")
    arg_parser.add_argument("--quiet", "-q", action="store_true")

    return arg_parser.parse_args(argv)


def read_source(file_path: Path) -> str:
    """Read a source file, exiting with a message when it cannot be read."""
    try:
        with open(file_path, "r") as f:
            return f.read()
    except FileNotFoundError:
        print_error(f"file not found: {file_path}")
        sys.exit(1)
    except PermissionError:
        print_error(f"permission denied: {file_path}")
        sys.exit(1)


def parse_source(source: str, file_path: Path):
    """Parse source text into a PLC tree."""
    try:
        return parser.parse(source)
    except FailedParse as e:
        print_error(f"parse error in {file_path}")
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    args = parse_args(argv)

    if args.no_color:
        global color_enabled
        color_enabled = lambda: False

    file_path = Path(args.file)
    if not file_path.suffix == ".plc":
        print_warning(f"file does not have .plc extension: {file_path}")

    source = read_source(file_path)
    tree = parse_source(source, file_path)

    if args.ast:
        print(json.dumps(asjson(tree), indent=2, default=str))
        sys.exit(0)

    try:
        PlcAnalyzer().analyze(tree)
    except PlcError as e:
        print_error(f"semantic error in {file_path}")
        print(f"  {c('→', Colors.RED)} {e}", file=sys.stderr)
        sys.exit(1)

    if args.check:
        print_success(f"no errors in {file_path}")
        sys.exit(0)

    if not args.quiet:
        print(c("─" * 40, Colors.DIM), file=sys.stderr)

    try:
        result = PlcInterpreter().run(tree)
    except PlcError as e:
        print_error(f"runtime error in {file_path}")
        print(f"  {c('→', Colors.RED)} {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print_info(f"main() returned {result}")
    sys.exit(result)


if __name__ == "__main__":
    main()
