"""jsrb CLI: translate an ESTree JSON document into Ruby."""

from __future__ import annotations

import json
import logging
import sys

from .backend.ruby import RubyBackend
from .backend.util import BufferContractError
from .corrections import ConfigurationError, CorrectionTable, load_corrections
from .estree import UnsupportedNodeError, load

PHASES: list[str] = ["emit", "correct"]

USAGE: str = """\
jsrb [OPTIONS] [INPUT] [-o OUTPUT]

Translate a JavaScript AST (ESTree JSON, e.g. from @babel/parser or acorn)
into Ruby. Reads INPUT, or stdin when INPUT is omitted.

Options:
  --corrections FILE  Use the correction table in FILE (JSON object)
  --stop-at PHASE     Stop after phase: emit, correct
  -o, --output FILE   Write output to FILE instead of stdout
  -v, --verbose       Log each correction pass to stderr
  -h, --help          Show this help message
"""


class _Args:
    def __init__(self) -> None:
        self.input_file: str | None = None
        self.output_file: str | None = None
        self.corrections_file: str | None = None
        self.stop_at: str = "correct"
        self.verbose: bool = False


def parse_args(argv: list[str]) -> tuple[_Args | None, int]:
    """Parse command-line arguments. Returns (args, exit_code); args is None to stop."""
    result = _Args()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return (None, 0)
        elif arg in ("--corrections", "--stop-at", "-o", "--output"):
            if i + 1 >= len(argv):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                return (None, 2)
            value = argv[i + 1]
            if arg == "--corrections":
                result.corrections_file = value
            elif arg == "--stop-at":
                if value not in PHASES:
                    print("error: unknown phase '" + value + "'", file=sys.stderr)
                    return (None, 2)
                result.stop_at = value
            else:
                result.output_file = value
            i += 2
        elif arg == "--verbose" or arg == "-v":
            result.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            return (None, 2)
        else:
            if result.input_file is not None:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
                return (None, 2)
            result.input_file = arg
            i += 1
    return (result, 0)


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None and input_file != "-":
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        return (raw.decode("utf-8"), 0)
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(output)
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    sys.stdout.write(output)
    return 0


def run_pipeline(source: str, table: CorrectionTable | None, stop_at: str) -> tuple[int, str]:
    """Decode, translate and correct. Returns (exit_code, output)."""
    try:
        document = json.loads(source)
    except ValueError as e:
        print("error: input is not valid JSON: " + str(e), file=sys.stderr)
        return (1, "")
    if not isinstance(document, dict):
        print("error: input must be an ESTree node object", file=sys.stderr)
        return (1, "")
    backend = RubyBackend(table)
    try:
        root = load(document)
        if stop_at == "emit":
            return (0, backend.generate(root))
        return (0, backend.parse(root))
    except UnsupportedNodeError as e:
        print(str(e), file=sys.stderr)
        return (1, "")
    except BufferContractError as e:
        print("error: internal: " + str(e), file=sys.stderr)
        return (1, "")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args, code = parse_args(argv if argv is not None else sys.argv[1:])
    if args is None:
        return code
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    table: CorrectionTable | None = None
    if args.corrections_file is not None:
        try:
            table = load_corrections(args.corrections_file)
        except ConfigurationError as e:
            print("error: " + str(e), file=sys.stderr)
            return 1
    source, err = read_source(args.input_file)
    if err != 0:
        return err
    if len(source.strip()) == 0:
        print("error: no input provided", file=sys.stderr)
        return 2
    exit_code, output = run_pipeline(source, table, args.stop_at)
    if exit_code != 0:
        return exit_code
    return write_output(output, args.output_file)


if __name__ == "__main__":
    sys.exit(main())
