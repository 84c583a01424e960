"""
Command-line tools for saved query responses.

- `dtable-format FILE` formats one saved response and prints it
- `dtable-shell` is an interactive shell for loading and viewing
  saved responses
"""

import argparse
import json
import logging
import sys
import select
from typing import Any, Dict, List, Optional

from .config import FormatterConfig, load_config
from .formatter import format_query_result, render_table, render_csv, format_row_count
from .schema.indexer import index_columns, describe_column
from .client.transport import load_response_file
from .utils.exceptions import DTableError
from .utils.validators import normalize_query_response

log = logging.getLogger(__name__)

OUTPUT_FORMATS = ('table', 'json', 'csv')


def has_pending_input():
    """Check if there's input waiting in stdin (indicates paste)."""
    if not sys.stdin.isatty():
        return True
    try:
        r, _, _ = select.select([sys.stdin], [], [], 0)
        return bool(r)
    except (ValueError, OSError, TypeError):
        return False


def read_line_raw(prompt, suppress_if_pending=False):
    """
    Read a line using raw stdin to avoid readline interference.

    This prevents issues with paste operations where prompts
    can get mixed into the input buffer.
    """
    if suppress_if_pending and has_pending_input():
        prompt = ""
    sys.stdout.write(prompt)
    sys.stdout.flush()
    line = sys.stdin.readline()
    if not line:  # EOF
        raise EOFError()
    return line.rstrip('\n\r')


def render_rows(rows: List[Dict[Any, Any]], output_format: str = 'table', tablefmt: str = 'grid') -> str:
    """
    Render formatted rows in one of the CLI output formats.

    Args:
        rows: Formatted rows
        output_format: 'table', 'json' or 'csv'
        tablefmt: tabulate format for 'table' output

    Returns:
        Text to print
    """
    if output_format == 'json':
        return json.dumps(rows, indent=2, ensure_ascii=False, default=str)
    elif output_format == 'csv':
        return render_csv(rows).rstrip('\n')
    return render_table(rows, tablefmt=tablefmt)


class ShellSession:
    """
    State of an interactive shell: the loaded response and its settings.

    Each .load replaces the previous response; formatting is redone from
    the raw response every time it's shown.
    """

    def __init__(self, config: FormatterConfig = None, tablefmt: str = 'grid'):
        self.config = config or FormatterConfig()
        self.tablefmt = tablefmt
        self.source: Optional[str] = None
        self.response: Any = None

    def load(self, path: str) -> int:
        """
        Load a saved response file.

        Returns:
            Number of rows in the response

        Raises:
            ResponseFormatError: If the file can't be read
        """
        response = load_response_file(path)
        self.response = response
        self.source = path
        _, rows = normalize_query_response(response)
        return len(rows)

    @property
    def loaded(self) -> bool:
        return self.source is not None

    def formatted_rows(self) -> List[Dict[Any, Any]]:
        return format_query_result(self.response, self.config)

    def column_lines(self) -> List[str]:
        columns, _ = normalize_query_response(self.response)
        return [describe_column(descriptor) for descriptor in index_columns(columns).values()]


def print_banner():
    """Print welcome banner."""
    print("=" * 60)
    print("  dtable - Query Result Shell")
    print("=" * 60)
    print("Load a saved query response and view it formatted:")
    print("  .load FILE  - Load a JSON query response")
    print("  .show       - Show formatted rows as a table")
    print("  .help       - Show help")
    print("  .exit or .quit - Exit shell")
    print("=" * 60)
    print()


def print_help():
    """Print help message."""
    print("\n--- Help ---")
    print("Commands:")
    print("  .load FILE  - Load a JSON query response ({columns, rows})")
    print("  .columns    - List columns of the loaded response")
    print("  .show       - Show formatted rows as a table")
    print("  .json       - Show formatted rows as JSON")
    print("  .csv        - Show formatted rows as CSV")
    print("  .help       - Show this help")
    print("  .exit / .quit - Exit shell")
    print()


def handle_command(command: str, session: ShellSession) -> bool:
    """
    Handle a shell command.

    Args:
        command: Command string
        session: Shell session

    Returns:
        True if should continue the shell, False to exit

    Raises:
        DTableError: If a command fails (reported by the caller)
    """
    parts = command.strip().split(maxsplit=1)
    name = parts[0].lower() if parts else ''
    argument = parts[1].strip() if len(parts) > 1 else ''

    if name in ['.exit', '.quit']:
        print("Goodbye!")
        return False

    elif name == '.help':
        print_help()

    elif name == '.load':
        if not argument:
            print("Usage: .load FILE")
        else:
            count = session.load(argument)
            print(f"Loaded {argument} {format_row_count(count)}\n")

    elif name in ['.columns', '.show', '.json', '.csv']:
        if not session.loaded:
            print("No response loaded. Use .load FILE first.\n")
        elif name == '.columns':
            lines = session.column_lines()
            if lines:
                print("\nColumns:")
                for line in lines:
                    print(f"  - {line}")
            else:
                print("\nNo columns.")
            print()
        else:
            output_format = {'.show': 'table', '.json': 'json', '.csv': 'csv'}[name]
            print(render_rows(session.formatted_rows(), output_format, session.tablefmt))
            print()

    else:
        print(f"Unknown command: {command.strip()}")
        print("Type .help for available commands\n")

    return True


def shell(session: ShellSession = None):
    """
    Run the interactive shell.

    Reads commands until .exit or EOF. Command errors are reported and
    the shell keeps going.
    """
    session = session or ShellSession(load_config())
    print_banner()

    while True:
        try:
            try:
                line = read_line_raw("dtable> ", suppress_if_pending=True).strip()
            except EOFError:
                print("\nGoodbye!")
                return

            if not line:
                continue

            if not line.startswith('.'):
                print("Commands start with '.'; type .help for available commands\n")
                continue

            try:
                if not handle_command(line, session):
                    break
            except DTableError as e:
                print(f"Error: {e}\n")
                continue

        except KeyboardInterrupt:
            print("\n\nInterrupted. Type .exit to quit.\n")
            continue


def configure_logging(level_name: str) -> None:
    """Configure root logging for the command-line tools."""
    level = getattr(logging, str(level_name).upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtable-format",
        description="Format a saved table-database query response."
    )
    parser.add_argument("file", help="JSON file with a query response ({columns, rows})")
    parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default="table",
                        help="Output format (default: table)")
    parser.add_argument("--tablefmt", default="grid", help="tabulate table format (default: grid)")
    parser.add_argument("--row-id-field", default=None, help="Row identity field (default: _id)")
    parser.add_argument("--timezone", default=None, help="IANA timezone to render dates in")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    return parser


def config_from_args(args: argparse.Namespace) -> FormatterConfig:
    return load_config({
        'row_id_field': args.row_id_field,
        'timezone': args.timezone,
        'log_level': args.log_level,
    })


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for `dtable-format`.

    Returns:
        Process exit status (0 on success, 1 if the file couldn't be used)
    """
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    configure_logging(config.log_level)

    try:
        response = load_response_file(args.file)
    except DTableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    rows = format_query_result(response, config)
    log.info("Formatted %d rows from %s", len(rows), args.file)
    print(render_rows(rows, args.output_format, args.tablefmt))
    return 0


def shell_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for `dtable-shell`."""
    parser = argparse.ArgumentParser(prog="dtable-shell", description="Interactive query result shell.")
    parser.add_argument("file", nargs="?", help="JSON query response to load on start")
    parser.add_argument("--tablefmt", default="grid", help="tabulate table format (default: grid)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    args = parser.parse_args(argv)

    config = load_config({'log_level': args.log_level})
    configure_logging(config.log_level)
    session = ShellSession(config, tablefmt=args.tablefmt)

    if args.file:
        try:
            session.load(args.file)
        except DTableError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    shell(session)
    return 0


# Entry point for running as module
if __name__ == "__main__":
    sys.exit(main())
