# linecalc_cli.py
"""
Interactive shell for the left-to-right calculator.

The shell owns everything the core does not: reading lines (prompt_toolkit with
history on a terminal, plain line reads when input is piped), recognizing the
quit signal, skipping empty lines, printing results and errors, configuration
and logging. The core in linecalc only ever sees one non-empty line at a time.

Configuration comes from the environment (a .env file is honored) and can be
overridden from the command line:

    LINECALC_PROMPT        prompt string (default "calc> ")
    LINECALC_HISTORY_FILE  prompt_toolkit history file (default: in-memory)
    LINECALC_LOG_LEVEL     logging level name (default WARNING)
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Protocol, TextIO, Tuple

from dotenv import find_dotenv, load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from pydantic import BaseModel, ValidationError, field_validator

from linecalc import format_result, tokenize, try_evaluate, CalcError

logger = logging.getLogger(__name__)

QUIT_COMMAND = "q"
EMPTY_INPUT_MESSAGE = "input is empty. input q to exit."
EXIT_MESSAGE = "exiting..."

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# --------------------------
# Configuration
# --------------------------

class CalcSettings(BaseModel):
    """Shell settings, validated."""
    prompt: str = "calc> "
    history_file: Optional[str] = None
    log_level: str = "WARNING"

    @field_validator('history_file')
    @classmethod
    def expand_history_path(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return os.path.expanduser(v.strip())

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}', expected one of {', '.join(_LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "CalcSettings":
        """Build settings from LINECALC_* variables, then apply non-None overrides.

        The .env file is looked up from the working directory; variables already
        set in the environment win over it.
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))
        values: Dict[str, Any] = {}
        env_names = {
            'prompt': "LINECALC_PROMPT",
            'history_file': "LINECALC_HISTORY_FILE",
            'log_level': "LINECALC_LOG_LEVEL",
        }
        for field, env_name in env_names.items():
            value = os.getenv(env_name)
            if value is not None:
                values[field] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

# --------------------------
# Line sources
# --------------------------

class LineSource(Protocol):
    """Anything that hands the REPL one line per call and raises EOFError when done."""

    def read_line(self, prompt: str) -> str:
        ...


class PromptLineSource:
    """Reads lines from the terminal through prompt_toolkit, with history."""

    def __init__(self, history_file: Optional[str] = None):
        history = FileHistory(history_file) if history_file else InMemoryHistory()
        self.session = PromptSession(history=history)

    def read_line(self, prompt: str) -> str:
        return self.session.prompt(prompt)


class StreamLineSource:
    """Reads lines from a text stream such as piped stdin. Prints no prompt."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def read_line(self, prompt: str) -> str:
        line = self.stream.readline()
        if not line:
            raise EOFError()
        return line.rstrip("\r\n")


def make_line_source(settings: CalcSettings, stdin: Optional[TextIO] = None) -> LineSource:
    """Interactive source on a terminal, plain stream reads otherwise."""
    stdin = stdin if stdin is not None else sys.stdin
    if stdin.isatty():
        return PromptLineSource(settings.history_file)
    logger.info("stdin is not a terminal, reading lines without prompt")
    return StreamLineSource(stdin)

# --------------------------
# REPL
# --------------------------

class REPL:
    """Read-Eval-Print Loop: prompt, evaluate, print, until 'q' or end of input."""

    def __init__(self, source: LineSource, settings: Optional[CalcSettings] = None):
        self.source = source
        self.settings = settings or CalcSettings()
        self.evaluated = 0
        self.failed = 0

    def handle_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single non-empty line. Returns (ok, output)."""
        self.evaluated += 1
        outcome = try_evaluate(line)
        if outcome.ok:
            return True, format_result(outcome.value)
        self.failed += 1
        logger.info("line %r failed: %s", line, outcome.error)
        return False, str(outcome.error)

    def run(self) -> None:
        while True:
            try:
                line = self.source.read_line(self.settings.prompt)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print()
                break

            text = line.strip()
            if text.lower() == QUIT_COMMAND:
                print(EXIT_MESSAGE)
                break
            if not text:
                print(EMPTY_INPUT_MESSAGE)
                continue

            ok, out = self.handle_line(text)
            if ok:
                print(out)
            else:
                print(out, file=sys.stderr)
        logger.info("session ended: %d lines evaluated, %d failed", self.evaluated, self.failed)

# --------------------------
# Entry point
# --------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linecalc",
        description="Left-to-right integer calculator (no operator precedence).",
    )
    parser.add_argument(
        "-e", "--expression",
        type=str,
        help="Evaluate a single expression and exit.",
    )
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="With --expression, print the token stream instead of the result.",
    )
    parser.add_argument("--prompt", type=str, help="Prompt string (default: 'calc> ').")
    parser.add_argument("--history-file", type=str, help="File to keep prompt history in.")
    parser.add_argument("--log-level", type=str, help="Logging level (default: WARNING).")
    return parser


def _run_expression(expression: str, show_tokens: bool) -> int:
    if show_tokens:
        try:
            tokens = tokenize(expression)
        except CalcError as e:
            print(e, file=sys.stderr)
            return 1
        for token in tokens:
            print(repr(token))
        return 0

    outcome = try_evaluate(expression)
    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1
    print(format_result(outcome.value))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        settings = CalcSettings.from_env(
            prompt=args.prompt,
            history_file=args.history_file,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)
    logger.debug("settings: %s", settings)

    if args.expression is not None:
        return _run_expression(args.expression, args.tokens)

    REPL(make_line_source(settings), settings).run()
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run()
