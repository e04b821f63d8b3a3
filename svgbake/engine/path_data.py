"""Path data grammar: ``d`` attribute text to commands and back."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, TransformInputError, ensure
from svgbake.engine.numeric import format_number, in_numeric_context

# Values consumed by one repetition of each command
ARITY = {"M": 2, "L": 2, "T": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "A": 7, "Z": 0}

_COMMAND_RE = re.compile(r"[MmLlHhVvCcSsQqTtAaZz]")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_FLAG_RE = re.compile(r"[01]")
_SKIP_RE = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class PathCommand:
    letter: str  # upper case
    relative: bool
    args: tuple[Decimal, ...] = ()

    @property
    def code(self) -> str:
        return self.letter.lower() if self.relative else self.letter


class _Scanner:
    """Character scanner honouring compact numbers and arc flags."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip(self) -> None:
        match = _SKIP_RE.match(self.text, self.pos)
        if match:
            self.pos = match.end()

    def at_end(self) -> bool:
        self.skip()
        return self.pos >= len(self.text)

    def peek_command(self) -> str | None:
        self.skip()
        match = _COMMAND_RE.match(self.text, self.pos)
        return match.group(0) if match else None

    def take_command(self) -> str:
        letter = self.peek_command()
        self.pos += 1
        return letter

    def skip_to_command(self) -> None:
        match = _COMMAND_RE.search(self.text, self.pos)
        self.pos = match.start() if match else len(self.text)

    def take_number(self) -> Decimal | None:
        self.skip()
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return Decimal(match.group(0))

    def take_flag(self) -> Decimal | None:
        # flags are single characters: "a5 5 0 105 5" is 1, 0, 5, 5
        self.skip()
        match = _FLAG_RE.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return Decimal(match.group(0))


def _take_group(scanner: _Scanner, letter: str) -> list[Decimal] | None:
    """One argument group for ``letter``; None when input ends mid-group."""
    values = []
    for index in range(ARITY[letter]):
        if letter == "A" and index in (3, 4):
            value = scanner.take_flag()
        else:
            value = scanner.take_number()
        if value is None:
            return None if not values else values
        values.append(value)
    return values


@in_numeric_context
def parse_path_data(d: str, diagnostics: Diagnostics | None = None) -> list[PathCommand]:
    """Parse ``d`` into one :class:`PathCommand` per argument group.

    Implicit repeats become separate commands, and pairs after a moveto become
    linetos. An incomplete group is dropped with a diagnostic and parsing
    resumes at the next command letter. Parsing stops at the first character
    that cannot start a command or a value, keeping what came before.
    """
    if d is None:
        raise TransformInputError("path data is required")
    diagnostics = ensure(diagnostics)
    scanner = _Scanner(d)
    commands: list[PathCommand] = []

    while not scanner.at_end():
        code = scanner.peek_command()
        if code is None:
            diagnostics.degenerate("parse_path_data", f"unexpected character at offset {scanner.pos} in path data")
            break
        scanner.take_command()
        letter = code.upper()
        relative = code.islower()

        if letter == "Z":
            commands.append(PathCommand("Z", relative))
            continue
        if not commands and letter != "M":
            diagnostics.degenerate("parse_path_data", f"path data must start with a moveto, got {code!r}")
            break

        first = True
        while True:
            if scanner.at_end() or scanner.peek_command() is not None:
                if first:
                    diagnostics.degenerate("parse_path_data", f"{code!r} has no arguments")
                break
            group = _take_group(scanner, letter)
            if group is None:
                diagnostics.degenerate("parse_path_data", f"unexpected character at offset {scanner.pos} in path data")
                return commands
            if len(group) < ARITY[letter]:
                diagnostics.degenerate(
                    "parse_path_data",
                    f"{code!r} needs {ARITY[letter]} values per group, got {len(group)}; dropping them",
                )
                scanner.skip_to_command()
                break
            # subsequent pairs after a moveto are implicit linetos
            emitted = letter if first or letter != "M" else "L"
            commands.append(PathCommand(emitted, relative, tuple(group)))
            first = False
    return commands


def serialize_path_data(commands: list[PathCommand], precision: int = 6) -> str:
    """Space-separated path data, one command letter per command."""
    parts = []
    for command in commands:
        if command.args:
            values = " ".join(format_number(v, precision) for v in command.args)
            parts.append(f"{command.code}{values}")
        else:
            parts.append(command.code)
    return " ".join(parts)
