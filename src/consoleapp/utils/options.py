"""Command-line option parsing for consoleapp apps.

Parsing is delegated to ``argparse``; this module only fixes the set of
options every app understands, turns argparse failures into ``ArgumentError``
instead of an exit, and renders the usage message in a stable format.
"""

import argparse
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from consoleapp.errors import ArgumentError


@dataclass(frozen=True)
class OptionDefinition:
    short: str
    long: str
    description: str
    takes_value: bool = False


@dataclass
class Options:
    """Parsed command line: known options plus whatever was left over."""

    help: bool = False
    config: Optional[str] = None
    arguments: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


HELP_OPTION = OptionDefinition("h", "help", "Show this message")
CONFIG_OPTION = OptionDefinition("c", "config", "Path to configuration ini file", takes_value=True)


class _RaisingArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ArgumentError(message)


class OptionParser:
    """Parses ``argv`` against a list of option definitions."""

    def __init__(self, definitions=None, prog=None):
        self.definitions = list(definitions or (HELP_OPTION, CONFIG_OPTION))
        self.prog = prog if prog is not None else (sys.argv[0] if sys.argv else "")

    def add_option(self, definition):
        self.definitions.append(definition)
        return self

    def _build_parser(self):
        parser = _RaisingArgumentParser(prog=self.prog, add_help=False, allow_abbrev=False)
        for definition in self.definitions:
            flags = [f"-{definition.short}"] if definition.short else []
            flags.append(f"--{definition.long}")
            if definition.takes_value:
                parser.add_argument(*flags, dest=definition.long, default=None)
            else:
                parser.add_argument(*flags, dest=definition.long, action="store_true")
        return parser

    def parse(self, argv=None):
        """Parse ``argv`` (defaults to ``sys.argv[1:]``).

        Returns:
            Options: known option values, positional arguments and a mapping
            of unrecognized ``--name[=value]`` options.

        Raises:
            ArgumentError: on malformed input, e.g. ``--config`` without a value.
        """
        if argv is None:
            argv = sys.argv[1:]
        namespace, leftovers = self._build_parser().parse_known_args(list(argv))
        values = vars(namespace)

        arguments = []
        extra = {}
        positional_only = False
        for token in leftovers:
            if positional_only or token == "-" or not token.startswith("-"):
                arguments.append(token)
            elif token == "--":
                positional_only = True
            else:
                name, sep, value = token.lstrip("-").partition("=")
                extra[name] = value if sep else True

        options = Options(
            help=bool(values.pop("help", False)),
            config=values.pop("config", None),
            arguments=arguments,
        )
        # Options added by subclasses land next to unrecognized ones
        options.extra.update(values)
        options.extra.update(extra)
        return options

    def usage(self):
        """Render the usage message.

        Returns:
            str: ``Usage: <prog> [OPTIONS] [ARGUMENTS]`` followed by one line
            per option, long names padded to a common width.
        """
        width = max((len(d.long) for d in self.definitions), default=0)
        lines = [f"Usage: {self.prog} [OPTIONS] [ARGUMENTS]", "", "Options:"]
        for definition in self.definitions:
            short = f"-{definition.short}, " if definition.short else "    "
            lines.append(f" {short}--{definition.long:<{width}} {definition.description}")
        return "\n".join(lines) + "\n"
