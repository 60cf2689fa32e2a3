"""Parsing of JSON documents given on the command line."""

import re
from typing import Any

import click
import msgspec

_REGEX_LITERAL = re.compile(r"^/(?P<pattern>.*)/(?P<flags>[ims]*)$", re.DOTALL)
_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


def compile_regex_literals(value: Any) -> Any:
    """Turn ``"/pattern/flags"`` strings into compiled regular expressions."""
    if isinstance(value, str):
        match = _REGEX_LITERAL.match(value)
        if not match:
            return value
        flags = 0
        for flag in match.group("flags"):
            flags |= _FLAGS[flag]
        try:
            return re.compile(match.group("pattern"), flags)
        except re.error as e:
            raise click.BadParameter(f"Invalid regular expression {value}: {e}")
    if isinstance(value, dict):
        return {k: compile_regex_literals(v) for k, v in value.items()}
    if isinstance(value, list):
        return [compile_regex_literals(v) for v in value]
    return value


def parse_json(text: str, regex: bool = False) -> Any:
    """Decode a JSON argument.

    Args:
        text: JSON text.
        regex: Read ``/pattern/flags`` strings as regular expressions.
    """
    try:
        value = msgspec.json.decode(text)
    except msgspec.DecodeError as e:
        raise click.BadParameter(f"Invalid JSON {text!r}: {e}")
    return compile_regex_literals(value) if regex else value


def parse_query(text: str | None) -> dict[str, Any] | None:
    """Decode a query argument; None or empty text means match everything."""
    if not text:
        return None
    query = parse_json(text, regex=True)
    if not isinstance(query, dict):
        raise click.BadParameter("Query must be a JSON object")
    return query


def parse_sort(text: str) -> tuple[str, int]:
    """Parse ``field`` or ``field:-1`` into a sort key and direction."""
    field, _, direction = text.partition(":")
    if not field:
        raise click.BadParameter(f"Invalid sort specification {text!r}")
    if not direction:
        return field, 1
    if direction not in {"1", "-1", "asc", "desc"}:
        raise click.BadParameter(f"Sort direction must be 1 or -1, got {direction!r}")
    return field, -1 if direction in {"-1", "desc"} else 1
