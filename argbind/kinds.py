"""
argbind value kinds: the closed set of field types a flag can be bound to.

Kinds
- string   ← str
- int      ← int (unbounded)
- uint     ← Uint (0 .. 2**64-1)
- int64    ← Int64 (-2**63 .. 2**63-1)
- uint64   ← Uint64 (0 .. 2**64-1)
- float    ← float
- bool     ← bool (presence flag)
- duration ← Duration / datetime.timedelta (Go duration syntax: "300ms", "1h30m")

Each Kind provides
- type: the click ParamType that parses command-line and environment text.
- format(value): default display text for help output (None hides it).
- bind(owner, attribute): the write-back closure assigning a parsed value.

The set is closed on purpose: kindof() resolves annotations by identity and
returns None for anything else, which the extractor reports as an unsupported
field kind. New kinds are added here, never inferred.
"""
import re
from datetime import timedelta
from typing import NewType

import click

Uint = NewType("Uint", int)
Int64 = NewType("Int64", int)
Uint64 = NewType("Uint64", int)
Duration = timedelta

_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")
_LIMIT = 2 ** 63 - 1


def parse_duration(text, /):
    """
    Parse a Go-style duration string into a timedelta.

    Grammar
    - optional sign, then one or more <decimal><unit> components: "1h30m", "-1.5h", "300ms".
    - units: ns, us (µs, μs), ms, s, m, h.
    - the bare string "0" is accepted without a unit.

    Resolution is one microsecond; nanosecond remainders are truncated toward zero.

    Raises
    - ValueError: empty input, missing/unknown unit, a component without digits,
      or a magnitude beyond 2**63-1 nanoseconds (about 2562047h).
    """
    if not isinstance(text, str):
        raise TypeError("parse_duration() argument must be a string")

    source = text.strip()
    body = source.lstrip("+-")
    negative = source.startswith("-")
    if body == "0":
        return timedelta()
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    index = 0
    while index < len(body):
        match = _COMPONENT.match(body, index)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        if unit not in _NANOSECONDS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        scale = _NANOSECONDS[unit]
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
        if total > _LIMIT:
            raise ValueError(f"invalid duration {text!r}")
        index = match.end()

    micros = total // 1000
    return timedelta(microseconds=-micros if negative else micros)


def _decimal(value, scale, /):
    whole, fraction = divmod(value, scale)
    if not fraction:
        return str(whole)
    digits = str(fraction).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(value, /):
    """
    Render a timedelta the way Go's Duration.String() does.

    Examples
    - timedelta(0)                  -> "0s"
    - timedelta(microseconds=1500)  -> "1.5ms"
    - timedelta(hours=1)            -> "1h0m0s"
    - timedelta(minutes=-2)         -> "-2m0s"
    """
    if not isinstance(value, timedelta):
        raise TypeError("format_duration() argument must be a timedelta")

    micros = value // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros == 0:
        return "0s"
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_decimal(micros, 1_000)}ms"

    hours, rest = divmod(micros, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds = _decimal(rest, 1_000_000) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds


class DurationType(click.ParamType):
    """
    click parameter type for Go-style durations ("5ms", "1h30m").
    """
    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(value)
        except (ValueError, OverflowError) as exception:
            self.fail(str(exception), param, ctx)


class Kind:
    """
    One member of the closed set of bindable value kinds.

    Attributes
    - name: kind label ("int64", "duration", ...), shown in diagnostics.
    - annotation: the Python annotation that selects this kind.
    - type: click ParamType used to parse text.
    - flag: True for presence-only kinds (bool).
    """

    def __init__(self, name, annotation, type, coerce, /, *, flag=False):
        self.name = name
        self.annotation = annotation
        self.type = type
        self.coerce = coerce
        self.flag = flag

    def format(self, value, /):
        """
        Default display text for help, or None when nothing is worth showing.

        Empty strings, False and None are hidden; durations use Go notation.
        """
        if value is None or value is False or value == "":
            return None
        if isinstance(value, timedelta):
            return format_duration(value)
        return str(value)

    def bind(self, owner, attribute, /):
        """
        Return the write-back closure for `owner.attribute`.
        """
        coerce = self.coerce

        def setter(value, /):
            setattr(owner, attribute, value if value is None else coerce(value))

        return setter

    def __repr__(self):
        return f"kind({self.name})"


def _bounded(minimum, maximum, /):
    return click.IntRange(minimum, maximum)


def _timedelta(value, /):
    return value if isinstance(value, timedelta) else parse_duration(value)


STRING = Kind("string", str, click.STRING, str)
INT = Kind("int", int, click.INT, int)
UINT = Kind("uint", Uint, _bounded(0, 2 ** 64 - 1), int)
INT64 = Kind("int64", Int64, _bounded(-2 ** 63, 2 ** 63 - 1), int)
UINT64 = Kind("uint64", Uint64, _bounded(0, 2 ** 64 - 1), int)
FLOAT = Kind("float", float, click.FLOAT, float)
BOOL = Kind("bool", bool, click.BOOL, bool, flag=True)
DURATION = Kind("duration", timedelta, DurationType(), _timedelta)

KINDS = (STRING, INT, UINT, INT64, UINT64, FLOAT, BOOL, DURATION)


def kindof(annotation, /):
    """
    Return the Kind selected by an annotation, or None when it is not bindable.

    Matching is by identity: bool does not fall back to int, and Uint is not int.
    """
    for kind in KINDS:
        if annotation is kind.annotation:
            return kind
    return None


__all__ = (
    # Annotations
    "Uint",
    "Int64",
    "Uint64",
    "Duration",

    # Kinds
    "Kind",
    "KINDS",
    "kindof",

    # Durations
    "DurationType",
    "parse_duration",
    "format_duration",
)
