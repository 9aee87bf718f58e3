"""
argbind utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the tag parser, the extractor and the engine.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level arguments/commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callbacks for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- kebabcase(identifier) / envcase(name)
  • Naming conventions: field identifier → flag name → environment variable name.

- parsebool(value) / splitlist(value, delimiter)
  • Permissive tag value parsing; neither ever raises on malformed input.

Quick examples
    >>> kebabcase("SomeFloat64")
    'some-float64'
    >>> envcase("some-float64")
    'SOME_FLOAT64'
    >>> splitlist(" A, B ,", ",")
    ['A', 'B']
"""
import builtins
import functools
import re
from collections.abc import Iterable, Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Tag values may legitimately be empty strings or False, so the tag parser
    needs a way to distinguish “not provided” from “provided as falsey”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0, "", or [] are preserved as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    The engine uses it on the click callbacks it synthesizes per command so
    tracebacks read "deploy" instead of "_callback.<locals>.callback".
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values so callers cannot mutate descriptor state.

    Sequences (except strings) become tuples, mappings become dicts, sets become
    frozensets; anything else is returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and copies container
    values on the way out.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


_SEPARATORS = re.compile(r"[\s_.\-]+")
_BOUNDARIES = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@functools.cache
def kebabcase(identifier, /):
    """
    Convert an identifier into lowercase words joined by hyphens.

    Splitting rules
    - explicit separators: underscores, hyphens, dots and whitespace.
    - a lowercase letter or digit followed by an uppercase letter ("someInt", "v2Beta").
    - the last capital of an acronym followed by a lowercase letter ("HTTPServer").
    Letters followed by digits stay in one word, so "SomeFloat64" → "some-float64".

    Examples
    - kebabcase("FirstName")    -> "first-name"
    - kebabcase("some_int")     -> "some-int"
    - kebabcase("HTTPServer")   -> "http-server"
    - kebabcase("SomeUInt64")   -> "some-u-int64"
    """
    if not isinstance(identifier, str):
        raise TypeError("kebabcase() argument must be a string")

    words = []
    for chunk in _SEPARATORS.split(identifier):
        words.extend(word for word in _BOUNDARIES.split(chunk) if word)
    return "-".join(word.lower() for word in words)


def envcase(name, /):
    """
    Derive an environment variable name from a flag name ("some-int" → "SOME_INT").
    """
    if not isinstance(name, str):
        raise TypeError("envcase() argument must be a string")
    return name.upper().replace("-", "_")


_TRUTHS = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSITIES = frozenset(("0", "f", "F", "FALSE", "false", "False"))


def parsebool(value, /, default=False):
    """
    Permissive boolean parsing for tag values.

    Accepts real booleans and the spellings 1/t/T/TRUE/true/True (and their
    false counterparts). Anything else, including Unset and None, yields
    `default`; malformed values are never reported.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value.strip() in _TRUTHS:
            return True
        if value.strip() in _FALSITIES:
            return False
    return default


def splitlist(value, delimiter, /):
    """
    Split a delimited tag value into trimmed, non-empty elements.

    - splitlist("fn  f", " ") -> ["fn", "f"]
    - splitlist("", ",")      -> []
    - splitlist(Unset, ",")   -> []
    Non-string iterables are taken as already split and only trimmed.
    """
    if value is Unset or value is None:
        return []
    if isinstance(value, str):
        parts = value.split(delimiter)
    elif isinstance(value, Iterable):
        parts = value
    else:
        raise TypeError("splitlist() argument must be a string or an iterable of strings")

    elements = []
    for part in parts:
        if not isinstance(part, str):
            raise TypeError("splitlist() elements must be strings")
        if part := part.strip():
            elements.append(part)
    return elements


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "kebabcase",
    "envcase",
    "parsebool",
    "splitlist",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
