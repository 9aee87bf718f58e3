"""
argbind faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault argbind raises
  or renders. Codes are grouped by domain to keep logs/searches predictable.
- BindingException / BindingWarning: base types that carry message + options and
  know how to render themselves with rich.
- ConfigurationError and its subclasses: raised while a dataclass is turned into
  a command tree, before any argument is parsed.
- DelegatedError: render-only wrapper for exceptions argbind does not own
  (click usage errors, exceptions raised by run/before callbacks).
- trigger(): render any exception on stderr and terminate the process.

Two classes of failure
- Configuration faults are deterministic functions of the dataclass shape.
  Their message always starts with the command path being configured, e.g.
  "while configuring command 'tool deploy': field 'targets' has unsupported type list[str]".
- Runtime faults (click parse errors, callback exceptions) are propagated by
  argbind.run() unchanged; only argbind.run_and_finish() renders them.

Integration
- The host application may expose __styles__ (style overrides) and __codes__
  (FaultCode → label) in __main__; both are optional.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

import click
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across argbind (stable identifiers).

    grouping (by high-level domain)
    - configuration (2110x)
      • UNSUPPORTED_FIELD_KIND, NOT_RUNNABLE, MISSING_NAME, MALFORMED_TAG,
        DUPLICATE_NAME, UNINSTANTIABLE_COMMAND, UNRESOLVED_ANNOTATION
    - delegated errors (2113x)
      • USAGE_ERROR, DELEGATED_ERROR, ABORTED
    - warnings (2211x)
      • LEGACY_TAG
    """
    # --- configuration errors (21xxx) ---
    UNSUPPORTED_FIELD_KIND      = 21101
    NOT_RUNNABLE                = 21102
    MISSING_NAME                = 21103
    MALFORMED_TAG               = 21104
    DUPLICATE_NAME              = 21105
    UNINSTANTIABLE_COMMAND      = 21106
    UNRESOLVED_ANNOTATION       = 21107

    # --- delegated errors (21xxx) ---
    USAGE_ERROR                 = 21131
    DELEGATED_ERROR             = 21132
    ABORTED                     = 21133

    # --- warnings (22xxx) ---
    LEGACY_TAG                  = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _render(fault, styles, message, /):
    """
    Shared rich layout for exceptions and warnings: header, message, hint.
    """
    colorful = fault.options.get("colorful", True)
    fancy = fault.options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(fault.options.get("prog") or "argbind", "prog-name"),
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.title.title(), "title"),
        " ]"
    )
    body = [text(message, "message")]
    if hint := fault.options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class BindingException(Exception):
    """
    Base type of every exception argbind raises.

    Options (all optional, merged with copy.replace before rendering)
    - prog: program name shown in the header.
    - hint: one actionable sentence shown under the message.
    - colorful / fancy: rendering switches.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        return _render(self, styles, str(self))

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(BindingException):
    """
    Raised while a dataclass is turned into a command tree.

    Options
    - path: tuple of command names from the root to the command being configured.
    - field: attribute name of the offending field, when there is one.
    """
    code = FaultCode.UNSUPPORTED_FIELD_KIND
    title = "configuration error"

    def __init__(self, message=Unset, /, **options):
        super().__init__(message, **options)
        self.path = tuple(options.get("path", ()))
        self.field = options.get("field")

    def __str__(self):
        if not self.path:
            return self.message
        return f"while configuring command {" ".join(self.path)!r}: {self.message}"


class UnsupportedFieldKindError(ConfigurationError):
    code = FaultCode.UNSUPPORTED_FIELD_KIND
    title = "unsupported field kind"


class NotRunnableError(UnsupportedFieldKindError):
    code = FaultCode.NOT_RUNNABLE
    title = "not runnable"


class MissingNameError(ConfigurationError):
    code = FaultCode.MISSING_NAME
    title = "missing name"


class MalformedTagError(ConfigurationError):
    code = FaultCode.MALFORMED_TAG
    title = "malformed tag"


class DuplicateNameError(ConfigurationError):
    code = FaultCode.DUPLICATE_NAME
    title = "duplicate name"


class UninstantiableCommandError(ConfigurationError):
    code = FaultCode.UNINSTANTIABLE_COMMAND
    title = "uninstantiable command"


class UnresolvedAnnotationError(ConfigurationError):
    code = FaultCode.UNRESOLVED_ANNOTATION
    title = "unresolved annotation"


class DelegatedError(BindingException):
    """
    Render-only wrapper around an exception argbind does not own.

    Built by delegate(); never raised by argbind.run().
    """

    def __init__(self, message=Unset, /, **options):
        super().__init__(message, **options)
        self.code = options.get("code", FaultCode.DELEGATED_ERROR)
        self.title = options.get("title", "error")


class BindingWarning(Warning):
    """
    Base type of every warning argbind emits through the warnings module.
    """
    code = FaultCode.LEGACY_TAG
    title = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })
        return _render(self, styles, self.message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class LegacyTagWarning(BindingWarning):
    code = FaultCode.LEGACY_TAG
    title = "legacy tag"


def delegate(exception, /, **options):
    """
    Turn any exception into a renderable BindingException.

    - BindingException instances are returned with the options merged in.
    - click usage errors keep click's message and point at --help.
    - anything else keeps its type name and message.
    """
    if isinstance(exception, BindingException):
        return copy.replace(exception, **options)
    if isinstance(exception, click.UsageError):
        hint = Unset
        if exception.ctx is not None:
            hint = f"try '{exception.ctx.command_path} --help' for help"
        return DelegatedError(
            exception.format_message(),
            **({"code": FaultCode.USAGE_ERROR, "title": "usage error", "hint": coalesce(hint)} | options)
        )
    if isinstance(exception, click.ClickException):
        return DelegatedError(exception.format_message(), **options)
    if isinstance(exception, click.Abort):
        return DelegatedError("aborted", **({"code": FaultCode.ABORTED, "title": "aborted"} | options))
    return DelegatedError(str(exception) or type(exception).__name__, **({"title": type(exception).__name__} | options))


def trigger(exception, /, **options):
    """
    Render an exception on the stderr console and exit with status 1.

    contract
    - exception may be any exception; foreign ones go through delegate().
    - options are merged into the rendered fault (prog, fancy, colorful, hint).
    """
    if not isinstance(exception, BaseException):
        raise TypeError("trigger() argument must be an exception")
    console.print(delegate(exception, **options))
    sys.exit(1)


__all__ = (
    "FaultCode",
    "BindingException",
    "ConfigurationError",
    "UnsupportedFieldKindError",
    "NotRunnableError",
    "MissingNameError",
    "MalformedTagError",
    "DuplicateNameError",
    "UninstantiableCommandError",
    "UnresolvedAnnotationError",
    "DelegatedError",
    "BindingWarning",
    "LegacyTagWarning",
    "delegate",
    "trigger",
)
