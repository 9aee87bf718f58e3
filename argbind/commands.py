"""
argbind command layer: turn an annotated dataclass into a command tree.

What this module provides
- Runnable / PreRunnable: the capability a dataclass exposes to become a command.
  • run(self, args)     executes the command with residual positional arguments.
  • before(self, args)  optional; runs first and aborts the command by raising.
- CommandDescriptor: one node of the tree (flags, subcommands, callbacks).
- extract(config): walk a dataclass instance into (fields, commands).
- describe(config, name): wrap extract() into a named CommandDescriptor.

How fields are classified (declaration order is preserved)
- annotation in the closed kind set (see argbind.kinds) → FieldDescriptor.
- value is a dataclass instance that is Runnable → child CommandDescriptor.
- value is None and the annotation names a Runnable dataclass (optionally
  "| None") → child CommandDescriptor built on a fresh instance, attached to
  the parent field only if the child ends up on the selected command path.
- nested dataclass that is not Runnable → NotRunnableError.
- anything else → UnsupportedFieldKindError.

All of this happens before any argument is parsed: a malformed dataclass fails
the same way whatever the command line says.

Quick start
    from dataclasses import dataclass
    from argbind import command, describe, flag

    @dataclass
    class Deploy:
        target: str = flag("staging", aliases="t")
        def run(self, args): ...

    @dataclass
    class Tool:
        verbose: bool = False
        deploy: Deploy = command(Deploy)
        def run(self, args): ...

    tree = describe(Tool(), "tool")
    # tree.fields   → (field(attribute='verbose', name='verbose', ...),)
    # tree.children → (command(name='deploy', ...),)
"""
import dataclasses
import functools
import inspect
import operator
import types
import typing
from typing import Protocol, runtime_checkable

from .arguments import FieldDescriptor
from .faults import (
    NotRunnableError,
    UnsupportedFieldKindError,
    UninstantiableCommandError,
    UnresolvedAnnotationError,
    DuplicateNameError,
)
from .kinds import kindof
from .tags import Naming, resolve
from .utils import mirror

RESERVED = frozenset(("--help",))


@runtime_checkable
class Runnable(Protocol):
    def run(self, args): ...


@runtime_checkable
class PreRunnable(Runnable, Protocol):
    def before(self, args): ...


class CommandDescriptor:
    """
    Derived metadata describing one node (root or subcommand) of the tree.

    Properties
    - name: command name as typed on the command line.
    - usage: short help (from the parent field's "usage" tag).
    - hidden: hidden from the parent's command listing.
    - target: the dataclass instance the node binds to.
    - fields: FieldDescriptors in declaration order.
    - children: child CommandDescriptors in declaration order.
    - run / before: bound callbacks, or None.
    - attach: closure assigning `target` to the parent field, or None when the
      parent already holds it.
    """

    __introspectable__ = (
        "name",
        "usage",
        "hidden",
        "fields",
        "children",
    )

    name = mirror("name")
    usage = mirror("usage")
    hidden = mirror("hidden")
    fields = mirror("fields")
    children = mirror("children")
    target = property(operator.attrgetter("_target"))
    run = property(operator.attrgetter("_run"))
    before = property(operator.attrgetter("_before"))
    attach = property(operator.attrgetter("_attach"))

    def __init__(self, name, target, fields, children, /, *, usage=None, hidden=False, attach=None):
        self._name = name
        self._usage = usage
        self._hidden = hidden
        self._target = target
        self._fields = tuple(fields)
        self._children = tuple(children)
        self._run = target.run if isinstance(target, Runnable) else None
        self._before = target.before if isinstance(target, PreRunnable) else None
        self._attach = attach

    def walk(self):
        """
        Yield this node and every descendant, depth-first, in declaration order.
        """
        yield self
        for child in self._children:
            yield from child.walk()

    def __repr__(self):
        return f"command({", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


def _typename(annotation, /):
    return inspect.formatannotation(annotation)


def _hints(cls, /, path):
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as exception:
        raise UnresolvedAnnotationError(
            f"cannot resolve the annotations of {cls.__qualname__}: {exception}",
            hint="define the referenced types at module level",
            path=path,
        ) from exception


def _unoptional(annotation, /):
    """
    Strip None from a union annotation ("Deploy | None" → Deploy).
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        members = [member for member in typing.get_args(annotation) if member is not types.NoneType]
        if len(members) == 1:
            return members[0]
    return annotation


def _nested(config, field, annotation, /, path):
    """
    Return (instance, attach) for a field that holds a subcommand, or None.
    """
    value = getattr(config, field.name)
    context = {"field": field.name, "path": path}

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        if not isinstance(value, Runnable):
            raise NotRunnableError(
                f"field {field.name!r} holds {type(value).__qualname__}, which has no run(self, args) method",
                hint="implement run(self, args) to make it a subcommand",
                **context
            )
        return value, None

    cls = _unoptional(annotation)
    if value is not None or not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        return None
    if not issubclass(cls, Runnable):
        raise NotRunnableError(
            f"field {field.name!r} is typed {_typename(annotation)}, which has no run(self, args) method",
            hint="implement run(self, args) to make it a subcommand",
            **context
        )
    try:
        instance = cls()
    except TypeError as exception:
        raise UninstantiableCommandError(
            f"field {field.name!r} is None and {cls.__qualname__}() cannot be built: {exception}",
            hint="give every field of the subcommand a default",
            **context
        ) from exception
    return instance, functools.partial(setattr, config, field.name, instance)


def _claim(seen, spellings, /, what, **context):
    for spelling in spellings:
        if spelling in seen:
            raise DuplicateNameError(
                f"{what} {spelling!r} is declared by both {seen[spelling]!r} and {context["field"]!r}",
                **context
            )
        seen[spelling] = context["field"]


def extract(config, /, *, naming=Naming.DERIVED, path=()):
    """
    Walk a dataclass instance into flag and subcommand descriptors.

    Parameters
    - config: dataclass instance (not the class).
    - naming: Naming policy for fields without a "name" tag.
    - path: names of the enclosing commands, used in diagnostics and for children.

    Returns
    - (fields, commands): tuples of FieldDescriptor and CommandDescriptor,
      each in declaration order.

    Raises
    - TypeError: config is not a dataclass instance.
    - ConfigurationError subclasses: see the module docstring.

    The instance is only read; write-back closures are created but not called.
    """
    if not dataclasses.is_dataclass(config) or isinstance(config, type):
        raise TypeError("extract() argument must be a dataclass instance")

    path = tuple(path)
    hints = _hints(type(config), path)
    fields = []
    commands = []
    switches = {spelling: "help" for spelling in RESERVED}
    names = {}

    for field in dataclasses.fields(config):
        annotation = hints.get(field.name, field.type)
        tags = resolve(field.metadata, field.name, naming=naming, path=path)

        if (kind := kindof(annotation)) is not None:
            descriptor = FieldDescriptor(field.name, tags, kind, config)
            _claim(switches, descriptor.switches, "switch", field=field.name, path=path)
            fields.append(descriptor)
            continue

        if (nested := _nested(config, field, annotation, path)) is not None:
            instance, attach = nested
            _claim(names, (tags.name,), "subcommand", field=field.name, path=path)
            commands.append(describe(
                instance,
                tags.name,
                usage=tags.usage,
                hidden=tags.hidden,
                naming=naming,
                path=path,
                attach=attach,
            ))
            continue

        raise UnsupportedFieldKindError(
            f"field {field.name!r} has unsupported type {_typename(annotation)}",
            hint="use str, int, Uint, Int64, Uint64, float, bool, timedelta or a runnable dataclass",
            field=field.name,
            path=path,
        )

    return tuple(fields), tuple(commands)


def describe(config, name, /, *, usage=None, hidden=False, naming=Naming.DERIVED, path=(), attach=None):
    """
    Build the CommandDescriptor for a dataclass instance and, recursively, its subcommands.

    Parameters
    - config: dataclass instance.
    - name: command name (the program name for the root).
    - usage / hidden: help metadata for this node.
    - naming: Naming policy, applied to the whole tree.
    - path: names of the enclosing commands.
    - attach: closure that stores config on its parent field (see module docstring).
    """
    fields, children = extract(config, naming=naming, path=(*path, name))
    return CommandDescriptor(name, config, fields, children, usage=usage, hidden=hidden, attach=attach)


__all__ = (
    # Protocols
    "Runnable",
    "PreRunnable",

    # Classes
    "CommandDescriptor",

    # Functions
    "extract",
    "describe",
)
