r"""
argbind argument descriptors and field helpers.

Overview
- FieldDescriptor: everything the engine needs to register one flag for one
  dataclass field: resolved name, switches, help text, environment variables,
  value kind, default and the write-back closure.

- Field helpers
  • flag(default, ...): dataclasses.field() carrying flag tags as metadata.
  • command(factory, ...): dataclasses.field() for a nested subcommand.
  Both only build metadata; plain dataclasses.field(metadata={...}) with the
  same keys works just as well.

Switch spelling
- One-character names and aliases get a single hyphen ("-v"), longer ones get
  two ("--verbose", "--fn").

Quick example:
    >>> from dataclasses import dataclass
    >>> from argbind import flag
    >>> @dataclass
    ... class App:
    ...     first_name: str = flag("John", usage="your first name", aliases="fn")
    ...     age: int = flag(-1, usage="your age")
    ...     def run(self, args): ...
"""
import dataclasses
import functools
import operator

from .tags import metadata
from .utils import Unset, mirror


def switch(name, /):
    """
    Spell a name as a command-line switch: "v" → "-v", "verbose" → "--verbose".
    """
    return ("-" if len(name) == 1 else "--") + name


class FieldDescriptor:
    """
    Derived metadata describing one bindable flag.

    Properties
    - attribute: the dataclass field name (also the click parameter name).
    - name: resolved flag name (tag or kebab-cased attribute).
    - usage, hidden, aliases, default_text, env_vars, required: parsed tags.
    - kind: the argbind.kinds.Kind of the field.
    - default: the field value at extraction time.
    - owner: the dataclass instance the field belongs to.

    The write-back closure is reached through assign(); the descriptor itself
    never writes unless asked to.
    """

    __introspectable__ = (
        "attribute",
        "name",
        "usage",
        "hidden",
        "aliases",
        "default_text",
        "env_vars",
        "required",
        "kind",
        "default",
    )

    attribute = mirror("attribute")
    name = mirror("name")
    usage = mirror("usage")
    hidden = mirror("hidden")
    aliases = mirror("aliases")
    default_text = mirror("default_text")
    env_vars = mirror("env_vars")
    required = mirror("required")
    kind = mirror("kind")
    default = mirror("default")
    owner = property(operator.attrgetter("_owner"))

    def __init__(self, attribute, tags, kind, owner, /):
        self._attribute = attribute
        self._name = tags.name
        self._usage = tags.usage
        self._hidden = tags.hidden
        self._aliases = tags.aliases
        self._default_text = tags.default_text
        self._env_vars = tags.env_vars
        self._required = tags.required
        self._kind = kind
        self._owner = owner
        self._default = getattr(owner, attribute)
        self._setter = kind.bind(owner, attribute)

    @property
    def switches(self):
        """
        All command-line spellings, primary name first.
        """
        return tuple(map(switch, (self._name, *self._aliases)))

    def assign(self, value, /):
        """
        Write a parsed value back into the owning dataclass field.
        """
        self._setter(value)

    def __repr__(self):
        return f"field({", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


def flag(
        default=dataclasses.MISSING,
        /,
        *,
        default_factory=dataclasses.MISSING,
        name=Unset,
        usage=Unset,
        hidden=Unset,
        aliases=Unset,
        env_vars=Unset,
        default_text=Unset,
        required=Unset,
        **options
):
    """
    Declare a dataclass field bound to a command-line flag.

    Parameters
    - default / default_factory: forwarded to dataclasses.field().
    - name: flag name; derived from the field identifier when omitted.
    - usage: help text.
    - hidden: hide from help output (still settable).
    - aliases: space-separated string or iterable of alternate names.
    - env_vars: comma-separated string or iterable of environment variable names.
    - default_text: help-display override for the default value.
    - required: let click reject invocations that omit the flag.
    - options: any other dataclasses.field() keyword (repr, compare, kw_only, ...).

    Returns
    - dataclasses.Field with the tags stored under the structured metadata keys.
    """
    if isinstance(aliases, (list, tuple)):
        aliases = " ".join(aliases)
    if isinstance(env_vars, (list, tuple)):
        env_vars = ",".join(env_vars)

    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata(
            name=name,
            usage=usage,
            hidden=hidden,
            aliases=aliases,
            envVars=env_vars,
            defaultText=default_text,
            required=required,
        ),
        **options
    )


def command(factory=Unset, /, *, name=Unset, usage=Unset, hidden=Unset, **options):
    """
    Declare a dataclass field holding a nested subcommand.

    Forms
    - command(Deploy): the field defaults to a fresh Deploy() per parent instance.
    - command(): the field defaults to None and is annotated "Deploy | None";
      a Deploy() is built during extraction and attached to the parent only
      when the subcommand is selected on the command line.

    Parameters
    - factory: zero-argument callable building the subcommand dataclass.
    - name: subcommand name; derived from the field identifier when omitted.
    - usage: short help shown in the parent's command listing.
    - hidden: hide the subcommand from help output.
    """
    if factory is Unset:
        return dataclasses.field(default=None, metadata=metadata(name=name, usage=usage, hidden=hidden), **options)
    if not callable(factory):
        raise TypeError("command() argument must be callable")
    return dataclasses.field(
        default_factory=factory,
        metadata=metadata(name=name, usage=usage, hidden=hidden),
        **options
    )


__all__ = (
    # Classes (descriptors)
    "FieldDescriptor",

    # Field helpers
    "flag",
    "command",
    "switch",
)
