"""
argbind tag parsing: from dataclass field metadata to flag attributes.

Vocabulary (keys of dataclasses.field(metadata=...))
- name         flag or subcommand name override
- usage        help text
- hidden       boolean-ish ("true", "1", True, ...), defaults to False
- aliases      space-separated alternate names ("fn f")
- envVars      comma-separated environment variable names ("APP_USER, USER")
- defaultText  help-display override for the default value
- required     boolean-ish; enforcement is delegated to click

Legacy compact form
- decli="<name>,<flag>...,usage:<text>"
  The first segment is the name (may be empty), "required" and "hidden" are
  flags, and "usage:" consumes the rest of the string, commas included. The
  structured keys above win over anything the compact form says. Each use emits
  a LegacyTagWarning.

Naming policy
- Naming.DERIVED: a missing name is derived by kebab-casing the field identifier.
- Naming.EXPLICIT: a missing name is a configuration error.
"""
import warnings
from enum import Enum
from types import MappingProxyType

from .faults import MalformedTagError, MissingNameError, LegacyTagWarning
from .utils import Unset, coalesce, kebabcase, envcase, parsebool, splitlist

LEGACY = "decli"
KEYS = ("name", "usage", "hidden", "aliases", "envVars", "defaultText", "required")


class Naming(Enum):
    """
    How flag and subcommand names are resolved when no "name" tag is present.
    """
    DERIVED = "derived"
    EXPLICIT = "explicit"


def _legacy(source, /, **context):
    """
    Map the compact decli form onto the structured vocabulary.
    """
    if not isinstance(source, str):
        raise MalformedTagError(f"field {context.get("field")!r} has a non-string {LEGACY!r} tag", **context)

    warnings.warn(LegacyTagWarning(
        f"field {context.get("field")!r} uses the compact {LEGACY!r} tag",
        hint="prefer the structured name/usage/required metadata keys",
    ), stacklevel=4)

    name, _, rest = source.partition(",")
    tags = {}
    if name := name.strip():
        tags["name"] = name

    while rest:
        segment, _, remainder = rest.partition(",")
        match segment.strip():
            case usage if usage.startswith("usage:"):
                # usage swallows everything after it, commas included
                tags["usage"] = rest.strip()[len("usage:"):].strip()
                break
            case "required" | "hidden" as flag:
                tags[flag] = True
            case "":
                pass
            case unknown:
                raise MalformedTagError(
                    f"field {context.get("field")!r} has unknown {LEGACY!r} segment {unknown!r}",
                    hint="supported segments are 'required', 'hidden' and 'usage:<text>'",
                    **context
                )
        rest = remainder
    return tags


class Tags:
    """
    Parsed, normalized attributes of one field.

    Attributes
    - name, usage, hidden, aliases (tuple), env_vars (tuple), default_text, required
    """
    __slots__ = ("name", "usage", "hidden", "aliases", "env_vars", "default_text", "required")

    def __init__(self, name, usage, hidden, aliases, env_vars, default_text, required):
        self.name = name
        self.usage = usage
        self.hidden = hidden
        self.aliases = tuple(aliases)
        self.env_vars = tuple(env_vars)
        self.default_text = default_text
        self.required = required

    def __repr__(self):
        return f"tags({", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)})"


def _text(value, key, /, **context):
    if value is Unset or value is None:
        return None
    if not isinstance(value, str):
        raise MalformedTagError(f"field {context.get("field")!r} tag {key!r} must be a string", **context)
    return value


def resolve(metadata, identifier, /, *, naming=Naming.DERIVED, path=()):
    """
    Parse a field's metadata into Tags.

    Parameters
    - metadata: the field's metadata mapping (dataclasses.Field.metadata).
    - identifier: the field's attribute name, used for derived names and diagnostics.
    - naming: Naming policy for fields without a "name" tag.
    - path: command path for diagnostics.

    Raises
    - MissingNameError: under Naming.EXPLICIT when no name is given.
    - MalformedTagError: when a text tag is not a string or the compact form is malformed.
    """
    context = {"field": identifier, "path": tuple(path)}
    tags = dict(metadata) if metadata else {}
    if LEGACY in tags:
        tags = _legacy(tags.pop(LEGACY), **context) | {key: value for key, value in tags.items() if key in KEYS}

    name = _text(tags.get("name", Unset), "name", **context)
    if not name:
        if naming is Naming.EXPLICIT:
            raise MissingNameError(
                f"field {identifier!r} has no 'name' tag",
                hint="add a 'name' tag or switch to Naming.DERIVED",
                **context
            )
        name = kebabcase(identifier)

    env_vars = splitlist(coalesce(tags.get("envVars", Unset), ""), ",") or [envcase(name)]

    return Tags(
        name=name,
        usage=_text(tags.get("usage", Unset), "usage", **context) or None,
        hidden=parsebool(tags.get("hidden", Unset)),
        aliases=splitlist(tags.get("aliases", Unset), " "),
        env_vars=env_vars,
        default_text=_text(tags.get("defaultText", Unset), "defaultText", **context) or None,
        required=parsebool(tags.get("required", Unset)),
    )


def metadata(**tags):
    """
    Build a read-only metadata mapping from keyword tags, dropping Unset values.
    """
    return MappingProxyType({key: value for key, value in tags.items() if value is not Unset})


__all__ = (
    "Naming",
    "Tags",
    "resolve",
)
