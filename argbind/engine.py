"""
argbind engine: bind a command tree to click, parse argv and dispatch.

What this module provides
- build(descriptor): synthesize the click command tree for a CommandDescriptor.
- run(config, argv): describe → build → parse → write back → before/run.
- run_and_finish(config, argv): run(), rendering any failure on stderr and
  exiting with status 1.

Dispatch contract
- click parses one level at a time and calls each level's callback on the way
  down. argbind callbacks only queue their write-backs (in the shared
  click.Context.meta); the selected node, the one with no further subcommand,
  applies the whole queue root-down, then calls before(args), then run(args).
  A parse error anywhere on the path therefore leaves the dataclass untouched
  and no user callback runs.
- Value precedence is click's: command line, then environment variables, then
  the field's value at the time run() was called.
- Leaf commands accept residual positional arguments. A runnable command
  with subcommands receives them too when its first positional word names
  no subcommand; one without run() gets click's "No such command".
- A selected node without run() prints its help and returns None.

Errors
- Configuration faults (argbind.faults.ConfigurationError) are raised before
  anything is parsed, even for an empty argv.
- click exceptions and exceptions from before/run propagate unchanged.
"""
import functools
import os
import sys

import click

from .commands import describe
from .faults import trigger
from .tags import Naming
from .utils import kebabcase, rename

PENDING = "argbind.pending"
RESIDUAL = "_argbind_residual"


def _option(field, /):
    """
    Build the click.Option for one FieldDescriptor.

    Required fields carry no default at all, so click reports them missing.
    """
    options = {
        "type": field.kind.type,
        "required": field.required,
        "help": field.usage,
        "hidden": field.hidden,
        "envvar": list(field.env_vars) or None,
        "show_envvar": True,
        "show_default": field.default_text or False,
    }
    if not field.required:
        options["default"] = field.default
        options["show_default"] = field.default_text or field.kind.format(field.default) or False
    if field.kind.flag:
        options |= {"is_flag": True, "flag_value": True}
    return click.Option([field.attribute, *field.switches], **options)


def _callback(descriptor, /):
    """
    Build the click callback for one node of the tree.
    """
    fields = descriptor.fields

    @click.pass_context
    def callback(context, /, **params):
        residual = list(params.pop(RESIDUAL, ()))
        pending = context.meta.setdefault(PENDING, [])
        if descriptor.attach is not None:
            pending.append(descriptor.attach)
        for field in fields:
            pending.append(functools.partial(field.assign, params[field.attribute]))

        if context.invoked_subcommand is not None:
            return None

        while pending:
            pending.pop(0)()

        if descriptor.before is not None:
            descriptor.before(residual)
        if descriptor.run is None:
            click.echo(context.get_help())
            return None
        return descriptor.run(residual)

    return rename(callback, descriptor.name)


class Dispatcher(click.Group):
    """
    click.Group that hands unmatched words to its own command.

    When the node is runnable, a first positional word that names no
    subcommand selects the node itself, and every remaining word becomes
    its residual arguments. Otherwise click's "No such command" applies.
    """

    def __init__(self, *, runnable=False, **options):
        super().__init__(invoke_without_command=True, **options)
        self.runnable = runnable

    def parse_args(self, ctx, args):
        # options up to the first positional word; the words stay for invoke()
        words = click.Command.parse_args(self, ctx, args)
        ctx.params[RESIDUAL] = tuple(words)
        ctx.args = []
        return ctx.args

    def invoke(self, ctx):
        words = list(ctx.params[RESIDUAL])
        if not words or (self.runnable and self.get_command(ctx, words[0]) is None):
            with ctx:
                return click.Command.invoke(self, ctx)

        ctx.params[RESIDUAL] = ()
        with ctx:
            name, command, rest = self.resolve_command(ctx, words)
            ctx.invoked_subcommand = name
            click.Command.invoke(self, ctx)
            with command.make_context(name, rest, parent=ctx) as sub:
                return sub.command.invoke(sub)


def build(descriptor, /, *, trace=None):
    """
    Synthesize the click command tree for a CommandDescriptor.

    Parameters
    - descriptor: root (or any) CommandDescriptor.
    - trace: optional callable receiving one diagnostic line per command and
      per flag; nothing is emitted when omitted.

    Returns
    - Dispatcher for nodes with children, click.Command otherwise.
    """
    params = []
    for field in descriptor.fields:
        if trace is not None:
            trace(f"{descriptor.name}: {"/".join(field.switches)} ({field.kind.name}) "
                  f"→ {type(field.owner).__qualname__}.{field.attribute}")
        params.append(_option(field))

    options = {
        "name": descriptor.name,
        "params": params,
        "callback": _callback(descriptor),
        "help": descriptor.usage,
        "hidden": descriptor.hidden,
    }

    if not descriptor.children:
        params.append(click.Argument([RESIDUAL], nargs=-1, metavar="[ARGS]..."))
        if trace is not None:
            trace(f"{descriptor.name}: command")
        return click.Command(**options)

    group = Dispatcher(runnable=descriptor.run is not None, **options)
    for child in descriptor.children:
        group.add_command(build(child, trace=trace))
    if trace is not None:
        trace(f"{descriptor.name}: group of {", ".join(child.name for child in descriptor.children)}")
    return group


def _prog(config, argv, /):
    if argv and argv[0]:
        return os.path.basename(argv[0])
    return kebabcase(type(config).__name__)


def run(config, argv=None, /, *, naming=Naming.DERIVED, trace=None):
    """
    Bind a dataclass instance to the command line and dispatch.

    Parameters
    - config: dataclass instance, ideally already holding its defaults.
    - argv: full argument vector, program name first; defaults to sys.argv.
    - naming: Naming policy for fields without a "name" tag.
    - trace: optional diagnostic callable, see build().

    Returns
    - the value returned by the selected command's run(), None when it has no
      run(), or 0 when click handled --help.

    Raises
    - TypeError: config is not a dataclass instance.
    - argbind.faults.ConfigurationError: the dataclass cannot be bound.
    - click.ClickException / click.Abort: parsing failed.
    - anything raised by before() or run().
    """
    argv = list(sys.argv if argv is None else argv)
    prog = _prog(config, argv)
    command = build(describe(config, prog, naming=naming), trace=trace)
    return command.main(args=argv[1:], prog_name=prog, standalone_mode=False)


def run_and_finish(config, argv=None, /, *, fancy=False, colorful=True, **options):
    """
    Like run(), but render any failure on stderr and exit with status 1.

    Parameters
    - fancy: render faults inside a panel.
    - colorful: style faults with colors.
    - options: forwarded to run() (naming, trace).
    """
    argv = list(sys.argv if argv is None else argv)
    try:
        return run(config, argv, **options)
    except Exception as exception:
        trigger(exception, prog=_prog(config, argv), fancy=fancy, colorful=colorful)


__all__ = (
    "Dispatcher",
    "build",
    "run",
    "run_and_finish",
)
