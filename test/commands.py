"""
Commands module tests (schema extraction).

Scope
- Field classification, declaration order and name/env resolution.
- Subcommand derivation (instances and None fields) and the Runnable contract.
- Configuration faults: unsupported kinds, non-runnable nesting, duplicates,
  unresolved annotations, uninstantiable subcommands.

Conventions
- Test method names follow CamelCase per project convention.
- Dataclasses live at module level so their annotations resolve.
"""
import dataclasses
import unittest
from dataclasses import dataclass
from datetime import timedelta
from unittest import TestCase

from argbind import (
    Uint,
    Int64,
    Uint64,
    Naming,
    Runnable,
    PreRunnable,
    ConfigurationError,
    UnsupportedFieldKindError,
    NotRunnableError,
    DuplicateNameError,
    UninstantiableCommandError,
    UnresolvedAnnotationError,
    MissingNameError,
    command,
    describe,
    extract,
    flag,
)


@dataclass
class Leaf:
    level: int = 1

    def run(self, args):
        return "leaf"


@dataclass
class Guarded(Leaf):
    def before(self, args):
        pass


@dataclass
class Everything:
    some_string: str = ""
    some_int: int = flag(0, usage="an int")
    some_uint: Uint = 0
    some_int64: Int64 = 0
    some_uint64: Uint64 = 0
    some_float64: float = 0.0
    some_duration: timedelta = timedelta()
    some_bool: bool = False
    leaf: Leaf = command(Leaf, usage="a leaf")
    lazy: Guarded | None = command(name="later")

    def run(self, args):
        pass


@dataclass
class Settings:
    verbose: bool = False


@dataclass
class WithSettings:
    settings: Settings = dataclasses.field(default_factory=Settings)


@dataclass
class WithList:
    targets: list[str] = dataclasses.field(default_factory=list)


@dataclass
class Clashing:
    first: str = flag("", aliases="x")
    second: str = flag("", name="x")


@dataclass
class HelpField:
    help: bool = False


@dataclass
class TwinCommands:
    one: Leaf = command(Leaf, name="leaf")
    two: Leaf = command(Leaf, name="leaf")


@dataclass
class Needy:
    level: int

    def run(self, args):
        pass


@dataclass
class WithNeedy:
    needy: Needy | None = None


@dataclass
class Unresolved:
    value: "Undefined" = 0  # NOQA: F-821


@dataclass
class Nested:
    inner: Settings = dataclasses.field(default_factory=Settings)

    def run(self, args):
        pass


@dataclass
class Outer:
    nested: Nested = command(Nested)

    def run(self, args):
        pass


class TestExtract(TestCase):
    """Behavioral tests for extract() and describe()."""

    def testFieldsInDeclarationOrder(self):
        fields, commands = extract(Everything())
        self.assertEqual([field.name for field in fields], [
            "some-string",
            "some-int",
            "some-uint",
            "some-int64",
            "some-uint64",
            "some-float64",
            "some-duration",
            "some-bool",
        ])
        self.assertEqual([command.name for command in commands], ["leaf", "later"])

    def testKinds(self):
        fields, _ = extract(Everything())
        self.assertEqual(
            [field.kind.name for field in fields],
            ["string", "int", "uint", "int64", "uint64", "float", "duration", "bool"],
        )

    def testFieldDescriptor(self):
        fields, _ = extract(Everything(some_int=7))
        some_int = fields[1]
        self.assertEqual(some_int.attribute, "some_int")
        self.assertEqual(some_int.usage, "an int")
        self.assertEqual(some_int.env_vars, ("SOME_INT",))
        self.assertEqual(some_int.switches, ("--some-int",))
        self.assertEqual(some_int.default, 7)

    def testAssignWritesOwner(self):
        config = Everything()
        fields, _ = extract(config)
        fields[1].assign(42)
        self.assertEqual(config.some_int, 42)

    def testSubcommandFromInstance(self):
        config = Everything()
        _, commands = extract(config)
        self.assertIs(commands[0].target, config.leaf)
        self.assertEqual(commands[0].usage, "a leaf")
        self.assertIsNone(commands[0].attach)
        self.assertIsNotNone(commands[0].run)
        self.assertIsNone(commands[0].before)

    def testSubcommandFromNoneIsNotAttachedEagerly(self):
        config = Everything()
        _, commands = extract(config)
        lazy = commands[1]
        self.assertIsInstance(lazy.target, Guarded)
        self.assertIsNone(config.lazy)
        self.assertIsNotNone(lazy.before)
        lazy.attach()
        self.assertIs(config.lazy, lazy.target)

    def testDescribeWalk(self):
        tree = describe(Everything(), "prog")
        self.assertEqual([node.name for node in tree.walk()], ["prog", "leaf", "later"])

    def testRunnableProtocol(self):
        self.assertIsInstance(Leaf(), Runnable)
        self.assertNotIsInstance(Leaf(), PreRunnable)
        self.assertIsInstance(Guarded(), PreRunnable)
        self.assertNotIsInstance(Settings(), Runnable)

    def testDoesNotMutate(self):
        config = Everything(some_int=3)
        before = dataclasses.replace(config)
        describe(config, "prog")
        self.assertEqual(config, before)


class TestConfigurationFaults(TestCase):
    """Configuration faults raised at extraction time."""

    def testRequiresDataclassInstance(self):
        with self.assertRaises(TypeError):
            extract(Everything)
        with self.assertRaises(TypeError):
            extract(object())

    def testUnsupportedKind(self):
        with self.assertRaises(UnsupportedFieldKindError) as context:
            describe(WithList(), "prog")
        self.assertEqual(context.exception.field, "targets")
        self.assertEqual(context.exception.path, ("prog",))
        self.assertIn("list[str]", str(context.exception))
        self.assertTrue(str(context.exception).startswith("while configuring command 'prog':"))

    def testNestedNotRunnable(self):
        with self.assertRaises(NotRunnableError) as context:
            describe(WithSettings(), "prog")
        self.assertIsInstance(context.exception, UnsupportedFieldKindError)
        self.assertIn("Settings", str(context.exception))

    def testNestedNotRunnableReportsPath(self):
        with self.assertRaises(NotRunnableError) as context:
            describe(Outer(), "prog")
        self.assertEqual(context.exception.path, ("prog", "nested"))

    def testDuplicateSwitch(self):
        with self.assertRaises(DuplicateNameError):
            describe(Clashing(), "prog")

    def testHelpIsReserved(self):
        with self.assertRaises(DuplicateNameError):
            describe(HelpField(), "prog")

    def testDuplicateSubcommand(self):
        with self.assertRaises(DuplicateNameError):
            describe(TwinCommands(), "prog")

    def testUninstantiable(self):
        with self.assertRaises(UninstantiableCommandError):
            describe(WithNeedy(), "prog")

    def testUnresolvedAnnotation(self):
        with self.assertRaises(UnresolvedAnnotationError):
            describe(Unresolved(), "prog")

    def testExplicitNamingAppliesToSubcommands(self):
        with self.assertRaises(MissingNameError):
            describe(Outer(), "prog", naming=Naming.EXPLICIT)

    def testAllAreConfigurationErrors(self):
        for error in (
            UnsupportedFieldKindError,
            NotRunnableError,
            DuplicateNameError,
            UninstantiableCommandError,
            UnresolvedAnnotationError,
            MissingNameError,
        ):
            self.assertTrue(issubclass(error, ConfigurationError), error)


if __name__ == "__main__":
    unittest.main()
