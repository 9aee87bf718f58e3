"""
Utilities module tests (sentinel, naming conventions, permissive parsing).

Scope
- Validate the Unset sentinel and coalesce().
- Validate kebabcase()/envcase() against the naming conventions flags rely on.
- Validate parsebool() never raises and splitlist() never yields empty elements.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argbind.utils import Unset, UnsetType, coalesce, rename, kebabcase, envcase, parsebool, splitlist


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")

    def testSubclassingRejected(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testRenameUpdatesNames(self):
        def work():
            pass

        rename(work, "deploy")
        self.assertEqual(work.__name__, "deploy")
        self.assertEqual(work.__qualname__, "deploy")


class TestNaming(TestCase):
    """Behavioral tests for kebabcase() and envcase()."""

    def testCamelCase(self):
        self.assertEqual(kebabcase("FirstName"), "first-name")
        self.assertEqual(kebabcase("SomeInt"), "some-int")

    def testDigitsStayWithLetters(self):
        self.assertEqual(kebabcase("SomeFloat64"), "some-float64")
        self.assertEqual(kebabcase("SomeInt64"), "some-int64")

    def testUppercaseAfterDigitSplits(self):
        self.assertEqual(kebabcase("V2Beta"), "v2-beta")

    def testAcronyms(self):
        self.assertEqual(kebabcase("HTTPServer"), "http-server")
        self.assertEqual(kebabcase("SomeUInt64"), "some-u-int64")
        self.assertEqual(kebabcase("ID"), "id")

    def testSnakeCase(self):
        self.assertEqual(kebabcase("some_int"), "some-int")
        self.assertEqual(kebabcase("__private_value"), "private-value")

    def testIdempotent(self):
        for identifier in ("SomeFloat64", "FirstName", "some_int", "HTTPServer"):
            once = kebabcase(identifier)
            self.assertEqual(kebabcase(identifier), once)
            self.assertEqual(kebabcase(once), once)

    def testEnvcase(self):
        self.assertEqual(envcase("some-float64"), "SOME_FLOAT64")
        self.assertEqual(envcase("first-name"), "FIRST_NAME")


class TestParsing(TestCase):
    """Behavioral tests for parsebool() and splitlist()."""

    def testParseboolTruths(self):
        for value in ("1", "t", "T", "TRUE", "true", "True", True):
            self.assertTrue(parsebool(value), value)

    def testParseboolFalsities(self):
        for value in ("0", "f", "F", "FALSE", "false", "False", False):
            self.assertFalse(parsebool(value), value)

    def testParseboolMalformedIsFalse(self):
        for value in ("yes please", "", None, Unset, 3):
            self.assertIs(parsebool(value), False)

    def testSplitlistTrims(self):
        self.assertEqual(splitlist(" A, B ,C ", ","), ["A", "B", "C"])

    def testSplitlistDropsEmpties(self):
        self.assertEqual(splitlist("fn  f", " "), ["fn", "f"])
        self.assertEqual(splitlist("", ","), [])
        self.assertEqual(splitlist(Unset, ","), [])

    def testSplitlistAcceptsIterables(self):
        self.assertEqual(splitlist(("fn ", " f"), " "), ["fn", "f"])

    def testSplitlistRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            splitlist(42, ",")


if __name__ == "__main__":
    unittest.main()
