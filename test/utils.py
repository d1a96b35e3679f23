"""
Tests for the internal utilities.

This module verifies:
- The Unset sentinel (singleton, falsy, printable, sealed, usable in unions).
- coalesce() replacing only Unset.
- rename() in function and decorator form.
- mirror() handing back copies of container state.
- ordinal() wording and suffixes.
"""
import unittest
from unittest import TestCase

from vexillum.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the Unset sentinel.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self) -> None:
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testSealed(self) -> None:
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):
                pass

    def testUnion(self) -> None:
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class CoalesceTest(TestCase):
    """
    Test suite for coalesce().
    """

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalsyValues(self) -> None:
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    """
    Test suite for rename().
    """

    def testFunctionForm(self) -> None:
        def original():
            pass

        renamed = rename(original, "renamed")
        self.assertIs(renamed, original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("decorated")
        def original():
            pass

        self.assertEqual(original.__name__, "decorated")

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(len, "name")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):
    """
    Test suite for mirror().
    """

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")
            name = mirror("name")

            def __init__(self):
                self._items = [1, [2, 3]]
                self._table = {"a": {"b": 1}}
                self._name = "holder"

        self.holder = Holder()

    def testCopiesContainers(self) -> None:
        items = self.holder.items
        items.append(4)
        items[1].append(5)
        self.holder.table["a"]["c"] = 2
        self.assertEqual(self.holder.items, [1, [2, 3]])
        self.assertEqual(self.holder.table, {"a": {"b": 1}})

    def testPassesScalarsThrough(self) -> None:
        self.assertEqual(self.holder.name, "holder")

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.name = "other"

    def testRejectsNonStringName(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


class OrdinalTest(TestCase):
    """
    Test suite for ordinal().
    """

    def testWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self) -> None:
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(24), "24th")
        self.assertEqual(ordinal(111), "111th")
        self.assertEqual(ordinal(101), "101st")

    def testRejectsNonIntegers(self) -> None:
        ordinal(1)
        with self.assertRaises(TypeError):
            ordinal(True)
        with self.assertRaises(TypeError):
            ordinal("1")


if __name__ == "__main__":
    unittest.main()
