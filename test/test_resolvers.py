"""
Resolver behavioral tests (option cardinality, short clusters, positional slots).

Scope
- Drive OptionResolver/PositionalResolver directly with a token stream, the way the
  runners do, to pin down the per-token rules independently of dispatch.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argotype import Option, Positional, Extra
from argotype.faults import (
    UnknownOptionError,
    FlagAssignmentError,
    DuplicatedOptionError,
    OptionValueRequiredError,
    InvalidValueError,
    UnexpectedPositionalError,
    MissingPositionalsError,
    HelpRequested,
)
from argotype.resolvers import OptionResolver, PositionalResolver
from argotype.tokens import Stream, classify


def fault(type, message, /, **details):
    return type(message, help=lambda: "HELP", path=("app",), **details)


def table(*options):
    return (
        {option.long: option for option in options},
        {option.short: option.long for option in options if option.short},
    )


class TestOptionResolver(TestCase):

    def setUp(self):
        self.options, self.shorts = table(
            Option("f", "force", "overwrite"),
            Option("v", "verbose", "talk more"),
            Option("C", "cwd", "change directory", "scalar"),
            Option("n", "number", "numbers", "list", type=int),
        )

    def resolve(self, args, duplicates=False, signals=None):
        resolver = OptionResolver(self.options, self.shorts, fault=fault, duplicates=duplicates, signals=signals)
        stream = Stream(args)
        while stream:
            resolver.resolve(classify(stream.take()), stream)
        return resolver.values

    def testBooleanLong(self):
        self.assertEqual(self.resolve(["--force"]), {"force": True})

    def testScalarInlineAndNextToken(self):
        self.assertEqual(self.resolve(["--cwd=dir"]), {"cwd": "dir"})
        self.assertEqual(self.resolve(["--cwd", "dir"]), {"cwd": "dir"})

    def testScalarNextTokenMayLookLikeAnOption(self):
        self.assertEqual(self.resolve(["--cwd", "--force"]), {"cwd": "--force"})

    def testListAccumulatesInOrder(self):
        self.assertEqual(self.resolve(["-n", "1", "--number=2", "-n3"]), {"number": [1, 2, 3]})

    def testShortBooleanCluster(self):
        self.assertEqual(self.resolve(["-fv"]), {"force": True, "verbose": True})

    def testShortClusterValueAttachment(self):
        self.assertEqual(self.resolve(["-Cdir"]), self.resolve(["-C", "dir"]))
        self.assertEqual(self.resolve(["-fCdir"]), {"force": True, "cwd": "dir"})

    def testShortListRemainderIsOneValue(self):
        options, shorts = table(Option("C", "cwd", "directories", "list"))
        resolver = OptionResolver(options, shorts, fault=fault)
        stream = Stream(["-Cab"])
        resolver.resolve(classify(stream.take()), stream)
        self.assertEqual(resolver.values, {"cwd": ["ab"]})

    def testUnknownLongWithSuggestion(self):
        with self.assertRaises(UnknownOptionError) as context:
            self.resolve(["--forse"])
        self.assertEqual(context.exception.message, "unknown option '--forse' given at first position")
        self.assertEqual(context.exception.hint, "did you mean '--force'?")
        self.assertEqual(context.exception.index, 1)

    def testUnknownShortLetter(self):
        with self.assertRaises(UnknownOptionError) as context:
            self.resolve(["-fx"])
        self.assertIn("'-x'", context.exception.message)

    def testBooleanInlineValueRejected(self):
        with self.assertRaises(FlagAssignmentError):
            self.resolve(["--force=yes"])

    def testBooleanTwiceRejectedWithoutPolicy(self):
        with self.assertRaises(DuplicatedOptionError) as context:
            self.resolve(["--force", "-f"])
        self.assertEqual(
            context.exception.message,
            "option '--force' (-f) given multiple times (again at second position)",
        )

    def testBooleanTwiceAcceptedWithPolicy(self):
        self.assertEqual(self.resolve(["--force", "--force"], duplicates=True), {"force": True})

    def testScalarTwiceLastWinsWithPolicy(self):
        self.assertEqual(self.resolve(["-C", "a", "--cwd=b"], duplicates=True), {"cwd": "b"})

    def testScalarTwiceRejectedWithoutPolicy(self):
        with self.assertRaises(DuplicatedOptionError):
            self.resolve(["-C", "a", "--cwd=b"])

    def testMissingValue(self):
        with self.assertRaises(OptionValueRequiredError) as context:
            self.resolve(["--force", "--cwd"])
        self.assertEqual(context.exception.message, "option '--cwd' (-C) at second position requires a value")

    def testShortMissingValue(self):
        with self.assertRaises(OptionValueRequiredError):
            self.resolve(["-C"])

    def testInvalidValueIsChained(self):
        with self.assertRaises(InvalidValueError) as context:
            self.resolve(["-n", "x"])
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertIn("invalid value 'x' for option '--number' (-n) at first position", context.exception.message)

    def testSignalFiresBeforeStoring(self):
        def signal():
            raise HelpRequested("HELP", path=("app",))

        with self.assertRaises(HelpRequested):
            self.resolve(["--force"], signals={"force": signal})


class TestPositionalResolver(TestCase):

    def testSlotsThenPadding(self):
        resolver = PositionalResolver(
            (Positional("a"), Positional("b", required=False)), None, fault=fault
        )
        resolver.accept("x", 1)
        self.assertEqual(resolver.finalize(), ("x", None))

    def testExtraSink(self):
        resolver = PositionalResolver((Positional("a"),), Extra("rest", type=int), fault=fault)
        for index, raw in enumerate(["x", "1", "2"], 1):
            resolver.accept(raw, index)
        self.assertEqual(resolver.finalize(), ("x", 1, 2))

    def testOverflowWithoutSink(self):
        resolver = PositionalResolver((Positional("a"),), None, fault=fault)
        resolver.accept("x", 1)
        with self.assertRaises(UnexpectedPositionalError) as context:
            resolver.accept("y", 2)
        self.assertEqual(context.exception.message, "extra positional argument 'y' given at second position")

    def testMissingRequired(self):
        resolver = PositionalResolver((Positional("a"), Positional("b")), None, fault=fault)
        resolver.accept("x", 1)
        with self.assertRaises(MissingPositionalsError) as context:
            resolver.finalize()
        self.assertEqual(context.exception.message, "required positional parameters not given (missing <b>)")
        self.assertEqual(context.exception.help(), "HELP")

    def testConversion(self):
        resolver = PositionalResolver((Positional("count", type=int),), None, fault=fault)
        with self.assertRaises(InvalidValueError):
            resolver.accept("many", 1)


if __name__ == "__main__":
    unittest.main()
