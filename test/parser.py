"""
Parser behavioral tests (registration, token classification, dispatch, help).

Scope
- Validate the fluent registration API (o/l, '=' and ' ' suffixes).
- Validate token classification, short/long dispatch and leftovers.
- Validate faults for missing arguments, unrecognized options, empty inline
  values, conversion and constraint failures.
- Validate that repeated parses never leak state into each other.
- Validate the description renderer (plain and rich).

Conventions
- Test method names follow CamelCase per project convention.
- argv-style vectors start with a program name, which is never parsed.
"""

from __future__ import annotations

import io
import unittest
import warnings
from unittest import TestCase

from rich.console import Console

from clopt import (
    ArgPattern,
    CommandLineOption,
    ConfigError,
    ConstraintError,
    ConversionError,
    DuplicatedOptionWarning,
    MissingArgumentError,
    MissingInlineValueError,
    NoValuePresentError,
    UnrecognizedOptionError,
    UsageError,
    Value,
)


def _tool():
    cli = CommandLineOption("tool")
    (cli.add_options()
        .o("f", "force")
        .o("n", Value(type=int), "number")
        .l("count=", Value(5).with_limit(3), "how many times")
        .l("port", Value(type=int), "port to bind")
        .l("x ", Value(type=int), "next-argument only")
        .l("verbose", "talk more")
        .l("level", Value(type=int, constraint=lambda x: 0 <= x <= 3), "level"))
    return cli


class TestRegistration(TestCase):
    """Fluent registration."""

    def testSuffixesPinCapability(self):
        cli = _tool()
        self.assertEqual(cli.map.lookup_long("count=").capability(), ArgPattern.EQUAL_SIGN)
        self.assertEqual(cli.map.lookup("x ").capability(), ArgPattern.NEXT_ARG)
        self.assertEqual(cli.map.lookup_long("port").capability(), ArgPattern.ALL_AVAILABLE)
        self.assertEqual(cli.map.lookup_short("n").capability(), ArgPattern.NEXT_ARG)

    def testInvalidNamesRejected(self):
        cli = CommandLineOption("tool")
        for name in ("", "-v", "a=b", "a b"):
            with self.subTest(name=name), self.assertRaises(ConfigError):
                cli.add_options().o(name, "bad")
        with self.assertRaises(ConfigError):
            cli.add_options().l("flag=", "flags cannot be pinned")

    def testFlagWithTwoDescriptionsRejected(self):
        with self.assertRaises(ConfigError):
            CommandLineOption("tool").add_options().o("v", "one", "two")

    def testDuplicateOptionWarns(self):
        cli = CommandLineOption("tool")
        cli.add_options().o("v", "first")
        with self.assertWarns(DuplicatedOptionWarning):
            cli.add_options().o("v", "second")

    def testFlagAndInlineOptionCoexist(self):
        cli = CommandLineOption("tool")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            cli.add_options().l("out", "flag form").l("out=", Value(type=str), "inline form")
        self.assertEqual(caught, [])

    def testInvalidLayoutRejected(self):
        with self.assertRaises(ConfigError):
            CommandLineOption("tool", width=-1)
        with self.assertRaises(ConfigError):
            CommandLineOption("  ")


class TestParsing(TestCase):
    """Token classification and dispatch."""

    def setUp(self):
        self.cli = _tool()

    def testInlineValuesRoundTrip(self):
        result = self.cli.parse(["prog", "--count=1,2,3"])
        self.assertTrue(result["count="])
        self.assertEqual(result["count="].extract(list[int]), [1, 2, 3])

    def testDefaultsSurviveWhenUnused(self):
        result = self.cli.parse(["prog"])
        self.assertFalse(result["count="])
        self.assertEqual(result["count="].extract(int), 5)

    def testLimitClampsExcessValues(self):
        result = self.cli.parse(["prog", "--count=1,2,3,4,5"])
        self.assertEqual(result["count="].extract(list[int]), [1, 2, 5])

    def testFlagAndLeftovers(self):
        result = self.cli.parse(["prog", "-f"])
        self.assertTrue(result["f"])
        self.assertEqual(result.leftovers, [])

        result = self.cli.parse(["prog", "-f", "extra"])
        self.assertTrue(result["f"])
        self.assertEqual(result.leftovers, ["extra"])

    def testProgramNameIsSkipped(self):
        result = self.cli.parse(["-f"])
        self.assertFalse(result["f"])
        self.assertEqual(result.leftovers, [])

    def testNextArgumentForms(self):
        result = self.cli.parse(["prog", "-n", "4", "--port", "80", "--x", "7"])
        self.assertEqual(result["n"].extract(int), 4)
        self.assertEqual(result["port"].extract(int), 80)
        self.assertEqual(result["x "].extract(int), 7)

    def testAllAvailableAcceptsInline(self):
        result = self.cli.parse(["prog", "--port=8080"])
        self.assertEqual(result["port"].extract(int), 8080)

    def testLongFlag(self):
        self.assertTrue(self.cli.parse(["prog", "--verbose"])["verbose"])

    def testPositionalTokens(self):
        result = self.cli.parse(["prog", "a", "-", "--", "---x", "b"])
        self.assertEqual(result.leftovers, ["a", "-", "--", "---x", "b"])

    def testBundledShortFlagsAreNotSplit(self):
        with self.assertRaises(UnrecognizedOptionError):
            self.cli.parse(["prog", "-fn", "1"])

    def testConversionErrorNamesOptionTokenAndType(self):
        with self.assertRaises(ConversionError) as context:
            self.cli.parse(["prog", "--port", "abc"])
        message = str(context.exception)
        self.assertIn("--port", message)
        self.assertIn("abc", message)
        self.assertIn("int", message)

    def testConstraintError(self):
        with self.assertRaises(ConstraintError):
            self.cli.parse(["prog", "--level", "7"])

    def testEqualSignAgainstNextArgOnlyOption(self):
        with self.assertRaises(UsageError) as context:
            self.cli.parse(["prog", "--x=1"])
        self.assertIsInstance(context.exception, UnrecognizedOptionError)

    def testNextArgAgainstEqualSignOnlyOption(self):
        with self.assertRaises(UnrecognizedOptionError):
            self.cli.parse(["prog", "--count", "1"])

    def testFlagWithInlineValue(self):
        with self.assertRaises(UnrecognizedOptionError):
            self.cli.parse(["prog", "--verbose=yes"])

    def testUnknownOptions(self):
        for token in ("-z", "--zzz", "-f=1"):
            with self.subTest(token=token), self.assertRaises(UnrecognizedOptionError):
                self.cli.parse(["prog", token])

    def testMissingArgumentAtEnd(self):
        with self.assertRaises(MissingArgumentError):
            self.cli.parse(["prog", "-n"])

    def testMissingArgumentBeforeOption(self):
        with self.assertRaises(MissingArgumentError):
            self.cli.parse(["prog", "--port", "--verbose"])
        # negative numbers look like short options too
        with self.assertRaises(MissingArgumentError):
            self.cli.parse(["prog", "-n", "-5"])

    def testMissingInlineValue(self):
        with self.assertRaises(MissingInlineValueError) as context:
            self.cli.parse(["prog", "--count="])
        self.assertIsInstance(context.exception, UsageError)

    def testFaultCarriesPosition(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.cli.parse(["prog", "a", "--nope"])
        self.assertEqual(context.exception.options["index"], 2)
        self.assertEqual(context.exception.options["token"], "--nope")

    def testPromptString(self):
        result = self.cli.parse("-f 'two words' --port=1")
        self.assertTrue(result["f"])
        self.assertEqual(result.leftovers, ["two words"])
        self.assertEqual(result["port"].extract(int), 1)

    def testNonStringTokensRejected(self):
        with self.assertRaises(TypeError):
            self.cli.parse(["prog", 1])
        with self.assertRaises(TypeError):
            self.cli.parse(42)


class TestRepeatedParsing(TestCase):
    """The template is never mutated; parses are independent."""

    def testIndependentResults(self):
        cli = _tool()
        first = cli.parse(["prog", "--count=7", "-f", "left"])
        second = cli.parse(["prog", "--count=8,9"])

        self.assertEqual(first["count="].extract(list[int]), [7])
        self.assertEqual(second["count="].extract(list[int]), [8, 9])
        self.assertTrue(first["f"])
        self.assertFalse(second["f"])
        self.assertEqual(first.leftovers, ["left"])
        self.assertEqual(second.leftovers, [])

        template = cli.map
        self.assertFalse(template["count="])
        self.assertEqual(template["count="].extract(list[int]), [5])
        self.assertEqual(template.leftovers, [])

    def testFailedParseLeavesTemplateUntouched(self):
        cli = _tool()
        with self.assertRaises(ConversionError):
            cli.parse(["prog", "--count=1,x"])
        self.assertEqual(cli.map["count="].extract(list[int]), [5])
        self.assertFalse(cli.map["count="])


class TestShellMode(TestCase):
    """Faults are printed and exit the process in shell mode."""

    def testShellModeExits(self):
        cli = CommandLineOption("tool", shell=True, colorful=False)
        cli.add_options().o("f", "force")
        with self.assertRaises(SystemExit) as context:
            cli.parse(["prog", "--nope"])
        self.assertEqual(context.exception.code, 1)


class TestDescription(TestCase):
    """Two-column help rendering."""

    def testNoOptions(self):
        self.assertEqual(CommandLineOption("tool").description(), "  None\n")

    def testColumns(self):
        cli = CommandLineOption("tool")
        (cli.add_options()
            .o("f", "force")
            .l("count=", Value(5).with_limit(3), "how many times"))
        self.assertEqual(
            cli.description(),
            "  -f" + " " * 23 + "force\n"
            "  --count=<arg...[1-3]>(=5)  how many times\n",
        )

    def testBoundaryUsesPadding(self):
        cli = CommandLineOption("tool")
        cli.add_options().l("abcdefghijklmnopqrstu", "desc")  # 23 characters: padded to the width
        self.assertEqual(cli.description(), "  --abcdefghijklmnopqrstu  desc\n")
        cli = CommandLineOption("tool")
        cli.add_options().l("abcdefghijklmnopqrstuv", "desc")  # 24 characters: gap only
        self.assertEqual(cli.description(), "  --abcdefghijklmnopqrstuv  desc\n")
        cli = CommandLineOption("tool")
        cli.add_options().l("abc", "desc")
        self.assertEqual(cli.description(), "  --abc" + " " * 20 + "desc\n")

    def testCustomWidthAndGap(self):
        cli = CommandLineOption("tool", width=10, gap=1)
        cli.add_options().o("f", "force").l("verbosity", "more")
        self.assertEqual(cli.description(), "  -f        force\n  --verbosity more\n")
        self.assertEqual(cli.description(width=4, gap=3), "  -f   force\n  --verbosity   more\n")

    def testRichDescription(self):
        cli = CommandLineOption("tool", colorful=False)
        (cli.add_options()
            .o("f", "force")
            .l("port", Value(type=int).with_name("PORT"), "port to bind"))
        buffer = io.StringIO()
        cli.print_description(Console(file=buffer, width=120, color_system=None))
        self.assertEqual(buffer.getvalue(), cli.description())

    def testRichDescriptionHonorsWidthAndGap(self):
        cli = CommandLineOption("tool", colorful=False)
        cli.add_options().o("f", "force").l("verbosity", "more")
        buffer = io.StringIO()
        cli.print_description(Console(file=buffer, width=120, color_system=None), width=4, gap=3)
        self.assertEqual(buffer.getvalue(), cli.description(width=4, gap=3))
        self.assertEqual(buffer.getvalue(), "  -f   force\n  --verbosity   more\n")

    def testValueChangedAfterRegistration(self):
        value = Value(type=int)
        cli = CommandLineOption("tool")
        cli.add_options().l("a", value, "d")
        value.with_default(3)
        self.assertEqual(cli.description(), "  --a[ |=]<arg>" + " " * 12 + "d\n")
        with self.assertRaises(NoValuePresentError):
            cli.parse(["prog"])["a"].extract(int)

    def testRichDescriptionWithoutOptions(self):
        buffer = io.StringIO()
        CommandLineOption("tool").print_description(Console(file=buffer, width=120, color_system=None))
        self.assertEqual(buffer.getvalue(), "  None\n")


if __name__ == '__main__':
    unittest.main()
