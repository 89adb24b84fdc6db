"""
Parser behavioral tests.

Scope
- Defaults: with only the program name every field holds its initial value.
- Inline ('--x=v') and spaced ('--x v') forms are equivalent; short aliases
  behave like their long form.
- Boolean semantics: bare flag, '=true', '=false', anything else fails.
- Fail-fast errors: unrecognized flag, missing value, parse error.
- Positionals pass through in order, program name first.
- ParsedArguments: read-only mapping with attribute access.
"""
import copy
import decimal
import pickle
import typing
import unittest
from unittest import TestCase

from pennant import (
    CoercionError,
    FlagError,
    MissingValueError,
    ParseError,
    ParsedArguments,
    SchemaBuilder,
    UnrecognizedArgError,
    custom,
    parse,
)


@custom(zero="", name="Upper")
def upper(text):
    if not text.isupper():
        raise CoercionError("must be upper-case")
    return text


class Point(typing.NamedTuple):
    x: int
    y: int


def schema():
    return (
        SchemaBuilder()
        .register("is_active", bool)
        .register("opt_address", str | None)
        .register("address", str, default="1.2.3.4", short="a", descr="IP address")
        .register("number", int | None, placeholder="NUMBER")
        .register("size", float, default=2.5, short="s")
        .register("count", int, short="c")
        .register("shout", upper)
        .register("help", bool, short="h")
        .finalize()
    )


class DefaultsTest(TestCase):

    def testProgramNameOnly(self):
        parsed = parse(schema(), ["prog"])
        self.assertEqual(dict(parsed), {
            "is_active": False,
            "opt_address": None,
            "address": "1.2.3.4",
            "number": None,
            "size": 2.5,
            "count": 0,
            "shout": "",
            "help": False,
        })
        self.assertEqual(parsed.positionals, ("prog",))

    def testEmptyArguments(self):
        parsed = parse(schema(), [])
        self.assertEqual(parsed.positionals, ())
        self.assertEqual(parsed["address"], "1.2.3.4")

    def testParseIsRepeatable(self):
        compiled = schema()
        first = compiled.parse(["prog", "--count=3"])
        second = compiled.parse(["prog"])
        self.assertEqual(first["count"], 3)
        self.assertEqual(second["count"], 0)

    def testProgramNameIsNeverAFlag(self):
        parsed = parse(schema(), ["--count", "rest"])
        self.assertEqual(parsed.positionals, ("--count", "rest"))
        self.assertEqual(parsed["count"], 0)

    def testAcceptsAnyIterable(self):
        parsed = parse(schema(), iter(["prog", "-c", "4"]))
        self.assertEqual(parsed["count"], 4)


class ValueFormsTest(TestCase):

    def testInlineEqualsSpaced(self):
        for name, raw, expected in (
                ("address", "10.0.0.1", "10.0.0.1"),
                ("count", "-3", -3),
                ("size", "1e3", 1000.0),
                ("number", "7", 7),
                ("opt_address", "x", "x"),
                ("shout", "HEY", "HEY"),
        ):
            with self.subTest(name=name):
                inline = parse(schema(), ["prog", f"--{name}={raw}"])
                spaced = parse(schema(), ["prog", f"--{name}", raw])
                self.assertEqual(inline[name], expected)
                self.assertEqual(inline, spaced)

    def testShortAliasEqualsLong(self):
        long = parse(schema(), ["prog", "--address=5.6.7.8", "--size", "0.5"])
        short = parse(schema(), ["prog", "-a=5.6.7.8", "-s", "0.5"])
        self.assertEqual(long, short)
        self.assertEqual(short.address, "5.6.7.8")

    def testEmptyInlineValue(self):
        self.assertEqual(parse(schema(), ["prog", "--address="])["address"], "")

    def testInlineValueKeepsLaterEquals(self):
        self.assertEqual(parse(schema(), ["prog", "--address=a=b"])["address"], "a=b")

    def testSpacedValueIsTakenVerbatim(self):
        parsed = parse(schema(), ["prog", "--address", "--count"])
        self.assertEqual(parsed["address"], "--count")
        self.assertEqual(parsed["count"], 0)

    def testSpacedNegativeNumber(self):
        self.assertEqual(parse(schema(), ["prog", "-c", "-5"])["count"], -5)

    def testLastOccurrenceWins(self):
        parsed = parse(schema(), ["prog", "-c", "1", "--count=2"])
        self.assertEqual(parsed["count"], 2)

    def testOptionalPresentValue(self):
        parsed = parse(schema(), ["prog", "--opt_address", ""])
        self.assertEqual(parsed["opt_address"], "")


class BoolTest(TestCase):

    def testBareFlag(self):
        self.assertIs(parse(schema(), ["prog", "--is_active"])["is_active"], True)

    def testExplicitValues(self):
        self.assertIs(parse(schema(), ["prog", "--is_active=true"])["is_active"], True)
        self.assertIs(parse(schema(), ["prog", "--is_active=false"])["is_active"], False)

    def testBareFlagDoesNotConsumeNextToken(self):
        parsed = parse(schema(), ["prog", "--is_active", "false"])
        self.assertIs(parsed["is_active"], True)
        self.assertEqual(parsed.positionals, ("prog", "false"))

    def testShortBool(self):
        self.assertIs(parse(schema(), ["prog", "-h"])["help"], True)

    def testInvalidValue(self):
        for raw in ("", "yes", "True", "1"):
            with self.subTest(raw=raw):
                with self.assertRaises(ParseError) as context:
                    parse(schema(), ["prog", f"--is_active={raw}"])
                self.assertEqual(context.exception.typename, "bool")
                self.assertEqual(context.exception.input, raw)
                self.assertEqual(str(context.exception), f'failed to parse "{raw}" as bool type')


class ErrorsTest(TestCase):

    def testUnrecognizedLong(self):
        with self.assertRaises(UnrecognizedArgError) as context:
            parse(schema(), ["prog", "--nope"])
        self.assertEqual(context.exception.key, "--nope")
        self.assertEqual(str(context.exception), 'unrecognized argument "--nope"')

    def testUnrecognizedKeyExcludesValue(self):
        with self.assertRaises(UnrecognizedArgError) as context:
            parse(schema(), ["prog", "-z=3"])
        self.assertEqual(context.exception.key, "-z")

    def testFailFast(self):
        with self.assertRaises(UnrecognizedArgError) as context:
            parse(schema(), ["prog", "--first", "--count=x", "--second"])
        self.assertEqual(context.exception.key, "--first")

    def testFirstErrorInScanOrder(self):
        with self.assertRaises(ParseError):
            parse(schema(), ["prog", "--count=x", "--nope"])

    def testMissingValue(self):
        for args in (["prog", "--address"], ["prog", "-c"], ["prog", "--opt_address"]):
            with self.subTest(args=args):
                with self.assertRaises(MissingValueError) as context:
                    parse(schema(), args)
                self.assertIn(context.exception.name, ("address", "count", "opt_address"))

    def testMissingValueUsesFieldName(self):
        with self.assertRaises(MissingValueError) as context:
            parse(schema(), ["prog", "-a"])
        self.assertEqual(context.exception.name, "address")
        self.assertEqual(str(context.exception), 'missing value for argument "address"')

    def testParseError(self):
        with self.assertRaises(ParseError) as context:
            parse(schema(), ["prog", "--count", "abc"])
        error = context.exception
        self.assertEqual(error.typename, "int")
        self.assertEqual(error.input, "abc")
        self.assertIsInstance(error.__cause__, CoercionError)
        self.assertIs(error.source, error.__cause__)
        self.assertEqual(str(error), 'failed to parse "abc" as int type')

    def testOptionalTypename(self):
        with self.assertRaises(ParseError) as context:
            parse(schema(), ["prog", "--number=many"])
        self.assertEqual(context.exception.typename, "Optional[int]")

    def testCustomMessage(self):
        with self.assertRaises(ParseError) as context:
            parse(schema(), ["prog", "--shout", "quiet"])
        self.assertEqual(str(context.exception), 'failed to parse "quiet" as Upper type: must be upper-case')

    def testAllAreFlagErrors(self):
        for args in (["prog", "--nope"], ["prog", "-c"], ["prog", "-c", "x"]):
            with self.subTest(args=args):
                with self.assertRaises(FlagError):
                    parse(schema(), args)

    def testNonStringArguments(self):
        with self.assertRaises(TypeError):
            parse(schema(), [b"prog"])


class PositionalsTest(TestCase):

    def testInterleaving(self):
        parsed = parse(schema(), ["prog", "one", "--count=2", "two", "-a", "addr", "three"])
        self.assertEqual(parsed.positionals, ("prog", "one", "two", "three"))
        self.assertEqual(parsed["count"], 2)
        self.assertEqual(parsed["address"], "addr")


class CustomValuesTest(TestCase):

    def testAbsentNamedTupleKeepsItsType(self):
        point = custom(lambda text: Point(*map(int, text.split(","))), zero=Point(0, 0), name="Point")
        compiled = SchemaBuilder().register("origin", point).finalize()
        absent = parse(compiled, ["prog"])["origin"]
        present = parse(compiled, ["prog", "--origin=1,2"])["origin"]
        self.assertIs(type(absent), Point)
        self.assertEqual(absent.x, 0)
        self.assertIs(type(present), Point)
        self.assertEqual(present, Point(1, 2))

    def testAbsentBytesKeepsItsType(self):
        compiled = SchemaBuilder().register("key", custom(bytes.fromhex, zero=b"")).finalize()
        self.assertEqual(parse(compiled, ["prog"])["key"], b"")
        self.assertEqual(parse(compiled, ["prog", "--key=0a"])["key"], b"\n")

    def testAbsentListDefaultKeepsItsType(self):
        items = custom(lambda text: text.split(","), name="List")
        compiled = SchemaBuilder().register("items", items, default="a,b").finalize()
        self.assertEqual(parse(compiled, ["prog"])["items"], ["a", "b"])

    def testInvalidDecimal(self):
        compiled = SchemaBuilder().register("amount", decimal.Decimal).finalize()
        self.assertEqual(parse(compiled, ["prog"])["amount"], decimal.Decimal())
        self.assertEqual(parse(compiled, ["prog", "--amount=1.25"])["amount"], decimal.Decimal("1.25"))
        with self.assertRaises(ParseError) as context:
            parse(compiled, ["prog", "--amount=abc"])
        self.assertEqual(context.exception.typename, "Decimal")
        self.assertEqual(context.exception.input, "abc")
        self.assertIsInstance(context.exception.__cause__.__cause__, decimal.InvalidOperation)


class LoggingTest(TestCase):

    def testDebugTrace(self):
        with self.assertLogs("pennant.parser", level="DEBUG") as logs:
            parse(schema(), ["prog", "-c", "1"])
        self.assertTrue(any("parsed 8 flag(s) and 1 positional(s)" in line for line in logs.output))

    def testFailureIsLogged(self):
        with self.assertLogs("pennant.parser", level="DEBUG") as logs:
            with self.assertRaises(UnrecognizedArgError):
                parse(schema(), ["prog", "--nope"])
        self.assertTrue(any('parse failed: unrecognized argument "--nope"' in line for line in logs.output))


class ParsedArgumentsTest(TestCase):

    def setUp(self):
        self.parsed = ParsedArguments({"count": 3, "name": "x"}, ["prog", "rest"])

    def testMapping(self):
        self.assertEqual(self.parsed["count"], 3)
        self.assertEqual(len(self.parsed), 2)
        self.assertEqual(list(self.parsed), ["count", "name"])
        self.assertIn("name", self.parsed)

    def testAttributes(self):
        self.assertEqual(self.parsed.count, 3)
        self.assertEqual(self.parsed.positionals, ("prog", "rest"))
        with self.assertRaises(AttributeError):
            self.parsed.missing

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.parsed.count = 4
        with self.assertRaises(TypeError):
            self.parsed["count"] = 4

    def testDetachedFromSource(self):
        values = {"count": 1}
        parsed = ParsedArguments(values)
        values["count"] = 2
        self.assertEqual(parsed["count"], 1)

    def testEquality(self):
        self.assertEqual(self.parsed, ParsedArguments({"count": 3, "name": "x"}, ("prog", "rest")))
        self.assertNotEqual(self.parsed, ParsedArguments({"count": 3, "name": "x"}, ("prog",)))
        self.assertEqual(self.parsed, {"count": 3, "name": "x"})

    def testCopyAndPickle(self):
        self.assertEqual(copy.copy(self.parsed), self.parsed)
        self.assertEqual(pickle.loads(pickle.dumps(self.parsed)), self.parsed)

    def testRichRepr(self):
        self.assertEqual(list(self.parsed.__rich_repr__()), [
            ("count", 3),
            ("name", "x"),
            ("positionals", ("prog", "rest")),
        ])


if __name__ == "__main__":
    unittest.main()
