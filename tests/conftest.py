"""
Pytest configuration and shared fixtures for j5codec tests.

Provides immutable test documents covering the JSON5 grammar: documents
that must be rejected with a specific error, and documents that must parse
to a known Python result.
"""

import math
from dataclasses import dataclass
from typing import Any

import pytest

import j5codec


@dataclass(frozen=True)
class Json5TestCase:
    """
    Immutable container for JSON5 test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    expected_output: Any = None
    expected_error: type[Exception] | None = None


@pytest.fixture
def json5_fail_cases() -> list[Json5TestCase]:
    """
    Provides documents that must fail parsing, with the error each raises.

    Every case is a syntax error, so each error is a ``JSON5DecodeError``
    carrying the offset where the problem was detected.
    """
    fail_docs: list[tuple[str, str, type[Exception]]] = [
        ("unclosed array", '["Unclosed array"', j5codec.UnexpectedEofError),
        ("unclosed object", "{a: 1", j5codec.UnexpectedEofError),
        ("missing colon", '{"Missing colon" null}', j5codec.ExpectedCharError),
        ("double colon", '{"Double colon":: null}', j5codec.UnexpectedCharError),
        ("double comma", "[1,,2]", j5codec.UnexpectedCharError),
        ("leading comma", '[   , "<-- missing value"]', j5codec.UnexpectedCharError),
        ("double trailing comma", '{"a": 1,,}', j5codec.UnexpectedCharError),
        ("extra close", '["Extra close"]]', j5codec.TrailingDataError),
        ("comma after close", '["Comma after the close"],', j5codec.TrailingDataError),
        ("value after close", '{a: true} "misplaced"', j5codec.TrailingDataError),
        ("illegal expression", '{"Illegal expression": 1 + 2}', j5codec.UnexpectedCharError),
        ("illegal invocation", '{"Illegal invocation": alert()}', j5codec.UnexpectedCharError),
        ("bad literal", '["Bad value", truth]', j5codec.UnexpectedCharError),
        ("mismatched close", '["mismatch"}', j5codec.UnexpectedCharError),
        ("leading zero", '{"Numbers cannot have leading zeroes": 013}', j5codec.InvalidNumberError),
        ("empty exponent", "[0e]", j5codec.InvalidNumberError),
        ("signed empty exponent", "[0e+]", j5codec.InvalidNumberError),
        ("double exponent sign", "[0e+-1]", j5codec.InvalidNumberError),
        ("bare sign", "-", j5codec.InvalidNumberError),
        ("empty hex", "[0x]", j5codec.InvalidNumberError),
        ("hex above 64 bits", "0x1_0000_0000_0000_0000", j5codec.InvalidNumberError),
        ("negative below 64 bits", "-9223372036854775809", j5codec.InvalidNumberError),
        ("signed NaN", "-NaN", j5codec.InvalidNumberError),
        ("unknown escape", '["Illegal backslash escape: \\q"]', j5codec.InvalidEscapeError),
        ("octal escape", '["Illegal backslash escape: \\017"]', j5codec.InvalidEscapeError),
        ("short hex escape", '"\\x4g"', j5codec.InvalidEscapeError),
        ("short unicode escape", '"\\u12"', j5codec.InvalidEscapeError),
        ("lone high surrogate", '"\\uD800"', j5codec.InvalidUnicodeError),
        ("lone low surrogate", '"\\uDC00"', j5codec.InvalidUnicodeError),
        ("code point too large", '"\\u{110000}"', j5codec.InvalidUnicodeError),
        ("raw line break", '["line\nbreak"]', j5codec.UnexpectedCharError),
        ("unterminated string", "'unterminated", j5codec.UnexpectedEofError),
        ("unterminated comment", "/* comment", j5codec.UnexpectedEofError),
        ("digit key", "{1a: 2}", j5codec.UnexpectedCharError),
        ("lowercase nan", "[nan]", j5codec.UnexpectedCharError),
        ("naked backslash", "[\\naked]", j5codec.UnexpectedCharError),
        ("missing separator", "[1 2]", j5codec.UnexpectedCharError),
        ("empty document", "", j5codec.UnexpectedEofError),
        ("only a comment", "// nothing here", j5codec.UnexpectedEofError),
    ]

    return [
        Json5TestCase(
            description=description,
            input_data=doc,
            should_fail=True,
            expected_error=error,
        )
        for description, doc, error in fail_docs
    ]


@pytest.fixture
def json5_pass_cases() -> list[Json5TestCase]:
    """
    Provides documents exercising every JSON5 extension over JSON.

    Each document must parse, and its result must equal the expected value.
    """
    return [
        Json5TestCase(
            description="json5.org example",
            input_data=r"""// A JSON5 document
{
  // comments
  unquoted: 'and you can quote me on that',
  singleQuotes: 'I can use "double quotes" here',
  lineBreaks: "Look, Mom! \
No \\n's!",
  hexadecimal: 0xdecaf,
  leadingDecimalPoint: .8675309, andTrailing: 8675309.,
  positiveSign: +1,
  trailingComma: 'in objects', andIn: ['arrays',],
  "backwardsCompatible": "with JSON",
  /* block
     comment */
}
""",
            expected_output={
                "unquoted": "and you can quote me on that",
                "singleQuotes": 'I can use "double quotes" here',
                "lineBreaks": "Look, Mom! No \\n's!",
                "hexadecimal": 0xDECAF,
                "leadingDecimalPoint": 0.8675309,
                "andTrailing": 8675309.0,
                "positiveSign": 1,
                "trailingComma": "in objects",
                "andIn": ["arrays"],
                "backwardsCompatible": "with JSON",
            },
        ),
        Json5TestCase(
            description="package manifest",
            input_data="""{
    name: 'demo-package',
    version: '1.0.0',
    dependencies: {
        'left-pad': '^1.3.0',
        $scope: 'latest',
    },
    scripts: {build: "make all", test: "make check"},
    private: true,
    license: null,
}""",
            expected_output={
                "name": "demo-package",
                "version": "1.0.0",
                "dependencies": {"left-pad": "^1.3.0", "$scope": "latest"},
                "scripts": {"build": "make all", "test": "make check"},
                "private": True,
                "license": None,
            },
        ),
        Json5TestCase(
            description="plain JSON",
            input_data='{"JSON Test Pattern pass3": {"The outermost value": '
            '"must be an object or array.", "In this test": "It is an object."}}',
            expected_output={
                "JSON Test Pattern pass3": {
                    "The outermost value": "must be an object or array.",
                    "In this test": "It is an object.",
                }
            },
        ),
        Json5TestCase(
            description="deep nesting",
            input_data='[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
            expected_output=[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]],
        ),
    ]


@pytest.fixture
def basic_json5_values() -> list[Json5TestCase]:
    """
    Provides scalar and container documents with their Python results.

    Covers every literal form, including the JSON5-only number syntax.
    """
    return [
        Json5TestCase("null value", "null", False, None),
        Json5TestCase("true boolean", "true", False, True),
        Json5TestCase("false boolean", "false", False, False),
        Json5TestCase("integer", "42", False, 42),
        Json5TestCase("negative integer", "-17", False, -17),
        Json5TestCase("positive sign", "+17", False, 17),
        Json5TestCase("float", "3.14", False, 3.14),
        Json5TestCase("leading decimal point", ".5", False, 0.5),
        Json5TestCase("trailing decimal point", "5.", False, 5.0),
        Json5TestCase("exponent", "1e3", False, 1000.0),
        Json5TestCase("hex", "0xFF", False, 255),
        Json5TestCase("negative hex", "-0x10", False, -16),
        Json5TestCase("infinity", "Infinity", False, math.inf),
        Json5TestCase("negative infinity", "-Infinity", False, -math.inf),
        Json5TestCase("empty string", '""', False, ""),
        Json5TestCase("single quoted string", "'hello'", False, "hello"),
        Json5TestCase("empty array", "[]", False, []),
        Json5TestCase("empty object", "{}", False, {}),
        Json5TestCase("array with trailing comma", "[1, 2, 3,]", False, [1, 2, 3]),
        Json5TestCase(
            "unquoted keys", "{foo: 1, bar: 'baz',}", False, {"foo": 1, "bar": "baz"}
        ),
    ]
