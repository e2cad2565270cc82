import pytest

from sketchflow.tree_parser.parser_driver import ParserDriver
from sketchflow.utils.annotations import (
    LabelResolver,
    is_suppressed_line,
    parse_override,
    sanitize,
)


def first_statement(code, max_length=40):
    driver = ParserDriver("cpp", code)
    definition = driver.root_node.children[0]
    body = definition.child_by_field_name("body")
    resolver = LabelResolver(driver.parser.source_lines, max_length)
    return resolver, body.named_children[0]


def test_sanitize_escapes_quotes_backslashes_and_newlines():
    assert sanitize('say "hi"\n\\ok') == "say 'hi' \\\\ok"
    assert sanitize("") == ""
    assert sanitize(None) == ""


@pytest.mark.parametrize(
    "line, expected",
    [
        ("digitalWrite(13, HIGH); //\\ Turn LED on", "Turn LED on"),
        ("x = 1; //\\   spaced out  ", "spaced out"),
        ("x = 1; //\\", None),
        ("x = 1; //\\   ", None),
        ("x = 1; // plain comment", None),
        ("", None),
    ],
)
def test_parse_override(line, expected):
    assert parse_override(line) == expected


def test_suppression_marker_must_end_the_line():
    assert is_suppressed_line('Serial.println("dbg"); //*')
    assert is_suppressed_line('Serial.println("dbg"); //*   ')
    assert not is_suppressed_line('Serial.println("dbg"); //* keep')
    assert not is_suppressed_line("x++;")


def test_source_label_strips_semicolon():
    resolver, statement = first_statement("void f() {\n  digitalWrite(13, HIGH);\n}\n")
    assert resolver.resolve_label(statement) == "digitalWrite(13, HIGH)"


def test_override_takes_precedence_and_commas_break_lines():
    resolver, statement = first_statement(
        "void f() {\n  digitalWrite(13, HIGH); //\\ Turn on, wait\n}\n"
    )
    assert resolver.resolve_label(statement) == "Turn on\nwait"


def test_long_labels_are_truncated():
    code = "void f() {\n  someVeryLongFunctionName(argumentNumberOne, argumentNumberTwo);\n}\n"
    resolver, statement = first_statement(code, max_length=20)
    assert resolver.resolve_label(statement) == "someVeryLongFunction"


def test_short_label_falls_back():
    resolver, statement = first_statement("void f() {\n  x;\n}\n")
    assert resolver.resolve_label(statement) == "expression_statement"
    assert resolver.resolve_label(statement, fallback="step") == "step"


def test_is_suppressed_reads_the_start_line():
    resolver, statement = first_statement("void f() {\n  debug(); //*\n}\n")
    assert resolver.is_suppressed(statement)
