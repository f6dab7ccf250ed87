"""Tests for the ReAct JSON parser."""

import pytest

from tandem.agent.parser import ReActParser, looks_like_json_object


@pytest.fixture
def parser():
    return ReActParser()


def test_parse_action(parser):
    result = parser.parse(
        '{"thought": "search first", "action": {"name": "search", "arguments": {"q": "x"}}}'
    )

    assert result.success
    assert result.data.is_action()
    assert not result.data.is_final_answer()
    assert result.data.action.name == "search"
    assert result.data.action.arguments == {"q": "x"}


def test_parse_final_answer_in_code_fence(parser):
    result = parser.parse('```json\n{"thought": "done", "final_answer": "42"}\n```')

    assert result.success
    assert result.data.is_final_answer()
    assert result.data.final_answer == "42"


def test_action_wins_over_final_answer(parser):
    result = parser.parse(
        {
            "thought": "both",
            "action": {"name": "search"},
            "final_answer": "too early",
        }
    )

    assert result.success
    assert result.data.is_action()
    assert result.data.final_answer is None
    assert result.data.action.arguments == {}


def test_parse_requires_action_or_answer(parser):
    result = parser.parse('{"thought": "hmm"}')

    assert not result.success
    assert "action" in result.error


def test_parse_invalid_json(parser):
    result = parser.parse("not json at all")

    assert not result.success
    assert result.error == "Output is not valid JSON"


def test_parse_validation_error(parser):
    result = parser.parse({"thought": 3, "final_answer": "x"})

    assert not result.success
    assert result.error.startswith("Validation error")


def test_fallback_wraps_plain_text_as_thought(parser):
    result = parser.parse_with_fallback("I am just thinking")

    assert result.success
    assert result.data.thought == "I am just thinking"
    assert not result.data.is_action()


def test_fallback_salvages_final_answer(parser):
    result = parser.parse_with_fallback({"final_answer": "7"})

    assert result.success
    assert result.data.final_answer == "7"
    assert result.data.thought == "Unable to parse thought"


def test_fallback_salvages_action_with_bad_arguments(parser):
    result = parser.parse_with_fallback(
        {"thought": 1, "action": {"name": "search", "arguments": "oops"}}
    )

    assert result.success
    assert result.data.action.name == "search"
    assert result.data.action.arguments == {}


def test_fallback_salvages_json_text_without_thought(parser):
    result = parser.parse_with_fallback('```json\n{"final_answer": "7"}\n```')

    assert result.success
    assert result.data.final_answer == "7"


def test_fallback_gives_up_on_unusable_dict(parser):
    result = parser.parse_with_fallback({"thought": "x"})

    assert not result.success


@pytest.mark.parametrize(
    "text,expected",
    [
        ('{"a": 1}', True),
        ('  ```json\n{"a": 1}\n```', True),
        ("The answer is {x}", False),
        ("", False),
    ],
)
def test_looks_like_json_object(text, expected):
    assert looks_like_json_object(text) is expected
