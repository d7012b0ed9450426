import pytest

from orchestrator.models import AIResponse, ToolInvocation, invocation_set
from orchestrator.parser import (
    coerce_argument,
    decode_invocation,
    decode_tool_calls,
    encode_invocation,
    extract_candidate,
    parse_tool_invocation,
    resolve_invocations,
)


PAYLOAD = '{"tool": "type_text", "arguments": {"text": "hello"}}'
EXPECTED = ToolInvocation(name="type_text", arguments={"text": "hello"})


@pytest.mark.parametrize("reply", [
    PAYLOAD,
    f"```\n{PAYLOAD}\n```",
    f"```json\n{PAYLOAD}\n```",
    f"Sure, I'll type it now.\n```json\n{PAYLOAD}\n```\nLet me know if that worked.",
    f"Sure thing: {PAYLOAD} and that's it.",
])
def test_same_invocation_bare_fenced_or_wrapped(reply):

    assert parse_tool_invocation(reply) == EXPECTED


def test_name_key_is_accepted_as_tool_name():

    inv = parse_tool_invocation('{"name": "capture_screenshot", "arguments": {}}')

    assert inv == ToolInvocation(name="capture_screenshot")


def test_missing_arguments_means_empty_mapping():

    assert parse_tool_invocation('{"tool": "capture_screenshot"}') == ToolInvocation(name="capture_screenshot")


def test_primitive_values_are_coerced_to_strings():

    inv = parse_tool_invocation(
        '{"tool": "send_shortcut", "arguments": {"key": "c", "command": true, "shift": false, "count": 3, "delay": 1.5}}'
    )

    assert inv.arguments == {"key": "c", "command": "true", "shift": "false", "count": "3", "delay": "1.5"}


def test_null_and_nested_values_are_dropped():

    assert coerce_argument(None) is None
    assert coerce_argument({"a": 1}) is None
    assert coerce_argument([1]) is None


@pytest.mark.parametrize("reply", [
    "I can't see the screen, but you could press Save.",
    "",
    "   ",
    None,
    "```\nnot json at all\n```",
    '{"tool": "type_text", "arguments": {"text": "hel',
    '{"arguments": {"text": "x"}}',
    '{"tool": 5, "arguments": {}}',
    '{"tool": "type_text", "arguments": ["x"]}',
    "[1, 2, 3]",
])
def test_no_invocation_when_reply_is_not_a_tool_call(reply):

    assert parse_tool_invocation(reply) is None


def test_nested_braces_inside_values_survive():

    reply = 'Typing: {"tool": "type_text", "arguments": {"text": "if (x) { y(); }"}} done'

    assert parse_tool_invocation(reply).arguments == {"text": "if (x) { y(); }"}


def test_first_fenced_block_wins():

    reply = (
        '```json\n{"tool": "capture_screenshot", "arguments": {}}\n```\n'
        'then\n```json\n{"tool": "type_text", "arguments": {"text": "later"}}\n```'
    )

    assert parse_tool_invocation(reply).name == "capture_screenshot"


def test_fence_takes_precedence_over_braces_outside_it():

    reply = 'Options {a} and {b}\n```\n{"tool": "type_text", "arguments": {"text": "x"}}\n```'

    assert extract_candidate(reply) == '{"tool": "type_text", "arguments": {"text": "x"}}'


def test_prose_with_two_objects_is_not_a_single_invocation():

    reply = '{"tool": "type_text", "arguments": {"text": "a"}} or {"tool": "type_text", "arguments": {"text": "b"}}'

    assert parse_tool_invocation(reply) is None


def test_arguments_sent_as_json_string_are_decoded():

    inv = decode_invocation('{"name": "type_text", "arguments": "{\\"text\\": \\"hi\\"}"}')

    assert inv == ToolInvocation(name="type_text", arguments={"text": "hi"})


def test_structured_calls_decoded_independently():

    out = decode_tool_calls([
        ("type_text", '{"text": "one"}'),
        ("send_shortcut", "{not json"),
        ("capture_screenshot", None),
        ("send_shortcut", '{"key": "s", "command": true}'),
    ])

    assert out == [
        ToolInvocation(name="type_text", arguments={"text": "one"}),
        ToolInvocation(name="send_shortcut", arguments={"key": "s", "command": "true"}),
    ]


def test_structured_calls_win_over_text():

    response = AIResponse(
        text=PAYLOAD,
        tool_invocations=[ToolInvocation(name="capture_screenshot"), ToolInvocation(name="capture_screenshot")],
    )

    assert [i.name for i in resolve_invocations(response)] == ["capture_screenshot", "capture_screenshot"]


def test_text_fallback_yields_at_most_one():

    assert resolve_invocations(AIResponse(text=PAYLOAD)) == [EXPECTED]
    assert resolve_invocations(AIResponse(text="All done.")) == []
    assert resolve_invocations(AIResponse()) == []


@pytest.mark.parametrize("arguments, expected", [
    ({"text": "hello world"}, {"text": "hello world"}),
    ({"command": True, "shift": False}, {"command": "true", "shift": "false"}),
    ({"times": 12}, {"times": "12"}),
    ({"ratio": 0.25}, {"ratio": "0.25"}),
])
def test_encode_then_parse_keeps_name_and_string_arguments(arguments, expected):

    inv = parse_tool_invocation(f"```json\n{encode_invocation('send_shortcut', arguments)}\n```")

    assert inv.name == "send_shortcut"
    assert inv.arguments == expected


def test_invocation_identity_ignores_argument_order():

    a = parse_tool_invocation('{"tool": "send_shortcut", "arguments": {"key": "s", "command": true}}')
    b = parse_tool_invocation('{"tool": "send_shortcut", "arguments": {"command": "true", "key": "s"}}')

    assert a.key() == b.key()
    assert invocation_set([a]) == invocation_set([b])
