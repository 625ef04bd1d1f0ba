"""
Tests for pulling presentation payloads out of model responses.
"""

import json

import pytest

from extractor import DocumentUpdate, PlainReply, extract, find_payload, is_document_candidate
from models import serialize

PAYLOAD = {
    "type": "presentation",
    "title": "Launch Plan",
    "slides": [
        {"title": "Goals", "content": ["Ship v1", "Sign 3 customers"]},
        {"title": "Timeline", "content": []},
    ],
}


def test_extract_bare_payload():
    result = extract(json.dumps(PAYLOAD))

    assert isinstance(result, DocumentUpdate)
    assert result.document.to_payload() == PAYLOAD


def test_extract_serialized_document_round_trips(three_slides):
    result = extract(serialize(three_slides))

    assert result == DocumentUpdate(three_slides)


def test_extract_strips_code_fences():
    raw = "```json\n" + json.dumps(PAYLOAD) + "\n```"

    result = extract(raw)

    assert isinstance(result, DocumentUpdate)
    assert result.document.title == "Launch Plan"


def test_extract_payload_surrounded_by_prose():
    raw = "Sure! Here is your deck:\n" + json.dumps(PAYLOAD) + "\nLet me know if you want changes."

    result = extract(raw)

    assert isinstance(result, DocumentUpdate)
    assert len(result.document.slides) == 2


@pytest.mark.parametrize("raw", [
    "Hello! What should the presentation be about?",
    "",
    "Use braces like } and { carefully",
    "{not json at all}",
])
def test_extract_degrades_to_plain_reply(raw):
    result = extract(raw)

    assert result == PlainReply(raw)


def test_extract_ignores_objects_that_are_not_presentations():
    raw = '{"answer": "I can help with that"}'

    assert extract(raw) == PlainReply(raw)


def test_extract_rejects_slides_that_are_not_a_list():
    raw = json.dumps({"type": "presentation", "title": "x", "slides": {"title": "only one"}})

    result = extract(raw)

    assert isinstance(result, PlainReply)
    assert result.text == raw
    assert "'slides' must be a list" in result.rejection


def test_extract_rejects_typed_payload_without_slides():
    raw = json.dumps({"type": "presentation", "title": "x"})

    result = extract(raw)

    assert isinstance(result, PlainReply)
    assert result.rejection == "missing 'slides' field"


def test_braces_inside_bullets_do_not_break_extraction():
    payload = {"title": "Code", "slides": [{"title": "Syntax", "content": ["Use { to open", "and } to close"]}]}
    raw = "Note: dict literals look like {}.\n" + json.dumps(payload) + "\n(closing brace: })"

    result = extract(raw)

    assert isinstance(result, DocumentUpdate)
    assert result.document.slides[0].content == ("Use { to open", "and } to close")


def test_first_presentation_object_wins():
    first = dict(PAYLOAD, title="First")
    second = dict(PAYLOAD, title="Second")

    payload = find_payload(json.dumps(first) + "\n" + json.dumps(second))

    assert payload["title"] == "First"


def test_find_payload_matches_outer_brace_span():
    raw = 'Result: {"slides": [{"title": "A", "content": ["x"]}]} done'
    span = raw[raw.find("{"):raw.rfind("}") + 1]

    assert find_payload(raw) == json.loads(span)


def test_is_document_candidate():
    assert is_document_candidate({"type": "presentation"})
    assert is_document_candidate({"slides": None})
    assert not is_document_candidate({"title": "x"})
    assert not is_document_candidate(["slides"])


@pytest.mark.parametrize("raw", [
    '{"slides": [' * 3000,
    '{"a": ' * 50000 + '1' + '}' * 50000,
])
def test_deeply_nested_text_is_a_plain_reply(raw):
    assert extract(raw) == PlainReply(raw)


def test_other_type_marker_with_slides_is_an_update():
    raw = '{"type": "outline", "title": "T", "slides": [{"title": "A", "content": ["x"]}]}'

    result = extract(raw)

    assert isinstance(result, DocumentUpdate)
    assert result.document.type == "presentation"
    assert result.document.slides[0].title == "A"


def test_code_fences_inside_bullets_survive():
    payload = {"title": "Markdown", "slides": [{"title": "Code blocks", "content": ["Wrap code in ``` fences"]}]}
    raw = "```json\n" + json.dumps(payload) + "\n```"

    result = extract(raw)

    assert isinstance(result, DocumentUpdate)
    assert result.document.slides[0].content == ("Wrap code in ``` fences",)
