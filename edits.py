# presentation_service/edits.py
import re
from dataclasses import dataclass
from typing import List, Literal, Optional

from models import Document

EditVerb = Literal["edit", "retitle", "remove", "add"]

_ORDINALS = {
    "first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5,
    "sixth": 6, "seventh": 7, "eighth": 8, "ninth": 9, "tenth": 10,
}
_SLIDE_REF = r"(?:slide\s*(?:#|no\.?|number)?\s*(\d+)|(" + "|".join(_ORDINALS) + r")\s+slide)"

_RETITLE_RE = re.compile(r"\b(?:change|update|edit|set|fix)\b.*?" + _SLIDE_REF + r"(?:'s)?\s+title\b"
                         r"|\b(?:change|update|edit|set|fix)\b\s+(?:the\s+)?title\s+of\s+(?:the\s+)?" + _SLIDE_REF +
                         r"|\b(?:rename|retitle)\b\s+(?:the\s+)?" + _SLIDE_REF,
                         re.IGNORECASE)
_REMOVE_RE = re.compile(r"\b(?:remove|delete|drop)\b.*?" + _SLIDE_REF, re.IGNORECASE)
_EDIT_RE = re.compile(r"\b(?:edit|update|modify|change|rewrite|revise)\b.*?" + _SLIDE_REF, re.IGNORECASE)
_ADD_RE = re.compile(r"\b(?:add|append|insert)\b\s+(?:a|an|one|another)\s+(?:new\s+)?slide\b", re.IGNORECASE)
_POSITION_RE = re.compile(r"\b(?:after|before|between|at\s+position|as\s+(?:the\s+)?(?:slide|first))\b", re.IGNORECASE)


@dataclass(frozen=True)
class EditIntent:
    verb: EditVerb
    index: Optional[int] = None  # 0-based, None for "add"


def _slide_number(match: re.Match) -> int:
    digits = next((g for g in match.groups() if g and g.isdigit()), None)
    if digits is not None:
        return int(digits)
    word = next(g for g in match.groups() if g)
    return _ORDINALS[word.lower()]


def parse_edit_request(request: str) -> Optional[EditIntent]:
    """
    Recognises requests that target exactly one slide, e.g. "edit slide 2",
    "change slide 3 title", "remove the second slide" or "add a slide about X".

    Anything broader ("shorten every slide", "add a slide after slide 1") is
    left to the model and returns None.
    """
    numbers = re.findall(r"\bslides?\s*(?:#|no\.?|number)?\s*\d+", request, re.IGNORECASE)
    if len(numbers) > 1 or re.search(r"\bslides\b", request, re.IGNORECASE):
        return None

    for verb, pattern in (("retitle", _RETITLE_RE), ("remove", _REMOVE_RE), ("edit", _EDIT_RE)):
        match = pattern.search(request)
        if match:
            return EditIntent(verb, _slide_number(match) - 1)

    if _ADD_RE.search(request) and not _POSITION_RE.search(request):
        return EditIntent("add")
    return None


def check_edit(prior: Document, updated: Document, intent: EditIntent) -> List[str]:
    """Lists the ways `updated` breaks the edit contract for `intent`. Empty means it complies."""
    before, after = list(prior.slides), list(updated.slides)
    violations = []

    if intent.verb != "add" and not 0 <= intent.index < len(before):
        return [f"slide {intent.index + 1} does not exist (presentation has {len(before)} slides)"]

    if intent.verb in ("edit", "retitle"):
        if len(after) != len(before):
            return [f"expected {len(before)} slides after editing slide {intent.index + 1}, got {len(after)}"]
        for i, (old, new) in enumerate(zip(before, after)):
            if i != intent.index and old != new:
                violations.append(f"slide {i + 1} changed but only slide {intent.index + 1} was targeted")
        if intent.verb == "retitle" and before[intent.index].content != after[intent.index].content:
            violations.append(f"content of slide {intent.index + 1} changed but only its title was targeted")

    elif intent.verb == "remove":
        expected = before[:intent.index] + before[intent.index + 1:]
        if len(after) != len(expected):
            violations.append(f"expected {len(expected)} slides after removing slide {intent.index + 1}, got {len(after)}")
        elif after != expected:
            violations.append(f"slides other than slide {intent.index + 1} changed during removal")

    elif intent.verb == "add":
        if len(after) != len(before) + 1:
            violations.append(f"expected {len(before) + 1} slides after adding one, got {len(after)}")
        elif after[:len(before)] != before:
            violations.append("existing slides changed or moved while adding a slide")

    return violations
