# presentation_service/extractor.py
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from models import Document, DocumentValidationError, validate
from oracle import strip_code_fences

PRESENTATION_TYPE = "presentation"

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class DocumentUpdate:
    document: Document


@dataclass(frozen=True)
class PlainReply:
    """A conversational answer. `rejection` is set when a payload was found but failed validation."""
    text: str
    rejection: Optional[str] = None


ExtractionResult = Union[DocumentUpdate, PlainReply]


def is_document_candidate(data: Any) -> bool:
    return isinstance(data, dict) and (data.get("type") == PRESENTATION_TYPE or "slides" in data)


def _scan_objects(text: str) -> Optional[dict]:
    """Returns the first JSON object in `text` that looks like a presentation."""
    start = text.find("{")
    while start != -1:
        try:
            data, _ = _decoder.raw_decode(text, start)
        except (json.JSONDecodeError, RecursionError):
            # nesting deeper than the decoder can follow is no payload
            data = None
        if is_document_candidate(data):
            return data
        start = text.find("{", start + 1)
    return None


def find_payload(text: str) -> Optional[dict]:
    """
    Locates the presentation payload embedded in free text.

    Objects are decoded in place starting at each '{', so braces inside bullet
    strings or stray objects before the payload do not matter. Whenever the span
    from the first '{' to the last '}' is a valid payload this finds the same object.
    """
    cleaned = strip_code_fences(text)
    return _scan_objects(cleaned)


def extract(raw_text: str) -> ExtractionResult:
    payload = find_payload(raw_text)
    if payload is None:
        logging.debug("No presentation payload in model response, treating it as a reply.")
        return PlainReply(raw_text)

    try:
        document = validate(payload)
    except DocumentValidationError as e:
        logging.warning(f"Model returned an invalid presentation payload: {e.reason}")
        return PlainReply(raw_text, rejection=e.reason)

    return DocumentUpdate(document)
