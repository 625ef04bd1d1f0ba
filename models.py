# presentation_service/models.py
import json
from collections.abc import Mapping
from typing import Any, Literal, Tuple

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError


class PresentationError(Exception):
    """Base class for every error raised by the presentation service."""


class DocumentValidationError(PresentationError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class Slide(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: StrictStr
    content: Tuple[StrictStr, ...] = ()


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["presentation"] = "presentation"
    title: StrictStr = ""
    slides: Tuple[Slide, ...]

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")


def validate(candidate: Any) -> Document:
    """
    Checks that a parsed payload is a presentation outline and returns it as a Document.

    Raises DocumentValidationError with a human readable reason otherwise.
    """
    if isinstance(candidate, Document):
        return candidate
    if not isinstance(candidate, Mapping):
        raise DocumentValidationError(f"expected an object, got {type(candidate).__name__}")
    if "slides" not in candidate:
        raise DocumentValidationError("missing 'slides' field")
    # pydantic would take any sequence for the tuple fields, the wire format only allows arrays
    if not isinstance(candidate["slides"], list):
        raise DocumentValidationError("'slides' must be a list")
    for i, slide in enumerate(candidate["slides"]):
        if not isinstance(slide, Mapping):
            raise DocumentValidationError(f"slide {i + 1} is not an object")
        if "content" in slide and not isinstance(slide["content"], list):
            raise DocumentValidationError(f"slide {i + 1}: 'content' must be a list")

    # other "type" markers are tolerated, a slides list is enough to be an outline
    fields = {key: value for key, value in candidate.items() if key != "type"}
    try:
        return Document.model_validate(fields)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise DocumentValidationError(f"{location}: {first['msg']}") from e


def serialize(document: Document) -> str:
    """Pretty-printed JSON form, used wherever a person or the model reads the outline."""
    return json.dumps(document.to_payload(), ensure_ascii=False, indent=2)
