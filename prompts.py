# presentation_service/prompts.py
import os
from typing import Iterable, Mapping, Optional

from models import Document, serialize

HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "10"))

NO_PRESENTATION_MARKER = "No presentation exists yet"

INSTRUCTION_TEMPLATE = """You are an AI assistant that helps create and edit PowerPoint presentations.

IMPORTANT RULES:
1. When creating a NEW presentation (no current presentation exists), generate the title and every slide from scratch.
2. When EDITING an EXISTING presentation, always return the COMPLETE presentation JSON with ALL slides. Every slide you were not asked to change must be returned exactly as it is, field for field. Never return only the edited slide or a list of changes.
3. Slides are numbered from 1 for the user: "slide N" means the slide at index N-1 (slides[N-1]).
4. Supported edits:
   - "edit slide N" / "update slide N": modify only slides[N-1]
   - "change slide N title": update only the title of slides[N-1], keep its content
   - "add a slide": append a new slide to the end of the array, unless the user says where to put it
   - "remove slide N": remove slides[N-1]; the slides after it move up by one
5. Return ONLY a valid JSON object, nothing else. No explanations, no markdown, no code fences, no extra text.

Current Presentation Data:
{current}

Format your response as a valid JSON object:
{{
 "type": "presentation",
 "title": "Presentation Title",
 "slides": [
   {{
     "title": "Slide Title",
     "content": ["Point 1", "Point 2", "Point 3"]
   }}
 ]
}}
{history}
User message: {request}

CRITICAL: Return ONLY a valid JSON object, nothing else. No explanations, no markdown, no extra text."""


def format_history(history: Iterable[Mapping[str, str]], limit: int = HISTORY_LIMIT) -> str:
    """Flattens the last `limit` chat turns into `role: content` lines."""
    turns = [turn for turn in history if turn.get("content")]
    if limit <= 0 or not turns:
        return ""
    lines = [f"{turn.get('role', 'user')}: {turn['content']}" for turn in turns[-limit:]]
    return "\nConversation so far:\n" + "\n".join(lines) + "\n"


def build_instruction(request: str, current: Optional[Document] = None,
                      history: Iterable[Mapping[str, str]] = ()) -> str:
    """
    Builds the single instruction sent to the model for one chat turn.

    `current` is None before the first presentation has been created; an
    empty Document is serialized like any other so the model edits it.
    """
    return INSTRUCTION_TEMPLATE.format(
        current=serialize(current) if current is not None else NO_PRESENTATION_MARKER,
        history=format_history(history),
        request=request,
    )
