import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Local imports
import edits
import ppt_generator
from extractor import DocumentUpdate, extract
from models import Document, DocumentValidationError, validate
from oracle import GeminiOracle, Oracle, OracleUnavailable
from prompts import build_instruction

# Logging configuration
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

# --- Configuration ---
STRICT_EDITS = os.getenv("STRICT_EDITS", "false").lower() in ("1", "true", "yes")
PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
# Comma separated; "*" lets any browser origin call the API
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]


# --- Pydantic Models for API ---
class ChatMessage(BaseModel):
    role: str
    content: str


class ChatPayload(BaseModel):
    message: str
    conversationHistory: List[ChatMessage] = []
    currentPresentation: Optional[Dict[str, Any]] = None


class GeneratePayload(BaseModel):
    slideData: Union[Dict[str, Any], str]


# --- Chat turn ---
@dataclass
class TurnResult:
    raw: str
    presentation: Optional[Document]
    updated: bool
    message: str
    rejection: Optional[str] = None


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def run_chat_turn(oracle: Oracle, message: str, current: Optional[Document] = None,
                  history: Iterable[Dict[str, str]] = (), strict_edits: bool = STRICT_EDITS) -> TurnResult:
    """
    One request/response pair: the caller passes the presentation it holds and
    gets back the one it should hold next. OracleUnavailable propagates.
    """
    instruction = build_instruction(message, current, history)
    raw = oracle.complete(instruction)

    result = extract(raw)
    if not isinstance(result, DocumentUpdate):
        return TurnResult(raw, current, False, result.text, result.rejection)

    document = result.document
    if current is not None:
        intent = edits.parse_edit_request(message)
        violations = edits.check_edit(current, document, intent) if intent else []
        if violations:
            logging.warning(f"Edit '{message}' broke the edit rules: {violations}")
            if strict_edits:
                reason = "; ".join(violations)
                return TurnResult(raw, current, False,
                                  f"The update was rejected because it changed more than requested: {reason}",
                                  reason)
        summary = f"Presentation updated! Your presentation now has {plural(len(document.slides), 'slide')}."
    else:
        summary = (f"Presentation created successfully! I've generated {plural(len(document.slides), 'slide')} "
                   f"for \"{document.title}\".")

    return TurnResult(raw, document, True, summary)


# --- FastAPI App ---
app = FastAPI(
    title="Presentation Chat Service",
    description="Chat with an assistant to build a slide outline, then download it as a PowerPoint file.",
    version="1.0.0"
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_oracle() -> Oracle:
    return GeminiOracle()


@app.post("/api/chat", summary="Create or edit the presentation outline from a chat message")
def chat_endpoint(payload: ChatPayload, oracle: Oracle = Depends(get_oracle)):
    current = None
    if payload.currentPresentation is not None:
        try:
            current = validate(payload.currentPresentation)
        except DocumentValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid currentPresentation: {e.reason}")

    history = [turn.model_dump() for turn in payload.conversationHistory]
    try:
        turn = run_chat_turn(oracle, payload.message, current, history)
    except OracleUnavailable as e:
        logging.error(f"Chat turn failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Failed to generate response")

    return {
        "success": True,
        "response": turn.raw,
        "presentation": turn.presentation.to_payload() if turn.presentation is not None else None,
        "updated": turn.updated,
        "message": turn.message,
        "rejection": turn.rejection,
    }


def download_filename(title: str) -> str:
    safe_title = "".join(c for c in title if c.isalnum() or c in (' ', '_')).rstrip()
    if not safe_title:
        safe_title = "presentation"
    return f"{safe_title.replace(' ', '_')}.pptx"


@app.post("/api/generate-ppt", summary="Render the presentation outline to a .pptx file")
def generate_ppt_endpoint(payload: GeneratePayload):
    try:
        document = ppt_generator.coerce_document(payload.slideData)
        pptx_base64 = ppt_generator.render_base64(document)
    except ppt_generator.InvalidDocument as e:
        logging.warning(f"Refusing to render: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except ppt_generator.RenderFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "success": True,
        "pptx": pptx_base64,
        "filename": download_filename(document.title),
        "mediaType": PPTX_MEDIA_TYPE,
        "message": "Presentation generated successfully",
    }


@app.get("/")
async def root():
    return {"message": "Presentation Chat API is running."}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
