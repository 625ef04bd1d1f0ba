# presentation_service/oracle.py
import logging
import os
import re
from typing import Optional, Protocol

import vertexai
from google.auth import default
from vertexai.generative_models import GenerativeModel

from models import PresentationError

# --- Configuration ---
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT")
LOCATION = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")
MODEL_NAME = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

_OPENING_FENCE_RE = re.compile(r"^\s*```[A-Za-z]*[ \t]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?```\s*$")


class OracleUnavailable(PresentationError):
    """The language model could not be reached or returned nothing usable."""


class Oracle(Protocol):
    def complete(self, instruction: str) -> str:
        ...


def strip_code_fences(text: str) -> str:
    """Removes a markdown fence wrapped around the whole text; fences inside it are kept."""
    text = _OPENING_FENCE_RE.sub("", text, count=1)
    return _CLOSING_FENCE_RE.sub("", text, count=1).strip()


class GeminiOracle:
    """Sends one instruction to a Gemini model on Vertex AI and returns its text."""

    def __init__(self, model_name: str = MODEL_NAME, project: Optional[str] = PROJECT_ID,
                 location: str = LOCATION):
        self.model_name = model_name
        self.project = project
        self.location = location
        self._model = None

    def _get_model(self) -> GenerativeModel:
        if self._model is None:
            logging.info(f"Initializing Vertex AI for project '{self.project}' in '{self.location}'...")
            try:
                # Explicitly request the cloud-platform scope to call Vertex AI
                credentials, _ = default(
                    scopes=['https://www.googleapis.com/auth/cloud-platform']
                )
                vertexai.init(project=self.project, location=self.location, credentials=credentials)
                self._model = GenerativeModel(self.model_name)
            except Exception as e:
                logging.error(f"Failed to initialize Vertex AI or model: {e}", exc_info=True)
                raise OracleUnavailable(f"Could not initialize model '{self.model_name}': {e}") from e
        return self._model

    def complete(self, instruction: str) -> str:
        model = self._get_model()

        logging.info(f"Calling {self.model_name} ({len(instruction)} chars of instruction)...")
        try:
            response = model.generate_content(instruction)
            text = response.text
        except Exception as e:
            # response.text raises ValueError when the candidate was blocked or empty
            logging.error(f"LLM call failed: {e}", exc_info=True)
            raise OracleUnavailable(f"Model call failed: {e}") from e

        logging.debug(f"Received raw response from LLM: {text}")
        if not text or not text.strip():
            raise OracleUnavailable("Model returned an empty response")
        return strip_code_fences(text)
