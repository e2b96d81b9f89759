"""Script Generator - asks Gemini for the two-speaker dialogue."""

import json
from typing import Any, Optional

import requests

from podcast_video.core.config import Settings
from podcast_video.core.errors import (
    EmptyDialogueError,
    EmptyResponseError,
    MalformedResponseError,
    NotAListError,
    ScriptGenerationError,
)
from podcast_video.models.schemas import Dialogue, PromptSegment
from podcast_video.utils.error_handler import upstream_error_message


class ScriptGenerator:
    """Client for the Gemini generateContent endpoint."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize the script generator.

        Args:
            settings: Application settings
            logger: Logger instance
            session: Optional requests session (injected in tests)
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_api_base}/models/{self.settings.gemini_model}:generateContent"

    def build_payload(self, segments: list[PromptSegment]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [segment.to_part() for segment in segments],
                }
            ]
        }
        if self.settings.gemini_json_mode:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        return payload

    def generate(self, segments: list[PromptSegment], api_key: str) -> Dialogue:
        """
        Generate and validate the dialogue script.

        The backend is called exactly once; failures are surfaced, not retried.

        Args:
            segments: Prompt segments from the topic composer
            api_key: Caller-supplied Google API key

        Returns:
            Validated, non-empty dialogue

        Raises:
            ScriptGenerationError: transport or HTTP failure
            EmptyResponseError: no candidate text
            MalformedResponseError: text is not JSON
            NotAListError: JSON is not a list
            EmptyDialogueError: no usable lines after filtering
        """
        self.logger.info(f"Requesting dialogue script from {self.settings.gemini_model}")

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": api_key},
                json=self.build_payload(segments),
                timeout=self.settings.gemini_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise ScriptGenerationError(f"Network error calling Gemini: {e}") from e

        if not response.ok:
            raise ScriptGenerationError(f"Gemini request failed: {upstream_error_message(response)}")

        try:
            body = response.json()
        except ValueError as e:
            raise EmptyResponseError("Gemini returned a non-JSON envelope.") from e

        text = self.extract_text(body)
        raw_script = self.parse_script(text)

        lines = Dialogue.filter_raw(raw_script)
        dropped = len(raw_script) - len(lines)
        if dropped:
            self.logger.warning(f"Dropped {dropped} malformed script entries")
        if not lines:
            raise EmptyDialogueError("No clips were generated. Check the script returned by Gemini.")

        self.logger.info(f"Gemini returned {len(lines)} usable lines")
        return Dialogue(lines=lines)

    @staticmethod
    def extract_text(body: Any) -> str:
        """Pull the first text part out of the first candidate."""
        candidates = body.get("candidates") if isinstance(body, dict) else None
        if not candidates:
            raise EmptyResponseError("Gemini returned no candidates.")

        first = candidates[0] if isinstance(candidates[0], dict) else {}
        content = first.get("content") or {}
        for part in content.get("parts") or []:
            if isinstance(part, dict) and part.get("text"):
                return part["text"]
        raise EmptyResponseError("Gemini response did not include text content.")

    @staticmethod
    def parse_script(text: str) -> list[Any]:
        """Strictly parse the script text; no repair is attempted."""
        try:
            script = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                "Failed to parse Gemini response as JSON. Ensure the model is instructed to output valid JSON."
            ) from e

        if not isinstance(script, list):
            raise NotAListError("Gemini response JSON is not an array.")
        return script
