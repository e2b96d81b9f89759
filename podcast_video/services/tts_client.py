"""TTS (Text-to-Speech) client for Google Cloud Text-to-Speech."""

import base64
import binascii
from pathlib import Path
from typing import Any, Optional

import requests

from podcast_video.core.config import Settings
from podcast_video.core.errors import SynthesisError
from podcast_video.utils.error_handler import upstream_error_message


class TTSClient:
    """Synthesizes dialogue lines with Chirp voices."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize TTS client.

        Args:
            settings: Application settings
            logger: Logger instance
            session: Optional requests session (injected in tests)
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    def synthesize(self, text: str, language_code: str, voice_name: str, api_key: str) -> bytes:
        """
        Synthesize text and return the encoded audio bytes.

        Raises:
            SynthesisError: On backend error or an empty audio payload
        """
        if not text or not text.strip():
            raise SynthesisError("Text cannot be empty")

        payload = {
            "input": {"text": text},
            "voice": {
                "languageCode": language_code,
                "name": voice_name,
                "model": self.settings.tts_model,
            },
            "audioConfig": {"audioEncoding": self.settings.tts_audio_encoding},
        }

        try:
            response = self.session.post(
                self.settings.tts_api_url,
                params={"key": api_key},
                json=payload,
                timeout=self.settings.tts_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise SynthesisError(f"Network error calling Text-to-Speech API: {e}") from e

        if not response.ok:
            raise SynthesisError(f"Text-to-Speech request failed: {upstream_error_message(response)}")

        try:
            audio_content = response.json().get("audioContent")
        except (ValueError, AttributeError) as e:
            raise SynthesisError("Text-to-Speech returned an unreadable response.") from e

        if not audio_content:
            raise SynthesisError("Text-to-Speech response missing audioContent.")

        try:
            audio = base64.b64decode(audio_content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SynthesisError("Text-to-Speech audioContent is not valid base64.") from e

        if not audio:
            raise SynthesisError("Text-to-Speech returned empty audio.")
        return audio

    def generate_speech(
        self,
        text: str,
        output_path: Path,
        voice_name: str,
        language_code: str,
        api_key: str,
    ) -> Path:
        """
        Generate speech from text and save to file.

        Args:
            text: Text to convert to speech
            output_path: Path to save audio file
            voice_name: Voice identifier (e.g. "en-US-Chirp3-HD-Charon")
            language_code: BCP-47 language code
            api_key: Caller-supplied Google API key

        Returns:
            The written audio path
        """
        self.logger.info(f"Generating speech with {voice_name} for {len(text)} characters...")
        audio = self.synthesize(text, language_code, voice_name, api_key)

        try:
            output_path.write_bytes(audio)
        except OSError as e:
            raise SynthesisError(f"Could not write synthesized audio to {output_path}: {e}") from e

        self.logger.debug(f"Speech generated: {output_path}")
        return output_path
