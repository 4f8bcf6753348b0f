"""OpenAI text-to-speech client with retry logic and usage tracking."""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from openai import OpenAI
from pydub import AudioSegment

from contentstudio.constants import AUDIO_OUTPUT_DIR, AUDIO_PUBLIC_BASE_URL
from contentstudio.errors import AudioGenerationError
from contentstudio.models.audio import AudioResult

logger = logging.getLogger(__name__)


class OpenAITTSClient:
    """Narrate lesson text with the OpenAI speech endpoint.

    Audio files are written to ``output_dir`` and exposed under
    ``public_base_url`` (or as ``file://`` URIs when no base URL is set).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        output_dir: Optional[str | Path] = None,
        public_base_url: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        client: Optional[OpenAI] = None,
    ):
        """Initialize the TTS client.

        Args:
            api_key: OpenAI API key (or uses OPENAI_API_KEY env var)
            output_dir: Directory for generated files (default: AUDIO_OUTPUT_DIR)
            public_base_url: URL prefix for generated files (default: AUDIO_PUBLIC_BASE_URL)
            max_retries: Maximum number of attempts
            retry_delay: Initial delay between retries in seconds (exponential backoff)
            client: Preconfigured OpenAI client
        """
        self.client = client or OpenAI(api_key=api_key)
        self.output_dir = Path(output_dir or AUDIO_OUTPUT_DIR)
        self.public_base_url = (public_base_url or AUDIO_PUBLIC_BASE_URL or "").rstrip("/") or None
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.total_characters = 0
        self.total_requests = 0
        self.failed_requests = 0

    def generate_audio(
        self,
        text: str,
        voice: str,
        model: str,
        format: str,
        language: str,
    ) -> AudioResult:
        """Synthesize ``text`` and return where the audio lives.

        ``language`` is only logged: the speech model infers it from the text.

        Raises:
            AudioGenerationError: If every attempt fails
        """
        output_path = self.output_dir / f"{uuid.uuid4().hex}.{format}"
        output_path.parent.mkdir(parents=True, exist_ok=True)

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                start_time = time.time()
                logger.info(
                    f"Generating audio (attempt {attempt + 1}/{self.max_retries}): "
                    f"{len(text)} chars, voice={voice}, model={model}, language={language}"
                )
                response = self.client.audio.speech.create(
                    model=model,
                    voice=voice,
                    input=text,
                    response_format=format,
                )
                output_path.write_bytes(response.content)

                latency_ms = int((time.time() - start_time) * 1000)
                self.total_characters += len(text)
                self.total_requests += 1
                logger.info(f"Audio generated: {output_path.stat().st_size} bytes, {latency_ms}ms")

                return AudioResult(
                    audio_url=self._public_url(output_path),
                    format=format,
                    duration=self._measure_duration(output_path, format),
                    voice=voice,
                )
            except Exception as e:
                last_error = e
                logger.warning(f"Audio generation failed (attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2**attempt)
                    logger.info(f"Retrying in {delay:.1f}s...")
                    time.sleep(delay)

        self.failed_requests += 1
        logger.error(f"Audio generation failed after {self.max_retries} attempts: {last_error}")
        raise AudioGenerationError(
            f"Audio generation failed after {self.max_retries} attempts: {last_error}",
            {"voice": voice, "model": model, "format": format},
        ) from last_error

    def get_stats(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "failed_requests": self.failed_requests,
            "total_characters": self.total_characters,
        }

    def _public_url(self, path: Path) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{path.name}"
        return path.resolve().as_uri()

    def _measure_duration(self, path: Path, format: str) -> Optional[float]:
        try:
            audio = AudioSegment.from_file(path, format=format)
        except Exception as e:
            logger.warning(f"Could not determine audio duration: {e}")
            return None
        # pydub lengths are in milliseconds
        return round(len(audio) / 1000, 2)
