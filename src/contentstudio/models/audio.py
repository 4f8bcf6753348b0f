"""Audio generation result model."""

from typing import Optional

from pydantic import BaseModel, Field


class AudioResult(BaseModel):
    """Narration produced by an audio backend."""

    audio_url: str = Field(..., description="Public URL of the audio file")
    format: str = Field(default="mp3", description="Audio format: mp3, opus, ...")
    duration: Optional[float] = Field(None, description="Duration in seconds")
    voice: Optional[str] = Field(None, description="Voice used for synthesis")
