"""
Schemas for consultation requests and responses.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.vet_service.species_catalog import is_known_species

# Upper bound for /consult/speech input; the route then caps at SPEECH_MAX_CHARS
SPEECH_TEXT_MAX_LENGTH = 5000


class AdviceRequest(BaseModel):
    """
    Consultation request schema.
    """

    species_id: str = Field(
        ...,
        description="Catalog id of the animal (e.g. kedi, kopek)",
    )
    symptoms: str = Field(
        ...,
        description="Free-text symptom description",
        max_length=5000,
    )

    @field_validator("species_id")
    @classmethod
    def _known_species(cls, value: str) -> str:
        if not is_known_species(value):
            raise ValueError(f"Unknown species id: {value}")
        return value

    @field_validator("symptoms")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Symptoms must not be empty")
        return value


class AdviceResponse(BaseModel):
    """
    Consultation response schema.
    """

    species_id: str
    advice_markdown: str = Field(
        ...,
        description="Markdown report exactly as produced by the model",
    )
    generated_at: datetime


class SpeechRequest(BaseModel):
    text: str = Field(..., max_length=SPEECH_TEXT_MAX_LENGTH)

    @field_validator("text")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Text must not be empty")
        return value


class SpeechResponse(BaseModel):
    audio_base64: str = Field(..., description="Base64-encoded audio")
    mime_type: str = Field(..., description="MIME type for the data URI")
