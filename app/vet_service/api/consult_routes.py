"""
Consultation API routes.

Exposes the species catalog, veterinary advice and report speech to the
frontend. Domain errors are translated to HTTP responses by the handlers
registered in ``app.main``.
"""

import asyncio
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter

from app.core.errors import ValidationError
from app.vet_service.config import get_settings
from app.vet_service.schemas.consultation import (
    AdviceRequest,
    AdviceResponse,
    SpeechRequest,
    SpeechResponse,
)
from app.vet_service.services.advice_service import get_veterinary_advice
from app.vet_service.services.markdown_cleaner import prepare_speech_text
from app.vet_service.services.speech_service import synthesize_speech
from app.vet_service.species_catalog import SPECIES, Species
from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Consultation"])


@router.get("/species", response_model=List[Species])
def list_species() -> List[Species]:
    """Return the static species catalog in display order."""
    return SPECIES


@router.post("/consult/advice", response_model=AdviceResponse)
async def consult_advice(payload: AdviceRequest) -> AdviceResponse:
    """
    Generate a veterinary assessment for one consultation.

    The Gemini call is blocking and runs in a worker thread.
    """
    logger.info(
        "Advice requested",
        extra={"species_id": payload.species_id, "symptom_chars": len(payload.symptoms)},
    )

    advice = await asyncio.to_thread(
        get_veterinary_advice,
        payload.species_id,
        payload.symptoms,
    )

    return AdviceResponse(
        species_id=payload.species_id,
        advice_markdown=advice,
        generated_at=datetime.now(timezone.utc),
    )


@router.post("/consult/speech", response_model=SpeechResponse)
async def consult_speech(payload: SpeechRequest) -> SpeechResponse:
    """
    Read a report aloud.

    The text is cleaned and capped at ``SPEECH_MAX_CHARS`` again here, so
    callers other than the frontend get the same limit.
    """
    text = prepare_speech_text(payload.text, max_chars=get_settings().SPEECH_MAX_CHARS)
    if not text:
        raise ValidationError("Okunacak metin bulunamadı.")

    logger.info("Speech requested", extra={"chars": len(text)})

    audio = await asyncio.to_thread(synthesize_speech, text)

    return SpeechResponse(
        audio_base64=audio.audio_base64,
        mime_type=audio.mime_type,
    )
