"""
Consultation API client.

Handles calls to the /consult backend endpoints and turns failures back
into the shared domain errors.
"""

from typing import Any, Dict, Optional, Type

import requests
from requests import RequestException

from app.core.errors import AdviceUnavailable, SpeechSynthesisUnavailable, VetNikoError
from app.vet_service.utils.logger import get_logger
from frontend.config import settings

logger = get_logger(__name__, component="FRONTEND")

API_BASE_URL = settings.API_BASE_URL


def request_advice(species_id: str, symptoms: str) -> str:
    """
    Ask the backend for a veterinary assessment.

    Args:
        species_id: Catalog id of the animal.
        symptoms: Symptom description.

    Returns:
        Markdown report exactly as returned by the backend.

    Raises:
        AdviceUnavailable: On request or backend failure.
    """
    logger.info(
        "Requesting veterinary advice",
        extra={"endpoint": "/consult/advice", "species_id": species_id},
    )

    payload = _post(
        "/consult/advice",
        {"species_id": species_id, "symptoms": symptoms},
        error_cls=AdviceUnavailable,
    )

    advice = payload.get("advice_markdown")
    if not isinstance(advice, str):
        logger.error("Advice response missing advice_markdown")
        raise AdviceUnavailable()

    return advice


def request_speech(text: str) -> str:
    """
    Ask the backend to read a report aloud.

    Args:
        text: Sanitized, length-capped report text.

    Returns:
        A ``data:`` URI playable by an HTML audio element.

    Raises:
        SpeechSynthesisUnavailable: On request failure or missing audio.
    """
    logger.info(
        "Requesting report speech",
        extra={"endpoint": "/consult/speech", "chars": len(text)},
    )

    payload = _post(
        "/consult/speech",
        {"text": text},
        error_cls=SpeechSynthesisUnavailable,
    )

    audio_base64 = payload.get("audio_base64")
    if not audio_base64:
        logger.error("Speech response contained no audio")
        raise SpeechSynthesisUnavailable()

    mime_type = payload.get("mime_type") or "audio/mpeg"
    return f"data:{mime_type};base64,{audio_base64}"


def _post(
    path: str,
    body: Dict[str, Any],
    *,
    error_cls: Type[VetNikoError],
) -> Dict[str, Any]:
    url = f"{API_BASE_URL}{path}"

    try:
        response = requests.post(
            url,
            json=body,
            headers={"Accept": "application/json"},
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()

    except RequestException as exc:
        logger.exception(
            "Consultation request failed",
            extra={"url": url},
        )
        raise error_cls(_backend_detail(exc)) from exc

    except ValueError as exc:
        logger.exception(
            "Invalid JSON response from backend",
            extra={"url": url},
        )
        raise error_cls() from exc


def _backend_detail(exc: RequestException) -> Optional[str]:
    """Localized ``detail`` message from a backend error response, if any."""
    response = getattr(exc, "response", None)
    if response is None:
        return None

    try:
        body = response.json()
    except ValueError:
        return None

    detail = body.get("detail") if isinstance(body, dict) else None

    # FastAPI 422 bodies carry a list of field errors, not a message
    return detail if isinstance(detail, str) and detail.strip() else None
