"""
Veterinary advice LLM service.

Builds the Niko persona instruction plus a per-consultation prompt and asks
Gemini for a grounded (Google Search) markdown assessment.
"""

import time

import mlflow
from google import genai
from google.genai import types

from app.common.mlflow_control import mlflow_context, mlflow_safe
from app.core.errors import AdviceUnavailable, ValidationError
from app.vet_service.config import get_settings
from app.vet_service.services.prompts import ADVICE_PROMPT_TEMPLATE, SYSTEM_INSTRUCTION
from app.vet_service.species_catalog import get_species, is_known_species
from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)


def _load_gemini() -> genai.Client:
    """
    Build a Gemini client from settings.

    Raises:
        ConfigurationError: If the API credential is missing.
    """
    settings = get_settings()
    return genai.Client(api_key=settings.GEMINI_API_KEY)


def build_prompt(species_id: str, symptoms: str) -> str:
    """Per-consultation prompt embedding species and symptoms verbatim."""
    species = get_species(species_id)
    return ADVICE_PROMPT_TEMPLATE.format(
        species_name=species.name,
        species_id=species.id,
        symptoms=symptoms,
    )


def build_config(temperature: float) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        system_instruction=SYSTEM_INSTRUCTION,
        temperature=temperature,
        tools=[types.Tool(google_search=types.GoogleSearch())],
    )


def get_veterinary_advice(species_id: str, symptoms: str) -> str:
    """
    Ask Gemini for a veterinary assessment.

    Args:
        species_id: Catalog id of the animal (e.g. ``"kedi"``).
        symptoms: Free-text symptom description, non-empty after trimming.

    Returns:
        str: The raw markdown answer, unmodified. Empty string if the
        model produced no text.

    Raises:
        ValidationError: Unknown species or blank symptoms.
        ConfigurationError: Missing API credential.
        AdviceUnavailable: Any transport or API failure.
    """
    if not is_known_species(species_id):
        raise ValidationError(f"Bilinmeyen hayvan türü: {species_id}")
    if not symptoms or not symptoms.strip():
        raise ValidationError("Lütfen belirtileri yazın.")

    settings = get_settings()
    client = _load_gemini()
    prompt = build_prompt(species_id, symptoms)

    start_time = time.time()

    with mlflow_context(run_name="veterinary_advice"):
        mlflow_safe(mlflow.set_tag, "service", "advice_llm")
        mlflow_safe(mlflow.set_tag, "llm_provider", "gemini")
        mlflow_safe(mlflow.set_tag, "model", settings.ADVICE_MODEL)
        mlflow_safe(mlflow.set_tag, "species", species_id)

        try:
            response = client.models.generate_content(
                model=settings.ADVICE_MODEL,
                contents=prompt,
                config=build_config(settings.ADVICE_TEMPERATURE),
            )
        except Exception as exc:
            logger.exception(
                "Veterinary advice request failed",
                extra={"species_id": species_id, "model": settings.ADVICE_MODEL},
            )
            raise AdviceUnavailable() from exc

        advice = _extract_text(response)

        latency = time.time() - start_time
        mlflow_safe(mlflow.log_metric, "latency_sec", latency)
        mlflow_safe(mlflow.log_metric, "response_length", len(advice))

    logger.info(
        "Veterinary advice generated | species=%s length=%s latency=%.2fs",
        species_id,
        len(advice),
        latency,
    )
    return advice


def _extract_text(response) -> str:
    """
    Extract the answer text from a Gemini response.

    Prefers ``response.text``; falls back to joining the text parts of the
    first candidate. Whitespace is preserved.
    """
    if response is None:
        return ""

    text = getattr(response, "text", None)
    if isinstance(text, str) and text:
        return text

    candidates = getattr(response, "candidates", None)
    if not candidates:
        return ""

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    return "".join(
        part.text for part in parts if isinstance(getattr(part, "text", None), str)
    )
