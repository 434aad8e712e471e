"""
Consultation flow state machine.

Drives the three UI steps (species selection -> symptom entry -> report)
and owns loading, error and playback state for one browser client.

Every transition that starts a request bumps a generation counter; a
response is applied only if the counter has not moved since, so a reset
or re-submission while a request is in flight never gets overwritten by
the stale answer.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

from app.core.errors import AdviceUnavailable, ValidationError, VetNikoError
from app.vet_service.services.markdown_cleaner import prepare_speech_text
from app.vet_service.services.prompts import EMPTY_ADVICE_FALLBACK
from app.vet_service.species_catalog import Species, get_species, is_known_species
from app.vet_service.utils.logger import get_logger
from frontend.api.consult_client import request_advice, request_speech
from frontend.config import settings

logger = get_logger(__name__, component="FRONTEND")

AdviceClient = Callable[[str, str], str]
SpeechClient = Callable[[str], str]


class Step(str, Enum):
    SELECTION = "selection"
    SYMPTOMS = "symptoms"
    RESULT = "result"


class AudioPlayer(Protocol):
    """The audio element the report is played on."""

    def play(self, source: str) -> None:
        ...

    def stop(self) -> None:
        """Pause and seek back to the start."""
        ...


class NullAudioPlayer:
    def play(self, source: str) -> None:
        pass

    def stop(self) -> None:
        pass


@dataclass
class PlaybackSession:
    """Cached audio for the current report plus its play state."""

    source: Optional[str] = None
    playing: bool = False
    pending: bool = False


class ConsultationFlow:
    """
    Finite-state machine for one consultation.

    ``loading`` can only be true in ``Step.SYMPTOMS`` and ``speaking`` only
    in ``Step.RESULT``; ``result`` and ``error`` are never both set.
    """

    def __init__(
        self,
        *,
        advice_client: AdviceClient = request_advice,
        speech_client: SpeechClient = request_speech,
        player: Optional[AudioPlayer] = None,
        on_change: Optional[Callable[[], None]] = None,
        speech_max_chars: int = settings.SPEECH_MAX_CHARS,
    ):
        self._advice_client = advice_client
        self._speech_client = speech_client
        self._player = player or NullAudioPlayer()
        self._on_change = on_change
        self._speech_max_chars = speech_max_chars

        self._step = Step.SELECTION
        self._species_id: Optional[str] = None
        self._symptoms = ""
        self._loading = False
        self._result: Optional[str] = None
        self._result_at: Optional[datetime] = None
        self._error: Optional[str] = None
        self._playback: Optional[PlaybackSession] = None
        self._generation = 0

    # -------------------------------------------------
    # Read-only state
    # -------------------------------------------------
    @property
    def step(self) -> Step:
        return self._step

    @property
    def species_id(self) -> Optional[str]:
        return self._species_id

    @property
    def selected_species(self) -> Optional[Species]:
        return get_species(self._species_id) if self._species_id else None

    @property
    def symptoms(self) -> str:
        return self._symptoms

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def result(self) -> Optional[str]:
        return self._result

    @property
    def result_at(self) -> Optional[datetime]:
        return self._result_at

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def speaking(self) -> bool:
        return self._playback is not None and self._playback.playing

    @property
    def has_cached_audio(self) -> bool:
        return self._playback is not None and self._playback.source is not None

    @property
    def can_submit(self) -> bool:
        return (
            self._step is Step.SYMPTOMS
            and not self._loading
            and bool(self._symptoms.strip())
        )

    @property
    def show_reset(self) -> bool:
        return self._step is not Step.SELECTION

    # -------------------------------------------------
    # Transitions
    # -------------------------------------------------
    def select_species(self, species_id: str) -> None:
        """Selection -> Symptoms."""
        if not is_known_species(species_id):
            raise ValidationError(f"Bilinmeyen hayvan türü: {species_id}")

        if self._step is not Step.SELECTION:
            logger.warning(
                "Species selection ignored outside selection step",
                extra={"step": self._step.value},
            )
            return

        self._species_id = species_id
        self._symptoms = ""
        self._step = Step.SYMPTOMS

        logger.debug("Species selected", extra={"species_id": species_id})
        self._notify()

    def set_symptoms(self, text: str) -> None:
        """Update the symptom draft; ignored while a request is loading."""
        if self._step is Step.SYMPTOMS and not self._loading:
            self._symptoms = text or ""

    async def submit(self) -> None:
        """
        Symptoms -> Result.

        Blank symptoms and submissions while loading are rejected without
        a network call. On failure the flow stays on the symptom form with
        an error message.
        """
        if self._step is not Step.SYMPTOMS or self._loading:
            return

        if not self._symptoms.strip():
            logger.debug("Blank symptoms rejected")
            return

        self._discard_playback()
        self._error = None
        self._result = None
        self._result_at = None
        self._loading = True
        generation = self._next_generation()
        self._notify()

        species_id = self._species_id
        symptoms = self._symptoms
        advice: Optional[str] = None
        error: Optional[str] = None

        try:
            advice = await asyncio.to_thread(self._advice_client, species_id, symptoms)
        except VetNikoError as exc:
            logger.warning(
                "Advice unavailable",
                extra={"species_id": species_id, "error": str(exc)},
            )
            error = exc.user_message
        except Exception:
            logger.exception("Unexpected advice failure")
            error = AdviceUnavailable.default_message

        if generation != self._generation:
            logger.info(
                "Discarding stale advice response",
                extra={"generation": generation, "current": self._generation},
            )
            return

        self._loading = False
        if error is not None:
            self._error = error
        else:
            self._result = advice or EMPTY_ADVICE_FALLBACK
            self._result_at = datetime.now()
            self._step = Step.RESULT

        self._notify()

    async def toggle_speech(self) -> None:
        """
        Start or stop reading the report aloud.

        Audio is synthesized at most once per report; later toggles reuse
        the cached payload. Synthesis failures leave the report untouched.
        """
        if self._step is not Step.RESULT or not self._result:
            return

        if self.speaking:
            self._stop_playback()
            self._notify()
            return

        text = ""
        if not self.has_cached_audio:
            text = prepare_speech_text(self._result, max_chars=self._speech_max_chars)
            if not text:
                logger.warning("Report has no speakable text")
                return

        session = self._playback or PlaybackSession()
        self._playback = session
        session.playing = True

        if session.source is not None:
            self._player.play(session.source)
            self._notify()
            return

        self._notify()

        # A synthesis call is already in flight; it starts playback itself
        if session.pending:
            return

        session.pending = True
        generation = self._generation

        try:
            source = await asyncio.to_thread(self._speech_client, text)
        except Exception as exc:
            if session is not self._playback or generation != self._generation:
                return
            logger.warning(
                "Speech synthesis failed",
                extra={"error": str(exc)},
                exc_info=not isinstance(exc, VetNikoError),
            )
            session.pending = False
            session.playing = False
            self._notify()
            return

        if session is not self._playback or generation != self._generation:
            logger.info("Discarding stale speech response")
            return

        session.pending = False
        session.source = source
        if session.playing:
            self._player.play(source)

        self._notify()

    def playback_ended(self) -> None:
        """The audio element finished playing on its own."""
        if self._playback is not None and self._playback.playing:
            self._playback.playing = False
            self._notify()

    def reset(self) -> None:
        """Any step -> Selection, discarding result, error and audio."""
        self._discard_playback()
        self._next_generation()

        self._step = Step.SELECTION
        self._species_id = None
        self._symptoms = ""
        self._loading = False
        self._result = None
        self._result_at = None
        self._error = None

        logger.debug("Consultation reset")
        self._notify()

    def back(self) -> None:
        """Symptoms -> Selection."""
        if self._step is Step.SYMPTOMS:
            self.reset()

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _stop_playback(self) -> None:
        if self._playback is None:
            return
        if self._playback.playing:
            self._player.stop()
        self._playback.playing = False

    def _discard_playback(self) -> None:
        self._stop_playback()
        self._playback = None

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
