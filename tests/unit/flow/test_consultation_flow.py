"""
Tests for the consultation flow state machine.
"""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from app.core.errors import AdviceUnavailable, SpeechSynthesisUnavailable, ValidationError
from app.vet_service.services.prompts import EMPTY_ADVICE_FALLBACK
from app.vet_service.species_catalog import species_ids
from frontend.state.consultation_flow import ConsultationFlow, Step

REPORT = "## Teşhis\n**Olası** gastrit. `Acil` değil."
AUDIO_URI = "data:audio/wav;base64,UklGRg=="


def _make_flow(advice=REPORT, speech=AUDIO_URI):
    advice_client = MagicMock(return_value=advice)
    speech_client = MagicMock(return_value=speech)
    player = MagicMock()
    flow = ConsultationFlow(
        advice_client=advice_client,
        speech_client=speech_client,
        player=player,
    )
    return flow, advice_client, speech_client, player


async def _flow_at_result():
    flow, advice_client, speech_client, player = _make_flow()
    flow.select_species("kedi")
    flow.set_symptoms("3 gündür iştahsız ve halsiz")
    await flow.submit()
    assert flow.step is Step.RESULT
    return flow, advice_client, speech_client, player


# -------------------------------------------------
# Selection
# -------------------------------------------------
@pytest.mark.parametrize("species_id", species_ids())
def test_select_species_moves_to_symptoms(species_id):
    flow, advice_client, _, _ = _make_flow()

    flow.select_species(species_id)

    assert flow.step is Step.SYMPTOMS
    assert flow.species_id == species_id
    assert flow.symptoms == ""
    assert flow.result is None
    assert flow.error is None
    assert flow.loading is False
    assert flow.speaking is False
    advice_client.assert_not_called()


def test_unknown_species_rejected():
    flow, _, _, _ = _make_flow()

    with pytest.raises(ValidationError):
        flow.select_species("ejderha")

    assert flow.step is Step.SELECTION


# -------------------------------------------------
# Submission
# -------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("symptoms", ["", "   ", "\n\t "])
async def test_blank_symptoms_never_call_network(symptoms):
    flow, advice_client, _, _ = _make_flow()
    flow.select_species("kopek")
    flow.set_symptoms(symptoms)

    assert flow.can_submit is False
    await flow.submit()

    advice_client.assert_not_called()
    assert flow.step is Step.SYMPTOMS
    assert flow.loading is False


@pytest.mark.asyncio
async def test_successful_submission_shows_result_verbatim():
    flow, advice_client, _, _ = _make_flow(advice="## Teşhis\n...")
    flow.select_species("kedi")
    flow.set_symptoms("3 gündür iştahsız ve halsiz")

    await flow.submit()

    advice_client.assert_called_once_with("kedi", "3 gündür iştahsız ve halsiz")
    assert flow.step is Step.RESULT
    assert flow.result == "## Teşhis\n..."
    assert flow.error is None
    assert flow.loading is False
    assert flow.result_at is not None


@pytest.mark.asyncio
async def test_empty_advice_shows_fallback():
    flow, _, _, _ = _make_flow(advice="")
    flow.select_species("inek")
    flow.set_symptoms("öksürük")

    await flow.submit()

    assert flow.step is Step.RESULT
    assert flow.result == EMPTY_ADVICE_FALLBACK


@pytest.mark.asyncio
async def test_failed_submission_stays_on_symptoms():
    flow, advice_client, _, _ = _make_flow()
    advice_client.side_effect = AdviceUnavailable()
    flow.select_species("kedi")
    flow.set_symptoms("kusma")

    await flow.submit()

    assert flow.step is Step.SYMPTOMS
    assert flow.result is None
    assert flow.error == AdviceUnavailable.default_message
    assert flow.loading is False
    assert flow.can_submit is True


@pytest.mark.asyncio
async def test_unexpected_failure_still_clears_loading():
    flow, advice_client, _, _ = _make_flow()
    advice_client.side_effect = KeyError("boom")
    flow.select_species("koyun")
    flow.set_symptoms("topallama")

    await flow.submit()

    assert flow.loading is False
    assert flow.step is Step.SYMPTOMS
    assert flow.error


@pytest.mark.asyncio
async def test_resubmission_after_error_clears_error():
    flow, advice_client, _, _ = _make_flow()
    advice_client.side_effect = [AdviceUnavailable(), REPORT]
    flow.select_species("kedi")
    flow.set_symptoms("kusma")

    await flow.submit()
    assert flow.error

    await flow.submit()

    assert flow.error is None
    assert flow.result == REPORT
    assert advice_client.call_count == 2


@pytest.mark.asyncio
async def test_loading_state_observed_during_request():
    seen = []
    flow = None

    def advice_client(species_id, symptoms):
        seen.append((flow.loading, flow.step, flow.can_submit))
        return REPORT

    flow = ConsultationFlow(advice_client=advice_client, speech_client=MagicMock())
    flow.select_species("buzagi")
    flow.set_symptoms("ishal")

    await flow.submit()

    assert seen == [(True, Step.SYMPTOMS, False)]


@pytest.mark.asyncio
async def test_stale_advice_is_discarded_after_reset():
    started = threading.Event()
    release = threading.Event()

    def slow_advice(species_id, symptoms):
        started.set()
        release.wait(timeout=5)
        return REPORT

    flow = ConsultationFlow(advice_client=slow_advice, speech_client=MagicMock())
    flow.select_species("kedi")
    flow.set_symptoms("halsiz")

    task = asyncio.create_task(flow.submit())
    await asyncio.to_thread(started.wait, 5)

    flow.reset()
    release.set()
    await task

    assert flow.step is Step.SELECTION
    assert flow.result is None
    assert flow.loading is False


# -------------------------------------------------
# Speech
# -------------------------------------------------
@pytest.mark.asyncio
async def test_speak_synthesizes_sanitized_text_and_plays():
    flow, _, speech_client, player = await _flow_at_result()

    await flow.toggle_speech()

    speech_client.assert_called_once()
    text = speech_client.call_args.args[0]
    assert "#" not in text and "*" not in text and "`" not in text
    assert "Olası gastrit" in text
    player.play.assert_called_once_with(AUDIO_URI)
    assert flow.speaking is True


@pytest.mark.asyncio
async def test_speech_text_is_capped():
    speech_client = MagicMock(return_value=AUDIO_URI)
    flow = ConsultationFlow(
        advice_client=MagicMock(return_value="kelime " * 500),
        speech_client=speech_client,
    )
    flow.select_species("kopek")
    flow.set_symptoms("ateş")
    await flow.submit()

    await flow.toggle_speech()

    assert len(speech_client.call_args.args[0]) <= 1000


@pytest.mark.asyncio
async def test_toggle_twice_synthesizes_once_and_stops():
    flow, _, speech_client, player = await _flow_at_result()

    await flow.toggle_speech()
    await flow.toggle_speech()

    assert speech_client.call_count == 1
    player.stop.assert_called_once()
    assert flow.speaking is False


@pytest.mark.asyncio
async def test_replay_uses_cached_audio():
    flow, _, speech_client, player = await _flow_at_result()

    await flow.toggle_speech()
    flow.playback_ended()
    assert flow.speaking is False

    await flow.toggle_speech()

    assert speech_client.call_count == 1
    assert player.play.call_count == 2
    assert flow.speaking is True


@pytest.mark.asyncio
async def test_speech_without_audio_leaves_report_intact():
    flow, _, speech_client, player = await _flow_at_result()
    speech_client.side_effect = SpeechSynthesisUnavailable()

    await flow.toggle_speech()

    assert flow.speaking is False
    assert flow.result == REPORT
    assert flow.step is Step.RESULT
    assert flow.error is None
    player.play.assert_not_called()


@pytest.mark.asyncio
async def test_speech_retry_after_failure_calls_again():
    flow, _, speech_client, _ = await _flow_at_result()
    speech_client.side_effect = [SpeechSynthesisUnavailable(), AUDIO_URI]

    await flow.toggle_speech()
    await flow.toggle_speech()

    assert speech_client.call_count == 2
    assert flow.speaking is True


@pytest.mark.asyncio
async def test_speak_ignored_outside_result():
    flow, _, speech_client, _ = _make_flow()
    flow.select_species("kedi")

    await flow.toggle_speech()

    speech_client.assert_not_called()
    assert flow.speaking is False


@pytest.mark.asyncio
async def test_markup_only_report_is_not_synthesized():
    flow, _, speech_client, player = _make_flow(advice="### ***")
    flow.select_species("inek")
    flow.set_symptoms("süt veriminde düşüş")
    await flow.submit()
    assert flow.result == "### ***"

    await flow.toggle_speech()

    speech_client.assert_not_called()
    player.play.assert_not_called()
    assert flow.speaking is False
    assert flow.has_cached_audio is False


def _slow_speech_client(started, release, calls):
    def slow_speech(text):
        calls.append(text)
        started.set()
        release.wait(timeout=5)
        return AUDIO_URI

    return slow_speech


@pytest.mark.asyncio
async def test_stale_speech_is_discarded_after_reset():
    started = threading.Event()
    release = threading.Event()
    calls = []
    player = MagicMock()

    flow = ConsultationFlow(
        advice_client=MagicMock(return_value=REPORT),
        speech_client=_slow_speech_client(started, release, calls),
        player=player,
    )
    flow.select_species("kedi")
    flow.set_symptoms("halsiz")
    await flow.submit()

    task = asyncio.create_task(flow.toggle_speech())
    await asyncio.to_thread(started.wait, 5)
    assert flow.speaking is True

    flow.reset()
    release.set()
    await task

    assert flow.step is Step.SELECTION
    assert flow.speaking is False
    assert flow.has_cached_audio is False
    assert len(calls) == 1
    player.play.assert_not_called()


@pytest.mark.asyncio
async def test_toggle_while_pending_does_not_synthesize_again():
    started = threading.Event()
    release = threading.Event()
    calls = []
    player = MagicMock()

    flow = ConsultationFlow(
        advice_client=MagicMock(return_value=REPORT),
        speech_client=_slow_speech_client(started, release, calls),
        player=player,
    )
    flow.select_species("kopek")
    flow.set_symptoms("topallama")
    await flow.submit()

    task = asyncio.create_task(flow.toggle_speech())
    await asyncio.to_thread(started.wait, 5)

    # Stop, then start again before the first call returns
    await flow.toggle_speech()
    assert flow.speaking is False
    await flow.toggle_speech()
    assert flow.speaking is True

    release.set()
    await task

    assert len(calls) == 1
    player.play.assert_called_once_with(AUDIO_URI)
    assert flow.speaking is True
    assert flow.has_cached_audio is True


@pytest.mark.asyncio
async def test_audio_arriving_after_stop_is_cached_not_played():
    started = threading.Event()
    release = threading.Event()
    calls = []
    player = MagicMock()

    flow = ConsultationFlow(
        advice_client=MagicMock(return_value=REPORT),
        speech_client=_slow_speech_client(started, release, calls),
        player=player,
    )
    flow.select_species("koyun")
    flow.set_symptoms("öksürük")
    await flow.submit()

    task = asyncio.create_task(flow.toggle_speech())
    await asyncio.to_thread(started.wait, 5)
    await flow.toggle_speech()

    release.set()
    await task

    player.play.assert_not_called()
    assert flow.speaking is False
    assert flow.has_cached_audio is True


# -------------------------------------------------
# Reset / back
# -------------------------------------------------
@pytest.mark.asyncio
async def test_reset_from_result_clears_everything():
    flow, _, speech_client, player = await _flow_at_result()
    await flow.toggle_speech()

    flow.reset()

    assert flow.step is Step.SELECTION
    assert flow.species_id is None
    assert flow.symptoms == ""
    assert flow.result is None
    assert flow.error is None
    assert flow.speaking is False
    assert flow.has_cached_audio is False
    player.stop.assert_called_once()


@pytest.mark.asyncio
async def test_new_consultation_synthesizes_again():
    flow, advice_client, speech_client, _ = await _flow_at_result()
    await flow.toggle_speech()

    flow.reset()
    flow.select_species("inek")
    flow.set_symptoms("şişkinlik")
    await flow.submit()
    await flow.toggle_speech()

    assert speech_client.call_count == 2


@pytest.mark.asyncio
async def test_reset_from_symptoms_with_error():
    flow, advice_client, _, _ = _make_flow()
    advice_client.side_effect = AdviceUnavailable()
    flow.select_species("kedi")
    flow.set_symptoms("kusma")
    await flow.submit()

    flow.reset()

    assert flow.step is Step.SELECTION
    assert flow.error is None
    assert flow.symptoms == ""


def test_back_returns_to_selection():
    flow, _, _, _ = _make_flow()
    flow.select_species("kopek")
    flow.set_symptoms("topallıyor")

    flow.back()

    assert flow.step is Step.SELECTION
    assert flow.species_id is None
    assert flow.symptoms == ""
    assert flow.show_reset is False


def test_reset_from_selection_is_harmless():
    flow, _, _, player = _make_flow()

    flow.reset()

    assert flow.step is Step.SELECTION
    player.stop.assert_not_called()


@pytest.mark.asyncio
async def test_on_change_called_for_transitions():
    on_change = MagicMock()
    flow = ConsultationFlow(
        advice_client=MagicMock(return_value=REPORT),
        speech_client=MagicMock(return_value=AUDIO_URI),
        on_change=on_change,
    )

    flow.select_species("kedi")
    flow.set_symptoms("halsiz")
    await flow.submit()

    # select, loading start, result
    assert on_change.call_count == 3
