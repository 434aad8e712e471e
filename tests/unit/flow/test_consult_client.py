from unittest.mock import MagicMock, patch

import pytest
import requests

from app.core.errors import AdviceUnavailable, SpeechSynthesisUnavailable
from frontend.api import consult_client


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


def test_request_advice_returns_markdown():
    payload = {"species_id": "kedi", "advice_markdown": "## Teşhis\n...", "generated_at": "x"}

    with patch(
        "frontend.api.consult_client.requests.post",
        return_value=_response(payload=payload),
    ) as mock_post:
        advice = consult_client.request_advice("kedi", "halsiz")

    assert advice == "## Teşhis\n..."
    url = mock_post.call_args.args[0]
    assert url.endswith("/consult/advice")
    assert mock_post.call_args.kwargs["json"] == {"species_id": "kedi", "symptoms": "halsiz"}


def test_request_advice_uses_backend_detail():
    detail = "Teşhis alınırken bir hata oluştu. Lütfen tekrar deneyin."

    with patch(
        "frontend.api.consult_client.requests.post",
        return_value=_response(502, {"detail": detail}),
    ):
        with pytest.raises(AdviceUnavailable) as exc_info:
            consult_client.request_advice("kedi", "halsiz")

    assert exc_info.value.user_message == detail


def test_request_advice_connection_error():
    with patch(
        "frontend.api.consult_client.requests.post",
        side_effect=requests.ConnectionError("refused"),
    ):
        with pytest.raises(AdviceUnavailable) as exc_info:
            consult_client.request_advice("kedi", "halsiz")

    assert exc_info.value.user_message == AdviceUnavailable.default_message


def test_request_advice_ignores_validation_detail_list():
    with patch(
        "frontend.api.consult_client.requests.post",
        return_value=_response(422, {"detail": [{"loc": ["body", "symptoms"]}]}),
    ):
        with pytest.raises(AdviceUnavailable) as exc_info:
            consult_client.request_advice("kedi", " ")

    assert exc_info.value.user_message == AdviceUnavailable.default_message


def test_request_speech_builds_data_uri():
    with patch(
        "frontend.api.consult_client.requests.post",
        return_value=_response(payload={"audio_base64": "UklGRg==", "mime_type": "audio/wav"}),
    ):
        uri = consult_client.request_speech("Rapor")

    assert uri == "data:audio/wav;base64,UklGRg=="


def test_request_speech_without_audio_raises():
    with patch(
        "frontend.api.consult_client.requests.post",
        return_value=_response(payload={"mime_type": "audio/wav"}),
    ):
        with pytest.raises(SpeechSynthesisUnavailable):
            consult_client.request_speech("Rapor")
