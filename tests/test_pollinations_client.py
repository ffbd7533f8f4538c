# ===============================================
# tests/test_pollinations_client.py
# HTTP boundary: requests errors become UpstreamTransportError,
# bodies are decoded once, probes never raise.
# ===============================================

from unittest.mock import MagicMock

import pytest
import requests

from fortec_gateway.errors import UpstreamTransportError
from fortec_gateway.generate.attempts import AttemptPlanner
from fortec_gateway.generate.clients.echo_dev_client import EchoDevClient
from fortec_gateway.generate.clients.pollinations_client import PollinationsClient
from fortec_gateway.generate.types import AudioBody, GenerationRequest, JsonBody, TextBody


def make_response(status=200, text="", content=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = content if content is not None else text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = "https://text.pollinations.ai/x"
    return resp


@pytest.fixture
def planner():
    return AttemptPlanner()


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def test_json_reply_is_decoded(planner, session):
    session.get.return_value = make_response(text='{"text": "hi", "model": "openai"}')
    attempt = planner.primary(GenerationRequest(prompt="Hello"), timeout=60.0)

    body = PollinationsClient(session).fetch(attempt)

    assert body == JsonBody({"text": "hi", "model": "openai"})
    session.get.assert_called_once_with(attempt.url, headers={"Accept": "application/json"}, timeout=60.0)


def test_plain_reply_is_text(planner, session):
    session.get.return_value = make_response(text="not json at all")
    attempt = planner.primary(GenerationRequest(prompt="Hello"), timeout=60.0)

    assert PollinationsClient(session).fetch(attempt) == TextBody("not json at all")


def test_audio_reply_keeps_bytes(planner, session):
    session.get.return_value = make_response(content=b"\xff\xfbmp3-bytes")
    attempt = planner.primary(GenerationRequest(prompt="Hello", model="openai-audio"), timeout=60.0)

    body = PollinationsClient(session).fetch(attempt)

    assert body == AudioBody(b"\xff\xfbmp3-bytes")
    assert session.get.call_args.kwargs["headers"] == {"Accept": "audio/mpeg"}


def test_http_error_becomes_transport_error(planner, session):
    session.get.return_value = make_response(status=503, text="Service Unavailable")
    attempt = planner.primary(GenerationRequest(prompt="Hello", model="mistral"), timeout=60.0)

    with pytest.raises(UpstreamTransportError) as excinfo:
        PollinationsClient(session).fetch(attempt)

    assert excinfo.value.model == "mistral"
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_timeout_becomes_transport_error(planner, session):
    session.get.side_effect = requests.Timeout("Read timed out")
    attempt = planner.primary(GenerationRequest(prompt="Hello"), timeout=60.0)

    with pytest.raises(UpstreamTransportError):
        PollinationsClient(session).fetch(attempt)


def test_probe_swallows_failures(session):
    session.get.side_effect = requests.ConnectionError("boom")

    assert PollinationsClient(session).probe("https://image.pollinations.ai/prompt/x", timeout=15.0) is False


def test_probe_reports_success(session):
    session.get.return_value = make_response(content=b"\x89PNG")

    assert PollinationsClient(session).probe("https://image.pollinations.ai/prompt/x", timeout=15.0) is True


def test_echo_client_echoes_prompt(planner):
    client = EchoDevClient()

    text = client.fetch(planner.primary(GenerationRequest(prompt="ping", model="mistral"), timeout=1.0))
    audio = client.fetch(planner.primary(GenerationRequest(prompt="ping", model="openai-audio"), timeout=1.0))

    assert text.data["text"] == "[ECHO RESPONSE]\nping"
    assert text.data["model"] == "mistral"
    assert audio.payload == b"ECHO-AUDIO:alloy:ping"
