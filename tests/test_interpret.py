# ===============================================
# tests/test_interpret.py
# Boundary decoding of upstream bodies and content extraction.
# ===============================================

import json

import pytest

from fortec_gateway.generate.interpret import decode_response, decode_text_body, interpret
from fortec_gateway.generate.types import AudioBody, EndpointShape, JsonBody, TextBody


def test_json_object_decodes_to_json_body():
    assert decode_text_body('{"text": "hi", "model": "openai"}') == JsonBody({"text": "hi", "model": "openai"})


def test_json_encoded_string_decodes_to_text():
    assert decode_text_body(json.dumps("hello there")) == TextBody("hello there")


def test_double_encoded_object_is_unwrapped():
    raw = json.dumps(json.dumps({"content": "inner"}))
    assert decode_text_body(raw) == JsonBody({"content": "inner"})


def test_plain_text_passes_through():
    assert decode_text_body("Hello, I am a plain reply.") == TextBody("Hello, I am a plain reply.")


def test_other_json_values_become_text():
    assert decode_text_body("[1, 2]") == TextBody("[1, 2]")
    assert decode_text_body("null") == TextBody("")


def test_audio_shape_keeps_raw_bytes():
    body = decode_response(EndpointShape.TEXT_AUDIO, b"\x00\x01mp3", "ignored")
    assert body == AudioBody(payload=b"\x00\x01mp3")


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"text": "a", "content": "b", "response": "c", "message": "d"}, "a"),
        ({"text": "", "content": "b", "response": "c"}, "b"),
        ({"response": "c", "message": "d"}, "c"),
        ({"message": "d"}, "d"),
    ],
)
def test_content_field_precedence(data, expected):
    assert interpret(JsonBody(data)).content == expected


def test_identity_only_object_is_incomplete():
    out = interpret(JsonBody({"model": "obscure-model"}))
    assert out.incomplete is True
    assert out.content is None
    assert out.reported_model == "obscure-model"


def test_model_name_wins_over_model():
    out = interpret(JsonBody({"model": "raw-id", "model_name": "Pretty Name"}))
    assert out.reported_model == "Pretty Name"
    assert out.incomplete is True


def test_object_without_identity_is_not_incomplete():
    out = interpret(JsonBody({"foo": "bar"}))
    assert out.incomplete is False
    assert out.content is None


def test_blank_text_has_no_content():
    out = interpret(TextBody("   "))
    assert out.content is None
    assert out.incomplete is False


def test_usage_total_must_be_positive_int():
    assert interpret(JsonBody({"text": "x", "usage": {"total_tokens": 12}})).tokens_used == 12
    assert interpret(JsonBody({"text": "x", "usage": {"total_tokens": 0}})).tokens_used is None
    assert interpret(JsonBody({"text": "x", "usage": {"total_tokens": "12"}})).tokens_used is None
    assert interpret(JsonBody({"text": "x", "usage": "n/a"})).tokens_used is None


def test_audio_body_is_not_text():
    with pytest.raises(TypeError):
        interpret(AudioBody(b"abc"))
