"""Tests for message content encoding and response decoding."""

import json

import httpx
import pytest

from conduit.api.codec import (
    chat_request_body,
    decode_as,
    decode_model_ids,
    decode_token,
    decode_upload,
    encode_json,
    response_json,
)
from conduit.errors import InvalidResponse, MissingToken
from conduit.types import (
    ContentPart,
    ConversationTurn,
    MessageContent,
    NoteItem,
    Role,
)


class TestMessageContent:
    def test_plain_text_is_bare_string(self):
        assert MessageContent.plain("hello").to_json() == "hello"

    def test_structured_parts(self):
        content = MessageContent.structured([
            ContentPart.text_part("hi"),
            ContentPart.image("http://x/y.png"),
        ])
        body, _ = encode_json({"content": content.to_json()})
        parts = json.loads(body)["content"]

        assert len(parts) == 2
        assert parts[0] == {"type": "text", "text": "hi"}
        assert "image_url" not in parts[0]
        assert parts[1] == {"type": "image_url", "image_url": {"url": "http://x/y.png"}}
        assert "text" not in parts[1]

    def test_turn_to_message(self):
        turn = ConversationTurn(role=Role.ASSISTANT, content=MessageContent.plain("ok"))
        assert turn.to_message() == {"role": "assistant", "content": "ok"}


class TestEncoding:
    def test_json_content_type(self):
        body, headers = encode_json({"a": 1})
        assert headers == {"Content-Type": "application/json"}
        assert json.loads(body) == {"a": 1}

    def test_chat_request_body(self):
        body = chat_request_body("llama3", [ConversationTurn.user("hi")])
        assert body == {
            "model": "llama3",
            "messages": [{"role": "user", "content": "hi"}],
            "stream": True,
        }


class TestDecoding:
    def test_model_ids_keep_server_order(self):
        payload = {"data": [{"id": "b"}, {"id": "a"}, {"id": "c", "name": "C"}]}
        assert decode_model_ids(payload) == ["b", "a", "c"]

    def test_model_ids_bad_shape(self):
        with pytest.raises(InvalidResponse):
            decode_model_ids([{"id": "a"}])

    @pytest.mark.parametrize("payload,expected", [
        ({"token": "t1", "access_token": "t2"}, "t1"),
        ({"access_token": "t2", "accessToken": "t3"}, "t2"),
        ({"accessToken": "t3"}, "t3"),
        ({"token": "", "accessToken": "t3"}, "t3"),
    ])
    def test_token_precedence(self, payload, expected):
        assert decode_token(payload) == expected

    def test_missing_token(self):
        with pytest.raises(MissingToken) as exc_info:
            decode_token({"id": "user-1"})
        assert str(exc_info.value) == "No auth token returned by server"

    @pytest.mark.parametrize("payload", [{"data": {"id": "1"}}, {"id": "1"}])
    def test_upload_enveloped_or_bare(self, payload):
        assert decode_upload(payload).id == "1"

    def test_upload_envelope_fields(self):
        att = decode_upload({"data": {"id": "f1", "url": "/files/f1", "filename": "a.jpg"}})
        assert att.url == "/files/f1"
        assert att.filename == "a.jpg"

    def test_upload_undecodable(self):
        with pytest.raises(InvalidResponse):
            decode_upload({"status": "ok"})

    def test_list_of_items(self):
        notes = decode_as([{"id": "n1", "title": "T"}, {"id": "n2"}], list[NoteItem])
        assert [n.id for n in notes] == ["n1", "n2"]
        assert notes[1].title is None

    def test_response_json_rejects_non_json(self):
        resp = httpx.Response(200, content=b"<html>", request=httpx.Request("GET", "http://t"))
        with pytest.raises(InvalidResponse):
            response_json(resp)
