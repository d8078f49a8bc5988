"""Tests for request building (quicklingo/ai/request.py)."""

from __future__ import annotations

import dataclasses

import pytest

from quicklingo.ai.exceptions import ConfigError, ErrorKind, InputError
from quicklingo.ai.request import build_instruction, build_request

from tests.helpers import API_URL, make_config


class TestBuildRequest:
    def test_payload_matches_wire_format(self):
        request = build_request("hello", make_config())
        payload = request.payload()

        assert payload["model"] == "gpt-4o"
        assert payload["stream"] is True
        assert payload["messages"] == [{
            "role": "user",
            "content": "Translate the following content into Simplified Chinese:\nhello",
        }]

    def test_headers(self):
        request = build_request("hello", make_config(api_key="sk-abc"))
        assert request.headers() == {
            "Accept": "application/json",
            "Authorization": "Bearer sk-abc",
            "Content-Type": "application/json",
        }

    def test_text_is_trimmed_and_otherwise_verbatim(self):
        text = '  {"quotes": "and \\n escapes"}\n<b>tags</b>  '
        request = build_request(text, make_config())
        assert request.text == text.strip()
        assert request.prompt.endswith("\n" + text.strip())

    def test_streaming_flag_follows_config(self):
        request = build_request("hello", make_config(enable_streaming=False))
        assert request.streaming is False
        assert request.payload()["stream"] is False

    def test_endpoint_and_target_language(self):
        request = build_request("hello", make_config(target_language="ja"))
        assert request.endpoint == API_URL
        assert request.target_language == "ja"
        assert "Japanese" in request.prompt

    def test_request_is_immutable(self):
        request = build_request("hello", make_config())
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.text = "other"

    def test_credential_not_in_repr(self):
        request = build_request("hello", make_config(api_key="sk-secret-value"))
        assert "sk-secret-value" not in repr(request)


class TestBuildRequestErrors:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t ", None])
    def test_empty_text(self, text):
        with pytest.raises(InputError) as exc_info:
            build_request(text, make_config())
        assert exc_info.value.kind is ErrorKind.INPUT
        assert exc_info.value.code == "input_error"

    @pytest.mark.parametrize("api_key", ["", "  ", "YOUR_API_KEY_HERE", None])
    def test_missing_api_key(self, api_key):
        with pytest.raises(ConfigError) as exc_info:
            build_request("hello", make_config(api_key=api_key))
        assert exc_info.value.details == {"missing_field": "api_key"}

    def test_missing_api_url(self):
        with pytest.raises(ConfigError) as exc_info:
            build_request("hello", make_config(api_url=""))
        assert exc_info.value.details == {"missing_field": "api_url"}

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/x", "https://"])
    def test_malformed_api_url(self, url):
        with pytest.raises(ConfigError):
            build_request("hello", make_config(api_url=url))


class TestBuildInstruction:
    def test_unknown_code_is_used_as_is(self):
        assert build_instruction("tlh") == "Translate the following content into tlh:"

    def test_regional_code_falls_back_to_base_language(self):
        assert build_instruction("de-AT") == "Translate the following content into German:"
