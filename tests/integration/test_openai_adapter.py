"""
Integration tests for the OpenAI adapter against a mocked HTTP transport.
"""

import base64
import itertools

import httpx
import pytest

from genai_gateway import (
    GatewayAuthenticationError,
    GatewayCapability,
    GatewayConfigError,
    GatewayConnectionError,
    GatewayContentMissingError,
    GatewayDecodeError,
    GatewayProviderError,
    GatewayRateLimitError,
    GatewayTimeoutError,
    GatewayValidationError,
    ImageGenRequest,
    Message,
    OpenAIAdapter,
    TTSRequest,
    build_openai_vision_content,
    build_response_schema,
    with_base_url,
    with_http_client,
    with_model,
    with_timeout,
)


def make_adapter(client, *options, **kwargs):
    return OpenAIAdapter("sk-test", with_http_client(client), *options, **kwargs)


class TestOpenAIAdapterConfig:
    """Test adapter construction."""

    def test_empty_api_key(self):
        """Test an empty API key is a config error."""
        with pytest.raises(GatewayConfigError):
            OpenAIAdapter("")

    def test_defaults(self):
        """Test default model and base URL."""
        with OpenAIAdapter("sk-test") as adapter:
            assert adapter.config.model == "gpt-4o-mini"
            assert adapter.config.base_url == "https://api.openai.com/v1"
            assert adapter.config.timeout == 60.0
            assert adapter.name == "openai"
            assert adapter.gateway_type == "openai"

    def test_capabilities(self):
        """Test adapter reports capabilities."""
        with OpenAIAdapter("sk-test") as adapter:
            assert adapter.supports(GatewayCapability.IMAGES)
            assert adapter.supports(GatewayCapability.AUDIO)
            assert adapter.supports(GatewayCapability.VISION)

    def test_auth_and_org_headers(self, mock_http, openai_chat_body):
        """Test bearer token and organization/project headers."""
        handler, client = mock_http(json_body=openai_chat_body)
        adapter = make_adapter(client, organization="org-1", project="proj-1")
        adapter.send_message([{"role": "user", "content": "hello"}])

        headers = handler.last_request.headers
        assert headers["authorization"] == "Bearer sk-test"
        assert headers["openai-organization"] == "org-1"
        assert headers["openai-project"] == "proj-1"
        assert headers["content-type"] == "application/json"

    def test_base_url_option(self, mock_http, openai_chat_body):
        """Test every endpoint follows the configured base URL."""
        handler, client = mock_http(json_body=openai_chat_body)
        adapter = make_adapter(client, with_base_url("https://proxy.local/v1/"))
        adapter.send_message([{"role": "user", "content": "hello"}])
        assert str(handler.last_request.url) == "https://proxy.local/v1/chat/completions"

    def test_caller_client_not_closed(self, mock_http):
        """Test close() leaves an injected client open."""
        _, client = mock_http(json_body={})
        make_adapter(client).close()
        assert not client.is_closed


class TestOpenAIChat:
    """Test chat completions."""

    def test_hello_round_trip(self, mock_http):
        """Test the first candidate of a minimal chat round trip."""
        handler, client = mock_http(json_body={
            "choices": [{"message": {"role": "assistant", "content": "hi there"}}],
        })
        adapter = make_adapter(client)

        text = adapter.get_first_candidate(
            [Message(role="user", content="hello")],
            max_tokens=100,
        )

        assert text == "hi there"
        assert handler.last_request.method == "POST"
        assert str(handler.last_request.url) == "https://api.openai.com/v1/chat/completions"
        assert handler.last_json == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "hello"}],
            "max_tokens": 100,
        }

    def test_full_response(self, mock_http, openai_chat_body):
        """Test the decoded response carries id, model and usage."""
        _, client = mock_http(json_body=openai_chat_body)
        response = make_adapter(client, with_model("gpt-4o")).send_message(
            [{"role": "user", "content": "hello"}],
        )
        assert response.id == "chatcmpl-123"
        assert response.usage.total_tokens == 12
        assert response.gateway == "openai"

    def test_model_option(self, mock_http, openai_chat_body):
        """Test the configured model is sent."""
        handler, client = mock_http(json_body=openai_chat_body)
        make_adapter(client, with_model("gpt-4o")).send_message([{"role": "user", "content": "x"}])
        assert handler.last_json["model"] == "gpt-4o"

    def test_message_order_preserved(self, mock_http, openai_chat_body):
        """Test messages are sent in caller order."""
        handler, client = mock_http(json_body=openai_chat_body)
        messages = [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "u1"},
            {"role": "assistant", "content": "a1"},
            {"role": "user", "content": "u2"},
        ]
        make_adapter(client).send_message(messages)
        assert handler.last_json["messages"] == messages

    def test_response_format(self, mock_http):
        """Test structured output is requested and decoded."""
        handler, client = mock_http(json_body={
            "choices": [{"message": {"role": "assistant", "content": '{"title": "Moon"}'}}],
        })
        schema = {"type": "object", "properties": {"title": {"type": "string"}}}
        response = make_adapter(client).send_message(
            [{"role": "user", "content": "story"}],
            response_format=build_response_schema("story", schema),
        )
        assert handler.last_json["response_format"] == {
            "type": "json_schema",
            "json_schema": {"name": "story", "schema": schema},
        }
        assert response.get_first_candidate_json() == {"title": "Moon"}

    def test_vision_message(self, mock_http, openai_chat_body):
        """Test a vision payload is sent as image_url then text."""
        handler, client = mock_http(json_body=openai_chat_body)
        content = build_openai_vision_content("image/jpeg", False, "QUJD", "describe")
        make_adapter(client).send_message([Message(role="user", content=content)])
        assert handler.last_json["messages"][0]["content"] == [
            {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,QUJD"}},
            {"type": "text", "text": "describe"},
        ]

    def test_custom_body(self, mock_http, openai_chat_body):
        """Test a custom body is sent as-is apart from response_format."""
        handler, client = mock_http(json_body=openai_chat_body)
        custom = {"model": "gpt-4o", "messages": [{"role": "user", "content": "x"}], "store": True}
        make_adapter(client).send_message(
            custom_body=custom,
            response_format=build_response_schema("r", {"type": "object"}),
        )
        sent = handler.last_json
        assert sent["model"] == "gpt-4o"
        assert sent["store"] is True
        assert sent["response_format"]["json_schema"]["name"] == "r"
        assert "response_format" not in custom

    def test_custom_body_without_synthesis(self, mock_http, openai_chat_body):
        """Test no fields are synthesized into a custom body."""
        handler, client = mock_http(json_body=openai_chat_body)
        custom = {"messages": [{"role": "user", "content": "x"}]}
        make_adapter(client).send_message(custom_body=custom)
        assert handler.last_json == custom

    @pytest.mark.parametrize("kwargs", [
        {},
        {"messages": [{"role": "user", "content": "x"}], "custom_body": {"messages": [{}]}},
        {"messages": []},
        {"custom_body": {"model": "gpt-4o"}},
        {"messages": [{"role": "robot", "content": "x"}]},
        {"messages": [{"role": "user", "content": "x"}], "response_format": {"name": "x"}},
        {"messages": [{"role": "user", "content": "x"}], "temperature": 3.5},
        {"custom_body": {"messages": [{"role": "user", "content": object()}]}},
    ])
    def test_invalid_arguments(self, mock_http, kwargs):
        """Test argument violations fail before any request."""
        handler, client = mock_http(json_body={})
        with pytest.raises(GatewayValidationError):
            make_adapter(client).send_message(**kwargs)
        assert handler.requests == []

    def test_per_call_timeout(self, mock_http, openai_chat_body):
        """Test a per-call deadline reaches the transport."""
        handler, client = mock_http(json_body=openai_chat_body)
        make_adapter(client, with_timeout(30.0)).send_message([{"role": "user", "content": "x"}], timeout=7.5)
        assert handler.last_request.extensions["timeout"]["read"] == 7.5

    def test_configured_timeout_on_injected_client(self, mock_http, openai_chat_body):
        """Test the configured timeout applies to a caller-supplied client."""
        handler, client = mock_http(json_body=openai_chat_body)
        adapter = make_adapter(client, with_timeout(1.0))
        adapter.send_message([{"role": "user", "content": "x"}])
        assert adapter.config.timeout == 1.0
        assert handler.last_request.extensions["timeout"] == {
            "connect": 1.0,
            "read": 1.0,
            "write": 1.0,
            "pool": 1.0,
        }

    def test_default_timeout_on_injected_client(self, mock_http):
        """Test the 60 second default applies to speech calls on a caller-supplied client."""
        handler, client = mock_http(content=b"ID3audio")
        make_adapter(client).synthesize_speech(TTSRequest(model="tts-1", input="x", voice="alloy"))
        assert handler.last_request.extensions["timeout"]["read"] == 60.0

    def test_no_candidates(self, mock_http):
        """Test an empty choices list raises content missing."""
        _, client = mock_http(json_body={"id": "x", "choices": []})
        with pytest.raises(GatewayContentMissingError):
            make_adapter(client).get_first_candidate([{"role": "user", "content": "x"}])


class TestOpenAIErrors:
    """Test error mapping."""

    def test_rate_limit(self, mock_http):
        """Test a 429 carries status, provider type and message."""
        _, client = mock_http(
            status_code=429,
            json_body={"error": {"type": "rate_limit", "message": "slow down"}},
            headers={"retry-after": "2"},
        )
        with pytest.raises(GatewayProviderError) as exc_info:
            make_adapter(client).send_message([{"role": "user", "content": "x"}])

        error = exc_info.value
        assert isinstance(error, GatewayRateLimitError)
        assert error.status_code == 429
        assert error.error_type == "rate_limit"
        assert error.provider_message == "slow down"
        assert error.retry_after == 2.0
        assert error.gateway == "openai"

    def test_authentication(self, mock_http):
        """Test a 401 is an authentication error."""
        _, client = mock_http(
            status_code=401,
            json_body={"error": {"type": "invalid_request_error", "message": "Incorrect API key"}},
        )
        with pytest.raises(GatewayAuthenticationError) as exc_info:
            make_adapter(client).send_message([{"role": "user", "content": "x"}])
        assert exc_info.value.status_code == 401

    def test_undecodable_error_body(self, mock_http):
        """Test a non-JSON error body yields a status-only provider error."""
        _, client = mock_http(status_code=502, content=b"<html>bad gateway</html>")
        with pytest.raises(GatewayProviderError) as exc_info:
            make_adapter(client).send_message([{"role": "user", "content": "x"}])
        error = exc_info.value
        assert error.status_code == 502
        assert error.error_type is None
        assert error.provider_message is None

    def test_malformed_success_body(self, mock_http):
        """Test a non-JSON success body is a decode error."""
        _, client = mock_http(status_code=200, content=b"not json")
        with pytest.raises(GatewayDecodeError):
            make_adapter(client).send_message([{"role": "user", "content": "x"}])

    def test_non_object_success_body(self, mock_http):
        """Test a JSON array success body is a decode error."""
        _, client = mock_http(status_code=200, json_body=[1, 2, 3])
        with pytest.raises(GatewayDecodeError):
            make_adapter(client).send_message([{"role": "user", "content": "x"}])

    def test_connection_error(self, mock_http):
        """Test network failures become connection errors."""
        _, client = mock_http(error=httpx.ConnectError)
        with pytest.raises(GatewayConnectionError) as exc_info:
            make_adapter(client).send_message([{"role": "user", "content": "x"}])
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self, mock_http):
        """Test timeouts become timeout errors."""
        _, client = mock_http(error=httpx.ReadTimeout)
        with pytest.raises(GatewayTimeoutError):
            make_adapter(client).send_message([{"role": "user", "content": "x"}])

    def test_failure_does_not_poison_client(self, mock_http, openai_chat_body):
        """Test a failed call leaves later calls unaffected."""
        responses = iter([
            httpx.Response(500, json={"error": {"type": "server_error", "message": "boom"}}),
            httpx.Response(200, json=openai_chat_body),
        ])
        client = httpx.Client(transport=httpx.MockTransport(lambda request: next(responses)))
        adapter = make_adapter(client)
        with pytest.raises(GatewayProviderError):
            adapter.send_message([{"role": "user", "content": "x"}])
        assert adapter.get_first_candidate([{"role": "user", "content": "x"}]) == "hi there"
        client.close()


IMAGE_MODELS = ["dall-e-2", "dall-e-3"]
QUALITIES = [None, "standard", "hd"]
STYLES = [None, "vivid", "natural"]


class TestImageGeneration:
    """Test image generation validation and decoding."""

    @pytest.mark.parametrize(
        "model,quality,style",
        list(itertools.product(IMAGE_MODELS, QUALITIES, STYLES)),
    )
    def test_quality_style_matrix(self, model, quality, style):
        """Test quality/style are only accepted on dall-e-3."""
        request = ImageGenRequest(prompt="a cat", model=model, quality=quality, style=style)
        allowed = model == "dall-e-3" or (quality is None and style is None)
        if allowed:
            request.validate_request()
        else:
            with pytest.raises(GatewayValidationError):
                request.validate_request()

    @pytest.mark.parametrize("field,value", [("quality", "ultra"), ("style", "noir")])
    def test_unknown_quality_or_style(self, field, value):
        """Test unknown values are rejected even on dall-e-3."""
        request = ImageGenRequest(prompt="a cat", model="dall-e-3", **{field: value})
        with pytest.raises(GatewayValidationError) as exc_info:
            request.validate_request()
        assert exc_info.value.field == field

    @pytest.mark.parametrize("n", [-1, 0, 11, 100])
    def test_count_out_of_range(self, n):
        """Test n outside [1, 10] is rejected."""
        with pytest.raises(GatewayValidationError) as exc_info:
            ImageGenRequest(prompt="a cat", model="dall-e-2", n=n).validate_request()
        assert exc_info.value.field == "n"

    @pytest.mark.parametrize("n", [1, 5, 10])
    def test_count_in_range(self, n):
        """Test n inside [1, 10] passes validation."""
        ImageGenRequest(prompt="a cat", model="dall-e-2", n=n).validate_request()

    def test_wrong_field_type(self):
        """Test a wrongly typed field is a gateway validation error."""
        with pytest.raises(GatewayValidationError) as exc_info:
            ImageGenRequest(prompt="a cat", model="dall-e-2", n="many")
        assert exc_info.value.field == "n"

    def test_unknown_model(self):
        """Test only the two image models are accepted."""
        with pytest.raises(GatewayValidationError) as exc_info:
            ImageGenRequest(prompt="a cat", model="dall-e-4").validate_request()
        assert exc_info.value.field == "model"

    def test_response_format(self):
        """Test response_format must be url or b64_json."""
        with pytest.raises(GatewayValidationError):
            ImageGenRequest(prompt="a cat", model="dall-e-2", response_format="png").validate_request()
        ImageGenRequest(prompt="a cat", model="dall-e-2", response_format="b64_json").validate_request()

    def test_size_depends_on_model(self):
        """Test size is checked against the model's size set."""
        ImageGenRequest(prompt="a cat", model="dall-e-3", size="1792x1024").validate_request()
        with pytest.raises(GatewayValidationError) as exc_info:
            ImageGenRequest(prompt="a cat", model="dall-e-2", size="1792x1024").validate_request()
        assert exc_info.value.field == "size"

    def test_first_violation_wins(self):
        """Test checks run in order: model before n before quality."""
        request = ImageGenRequest(prompt="a cat", model="bogus", n=50, quality="ultra")
        with pytest.raises(GatewayValidationError) as exc_info:
            request.validate_request()
        assert exc_info.value.field == "model"

        request = ImageGenRequest(prompt="a cat", model="dall-e-2", n=50, quality="hd")
        with pytest.raises(GatewayValidationError) as exc_info:
            request.validate_request()
        assert exc_info.value.field == "n"

    def test_invalid_request_not_sent(self, mock_http):
        """Test validation runs before the network call."""
        handler, client = mock_http(json_body={})
        with pytest.raises(GatewayValidationError):
            make_adapter(client).generate_image(
                ImageGenRequest(prompt="a cat", model="dall-e-2", style="vivid"),
            )
        assert handler.requests == []

    def test_generate_image(self, mock_http):
        """Test a successful image generation round trip."""
        handler, client = mock_http(json_body={
            "created": 1700000000,
            "data": [{"url": "https://img/1.png", "revised_prompt": "a fluffy cat"}],
        })
        response = make_adapter(client).generate_image(
            ImageGenRequest(prompt="a cat", model="dall-e-3", quality="hd", style="natural", size="1024x1024"),
        )
        assert str(handler.last_request.url) == "https://api.openai.com/v1/images/generations"
        assert handler.last_json == {
            "prompt": "a cat",
            "model": "dall-e-3",
            "quality": "hd",
            "style": "natural",
            "size": "1024x1024",
        }
        assert response.created == 1700000000
        assert response.images[0].url == "https://img/1.png"
        assert response.images[0].revised_prompt == "a fluffy cat"

    def test_generate_image_b64(self, mock_http):
        """Test base64 images are decoded."""
        _, client = mock_http(json_body={"created": 1, "data": [{"b64_json": "QUJD"}, {"b64_json": "REVG"}]})
        response = make_adapter(client).generate_image(
            ImageGenRequest(prompt="a cat", model="dall-e-2", n=2, response_format="b64_json"),
        )
        assert [i.b64_json for i in response.images] == ["QUJD", "REVG"]

    def test_provider_error(self, mock_http):
        """Test provider failures surface as provider errors."""
        _, client = mock_http(
            status_code=400,
            json_body={"error": {"type": "invalid_request_error", "message": "content policy"}},
        )
        with pytest.raises(GatewayProviderError) as exc_info:
            make_adapter(client).generate_image(ImageGenRequest(prompt="a cat", model="dall-e-2"))
        assert exc_info.value.provider_message == "content policy"

    def test_malformed_image_body(self, mock_http):
        """Test a malformed data list is a decode error."""
        _, client = mock_http(json_body={"created": 1, "data": ["nope"]})
        with pytest.raises(GatewayDecodeError):
            make_adapter(client).generate_image(ImageGenRequest(prompt="a cat", model="dall-e-2"))


class TestSpeech:
    """Test text-to-speech validation and binary handling."""

    AUDIO = b"RIFF\x00\x01\x02\xffWAVEfmt "

    def test_wav_round_trip(self, mock_http):
        """Test raw audio bytes come back base64-encoded with their extension."""
        handler, client = mock_http(content=self.AUDIO, headers={"content-type": "audio/wav"})
        response = make_adapter(client).synthesize_speech(
            TTSRequest(model="tts-1", input="hello", voice="alloy", response_format="wav"),
        )
        assert base64.b64decode(response.audio_base64) == self.AUDIO
        assert response.audio_bytes() == self.AUDIO
        assert response.file_extension == ".wav"
        assert str(handler.last_request.url) == "https://api.openai.com/v1/audio/speech"
        assert handler.last_json == {
            "model": "tts-1",
            "input": "hello",
            "voice": "alloy",
            "response_format": "wav",
        }

    def test_default_extension(self, mock_http):
        """Test .mp3 when no format is requested."""
        handler, client = mock_http(content=b"ID3audio")
        response = make_adapter(client).synthesize_speech(
            TTSRequest(model="tts-1-hd", input="hello", voice="shimmer", speed=1.0),
        )
        assert response.file_extension == ".mp3"
        assert "response_format" not in handler.last_json
        assert handler.last_json["speed"] == 1.0

    @pytest.mark.parametrize("fmt", ["mp3", "opus", "aac", "flac", "wav", "pcm"])
    def test_supported_formats(self, fmt):
        """Test every supported format passes."""
        TTSRequest(model="tts-1", input="x", voice="nova", response_format=fmt).validate_request()

    @pytest.mark.parametrize("kwargs,field", [
        ({"model": "tts-2"}, "model"),
        ({"input": ""}, "input"),
        ({"input": "x" * 4097}, "input"),
        ({"voice": "shimer"}, "voice"),
        ({"voice": ""}, "voice"),
        ({"response_format": "ogg"}, "response_format"),
        ({"speed": 5.0}, "speed"),
        ({"speed": 0.1}, "speed"),
    ])
    def test_invalid_requests(self, mock_http, kwargs, field):
        """Test each constraint is enforced before any request."""
        handler, client = mock_http(content=b"audio")
        params = {"model": "tts-1", "input": "hello", "voice": "alloy", **kwargs}
        with pytest.raises(GatewayValidationError) as exc_info:
            make_adapter(client).synthesize_speech(TTSRequest(**params))
        assert exc_info.value.field == field
        assert handler.requests == []

    @pytest.mark.parametrize("kwargs,field", [
        ({"model": "tts-1", "input": "x"}, "voice"),
        ({"model": "tts-1", "input": "x", "voice": "alloy", "speed": "fast"}, "speed"),
    ])
    def test_malformed_construction(self, kwargs, field):
        """Test missing or wrongly typed fields are gateway validation errors."""
        with pytest.raises(GatewayValidationError) as exc_info:
            TTSRequest(**kwargs)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("speed", [0.25, 1.0, 4.0])
    def test_speed_bounds(self, speed):
        """Test speed bounds are inclusive."""
        TTSRequest(model="tts-1", input="x", voice="echo", speed=speed).validate_request()

    def test_empty_audio(self, mock_http):
        """Test an empty audio body is content missing."""
        _, client = mock_http(content=b"")
        with pytest.raises(GatewayContentMissingError):
            make_adapter(client).synthesize_speech(TTSRequest(model="tts-1", input="x", voice="onyx"))

    def test_provider_error(self, mock_http):
        """Test speech failures are decoded from the JSON error envelope."""
        _, client = mock_http(
            status_code=400,
            json_body={"error": {"type": "invalid_request_error", "message": "bad voice"}},
        )
        with pytest.raises(GatewayProviderError) as exc_info:
            make_adapter(client).synthesize_speech(TTSRequest(model="tts-1", input="x", voice="fable"))
        assert exc_info.value.error_type == "invalid_request_error"
