#!/usr/bin/env python3
"""
Tests for the response encoder.

Run with: pytest tests/test_encode.py -v
"""
import json
from unittest.mock import patch

import pytest
from aws_lambda_powertools.utilities.data_classes import KinesisStreamEvent, SQSEvent

from conftest import KINESIS_EVENT, SQS_EVENT
from src.event_adapter.codec import ACCEPT_CASE_INSENSITIVE_PROPERTIES, CodecError
from src.event_adapter.declared_types import ApiGatewayProxyResponse, ApiGatewayV2HttpResponse
from src.event_adapter.encode import encode, status_description
from src.event_adapter.errors import SerializationError, StatusCodeError
from src.event_adapter.message import CONTEXT_MARKER, GATEWAY_MARKER, Message
from src.event_adapter.settings import Settings

GATEWAY_REQUEST = Message(payload=b"hi", headers={GATEWAY_MARKER: True, "httpMethod": "GET"})
PLAIN_REQUEST = Message(payload=b"[]", headers={})


def _encode(request, response=None, output_type=None, *, codec, settings=None):
    return encode(request, response, output_type, codec=codec, settings=settings or Settings())


# =============================================================================
# TEST: Gateway envelope
# =============================================================================

class TestGatewayEnvelope:
    """Gateway-marked requests get an API Gateway proxy response."""

    def test_status_body_and_headers(self, codec):
        response = Message(payload=b'"done"', headers={"statusCode": 201, "X-Trace": "t1"})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope == {
            "isBase64Encoded": False,
            "statusCode": 201,
            "body": "done",
            "headers": {"X-Trace": "t1"},
        }

    def test_defaults_to_200(self, codec):
        response = Message(payload=b"plain", headers={})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["statusCode"] == 200
        assert envelope["body"] == "plain"
        assert envelope["headers"] == {}

    def test_no_response(self, codec):
        envelope = json.loads(_encode(GATEWAY_REQUEST, None, codec=codec))

        assert envelope == {"isBase64Encoded": False, "statusCode": 200, "body": '"OK"'}

    def test_every_quote_is_stripped(self, codec):
        response = Message(payload=b'{"greeting":"hello"}')

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["body"] == "{greeting:hello}"

    def test_quote_stripping_can_be_disabled(self, codec):
        response = Message(payload=b'{"greeting":"hello"}')

        envelope = json.loads(
            _encode(GATEWAY_REQUEST, response, codec=codec, settings=Settings(strip_body_quotes=False))
        )

        assert envelope["body"] == '{"greeting":"hello"}'

    def test_header_values_become_text(self, codec):
        response = Message(payload=b"x", headers={"X-Count": 3, "X-Flag": True})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["headers"] == {"X-Count": "3", "X-Flag": "True"}

    def test_marker_headers_not_leaked(self, codec):
        response = Message(payload=b"x", headers={GATEWAY_MARKER: True, CONTEXT_MARKER: object(), "X-A": "1"})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["headers"] == {"X-A": "1"}

    def test_string_status_code_is_coerced(self, codec):
        response = Message(payload=b"x", headers={"statusCode": "404"})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["statusCode"] == 404

    @pytest.mark.parametrize("bad", ["abc", 201.5, True, None, "20 1"])
    def test_invalid_status_code_fails(self, codec, bad):
        response = Message(payload=b"x", headers={"statusCode": bad})

        with pytest.raises(StatusCodeError):
            _encode(GATEWAY_REQUEST, response, codec=codec)

    def test_non_byte_payload_is_serialized(self, codec):
        response = Message(payload={"id": 7})

        envelope = json.loads(_encode(GATEWAY_REQUEST, response, codec=codec))

        assert envelope["body"] == "{id:7}"

    def test_serialization_failure(self, codec):
        response = Message(payload=b"x")

        with patch.object(codec, "dumps", side_effect=CodecError("boom")):
            with pytest.raises(SerializationError):
                _encode(GATEWAY_REQUEST, response, codec=codec)

    def test_no_status_description_for_plain_gateway(self, codec):
        envelope = json.loads(_encode(GATEWAY_REQUEST, Message(payload=b"x"), codec=codec))

        assert "statusDescription" not in envelope


# =============================================================================
# TEST: Stream record requests
# =============================================================================

class TestStreamRecordRequests:
    """Kinesis-originated gateway requests also carry statusDescription."""

    def test_kinesis_payload(self, codec):
        request = Message(payload=KinesisStreamEvent(KINESIS_EVENT), headers={GATEWAY_MARKER: True})

        envelope = json.loads(_encode(request, Message(payload=b"ok"), codec=codec))

        assert envelope["statusDescription"] == "200 OK"

    def test_records_header(self, codec):
        request = Message(payload=b"", headers={GATEWAY_MARKER: True, "Records": []})
        response = Message(payload=b"ok", headers={"statusCode": 201})

        envelope = json.loads(_encode(request, response, codec=codec))

        assert envelope["statusDescription"] == "201 CREATED"

    def test_unknown_status_code(self, codec):
        request = Message(payload=b"", headers={GATEWAY_MARKER: True, "Records": []})
        response = Message(payload=b"ok", headers={"statusCode": 999})

        with pytest.raises(StatusCodeError):
            _encode(request, response, codec=codec)

    def test_status_description_names(self):
        assert status_description(404) == "404 NOT_FOUND"
        assert status_description(500) == "500 INTERNAL_SERVER_ERROR"


# =============================================================================
# TEST: Pass-through
# =============================================================================

class TestPassThrough:
    """Non-gateway requests and declared gateway response types."""

    def test_plain_request_returns_payload(self, codec):
        response = Message(payload=b'{"processed":1}', headers={"statusCode": 201})

        assert _encode(PLAIN_REQUEST, response, codec=codec) == b'{"processed":1}'

    def test_plain_request_without_response(self, codec):
        assert _encode(PLAIN_REQUEST, None, codec=codec) == b'"OK"'

    def test_typed_non_gateway_request(self, codec):
        request = Message(payload=SQSEvent(SQS_EVENT))

        assert _encode(request, Message(payload=b"done"), codec=codec) == b"done"

    @pytest.mark.parametrize("output_type", [ApiGatewayProxyResponse, ApiGatewayV2HttpResponse])
    def test_gateway_response_type_is_verbatim(self, codec, output_type):
        raw = b'{"statusCode":202,"body":"\\"queued\\""}'

        assert _encode(GATEWAY_REQUEST, Message(payload=raw), output_type, codec=codec) == raw

    def test_gateway_response_type_skips_codec_configuration(self, codec):
        _encode(GATEWAY_REQUEST, Message(payload=b"{}"), ApiGatewayProxyResponse, codec=codec)

        assert not codec.is_enabled(ACCEPT_CASE_INSENSITIVE_PROPERTIES)

    def test_encoding_configures_codec(self, codec):
        _encode(PLAIN_REQUEST, None, codec=codec)

        assert codec.is_enabled(ACCEPT_CASE_INSENSITIVE_PROPERTIES)

    def test_false_marker_is_not_gateway(self, codec):
        request = Message(payload=b"", headers={GATEWAY_MARKER: False})

        assert _encode(request, Message(payload=b'"x"'), codec=codec) == b'"x"'
