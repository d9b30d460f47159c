import json

from relate.errors import InvalidIdentity, UpstreamTimeoutError
from relate.formatter import (
    ERROR_PREFIX,
    SUCCESS_PREFIX,
    format_error,
    format_success,
    serialize_payload,
)


def test_success_result_shape():
    result = format_success({"identity": {"platform": "ens"}})

    assert result.is_error is False
    assert result.content == [
        {"type": "text", "text": SUCCESS_PREFIX + '{"identity":{"platform":"ens"}}'},
    ]


def test_serialization_is_deterministic():
    a = {"b": 1, "a": {"y": [1, 2], "x": None}}
    b = {"a": {"x": None, "y": [1, 2]}, "b": 1}
    assert serialize_payload(a) == serialize_payload(b) == '{"a":{"x":null,"y":[1,2]},"b":1}'


def test_serialization_keeps_unicode():
    text = serialize_payload({"displayName": "ヴィタリック"})
    assert json.loads(text) == {"displayName": "ヴィタリック"}
    assert "ヴィタリック" in text


def test_null_payload():
    assert format_success(None).text == SUCCESS_PREFIX + "null"


def test_error_result_uses_error_message():
    result = format_error(UpstreamTimeoutError(10))

    assert result.is_error is True
    assert result.text == ERROR_PREFIX + "Request timed out after 10s"


def test_validation_error_message():
    assert format_error(InvalidIdentity()).text == "Error fetching data: Invalid identity: identity must be a non-empty string"


def test_generic_exception_without_message():
    assert format_error(RuntimeError()).text == ERROR_PREFIX + "RuntimeError"
