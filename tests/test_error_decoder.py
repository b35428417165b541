"""Tests for API error message decoding."""

import json

from api.error_decoder import decode_error_message


def body(payload) -> bytes:
    return json.dumps(payload).encode()


class TestDecodeErrorMessage:
    """Tests for decode_error_message priority and fallback."""

    def test_field_errors_win(self):
        """Should join meta.errors entries, prefixing field names."""
        payload = {
            "meta": {
                "message": "Validation failed",
                "errors": [
                    {"field": "email", "error": "already taken"},
                    {"error": "password too short"},
                ],
            },
            "detail": "ignored",
        }
        assert decode_error_message(body(payload), 400) == "email: already taken\npassword too short"

    def test_meta_message_when_no_field_errors(self):
        """Should use meta.message when meta.errors is empty."""
        payload = {"meta": {"message": "Subscription not found", "errors": []}}
        assert decode_error_message(body(payload), 404) == "Subscription not found"

    def test_detail(self):
        """Should fall back to the detail field."""
        assert decode_error_message(body({"detail": "Not authenticated"}), 401) == "Not authenticated"

    def test_empty_meta_message_falls_through_to_detail(self):
        """Should skip an empty meta.message."""
        payload = {"meta": {"message": ""}, "detail": "Bad token"}
        assert decode_error_message(body(payload), 401) == "Bad token"

    def test_raw_body_fallback_for_non_json(self):
        """Should include status and raw body when nothing matches."""
        assert decode_error_message(b"<html>Bad Gateway</html>", 502) == (
            "request failed (status 502): <html>Bad Gateway</html>"
        )

    def test_raw_body_fallback_for_unknown_json(self):
        """Should fall back for JSON with no known shape."""
        assert decode_error_message(b'{"error": "nope"}', 500) == 'request failed (status 500): {"error": "nope"}'

    def test_empty_body(self):
        """Should produce a message even with no body."""
        assert decode_error_message(b"", 503) == "request failed (status 503): "

    def test_json_array_body(self):
        """Should not crash on non-object JSON."""
        assert decode_error_message(b"[1, 2]", 400) == "request failed (status 400): [1, 2]"
