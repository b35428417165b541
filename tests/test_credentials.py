"""Tests for credential state and token expiry checks."""

import datetime

import pytest

from auth.credentials import CredentialState, InvalidTimestampError, parse_timestamp
from tests.conftest import epoch_ms


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_epoch_milliseconds_string(self):
        """Should read a decimal string as epoch milliseconds."""
        parsed = parse_timestamp("1700000000123")
        assert parsed == datetime.datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=datetime.timezone.utc)

    def test_epoch_milliseconds_int(self):
        """Should accept an integer too."""
        assert parse_timestamp(0) == datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

    def test_rfc3339_with_z(self):
        """Should parse RFC 3339 with a Z suffix as UTC."""
        parsed = parse_timestamp("2025-03-01T12:30:00Z")
        assert parsed == datetime.datetime(2025, 3, 1, 12, 30, tzinfo=datetime.timezone.utc)

    def test_rfc3339_with_offset(self):
        """Should normalize offsets to UTC."""
        parsed = parse_timestamp("2025-03-01T14:30:00+02:00")
        assert parsed == datetime.datetime(2025, 3, 1, 12, 30, tzinfo=datetime.timezone.utc)

    def test_fraction_of_any_length(self):
        """Should accept nanosecond and single digit fractions."""
        assert parse_timestamp("2025-03-01T12:30:00.123456789Z") == datetime.datetime(
            2025, 3, 1, 12, 30, 0, 123456, tzinfo=datetime.timezone.utc
        )
        assert parse_timestamp("2025-03-01T12:30:00.5+01:00").microsecond == 500000

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-date",
            "12abc",
            "",
            "1_700_000",
            "2025-13-45T00:00:00Z",
            "2025-03-01T12:30:00",
            "2099-01-01",
            "20990101T000000Z",
            "2099-01-01 00:00:00",
            "2099-01-01 00:00:00Z",
            "2099-W01-1",
            "2099-01-01T00:00Z",
        ],
    )
    def test_invalid_values(self, value):
        """Should raise InvalidTimestampError for anything that is not epoch ms or RFC 3339."""
        with pytest.raises(InvalidTimestampError):
            parse_timestamp(value)

    @pytest.mark.parametrize("value", ["2099-01-01", "2099-W01-1", "2099-01-01 00:00:00"])
    def test_non_rfc3339_expiry_counts_as_expired(self, value):
        """Should treat far-future values in other ISO forms as expired."""
        state = CredentialState(access_token="a", access_token_expires_at=value)
        assert state.is_access_token_expired() is True


class TestAccessTokenExpiry:
    """Tests for the access token safety margin."""

    def test_expiring_within_margin_counts_as_expired(self):
        """Should be expired 29 seconds before expiry with a 30 second margin."""
        state = CredentialState(access_token="a", access_token_expires_at=epoch_ms(29), safety_margin=30)
        assert state.is_access_token_expired() is True

    def test_expiring_after_margin_is_valid(self):
        """Should be valid 31 seconds before expiry with a 30 second margin."""
        state = CredentialState(access_token="a", access_token_expires_at=epoch_ms(31), safety_margin=30)
        assert state.is_access_token_expired() is False

    def test_no_expiry_never_expires(self):
        """Should never expire when no expiry is known."""
        state = CredentialState(access_token="a")
        assert state.is_access_token_expired() is False
        assert state.is_refresh_token_expired() is False

    def test_unparsable_expiry_counts_as_expired(self):
        """Should treat garbage expiry values as expired."""
        state = CredentialState(
            access_token="a",
            access_token_expires_at="garbage",
            refresh_token_expires_at="garbage",
        )
        assert state.is_access_token_expired() is True
        assert state.is_refresh_token_expired() is True

    def test_rfc3339_expiry(self):
        """Should evaluate RFC 3339 expiries the same way."""
        future = (datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
        state = CredentialState(access_token="a", access_token_expires_at=future)
        assert state.is_access_token_expired() is False


class TestRefreshTokenExpiry:
    """Tests for refresh token expiry (no margin)."""

    def test_refresh_token_uses_no_margin(self):
        """Should still be valid 10 seconds before expiry."""
        state = CredentialState(refresh_token="r", refresh_token_expires_at=epoch_ms(10))
        assert state.is_refresh_token_expired() is False

    def test_refresh_token_past_expiry(self):
        """Should be expired once the expiry has passed."""
        state = CredentialState(refresh_token="r", refresh_token_expires_at=epoch_ms(-1))
        assert state.is_refresh_token_expired() is True


class TestCredentialState:
    """Tests for credential updates and serialization."""

    def test_is_authenticated(self):
        """Should be authenticated only with an access token."""
        assert CredentialState().is_authenticated() is False
        assert CredentialState(access_token="a").is_authenticated() is True

    def test_apply_refresh_result_replaces_all_fields(self):
        """Should replace all four fields at once."""
        state = CredentialState("a", "r", "1", "2")
        state.apply_refresh_result("a2", "r2", 1700000000000, None)

        assert state.access_token == "a2"
        assert state.refresh_token == "r2"
        assert state.access_token_expires_at == "1700000000000"
        assert state.refresh_token_expires_at is None

    def test_clear(self):
        """Should blank every credential field."""
        state = CredentialState("a", "r", "1", "2")
        state.clear()
        assert state.to_dict() == {
            "access_token": "",
            "refresh_token": "",
            "expires_at": "",
            "refresh_token_expires_at": "",
        }

    def test_dict_round_trip_keeps_storage_keys(self):
        """Should read back what it writes, using the config file keys."""
        state = CredentialState("a", "r", "100", "200")
        data = state.to_dict()
        assert data["expires_at"] == "100"

        restored = CredentialState.from_dict(data, safety_margin=5)
        assert restored.access_token == "a"
        assert restored.refresh_token_expires_at == "200"
        assert restored.safety_margin == 5
