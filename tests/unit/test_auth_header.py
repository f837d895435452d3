import pytest

from formgrader.utils.auth import get_authorization_header, parse_authorization_token


class TestParseAuthorizationToken:
    def test_bearer_token(self):
        assert parse_authorization_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_bearer_prefix_is_case_insensitive(self):
        assert parse_authorization_token("bearer abc") == "abc"

    def test_bare_token(self):
        assert parse_authorization_token("  abc.def.ghi ") == "abc.def.ghi"

    @pytest.mark.parametrize("value", [None, "", "   ", "Bearer", "Bearer ", "bearer   ", "BEARER"])
    def test_missing_token(self, value):
        with pytest.raises(ValueError):
            parse_authorization_token(value)


class TestGetAuthorizationHeader:
    def test_prefers_authorization(self):
        headers = {"authorization": "Bearer a", "x-auth-token": "b"}
        assert get_authorization_header(headers) == "Bearer a"

    def test_falls_back_to_legacy_header(self):
        assert get_authorization_header({"x-auth-token": "b"}) == "b"

    def test_no_headers(self):
        assert get_authorization_header(None) is None
        assert get_authorization_header({}) is None
