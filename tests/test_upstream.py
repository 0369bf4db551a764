import pytest
import requests

from api_football_mcp.upstream import ApiFootballClient, UpstreamError

from conftest import BASE_URL, FakeSession, upstream


def test_get_sends_key_header_and_drops_none_params(api_client, fake_session):
    fake_session.reply("/teams", upstream([]))

    data = api_client.get("/teams", {"search": "Arsenal", "league": None})

    assert data["response"] == []
    call = fake_session.calls[0]
    assert call["endpoint"] == "/teams"
    assert call["headers"] == {"x-apisports-key": "test-key"}
    assert call["params"] == {"search": "Arsenal"}
    assert call["timeout"] == 15.0


def test_zero_timeout_means_client_default():
    client = ApiFootballClient("k", BASE_URL, timeout=0, session=FakeSession())
    assert client.timeout is None


def test_http_error_status(api_client, fake_session):
    fake_session.reply("/fixtures", {"message": "nope"}, status_code=503)

    with pytest.raises(UpstreamError) as exc_info:
        api_client.get("/fixtures")

    assert exc_info.value.status_code == 503
    assert "HTTP 503" in str(exc_info.value)


def test_transport_error(api_client, fake_session):
    fake_session.fail("/odds", requests.ConnectionError("connection refused"))

    with pytest.raises(UpstreamError, match="connection refused"):
        api_client.get("/odds")


def test_non_json_body(api_client, fake_session):
    fake_session.reply("/teams", "<html>bad gateway</html>")

    with pytest.raises(UpstreamError, match="not valid JSON"):
        api_client.get("/teams")


def test_upstream_errors_object_is_a_failure(api_client, fake_session):
    fake_session.reply("/teams", upstream([], errors={"token": "Error/Missing application key."}))

    with pytest.raises(UpstreamError, match="Missing application key"):
        api_client.get("/teams", {"search": "x"})


def test_upstream_errors_list_is_a_failure(api_client, fake_session):
    fake_session.reply("/fixtures", upstream([], errors=["The League field is required."]))

    with pytest.raises(UpstreamError, match="League field is required"):
        api_client.get("/fixtures")
