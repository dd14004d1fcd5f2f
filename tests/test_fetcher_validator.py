import pytest
import requests

from webharvest.core.errors import HttpFailureError, ParseError
from webharvest.core.scraping.fetcher import Failure, Fetcher, Success
from webharvest.core.scraping.request_builder import build
from webharvest.core.scraping.validator import (
    ResponseFormat,
    ensure_ok,
    validate,
)


class DummyResponse:
    def __init__(self, status_code=200, text="", content_type="text/html", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.headers = {"Content-Type": content_type}
        self.reason = reason


class DummySession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        if self.exc:
            raise self.exc
        return self.response


def test_fetch_success_surfaces_status_and_content_type():
    session = DummySession(DummyResponse(200, '{"a": 1}', "application/json"))
    f = Fetcher(timeout=5, session=session)
    outcome = f.fetch(build("https://example.org", ["x.json"], {"q": "1"}))

    assert isinstance(outcome, Success)
    assert outcome.status_code == 200
    assert outcome.content_type == "application/json"
    assert outcome.body == '{"a": 1}'
    url, headers, timeout = session.calls[0]
    assert url == "https://example.org/x.json?q=1"
    assert "User-Agent" in headers
    assert timeout == 5


def test_fetch_non_2xx_is_failure_value():
    session = DummySession(DummyResponse(404, "nope", reason="Not Found"))
    outcome = Fetcher(session=session).get("https://example.org/missing")
    assert isinstance(outcome, Failure)
    assert outcome.status_code == 404
    assert outcome.reason == "Not Found"


def test_transport_error_raises_http_failure():
    session = DummySession(exc=requests.ConnectionError("boom"))
    with pytest.raises(HttpFailureError) as info:
        Fetcher(session=session).get("https://example.org/down")
    assert info.value.status_code is None
    assert "https://example.org/down" in str(info.value)


@pytest.mark.parametrize("code", [199, 300, 301, 404, 500, 503])
def test_validate_rejects_outside_2xx(code):
    result = validate(Failure(status_code=code, reason="", url="https://x"))
    assert result.ok is False
    assert result.status_code == code
    assert str(code) in result.message


def test_validate_attaches_status_phrase():
    result = validate(Failure(status_code=503, reason="", url="https://x"))
    assert "Service Unavailable" in result.message
    ok = validate(Success(204, "text/html", ""))
    assert ok.ok is True
    assert ok.message == "204 No Content"


def test_validate_checks_declared_format_only_when_asked():
    html = Success(200, "text/html; charset=utf-8", "<html></html>")
    assert validate(html).ok is True
    assert validate(html, ResponseFormat.HTML).ok is True
    mismatch = validate(html, ResponseFormat.JSON)
    assert mismatch.ok is False
    assert "json" in mismatch.message


def test_ensure_ok_raises_matching_errors():
    with pytest.raises(HttpFailureError) as info:
        ensure_ok(Failure(500, "Server Error", "https://x/api"))
    assert info.value.status_code == 500

    with pytest.raises(ParseError):
        ensure_ok(Success(200, "text/html", "<p>", "https://x/api"), ResponseFormat.JSON)

    good = Success(200, "application/json", "[]")
    assert ensure_ok(good, ResponseFormat.JSON) is good
