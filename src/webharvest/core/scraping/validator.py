"""Classify a fetched response before any parsing happens.

`validate` is a pure classification; `ensure_ok` is the raising variant for
callers that treat a not-ok response as fatal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Optional

from webharvest.core.errors import HttpFailureError, ParseError
from webharvest.core.scraping.fetcher import Failure, ResponseOutcome, Success


class ResponseFormat(str, Enum):
    JSON = "json"
    HTML = "html"


# Content-Type fragments accepted for each declared format.
_ACCEPTED = {
    ResponseFormat.JSON: ("application/json", "+json", "text/json"),
    ResponseFormat.HTML: ("text/html", "application/xhtml+xml"),
}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    status_code: int
    message: str


def status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown Status"


def content_type_matches(content_type: str, expected: ResponseFormat) -> bool:
    c = (content_type or "").lower()
    return any(fragment in c for fragment in _ACCEPTED[ResponseFormat(expected)])


def validate(
    outcome: ResponseOutcome, expected: Optional[ResponseFormat] = None
) -> ValidationResult:
    """Return ok only for a 2xx response whose Content-Type fits `expected`.

    The format is never guessed: without `expected` the Content-Type is not
    checked at all.
    """
    code = outcome.status_code
    phrase = status_phrase(code)
    if not 200 <= code < 300:
        reason = getattr(outcome, "reason", "") or phrase
        return ValidationResult(False, code, f"{code} {reason}")

    if expected is not None and isinstance(outcome, Success):
        if not content_type_matches(outcome.content_type, expected):
            return ValidationResult(
                False,
                code,
                f"expected {ResponseFormat(expected).value} content, "
                f"got '{outcome.content_type or 'no content-type'}'",
            )
    return ValidationResult(True, code, f"{code} {phrase}")


def ensure_ok(
    outcome: ResponseOutcome, expected: Optional[ResponseFormat] = None
) -> Success:
    """Raise `HttpFailureError`/`ParseError` unless `validate` says ok."""
    result = validate(outcome, expected)
    if result.ok and isinstance(outcome, Success):
        return outcome
    if isinstance(outcome, Failure) or not 200 <= outcome.status_code < 300:
        raise HttpFailureError(outcome.url, outcome.status_code, result.message)
    raise ParseError(result.message, url=outcome.url)
