"""Compose base URL, path segments and query params into a request.

`build` is pure: it validates and normalizes inputs and returns a frozen
`RequestSpec` whose `url` property renders the final, percent-encoded URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode, urlsplit

from webharvest.core.errors import InvalidInputError

QueryPairs = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class RequestSpec:
    base_url: str
    path_segments: Tuple[str, ...] = ()
    query_params: QueryPairs = ()

    @property
    def path(self) -> str:
        return "/".join(quote(s, safe="") for s in self.path_segments)

    @property
    def query_string(self) -> str:
        # quote (not quote_plus) so spaces become %20 and brackets are escaped
        return urlencode(list(self.query_params), quote_via=quote, safe="")

    @property
    def url(self) -> str:
        url = self.base_url
        if self.path_segments:
            url = f"{url}/{self.path}"
        if self.query_params:
            url = f"{url}?{self.query_string}"
        return url

    def with_params(self, **params: Any) -> "RequestSpec":
        """Return a copy with `params` replacing same-named keys."""
        kept = [(k, v) for k, v in self.query_params if k not in params]
        return RequestSpec(
            base_url=self.base_url,
            path_segments=self.path_segments,
            query_params=tuple(kept) + _flatten_params(params),
        )


def _check_base(base: str) -> str:
    if not isinstance(base, str) or not base.strip():
        raise InvalidInputError(f"base URL must be a non-empty string, got {base!r}")
    try:
        parts = urlsplit(base.strip())
    except ValueError as exc:
        raise InvalidInputError(f"base URL {base!r} is not parseable: {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidInputError(f"base URL {base!r} must be absolute http(s)")
    if parts.query or parts.fragment:
        raise InvalidInputError(
            f"base URL {base!r} must not carry a query or fragment; pass params"
        )
    return base.strip().rstrip("/")


def _clean_segments(segments: Iterable[Any]) -> Tuple[str, ...]:
    cleaned = []
    for raw in segments:
        seg = str(raw).strip("/")
        if not seg:
            continue
        if "/" in seg:
            raise InvalidInputError(f"path segment {raw!r} contains '/'")
        cleaned.append(seg)
    return tuple(cleaned)


def _flatten_params(params: Optional[Mapping[str, Any]]) -> QueryPairs:
    pairs = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), str(v)) for v in value)
        else:
            pairs.append((str(key), str(value)))
    return tuple(pairs)


def build(
    base: str,
    segments: Sequence[Any] = (),
    params: Optional[Mapping[str, Any]] = None,
) -> RequestSpec:
    """Build a `RequestSpec`.

    - `base` must be an absolute http(s) URL; raises `InvalidInputError`.
    - Leading/trailing slashes on base and segments are dropped, so
      `build("https://x/api/", ["/v1/", "docs"])` gives `https://x/api/v1/docs`.
    - `params` keep insertion order; `None` values are skipped and list
      values become repeated keys (`conditions[type][]=RULE&...`).
    """
    return RequestSpec(
        base_url=_check_base(base),
        path_segments=_clean_segments(segments),
        query_params=_flatten_params(params),
    )
