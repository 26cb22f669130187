"""Searching GitHub repositories and describing the best match."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import requests

SEARCH_API = "https://api.github.com/search/repositories"
PREVIEW_BASE = "https://opengraph.githubassets.com/0/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/88.0.4324.182 Safari/537.36"
)
NOT_FOUND = "没有找到这样的仓库"


def not_null(text: str | None, default: str) -> str:
    """``text``, or ``default`` when it is empty."""
    return text if text else default


def net_get(url: str, headers: Mapping[str, str] | None = None) -> bytes:
    """GET ``url`` and return the body; raises RuntimeError unless the status is 200."""
    response = requests.get(url, headers=dict(headers or {}), timeout=30)
    if response.status_code != 200:
        raise RuntimeError(f"code {response.status_code}")
    return response.content


def search_repository(query: str) -> dict[str, Any]:
    """The top search result for ``query``; raises LookupError when there is none."""
    url = SEARCH_API + "?" + urlencode({"q": query})
    info = requests.models.complexjson.loads(net_get(url, {"User-Agent": USER_AGENT}))
    items = info.get("items") or []
    if not int(info.get("total_count") or 0) or not items:
        raise LookupError(NOT_FOUND)
    return items[0]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _number(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_repository(repo: Mapping[str, Any]) -> str:
    """A text summary of a repository from the search API."""
    license_info = repo.get("license")
    license_key = _text(license_info.get("key")) if isinstance(license_info, Mapping) else ""
    return (
        f"{_text(repo.get('full_name'))}\n"
        f"Description: {_text(repo.get('description'))}\n"
        f"Star/Fork/Issue: {_number(repo.get('watchers'))}/"
        f"{_number(repo.get('forks'))}/{_number(repo.get('open_issues'))}\n"
        f"Language: {not_null(_text(repo.get('language')), 'None')}\n"
        f"License: {not_null(license_key.upper(), 'None')}\n"
        f"Last pushed: {_text(repo.get('pushed_at'))}\n"
        f"Jump: {_text(repo.get('html_url'))}\n"
    )


def preview_url(full_name: str) -> str:
    """The social preview image of a repository."""
    return PREVIEW_BASE + full_name