"""Generating "绝绝子" sentences from a verb and a noun."""

from __future__ import annotations

import json

import requests

JUEJUEZI_URL = "https://www.offjuan.com/api/juejuezi/text"
REFERER = "https://juejuezi.offjuan.com/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
KEYWORD = "绝绝子"


def strip_keyword(text: str) -> str:
    """``text`` with every occurrence of the keyword removed."""
    return text.replace(KEYWORD, "")


def juejuezi(verb: str, noun: str) -> str:
    """Ask the generator for a sentence; returns its ``text`` field, empty if absent."""
    body = json.dumps({"verb": verb, "noun": noun}, ensure_ascii=False, separators=(",", ":"))
    response = requests.post(
        JUEJUEZI_URL,
        data=body.encode("utf-8"),
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=30,
    )
    try:
        payload = response.json()
    except ValueError:
        return ""
    text = payload.get("text") if isinstance(payload, dict) else None
    if text is None:
        return ""
    return text if isinstance(text, str) else str(text)