"""Guessing what a pinyin abbreviation stands for."""

from __future__ import annotations

from typing import Any

import requests

GUESS_API = "https://lab.magiconch.com/api/nbnhhsh/guess"


def extract_guesses(payload: Any) -> list[str]:
    """The guesses in an API response: ``trans`` of the first entry, else ``inputting``."""
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        return []
    entry = payload[0]
    values = entry.get("trans") if "trans" in entry else entry.get("inputting")
    if not isinstance(values, list):
        return []
    return [value if isinstance(value, str) else str(value) for value in values]


def guess(text: str) -> list[str]:
    """Ask the service what ``text`` may mean; network errors propagate."""
    response = requests.post(GUESS_API, data={"text": text}, timeout=30)
    return extract_guesses(response.json())