import pytest
import responses
from responses import matchers

from zeroplugins.github.search import (
    PREVIEW_BASE,
    SEARCH_API,
    format_repository,
    net_get,
    not_null,
    preview_url,
    search_repository,
)


def test_not_null():
    assert not_null("", "None") == "None"
    assert not_null("Go", "None") == "Go"


def test_preview_url():
    assert preview_url("owner/repo") == PREVIEW_BASE + "owner/repo"


def test_format_repository_full():
    repo = {
        "full_name": "owner/repo",
        "description": "a tool",
        "watchers": 12,
        "forks": 3,
        "open_issues": 4,
        "language": "Go",
        "license": {"key": "mit"},
        "pushed_at": "2022-06-01T00:00:00Z",
        "html_url": "https://github.com/owner/repo",
    }
    text = format_repository(repo)
    lines = text.split("\n")
    assert lines[0] == "owner/repo"
    assert lines[2] == "Star/Fork/Issue: 12/3/4"
    assert lines[4] == "License: MIT"
    assert text.endswith("Jump: https://github.com/owner/repo\n")


def test_format_repository_missing_fields():
    text = format_repository({"full_name": "a/b", "license": None, "language": None})
    assert "Language: None\n" in text
    assert "License: None\n" in text
    assert "Star/Fork/Issue: 0/0/0\n" in text


def test_net_get_raises_on_error_status():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "https://example.com/x", status=404, body="nope")
        with pytest.raises(RuntimeError, match="code 404"):
            net_get("https://example.com/x", {})


def test_net_get_returns_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "https://example.com/y", body=b"hello")
        assert net_get("https://example.com/y") == b"hello"


def test_search_repository_returns_first_item():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            SEARCH_API,
            json={"total_count": 2, "items": [{"full_name": "a/b"}, {"full_name": "c/d"}]},
            match=[matchers.query_param_matcher({"q": "zero bot"})],
        )
        assert search_repository("zero bot") == {"full_name": "a/b"}


def test_search_repository_nothing_found():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, SEARCH_API, json={"total_count": 0, "items": []})
        with pytest.raises(LookupError, match="没有找到这样的仓库"):
            search_repository("nothing")