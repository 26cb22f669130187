import sqlite3

import pytest

from zeroplugins.omikuji.kuji import KujiStore, image_urls


@pytest.fixture
def store(tmp_path):
    path = tmp_path / "kuji.db"
    db = sqlite3.connect(path)
    db.execute("CREATE TABLE kuji (id INTEGER PRIMARY KEY NOT NULL, text TEXT)")
    db.executemany(
        "INSERT INTO kuji (id, text) VALUES (?, ?)",
        [(1, "第一番 大吉"), (2, "第二番 凶")],
    )
    db.commit()
    db.close()
    with KujiStore(path) as s:
        yield s


def test_text_by_number(store):
    assert store.text(1) == "第一番 大吉"
    assert store.text(2) == "第二番 凶"


def test_missing_number(store):
    with pytest.raises(LookupError):
        store.text(3)


def test_length(store):
    assert len(store) == 2


def test_new_store_is_empty(tmp_path):
    with KujiStore(tmp_path / "fresh.db") as fresh:
        assert len(fresh) == 0
        with pytest.raises(LookupError):
            fresh.text(1)


def test_image_urls():
    front, back = image_urls(7)
    assert front == "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/7_0.jpg"
    assert back == "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/7_1.jpg"