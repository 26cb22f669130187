from pathlib import Path

import pytest
from PIL import Image

from zeroplugins.nativesetu.store import SetuStore, difference_hash


def _gradient(increasing: bool) -> Image.Image:
    image = Image.new("L", (90, 80))
    for x in range(90):
        value = x * 255 // 89
        if not increasing:
            value = 255 - value
        for y in range(80):
            image.putpixel((x, y), value)
    return image


def _png(path: Path, colour=(10, 20, 30)) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (20, 20), colour).save(path, "PNG")


@pytest.fixture
def root(tmp_path):
    pics = tmp_path / "pics"
    _png(pics / "cats" / "a.png")
    path = pics / "cats" / "b.jpg"
    Image.new("RGB", (20, 20), (200, 100, 50)).save(path, "JPEG")
    (pics / "cats" / "notes.txt").write_text("not a picture")
    _gradient(True).save(pics / "dogs" / "c.png") if (pics / "dogs").mkdir() is None else None
    return pics


@pytest.fixture
def store(tmp_path):
    with SetuStore(tmp_path / "data.db") as s:
        yield s


def test_uniform_image_hash_is_zero():
    assert difference_hash(Image.new("RGB", (50, 50), (120, 120, 120))) == 0


def test_increasing_gradient_sets_every_bit():
    assert difference_hash(_gradient(True)) == 2**64 - 1


def test_decreasing_gradient_sets_no_bit():
    assert difference_hash(_gradient(False)) == 0


def test_empty_store_lists_nothing(store):
    assert store.list_classes() == []


def test_scan_all_indexes_classes(store, root):
    store.scan_all(root)
    assert store.list_classes() == ["cats", "dogs"]
    assert store.count("cats") == 2
    assert store.count("dogs") == 1


def test_pick_returns_picture_of_class(store, root):
    store.scan_all(root)
    picked = store.pick("cats")
    assert picked.path in {"cats/a.png", "cats/b.jpg"}
    assert picked.path.endswith(picked.name)


def test_pick_stores_hash(store, root):
    store.scan_all(root)
    picked = store.pick("dogs")
    with Image.open(root / "dogs" / "c.png") as image:
        assert picked.img_id % 2**64 == difference_hash(image)


def test_unknown_class_raises(store, root):
    store.scan_all(root)
    with pytest.raises(LookupError):
        store.pick("birds")
    with pytest.raises(LookupError):
        store.count("birds")


def test_nested_folder_becomes_own_class(store, root):
    _png(root / "cats" / "kittens" / "x.png")
    store.scan_all(root)
    assert "kittens" in store.list_classes()
    assert store.pick("kittens").path == "cats/kittens/x.png"
    assert store.count("cats") == 2


def test_scan_all_starts_afresh(store, root):
    store.scan_all(root)
    for child in (root / "dogs").iterdir():
        child.unlink()
    (root / "dogs").rmdir()
    store.scan_all(root)
    assert store.list_classes() == ["cats"]


def test_scan_class_refreshes_one_class(store, root):
    store.scan_all(root)
    _png(root / "cats" / "d.png", (1, 2, 3))
    store.scan_class(root, "cats", "cats")
    assert store.count("cats") == 3


def test_empty_class_pick_raises(store, tmp_path):
    (tmp_path / "pics" / "empty").mkdir(parents=True)
    store.scan_all(tmp_path / "pics")
    assert store.count("empty") == 0
    with pytest.raises(LookupError):
        store.pick("empty")


def test_broken_picture_raises(store, root):
    (root / "cats" / "bad.png").write_bytes(b"not an image")
    with pytest.raises(OSError):
        store.scan_class(root, "cats", "cats")


def test_missing_root_raises(store, tmp_path):
    with pytest.raises(FileNotFoundError):
        store.scan_all(tmp_path / "nowhere")