import pytest
from PIL import Image

from conftest import make_image_bytes
from web_thumbnailer.errors import GenerationFailedError, NotAnImageError, RequirementMissingError
from web_thumbnailer.images import (
    check_requirements,
    detect_image_format,
    fit_size,
    generate_thumbnail,
    is_image_extension,
    looks_like_image,
)


@pytest.mark.parametrize(
    ("ext", "expected"),
    [("jpg", True), ("JPEG", True), ("png", True), ("bmp", True), ("webp", True), ("gif", False), ("svg", False), ("", False), (None, False)],
)
def test_is_image_extension(ext, expected):
    assert is_image_extension(ext) is expected


def test_detect_image_format_normalizes_jpeg():
    assert detect_image_format(make_image_bytes()) == "jpg"
    assert detect_image_format(make_image_bytes(fmt="PNG")) == "png"


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (make_image_bytes(fmt="PNG"), True),
        (make_image_bytes(), True),
        (b"<!doctype html><html></html>", False),
        (b'<svg xmlns="http://www.w3.org/2000/svg"></svg>', False),
        (b"opaque payload", False),
        (b"", False),
    ],
)
def test_looks_like_image(data, expected):
    assert looks_like_image(data) is expected


@pytest.mark.parametrize(
    ("size", "box", "expected"),
    [
        ((400, 200), (160, 160), (160, 80)),
        ((200, 400), (160, 160), (80, 160)),
        ((100, 50), (160, 160), (100, 50)),
        ((400, 200), (0, 100), (200, 100)),
        ((400, 200), (100, 0), (100, 50)),
    ],
)
def test_fit_size(size, box, expected):
    assert fit_size(*size, *box) == expected


def test_generate_thumbnail_keeps_aspect_ratio(tmp_path):
    dest = tmp_path / "thumb" / "a.jpg"
    assert generate_thumbnail(make_image_bytes(400, 200), dest, 160, 160) == dest
    with Image.open(dest) as image:
        assert image.format == "JPEG"
        assert image.size == (160, 80)
    assert [p.name for p in dest.parent.iterdir()] == ["a.jpg"]


def test_generate_thumbnail_crop_fills_box(tmp_path):
    dest = tmp_path / "c.jpg"
    generate_thumbnail(make_image_bytes(400, 200), dest, 100, 100, crop=True)
    with Image.open(dest) as image:
        assert image.size == (100, 100)


def test_generate_thumbnail_flattens_transparency(tmp_path):
    dest = tmp_path / "t.jpg"
    generate_thumbnail(make_image_bytes(64, 64, fmt="PNG", mode="RGBA"), dest, 32, 32)
    with Image.open(dest) as image:
        assert image.mode == "RGB"
        assert image.size == (32, 32)


def test_generate_thumbnail_rejects_non_image(tmp_path):
    dest = tmp_path / "bad.jpg"
    with pytest.raises(NotAnImageError):
        generate_thumbnail(b"<html>not an image</html>", dest, 160, 160)
    assert not dest.exists()


def test_failed_encode_leaves_no_partial_file(tmp_path, monkeypatch):
    data = make_image_bytes(400, 200)

    def _broken_save(self, fp, format=None, **params):
        raise KeyError("JPEG")

    monkeypatch.setattr(Image.Image, "save", _broken_save)
    dest = tmp_path / "thumb" / "a.jpg"
    with pytest.raises(GenerationFailedError):
        generate_thumbnail(data, dest, 160, 160)
    assert list(dest.parent.iterdir()) == []


def test_check_requirements_creates_cache_dir(tmp_path):
    cache_dir = tmp_path / "deep" / "cache"
    check_requirements(cache_dir)
    assert cache_dir.is_dir()


def test_check_requirements_without_jpeg_support(tmp_path, monkeypatch):
    from web_thumbnailer import images

    monkeypatch.setattr(images.features, "check_codec", lambda name: False)
    with pytest.raises(RequirementMissingError):
        check_requirements(tmp_path)


def test_check_requirements_cache_dir_is_a_file(tmp_path):
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory")
    with pytest.raises(RequirementMissingError):
        check_requirements(blocker / "inner")
