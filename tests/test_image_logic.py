import numpy as np
import pytest
from PIL import Image
from cmypy.kernel.image.logic import (
    calculate_file_hash,
    downscale_to_fit,
    ensure_rgba,
    fit_within,
    rgba_to_rgb,
)
from cmypy.kernel.image.validation import ensure_array, ensure_pixel_buffer
from cmypy.services.rendering.source import SourceImage


def test_ensure_array_invalid():
    with pytest.raises(TypeError):
        ensure_array([1, 2, 3])  # type: ignore


def test_ensure_pixel_buffer_valid():
    arr = np.zeros((5, 5, 4), dtype=np.uint8)
    assert ensure_pixel_buffer(arr) is arr


def test_ensure_rgba_from_rgb():
    rgb = np.full((4, 6, 3), 10, dtype=np.uint8)
    rgba = ensure_rgba(rgb)
    assert rgba.shape == (4, 6, 4)
    assert np.all(rgba[..., 3] == 255)
    assert np.all(rgba[..., :3] == 10)


def test_ensure_rgba_from_gray():
    gray = np.arange(6, dtype=np.uint8).reshape(2, 3)
    rgba = ensure_rgba(gray)
    assert rgba.shape == (2, 3, 4)
    assert np.array_equal(rgba[..., 0], gray)
    assert np.array_equal(rgba[..., 2], gray)


def test_ensure_rgba_keeps_rgba():
    arr = np.zeros((2, 2, 4), dtype=np.uint8)
    assert ensure_rgba(arr) is arr


def test_ensure_rgba_rejects_float():
    with pytest.raises(ValueError):
        ensure_rgba(np.zeros((2, 2, 3), dtype=np.float32))


@pytest.mark.parametrize(
    "size, expected",
    [
        ((1000, 2000), (600, 1200)),
        ((2000, 1000), (1200, 600)),
        ((800, 600), (800, 600)),
        ((1200, 1200), (1200, 1200)),
        ((3000, 10), (1200, 4)),
        ((1, 5000), (1, 1200)),
    ],
)
def test_fit_within(size, expected):
    assert fit_within(size, 1200) == expected


def test_downscale_to_fit():
    buf = np.full((300, 600, 4), 77, dtype=np.uint8)
    small = downscale_to_fit(buf, 100)
    assert small.shape == (50, 100, 4)
    assert small.dtype == np.uint8
    # Uniform input stays uniform under area averaging
    assert np.all(small == 77)


def test_downscale_noop_when_small():
    buf = np.zeros((10, 20, 4), dtype=np.uint8)
    assert downscale_to_fit(buf, 100) is buf


def test_rgba_to_rgb():
    buf = np.zeros((2, 2, 4), dtype=np.uint8)
    rgb = rgba_to_rgb(buf)
    assert rgb.shape == (2, 2, 3)
    assert rgb.flags["C_CONTIGUOUS"]


def test_calculate_file_hash(tmp_path):
    d = tmp_path / "print.jpg"
    d.write_bytes(b"darkroom" * 1000)

    h1 = calculate_file_hash(str(d))
    h2 = calculate_file_hash(str(d))
    assert h1 == h2
    assert len(h1) == 64


def test_calculate_file_hash_missing_file(tmp_path):
    assert calculate_file_hash(str(tmp_path / "missing.jpg")).startswith("err_")


class TestSourceImage:
    def test_from_array_is_read_only_copy(self):
        rgb = np.full((4, 4, 3), 100, dtype=np.uint8)
        source = SourceImage.from_array(rgb, name="strip")

        assert source.buffer.shape == (4, 4, 4)
        assert not source.buffer.flags.writeable
        assert source.name == "strip"
        assert (source.height, source.width) == (4, 4)

        rgb[:] = 0
        assert np.all(source.buffer[..., :3] == 100)

        with pytest.raises(ValueError):
            source.buffer[0, 0, 0] = 1

    def test_from_array_downscales(self):
        arr = np.zeros((300, 600, 4), dtype=np.uint8)
        source = SourceImage.from_array(arr, max_size=100)
        assert (source.height, source.width) == (50, 100)
        assert source.original_size == (300, 600)

    def test_from_file(self, tmp_path):
        path = tmp_path / "test_print.png"
        Image.new("RGB", (2400, 1200), (128, 64, 32)).save(path)

        source = SourceImage.from_file(str(path))

        assert source.name == "test_print"
        assert source.original_size == (1200, 2400)
        assert (source.height, source.width) == (600, 1200)
        assert len(source.file_hash) == 64
        assert source.buffer[0, 0].tolist() == [128, 64, 32, 255]

    def test_from_file_full_res(self, tmp_path):
        path = tmp_path / "big.png"
        Image.new("RGBA", (1300, 20), (1, 2, 3, 40)).save(path)

        source = SourceImage.from_file(str(path), max_size=None)

        assert (source.height, source.width) == (20, 1300)
        assert source.buffer[0, 0].tolist() == [1, 2, 3, 40]
