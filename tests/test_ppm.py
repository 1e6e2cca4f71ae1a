import numpy as np
import pytest

from parkernels.ppm import ppm_bytes, write_ppm_image


def test_header():
    payload = ppm_bytes([0, 0], 2, 1, 256)
    assert payload.startswith(b"P6\n2 1\n255\n")


def test_payload_length_and_channels():
    data = np.array([[0, 10, 100], [200, 256, 5]])
    payload = ppm_bytes(data, 3, 2, 256)
    header = b"P6\n3 2\n255\n"
    body = payload[len(header):]
    assert len(body) == 3 * 3 * 2
    for pixel in range(6):
        triple = body[3 * pixel:3 * pixel + 3]
        assert triple[0] == triple[1] == triple[2]


def test_extremes():
    payload = ppm_bytes([0, 256], 2, 1, 256)
    body = payload[len(b"P6\n2 1\n255\n"):]
    assert body == bytes([0, 0, 0, 255, 255, 255])


def test_clamped_to_max_iterations():
    high = ppm_bytes([1000], 1, 1, 256)
    at_max = ppm_bytes([256], 1, 1, 256)
    assert high == at_max


def test_brightness_is_monotonic():
    data = list(range(0, 257, 8))
    body = ppm_bytes(data, len(data), 1, 256)[len(f"P6\n{len(data)} 1\n255\n"):]
    levels = list(body[::3])
    assert levels == sorted(levels)


def test_wrong_size_raises():
    with pytest.raises(ValueError):
        ppm_bytes([1, 2, 3], 2, 2, 256)


def test_write_matches_bytes(tmp_path, capsys):
    data = [[0, 50], [128, 256]]
    target = tmp_path / "image.ppm"
    write_ppm_image(data, 2, 2, target, 256)
    assert target.read_bytes() == ppm_bytes(data, 2, 2, 256)
    assert f"Wrote image file {target}" in capsys.readouterr().out