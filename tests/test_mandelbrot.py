import numpy as np
import pytest

from parkernels.mandelbrot import (
    View,
    mandel,
    mandelbrot_serial,
    mandelbrot_thread,
    verify_result,
    view_for_index,
)

WIDTH = 48
HEIGHT = 32
MAX_ITER = 64


def test_origin_never_escapes():
    assert mandel(0.0, 0.0, 256) == 256


def test_far_point_escapes_immediately():
    assert mandel(2.0, 2.0, 256) == 0


def test_mandel_bounded_by_count():
    for c_re, c_im in [(-0.75, 0.1), (0.3, 0.5), (-1.5, 0.0), (0.26, 0.0)]:
        result = mandel(c_re, c_im, 50)
        assert 0 <= result <= 50


def test_mandel_more_iterations_never_smaller():
    assert mandel(0.26, 0.0, 200) >= mandel(0.26, 0.0, 50)


def test_view_defaults():
    assert view_for_index(0) == View(-2.0, -1.0, 1.0, 1.0)
    assert view_for_index(1) == View()


def test_view_two_is_scaled_default():
    assert view_for_index(2) == View().scale_and_shift(0.015, -0.986, 0.30)
    assert view_for_index(2) != View()


def test_invalid_view_index():
    with pytest.raises(ValueError, match="Invalid view index"):
        view_for_index(3)


def test_identity_scale_and_shift():
    view = View()
    assert view.scale_and_shift(1.0, 0.0, 0.0) == view


def test_serial_shape_and_range():
    image = mandelbrot_serial(View(), WIDTH, HEIGHT, MAX_ITER)
    assert image.shape == (HEIGHT, WIDTH)
    assert image.min() >= 0
    assert image.max() == MAX_ITER


def test_serial_partial_rows_match_full_image():
    full = mandelbrot_serial(View(), WIDTH, HEIGHT, MAX_ITER)
    part = mandelbrot_serial(View(), WIDTH, HEIGHT, MAX_ITER, 5, 7)
    assert np.array_equal(part, full[5:12])


def test_serial_rows_out_of_range():
    with pytest.raises(ValueError):
        mandelbrot_serial(View(), WIDTH, HEIGHT, MAX_ITER, 30, 5)


def test_serial_rejects_empty_image():
    with pytest.raises(ValueError):
        mandelbrot_serial(View(), 0, HEIGHT, MAX_ITER)


@pytest.mark.parametrize("threads", [1, 2, 3, 7, 32])
def test_thread_matches_serial(threads):
    gold = mandelbrot_serial(View(), WIDTH, HEIGHT, MAX_ITER)
    result = mandelbrot_thread(threads, View(), WIDTH, HEIGHT, MAX_ITER)
    assert np.array_equal(gold, result)


def test_thread_matches_serial_zoomed_view():
    view = view_for_index(2)
    gold = mandelbrot_serial(view, WIDTH, HEIGHT, MAX_ITER)
    result = mandelbrot_thread(4, view, WIDTH, HEIGHT, MAX_ITER)
    assert verify_result(gold, result) is True


def test_too_many_threads():
    with pytest.raises(ValueError, match="Max allowed threads is 32"):
        mandelbrot_thread(33, View(), WIDTH, HEIGHT, MAX_ITER)


def test_zero_threads():
    with pytest.raises(ValueError):
        mandelbrot_thread(0, View(), WIDTH, HEIGHT, MAX_ITER)


def test_verify_result_reports_first_mismatch(capsys):
    gold = np.zeros((3, 4), dtype=np.int32)
    result = gold.copy()
    result[1, 2] = 9
    result[2, 0] = 4
    assert verify_result(gold, result) is False
    out = capsys.readouterr().out
    assert "Mismatch : [1][2], Expected : 0, Actual : 9" in out


def test_verify_result_shape_mismatch():
    with pytest.raises(ValueError):
        verify_result(np.zeros((2, 2)), np.zeros((2, 3)))