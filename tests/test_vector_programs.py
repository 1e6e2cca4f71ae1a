import numpy as np
import pytest

from parkernels.vecintrin import VectorUnit
from parkernels.vector_programs import (
    EXP_MAX,
    abs_serial,
    abs_vector,
    array_sum_serial,
    array_sum_vector,
    clamped_exp_serial,
    clamped_exp_vector,
    init_values,
    main,
    verify_result,
)


def test_init_values_ranges_and_padding():
    values, exponents = init_values(10, np.random.default_rng(3))
    assert len(values) == 14
    assert len(exponents) == 14
    assert values.dtype == np.float32
    assert np.all(values >= -1.0) and np.all(values <= 3.0)
    assert np.all(exponents >= 0) and np.all(exponents < EXP_MAX)


def test_init_values_rejects_empty_workload():
    with pytest.raises(ValueError):
        init_values(0, np.random.default_rng(0))


def test_abs_vector_matches_serial():
    data = [-1.5, 2.0, -3.25, 0.5, 0.0, -7.0, 4.0, -0.125]
    unit = VectorUnit()
    assert np.array_equal(abs_vector(unit, data), abs_serial(data))
    assert np.array_equal(abs_serial(data), np.abs(np.float32(data)))


def test_abs_vector_requires_whole_registers():
    with pytest.raises(ValueError):
        abs_vector(VectorUnit(), [1.0, -2.0, 3.0])


def test_clamped_exp_serial_small_cases():
    result = clamped_exp_serial([2.0, 0.5, 3.0], [0, 1, 9])
    assert result[0] == np.float32(1.0)
    assert result[1] == np.float32(0.5)
    assert result[2] == np.float32(9.999999)


def test_clamped_exp_serial_length_mismatch():
    with pytest.raises(ValueError):
        clamped_exp_serial([1.0, 2.0], [1])


@pytest.mark.parametrize("n", [1, 4, 6, 16, 23])
@pytest.mark.parametrize("width", [4, 8])
def test_clamped_exp_vector_matches_serial(n, width):
    values, exponents = init_values(n, np.random.default_rng(n))
    unit = VectorUnit(width)
    vector = clamped_exp_vector(unit, values[:n], exponents[:n])
    serial = clamped_exp_serial(values[:n], exponents[:n])
    assert np.array_equal(vector, serial)


def test_clamped_exp_vector_partial_register_underuses_lanes():
    values, exponents = init_values(6, np.random.default_rng(5))
    unit = VectorUnit(4)
    clamped_exp_vector(unit, values[:6], exponents[:6])
    stats = unit.logger.stats
    assert stats.total_instructions > 0
    assert stats.utilized_lane < stats.total_lane


@pytest.mark.parametrize("width", [2, 4, 8])
def test_array_sum_vector_close_to_serial(width):
    values, _ = init_values(32, np.random.default_rng(11))
    unit = VectorUnit(width)
    assert array_sum_vector(unit, values[:32]) == pytest.approx(
        array_sum_serial(values[:32]), abs=1e-3
    )


def test_array_sum_vector_requires_whole_registers():
    with pytest.raises(ValueError):
        array_sum_vector(VectorUnit(4), [1.0, 2.0, 3.0, 4.0, 5.0])


def test_verify_result_accepts_match(capsys):
    values = np.zeros(8, dtype=np.float32)
    exponents = np.zeros(8, dtype=np.int32)
    gold = np.ones(8, dtype=np.float32)
    assert verify_result(values, exponents, gold.copy(), gold, 4) is True
    assert "Results matched with answer!" in capsys.readouterr().out


def test_verify_result_reports_first_mismatch(capsys):
    values = np.zeros(8, dtype=np.float32)
    exponents = np.zeros(8, dtype=np.int32)
    gold = np.zeros(8, dtype=np.float32)
    output = gold.copy()
    output[2] = 1.0
    output[3] = 1.0
    assert verify_result(values, exponents, output, gold, 4) is False
    out = capsys.readouterr().out
    assert "Wrong calculation at value[2]!" in out
    assert "out of bound" not in out


def test_verify_result_reports_out_of_bounds(capsys):
    values = np.zeros(8, dtype=np.float32)
    exponents = np.zeros(8, dtype=np.int32)
    gold = np.zeros(8, dtype=np.float32)
    output = gold.copy()
    output[5] = 2.0
    assert verify_result(values, exponents, output, gold, 4) is False
    assert "You have written to out of bound value!" in capsys.readouterr().out


def test_main_default_run_passes(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Results matched with answer!" in out
    assert out.count("Passed!!!") == 2


def test_main_prints_log(capsys):
    assert main(["-l", "-s", "8"]) == 0
    assert "Printing Vector Unit Execution Log" in capsys.readouterr().out


def test_main_odd_size_skips_sum(capsys):
    assert main(["--size", "6"]) == 0
    assert "Must have N % VECTOR_WIDTH == 0" in capsys.readouterr().out


def test_main_rejects_bad_size(capsys):
    assert main(["-s", "0"]) == -1
    assert "Error: Workload size is set to 0" in capsys.readouterr().out


def test_main_unknown_option(capsys):
    assert main(["-x"]) == 1
    assert "Usage:" in capsys.readouterr().out