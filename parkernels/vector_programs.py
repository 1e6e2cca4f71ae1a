"""Example programs for the simulated vector unit: abs, clamped power and sum."""

from __future__ import annotations

import getopt
import math
import re
import sys
from functools import reduce

import numpy as np

from parkernels.vecintrin import VECTOR_WIDTH, Mask, Vector, VectorUnit

EXP_MAX = 10
CLAMP_LIMIT = np.float32(9.999999)
_EPSILON = np.float32(0.00001)
_SUM_EPSILON = 0.1
_SEED = 1
_PROGNAME = "vecintrin"

_F32 = np.float32


def _usage(progname: str) -> None:
    print(f"Usage: {progname} [options]")
    print("Program Options:")
    print("  -s  --size <N>     Use workload size N (Default = 16)")
    print("  -l  --log          Print vector unit execution log")
    print("  -?  --help         This message")


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _float_array(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float32).ravel()


def init_values(n: int, rng: np.random.Generator) -> tuple[np.ndarray, np.ndarray]:
    """Random inputs for a workload of size ``n``, padded by one register.

    Values lie in [-1, 3) and exponents in [0, EXP_MAX).
    """
    if n <= 0:
        raise ValueError(f"workload size must be positive, got {n}")
    size = n + VECTOR_WIDTH
    values = (_F32(-1.0) + _F32(4.0) * rng.random(size).astype(np.float32)).astype(np.float32)
    exponents = rng.integers(0, EXP_MAX, size=size, dtype=np.int32)
    return values, exponents


def abs_serial(values) -> np.ndarray:
    """Absolute value of every element."""
    x = _float_array(values)
    return np.where(x < 0, -x, x).astype(np.float32)


def abs_vector(unit: VectorUnit, values) -> np.ndarray:
    """Absolute value computed with masked vector instructions.

    The length of ``values`` must be a multiple of the unit's width.
    """
    source = _float_array(values)
    width = unit.width
    if len(source) % width:
        raise ValueError(f"length {len(source)} is not a multiple of the vector width {width}")
    output = np.zeros(len(source), dtype=np.float32)
    x = Vector(np.zeros(width, dtype=np.float32))
    result = Vector(np.zeros(width, dtype=np.float32))
    zero = unit.splat(0.0)
    for i in range(0, len(source), width):
        mask_all = unit.init_ones()
        is_negative = unit.init_ones(0)
        unit.vload(x, source, i, mask_all)
        unit.vlt(is_negative, x, zero, mask_all)
        unit.vsub(result, zero, x, is_negative)
        not_negative = unit.mask_not(is_negative)
        unit.vload(result, source, i, not_negative)
        unit.vstore(output, i, result, mask_all)
    return output


def _check_pairs(values, exponents) -> tuple[np.ndarray, np.ndarray]:
    x = _float_array(values)
    e = np.asarray(exponents, dtype=np.int32).ravel()
    if x.shape != e.shape:
        raise ValueError(f"{len(x)} values but {len(e)} exponents")
    return x, e


def _clamped_power(x: np.float32, y: int) -> np.float32:
    if y == 0:
        return _F32(1.0)
    result = x
    for _ in range(y - 1):
        result = result * x
    return CLAMP_LIMIT if result > CLAMP_LIMIT else result


def clamped_exp_serial(values, exponents) -> np.ndarray:
    """``values[i] ** exponents[i]`` by repeated multiplication, clamped to 9.999999."""
    x, e = _check_pairs(values, exponents)
    with np.errstate(over="ignore", invalid="ignore"):
        return np.array([_clamped_power(v, int(y)) for v, y in zip(x, e)], dtype=np.float32)


def clamped_exp_vector(unit: VectorUnit, values, exponents) -> np.ndarray:
    """Vectorized ``clamped_exp_serial``; works for any length and width."""
    source, exp_source = _check_pairs(values, exponents)
    n = len(source)
    width = unit.width
    output = np.zeros(n, dtype=np.float32)
    x = Vector(np.zeros(width, dtype=np.float32))
    exp = Vector(np.zeros(width, dtype=np.int32))
    result = Vector(np.zeros(width, dtype=np.float32))
    izero = unit.splat(0)
    one = unit.splat(1)
    fzero = unit.splat(0.0)
    bound = unit.splat(float(CLAMP_LIMIT))

    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(0, n, width):
            mask_all = unit.init_ones(n - i)
            is_zero = unit.init_ones(0)
            unit.vload(x, source, i, mask_all)
            unit.vload(exp, exp_source, i, mask_all)
            unit.veq(is_zero, exp, izero, mask_all)
            unit.vset(result, 1.0, is_zero)
            not_zero = unit.mask_not(is_zero)
            not_zero = unit.mask_and(not_zero, mask_all)
            unit.vadd(result, x, fzero, not_zero)
            unit.vsub(exp, exp, one, not_zero)

            is_positive = unit.init_ones(0)
            while True:
                unit.vgt(is_positive, exp, izero, not_zero)
                unit.vmult(result, result, x, is_positive)
                unit.vsub(exp, exp, one, is_positive)
                if not unit.cntbits(is_positive):
                    break

            is_greater: Mask = unit.init_ones(0)
            unit.vgt(is_greater, result, bound, not_zero)
            unit.vset(result, float(CLAMP_LIMIT), is_greater)
            unit.vstore(output, i, result, mask_all)
    return output


def array_sum_serial(values) -> float:
    """Sum of all elements, accumulated in single precision."""
    return float(reduce(lambda acc, v: acc + v, _float_array(values), _F32(0.0)))


def array_sum_vector(unit: VectorUnit, values) -> float:
    """Sum of all elements with vector adds and a pairwise reduction.

    The length must be a multiple of the unit's width.
    """
    source = _float_array(values)
    width = unit.width
    if len(source) % width:
        raise ValueError(f"length {len(source)} is not a multiple of the vector width {width}")
    total = Vector(np.zeros(width, dtype=np.float32))
    x = Vector(np.zeros(width, dtype=np.float32))
    mask_all = unit.init_ones()
    for i in range(0, len(source), width):
        unit.vload(x, source, i, mask_all)
        unit.vadd(total, total, x, mask_all)
    for _ in range(math.ceil(math.log2(width))):
        unit.hadd(total, total)
        unit.interleave(total, total)
    return float(total[0])


def verify_result(values, exponents, output, gold, n: int) -> bool:
    """Compare ``output`` with ``gold`` over their whole length.

    On the first difference larger than 1e-5 the inputs and both results
    are printed and False is returned.
    """
    out = _float_array(output)
    expected = _float_array(gold)
    if out.shape != expected.shape:
        raise ValueError(f"output has {len(out)} entries, gold has {len(expected)}")
    bad = np.flatnonzero(np.abs(out - expected) > _EPSILON)
    if bad.size == 0:
        print("Results matched with answer!")
        return True
    incorrect = int(bad[0])
    if incorrect >= n:
        print("You have written to out of bound value!")
    print(f"Wrong calculation at value[{incorrect}]!")
    rows = [
        ("value  = ", (f"{float(v): f} " for v in _float_array(values)[:n])),
        ("exp    = ", (f"{int(e): 9d} " for e in np.asarray(exponents).ravel()[:n])),
        ("output = ", (f"{float(v): f} " for v in out[:n])),
        ("gold   = ", (f"{float(v): f} " for v in expected[:n])),
    ]
    for label, cells in rows:
        print(label + "".join(cells))
    return False


def main(argv=None) -> int:
    """Run the clamped power and array sum checks on random data."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, _ = getopt.gnu_getopt(args, "s:l?", ["size=", "log", "help"])
    except getopt.GetoptError:
        _usage(_PROGNAME)
        return 1

    n = 16
    print_log = False
    for opt, value in opts:
        if opt in ("-s", "--size"):
            n = _atoi(value)
            if n <= 0:
                print(f"Error: Workload size is set to {n} (<0).")
                return -1
        elif opt in ("-l", "--log"):
            print_log = True
        else:
            _usage(_PROGNAME)
            return 1

    unit = VectorUnit(VECTOR_WIDTH)
    rng = np.random.default_rng(_SEED)
    values, exponents = init_values(n, rng)
    gold = np.zeros(n + VECTOR_WIDTH, dtype=np.float32)
    output = np.zeros(n + VECTOR_WIDTH, dtype=np.float32)
    gold[:n] = clamped_exp_serial(values[:n], exponents[:n])
    output[:n] = clamped_exp_vector(unit, values[:n], exponents[:n])

    print("\033[1;31mCLAMPED EXPONENT\033[0m (required) ")
    clamped_correct = verify_result(values, exponents, output, gold, n)
    if print_log:
        print(unit.logger.format_log(), end="")
    print(unit.logger.format_stats(), end="")

    print("************************ Result Verification *************************")
    print("Passed!!!" if clamped_correct else "@@@ Failed!!!")

    print("\n\033[1;31mARRAY SUM\033[0m (bonus) ")
    if n % VECTOR_WIDTH == 0:
        sum_gold = array_sum_serial(values[:n])
        sum_output = array_sum_vector(unit, values[:n])
        if abs(sum_gold - sum_output) < _SUM_EPSILON * 2:
            print("Passed!!!")
        else:
            print(f"Expected {sum_gold:f}, got {sum_output:f}\n.", end="")
            print("@@@ Failed!!!")
    else:
        print(
            f"Must have N % VECTOR_WIDTH == 0 for this problem (VECTOR_WIDTH is {VECTOR_WIDTH})"
        )
    return 0