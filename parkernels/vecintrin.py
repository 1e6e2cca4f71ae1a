"""A simulated fixed-width vector unit with masked lanes and a usage log."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

VECTOR_WIDTH = 4
MAX_INST_LEN = 32


@dataclass(eq=False)
class Mask:
    """Per-lane boolean predicate."""

    values: np.ndarray

    def __post_init__(self) -> None:
        self.values = np.array(self.values, dtype=bool)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, lane: int) -> bool:
        return bool(self.values[lane])


@dataclass(eq=False)
class Vector:
    """Vector register holding 32-bit floats or 32-bit integers."""

    values: np.ndarray

    def __post_init__(self) -> None:
        arr = np.array(self.values)
        if arr.dtype.kind == "b":
            raise TypeError("a vector register holds numbers, not booleans")
        if arr.dtype.kind in "iu":
            arr = arr.astype(np.int32)
        else:
            arr = arr.astype(np.float32)
        self.values = arr

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, lane: int):
        return self.values[lane].item()


@dataclass
class LogEntry:
    """One executed instruction and the lanes that were active."""

    instruction: str
    mask: int


@dataclass
class Statistics:
    """Counters of vector lane usage."""

    utilized_lane: int = 0
    total_lane: int = 0
    total_instructions: int = 0


@dataclass
class Logger:
    """Records every vector instruction and the lanes it used."""

    width: int = VECTOR_WIDTH
    entries: list[LogEntry] = field(default_factory=list)
    stats: Statistics = field(default_factory=Statistics)

    def add_log(self, instruction: str, mask: Mask, n: int = 0) -> None:
        """Record ``instruction`` using the first ``n`` lanes of ``mask``."""
        if len(instruction) >= MAX_INST_LEN:
            raise ValueError(
                f"instruction name longer than {MAX_INST_LEN - 1} characters: {instruction!r}"
            )
        if n > len(mask):
            raise ValueError(f"mask has {len(mask)} lanes, cannot log {n}")
        bits = 0
        for lane, active in enumerate(mask.values[:n]):
            if active:
                bits |= 1 << lane
                self.stats.utilized_lane += 1
        self.stats.total_lane += n
        self.stats.total_instructions += n > 0
        self.entries.append(LogEntry(instruction, bits))

    def format_stats(self) -> str:
        """Summary of vector unit statistics."""
        stats = self.stats
        utilization = (
            stats.utilized_lane / stats.total_lane * 100 if stats.total_lane else math.nan
        )
        return (
            "****************** Printing Vector Unit Statistics *******************\n"
            f"Vector Width:              {self.width}\n"
            f"Total Vector Instructions: {stats.total_instructions}\n"
            f"Vector Utilization:        {utilization:.1f}%\n"
            f"Utilized Vector Lanes:     {stats.utilized_lane}\n"
            f"Total Vector Lanes:        {stats.total_lane}\n"
        )

    def format_log(self) -> str:
        """Execution log with one line of lane occupancy per instruction."""
        lines = [
            "***************** Printing Vector Unit Execution Log *****************",
            " Instruction | Vector Lane Occupancy ('*' for active, '_' for inactive)",
            "------------- --------------------------------------------------------",
        ]
        for entry in self.entries:
            lanes = "".join(
                "*" if entry.mask & (1 << lane) else "_" for lane in range(self.width)
            )
            lines.append(f"{entry.instruction:>12} | {lanes}")
        return "\n".join(lines) + "\n"


class VectorUnit:
    """Masked vector instructions over registers of a fixed width."""

    def __init__(self, width: int = VECTOR_WIDTH, logger: Logger | None = None) -> None:
        if width <= 0:
            raise ValueError(f"vector width must be positive, got {width}")
        self.width = width
        self.logger = logger if logger is not None else Logger(width)

    def _lanes(self, *registers) -> None:
        for register in registers:
            if len(register) != self.width:
                raise ValueError(
                    f"register has {len(register)} lanes, unit width is {self.width}"
                )

    @staticmethod
    def _same_type(*vectors: Vector) -> None:
        kinds = {v.values.dtype for v in vectors}
        if len(kinds) > 1:
            raise TypeError("vector operands must share an element type")

    def init_ones(self, first: int | None = None) -> Mask:
        """Mask with the first ``first`` lanes set (all lanes by default)."""
        if first is None:
            first = self.width
        return Mask(np.arange(self.width) < first)

    def mask_not(self, mask: Mask) -> Mask:
        """Lane-wise inverse of ``mask``."""
        self._lanes(mask)
        result = Mask(~mask.values)
        self.logger.add_log("masknot", self.init_ones(), self.width)
        return result

    def mask_or(self, mask_a: Mask, mask_b: Mask) -> Mask:
        """Lane-wise OR of two masks."""
        self._lanes(mask_a, mask_b)
        result = Mask(mask_a.values | mask_b.values)
        self.logger.add_log("maskor", self.init_ones(), self.width)
        return result

    def mask_and(self, mask_a: Mask, mask_b: Mask) -> Mask:
        """Lane-wise AND of two masks."""
        self._lanes(mask_a, mask_b)
        result = Mask(mask_a.values & mask_b.values)
        self.logger.add_log("maskand", self.init_ones(), self.width)
        return result

    def cntbits(self, mask: Mask) -> int:
        """Number of active lanes in ``mask``."""
        self._lanes(mask)
        count = int(np.count_nonzero(mask.values))
        self.logger.add_log("cntbits", self.init_ones(), self.width)
        return count

    def vset(self, result: Vector, value, mask: Mask) -> None:
        """Set active lanes of ``result`` to ``value``."""
        self._lanes(result, mask)
        result.values[mask.values] = value
        self.logger.add_log("vset", mask, self.width)

    def splat(self, value) -> Vector:
        """New register with every lane set to ``value``."""
        is_int = isinstance(value, (int, np.integer)) and not isinstance(value, bool)
        result = Vector(np.zeros(self.width, dtype=np.int32 if is_int else np.float32))
        self.vset(result, value, self.init_ones())
        return result

    def vmove(self, dest: Vector, src: Vector, mask: Mask) -> None:
        """Copy active lanes of ``src`` into ``dest``."""
        self._lanes(dest, src, mask)
        self._same_type(dest, src)
        active = mask.values
        dest.values[active] = src.values[active]
        self.logger.add_log("vmove", mask, self.width)

    def vload(self, dest: Vector, src, offset: int, mask: Mask) -> None:
        """Load ``src[offset + lane]`` into each active lane of ``dest``."""
        self._lanes(dest, mask)
        for lane in np.flatnonzero(mask.values):
            dest.values[lane] = src[offset + int(lane)]
        self.logger.add_log("vload", mask, self.width)

    def vstore(self, dest, offset: int, src: Vector, mask: Mask) -> None:
        """Store each active lane of ``src`` to ``dest[offset + lane]``."""
        self._lanes(src, mask)
        for lane in np.flatnonzero(mask.values):
            dest[offset + int(lane)] = src.values[lane].item()
        self.logger.add_log("vstore", mask, self.width)

    def _binary(self, name, op, result: Vector, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        self._lanes(result, vec_a, vec_b, mask)
        self._same_type(result, vec_a, vec_b)
        active = mask.values
        with np.errstate(all="ignore"):
            computed = op(vec_a.values[active], vec_b.values[active])
        result.values[active] = computed.astype(result.values.dtype)
        self.logger.add_log(name, mask, self.width)

    def vadd(self, result: Vector, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a + vec_b``."""
        self._binary("vadd", np.add, result, vec_a, vec_b, mask)

    def vsub(self, result: Vector, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a - vec_b``."""
        self._binary("vsub", np.subtract, result, vec_a, vec_b, mask)

    def vmult(self, result: Vector, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a * vec_b``."""
        self._binary("vmult", np.multiply, result, vec_a, vec_b, mask)

    def vdiv(self, result: Vector, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a / vec_b``.

        Integer division truncates toward zero and rejects a zero divisor.
        """
        if vec_a.values.dtype.kind == "i":
            active = mask.values
            if np.any(vec_b.values[active] == 0):
                raise ZeroDivisionError("integer vector division by zero")
            self._binary("vdiv", _truncating_divide, result, vec_a, vec_b, mask)
        else:
            self._binary("vdiv", np.divide, result, vec_a, vec_b, mask)

    def vabs(self, result: Vector, vec_a: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``abs(vec_a)``."""
        self._lanes(result, vec_a, mask)
        self._same_type(result, vec_a)
        active = mask.values
        result.values[active] = np.abs(vec_a.values[active])
        self.logger.add_log("vabs", mask, self.width)

    def _compare(self, name, op, result: Mask, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        self._lanes(result, vec_a, vec_b, mask)
        self._same_type(vec_a, vec_b)
        active = mask.values
        result.values[active] = op(vec_a.values[active], vec_b.values[active])
        self.logger.add_log(name, mask, self.width)

    def vgt(self, result: Mask, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a > vec_b``."""
        self._compare("vgt", np.greater, result, vec_a, vec_b, mask)

    def vlt(self, result: Mask, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a < vec_b``."""
        self._compare("vlt", np.less, result, vec_a, vec_b, mask)

    def veq(self, result: Mask, vec_a: Vector, vec_b: Vector, mask: Mask) -> None:
        """Active lanes of ``result`` become ``vec_a == vec_b``."""
        self._compare("veq", np.equal, result, vec_a, vec_b, mask)

    def hadd(self, result: Vector, vec: Vector) -> None:
        """Add adjacent pairs: [0 1 2 3] -> [0+1 0+1 2+3 2+3]."""
        self._lanes(result, vec)
        self._same_type(result, vec)
        pairs = self.width // 2
        sums = vec.values[0 : 2 * pairs : 2] + vec.values[1 : 2 * pairs : 2]
        result.values[: 2 * pairs] = np.repeat(sums, 2)

    def interleave(self, result: Vector, vec: Vector) -> None:
        """Even lanes to the front half, odd lanes to the back half.

        Lanes are written in order, so with ``result`` and ``vec`` the same
        register later lanes read values already overwritten.
        """
        self._lanes(result, vec)
        self._same_type(result, vec)
        half = self.width // 2
        for lane in range(self.width):
            source = 2 * lane if lane < half else 2 * (lane - half) + 1
            result.values[lane] = vec.values[source]

    def add_user_log(self, text: str) -> None:
        """Add a custom marker to the execution log."""
        self.logger.add_log(text, self.init_ones(), 0)


def _truncating_divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    wide_a = a.astype(np.int64)
    wide_b = b.astype(np.int64)
    quotient = np.abs(wide_a) // np.abs(wide_b)
    negative = (wide_a < 0) ^ (wide_b < 0)
    return np.where(negative, -quotient, quotient)