"""QR Code matrix synthesis (byte mode) based on ISO/IEC 18004."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .errors import InternalEncodingInvariantViolation, PayloadTooLarge

logger = logging.getLogger(__name__)

MIN_VERSION = 1
MAX_VERSION = 40

Grid = List[List[bool]]


class ErrorCorrectionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    QUARTILE = "quartile"
    HIGH = "high"

    @property
    def ordinal(self) -> int:
        return _ORDINALS[self]

    @property
    def format_bits(self) -> int:
        return _FORMAT_BITS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, "ErrorCorrectionLevel"]) -> "ErrorCorrectionLevel":
        """Accept ``"medium"``, ``"M"`` or a member."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for level in cls:
            if key in (level.value, level.value[0]):
                return level
        raise ValueError(f"Unsupported error correction level: {value}")


_ORDINALS = {
    ErrorCorrectionLevel.LOW: 0,
    ErrorCorrectionLevel.MEDIUM: 1,
    ErrorCorrectionLevel.QUARTILE: 2,
    ErrorCorrectionLevel.HIGH: 3,
}
_FORMAT_BITS = {
    ErrorCorrectionLevel.LOW: 1,
    ErrorCorrectionLevel.MEDIUM: 0,
    ErrorCorrectionLevel.QUARTILE: 3,
    ErrorCorrectionLevel.HIGH: 2,
}
# Catalog labels shown to users.
_LABELS = {
    ErrorCorrectionLevel.LOW: "Low (7%)",
    ErrorCorrectionLevel.MEDIUM: "Medium (15%)",
    ErrorCorrectionLevel.QUARTILE: "Quartile (30%)",
    ErrorCorrectionLevel.HIGH: "High (25%)",
}

# Total error correction codewords, indexed [version - 1][ordinal].
_ECC_CODEWORDS = (
    (7, 10, 13, 17), (10, 16, 22, 28), (15, 26, 36, 44), (20, 36, 52, 64),
    (26, 48, 72, 88), (36, 64, 96, 112), (40, 72, 108, 130), (48, 88, 132, 156),
    (60, 110, 160, 192), (72, 130, 192, 224), (80, 150, 224, 264), (96, 176, 260, 308),
    (104, 198, 288, 352), (120, 216, 320, 384), (132, 240, 360, 432), (144, 280, 408, 480),
    (168, 308, 448, 532), (180, 338, 504, 588), (196, 364, 546, 650), (224, 416, 600, 700),
    (224, 442, 644, 750), (252, 476, 690, 816), (270, 504, 750, 900), (300, 560, 810, 960),
    (312, 588, 870, 1050), (336, 644, 952, 1110), (360, 700, 1020, 1200), (390, 728, 1050, 1260),
    (420, 784, 1140, 1350), (450, 812, 1200, 1440), (480, 868, 1290, 1530), (510, 924, 1350, 1620),
    (540, 980, 1440, 1710), (570, 1036, 1530, 1800), (570, 1064, 1590, 1890), (600, 1120, 1680, 1980),
    (630, 1204, 1770, 2100), (660, 1260, 1860, 2220), (720, 1316, 1950, 2310), (750, 1372, 2040, 2430),
)

_NUM_BLOCKS = (
    (1, 1, 1, 1), (1, 1, 1, 1), (1, 1, 2, 2), (1, 2, 2, 4), (1, 2, 4, 4),
    (2, 4, 4, 4), (2, 4, 6, 5), (2, 4, 6, 6), (2, 5, 8, 8), (4, 5, 8, 8),
    (4, 5, 8, 11), (4, 8, 10, 11), (4, 9, 12, 16), (4, 9, 16, 16), (6, 10, 12, 18),
    (6, 10, 17, 16), (6, 11, 16, 19), (6, 13, 18, 21), (7, 14, 21, 25), (8, 16, 20, 25),
    (8, 17, 23, 25), (9, 17, 23, 34), (9, 18, 25, 30), (10, 20, 27, 32), (12, 21, 29, 35),
    (12, 23, 34, 37), (12, 25, 34, 40), (13, 26, 35, 42), (14, 28, 38, 45), (15, 29, 40, 48),
    (16, 31, 43, 51), (17, 33, 45, 54), (18, 35, 48, 57), (19, 37, 51, 60), (19, 38, 53, 63),
    (20, 40, 56, 66), (21, 43, 59, 70), (22, 45, 62, 74), (24, 47, 65, 77), (25, 49, 68, 81),
)

_BYTE_MODE = 0b0100


@dataclass(frozen=True)
class QRMatrix:
    """Finished symbol. ``modules[y][x]`` is True for dark modules."""

    modules: Tuple[Tuple[bool, ...], ...]
    function_modules: Tuple[Tuple[bool, ...], ...]
    version: int
    error_correction: ErrorCorrectionLevel
    mask: int

    @property
    def size(self) -> int:
        return len(self.modules)

    @property
    def dark_count(self) -> int:
        return sum(sum(row) for row in self.modules)

    def get_matrix(self) -> List[List[bool]]:
        return [list(row) for row in self.modules]


def _count_bits(version: int) -> int:
    return 8 if version <= 9 else 16


def _num_raw_data_modules(version: int) -> int:
    """Modules left for codewords once every function pattern is drawn."""
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


def _num_data_codewords(version: int, level: ErrorCorrectionLevel) -> int:
    return _num_raw_data_modules(version) // 8 - _ECC_CODEWORDS[version - 1][level.ordinal]


def data_capacity(version: int, level: Union[str, ErrorCorrectionLevel]) -> int:
    """Payload bytes that fit in byte mode at ``version`` and ``level``."""
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise ValueError("Version number out of range")
    level = ErrorCorrectionLevel.parse(level)
    bits = _num_data_codewords(version, level) * 8 - 4 - _count_bits(version)
    return bits // 8


MAX_PAYLOAD_BYTES = data_capacity(MAX_VERSION, ErrorCorrectionLevel.LOW)


def choose_version(data_len: int, level: Union[str, ErrorCorrectionLevel]) -> int:
    level = ErrorCorrectionLevel.parse(level)
    for version in range(MIN_VERSION, MAX_VERSION + 1):
        if data_len <= data_capacity(version, level):
            return version
    raise PayloadTooLarge(data_len, data_capacity(MAX_VERSION, level))


def synthesize(
    payload: Union[str, bytes],
    level: Union[str, ErrorCorrectionLevel] = ErrorCorrectionLevel.MEDIUM,
    mask: Optional[int] = None,
) -> QRMatrix:
    """Encode ``payload`` in byte mode at the smallest version that fits.

    All eight masks are scored unless ``mask`` forces one; the lowest
    penalty wins and ties go to the lower mask id.
    """
    level = ErrorCorrectionLevel.parse(level)
    if mask is not None and not 0 <= mask <= 7:
        raise ValueError("Mask out of range")
    data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    version = choose_version(len(data), level)
    codewords = _add_ecc_and_interleave(_data_codewords(data, version, level), version, level)

    template = _FunctionTemplate(version)
    unmasked = template.copy_modules()
    _draw_codewords(unmasked, template.is_function, codewords)

    def masked(candidate: int) -> Tuple[int, int, Grid]:
        modules = [row[:] for row in unmasked]
        _apply_mask(modules, template.is_function, candidate)
        _draw_format_bits(modules, template.is_function, level, candidate)
        return penalty_score(modules), candidate, modules

    candidates = range(8) if mask is None else (mask,)
    # Lowest penalty wins; ties go to the lower mask id.
    best_penalty, best_mask, best = min((masked(candidate) for candidate in candidates), key=lambda item: item[:2])

    logger.debug(
        "QR %d bytes: version %d, level %s, mask %d (penalty %d)",
        len(data), version, level.value, best_mask, best_penalty,
    )
    return QRMatrix(
        modules=tuple(tuple(row) for row in best),
        function_modules=tuple(tuple(row) for row in template.is_function),
        version=version,
        error_correction=level,
        mask=best_mask,
    )


def _data_codewords(data: bytes, version: int, level: ErrorCorrectionLevel) -> List[int]:
    capacity_bits = _num_data_codewords(version, level) * 8
    bb = BitBuffer()
    bb.append_bits(_BYTE_MODE, 4)
    bb.append_bits(len(data), _count_bits(version))
    for b in data:
        bb.append_bits(b, 8)
    if len(bb.bits) > capacity_bits:
        raise InternalEncodingInvariantViolation("Segment does not fit the chosen version")
    bb.append_terminator(capacity_bits)
    codewords = bb.to_codewords()
    codewords.extend(bb.pad_codewords(capacity_bits // 8 - len(codewords)))
    return codewords


def _add_ecc_and_interleave(data: Sequence[int], version: int, level: ErrorCorrectionLevel) -> List[int]:
    total_ecc = _ECC_CODEWORDS[version - 1][level.ordinal]
    num_blocks = _NUM_BLOCKS[version - 1][level.ordinal]
    ecc_len = total_ecc // num_blocks
    short_block_len = len(data) // num_blocks
    num_long_blocks = len(data) % num_blocks
    rs = ReedSolomonGenerator(ecc_len)
    blocks = []
    k = 0
    # Short blocks come first; long blocks carry one extra data codeword.
    for i in range(num_blocks):
        block_len = short_block_len + (1 if i >= num_blocks - num_long_blocks else 0)
        block_data = list(data[k:k + block_len])
        k += block_len
        blocks.append((block_data, rs.remainder(block_data)))
    result = []
    for i in range(short_block_len + 1):
        for block_data, _ in blocks:
            if i < len(block_data):
                result.append(block_data[i])
    for i in range(ecc_len):
        for _, ecc in blocks:
            result.append(ecc[i])
    if len(result) != _num_raw_data_modules(version) // 8:
        raise InternalEncodingInvariantViolation(
            f"Version {version} expects {_num_raw_data_modules(version) // 8} codewords, built {len(result)}"
        )
    return result


class BitBuffer:
    def __init__(self) -> None:
        self.bits: List[int] = []

    def append_bits(self, value: int, length: int) -> None:
        if value >> length:
            raise ValueError("Value does not fit in the requested bit length")
        for i in reversed(range(length)):
            self.bits.append((value >> i) & 1)

    def append_terminator(self, capacity_bits: int) -> None:
        terminator = min(4, capacity_bits - len(self.bits))
        self.bits.extend([0] * terminator)
        extra = (8 - len(self.bits) % 8) % 8
        self.bits.extend([0] * extra)

    def to_codewords(self) -> List[int]:
        codewords = []
        for i in range(0, len(self.bits), 8):
            chunk = 0
            for bit in self.bits[i:i + 8]:
                chunk = (chunk << 1) | bit
            codewords.append(chunk)
        return codewords

    def pad_codewords(self, count: int) -> List[int]:
        pads = [0xEC, 0x11]
        return [pads[i % 2] for i in range(count)]


class ReedSolomonGenerator:
    """Generator polynomial over GF(2^8/0x11D) with roots 2^0 .. 2^(degree-1)."""

    def __init__(self, degree: int):
        if degree <= 0 or degree > 255:
            raise ValueError("Degree out of range")
        self.coefficients = [1]
        root = 1
        for _ in range(degree):
            self.coefficients = self._multiply(self.coefficients, [1, root])
            root = self._gf_multiply(root, 0x02)

    @staticmethod
    def _multiply(p: Sequence[int], q: Sequence[int]) -> List[int]:
        result = [0] * (len(p) + len(q) - 1)
        for i, a in enumerate(p):
            for j, b in enumerate(q):
                result[i + j] ^= ReedSolomonGenerator._gf_multiply(a, b)
        return result

    @staticmethod
    def _gf_multiply(x: int, y: int) -> int:
        z = 0
        for _ in range(8):
            if y & 1:
                z ^= x
            carry = x & 0x80
            x = (x << 1) & 0xFF
            if carry:
                x ^= 0x1D
            y >>= 1
        return z

    def remainder(self, data: Sequence[int]) -> List[int]:
        result = [0] * (len(self.coefficients) - 1)
        for byte in data:
            factor = byte ^ result[0]
            result = result[1:] + [0]
            for i in range(len(result)):
                result[i] ^= self._gf_multiply(self.coefficients[i + 1], factor)
        return result


class _FunctionTemplate:
    """Function patterns for one version: finders, timing, alignment, reserved areas."""

    _FINDER = (
        (True, True, True, True, True, True, True),
        (True, False, False, False, False, False, True),
        (True, False, True, True, True, False, True),
        (True, False, True, True, True, False, True),
        (True, False, True, True, True, False, True),
        (True, False, False, False, False, False, True),
        (True, True, True, True, True, True, True),
    )

    def __init__(self, version: int) -> None:
        self.version = version
        self.size = version * 4 + 17
        self.modules: Grid = [[False] * self.size for _ in range(self.size)]
        self.is_function: Grid = [[False] * self.size for _ in range(self.size)]
        self._draw()

    def copy_modules(self) -> Grid:
        return [row[:] for row in self.modules]

    def set_function(self, x: int, y: int, dark: bool) -> None:
        if self.is_function[y][x] and self.modules[y][x] != dark:
            raise InternalEncodingInvariantViolation(
                f"Module ({x}, {y}) is already reserved with the opposite colour"
            )
        self.modules[y][x] = dark
        self.is_function[y][x] = True

    def reserve(self, x: int, y: int) -> None:
        self.is_function[y][x] = True

    def _draw(self) -> None:
        size = self.size
        for i in range(size):
            self.set_function(6, i, i % 2 == 0)
            self.set_function(i, 6, i % 2 == 0)

        self._place_finder(3, 3)
        self._place_finder(size - 4, 3)
        self._place_finder(3, size - 4)

        positions = alignment_pattern_positions(self.version)
        last = len(positions) - 1
        for i, r in enumerate(positions):
            for j, c in enumerate(positions):
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                for dy in range(-2, 3):
                    for dx in range(-2, 3):
                        self.set_function(c + dx, r + dy, max(abs(dx), abs(dy)) != 1)

        for i in range(9):
            self.reserve(8, i)
            self.reserve(i, 8)
        for i in range(8):
            self.reserve(size - 1 - i, 8)
        for i in range(7):
            self.reserve(8, size - 1 - i)
        self.set_function(8, size - 8, True)

        if self.version >= 7:
            bits = version_bits(self.version)
            for i in range(18):
                dark = (bits >> i) & 1 != 0
                a = size - 11 + i % 3
                b = i // 3
                self.set_function(a, b, dark)
                self.set_function(b, a, dark)

    def _place_finder(self, cx: int, cy: int) -> None:
        size = self.size
        # The timing pattern runs through the separator rows; overwrite it there.
        for dy in range(-4, 5):
            for dx in range(-4, 5):
                x = cx + dx
                y = cy + dy
                if not (0 <= x < size and 0 <= y < size):
                    continue
                if abs(dx) == 4 or abs(dy) == 4:
                    dark = False
                else:
                    dark = self._FINDER[dy + 3][dx + 3]
                self.modules[y][x] = dark
                self.is_function[y][x] = True


def alignment_pattern_positions(version: int) -> List[int]:
    """Row/column centres of the alignment patterns, counted back from the far edge."""
    if version == 1:
        return []
    num = version // 7 + 2
    step = 26 if version == 32 else (version * 4 + num * 2 + 1) // (2 * num - 2) * 2
    last = version * 4 + 10
    return [6] + [last - i * step for i in range(num - 2, -1, -1)]


def version_bits(version: int) -> int:
    """18-bit version information, BCH(18,6) with generator 0x1F25."""
    rem = version
    for _ in range(12):
        rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
    return version << 12 | rem


def format_bits(level: ErrorCorrectionLevel, mask: int) -> int:
    """15-bit format information, BCH(15,5) with generator 0x537, XOR-masked."""
    data = level.format_bits << 3 | mask
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * 0x537)
    return (data << 10 | rem) ^ 0x5412


def _draw_codewords(modules: Grid, is_function: Grid, codewords: Sequence[int]) -> None:
    size = len(modules)
    total_bits = len(codewords) * 8
    i = 0
    right = size - 1
    while right >= 1:
        if right == 6:
            right = 5
        upward = (right + 1) & 2 == 0
        for vert in range(size):
            y = size - 1 - vert if upward else vert
            for dx in range(2):
                x = right - dx
                if not is_function[y][x] and i < total_bits:
                    modules[y][x] = (codewords[i >> 3] >> (7 - (i & 7))) & 1 != 0
                    i += 1
        right -= 2
    if i != total_bits:
        raise InternalEncodingInvariantViolation(
            f"{total_bits - i} data bits left over after placement"
        )


def _mask_applies(mask: int, x: int, y: int) -> bool:
    if mask == 0:
        return (x + y) % 2 == 0
    if mask == 1:
        return y % 2 == 0
    if mask == 2:
        return x % 3 == 0
    if mask == 3:
        return (x + y) % 3 == 0
    if mask == 4:
        return (x // 3 + y // 2) % 2 == 0
    if mask == 5:
        return (x * y) % 2 + (x * y) % 3 == 0
    if mask == 6:
        return ((x * y) % 2 + (x * y) % 3) % 2 == 0
    if mask == 7:
        return ((x + y) % 2 + (x * y) % 3) % 2 == 0
    raise ValueError("Mask out of range")


def _apply_mask(modules: Grid, is_function: Grid, mask: int) -> None:
    size = len(modules)
    for y in range(size):
        for x in range(size):
            if not is_function[y][x] and _mask_applies(mask, x, y):
                modules[y][x] = not modules[y][x]


def _draw_format_bits(modules: Grid, is_function: Grid, level: ErrorCorrectionLevel, mask: int) -> None:
    size = len(modules)
    bits = format_bits(level, mask)

    def put(x: int, y: int, i: int) -> None:
        if not is_function[y][x]:
            raise InternalEncodingInvariantViolation(f"Format bit {i} outside the reserved area")
        modules[y][x] = (bits >> i) & 1 != 0

    for i in range(6):
        put(8, i, i)
    put(8, 7, 6)
    put(8, 8, 7)
    put(7, 8, 8)
    for i in range(9, 15):
        put(14 - i, 8, i)
    for i in range(8):
        put(size - 1 - i, 8, i)
    for i in range(8, 15):
        put(8, size - 15 + i, i)


def penalty_score(modules: Sequence[Sequence[bool]]) -> int:
    """Standard four-part mask penalty: runs, 2x2 blocks, finder look-alikes, balance."""
    size = len(modules)
    score = 0
    columns = [[modules[y][x] for y in range(size)] for x in range(size)]
    for line in list(modules) + columns:
        score += _penalty_consecutive(line)
    for y in range(size - 1):
        for x in range(size - 1):
            if modules[y][x] == modules[y][x + 1] == modules[y + 1][x] == modules[y + 1][x + 1]:
                score += 3
    pattern1 = [True, False, True, True, True, False, True, False, False, False, False]
    pattern2 = pattern1[::-1]
    for line in list(modules) + columns:
        score += _penalty_pattern(line, pattern1, pattern2)
    dark = sum(sum(1 for module in row if module) for row in modules)
    total = size * size
    k = abs(dark * 20 - total * 10) // total
    score += k * 10
    return score


def _penalty_consecutive(line: Sequence[bool]) -> int:
    score = 0
    run_color = None
    run_length = 0
    for color in line:
        if color == run_color:
            run_length += 1
            if run_length == 5:
                score += 3
            elif run_length > 5:
                score += 1
        else:
            run_color = color
            run_length = 1
    return score


def _penalty_pattern(line: Sequence[bool], p1: Sequence[bool], p2: Sequence[bool]) -> int:
    score = 0
    width = len(p1)
    for i in range(len(line) - width + 1):
        window = list(line[i:i + width])
        if window == list(p1) or window == list(p2):
            score += 40
    return score
