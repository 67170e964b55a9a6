"""Symbology registry: the catalog of linear barcodes and their pattern tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import UnsupportedSymbology


@dataclass(frozen=True)
class Element:
    """One bar or space; ``height``/``offset`` are measured in tracks."""

    is_bar: bool
    width: int
    height: int = 1
    offset: int = 0


Pattern = Tuple[Element, ...]


class SymbologyId(str, Enum):
    C39 = "C39"
    C39_CHECK = "C39+"
    C39E = "C39E"
    C39E_CHECK = "C39E+"
    C93 = "C93"
    S25 = "S25"
    S25_CHECK = "S25+"
    I25 = "I25"
    I25_CHECK = "I25+"
    C128 = "C128"
    C128A = "C128A"
    C128B = "C128B"
    C128C = "C128C"
    EAN2 = "EAN2"
    EAN5 = "EAN5"
    EAN8 = "EAN8"
    EAN13 = "EAN13"
    UPCA = "UPCA"
    UPCE = "UPCE"
    MSI = "MSI"
    MSI_CHECK = "MSI+"
    POSTNET = "POSTNET"
    PLANET = "PLANET"
    RMS4CC = "RMS4CC"
    KIX = "KIX"
    IMB = "IMB"
    CODABAR = "CODABAR"
    CODE11 = "CODE11"
    PHARMA = "PHARMA"
    PHARMA2T = "PHARMA2T"


class Checksum(str, Enum):
    NONE = "none"
    MOD10_WEIGHTED = "mod10_weighted"
    MOD10_LUHN = "mod10_luhn"
    MOD43 = "mod43"
    MOD47_DOUBLE = "mod47_double"
    MOD103 = "mod103"
    MOD11_DOUBLE = "mod11_double"
    SUM_MOD10 = "sum_mod10"
    MOD6_ROWS_COLS = "mod6_rows_cols"
    CRC11 = "crc11"
    PARITY = "parity"


class Layout(str, Enum):
    SEQUENTIAL = "sequential"
    INTERLEAVED = "interleaved"
    EAN = "ean"
    UPCE = "upce"
    ADDON = "addon"
    CODE128 = "code128"
    PHARMA = "pharma"
    PHARMA_2T = "pharma_2t"
    IMB = "imb"


class CaseRule(str, Enum):
    UPPER = "upper"
    PRESERVE = "preserve"


@dataclass(frozen=True)
class SymbologyEntry:
    id: SymbologyId
    name: str
    charset: FrozenSet[str]
    min_length: int
    max_length: int
    checksum: Checksum
    layout: Layout
    patterns: Mapping[Union[str, int], Pattern] = field(default_factory=lambda: MappingProxyType({}))
    start: Pattern = ()
    stop: Pattern = ()
    gap: int = 0
    case: CaseRule = CaseRule.UPPER
    tracks: int = 1
    lengths: Optional[FrozenSet[int]] = None
    substitutions: Optional[Mapping[str, Tuple[Union[str, int], ...]]] = None
    delimiters: str = ""


def _runs(widths: str, bar_first: bool = True) -> Pattern:
    """Turn a width string such as ``"2331112"`` into alternating elements."""
    return tuple(
        Element(is_bar=(i % 2 == 0) == bar_first, width=int(w))
        for i, w in enumerate(widths)
    )


def _wide_narrow(flags: str, wide: int) -> str:
    return "".join(str(wide) if flag == "w" else "1" for flag in flags)


DIGITS = "0123456789"

# --- Code 39 ------------------------------------------------------------------

CODE39_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%"

_CODE39_FLAGS = {
    "0": "nnnwwnwnn", "1": "wnnwnnnnw", "2": "nnwwnnnnw", "3": "wnwwnnnnn",
    "4": "nnnwwnnnw", "5": "wnnwwnnnn", "6": "nnwwwnnnn", "7": "nnnwnnwnw",
    "8": "wnnwnnwnn", "9": "nnwwnnwnn", "A": "wnnnnwnnw", "B": "nnwnnwnnw",
    "C": "wnwnnwnnn", "D": "nnnnwwnnw", "E": "wnnnwwnnn", "F": "nnwnwwnnn",
    "G": "nnnnnwwnw", "H": "wnnnnwwnn", "I": "nnwnnwwnn", "J": "nnnnwwwnn",
    "K": "wnnnnnnww", "L": "nnwnnnnww", "M": "wnwnnnnwn", "N": "nnnnwnnww",
    "O": "wnnnwnnwn", "P": "nnwnwnnwn", "Q": "nnnnnnwww", "R": "wnnnnnwwn",
    "S": "nnwnnnwwn", "T": "nnnnwnwwn", "U": "wwnnnnnnw", "V": "nwwnnnnnw",
    "W": "wwwnnnnnn", "X": "nwnnwnnnw", "Y": "wwnnwnnnn", "Z": "nwwnwnnnn",
    "-": "nwnnnnwnw", ".": "wwnnnnwnn", " ": "nwwnnnwnn", "$": "nwnwnwnnn",
    "/": "nwnwnnnwn", "+": "nwnnnwnwn", "%": "nnnwnwnwn", "*": "nwnnwnwnn",
}

CODE39_PATTERNS: Mapping[str, Pattern] = MappingProxyType(
    {char: _runs(_wide_narrow(flags, 3)) for char, flags in _CODE39_FLAGS.items()}
)


def _full_ascii_map() -> Tuple[str, ...]:
    """Code 39 full-ASCII substitutions, indexed by code point 0..127."""
    table: List[str] = []
    for code in range(128):
        char = chr(code)
        if code == 0:
            table.append("%U")
        elif code <= 26:
            table.append("$" + chr(64 + code))
        elif code <= 31:
            table.append("%" + chr(65 + code - 27))
        elif char in " -." or char.isdigit() or "A" <= char <= "Z":
            table.append(char)
        elif 33 <= code <= 44 or code == 47:
            table.append("/" + chr(65 + code - 33))
        elif code == 58:
            table.append("/Z")
        elif 59 <= code <= 63:
            table.append("%" + chr(70 + code - 59))
        elif code == 64:
            table.append("%V")
        elif 91 <= code <= 95:
            table.append("%" + chr(75 + code - 91))
        elif code == 96:
            table.append("%W")
        elif 97 <= code <= 122:
            table.append("+" + chr(code - 32))
        else:
            table.append("%" + chr(80 + code - 123))
    return tuple(table)


FULL_ASCII = _full_ascii_map()

# --- Code 93 ------------------------------------------------------------------

_CODE93_WIDTHS = (
    "131112", "111213", "111312", "111411", "121113", "121212", "121311", "111114", "131211", "141111",
    "211113", "211212", "211311", "221112", "221211", "231111", "112113", "112212", "112311", "122112",
    "132111", "111123", "111222", "111321", "121122", "131121", "212112", "212211", "211122", "211221",
    "221121", "222111", "112122", "112221", "122121", "123111", "121131", "311112", "311211", "321111",
    "112131", "113121", "211131", "121221", "312111", "311121", "122211",
)

CODE93_PATTERNS: Mapping[int, Pattern] = MappingProxyType(
    {value: _runs(widths) for value, widths in enumerate(_CODE93_WIDTHS)}
)
CODE93_SHIFTS = {"$": 43, "%": 44, "/": 45, "+": 46}


def _code93_values() -> Tuple[Tuple[int, ...], ...]:
    values: List[Tuple[int, ...]] = []
    for code, substitute in enumerate(FULL_ASCII):
        char = chr(code)
        if char in CODE39_CHARS:
            values.append((CODE39_CHARS.index(char),))
        else:
            values.append((CODE93_SHIFTS[substitute[0]], CODE39_CHARS.index(substitute[1])))
    return tuple(values)


CODE93_VALUES = _code93_values()

# --- 2 of 5 -------------------------------------------------------------------

TWO_OF_FIVE = {
    "0": "nnwwn", "1": "wnnnw", "2": "nwnnw", "3": "wwnnn", "4": "nnwnw",
    "5": "wnwnn", "6": "nwwnn", "7": "nnnww", "8": "wnnwn", "9": "nwnwn",
}

_S25_PATTERNS = MappingProxyType(
    {
        digit: tuple(
            element
            for w in _wide_narrow(flags, 3)
            for element in (Element(True, int(w)), Element(False, 1))
        )
        for digit, flags in TWO_OF_FIVE.items()
    }
)


def _interleave(first: str, second: str) -> Pattern:
    bars = _wide_narrow(TWO_OF_FIVE[first], 3)
    spaces = _wide_narrow(TWO_OF_FIVE[second], 3)
    return tuple(
        element
        for bar, space in zip(bars, spaces)
        for element in (Element(True, int(bar)), Element(False, int(space)))
    )


_I25_PATTERNS = MappingProxyType({a + b: _interleave(a, b) for a in DIGITS for b in DIGITS})

# --- Code 128 -----------------------------------------------------------------

_CODE128_WIDTHS = (
    "212222", "222122", "222221", "121223", "121322", "131222", "122213", "122312", "132212", "221213",
    "221312", "231212", "112232", "122132", "122231", "113222", "123122", "123221", "223211", "221132",
    "221231", "213212", "223112", "312131", "311222", "321122", "321221", "312212", "322112", "322211",
    "212123", "212321", "232121", "111323", "131123", "131321", "112313", "132113", "132311", "211313",
    "231113", "231311", "112133", "112331", "132131", "113123", "113321", "133121", "313121", "211331",
    "231131", "213113", "213311", "213131", "311123", "311321", "331121", "312113", "312311", "332111",
    "314111", "221411", "431111", "111224", "111422", "121124", "121421", "141122", "141221", "112214",
    "112412", "122114", "122411", "142112", "142211", "241211", "221114", "413111", "241112", "134111",
    "111242", "121142", "121241", "114212", "124112", "124211", "411212", "421112", "421211", "212141",
    "214121", "412121", "111143", "111341", "131141", "114113", "114311", "411113", "411311", "113141",
    "114131", "311141", "411131", "211412", "211214", "211232", "2331112",
)

CODE128_PATTERNS: Mapping[int, Pattern] = MappingProxyType(
    {value: _runs(widths) for value, widths in enumerate(_CODE128_WIDTHS)}
)
CODE128_START = {"A": 103, "B": 104, "C": 105}
CODE128_SWITCH = {"A": 101, "B": 100, "C": 99}
CODE128_STOP = 106

# --- EAN / UPC ----------------------------------------------------------------

_EAN_L = ("3211", "2221", "2122", "1411", "1132", "1231", "1114", "1312", "1213", "3112")

EAN_CODES: Mapping[str, Mapping[str, Pattern]] = MappingProxyType(
    {
        "L": MappingProxyType({str(d): _runs(w, bar_first=False) for d, w in enumerate(_EAN_L)}),
        "G": MappingProxyType({str(d): _runs(w[::-1], bar_first=False) for d, w in enumerate(_EAN_L)}),
        "R": MappingProxyType({str(d): _runs(w) for d, w in enumerate(_EAN_L)}),
    }
)

EAN13_PARITY = (
    "LLLLLL", "LLGLGG", "LLGGLG", "LLGGGL", "LGLLGG",
    "LGGLLG", "LGGGLL", "LGLGLG", "LGLGGL", "LGGLGL",
)
UPCE_PARITY = (
    "GGGLLL", "GGLGLL", "GGLLGL", "GGLLLG", "GLGGLL",
    "GLLGGL", "GLLLGG", "GLGLGL", "GLGLLG", "GLLGLG",
)
EAN2_PARITY = ("LL", "LG", "GL", "GG")
EAN5_PARITY = (
    "GGLLL", "GLGLL", "GLLGL", "GLLLG", "LGGLL",
    "LLGGL", "LLLGG", "LGLGL", "LGLLG", "LLGLG",
)

EAN_GUARD = _runs("111")
EAN_CENTER_GUARD = _runs("11111", bar_first=False)
UPCE_END_GUARD = _runs("111111", bar_first=False)
ADDON_START = _runs("112")
ADDON_SEPARATOR = _runs("11", bar_first=False)

# --- MSI, Codabar, Code 11 ----------------------------------------------------

MSI_BITS = {"1": _runs("21"), "0": _runs("12")}
_MSI_PATTERNS = MappingProxyType(
    {
        digit: tuple(e for bit in format(int(digit), "04b") for e in MSI_BITS[bit])
        for digit in DIGITS
    }
)

_CODABAR_FLAGS = {
    "0": "0000011", "1": "0000110", "2": "0001001", "3": "1100000", "4": "0010010",
    "5": "1000010", "6": "0100001", "7": "0100100", "8": "0110000", "9": "1001000",
    "-": "0001100", "$": "0011000", ":": "1000101", "/": "1010001", ".": "1010100",
    "+": "0010101", "A": "0011010", "B": "0101001", "C": "0001011", "D": "0001110",
}
_CODABAR_PATTERNS = MappingProxyType(
    {char: _runs(flags.replace("1", "2").replace("0", "1")) for char, flags in _CODABAR_FLAGS.items()}
)
CODABAR_DELIMITERS = "ABCD"

_CODE11_FLAGS = {
    "0": "00001", "1": "10001", "2": "01001", "3": "11000", "4": "00101", "5": "10100",
    "6": "01100", "7": "00011", "8": "10010", "9": "10000", "-": "00100", "*": "00110",
}
_CODE11_PATTERNS = MappingProxyType(
    {char: _runs(flags.replace("1", "2").replace("0", "1")) for char, flags in _CODE11_FLAGS.items()}
)
CODE11_CHARS = "0123456789-"

# --- Postal and four-state ----------------------------------------------------

FULL_BAR_2 = Element(True, 1, 2, 0)
HALF_BAR_2 = Element(True, 1, 1, 1)

_POSTNET = ("11000", "00011", "00101", "00110", "01001", "01010", "01100", "10001", "10010", "10100")


def _postal_patterns(table: Sequence[str]) -> Mapping[str, Pattern]:
    patterns: Dict[str, Pattern] = {}
    for digit, bars in zip(DIGITS, table):
        elements: List[Element] = []
        for i, bar in enumerate(bars):
            if i:
                elements.append(Element(False, 1))
            elements.append(FULL_BAR_2 if bar == "1" else HALF_BAR_2)
        patterns[digit] = tuple(elements)
    return MappingProxyType(patterns)


TRACKER = Element(True, 1, 1, 1)
ASCENDER = Element(True, 1, 2, 0)
DESCENDER = Element(True, 1, 2, 1)
FULL_BAR_3 = Element(True, 1, 3, 0)

RM4SCC_CHARS = DIGITS + "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
RM4SCC_HALVES = ("0011", "0101", "0110", "1001", "1010", "1100")


def four_state_bar(ascends: bool, descends: bool) -> Element:
    if ascends and descends:
        return FULL_BAR_3
    if ascends:
        return ASCENDER
    if descends:
        return DESCENDER
    return TRACKER


def _rm4scc_patterns() -> Mapping[str, Pattern]:
    patterns: Dict[str, Pattern] = {}
    for index, char in enumerate(RM4SCC_CHARS):
        top = RM4SCC_HALVES[index // 6]
        bottom = RM4SCC_HALVES[5 - index % 6]
        elements: List[Element] = []
        for i in range(4):
            if i:
                elements.append(Element(False, 1))
            elements.append(four_state_bar(top[i] == "1", bottom[i] == "1"))
        patterns[char] = tuple(elements)
    return MappingProxyType(patterns)


# Intelligent Mail: for each of the 65 bars, the (character, bit) pair that
# drives its descender and its ascender.
IMB_DESCENDER_CHAR = (
    7, 1, 9, 5, 8, 0, 2, 4, 6, 3, 5, 8, 9, 7, 3, 0, 6, 1, 7, 4, 6, 8, 9, 2, 5, 1, 7, 5, 4, 3, 8, 7, 6,
    0, 2, 5, 4, 9, 3, 0, 1, 6, 8, 2, 0, 4, 5, 9, 6, 7, 5, 2, 6, 3, 8, 5, 1, 9, 8, 7, 4, 0, 2, 6, 3,
)
IMB_DESCENDER_BIT = (
    2, 10, 12, 5, 9, 1, 5, 4, 3, 9, 11, 5, 10, 1, 6, 3, 4, 1, 10, 0, 2, 11, 8, 6, 1, 12, 3, 8, 6, 4, 4, 11, 0,
    6, 1, 9, 11, 5, 3, 7, 3, 10, 7, 11, 8, 2, 10, 3, 5, 8, 0, 3, 12, 11, 8, 4, 5, 1, 3, 0, 7, 12, 9, 8, 10,
)
IMB_ASCENDER_CHAR = (
    4, 0, 2, 6, 3, 5, 1, 9, 8, 7, 1, 2, 0, 6, 4, 8, 2, 9, 5, 3, 0, 1, 3, 7, 4, 6, 8, 9, 2, 0, 5, 1, 9,
    4, 3, 8, 6, 7, 1, 2, 4, 3, 9, 5, 7, 8, 3, 0, 2, 1, 4, 0, 9, 1, 7, 0, 2, 4, 6, 3, 7, 1, 9, 5, 8,
)
IMB_ASCENDER_BIT = (
    3, 0, 8, 11, 1, 12, 8, 11, 10, 6, 4, 12, 2, 7, 9, 6, 7, 9, 2, 8, 4, 0, 12, 7, 10, 9, 0, 7, 10, 5, 7, 9, 6,
    8, 2, 12, 1, 4, 2, 0, 1, 5, 4, 6, 12, 1, 0, 9, 4, 7, 5, 10, 2, 6, 9, 11, 2, 12, 6, 7, 5, 11, 0, 3, 2,
)


def _n_of_13_table(n: int, size: int) -> Tuple[int, ...]:
    """Characters with ``n`` of 13 bits set; palindromes fill from the end."""
    table = [0] * size
    lower = 0
    upper = size - 1
    for value in range(8192):
        if bin(value).count("1") != n:
            continue
        reverse = int(format(value, "013b")[::-1], 2)
        if reverse < value:
            continue
        if reverse == value:
            table[upper] = value
            upper -= 1
        else:
            table[lower] = value
            table[lower + 1] = reverse
            lower += 2
    return tuple(table)


IMB_5_OF_13 = _n_of_13_table(5, 1287)
IMB_2_OF_13 = _n_of_13_table(2, 78)

# --- Registry -----------------------------------------------------------------

ASCII = frozenset(chr(code) for code in range(128))
_DIGIT_SET = frozenset(DIGITS)


def _entries() -> List[SymbologyEntry]:
    code39 = dict(
        charset=frozenset(CODE39_CHARS), min_length=1, max_length=80,
        layout=Layout.SEQUENTIAL, patterns=CODE39_PATTERNS,
        start=CODE39_PATTERNS["*"], stop=CODE39_PATTERNS["*"], gap=1,
    )
    code39_ext = dict(
        code39, charset=ASCII, case=CaseRule.PRESERVE,
        substitutions=MappingProxyType({chr(code): tuple(sub) for code, sub in enumerate(FULL_ASCII)}),
    )
    s25 = dict(
        charset=_DIGIT_SET, min_length=1, max_length=80, layout=Layout.SEQUENTIAL,
        patterns=_S25_PATTERNS, start=_runs("313111"), stop=_runs("31113"),
    )
    i25 = dict(
        charset=_DIGIT_SET, min_length=1, max_length=80, layout=Layout.INTERLEAVED,
        patterns=_I25_PATTERNS, start=_runs("1111"), stop=_runs("311"),
    )
    code128 = dict(min_length=1, max_length=80, checksum=Checksum.MOD103, layout=Layout.CODE128,
                   patterns=CODE128_PATTERNS, stop=CODE128_PATTERNS[CODE128_STOP], case=CaseRule.PRESERVE)
    ean = dict(charset=_DIGIT_SET, layout=Layout.EAN, start=EAN_GUARD, stop=EAN_GUARD)
    msi = dict(
        charset=_DIGIT_SET, min_length=1, max_length=80, layout=Layout.SEQUENTIAL,
        patterns=_MSI_PATTERNS, start=_runs("21"), stop=_runs("121"),
    )
    postal = dict(
        charset=_DIGIT_SET, checksum=Checksum.SUM_MOD10, layout=Layout.SEQUENTIAL,
        start=(FULL_BAR_2,), stop=(FULL_BAR_2,), gap=1, tracks=2,
    )
    four_state = dict(
        charset=frozenset(RM4SCC_CHARS), min_length=1, max_length=80, layout=Layout.SEQUENTIAL,
        patterns=_rm4scc_patterns(), gap=1, tracks=3,
    )
    S = SymbologyId
    return [
        SymbologyEntry(S.C39, "Code 39", checksum=Checksum.NONE, **code39),
        SymbologyEntry(S.C39_CHECK, "Code 39+", checksum=Checksum.MOD43, **code39),
        SymbologyEntry(S.C39E, "Code 39 Extended", checksum=Checksum.NONE, **code39_ext),
        SymbologyEntry(S.C39E_CHECK, "Code 39 Extended+", checksum=Checksum.MOD43, **code39_ext),
        SymbologyEntry(
            S.C93, "Code 93", charset=ASCII, min_length=1, max_length=80,
            checksum=Checksum.MOD47_DOUBLE, layout=Layout.SEQUENTIAL, patterns=CODE93_PATTERNS,
            start=_runs("111141"), stop=_runs("1111411"), case=CaseRule.PRESERVE,
            substitutions=MappingProxyType({chr(code): values for code, values in enumerate(CODE93_VALUES)}),
        ),
        SymbologyEntry(S.S25, "Standard 2 of 5", checksum=Checksum.NONE, **s25),
        SymbologyEntry(S.S25_CHECK, "Standard 2 of 5+", checksum=Checksum.MOD10_WEIGHTED, **s25),
        SymbologyEntry(S.I25, "Interleaved 2 of 5", checksum=Checksum.NONE, **i25),
        SymbologyEntry(S.I25_CHECK, "Interleaved 2 of 5+", checksum=Checksum.MOD10_WEIGHTED, **i25),
        SymbologyEntry(S.C128, "Code 128", charset=ASCII, **code128),
        SymbologyEntry(
            S.C128A, "Code 128 A", charset=frozenset(chr(c) for c in range(96)),
            start=CODE128_PATTERNS[CODE128_START["A"]], **code128,
        ),
        SymbologyEntry(
            S.C128B, "Code 128 B", charset=frozenset(chr(c) for c in range(32, 128)),
            start=CODE128_PATTERNS[CODE128_START["B"]], **code128,
        ),
        SymbologyEntry(
            S.C128C, "Code 128 C", charset=_DIGIT_SET,
            start=CODE128_PATTERNS[CODE128_START["C"]], **dict(code128, min_length=2),
        ),
        SymbologyEntry(
            S.EAN2, "EAN 2", charset=_DIGIT_SET, min_length=2, max_length=2,
            checksum=Checksum.PARITY, layout=Layout.ADDON, start=ADDON_START,
        ),
        SymbologyEntry(
            S.EAN5, "EAN 5", charset=_DIGIT_SET, min_length=5, max_length=5,
            checksum=Checksum.PARITY, layout=Layout.ADDON, start=ADDON_START,
        ),
        SymbologyEntry(S.EAN8, "EAN 8", min_length=7, max_length=8, checksum=Checksum.MOD10_WEIGHTED, **ean),
        SymbologyEntry(S.EAN13, "EAN 13", min_length=12, max_length=13, checksum=Checksum.MOD10_WEIGHTED, **ean),
        SymbologyEntry(S.UPCA, "UPC-A", min_length=11, max_length=12, checksum=Checksum.MOD10_WEIGHTED, **ean),
        SymbologyEntry(
            S.UPCE, "UPC-E", charset=_DIGIT_SET, min_length=6, max_length=8,
            checksum=Checksum.MOD10_WEIGHTED, layout=Layout.UPCE, start=EAN_GUARD, stop=UPCE_END_GUARD,
        ),
        SymbologyEntry(S.MSI, "MSI", checksum=Checksum.NONE, **msi),
        SymbologyEntry(S.MSI_CHECK, "MSI+", checksum=Checksum.MOD10_LUHN, **msi),
        SymbologyEntry(
            S.POSTNET, "POSTNET", min_length=5, max_length=11, lengths=frozenset({5, 9, 11}),
            patterns=_postal_patterns(_POSTNET), **postal,
        ),
        SymbologyEntry(
            S.PLANET, "PLANET", min_length=11, max_length=13, lengths=frozenset({11, 13}),
            patterns=_postal_patterns(
                tuple("".join("0" if b == "1" else "1" for b in bars) for bars in _POSTNET)
            ),
            **postal,
        ),
        SymbologyEntry(
            S.RMS4CC, "RMS4CC", checksum=Checksum.MOD6_ROWS_COLS,
            start=(ASCENDER,), stop=(FULL_BAR_3,), **four_state,
        ),
        SymbologyEntry(S.KIX, "KIX", checksum=Checksum.NONE, **four_state),
        SymbologyEntry(
            S.IMB, "IMB", charset=frozenset(DIGITS + "-"), min_length=20, max_length=32,
            checksum=Checksum.CRC11, layout=Layout.IMB, tracks=3,
        ),
        SymbologyEntry(
            S.CODABAR, "Codabar", charset=frozenset(_CODABAR_FLAGS), min_length=1, max_length=80,
            checksum=Checksum.NONE, layout=Layout.SEQUENTIAL, patterns=_CODABAR_PATTERNS,
            start=_CODABAR_PATTERNS["A"], stop=_CODABAR_PATTERNS["A"], gap=1,
            delimiters=CODABAR_DELIMITERS,
        ),
        SymbologyEntry(
            S.CODE11, "Code 11", charset=frozenset(CODE11_CHARS), min_length=1, max_length=80,
            checksum=Checksum.MOD11_DOUBLE, layout=Layout.SEQUENTIAL, patterns=_CODE11_PATTERNS,
            start=_CODE11_PATTERNS["*"], stop=_CODE11_PATTERNS["*"], gap=1,
        ),
        SymbologyEntry(
            S.PHARMA, "Pharma Code", charset=_DIGIT_SET, min_length=1, max_length=6,
            checksum=Checksum.NONE, layout=Layout.PHARMA,
        ),
        SymbologyEntry(
            S.PHARMA2T, "Pharma Code Two-Track", charset=_DIGIT_SET, min_length=1, max_length=8,
            checksum=Checksum.NONE, layout=Layout.PHARMA_2T, tracks=2,
        ),
    ]


_REGISTRY: Mapping[SymbologyId, SymbologyEntry] = MappingProxyType(
    {entry.id: entry for entry in _entries()}
)


_ALIASES = {
    "CODE39": SymbologyId.C39,
    "CODE39+": SymbologyId.C39_CHECK,
    "CODE93": SymbologyId.C93,
    "CODE128": SymbologyId.C128,
    "CODE128A": SymbologyId.C128A,
    "CODE128B": SymbologyId.C128B,
    "CODE128C": SymbologyId.C128C,
    "UPC-A": SymbologyId.UPCA,
    "UPC-E": SymbologyId.UPCE,
}


def _coerce(symbology: Union[str, SymbologyId]) -> SymbologyId:
    if isinstance(symbology, SymbologyId):
        return symbology
    if not isinstance(symbology, str):
        raise UnsupportedSymbology(symbology)
    key = symbology.strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return SymbologyId(key)
    except ValueError as exc:
        raise UnsupportedSymbology(symbology) from exc


def lookup(symbology: Union[str, SymbologyId]) -> SymbologyEntry:
    return _REGISTRY[_coerce(symbology)]


def list_supported() -> List[Tuple[SymbologyId, str]]:
    return [(entry.id, entry.name) for entry in _REGISTRY.values()]


def is_supported(symbology: object) -> bool:
    try:
        _coerce(symbology)  # type: ignore[arg-type]
    except UnsupportedSymbology:
        return False
    return True
