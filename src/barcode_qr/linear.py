"""Symbology encoding engine: turns a payload into a bar/space element sequence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple, Union

from . import symbologies as sym
from .errors import InternalEncodingInvariantViolation, InvalidPayload
from .symbologies import CaseRule, Checksum, Element, Layout, Pattern, SymbologyEntry, SymbologyId

logger = logging.getLogger(__name__)

Key = Union[str, int]


@dataclass(frozen=True)
class EncodedSymbol:
    """Finished element sequence for one linear barcode.

    ``text`` is the payload as printed under the bars, check characters
    included where they are printable.
    """

    symbology: SymbologyId
    text: str
    elements: Tuple[Element, ...]
    tracks: int = 1

    @property
    def module_count(self) -> int:
        return sum(element.width for element in self.elements)

    @property
    def bar_count(self) -> int:
        return sum(1 for element in self.elements if element.is_bar)


def encode(symbology: Union[str, SymbologyId], payload: str) -> EncodedSymbol:
    entry = sym.lookup(symbology)
    if not isinstance(payload, str):
        raise InvalidPayload(entry.id.value, "payload must be a string")
    data = payload.upper() if entry.case is CaseRule.UPPER else payload
    _validate(entry, data)
    text, elements = _LAYOUTS[entry.layout](entry, data)
    _check_structure(entry, elements)
    symbol = EncodedSymbol(entry.id, text, tuple(elements), entry.tracks)
    logger.debug(
        "Encoded %s %r: %d elements, %d modules",
        entry.id.value, text, len(symbol.elements), symbol.module_count,
    )
    return symbol


def _validate(entry: SymbologyEntry, data: str) -> None:
    name = entry.id.value
    if not data:
        raise InvalidPayload(name, "payload is empty")
    if not entry.min_length <= len(data) <= entry.max_length:
        raise InvalidPayload(
            name,
            f"length must be between {entry.min_length} and {entry.max_length}, got {len(data)}",
        )
    if entry.lengths is not None and len(data) not in entry.lengths:
        allowed = ", ".join(str(n) for n in sorted(entry.lengths))
        raise InvalidPayload(name, f"length must be one of {allowed}, got {len(data)}")
    for position, char in enumerate(data):
        if char not in entry.charset:
            raise InvalidPayload(name, "character not supported by this symbology", char, position)


def _check_structure(entry: SymbologyEntry, elements: Sequence[Element]) -> None:
    name = entry.id.value
    if not elements or not elements[0].is_bar or not elements[-1].is_bar:
        raise InternalEncodingInvariantViolation(f"{name}: symbol must start and end with a bar")
    for index, (previous, current) in enumerate(zip(elements, elements[1:])):
        if previous.is_bar == current.is_bar:
            raise InternalEncodingInvariantViolation(
                f"{name}: elements {index} and {index + 1} do not alternate"
            )
    for element in elements:
        if element.width < 1:
            raise InternalEncodingInvariantViolation(f"{name}: element narrower than one module")


def _join(parts: Sequence[Pattern], gap: int = 0) -> List[Element]:
    elements: List[Element] = []
    for part in parts:
        if not part:
            continue
        if elements and gap:
            elements.append(Element(False, gap))
        elements.extend(part)
    return elements


# --- Check characters ---------------------------------------------------------


def _mod10_weighted(digits: str) -> str:
    total = sum(int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(reversed(digits)))
    return str((10 - total % 10) % 10)


def _mod10_luhn(digits: str) -> str:
    total = 0
    for i, d in enumerate(reversed(digits)):
        value = int(d)
        if i % 2 == 0:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return str((10 - total % 10) % 10)


def _weighted_sum(values: Sequence[int], cycle: int) -> int:
    count = len(values)
    return sum(value * ((count - 1 - i) % cycle + 1) for i, value in enumerate(values))


def _check_none(keys: List[Key]) -> List[Key]:
    return []


def _check_mod10_weighted(keys: List[Key]) -> List[Key]:
    return [_mod10_weighted("".join(str(k) for k in keys))]


def _check_mod10_luhn(keys: List[Key]) -> List[Key]:
    return [_mod10_luhn("".join(str(k) for k in keys))]


def _check_mod43(keys: List[Key]) -> List[Key]:
    total = sum(sym.CODE39_CHARS.index(str(k)) for k in keys)
    return [sym.CODE39_CHARS[total % 43]]


def _check_mod47_double(keys: List[Key]) -> List[Key]:
    values = [int(k) for k in keys]
    c = _weighted_sum(values, 20) % 47
    k = _weighted_sum(values + [c], 15) % 47
    return [c, k]


def _check_mod11_double(keys: List[Key]) -> List[Key]:
    values = [sym.CODE11_CHARS.index(str(k)) for k in keys]
    checks = [_weighted_sum(values, 10) % 11]
    if len(values) >= 10:
        checks.append(_weighted_sum(values + checks, 9) % 11)
    return [sym.CODE11_CHARS[value] for value in checks]


def _check_sum_mod10(keys: List[Key]) -> List[Key]:
    total = sum(int(k) for k in keys)
    return [str((10 - total % 10) % 10)]


def _check_mod6_rows_cols(keys: List[Key]) -> List[Key]:
    rows = 0
    cols = 0
    for key in keys:
        index = sym.RM4SCC_CHARS.index(str(key))
        rows += index // 6 + 1
        cols += index % 6 + 1
    return [sym.RM4SCC_CHARS[((rows - 1) % 6) * 6 + (cols - 1) % 6]]


_CHECK_CHARACTERS: Dict[Checksum, Callable[[List[Key]], List[Key]]] = {
    Checksum.NONE: _check_none,
    Checksum.MOD10_WEIGHTED: _check_mod10_weighted,
    Checksum.MOD10_LUHN: _check_mod10_luhn,
    Checksum.MOD43: _check_mod43,
    Checksum.MOD47_DOUBLE: _check_mod47_double,
    Checksum.MOD11_DOUBLE: _check_mod11_double,
    Checksum.SUM_MOD10: _check_sum_mod10,
    Checksum.MOD6_ROWS_COLS: _check_mod6_rows_cols,
}


# --- Layouts ------------------------------------------------------------------


def _strip_delimiters(entry: SymbologyEntry, data: str) -> Tuple[str, Pattern, Pattern]:
    """Honour caller-supplied start/stop characters such as Codabar's ``A``..``D``."""
    start, stop = entry.start, entry.stop
    body = data
    if len(data) >= 2 and data[0] in entry.delimiters and data[-1] in entry.delimiters:
        start, stop = entry.patterns[data[0]], entry.patterns[data[-1]]
        body = data[1:-1]
        offset = 1
    else:
        offset = 0
    if not body:
        raise InvalidPayload(entry.id.value, "payload is empty")
    for position, char in enumerate(body, start=offset):
        if char in entry.delimiters:
            raise InvalidPayload(
                entry.id.value, "start/stop character inside the payload", char, position
            )
    return body, start, stop


def _sequential(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    start, stop = entry.start, entry.stop
    body = data
    if entry.delimiters:
        body, start, stop = _strip_delimiters(entry, data)
    keys: List[Key] = []
    if entry.substitutions is not None:
        for char in body:
            keys.extend(entry.substitutions[char])
    else:
        keys.extend(body)
    checks = _CHECK_CHARACTERS[entry.checksum](keys)
    parts = [start] + [entry.patterns[key] for key in keys + checks] + [stop]
    text = data + "".join(check for check in checks if isinstance(check, str))
    return text, _join(parts, entry.gap)


def _interleaved(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    digits = data + "".join(str(c) for c in _CHECK_CHARACTERS[entry.checksum](list(data)))
    if len(digits) % 2:
        digits = "0" + digits
    pairs = [entry.patterns[digits[i:i + 2]] for i in range(0, len(digits), 2)]
    return digits, _join([entry.start] + pairs + [entry.stop])


def _with_check_digit(entry: SymbologyEntry, digits: str) -> str:
    """Append the mod-10 check digit, or verify it when the caller supplied one."""
    if len(digits) < entry.max_length:
        return digits + _mod10_weighted(digits)
    body, given = digits[:-1], digits[-1]
    expected = _mod10_weighted(body)
    if given != expected:
        raise InvalidPayload(
            entry.id.value, f"check digit should be {expected}", given, len(digits) - 1
        )
    return digits


def _ean_digits(parity: str, digits: str) -> List[Pattern]:
    return [sym.EAN_CODES[code][digit] for code, digit in zip(parity, digits)]


def _ean(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    digits = _with_check_digit(entry, data)
    if entry.id is SymbologyId.EAN13:
        parity = sym.EAN13_PARITY[int(digits[0])]
        left, right = digits[1:7], digits[7:]
    else:
        half = len(digits) // 2
        left, right = digits[:half], digits[half:]
        parity = "L" * half
    parts = (
        [entry.start]
        + _ean_digits(parity, left)
        + [sym.EAN_CENTER_GUARD]
        + _ean_digits("R" * len(right), right)
        + [entry.stop]
    )
    return digits, _join(parts)


def _upce_to_upca(number_system: str, digits: str) -> str:
    last = digits[5]
    if last in "012":
        manufacturer, product = digits[:2] + last + "00", "00" + digits[2:5]
    elif last == "3":
        manufacturer, product = digits[:3] + "00", "000" + digits[3:5]
    elif last == "4":
        manufacturer, product = digits[:4] + "0", "0000" + digits[4]
    else:
        manufacturer, product = digits[:5], "0000" + last
    return number_system + manufacturer + product


def _upce(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    name = entry.id.value
    if len(data) == 6:
        data = "0" + data
    number_system, digits = data[0], data[1:7]
    if number_system not in "01":
        raise InvalidPayload(name, "number system must be 0 or 1", number_system, 0)
    check = _mod10_weighted(_upce_to_upca(number_system, digits))
    if len(data) == 8 and data[7] != check:
        raise InvalidPayload(name, f"check digit should be {check}", data[7], 7)
    parity = sym.UPCE_PARITY[int(check)]
    if number_system == "1":
        parity = "".join("L" if code == "G" else "G" for code in parity)
    parts = [entry.start] + _ean_digits(parity, digits) + [entry.stop]
    return number_system + digits + check, _join(parts)


def _addon(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    if len(data) == 2:
        parity = sym.EAN2_PARITY[int(data) % 4]
    else:
        weighted = 3 * sum(int(d) for d in data[0::2]) + 9 * sum(int(d) for d in data[1::2])
        parity = sym.EAN5_PARITY[weighted % 10]
    parts: List[Pattern] = [entry.start]
    for index, pattern in enumerate(_ean_digits(parity, data)):
        if index:
            parts.append(sym.ADDON_SEPARATOR)
        parts.append(pattern)
    return data, _join(parts)


# Preference order when two subsets encode the rest of the payload equally well.
_CODE128_SUBSETS = ("C", "B", "A")


def _code128_fits(subset: str, data: str, index: int) -> bool:
    if subset == "C":
        pair = data[index:index + 2]
        return len(pair) == 2 and all(char in sym.DIGITS for char in pair)
    code = ord(data[index])
    if subset == "A":
        return code < 96
    return 32 <= code < 128


def _code128_value(subset: str, chunk: str) -> int:
    if subset == "C":
        return int(chunk)
    code = ord(chunk)
    if subset == "A" and code < 32:
        return code + 64
    return code - 32


def _resolve_subsets(data: str) -> List[Tuple[str, str]]:
    """Split ``data`` into ``(subset, chunk)`` runs using the fewest symbols.

    ``best[i][s]`` is the number of symbols needed for ``data[i:]`` when the
    symbol is currently in subset ``s``; a subset switch costs one symbol.
    """
    count = len(data)
    best: List[Dict[str, int]] = [dict.fromkeys(_CODE128_SUBSETS, 0) for _ in range(count + 1)]
    choice: List[Dict[str, str]] = [{} for _ in range(count + 1)]
    for index in range(count - 1, -1, -1):
        stay = {
            subset: 1 + best[index + (2 if subset == "C" else 1)][subset]
            for subset in _CODE128_SUBSETS
            if _code128_fits(subset, data, index)
        }
        for current in _CODE128_SUBSETS:
            candidates = [current] + [s for s in _CODE128_SUBSETS if s != current]
            chosen = None
            cost = 0
            for target in candidates:
                if target not in stay:
                    continue
                option = stay[target] + (0 if target == current else 1)
                if chosen is None or option < cost:
                    chosen, cost = target, option
            if chosen is None:
                raise InternalEncodingInvariantViolation(
                    f"C128: no subset encodes {data[index]!r} at position {index}"
                )
            best[index][current] = cost
            choice[index][current] = chosen
    subset = min(_CODE128_SUBSETS, key=lambda s: (best[0][s], _CODE128_SUBSETS.index(s)))
    runs: List[Tuple[str, str]] = []
    index = 0
    while index < count:
        subset = choice[index][subset]
        width = 2 if subset == "C" else 1
        runs.append((subset, data[index:index + width]))
        index += width
    return runs


def _forced_subset(entry: SymbologyEntry) -> str:
    for subset, value in sym.CODE128_START.items():
        if entry.start == sym.CODE128_PATTERNS[value]:
            return subset
    return ""


def _code128(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    forced = _forced_subset(entry)
    if forced == "C" and len(data) % 2:
        raise InvalidPayload(entry.id.value, "Code 128 C needs an even number of digits")
    if forced:
        width = 2 if forced == "C" else 1
        runs = [(forced, data[i:i + width]) for i in range(0, len(data), width)]
    else:
        runs = _resolve_subsets(data)
    values = [sym.CODE128_START[runs[0][0]]]
    current = runs[0][0]
    for subset, chunk in runs:
        if subset != current:
            values.append(sym.CODE128_SWITCH[subset])
            current = subset
        values.append(_code128_value(subset, chunk))
    check = (values[0] + sum(i * value for i, value in enumerate(values[1:], start=1))) % 103
    values.extend([check, sym.CODE128_STOP])
    logger.debug("C128 subsets for %r: %s", data, "".join(subset for subset, _ in runs))
    return data, _join([entry.patterns[value] for value in values])


def _numeric_range(entry: SymbologyEntry, data: str, low: int, high: int) -> int:
    value = int(data)
    if not low <= value <= high:
        raise InvalidPayload(entry.id.value, f"value must be between {low} and {high}, got {value}")
    return value


def _pharma(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    value = _numeric_range(entry, data, 3, 131070)
    widths: List[int] = []
    while value > 0:
        if value % 2 == 0:
            widths.append(3)
            value -= 2
        else:
            widths.append(1)
            value -= 1
        value //= 2
    elements: List[Element] = []
    for width in reversed(widths):
        if elements:
            elements.append(Element(False, 2))
        elements.append(Element(True, width))
    return str(int(data)), elements


# Two-track Pharmacode bars by base-3 digit: bottom half, top half, full.
_PHARMA_2T_BARS = {
    1: Element(True, 1, 1, 1),
    2: Element(True, 1, 1, 0),
    0: Element(True, 1, 2, 0),
}


def _pharma_2t(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    value = _numeric_range(entry, data, 4, 64570080)
    bars: List[Element] = []
    while value:
        digit = value % 3
        bars.append(_PHARMA_2T_BARS[digit])
        value = (value - (digit or 3)) // 3
    elements: List[Element] = []
    for bar in reversed(bars):
        if elements:
            elements.append(Element(False, 1))
        elements.append(bar)
    return str(int(data)), elements


_IMB_ROUTING_OFFSETS = {0: 0, 5: 1, 9: 100001, 11: 1000100001}


def _crc11(data: bytes) -> int:
    """USPS frame check sequence over the 102-bit binary payload."""
    fcs = 0x07FF
    for index, byte in enumerate(data):
        bits = 6 if index == 0 else 8
        shifted = byte << (11 - bits)
        for _ in range(bits):
            if (fcs ^ shifted) & 0x400:
                fcs = (fcs << 1) ^ 0x0F35
            else:
                fcs <<= 1
            fcs &= 0x7FF
            shifted <<= 1
    return fcs


def _imb(entry: SymbologyEntry, data: str) -> Tuple[str, List[Element]]:
    name = entry.id.value
    tracking, _, routing = data.partition("-")
    if "-" in routing:
        raise InvalidPayload(name, "only one '-' separator is allowed", "-", len(tracking) + 1 + routing.index("-"))
    if len(tracking) != 20:
        raise InvalidPayload(name, f"tracking code must have 20 digits, got {len(tracking)}")
    if tracking[1] not in "01234":
        raise InvalidPayload(name, "second tracking digit must be 0-4", tracking[1], 1)
    if len(routing) not in _IMB_ROUTING_OFFSETS:
        raise InvalidPayload(name, f"routing code must have 0, 5, 9 or 11 digits, got {len(routing)}")

    value = (int(routing) if routing else 0) + _IMB_ROUTING_OFFSETS[len(routing)]
    value = (value * 10 + int(tracking[0])) * 5 + int(tracking[1])
    for digit in tracking[2:]:
        value = value * 10 + int(digit)
    fcs = _crc11(value.to_bytes(13, "big"))

    codewords = [0] * 10
    codewords[9] = value % 636
    value //= 636
    for index in range(8, 0, -1):
        codewords[index] = value % 1365
        value //= 1365
    codewords[0] = value
    codewords[9] *= 2
    if fcs >> 10:
        codewords[0] += 659

    characters = []
    for index, codeword in enumerate(codewords):
        if codeword < 1287:
            character = sym.IMB_5_OF_13[codeword]
        else:
            character = sym.IMB_2_OF_13[codeword - 1287]
        if fcs & (1 << index):
            character ^= 0x1FFF
        characters.append(character)

    elements: List[Element] = []
    for bar in range(65):
        descends = characters[sym.IMB_DESCENDER_CHAR[bar]] >> sym.IMB_DESCENDER_BIT[bar] & 1
        ascends = characters[sym.IMB_ASCENDER_CHAR[bar]] >> sym.IMB_ASCENDER_BIT[bar] & 1
        if elements:
            elements.append(Element(False, 1))
        elements.append(sym.four_state_bar(bool(ascends), bool(descends)))
    return data, elements


_LAYOUTS: Dict[Layout, Callable[[SymbologyEntry, str], Tuple[str, List[Element]]]] = {
    Layout.SEQUENTIAL: _sequential,
    Layout.INTERLEAVED: _interleaved,
    Layout.EAN: _ean,
    Layout.UPCE: _upce,
    Layout.ADDON: _addon,
    Layout.CODE128: _code128,
    Layout.PHARMA: _pharma,
    Layout.PHARMA_2T: _pharma_2t,
    Layout.IMB: _imb,
}
