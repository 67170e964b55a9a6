"""Exceptions raised by the encoders and renderers."""

from __future__ import annotations

from typing import Optional


class BarcodeQRError(ValueError):
    """Base class for problems caused by the caller's input."""


class UnsupportedSymbology(BarcodeQRError):
    def __init__(self, symbology: object) -> None:
        super().__init__(f"Unsupported barcode type: {symbology}")
        self.symbology = symbology


class InvalidPayload(BarcodeQRError):
    """The payload cannot be encoded with the chosen symbology.

    ``character`` and ``position`` point at the first rejected character when
    the failure is a repertoire check.
    """

    def __init__(
        self,
        symbology: object,
        reason: str,
        character: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        if character is not None and position is not None:
            message = f"{symbology}: invalid character {character!r} at position {position}: {reason}"
        else:
            message = f"{symbology}: {reason}"
        super().__init__(message)
        self.symbology = symbology
        self.reason = reason
        self.character = character
        self.position = position


class PayloadTooLarge(BarcodeQRError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"Data too long: {requested} bytes requested, at most {available} bytes fit"
        )
        self.requested = requested
        self.available = available


class UnsupportedOutputFormat(BarcodeQRError):
    def __init__(self, fmt: object) -> None:
        super().__init__(f"Unsupported format: {fmt}")
        self.format = fmt


class InternalEncodingInvariantViolation(RuntimeError):
    """A placement or assembly step broke a structural invariant."""
