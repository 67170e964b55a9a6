"""Builders for structured QR payloads."""

from __future__ import annotations

from typing import Optional


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace(";", r"\;").replace(",", r"\,").replace(":", r"\:")


def build_wifi_payload(ssid: str, password: str = "", auth: str = "WPA", hidden: bool = False) -> str:
    """Return the Wi-Fi QR payload string."""
    if not ssid:
        raise ValueError("ssid must not be empty")
    auth_normalized = auth.upper()
    valid_auth = {"WEP", "WPA", "WPA2", "WPA/WPA2", "NOPASS"}
    if auth_normalized not in valid_auth:
        raise ValueError("auth must be WEP, WPA, WPA2, WPA/WPA2, or nopass")

    escaped_ssid = _escape(ssid)
    escaped_pwd = _escape(password) if auth_normalized != "NOPASS" else ""
    hidden_flag = "true" if hidden else "false"
    return f"WIFI:T:{auth_normalized};S:{escaped_ssid};P:{escaped_pwd};H:{hidden_flag};;"


def build_vcard_payload(
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    company: Optional[str] = None,
) -> str:
    """Return a vCard 3.0 contact card; empty fields are left out."""
    if not name:
        raise ValueError("name must not be empty")
    lines = ["BEGIN:VCARD", "VERSION:3.0", f"FN:{name}"]
    if phone:
        lines.append(f"TEL:{phone}")
    if email:
        lines.append(f"EMAIL:{email}")
    if company:
        lines.append(f"ORG:{company}")
    lines.append("END:VCARD")
    return "\n".join(lines)
