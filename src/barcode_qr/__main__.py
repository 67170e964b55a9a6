"""Command line interface for generating barcodes and QR codes."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from . import api
from .config import Settings, load_settings
from .logging_config import setup_logging
from .options import OutputFormat, RenderOptions
from .payloads import build_vcard_payload, build_wifi_payload


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-f", "--format", type=str.upper, choices=[fmt.value for fmt in OutputFormat],
                        help="Output format (default from settings, normally PNG)")
    parser.add_argument("-o", "--output", type=Path, help="Output file path")
    parser.add_argument("--foreground", help="Foreground colour as #rrggbb or r,g,b")
    parser.add_argument("--background", help="Background colour as #rrggbb or r,g,b")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="barcode-qr", description="Generate barcodes and QR codes")
    parser.add_argument("--config", type=Path, help="JSON settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    commands = parser.add_subparsers(dest="command", required=True)

    barcode = commands.add_parser("barcode", help="Encode a linear barcode")
    barcode.add_argument("type", help="Symbology id, e.g. C128, EAN13 (see 'list')")
    barcode.add_argument("data", help="Payload to encode")
    _add_output_arguments(barcode)
    barcode.add_argument("--module-width", type=int, help="Pixels per module")
    barcode.add_argument("--height", type=int, help="Bar height in pixels")
    barcode.add_argument("--padding", type=int, help="Padding around the bars in pixels")
    barcode.add_argument("--no-text", action="store_true", help="Omit the human-readable text")
    barcode.add_argument("--text-position", choices=["bottom", "top"], help="Where to print the text")

    qr = commands.add_parser("qr", help="Encode a QR code")
    data_group = qr.add_mutually_exclusive_group(required=True)
    data_group.add_argument("--text", help="Literal text/URL to encode")
    data_group.add_argument("--wifi", action="store_true", help="Encode Wi-Fi credentials")
    data_group.add_argument("--vcard", action="store_true", help="Encode a contact card")
    data_group.add_argument("--file", type=Path, help="Read the payload from a file")

    qr.add_argument("--ssid", help="Wi-Fi SSID", default="")
    qr.add_argument("--password", help="Wi-Fi password", default="")
    qr.add_argument("--auth", help="Wi-Fi authentication (WEP/WPA/WPA2/nopass)", default="WPA")
    qr.add_argument("--hidden", action="store_true", help="Mark Wi-Fi network as hidden")
    qr.add_argument("--name", help="Contact name for --vcard", default="")
    qr.add_argument("--phone", help="Contact phone for --vcard")
    qr.add_argument("--email", help="Contact e-mail for --vcard")
    qr.add_argument("--company", help="Contact organisation for --vcard")

    _add_output_arguments(qr)
    qr.add_argument("--ecc", choices=["low", "medium", "quartile", "high"], help="Error correction level")
    qr.add_argument("--size", type=int, help="Requested image size in pixels")
    qr.add_argument("--margin", type=int, help="Quiet-zone width in modules")
    qr.add_argument("--round-mode", choices=["margin", "enlarge", "shrink"], help="Block size rounding")
    qr.add_argument("--corner-radius", type=float, help="Rounded corner radius as a fraction of a module (0-0.5)")
    qr.add_argument("--rounded", action="store_true", help="Use a default rounded style (25%% of module size)")
    qr.add_argument("--logo", help="Logo image placed in the centre")
    qr.add_argument("--logo-size", type=int, help="Logo box size in pixels")

    commands.add_parser("list", help="List symbologies, levels and formats")
    return parser


def resolve_payload(args: argparse.Namespace) -> str:
    if args.wifi:
        if not args.ssid:
            raise SystemExit("--ssid is required when using --wifi")
        return build_wifi_payload(args.ssid, password=args.password, auth=args.auth, hidden=args.hidden)
    if args.vcard:
        if not args.name:
            raise SystemExit("--name is required when using --vcard")
        return build_vcard_payload(args.name, phone=args.phone, email=args.email, company=args.company)
    if args.text is not None:
        return args.text
    if args.file is not None:
        return args.file.read_text(encoding="utf-8")
    raise SystemExit("No payload provided")


def _overrides(args: argparse.Namespace, mapping: Dict[str, str]) -> Dict[str, Any]:
    return {
        option: getattr(args, attribute)
        for attribute, option in mapping.items()
        if getattr(args, attribute, None) is not None
    }


def _barcode_options(args: argparse.Namespace, settings: Settings) -> RenderOptions:
    overrides = _overrides(args, {
        "module_width": "module_width",
        "height": "height",
        "padding": "padding",
        "text_position": "text_position",
        "foreground": "foreground",
        "background": "background",
    })
    if args.no_text:
        overrides["show_text"] = False
    return RenderOptions.from_payload(overrides, base=settings.barcode_options)


def _qr_options(args: argparse.Namespace, settings: Settings) -> RenderOptions:
    overrides = _overrides(args, {
        "ecc": "error_correction",
        "size": "size",
        "margin": "margin",
        "round_mode": "round_block_size_mode",
        "corner_radius": "corner_radius",
        "logo": "logo_path",
        "logo_size": "logo_size",
        "foreground": "foreground",
        "background": "background",
    })
    if args.rounded and not overrides.get("corner_radius"):
        overrides["corner_radius"] = 0.25
    return RenderOptions.from_payload(overrides, base=settings.qr_options)


def _print_catalog() -> None:
    print("Symbologies:")
    for key, name in api.list_supported_symbologies().items():
        print(f"  {key:<10} {name}")
    print("Error correction levels:")
    for key, label in api.list_error_correction_levels().items():
        print(f"  {key:<10} {label}")
    print("Round block size modes:")
    for key, label in api.list_round_block_size_modes().items():
        print(f"  {key:<10} {label}")
    print("Output formats:")
    for key, mimetype in api.list_output_formats().items():
        print(f"  {key:<10} {mimetype}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    if args.command == "list":
        _print_catalog()
        return

    try:
        settings = load_settings(args.config)
        fmt = OutputFormat.parse(args.format or settings.default_format)
        if args.command == "barcode":
            artifact = api.barcode(args.type, args.data, fmt, _barcode_options(args, settings))
            default_name = f"barcode.{fmt.extension}"
        else:
            artifact = api.qr_code(resolve_payload(args), fmt, _qr_options(args, settings))
            default_name = f"qr_code.{fmt.extension}"
    except ValueError as exc:
        parser.exit(2, f"error: {exc}\n")

    output = args.output or settings.storage_path / default_name
    if not api.save(artifact, output):
        parser.exit(1, f"error: could not write {output}\n")
    parser.exit(0, f"Saved {fmt.value} to {output}\n")


if __name__ == "__main__":
    main()
