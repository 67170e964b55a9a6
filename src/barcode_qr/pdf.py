"""Single-page PDF 1.4 output with a vector content stream."""

from __future__ import annotations

from typing import List

from .geometry import Layout
from .options import RGB, RenderOptions

# Average Helvetica glyph advance as a fraction of the font size.
_HELVETICA_ADVANCE = 0.55


def _color(color: RGB, operator: str) -> str:
    r, g, b = (channel / 255.0 for channel in color)
    return f"{r:.3f} {g:.3f} {b:.3f} {operator}"


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _content_stream(layout: Layout) -> str:
    height = layout.height
    ops: List[str] = [
        _color(layout.background, "rg"),
        f"0 0 {layout.width} {height} re f",
        _color(layout.foreground, "rg"),
    ]
    # PDF user space grows upwards; flip every box around the page height.
    for rect in layout.rects:
        ops.append(f"{rect.x} {height - rect.bottom} {rect.width} {rect.height} re f")
    if layout.logo is not None:
        logo = layout.logo
        ops.append(_color(layout.background, "rg"))
        ops.append(f"{logo.x} {height - logo.bottom} {logo.width} {logo.height} re f")
        ops.append(_color(layout.foreground, "rg"))
    if layout.text is not None:
        text = layout.text.text.encode("latin-1", "replace").decode("latin-1")
        size = layout.text.size
        x = layout.text.center_x - len(text) * size * _HELVETICA_ADVANCE / 2
        baseline = height - layout.text.top - size * 0.8
        ops.append(f"BT /F1 {size} Tf {x:.2f} {baseline:.2f} Td ({_escape(text)}) Tj ET")
    return "\n".join(ops) + "\n"


def layout_to_pdf(layout: Layout) -> bytes:
    content = _content_stream(layout).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {layout.width} {layout.height}] "
            f"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>"
        ).encode("ascii"),
        b"<< /Length " + str(len(content)).encode("ascii") + b" >>\nstream\n" + content + b"endstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]
    out = bytearray(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode("ascii") + body + b"\nendobj\n"
    xref = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode("ascii")
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode("ascii")
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n"
    ).encode("ascii")
    return bytes(out)


def to_pdf(layout: Layout, options: RenderOptions) -> bytes:
    return layout_to_pdf(layout)
