"""DXF export: one closed LWPOLYLINE per dark block."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .geometry import Layout, Rect
from .options import RenderOptions

Point = Tuple[float, float]


def layout_to_dxf(layout: Layout, layer: str = "BARCODE") -> str:
    radius = _clamp_radius(layout.block_size, layout.corner_radius)
    entities: List[str] = []
    for rect in layout.rects:
        points, bulges = _rounded_rect(rect, layout.height, radius)
        if len(points) < 2:
            continue
        entities.extend(_lwpolyline(points, bulges, layer))
    if layout.text is not None:
        baseline = layout.height - layout.text.top - layout.text.size
        entities.extend(_text(layout.text.text, layout.text.center_x, baseline, layout.text.size, layer))
    header = _dxf_header(layer)
    footer = _dxf_footer()
    return "\n".join(header + entities + footer) + "\n"


def to_dxf(layout: Layout, options: RenderOptions) -> bytes:
    return layout_to_dxf(layout).encode("utf-8")


def _clamp_radius(block_size: float, radius: float) -> float:
    return max(0.0, min(radius, block_size / 2.0))


def _rounded_rect(rect: Rect, height: int, radius: float) -> Tuple[List[Point], List[float]]:
    """Counter-clockwise outline of ``rect`` with quarter-circle corners.

    A bulge belongs to the vertex starting its segment; tan(pi/8) draws a
    quarter circle.
    """
    # DXF Y grows upwards.
    x0 = float(rect.x)
    x1 = float(rect.right)
    y0 = float(height - rect.bottom)
    y1 = float(height - rect.y)
    if radius <= 1e-9:
        return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)], [0.0] * 4

    r = min(radius, (x1 - x0) / 2.0, (y1 - y0) / 2.0)
    k = math.tan(math.pi / 8.0)
    outline = [
        ((x0 + r, y0), 0.0), ((x1 - r, y0), k),
        ((x1, y0 + r), 0.0), ((x1, y1 - r), k),
        ((x1 - r, y1), 0.0), ((x0 + r, y1), k),
        ((x0, y1 - r), 0.0), ((x0, y0 + r), k),
    ]
    points: List[Point] = []
    bulges: List[float] = []
    for point, bulge in outline:
        # Zero-length edges collapse when the radius is half the block.
        if points and _points_close(points[-1], point):
            bulges[-1] = bulge
        else:
            points.append(point)
            bulges.append(bulge)
    return points, bulges


def _points_close(a: Point, b: Point, tol: float = 1e-9) -> bool:
    return abs(a[0] - b[0]) <= tol and abs(a[1] - b[1]) <= tol


def _lwpolyline(points: Sequence[Point], bulges: Sequence[float], layer: str) -> List[str]:
    values = [
        "0", "LWPOLYLINE",
        "8", layer,
        "90", str(len(points)),
        "70", "1",
    ]
    for (x, y), bulge in zip(points, bulges):
        values.extend(["10", f"{x:.6f}", "20", f"{y:.6f}"])
        if abs(bulge) > 1e-9:
            values.extend(["42", f"{bulge:.6f}"])
    return values


def _text(text: str, x: float, y: float, height: float, layer: str) -> List[str]:
    return [
        "0", "TEXT",
        "8", layer,
        "10", f"{x:.6f}", "20", f"{y:.6f}", "30", "0.0",
        "40", f"{height:.6f}",
        "1", text,
        "72", "1",
        "11", f"{x:.6f}", "21", f"{y:.6f}", "31", "0.0",
    ]


def _dxf_header(layer: str) -> List[str]:
    return [
        "0", "SECTION", "2", "HEADER", "0", "ENDSEC",
        "0", "SECTION", "2", "TABLES",
        "0", "TABLE", "2", "LAYER", "70", "1",
        "0", "LAYER", "2", layer, "70", "0", "62", "7", "6", "CONTINUOUS",
        "0", "ENDTAB", "0", "ENDSEC",
        "0", "SECTION", "2", "ENTITIES",
    ]


def _dxf_footer() -> List[str]:
    return ["0", "ENDSEC", "0", "EOF"]
