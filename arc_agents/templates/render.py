"""
Grid → PNG rendering for the vision input of the reasoning agent.

Cells are painted with the canonical 16-colour palette, outlined in black, and the
board is split into ZONE_SIZE×ZONE_SIZE zones (gold outline, "(x,y)" label at the
top-left corner of each zone) so the model can reason about click coordinates.
"""

from __future__ import annotations

import base64
import io
from typing import List

from PIL import Image, ImageDraw, ImageFont

ZONE_SIZE = 16
EMPTY_SIZE = 200

KEY_COLORS = {
    0: "#FFFFFF", 1: "#CCCCCC", 2: "#999999",
    3: "#666666", 4: "#333333", 5: "#000000",
    6: "#E53AA3", 7: "#FF7BCC", 8: "#F93C31",
    9: "#1E93FF", 10: "#88D8F1", 11: "#FFDC00",
    12: "#FF851B", 13: "#921231", 14: "#4FCC30",
    15: "#A356D6",
}
FALLBACK_COLOR = "#888888"
ZONE_COLOR = "#FFD700"


def _hex_to_rgb(h: str) -> tuple[int, int, int]:
    h = h.strip().lstrip("#")
    if len(h) != 6:
        return (136, 136, 136)
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def _png_bytes(im: Image.Image) -> bytes:
    buf = io.BytesIO()
    im.save(buf, "PNG")
    return buf.getvalue()


def grid_to_png_bytes(grid: List[List[int]], cell_size: int = 40, zone_size: int = ZONE_SIZE) -> bytes:
    if not grid or not isinstance(grid[0], list) or not grid[0]:
        return _png_bytes(Image.new("RGB", (EMPTY_SIZE, EMPTY_SIZE), (0, 0, 0)))

    height = len(grid)
    width = len(grid[0])
    im = Image.new("RGB", (width * cell_size, height * cell_size), (0, 0, 0))
    draw = ImageDraw.Draw(im)

    for y, row in enumerate(grid):
        for x, val in enumerate(row[:width]):
            x0, y0 = x * cell_size, y * cell_size
            draw.rectangle(
                [x0, y0, x0 + cell_size - 1, y0 + cell_size - 1],
                fill=_hex_to_rgb(KEY_COLORS.get(val, FALLBACK_COLOR)),
                outline=(0, 0, 0),
                width=1,
            )

    # zones + labels
    font = ImageFont.load_default()
    gold = _hex_to_rgb(ZONE_COLOR)
    for zy in range(0, height, zone_size):
        for zx in range(0, width, zone_size):
            zw = min(zone_size, width - zx) * cell_size
            zh = min(zone_size, height - zy) * cell_size
            x0, y0 = zx * cell_size, zy * cell_size
            draw.rectangle([x0, y0, x0 + zw - 1, y0 + zh - 1], outline=gold, width=2)
            draw.text((x0 + 2, y0 + 2), f"({zx},{zy})", fill=(255, 255, 255), font=font)

    return _png_bytes(im)


def grid_to_png_base64(grid: List[List[int]], cell_size: int = 40) -> str:
    return base64.b64encode(grid_to_png_bytes(grid, cell_size)).decode("utf-8")


def png_data_url(b64: str) -> str:
    return f"data:image/png;base64,{b64}"
