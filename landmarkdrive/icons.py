"""Vehicle marker icon: loaded from disk or drawn as a heading arrow."""
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .config import VehicleConfig

PLACEHOLDER_COLOUR = "#1f77b4"


def draw_placeholder(label: str, size: int) -> Image.Image:
    """A filled disc with a white nose pointing north and ``label`` in the middle."""

    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.ellipse([(0, 0), (size - 1, size - 1)], fill=PLACEHOLDER_COLOUR)
    draw.polygon([(size / 2.0, 0), (size * 0.35, size * 0.25), (size * 0.65, size * 0.25)], fill="white")

    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
    draw.text(((size - (right - left)) / 2.0, (size - (bottom - top)) / 2.0), label, font=font, fill="white")
    return image


def load_vehicle_icon(config: VehicleConfig, base_size: int = 64) -> np.ndarray:
    """Return the RGBA icon array for the configured vehicle.

    A configured ``icon_path`` that exists is used as is; otherwise a
    placeholder labelled with the vehicle type's initial is drawn.
    """

    if config.icon_path is not None and Path(config.icon_path).exists():
        image = Image.open(config.icon_path).convert("RGBA")
        size = max(image.size)
    else:
        image = draw_placeholder((config.type[:1] or "?").upper(), base_size)
        size = base_size

    if config.icon_scale != 1.0:
        scaled = max(16, int(round(size * config.icon_scale)))
        image = image.resize((scaled, scaled), Image.Resampling.LANCZOS)

    return np.array(image)


def rotate_icon(icon: np.ndarray, bearing: float) -> np.ndarray:
    """Turn ``icon`` clockwise by ``bearing`` degrees so its nose follows the route."""

    rotated = Image.fromarray(icon).rotate(-bearing, resample=Image.Resampling.BICUBIC, expand=True)
    return np.array(rotated)
