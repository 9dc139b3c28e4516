"""Status icons for each alert state, drawn with Pillow."""

import io
from functools import lru_cache

from PIL import Image, ImageDraw

from peekguard.alerts.state_machine import AlertState

WHITE = (245, 245, 245, 255)
OUTLINE = (77, 77, 179, 255)
RED = (220, 30, 30, 255)
BLACK = (20, 20, 20, 255)
GREY = (140, 140, 140, 255)


def render_icon(state: AlertState, size: int = 64) -> Image.Image:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    pad = max(1, size // 16)
    box = [pad, pad, size - 1 - pad, size - 1 - pad]
    stroke = max(1, size // 16)

    if state == AlertState.OFF:
        d.ellipse(box, fill=WHITE, outline=OUTLINE, width=stroke)
    elif state == AlertState.PAUSED:
        d.ellipse(box, fill=WHITE, outline=GREY, width=stroke)
        # Pause bars
        bar_w = size // 8
        top, bottom = size * 5 // 16, size * 11 // 16
        d.rectangle([size * 3 // 8 - bar_w // 2, top, size * 3 // 8 + bar_w // 2, bottom], fill=GREY)
        d.rectangle([size * 5 // 8 - bar_w // 2, top, size * 5 // 8 + bar_w // 2, bottom], fill=GREY)
    elif state == AlertState.CAMERA_DISABLED:
        d.ellipse(box, outline=GREY, width=stroke)
        d.line([box[0], box[3], box[2], box[1]], fill=GREY, width=stroke)
    else:
        color = BLACK if state == AlertState.FLASHING_OFF else RED
        d.ellipse(box, fill=color)
        _exclamation(d, size)

    return img


def _exclamation(d: ImageDraw.ImageDraw, size: int):
    cx = size // 2
    half = max(1, size // 16)
    d.rectangle([cx - half, size * 3 // 16, cx + half, size * 10 // 16], fill=WHITE)
    d.ellipse([cx - half, size * 11 // 16, cx + half, size * 11 // 16 + 2 * half], fill=WHITE)


@lru_cache(maxsize=32)
def icon_png(state: AlertState, size: int = 64) -> bytes:
    buf = io.BytesIO()
    render_icon(state, size).save(buf, format="PNG")
    return buf.getvalue()
