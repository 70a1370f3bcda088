"""Graphics descriptions: plain dicts consumed by external viewers.

A graphics object has five lists: ``points``, ``rects``, ``lines``,
``circles`` and ``texts``.  Helpers here never mutate their inputs.
"""

from __future__ import annotations

GRAPHICS_KEYS = ("points", "rects", "lines", "circles", "texts")


def empty_graphics() -> dict:
    return {key: [] for key in GRAPHICS_KEYS}


def combine_graphics(graphics: list[dict]) -> dict:
    """Concatenate several graphics objects into one."""
    combined = empty_graphics()
    for g in graphics:
        for key in GRAPHICS_KEYS:
            combined[key].extend(dict(item) for item in g.get(key, []))
    return combined


def tag_step(graphics: dict, step: int) -> dict:
    """Return a copy of *graphics* with every element tagged ``step``."""
    tagged = empty_graphics()
    for key in GRAPHICS_KEYS:
        tagged[key] = [{**item, "step": step} for item in graphics.get(key, [])]
    return tagged


def _x_extent(graphics: dict) -> tuple[float, float] | None:
    xs: list[float] = []
    for p in graphics.get("points", []):
        xs.append(p["x"])
    for t in graphics.get("texts", []):
        xs.append(t["x"])
    for r in graphics.get("rects", []):
        cx = r["center"]["x"]
        xs.extend((cx - r["width"] / 2, cx + r["width"] / 2))
    for c in graphics.get("circles", []):
        cx = c["center"]["x"]
        xs.extend((cx - c["radius"], cx + c["radius"]))
    for line in graphics.get("lines", []):
        xs.extend(p["x"] for p in line["points"])
    if not xs:
        return None
    return min(xs), max(xs)


def _shift_x(graphics: dict, dx: float) -> dict:
    shifted = empty_graphics()
    shifted["points"] = [{**p, "x": p["x"] + dx} for p in graphics.get("points", [])]
    shifted["texts"] = [{**t, "x": t["x"] + dx} for t in graphics.get("texts", [])]
    shifted["rects"] = [
        {**r, "center": {"x": r["center"]["x"] + dx, "y": r["center"]["y"]}}
        for r in graphics.get("rects", [])
    ]
    shifted["circles"] = [
        {**c, "center": {"x": c["center"]["x"] + dx, "y": c["center"]["y"]}}
        for c in graphics.get("circles", [])
    ]
    shifted["lines"] = [
        {**line, "points": [{**p, "x": p["x"] + dx} for p in line["points"]]}
        for line in graphics.get("lines", [])
    ]
    return shifted


def stack_graphics_horizontally(
    graphics: list[dict],
    titles: list[str] | None = None,
    gap: float = 1.0,
) -> dict:
    """Lay several graphics objects side by side, left to right.

    Each panel is shifted so its left edge starts *gap* units after the
    previous panel's right edge.  Titles become texts above each panel.
    """
    stacked: list[dict] = []
    cursor = 0.0
    for i, g in enumerate(graphics):
        extent = _x_extent(g)
        if extent is None:
            extent = (0.0, 0.0)
        dx = cursor - extent[0]
        panel = _shift_x(g, dx)
        if titles and i < len(titles):
            panel["texts"].append({"x": cursor, "y": 0.0, "text": titles[i]})
        stacked.append(panel)
        cursor += (extent[1] - extent[0]) + gap
    return combine_graphics(stacked)


def get_color_from_string(text: str, alpha: float = 1.0) -> str:
    """Stable pseudo-random HSL color for an identifier."""
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"hsl({abs(h) % 360}, 70%, 50%, {alpha})"
