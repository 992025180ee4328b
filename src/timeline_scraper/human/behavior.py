"""Human-like scrolling for timeline pages.

A timeline only loads more posts when the viewport approaches its bottom.
Instead of jumping with ``window.scrollBy`` the worker drifts the pointer
into the feed and scrolls with a decelerating burst of wheel events, which
looks like a trackpad flick.
"""
import logging
import math
import random
import time

log = logging.getLogger(__name__)

_DEFAULT_VIEWPORT = {"width": 1280, "height": 800}


def _safe_float(val, default: float) -> float:
    try:
        f = float(val)
        if math.isfinite(f):
            return f
    except (TypeError, ValueError):
        pass
    return default


def _viewport(page) -> tuple[int, int]:
    vs = getattr(page, "viewport_size", None) or _DEFAULT_VIEWPORT
    try:
        width = vs.get("width")
        height = vs.get("height")
    except AttributeError:
        width = height = None
    return (
        max(100, int(_safe_float(width, _DEFAULT_VIEWPORT["width"]))),
        max(100, int(_safe_float(height, _DEFAULT_VIEWPORT["height"]))),
    )


def drift_pointer(page, steps: int = 12) -> None:
    """Move the pointer in a slight arc to a random spot over the feed column."""
    vw, vh = _viewport(page)
    to_x = random.uniform(vw * 0.35, vw * 0.65)
    to_y = random.uniform(vh * 0.35, vh * 0.65)
    from_x = random.uniform(vw * 0.2, vw * 0.8)
    from_y = random.uniform(vh * 0.2, vh * 0.8)
    bow = random.uniform(-40, 40)
    for i in range(1, steps + 1):
        t = i / steps
        # Quadratic arc: bow peaks mid-way and vanishes at the target
        x = from_x + (to_x - from_x) * t + bow * 4 * t * (1 - t)
        y = from_y + (to_y - from_y) * t
        page.mouse.move(x, y)
        time.sleep(random.uniform(0.004, 0.012))


def inertial_wheel(page, total_distance: int) -> int:
    """Scroll via decelerating burst of small wheel events.

    Returns the distance actually dispatched (signed).
    """
    total_distance = int(_safe_float(total_distance, 0))
    if total_distance == 0:
        return 0
    sign = 1 if total_distance > 0 else -1
    remaining = abs(total_distance)
    scrolled = 0
    n_events = random.randint(8, 14)

    for i in range(n_events):
        if remaining <= 0:
            break
        # Most distance goes in the first events, then the flick decays
        share = random.uniform(0.12, 0.3) * (1 - i / n_events)
        delta = max(8, int(remaining * share))
        delta = min(delta, remaining)
        page.mouse.wheel(0, sign * delta)
        remaining -= delta
        scrolled += delta
        time.sleep(random.uniform(0.008, 0.03))

    if remaining > 0:
        page.mouse.wheel(0, sign * remaining)
        scrolled += remaining

    return sign * scrolled


def human_scroll(page, viewports: float = 2.0) -> int:
    """Scroll down by roughly ``viewports`` screen heights. Returns pixels scrolled."""
    _, vh = _viewport(page)
    distance = int(vh * viewports * random.uniform(0.9, 1.1))
    if distance <= 0:
        return 0
    t0 = time.monotonic()
    drift_pointer(page)
    actual = inertial_wheel(page, distance)
    log.debug(f"    scroll {actual}px ({time.monotonic() - t0:.1f}s)")
    return actual
