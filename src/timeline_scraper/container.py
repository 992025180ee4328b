"""Container Protocol: the only view of the page the extraction engine gets.

The field extractor asks a container for text, attributes and element counts
by selector. It never talks to a browser, so tests can hand it synthetic
containers and the live worker hands it PlaywrightContainer.
"""
import logging
import math
from typing import Any, Protocol, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class Container(Protocol):
    """One rendered item container (one post on the timeline)."""

    def text(self, selector: str) -> str | None:
        """Rendered text of the first element matching selector, or None."""
        ...

    def attribute(self, selector: str, name: str) -> str | None:
        """Attribute value of the first element matching selector, or None."""
        ...

    def count(self, selector: str) -> int:
        """Number of descendant elements matching selector."""
        ...

    def vertical_position(self) -> float:
        """Top edge of the container on screen; math.inf if unknown."""
        ...


class PlaywrightContainer:
    """Container backed by a sync Playwright ElementHandle."""

    def __init__(self, handle: Any):
        self._handle = handle

    def text(self, selector: str) -> str | None:
        el = self._handle.query_selector(selector)
        if el is None:
            return None
        return el.inner_text()

    def attribute(self, selector: str, name: str) -> str | None:
        el = self._handle.query_selector(selector)
        if el is None:
            return None
        return el.get_attribute(name)

    def count(self, selector: str) -> int:
        return len(self._handle.query_selector_all(selector))

    def vertical_position(self) -> float:
        try:
            box = self._handle.bounding_box()
        except Exception as e:
            log.debug(f"    bounding_box failed: {e}")
            return math.inf
        if not box:
            return math.inf
        return float(box.get("y", math.inf))
