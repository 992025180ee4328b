"""Structured JSONL event logging for scrape runs."""
import json
import logging
import os
import re
import time

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def _safe_name(target: str) -> str:
    name = re.sub(r"^https?://", "", target or "")
    name = _UNSAFE_CHARS.sub("_", name).strip("_")
    return name[:80] or "target"


class ScrapeEventLogger:
    """Writes one JSON line per controller event to a per-run JSONL file.

    All logging is best-effort; methods never raise exceptions.
    Supports context-manager protocol for automatic close.
    """

    def __init__(self, run_id: str, target: str, log_dir: str = "data/logs/scrape_events"):
        self._run_id = run_id
        self._target = target
        self._f = None
        self.path = ""
        try:
            os.makedirs(log_dir, exist_ok=True)
            self.path = os.path.join(log_dir, f"{_safe_name(target)}_{run_id}.jsonl")
            self._f = open(self.path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"ScrapeEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self._run_id
            event["target"] = self._target
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"ScrapeEventLogger: write failed: {e}")

    def log_attempt_start(self, attempt: int, url: str):
        self._write({
            "event": "attempt_start",
            "attempt": attempt,
            "url": url,
        })

    def log_content_wait(self, attempt: int, selector: str | None, waited: float):
        self._write({
            "event": "content_wait",
            "attempt": attempt,
            "selector": selector,
            "found": selector is not None,
            "waited": round(waited, 2),
        })

    def log_scroll_step(self, attempt: int, step: int, containers: int, height: int,
                        stalled: bool):
        self._write({
            "event": "scroll_step",
            "attempt": attempt,
            "step": step,
            "containers": containers,
            "height": height,
            "stalled": stalled,
        })

    def log_attempt_result(self, attempt: int, outcome: str, total_seen: int = 0,
                           accepted: int = 0, recent: int = 0, error: str | None = None):
        """Log how one attempt ended.

        Valid ``outcome`` values:
        - ``accepted``: batch returned to the caller
        - ``retry``: batch had no recent posts, another attempt follows
        - ``error``: navigation or content wait failed
        """
        self._write({
            "event": "attempt_result",
            "attempt": attempt,
            "outcome": outcome,
            "total_seen": total_seen,
            "accepted": accepted,
            "recent": recent,
            "error": error,
        })

    def log_scrape_end(self, success: bool, attempts: int, tweets: int, duration: float,
                       error: str | None = None):
        self._write({
            "event": "scrape_end",
            "success": success,
            "attempts": attempts,
            "tweets": tweets,
            "duration": round(duration, 2),
            "error": error,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
