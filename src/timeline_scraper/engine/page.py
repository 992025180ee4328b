"""Page extraction engine: all rendered containers in, ordered batch out.

Pure function of its inputs. No network, no sleeping; the caller injects
``now`` so the recency checks are deterministic.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime

from ..config import ExtractionPolicy
from ..container import Container
from ..filtering.exclusion import PINNED, exclusion_reason
from ..filtering.recency import recent_count
from ..models import Post, iso_utc, utc_now
from .errors import ItemExtractionError
from .fields import extract_post, is_pinned
from .strategies import DEFAULT_STRATEGIES, FieldStrategy

log = logging.getLogger(__name__)


@dataclass
class ExtractionBatch:
    posts: list[Post] = field(default_factory=list)
    total_seen: int = 0
    recent_count: int = 0
    excluded: dict[str, int] = field(default_factory=dict)
    failed: int = 0

    def stats(self) -> dict:
        return {
            "totalContainers": self.total_seen,
            "accepted": len(self.posts),
            "recentCount": self.recent_count,
            "excluded": dict(self.excluded),
            "failedItems": self.failed,
        }


def _position(container: Container) -> float:
    try:
        pos = float(container.vertical_position())
    except Exception as e:
        log.debug(f"    vertical_position failed: {e}")
        return math.inf
    return pos if not math.isnan(pos) else math.inf


def sort_by_position(containers) -> list:
    """Top-to-bottom on screen. Unknown positions go last, in DOM order."""
    keyed = [(_position(c), i, c) for i, c in enumerate(containers)]
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [c for _, _, c in keyed]


def extract_batch(containers, max_count: int, policy: ExtractionPolicy, *,
                  strategies: dict[str, tuple[FieldStrategy, ...]] = DEFAULT_STRATEGIES,
                  now: datetime | None = None) -> ExtractionBatch:
    """Extract up to max_count accepted posts, numbered 1..n.

    Per container: pinned check, field extraction, then the exclusion policy.
    A container that raises while being read is skipped and counted in
    ``failed``.
    """
    now = now or utc_now()
    extracted_at = iso_utc(now)
    ordered = sort_by_position(containers)
    batch = ExtractionBatch(total_seen=len(ordered))
    seen_permalinks: set[str] = set()

    for i, container in enumerate(ordered):
        if len(batch.posts) >= max_count:
            break
        try:
            if policy.exclude_pinned and is_pinned(container, policy.pinned_markers, strategies):
                batch.excluded[PINNED] = batch.excluded.get(PINNED, 0) + 1
                log.debug(f"    [{i + 1}] skipped: pinned")
                continue
            post = extract_post(container, strategies, extracted_at=extracted_at)
        except ItemExtractionError as e:
            batch.failed += 1
            log.debug(f"    [{i + 1}] skipped: {e}")
            continue
        except Exception as e:
            batch.failed += 1
            log.debug(f"    [{i + 1}] skipped: pinned check failed: {e}")
            continue

        reason = exclusion_reason(post, policy, seen_permalinks, now)
        if reason:
            batch.excluded[reason] = batch.excluded.get(reason, 0) + 1
            log.debug(f"    [{i + 1}] skipped: {reason}")
            continue

        seen_permalinks.add(post.permalink)
        batch.posts.append(replace(post, sequence_index=len(batch.posts) + 1))

    batch.recent_count = recent_count(batch.posts, policy.recent_window_days, now)
    log.info(f"  Extracted {len(batch.posts)}/{max_count} posts from {batch.total_seen} containers "
             f"(recent={batch.recent_count}, excluded={batch.excluded}, failed={batch.failed})")
    return batch
