"""The worker result envelope: exactly one JSON document on stdout."""
import json

from ..engine.errors import EnvelopeParseError
from ..models import ScrapeResult


def encode_envelope(result: ScrapeResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False)


def parse_envelope(raw: str | bytes) -> ScrapeResult:
    """Parse worker output as exactly one envelope.

    Raises EnvelopeParseError on empty output, malformed or trailing JSON,
    and documents that do not have the envelope shape.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EnvelopeParseError(f"Worker output is not UTF-8: {e}") from e
    text = raw.strip()
    if not text:
        raise EnvelopeParseError("Worker produced no output")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise EnvelopeParseError(f"Failed to parse worker output: {e}") from e
    try:
        return ScrapeResult.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise EnvelopeParseError(f"Worker output is not a valid envelope: {e}") from e
