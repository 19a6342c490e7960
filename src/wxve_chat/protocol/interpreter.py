"""Maps decoded stream records to typed chunk variants.

Hidden design decisions:
- JSON parsing and schema validation of each record
- How unknown chunk types and malformed payloads are reported
"""

import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError, UnknownChunkTypeError
from .models import CHUNK_TYPES, StreamChunk

_chunk_adapter: TypeAdapter[StreamChunk] = TypeAdapter(StreamChunk)


def parse_chunk(record: str) -> StreamChunk:
    """Parse one record payload into a chunk variant.

    Pure with respect to the record: no state is carried between calls.

    Args:
        record: JSON payload of a single data record

    Returns:
        The matching StreamChunk variant

    Raises:
        UnknownChunkTypeError: If the `type` discriminator is not recognized
        DecodeError: If the payload is not a JSON object or fields are missing
    """
    try:
        payload = json.loads(record)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}", record=record) from e

    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(payload).__name__}",
            record=record
        )

    chunk_type = payload.get("type")
    if chunk_type is None:
        raise DecodeError("Missing 'type' field", record=record)
    if not isinstance(chunk_type, str) or chunk_type not in CHUNK_TYPES:
        raise UnknownChunkTypeError(f"Unknown chunk type: {chunk_type!r}", record=record)

    try:
        return _chunk_adapter.validate_python(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"][1:]) or "payload"
            for err in e.errors()
        )
        raise DecodeError(f"Invalid '{chunk_type}' chunk ({fields})", record=record) from e


async def interpret(
    records: AsyncIterable[str],
    debug_callback: Any | None = None,
) -> AsyncIterator[StreamChunk]:
    """Interpret a record stream, skipping records that fail to parse.

    Args:
        records: Async iterable of record payloads
        debug_callback: Optional callable(level, component, message)

    Yields:
        Chunk variants in record order
    """
    async for record in records:
        try:
            yield parse_chunk(record)
        except DecodeError as e:
            if debug_callback:
                debug_callback("warning", "Interpreter", f"Skipping record: {e}")
