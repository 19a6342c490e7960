"""Incremental decoder for the event-stream response body.

Hidden design decisions:
- Line-based framing and the `data:` field prefix
- Buffering of partial lines across network fragments
- UTF-8 decoding of characters split across byte fragments
- The policy for an unterminated trailing record (discarded)
"""

import codecs
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

DATA_FIELD = "data:"


class SSEDecoder:
    """Turns arbitrarily fragmented stream input into complete data records.

    A record is emitted only once its terminating line break has been seen,
    so the output is identical however the input happens to be split.

    Usage:
        decoder = SSEDecoder()
        async for record in decoder.decode(response.aiter_bytes()):
            chunk = parse_chunk(record)
    """

    def __init__(self, debug_callback: Any | None = None):
        """Initialize the decoder.

        Args:
            debug_callback: Optional callable(level, component, message)
        """
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._debug_callback = debug_callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Decoder", message)

    @property
    def pending(self) -> str:
        """Buffered input not yet terminated by a line break."""
        return self._buffer

    def feed(self, fragment: bytes | str) -> list[str]:
        """Buffer a fragment and return the records it completes.

        Args:
            fragment: Raw bytes or already-decoded text from the stream

        Returns:
            Payloads of every data record completed by this fragment, in order
        """
        if isinstance(fragment, bytes):
            text = self._utf8.decode(fragment)
        else:
            text = fragment
        if not text:
            return []

        self._buffer += text
        if "\n" not in text:
            return []

        *lines, self._buffer = self._buffer.split("\n")
        records = []
        for line in lines:
            payload = self._extract_data(line)
            if payload is not None:
                records.append(payload)
        return records

    def _extract_data(self, line: str) -> str | None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_FIELD):
            # Blank separators, comments and other SSE fields carry no payload
            if line and not line.startswith(":"):
                self._debug("debug", f"Ignoring non-data line: {line[:80]}")
            return None

        payload = line[len(DATA_FIELD):]
        if payload.startswith(" "):
            payload = payload[1:]
        return payload

    def finish(self) -> None:
        """Signal end of stream, discarding any unterminated record."""
        leftover = self._buffer + self._utf8.decode(b"", final=True)
        if leftover.strip():
            self._debug(
                "warning",
                f"Discarding {len(leftover)} chars of unterminated input at end of stream"
            )
        self._buffer = ""
        self._utf8.reset()

    async def decode(
        self,
        fragments: AsyncIterable[bytes | str],
    ) -> AsyncIterator[str]:
        """Lazily decode a fragment stream into data records.

        Suspends only while awaiting the next fragment.

        Args:
            fragments: Async iterable of raw stream fragments

        Yields:
            Record payloads in arrival order
        """
        async for fragment in fragments:
            for record in self.feed(fragment):
                yield record
        self.finish()


def decode_all(fragments: list[bytes | str]) -> list[str]:
    """Decode a fully buffered body into records.

    The synchronous counterpart of SSEDecoder.decode, for bodies that are
    already in memory. A trailing record without a line break is dropped.

    Args:
        fragments: Body fragments in arrival order

    Returns:
        The payload of every complete data record
    """
    decoder = SSEDecoder()
    records: list[str] = []
    for fragment in fragments:
        records.extend(decoder.feed(fragment))
    decoder.finish()
    return records
