"""Incremental SSE framing for the provider event stream.

The provider (``streamGenerateContent?alt=sse``) sends events as

    data: {"candidates": [...]}<blank line>

with LF, CR or CRLF line endings. Network reads split those events at
arbitrary points, so the framer keeps a buffer holding only the trailing
incomplete line plus the data lines of the event in progress, and emits a
payload each time a blank line closes an event.
"""

from __future__ import annotations

import codecs
import logging
import re
from typing import Optional

logger = logging.getLogger("gembridge")

_LINE_END = re.compile(r"\r\n|\r|\n")


class StreamFramer:
    """Turns arbitrarily split stream fragments into event payloads.

    Output depends only on the concatenated input, never on where it was
    split: feeding an event sequence in one call or in many yields the same
    payloads in the same order.
    """

    def __init__(self) -> None:
        self._buffer = ""
        # Offset in _buffer where the next line-end search starts. Everything
        # before it is known to contain no line terminator.
        self._scan_from = 0
        self._data_lines: list[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.discarded_chars = 0

    def feed(self, fragment: bytes | str) -> list[str]:
        """Append a fragment and return the payloads of all completed events."""
        if isinstance(fragment, (bytes, bytearray)):
            fragment = self._decoder.decode(bytes(fragment))
        if not fragment:
            return []

        buf = self._buffer + fragment
        payloads: list[str] = []
        line_start = 0
        scan = self._scan_from
        while True:
            match = _LINE_END.search(buf, scan)
            if match is None:
                break
            if match.group() == "\r" and match.end() == len(buf):
                # A lone trailing CR may be the first half of a CRLF
                break
            payload = self._process_line(buf[line_start:match.start()])
            if payload is not None:
                payloads.append(payload)
            line_start = scan = match.end()

        self._buffer = buf[line_start:]
        self._scan_from = len(self._buffer) - 1 if self._buffer.endswith("\r") else len(self._buffer)
        return payloads

    def flush(self) -> list[str]:
        """Handle end-of-stream.

        An event whose data lines were never closed by a blank line is still
        emitted. Any other leftover text is discarded and reported; it is
        never forwarded as a payload.
        """
        rest = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        self._scan_from = 0
        payloads: list[str] = []

        if rest.endswith("\r"):
            # No LF can follow any more, so the CR ends the line
            payload = self._process_line(rest[:-1])
            if payload is not None:
                payloads.append(payload)
            rest = ""

        if rest.startswith("data:"):
            self._process_line(rest)
        elif rest and not rest.startswith(":"):
            self.discarded_chars += len(rest)
            logger.warning("Invalid data at end of stream, discarded: %r", rest[:200])

        if self._data_lines:
            payload = "\n".join(self._data_lines)
            self._data_lines = []
            logger.warning("Stream ended inside an unterminated event (%d chars)", len(payload))
            payloads.append(payload)
        return payloads

    def _process_line(self, line: str) -> Optional[str]:
        if not line:
            if not self._data_lines:
                return None
            payload = "\n".join(self._data_lines)
            self._data_lines = []
            return payload

        if line.startswith(":"):
            # comment / keep-alive
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data_lines.append(value)
        else:
            logger.debug("Ignoring SSE field %r", name)
        return None
