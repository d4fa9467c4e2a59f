"""Line-oriented reader over an asyncio byte stream."""

from __future__ import annotations

import asyncio

from ..errors import StreamReadError

__all__ = ["LineReader"]


class LineReader:
    """Read complete text lines from an ``asyncio.StreamReader``.

    - Line terminators (``\\n`` and a preceding ``\\r``) are stripped
    - Bytes are decoded as UTF-8 with replacement
    - Lines longer than the stream's buffer limit are read piecewise, so
      line length never stops the stream from being drained
    - With ``max_line_bytes`` set, only that many bytes of a line are kept;
      the rest is read and discarded
    - A trailing unterminated fragment marks end-of-stream and is dropped,
      the same way a buffered ``lines()`` iterator ends on EOF
    - I/O failures raise ``StreamReadError``

    Example:
        reader = LineReader(process.stdout, name="stdout")
        while (line := await reader.next_line()) is not None:
            handle(line)
    """

    def __init__(
        self,
        stream: asyncio.StreamReader,
        name: str = "stream",
        max_line_bytes: int | None = None,
    ) -> None:
        self._stream = stream
        self.name = name
        self.max_line_bytes = max_line_bytes
        self.closed = False

    async def next_line(self) -> str | None:
        """Return the next complete line, or None once the stream has ended."""
        if self.closed:
            return None

        line = bytearray()
        while True:
            try:
                piece, complete = await self._read_piece()
            except asyncio.IncompleteReadError:
                self.closed = True
                return None
            except StreamReadError:
                self.closed = True
                raise

            if complete:
                piece = piece[:-1]
            if self.max_line_bytes is None:
                line += piece
            elif len(line) < self.max_line_bytes:
                line += piece[: self.max_line_bytes - len(line)]
            if complete:
                break

        return bytes(line).rstrip(b"\r").decode("utf-8", errors="replace")

    async def _read_piece(self) -> tuple[bytes, bool]:
        """Return the next piece of a line and whether it ends the line."""
        try:
            try:
                return await self._stream.readuntil(b"\n"), True
            except asyncio.LimitOverrunError as e:
                # No newline within the buffer limit: take what is buffered
                return await self._stream.readexactly(e.consumed), False
        except OSError as e:
            raise StreamReadError(self.name, str(e)) from e
