"""Byte-stream reframer for inbound device messages.

The device writes frames onto the serial line whenever it likes, and reads
hand back whatever happens to be buffered. The reframer consumes that
stream one byte at a time and yields each frame once its EOM byte arrives.

Parser states::

    Idle --SOM1--> AwaitingSom2 --SOM2--> AwaitingLength --LEN--> ReadingPayload
      ^                                                              |
      +---------------------- EOM <-- AwaitingEom <------------------+

Any unexpected byte after SOM1 resets the parser to ``Idle`` and reports a
framing error. Bytes seen while idle that are not SOM1 are dropped, which is
how the parser resynchronises after noise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from ..exceptions import BadFramingError
from .framing import EOM, MAX_MESSAGE_LEN, MIN_MESSAGE_LEN, SOM1, SOM2, Frame

logger = logging.getLogger(__name__)

EXPECTED_SOM2 = "expected SOM2"
LENGTH_OUT_OF_RANGE = "length out of range"
EXPECTED_EOM = "expected EOM"


@dataclass
class Idle:
    """Scanning for SOM1."""


@dataclass
class AwaitingSom2:
    """SOM1 seen."""


@dataclass
class AwaitingLength:
    """Both start markers seen."""


@dataclass
class ReadingPayload:
    """Collecting message bytes.

    ``expected_len`` is the number of frame bytes that precede EOM.
    """

    expected_len: int
    buffer: bytearray = field(default_factory=bytearray)

    @property
    def count(self) -> int:
        """Frame bytes consumed so far, markers and length included."""
        return 3 + len(self.buffer)


@dataclass
class AwaitingEom:
    """Message complete, waiting for the terminator."""

    buffer: bytearray


ParserState = Union[Idle, AwaitingSom2, AwaitingLength, ReadingPayload, AwaitingEom]


class Reframer:
    """Turns a chunked byte stream into validated frames.

    Usage::

        reframer = Reframer()
        for frame in reframer.feed(chunk):
            handle(frame)

    Partial frames are carried over between calls to :meth:`feed`, so the
    stream may be split at any byte boundary.
    """

    def __init__(
        self,
        on_error: Optional[Callable[[BadFramingError], None]] = None,
    ) -> None:
        self.on_error = on_error
        self.error_count = 0
        self.last_error: BadFramingError | None = None
        self._state: ParserState = Idle()

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def idle(self) -> bool:
        return isinstance(self._state, Idle)

    def reset(self) -> None:
        """Drop any partial frame and go back to scanning for SOM1."""
        self._state = Idle()

    def feed(self, data: bytes) -> list[Frame]:
        """Parse a chunk of stream data.

        Args:
            data: Bytes read from the transport; may be empty.

        Returns:
            Every frame completed by this chunk, in arrival order.
        """
        frames: list[Frame] = []
        for byte in data:
            frame = self.feed_byte(byte)
            if frame is not None:
                frames.append(frame)
        return frames

    def feed_byte(self, byte: int) -> Frame | None:
        """Advance the parser by one byte.

        Returns:
            The completed ``Frame`` when ``byte`` was its EOM, else ``None``.
        """
        state = self._state

        if isinstance(state, Idle):
            if byte == SOM1:
                self._state = AwaitingSom2()
            return None

        if isinstance(state, AwaitingSom2):
            if byte == SOM2:
                self._state = AwaitingLength()
            else:
                self._fail(EXPECTED_SOM2, byte)
            return None

        if isinstance(state, AwaitingLength):
            if MIN_MESSAGE_LEN <= byte <= MAX_MESSAGE_LEN:
                self._state = ReadingPayload(expected_len=byte - 1)
            else:
                self._fail(LENGTH_OUT_OF_RANGE, byte)
            return None

        if isinstance(state, ReadingPayload):
            state.buffer.append(byte)
            if state.count == state.expected_len:
                self._state = AwaitingEom(buffer=state.buffer)
            return None

        # AwaitingEom
        if byte != EOM:
            self._fail(EXPECTED_EOM, byte)
            return None

        self._state = Idle()
        frame = Frame(kind=state.buffer[0], payload=bytes(state.buffer[1:]))
        logger.debug("RX %r", frame)
        return frame

    def _fail(self, reason: str, byte: int) -> None:
        self._state = Idle()
        error = BadFramingError(reason)
        self.error_count += 1
        self.last_error = error
        logger.warning("Framing error: %s (got 0x%02X)", reason, byte)
        if self.on_error is not None:
            self.on_error(error)
