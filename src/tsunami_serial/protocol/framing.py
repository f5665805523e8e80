"""Message frame builder and validator for the Tsunami serial protocol.

Frame layout::

    +------+------+--------+---------+------------------+------+
    | SOM1 | SOM2 | Length | Kind    |     Payload      | EOM  |
    | 0xF0 | 0xAA | 1 byte | 1 byte  |  variable length | 0x55 |
    +------+------+--------+---------+------------------+------+

- Length: total number of bytes in the frame, markers and EOM included
- Kind: command code (host to device) or response code (device to host)
- Multi-byte fields inside the payload are little-endian
"""

from __future__ import annotations

from dataclasses import dataclass

SOM1 = 0xF0
SOM2 = 0xAA
EOM = 0x55

HEADER_SIZE = 3  # SOM1 + SOM2 + length
MAX_MESSAGE_LEN = 32
MIN_MESSAGE_LEN = 5  # header + kind + EOM
MAX_PAYLOAD_LEN = MAX_MESSAGE_LEN - HEADER_SIZE - 1  # kind byte included


@dataclass
class Frame:
    """A validated protocol frame.

    ``kind`` is the first payload byte; ``payload`` holds the bytes after it.
    """

    kind: int
    payload: bytes = b""

    @property
    def body(self) -> bytes:
        """Kind byte followed by the payload, as carried on the wire."""
        return bytes([self.kind]) + self.payload

    def __repr__(self) -> str:
        return (
            f"Frame(kind=0x{self.kind:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def build_frame(kind: int, payload: bytes = b"") -> bytes:
    """Build a complete frame around a kind byte and its fields.

    Args:
        kind: Single-byte command code.
        payload: Already-encoded fields following the command code.

    Returns:
        The frame bytes, ready to write to the transport.
    """
    if not 0 <= kind <= 0xFF:
        raise ValueError(f"Frame kind must be 0-255, got {kind}")
    length = HEADER_SIZE + 1 + len(payload) + 1
    if length > MAX_MESSAGE_LEN:
        raise ValueError(
            f"Frame length {length} exceeds maximum of {MAX_MESSAGE_LEN}"
        )
    return bytes([SOM1, SOM2, length, kind]) + payload + bytes([EOM])


def parse_frame(data: bytes) -> Frame | None:
    """Validate a single complete frame held in ``data``.

    This is for callers that already have one whole frame in hand. Streams
    should go through :class:`~tsunami_serial.protocol.reframer.Reframer`.

    Returns:
        A ``Frame``, or ``None`` if the markers or length do not check out.
    """
    if len(data) < MIN_MESSAGE_LEN:
        return None
    if data[0] != SOM1 or data[1] != SOM2:
        return None

    length = data[2]
    if not MIN_MESSAGE_LEN <= length <= MAX_MESSAGE_LEN:
        return None
    if len(data) != length or data[-1] != EOM:
        return None

    return Frame(kind=data[3], payload=bytes(data[4:-1]))
