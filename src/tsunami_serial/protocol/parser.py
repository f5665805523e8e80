"""Response parsing for device messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .framing import Frame, MAX_PAYLOAD_LEN

VERSION_STRING_LEN = 23  # 22 characters + terminator


class Response(IntEnum):
    """Device-to-host response codes."""

    VERSION_STRING = 129
    SYSTEM_INFO = 130
    STATUS = 131
    TRACK_REPORT = 132


@dataclass
class VersionString:
    """Parsed VersionString (129) response."""

    version: str
    raw: bytes  # VERSION_STRING_LEN bytes, last one always zero

    def __repr__(self) -> str:
        return f"VersionString(version={self.version!r})"


@dataclass
class SystemInfo:
    """Parsed SystemInfo (130) response."""

    num_voices: int
    num_tracks: int


@dataclass
class TrackReport:
    """Parsed TrackReport (132) response.

    ``track`` is already converted to the 1-based track number used by the
    host API.
    """

    track: int
    voice: int
    started: bool


@dataclass
class Unrecognized:
    """A response kind the host does not act on."""

    kind: int


Event = Union[VersionString, SystemInfo, TrackReport, Unrecognized]


def _body(frame: Frame) -> bytes:
    # kind byte at index 0, zero fill stands in for bytes the device did not send
    return frame.body.ljust(MAX_PAYLOAD_LEN, b"\x00")


def parse_version_string(frame: Frame) -> VersionString | None:
    """Parse a VersionString response.

    Payload bytes 1-22 hold the version characters. The text stops at the
    first NUL and surrounding whitespace is trimmed.
    """
    if frame.kind != Response.VERSION_STRING:
        return None

    body = _body(frame)
    raw = body[1:VERSION_STRING_LEN] + b"\x00"
    text = raw.split(b"\x00")[0].decode("ascii", errors="replace").strip()
    return VersionString(version=text, raw=raw)


def parse_system_info(frame: Frame) -> SystemInfo | None:
    """Parse a SystemInfo response: voice count, then LE16 track count."""
    if frame.kind != Response.SYSTEM_INFO:
        return None

    body = _body(frame)
    return SystemInfo(
        num_voices=body[1],
        num_tracks=int.from_bytes(body[2:4], "little"),
    )


def parse_track_report(frame: Frame) -> TrackReport | None:
    """Parse a TrackReport response.

    The device reports zero-based track indices; the returned track number
    is that index plus one.
    """
    if frame.kind != Response.TRACK_REPORT:
        return None

    body = _body(frame)
    index = int.from_bytes(body[1:3], "little")
    return TrackReport(
        track=(index + 1) & 0xFFFF,
        voice=body[3],
        started=body[4] != 0,
    )


def parse_response(frame: Frame) -> Event:
    """Auto-dispatch a frame to the appropriate response parser.

    Returns the parsed event, or ``Unrecognized`` for kinds with no parser
    (including STATUS).
    """
    parsers = {
        Response.VERSION_STRING: parse_version_string,
        Response.SYSTEM_INFO: parse_system_info,
        Response.TRACK_REPORT: parse_track_report,
    }
    parser = parsers.get(frame.kind)
    if parser:
        result = parser(frame)
        if result is not None:
            return result
    return Unrecognized(kind=frame.kind)
