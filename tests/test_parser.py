"""Tests for response parsing."""

from tsunami_serial.protocol.framing import Frame
from tsunami_serial.protocol.parser import (
    Response,
    SystemInfo,
    TrackReport,
    Unrecognized,
    VersionString,
    parse_response,
    parse_system_info,
    parse_track_report,
    parse_version_string,
)


def test_response_enum_values():
    assert Response.VERSION_STRING == 129
    assert Response.SYSTEM_INFO == 130
    assert Response.STATUS == 131
    assert Response.TRACK_REPORT == 132


def test_parse_version_string_full():
    """22 printable characters are returned as-is."""
    text = b"Tsunami v1.10s 16Mono "
    assert len(text) == 22
    result = parse_version_string(Frame(kind=129, payload=text))
    assert result is not None
    assert result.version == "Tsunami v1.10s 16Mono"
    assert len(result.raw) == 23
    assert result.raw[-1] == 0


def test_parse_version_string_padded():
    """Text stops at the first NUL of the padding."""
    payload = b"v1.0".ljust(22, b"\x00")
    result = parse_version_string(Frame(kind=129, payload=payload))
    assert result.version == "v1.0"


def test_parse_version_string_ignores_trailing_bytes():
    """Only payload bytes 1-22 belong to the version."""
    payload = b"A" * 22 + b"XYZ"
    result = parse_version_string(Frame(kind=129, payload=payload))
    assert result.version == "A" * 22


def test_parse_system_info():
    """Voice count byte, then little-endian track count."""
    result = parse_system_info(Frame(kind=130, payload=b"\x08\x0a\x00"))
    assert result == SystemInfo(num_voices=8, num_tracks=10)


def test_parse_system_info_wide_track_count():
    result = parse_system_info(Frame(kind=130, payload=b"\x12\x00\x10"))
    assert result == SystemInfo(num_voices=18, num_tracks=4096)


def test_parse_track_report_is_one_based():
    """The device reports zero-based indices; the host sees track numbers."""
    result = parse_track_report(Frame(kind=132, payload=b"\x04\x00\x02\x01"))
    assert result == TrackReport(track=5, voice=2, started=True)


def test_parse_track_report_stop():
    result = parse_track_report(Frame(kind=132, payload=b"\x00\x01\x00\x00"))
    assert result == TrackReport(track=257, voice=0, started=False)


def test_parse_short_payload_is_zero_filled():
    """Bytes the device left out decode as zero rather than raising."""
    result = parse_track_report(Frame(kind=132, payload=b"\x04"))
    assert result == TrackReport(track=5, voice=0, started=False)


def test_parser_rejects_other_kinds():
    frame = Frame(kind=130, payload=b"\x08\x0a\x00")
    assert parse_version_string(frame) is None
    assert parse_track_report(frame) is None


def test_parse_response_dispatch():
    """Auto-dispatch picks the parser for the frame kind."""
    assert isinstance(parse_response(Frame(kind=129, payload=b"v1")), VersionString)
    assert isinstance(parse_response(Frame(kind=130, payload=b"\x08")), SystemInfo)
    assert isinstance(
        parse_response(Frame(kind=132, payload=b"\x00\x00\x00\x01")), TrackReport
    )


def test_parse_response_unrecognized():
    """Status and unknown kinds come back as Unrecognized."""
    assert parse_response(Frame(kind=131, payload=b"\x00")) == Unrecognized(kind=131)
    assert parse_response(Frame(kind=0x42)) == Unrecognized(kind=0x42)
