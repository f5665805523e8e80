"""Command codes and outbound frame builders.

Every command has a fixed total length and field order. Gain and
samplerate offset are signed 16-bit, track numbers and durations are
unsigned 16-bit, all little-endian.
"""

from __future__ import annotations

from enum import IntEnum, IntFlag

from .framing import build_frame

OUTPUT_MASK = 0x07
LOCK_FLAG = 0x01


class Command(IntEnum):
    """Host-to-device command codes."""

    GET_VERSION = 1
    GET_SYS_INFO = 2
    TRACK_CONTROL = 3
    STOP_ALL = 4
    MASTER_VOLUME = 5
    TRACK_VOLUME = 8
    TRACK_FADE = 10
    RESUME_ALL_SYNC = 11
    SAMPLERATE_OFFSET = 12
    SET_REPORTING = 13
    SET_TRIGGER_BANK = 14
    SET_INPUT_MIX = 15
    SET_MIDI_BANK = 16


class TrackControl(IntEnum):
    """Subcodes carried by a TRACK_CONTROL command."""

    PLAY_SOLO = 0
    PLAY_POLY = 1
    PAUSE = 2
    RESUME = 3
    STOP = 4
    LOOP_ON = 5
    LOOP_OFF = 6
    LOAD = 7


class InputMix(IntFlag):
    """Output pairs the audio input can be mixed into."""

    OUT1 = 0x01
    OUT2 = 0x02
    OUT3 = 0x04
    OUT4 = 0x08


def _u8(name: str, value: int) -> bytes:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be 0-255, got {value}")
    return bytes([value])


def _u16(name: str, value: int) -> bytes:
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{name} must be 0-65535, got {value}")
    return value.to_bytes(2, "little")


def _i16(name: str, value: int) -> bytes:
    if not -0x8000 <= value <= 0x7FFF:
        raise ValueError(f"{name} must be -32768 to 32767, got {value}")
    return value.to_bytes(2, "little", signed=True)


def _output(out: int) -> bytes:
    return bytes([out & OUTPUT_MASK])


def build_command(command: Command, payload: bytes = b"") -> bytes:
    """Build a frame for a command and its encoded fields."""
    return build_frame(command.value, payload)


def build_get_version() -> bytes:
    """Build a request for the firmware version string."""
    return build_command(Command.GET_VERSION)


def build_get_system_info() -> bytes:
    """Build a request for the voice and track counts."""
    return build_command(Command.GET_SYS_INFO)


def build_stop_all() -> bytes:
    return build_command(Command.STOP_ALL)


def build_resume_all_sync() -> bytes:
    """Build a command resuming every paused track in the same audio buffer."""
    return build_command(Command.RESUME_ALL_SYNC)


def build_master_volume(out: int, gain: int) -> bytes:
    """Build a MasterVolume command.

    Args:
        out: Stereo output, masked to 3 bits.
        gain: Output gain in dB, nominally -70 to +4.
    """
    return build_command(Command.MASTER_VOLUME, _output(out) + _i16("Gain", gain))


def build_set_reporting(enable: bool) -> bytes:
    """Build a command enabling or disabling track start/stop reports."""
    return build_command(Command.SET_REPORTING, bytes([1 if enable else 0]))


def build_set_trigger_bank(bank: int) -> bytes:
    return build_command(Command.SET_TRIGGER_BANK, _u8("Trigger bank", bank))


def build_set_input_mix(mix: int) -> bytes:
    """Build a command routing the audio input to the given output pairs.

    Args:
        mix: Bitmask of :class:`InputMix` flags.
    """
    return build_command(Command.SET_INPUT_MIX, _u8("Input mix", int(mix)))


def build_set_midi_bank(bank: int) -> bytes:
    return build_command(Command.SET_MIDI_BANK, _u8("MIDI bank", bank))


def build_track_volume(track: int, gain: int) -> bytes:
    """Build a TrackVolume command.

    Args:
        track: 1-based track number.
        gain: Track gain in dB, nominally -70 to +10.
    """
    payload = _u16("Track", track) + _i16("Gain", gain)
    return build_command(Command.TRACK_VOLUME, payload)


def build_samplerate_offset(offset: int) -> bytes:
    """Build a SamplerateOffset command.

    Args:
        offset: Playback speed offset, -32768 (1/2x) to 32767 (2x). The
            output byte preceding it is reserved and always sent as zero.
    """
    return build_command(Command.SAMPLERATE_OFFSET, b"\x00" + _i16("Offset", offset))


def build_track_control(
    track: int,
    code: TrackControl,
    out: int = 0,
    lock: bool = False,
) -> bytes:
    """Build a TrackControl command.

    Args:
        track: 1-based track number.
        code: Track control subcode.
        out: Stereo output, masked to 3 bits.
        lock: Exempt the track from voice stealing.
    """
    flags = LOCK_FLAG if lock else 0
    payload = (
        bytes([TrackControl(code).value])
        + _u16("Track", track)
        + _output(out)
        + bytes([flags])
    )
    return build_command(Command.TRACK_CONTROL, payload)


def build_track_play_solo(track: int, out: int = 0, lock: bool = False) -> bytes:
    return build_track_control(track, TrackControl.PLAY_SOLO, out, lock)


def build_track_play_poly(track: int, out: int = 0, lock: bool = False) -> bytes:
    return build_track_control(track, TrackControl.PLAY_POLY, out, lock)


def build_track_load(track: int, out: int = 0, lock: bool = False) -> bytes:
    return build_track_control(track, TrackControl.LOAD, out, lock)


def build_track_stop(track: int) -> bytes:
    return build_track_control(track, TrackControl.STOP)


def build_track_pause(track: int) -> bytes:
    return build_track_control(track, TrackControl.PAUSE)


def build_track_resume(track: int) -> bytes:
    return build_track_control(track, TrackControl.RESUME)


def build_track_loop(track: int, enable: bool) -> bytes:
    code = TrackControl.LOOP_ON if enable else TrackControl.LOOP_OFF
    return build_track_control(track, code)


def build_track_fade(
    track: int, gain: int, duration_ms: int, stop: bool = False
) -> bytes:
    """Build a TrackFade command.

    Args:
        track: 1-based track number.
        gain: Target gain in dB.
        duration_ms: Fade time in milliseconds (0-65535).
        stop: Stop the track once the fade completes.
    """
    payload = (
        _u16("Track", track)
        + _i16("Gain", gain)
        + _u16("Fade duration", duration_ms)
        + bytes([1 if stop else 0])
    )
    return build_command(Command.TRACK_FADE, payload)
