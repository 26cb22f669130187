"""Turning a line of note letters into a MIDI file, and that into audio."""

from __future__ import annotations

import re
import subprocess
from os import PathLike
from pathlib import Path

import mido

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}
TICKS_PER_QUARTER = 96
VIOLIN = 40
VELOCITY = 120
DEFAULT_LEVEL = 5

_LETTER_BASE = {name: value % 12 for name, value in NOTE_MAP.items() if len(name) == 1}
_INTEGER = re.compile(r"[+-]?[0-9]+")
_MAX_DELTA = 0x0FFFFFFF
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


class MidiParseError(ValueError):
    """The note text holds something that cannot be played."""


def octave(base: int, level: int) -> int:
    """Place a pitch class in an octave (levels above 10 count as 10).

    Arithmetic wraps like an unsigned byte; a result above 127 drops an octave.
    Level 0 returns ``base`` unchanged.
    """
    base &= 0xFF
    level &= 0xFF
    if level > 10:
        level = 10
    if level == 0:
        return base
    result = (base + 12 * level) & 0xFF
    if result > 127:
        result -= 12
    return result


def note_name(note: int) -> str:
    """The name of a note's pitch class, using flats for the black keys."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    raise AssertionError("every pitch class has a name")


def parse_note(text: str) -> int:
    """Read one note such as ``C#6`` or ``Eb``; the octave defaults to 5.

    Characters other than letters A-G, ``b``, ``#`` and digits are ignored.
    """
    base = 0
    level = 0
    for char in text.replace(" ", ""):
        if char in _LETTER_BASE:
            base = _LETTER_BASE[char]
        elif char == "b":
            base = (base - 1) & 0xFF
        elif char == "#":
            base = (base + 1) & 0xFF
        elif "0" <= char <= "9":
            level = (level * 10 + ord(char) - ord("0")) & 0xFF
    if level == 0:
        level = DEFAULT_LEVEL
    return octave(base, level)


def _parse_length(chars: str) -> int:
    if not _INTEGER.fullmatch(chars):
        return 0
    return min(max(int(chars), _INT64_MIN), _INT64_MAX)


def _ticks(length: int) -> int:
    """Duration in ticks of a quarter note scaled by 2**length."""
    if length >= 0:
        factor = 1 << length if length < 32 else 0
        ticks = (TICKS_PER_QUARTER * factor) & 0xFFFFFFFF
    else:
        shift = -length
        if shift >= 32:
            raise MidiParseError(f"音长{length}超出范围")
        ticks = TICKS_PER_QUARTER // (1 << shift)
    if ticks > _MAX_DELTA:
        raise MidiParseError(f"音长{length}超出范围")
    return ticks


def _parse_track(text: str) -> list[mido.Message]:
    data = text.replace(" ", "").encode("utf-8")
    size = len(data)
    messages: list[mido.Message] = []
    delay = 0
    i = 0

    def starts_token(byte: int) -> bool:
        return ord("A") <= byte <= ord("G") or byte == ord("R")

    def is_digit(byte: int) -> bool:
        return ord("0") <= byte <= ord("9")

    while i < size:
        base = 0
        level = 0
        rest = False
        length_chars: list[str] = []
        while True:
            byte = data[i]
            if byte == ord("R"):
                rest = True
                i += 1
            elif ord("A") <= byte <= ord("G"):
                base = _LETTER_BASE[chr(byte)]
                i += 1
            elif byte == ord("b"):
                base = (base - 1) & 0xFF
                i += 1
            elif byte == ord("#"):
                base = (base + 1) & 0xFF
                i += 1
            elif is_digit(byte):
                level = (level * 10 + byte - ord("0")) & 0xFF
                i += 1
            elif byte == ord("<"):
                i += 1
                while i < size and (data[i] == ord("-") or is_digit(data[i])):
                    length_chars.append(chr(data[i]))
                    i += 1
            else:
                raise MidiParseError(f"无法解析第{i}个位置的{chr(byte)}字符")
            if i >= size or starts_token(data[i]):
                break
        length = _parse_length("".join(length_chars))
        if rest:
            delay = _ticks(length)
            continue
        if level == 0:
            level = DEFAULT_LEVEL
        note = octave(base, level) & 0x7F
        messages.append(
            mido.Message("note_on", channel=0, note=note, velocity=VELOCITY, time=delay)
        )
        messages.append(
            mido.Message("note_off", channel=0, note=note, velocity=0, time=_ticks(length))
        )
        delay = 0
    return messages


def make_midi(path: str | PathLike[str], text: str) -> None:
    """Write the notes in ``text`` as a violin MIDI file at 60 bpm.

    Each note is a letter A-G, optionally followed by ``b`` or ``#``, an
    octave number and ``<n`` to scale its length by 2**n; ``R`` is a rest.
    An existing file is left as it is.  Raises MidiParseError on bad text,
    before anything is written.
    """
    target = Path(path)
    if target.exists():
        return
    notes = _parse_track(text)
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(60), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=VIOLIN, time=0))
    track.extend(notes)
    track.append(mido.MetaMessage("end_of_track", time=0))
    midi = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    midi.save(str(target))


def render_wav(midi_path: str | PathLike[str], wav_path: str | PathLike[str]) -> None:
    """Render a MIDI file to WAV with timidity; raises if timidity fails."""
    subprocess.run(["timidity", str(midi_path), "-Ow", "-o", str(wav_path)], check=True)


def str_to_music(text: str, midi_path: str | PathLike[str]) -> str:
    """Write ``text`` as MIDI at ``midi_path`` and render it; return the WAV path."""
    make_midi(midi_path, text)
    wav_path = str(midi_path).replace(".mid", ".wav")
    render_wav(midi_path, wav_path)
    return wav_path