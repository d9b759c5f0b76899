"""Simple MIDI composing from note text, and a note listening quiz."""

from __future__ import annotations

import enum
import io
import math
import random
import re
import subprocess
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Iterator

import mido

TICKS_PER_BEAT = 960
TEMPO_BPM = 72
DEFAULT_PROGRAM = 40
INSTRUMENT = "Violin"
VELOCITY = 120

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

ANSWER_PATTERN = re.compile(r"[A-G][b|#]?[0-9]{0,2}")
QUESTIONS = 5
_BYTE = 0xFF
_UINT32 = 0xFFFFFFFF


class NoteSyntaxError(ValueError):
    """Note text that cannot be understood."""

    def __init__(self, message: str, position: int | None = None, char: str | None = None):
        super().__init__(message)
        self.position = position
        self.char = char


def note_name(note: int) -> str:
    """The pitch-class name of a MIDI note, using flats for black keys."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    return ""


def octave(base: int, level: int) -> int:
    """Place pitch class ``base`` in octave ``level`` (0 keeps it, capped at 10)."""
    base &= _BYTE
    level &= _BYTE
    if level > 10:
        level = 10
    if level == 0:
        return base
    result = (base + 12 * level) & _BYTE
    if result > 127:
        result -= 12
    return result


def _is_letter(char: str) -> bool:
    return "A" <= char <= "G"


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def parse_note(text: str) -> int:
    """The MIDI note named by text such as "C#6"; unknown characters are ignored."""
    base = 0
    level = 0
    for char in text.replace(" ", ""):
        if _is_letter(char):
            base = NOTE_MAP[char] % 12
        elif char == "b":
            base = (base - 1) & _BYTE
        elif char == "#":
            base = (base + 1) & _BYTE
        elif _is_digit(char):
            level = (level * 10 + int(char)) & _BYTE
    if level == 0:
        level = 5
    return octave(base, level)


def _length_value(digits: str) -> int:
    try:
        return int(digits)
    except ValueError:
        return 0


def _ticks(length: int) -> int:
    """Ticks of a note lasting 2**length quarter notes."""
    if length >= 0:
        factor = (1 << length) & _UINT32 if length < 32 else 0
        return (TICKS_PER_BEAT * factor) & _UINT32
    shift = -length
    divisor = 1 << shift if shift < 32 else 0
    if divisor == 0:
        raise NoteSyntaxError(f"音符长度超出范围: {length}")
    return TICKS_PER_BEAT // divisor


def _note_events(text: str) -> Iterator[tuple[int, int, int]]:
    """Yield (delay, note, duration) in ticks for each note of ``text``."""
    k = text.replace(" ", "")
    size = len(k)
    i = 0
    delay = 0
    while i < size:
        base = 0
        level = 0
        rest = False
        digits: list[str] = []
        while True:
            char = k[i]
            if char == "R":
                rest = True
                i += 1
            elif _is_letter(char):
                base = NOTE_MAP[char] % 12
                i += 1
            elif char == "b":
                base = (base - 1) & _BYTE
                i += 1
            elif char == "#":
                base = (base + 1) & _BYTE
                i += 1
            elif _is_digit(char):
                level = (level * 10 + int(char)) & _BYTE
                i += 1
            elif char == "<":
                i += 1
                while i < size and (k[i] == "-" or _is_digit(k[i])):
                    digits.append(k[i])
                    i += 1
            else:
                raise NoteSyntaxError(f"无法解析第{i}个位置的{char}字符", i, char)
            if i >= size or _is_letter(k[i]) or k[i] == "R":
                break
        ticks = _ticks(_length_value("".join(digits)))
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = 5
        yield delay, octave(base, level), ticks
        delay = 0


def build_track(text: str, program: int = DEFAULT_PROGRAM) -> mido.MidiTrack:
    """A MIDI track playing the notes written in ``text``."""
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name=INSTRUMENT, time=0))
    track.append(mido.Message("program_change", channel=0, program=program & 0x7F, time=0))
    for delay, note, duration in _note_events(text):
        key = note & 0x7F
        track.append(mido.Message("note_on", channel=0, note=key, velocity=VELOCITY, time=delay))
        track.append(mido.Message("note_off", channel=0, note=key, velocity=0, time=duration))
    track.append(mido.MetaMessage("end_of_track", time=0))
    return track


def write_midi(
    text: str, path: str | PathLike[str], program: int = DEFAULT_PROGRAM
) -> Path:
    """Write ``text`` as a MIDI file; an existing file at ``path`` is kept as is."""
    target = Path(path)
    if target.exists():
        return target
    midi = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)
    midi.tracks.append(build_track(text, program))
    midi.save(str(target))
    return target


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _power(length: float) -> int | None:
    if length <= 0:
        return None
    return _round_half_away(math.log2(length))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Write one track of a MIDI file back as note text."""
    midi = mido.MidiFile(file=io.BytesIO(data))
    if not 0 <= track_no < len(midi.tracks):
        return ""
    parts: list[str] = []
    start = 0.0
    end = 0.0
    start_note = 0
    now = 0
    for message in midi.tracks[track_no]:
        now += message.time
        if message.is_meta:
            continue
        sounding = message.type == "note_on" and message.velocity > 0
        if sounding:
            start = float(now)
            start_note = message.note
        if message.type == "note_off" or (message.type == "note_on" and message.velocity == 0):
            end = float(now)
            if start_note == message.note:
                parts.append(note_name(message.note))
                level = message.note // 12
                if level != 5:
                    parts.append(str(level))
                power = _power((end - start) / TICKS_PER_BEAT)
                if power is not None and power >= -4 and power != 0:
                    parts.append(f"<{power}")
                start_note = 0
        if sounding and start > end:
            power = _power((start - end) / TICKS_PER_BEAT)
            if power == 0:
                parts.append("R")
            elif power is not None and power >= -4:
                parts.append(f"R<{power}")
    return "".join(parts)


def render_wav(midi_path: str | PathLike[str], wav_path: str | PathLike[str]) -> str:
    """Render a MIDI file to WAV with timidity; raise if it fails."""
    subprocess.run(
        ["timidity", str(midi_path), "-Ow", "-o", str(wav_path)],
        check=True,
        capture_output=True,
    )
    return str(wav_path)


def random_target(rng: random.Random | None = None) -> tuple[int, str]:
    """A random quiz note and the text that names it."""
    chooser = rng if rng is not None else random
    note = 55 + chooser.randrange(34)
    return note, note_name(note) + str(note // 12)


def validate_timbre(timbre: int) -> int:
    """Check that an instrument number is a MIDI program."""
    if timbre < 0 or timbre > 127:
        raise ValueError("音色应该在0~127之间")
    return timbre


class Outcome(enum.Enum):
    """How one quiz answer was judged."""

    CORRECT = "correct"
    WRONG = "wrong"
    REVEALED = "revealed"


@dataclass(frozen=True)
class QuizStep:
    """The result of one answer."""

    outcome: Outcome
    guessed: int
    answer: str
    errors: int
    finished: bool


@dataclass(eq=False)
class ListeningQuiz:
    """Five questions: name the note that was played."""

    team: bool = False
    rng: random.Random = field(default_factory=random.Random)
    target: int = field(init=False)
    answer_text: str = field(init=False)
    question: int = field(init=False, default=1)
    errors: int = field(init=False, default=0)
    finished: bool = field(init=False, default=False)
    scores: dict[int, float] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.target, self.answer_text = random_target(self.rng)

    @property
    def max_errors(self) -> int:
        return 10 if self.team else 3

    def answer(self, text: str, user_id: int) -> QuizStep:
        """Judge an answer from ``user_id`` and move the quiz on."""
        if self.finished:
            raise RuntimeError("the quiz is over")
        if not ANSWER_PATTERN.fullmatch(text):
            raise NoteSyntaxError(f"not a note: {text!r}")
        guessed = parse_note(text)
        judged = self.answer_text
        correct = guessed == self.target
        if not correct:
            self.errors += 1
        errors = self.errors
        if correct or self.errors == self.max_errors:
            outcome = Outcome.CORRECT if correct else Outcome.REVEALED
            self._score(user_id)
            self.question += 1
            if self.question != QUESTIONS + 1:
                self.errors = 0
                self.target, self.answer_text = random_target(self.rng)
        else:
            outcome = Outcome.WRONG
        if self.question == QUESTIONS + 1:
            self.finished = True
        return QuizStep(outcome, guessed, judged, errors, self.finished)

    def _score(self, user_id: int) -> None:
        if self.team:
            if self.errors != self.max_errors:
                self.scores[user_id] = self.scores.get(user_id, 0.0) + 1.0
            return
        points = {0: 1.0, 1: 0.5, 2: 0.2}.get(self.errors)
        if points is not None:
            self.scores[user_id] = self.scores.get(user_id, 0.0) + points