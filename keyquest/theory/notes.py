from __future__ import annotations

"""Note tokens and answer grading.

Expected answers are dash-separated note tokens with octave suffixes, e.g.
``"C4-E4-G4"``. Answers are compared by pitch name only, order-insensitive.
"""

from typing import Iterable, List, Optional, Tuple

PITCH_CLASS_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Range of the on-screen keyboard: C4 .. C5
MIN_KEY_MIDI = 60
MAX_KEY_MIDI = 72


def midi_to_note_name(midi: int) -> Optional[str]:
    """Name a keyboard key (MIDI 60..72) as e.g. ``"C#4"``; None outside the range."""
    if midi < MIN_KEY_MIDI or midi > MAX_KEY_MIDI:
        return None
    octave = midi // 12 - 1  # C4 -> 60
    return f"{PITCH_CLASS_NAMES[midi % 12]}{octave}"


def note_name_to_midi(note: str) -> int:
    """Parse a note string like 'C4' or 'G#4' into a MIDI number."""
    if not note or len(note) < 2:
        raise ValueError(f"Invalid note string: {note}")
    name = note[0].upper()
    idx = 1
    if idx < len(note) and note[idx] == "#":
        name += "#"
        idx += 1
    if name not in PITCH_CLASS_NAMES:
        raise ValueError(f"Unsupported note name: {note}")
    try:
        octave = int(note[idx:])
    except ValueError as e:
        raise ValueError(f"Invalid octave in note string: {note}") from e
    return (octave + 1) * 12 + PITCH_CLASS_NAMES.index(name)


def strip_octave(token: str) -> str:
    """``"c#4"`` -> ``"C#"``: drop one trailing octave digit, capitalise the letter."""
    t = token.strip()
    if len(t) > 1 and t[-1].isdigit():
        t = t[:-1]
    return t[:1].upper() + t[1:]


def group_chords(presses: Iterable[Tuple[int, float]], timeout_ms: float) -> List[List[str]]:
    """Group timed key presses ``(midi, time_ms)`` into chords.

    A chord closes once no key follows within ``timeout_ms`` of the previous
    press. Keys outside the keyboard are ignored.
    """
    chords: List[List[str]] = []
    current: List[str] = []
    last: Optional[float] = None
    for midi, at in sorted(presses, key=lambda p: p[1]):
        name = midi_to_note_name(midi)
        if name is None:
            continue
        if last is not None and at - last > timeout_ms:
            chords.append(current)
            current = []
        current.append(name)
        last = at
    if current:
        chords.append(current)
    return chords


def is_note_token(token: str) -> bool:
    try:
        note_name_to_midi(token)
    except ValueError:
        return False
    return True


def split_tokens(text: str) -> List[str]:
    """Split typed input like ``"C4-E4 G4"`` into note tokens."""
    return [t for t in text.replace(",", " ").replace("-", " ").split() if t]


def normalize_answer(tokens: Iterable[str]) -> str:
    """Played notes -> sorted, de-duplicated pitch names joined with '-'."""
    names = {strip_octave(t) for t in tokens if t.strip()}
    return "-".join(sorted(names))


def normalize_expected(expected_input: str) -> str:
    """Canonical answer pattern -> same form as :func:`normalize_answer`.

    Octaves fold together, so ``"C4-...-C5"`` expects a single C.
    """
    names = {strip_octave(t) for t in expected_input.split("-") if t.strip()}
    return "-".join(sorted(names))


def is_correct_answer(tokens: Iterable[str], expected_input: str) -> bool:
    played = normalize_answer(tokens)
    return bool(played) and played == normalize_expected(expected_input)
