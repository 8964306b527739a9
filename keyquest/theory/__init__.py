from .notes import (
    PITCH_CLASS_NAMES,
    group_chords,
    is_correct_answer,
    is_note_token,
    midi_to_note_name,
    normalize_answer,
    normalize_expected,
    note_name_to_midi,
    split_tokens,
)

__all__ = [
    "PITCH_CLASS_NAMES",
    "group_chords",
    "is_correct_answer",
    "is_note_token",
    "midi_to_note_name",
    "normalize_answer",
    "normalize_expected",
    "note_name_to_midi",
    "split_tokens",
]
