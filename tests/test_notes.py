import unittest

from keyquest.theory.notes import (
    group_chords,
    is_correct_answer,
    is_note_token,
    midi_to_note_name,
    normalize_answer,
    normalize_expected,
    note_name_to_midi,
    split_tokens,
    strip_octave,
)


class NoteNameTests(unittest.TestCase):
    def test_keyboard_range(self) -> None:
        self.assertEqual(midi_to_note_name(60), "C4")
        self.assertEqual(midi_to_note_name(61), "C#4")
        self.assertEqual(midi_to_note_name(72), "C5")
        self.assertIsNone(midi_to_note_name(59))
        self.assertIsNone(midi_to_note_name(73))

    def test_parse(self) -> None:
        self.assertEqual(note_name_to_midi("C4"), 60)
        self.assertEqual(note_name_to_midi("g#4"), 68)
        for bad in ("", "H4", "C#x"):
            with self.assertRaises(ValueError):
                note_name_to_midi(bad)

    def test_strip_octave(self) -> None:
        self.assertEqual(strip_octave("c#4"), "C#")
        self.assertEqual(strip_octave(" E5 "), "E")
        self.assertEqual(strip_octave("F"), "F")


class GradingTests(unittest.TestCase):
    def test_split_tokens(self) -> None:
        self.assertEqual(split_tokens("C4-E4, G4"), ["C4", "E4", "G4"])
        self.assertEqual(split_tokens("   "), [])

    def test_order_and_octave_insensitive(self) -> None:
        self.assertTrue(is_correct_answer(["G4", "E4", "C4"], "C4-E4-G4"))
        self.assertTrue(is_correct_answer(["C5", "E4", "G4"], "C4-E4-G4"))
        self.assertFalse(is_correct_answer(["C4", "E4"], "C4-E4-G4"))
        self.assertFalse(is_correct_answer(["C4", "E4", "G#4"], "C4-E4-G4"))

    def test_octave_repeats_fold_together(self) -> None:
        self.assertEqual(normalize_expected("C4-D4-E4-F4-G4-A4-B4-C5"), "A-B-C-D-E-F-G")
        self.assertTrue(is_correct_answer(["C4", "D4", "E4", "F4", "G4", "A4", "B4"], "C4-D4-E4-F4-G4-A4-B4-C5"))
        self.assertEqual(normalize_answer(["C4", "C5", "c4"]), "C")

    def test_empty_answer_is_wrong(self) -> None:
        self.assertFalse(is_correct_answer([], ""))
        self.assertFalse(is_correct_answer([" "], "C4"))


class ChordGroupingTests(unittest.TestCase):
    def test_presses_within_timeout_form_one_chord(self) -> None:
        presses = [(64, 250.0), (60, 0.0), (67, 900.0)]
        self.assertEqual(group_chords(presses, 1000), [["C4", "E4", "G4"]])

    def test_gap_longer_than_timeout_starts_new_chord(self) -> None:
        presses = [(60, 0.0), (64, 800.0), (62, 1900.0), (65, 2100.0)]
        self.assertEqual(group_chords(presses, 1000), [["C4", "E4"], ["D4", "F4"]])
        # the window restarts on every press
        self.assertEqual(group_chords([(60, 0), (62, 900), (64, 1800)], 1000), [["C4", "D4", "E4"]])

    def test_keys_off_the_keyboard_are_ignored(self) -> None:
        self.assertEqual(group_chords([(59, 0), (73, 10), (72, 20)], 1000), [["C5"]])
        self.assertEqual(group_chords([], 1000), [])

    def test_note_tokens(self) -> None:
        self.assertTrue(is_note_token("F#4"))
        self.assertTrue(is_note_token("c5"))
        self.assertFalse(is_note_token("H9"))
        self.assertFalse(is_note_token("C"))


if __name__ == "__main__":
    unittest.main()
