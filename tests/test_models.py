import json
import tempfile
import unittest
from pathlib import Path

from keyquest.quiz.qtable import decode_table, encode_table, max_q, q_value
from keyquest.quiz.question import (
    EMPTY_QUESTION,
    Question,
    default_question_bank_path,
    load_question_bank,
    parse_question_bank,
    skill_domain,
)
from keyquest.quiz.report import HistoryEntry, QuizReport, format_summary
from keyquest.quiz.skill_state import SkillState


class SkillStateTests(unittest.TestCase):
    def test_clamped_on_construction(self) -> None:
        self.assertEqual(SkillState(-3, 5, 1), SkillState(0, 2, 1))
        self.assertEqual(SkillState().shifted("notes", -1), SkillState())
        self.assertEqual(SkillState(2, 2, 2).shifted("scales", +1), SkillState(2, 2, 2))

    def test_lexicographic_order(self) -> None:
        states = [SkillState(1, 0, 0), SkillState(0, 2, 2), SkillState(0, 2, 1), SkillState(0, 0, 2)]
        self.assertEqual(
            sorted(states),
            [SkillState(0, 0, 2), SkillState(0, 2, 1), SkillState(0, 2, 2), SkillState(1, 0, 0)],
        )

    def test_hashable_key(self) -> None:
        table = {SkillState(1, 2, 0): "x"}
        self.assertEqual(table[SkillState(1, 2, 0)], "x")

    def test_text_key(self) -> None:
        self.assertEqual(SkillState(0, 1, 2).to_key(), "[0,1,2]")
        self.assertEqual(SkillState.from_key("[2,0,1]"), SkillState(2, 0, 1))
        with self.assertRaises(ValueError):
            SkillState.from_key("[1,2]")

    def test_json_record(self) -> None:
        self.assertEqual(SkillState(1, 0, 2).to_json(), {"notes": 1, "chords": 0, "scales": 2})
        self.assertEqual(SkillState.from_json({"chords": 2}), SkillState(0, 2, 0))
        self.assertEqual(SkillState.from_json(None), SkillState())

    def test_average_level_floors(self) -> None:
        self.assertEqual(SkillState(1, 1, 0).average_level(), 0)
        self.assertEqual(SkillState(2, 2, 1).average_level(), 1)
        self.assertEqual(SkillState(2, 2, 2).average_level(), 2)


class QTableTests(unittest.TestCase):
    def test_encoding_uses_bracketed_keys(self) -> None:
        table = {SkillState(0, 1, 0): {1001: 0.25, 7: -0.5}}
        self.assertEqual(encode_table(table), {"[0,1,0]": {"[7]": -0.5, "[1001]": 0.25}})
        self.assertEqual(decode_table(encode_table(table)), table)

    def test_decode_skips_malformed_entries(self) -> None:
        raw = {
            "[0,0,0]": {"[1]": 1.5, "[x]": 2.0, "[2]": "nan"},
            "oops": {"[3]": 1.0},
            "[1,1,1]": "not a map",
        }
        self.assertEqual(decode_table(raw), {SkillState(): {1: 1.5}})
        self.assertEqual(decode_table(None), {})

    def test_lookups(self) -> None:
        table = {SkillState(): {1: -2.0, 2: -1.0}}
        self.assertEqual(q_value(table, SkillState(), 3), 0.0)
        self.assertEqual(q_value(table, SkillState(), 2), -1.0)
        self.assertEqual(max_q(table, SkillState()), 0.0)
        self.assertEqual(max_q(table, SkillState(1, 0, 0)), 0.0)
        self.assertEqual(max_q({SkillState(): {1: 0.7, 2: 0.2}}, SkillState()), 0.7)


class QuestionTests(unittest.TestCase):
    def test_domain_mapping(self) -> None:
        self.assertEqual(skill_domain(101), "notes")
        self.assertEqual(skill_domain(102), "chords")
        self.assertEqual(skill_domain(103), "chords")
        self.assertEqual(skill_domain(104), "scales")
        self.assertEqual(skill_domain(110), "scales")
        self.assertIsNone(skill_domain(100))

    def test_parse_topics_document(self) -> None:
        doc = {
            "topics": [
                {
                    "topicID": 102,
                    "topicName": "Chords",
                    "questions": [
                        {"questionID": 5, "Title": "T", "Description": "D", "ExpectedInput": "C4-E4-G4", "difficulty": 1},
                        "junk",
                    ],
                },
                42,
            ]
        }
        bank = parse_question_bank(doc)
        self.assertEqual(list(bank), [5])
        self.assertEqual(bank[5].topic_id, 102)
        self.assertEqual(bank[5].topic_name, "Chords")
        self.assertEqual(bank[5].domain, "chords")
        self.assertEqual(parse_question_bank({"nope": []}), {})

    def test_json_keys(self) -> None:
        question = Question(3, 101, 0, "Title", "Desc", "C4", "Notes")
        data = question.to_json()
        self.assertEqual(data["ExpectedInput"], "C4")
        self.assertEqual(Question.from_json(data), question)

    def test_empty_question(self) -> None:
        self.assertTrue(EMPTY_QUESTION.is_empty())
        self.assertFalse(Question(question_id=0).is_empty())

    def test_load_missing_or_invalid_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_question_bank(Path(tmp) / "missing.json"), {})
            bad = Path(tmp) / "bad.json"
            bad.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_question_bank(bad), {})

    def test_bundled_bank(self) -> None:
        bank = load_question_bank(default_question_bank_path())
        self.assertGreater(len(bank), 0)
        domains = {question.domain for question in bank.values()}
        self.assertEqual(domains, {"notes", "chords", "scales"})
        for question in bank.values():
            self.assertIn(question.difficulty, (0, 1, 2))
            self.assertTrue(question.expected_input)


class ReportTests(unittest.TestCase):
    def test_json_shape(self) -> None:
        report = QuizReport(
            score=15.0,
            accuracy=50.0,
            total_questions=2,
            correct_answers=1,
            history=[
                HistoryEntry(SkillState(0, 1, 0), 4, "Play C", True),
                HistoryEntry(SkillState(0, 1, 0), 5, "Play D", False),
            ],
        )
        data = json.loads(json.dumps(report.to_json()))
        self.assertEqual(data["totalQuestions"], 2)
        self.assertEqual(data["history"][0], {"state": {"notes": 0, "chords": 1, "scales": 0}, "questionID": 4, "description": "Play C", "correct": True})
        self.assertEqual(QuizReport.from_json(data), report)

    def test_from_json_tolerates_bad_history(self) -> None:
        report = QuizReport.from_json({"score": 5, "history": [1, {"questionID": 2}]})
        self.assertEqual(report.score, 5.0)
        self.assertEqual(len(report.history), 1)
        self.assertEqual(report.history[0].state, SkillState())
        self.assertFalse(report.history[0].correct)

    def test_summary(self) -> None:
        text = format_summary(QuizReport(score=40, accuracy=66.666, total_questions=6, correct_answers=4))
        self.assertIn("Score: 40", text)
        self.assertIn("Accuracy: 67%", text)
        self.assertIn("Correct Answers: 4", text)


if __name__ == "__main__":
    unittest.main()
