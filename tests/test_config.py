import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from keyquest.config.config import EngineConfig, engine_config_from, load_config, validate_config


class ConfigTests(unittest.TestCase):
    def test_packaged_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["quiz"]["questions"], 10)
        self.assertEqual(cfg["quiz"]["chord_timeout_ms"], 1000)
        self.assertTrue(cfg["storage"]["history_enabled"])
        self.assertEqual(cfg["new_user"], {"notes": 0, "chords": 0, "scales": 0})
        engine = engine_config_from(cfg)
        self.assertEqual(engine, EngineConfig())

    def test_empty_config_gets_defaults(self) -> None:
        cfg = validate_config({})
        self.assertEqual(cfg["quiz"]["questions"], 10)
        self.assertEqual(cfg["storage"]["data_dir"], "./keyquest_data")
        self.assertEqual(cfg["engine"]["learning_rate"], 0.1)

    def test_invalid_values_fall_back(self) -> None:
        cfg = validate_config(
            {
                "quiz": {"questions": "lots"},
                "engine": {"learning_rate": 5},
                "new_user": {"notes": 7, "chords": "x", "scales": 1},
            }
        )
        self.assertEqual(cfg["quiz"]["questions"], 10)
        self.assertEqual(cfg["engine"], EngineConfig().model_dump())
        self.assertEqual(cfg["new_user"], {"notes": 2, "chords": 0, "scales": 1})

    def test_yaml_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.yml"
            path.write_text("quiz:\n  questions: 3\nengine:\n  correct_threshold: 2\n", encoding="utf-8")
            cfg = validate_config(load_config(str(path)))
        self.assertEqual(cfg["quiz"]["questions"], 3)
        self.assertEqual(engine_config_from(cfg).correct_threshold, 2)
        self.assertEqual(engine_config_from(cfg).incorrect_threshold, 4)

    def test_missing_file_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SystemExit):
                load_config(str(Path(tmp) / "nope.yml"))


class EngineConfigTests(unittest.TestCase):
    def test_epsilon_tiers(self) -> None:
        cfg = EngineConfig()
        self.assertEqual(cfg.epsilon_for(0), 0.9)
        self.assertEqual(cfg.epsilon_for(1), 0.7)
        self.assertEqual(cfg.epsilon_for(2), 0.5)

    def test_difficulty_points(self) -> None:
        cfg = EngineConfig()
        self.assertEqual([cfg.points_for(d) for d in (0, 1, 2)], [1, 2, 3])
        self.assertEqual(cfg.points_for(9), 1)

    def test_rejects_bad_values(self) -> None:
        with self.assertRaises(ValidationError):
            EngineConfig(epsilon_by_level={0: 1.5})
        with self.assertRaises(ValidationError):
            EngineConfig(difficulty_points={0: 0})
        with self.assertRaises(ValidationError):
            EngineConfig(discount_factor=-0.1)


if __name__ == "__main__":
    unittest.main()
