import os
import tempfile
import unittest
from unittest.mock import patch

from workout_generator.config import DEFAULT_CONFIG, get_api_key, load_config
from workout_generator.focus_catalog import FOCUS_INSTRUCTIONS, build_focus_catalog


class LoadConfigTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, text):
        path = os.path.join(self.tmpdir.name, "config.yaml")
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_missing_file_returns_defaults(self):
        config = load_config(os.path.join(self.tmpdir.name, "absent.yaml"))
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertIsNot(config, DEFAULT_CONFIG)

    def test_overrides_are_merged(self):
        config = load_config(self._write("claude:\n  model: claude-other\ngeneration:\n  max_attempts: 2\n"))

        self.assertEqual(config["claude"]["model"], "claude-other")
        self.assertEqual(config["claude"]["max_tokens"], 4000)
        self.assertEqual(config["generation"]["max_attempts"], 2)
        self.assertEqual(DEFAULT_CONFIG["claude"]["model"], "claude-sonnet-4-20250514")

    def test_empty_file(self):
        self.assertEqual(load_config(self._write("")), DEFAULT_CONFIG)

    def test_non_mapping_is_rejected(self):
        with self.assertRaises(ValueError):
            load_config(self._write("- just\n- a list\n"))

    def test_repo_config_loads(self):
        config = load_config()
        self.assertEqual(config["generation"]["max_attempts"], 3)
        self.assertTrue(config["quota"]["exempt_admins"])

    def test_get_api_key_uses_configured_variable(self):
        config = load_config(self._write("claude:\n  api_key_env: WORKOUT_TEST_KEY\n"))
        with patch.dict(os.environ, {"WORKOUT_TEST_KEY": "sk-test"}):
            self.assertEqual(get_api_key(config), "sk-test")


class FocusCatalogTests(unittest.TestCase):
    def test_defaults(self):
        catalog = build_focus_catalog()
        self.assertEqual(catalog, FOCUS_INSTRUCTIONS)
        self.assertIn("hypertrophy", catalog)
        self.assertIn("plyometric", catalog)

    def test_overrides_replace_and_extend(self):
        catalog = build_focus_catalog({
            "focus_instructions": {
                "Strength": "Heavy triples only.",
                "endurance": "High reps, short rest.",
                "cardio": "   ",
            }
        })

        self.assertEqual(catalog["strength"], "Heavy triples only.")
        self.assertEqual(catalog["endurance"], "High reps, short rest.")
        self.assertEqual(catalog["cardio"], FOCUS_INSTRUCTIONS["cardio"])
        self.assertNotEqual(FOCUS_INSTRUCTIONS["strength"], "Heavy triples only.")


if __name__ == "__main__":
    unittest.main()
