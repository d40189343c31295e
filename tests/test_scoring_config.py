import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config.scoring import (  # noqa: E402
    get_scoring_config,
    get_scoring_float,
    get_scoring_value,
    reset_scoring_config_cache,
)


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("overall.weights.keyword_match"), 0.35)
        self.assertEqual(get_scoring_value("matching.confidence.synonym"), 0.9)

    def test_overall_weights_sum_to_one(self):
        weights = get_scoring_value("overall.weights")
        self.assertAlmostEqual(sum(weights.values()), 1.0)

    def test_missing_path_returns_default(self):
        self.assertIsNone(get_scoring_value("matching.does_not_exist"))
        self.assertEqual(get_scoring_value("matching.does_not_exist", 7), 7)
        self.assertEqual(get_scoring_value("", "fallback"), "fallback")

    def test_float_lookup_falls_back_on_non_numeric(self):
        self.assertEqual(get_scoring_float("matching.contextual_scores.skill", 0.25), 0.25)
        self.assertEqual(get_scoring_float("parseability.critical_confidence", 0.0), 20.0)

    def test_env_override_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scoring.yaml"
            path.write_text("overall:\n  weights:\n    keyword_match: 0.5\n", encoding="utf-8")
            with patch.dict(os.environ, {"ATS_SCORING_CONFIG": str(path)}):
                reset_scoring_config_cache()
                try:
                    self.assertEqual(get_scoring_value("overall.weights.keyword_match"), 0.5)
                finally:
                    reset_scoring_config_cache()
        self.assertEqual(get_scoring_value("overall.weights.keyword_match"), 0.35)

    def test_missing_override_file_raises(self):
        with patch.dict(os.environ, {"ATS_SCORING_CONFIG": "/nonexistent/scoring.yaml"}):
            reset_scoring_config_cache()
            try:
                with self.assertRaises(RuntimeError):
                    get_scoring_config()
            finally:
                reset_scoring_config_cache()


if __name__ == "__main__":
    unittest.main()
