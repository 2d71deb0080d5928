import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.domain.contributions import DEFAULT_PRIORITY_WEIGHTS, Priority  # noqa: E402
from app.env import _parse_line  # noqa: E402
from app.settings import load_settings, parse_priority_weights  # noqa: E402


class PriorityWeightSettingsTests(unittest.TestCase):
    def test_blank_value_keeps_defaults(self) -> None:
        self.assertEqual(parse_priority_weights(None), dict(DEFAULT_PRIORITY_WEIGHTS))
        self.assertEqual(parse_priority_weights("  "), dict(DEFAULT_PRIORITY_WEIGHTS))

    def test_overrides_are_merged_over_defaults(self) -> None:
        weights = parse_priority_weights("HIGH=5, low=0.5")

        self.assertEqual(weights[Priority.HIGH], 5.0)
        self.assertEqual(weights[Priority.MEDIUM], 2.0)
        self.assertEqual(weights[Priority.LOW], 0.5)
        self.assertEqual(weights[Priority.UNKNOWN], 1.0)

    def test_malformed_values_fail_fast(self) -> None:
        for raw in ("urgent=2", "high", "high=lots", "medium=-1"):
            with self.subTest(raw=raw):
                with self.assertRaises(RuntimeError):
                    parse_priority_weights(raw)

    def test_load_settings_reads_environment(self) -> None:
        env = {
            "CORS_ORIGINS": "https://app.example.com, https://admin.example.com",
            "LOG_LEVEL": "debug",
            "LOG_HTTP_BODIES": "yes",
            "CONTRIBUTION_PRIORITY_WEIGHTS": "medium=4",
        }
        with patch.dict(os.environ, env):
            settings = load_settings()

        self.assertEqual(settings.cors_origins, ["https://app.example.com", "https://admin.example.com"])
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertTrue(settings.log_http_bodies)
        self.assertEqual(settings.priority_weights[Priority.MEDIUM], 4.0)


class EnvFileParsingTests(unittest.TestCase):
    def test_parses_assignments(self) -> None:
        self.assertEqual(_parse_line("DATABASE_URL=sqlite:///./x.db"), ("DATABASE_URL", "sqlite:///./x.db"))
        self.assertEqual(_parse_line("export JWT_SECRET='s3cret'"), ("JWT_SECRET", "s3cret"))
        self.assertEqual(_parse_line('LOG_LEVEL = "INFO"'), ("LOG_LEVEL", "INFO"))

    def test_skips_comments_and_noise(self) -> None:
        for line in ("", "   ", "# comment", "NO_EQUALS_SIGN", "=value"):
            with self.subTest(line=line):
                self.assertIsNone(_parse_line(line))


if __name__ == "__main__":
    unittest.main()
