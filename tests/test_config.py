import os
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from customer_matcher.config import (
    MatcherSettings,
    Settings,
    SimilarityWeights,
    find_config,
    load_settings,
)


class TestMatcherSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = MatcherSettings()
        self.assertEqual(settings.n_tokens_blocking, 2)
        self.assertEqual(settings.local_threshold, 0.72)
        self.assertEqual(settings.min_confidence_threshold, 0.65)
        self.assertEqual(settings.high_confidence_threshold, 0.90)
        self.assertEqual(settings.batch_write_size, 500)
        self.assertTrue(settings.cache_enabled)
        self.assertEqual(settings.cache_ttl_seconds, 1800.0)
        self.assertEqual(settings.cache_sweep_interval_seconds, 60.0)
        self.assertEqual(settings.canonical_strategy, "longest")
        weights = settings.weights
        self.assertEqual(
            (weights.exact_match, weights.token_jaccard, weights.levenshtein,
             weights.phonetic, weights.prefix, weights.suffix),
            (1.0, 0.35, 0.30, 0.6, 0.2, 0.15),
        )

    def test_sweep_interval_never_exceeds_ttl(self) -> None:
        settings = MatcherSettings(cache_ttl_ms=5_000, cache_sweep_interval_ms=60_000)
        self.assertEqual(settings.cache_sweep_interval_seconds, 5.0)

    def test_invalid_values(self) -> None:
        invalid = [
            {"local_threshold": 1.5},
            {"min_confidence_threshold": -0.1},
            {"n_tokens_blocking": 0},
            {"cache_ttl_ms": 0},
            {"canonical_strategy": "shortest"},
            {"weights": {"phonetic": -1}},
        ]
        for overrides in invalid:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    MatcherSettings.model_validate(overrides)

    def test_all_zero_weights_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            SimilarityWeights(
                exact_match=0, token_jaccard=0, levenshtein=0, phonetic=0, prefix=0, suffix=0
            )


class TestDivisionOverrides(unittest.TestCase):
    def test_overrides_merge_over_defaults(self) -> None:
        settings = Settings(
            divisions={"fp": {"local_threshold": 0.8, "weights": {"phonetic": 0.3}}}
        )
        fp = settings.for_division("FP")
        self.assertEqual(fp.local_threshold, 0.8)
        self.assertEqual(fp.weights.phonetic, 0.3)
        self.assertEqual(fp.weights.prefix, 0.2)
        self.assertEqual(settings.for_division("fp"), fp)

    def test_division_without_overrides_uses_defaults(self) -> None:
        settings = Settings(divisions={"FP": {"local_threshold": 0.8}})
        self.assertIs(settings.for_division("SB"), settings.matcher)
        self.assertIs(settings.for_division(None), settings.matcher)

    def test_invalid_override_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(divisions={"TF": {"local_threshold": 2}})


class TestLoading(unittest.TestCase):
    def test_load_yaml(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(
                "matcher:\n"
                "  local_threshold: 0.75\n"
                "  cache_enabled: false\n"
                "divisions:\n"
                "  HCM:\n"
                "    n_tokens_blocking: 1\n",
                encoding="utf-8",
            )
            settings = load_settings(path)
        self.assertEqual(settings.matcher.local_threshold, 0.75)
        self.assertFalse(settings.matcher.cache_enabled)
        self.assertEqual(settings.for_division("HCM").n_tokens_blocking, 1)
        self.assertEqual(settings.for_division("HCM").local_threshold, 0.75)

    def test_empty_yaml_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text("", encoding="utf-8")
            settings = Settings.load(path)
        self.assertEqual(settings, Settings())

    def test_missing_explicit_path(self) -> None:
        with self.assertRaises(FileNotFoundError):
            find_config(Path("/nonexistent/config.yaml"))

    def test_discovery_in_working_directory(self) -> None:
        previous = os.getcwd()
        with tempfile.TemporaryDirectory() as tmpdir:
            os.chdir(tmpdir)
            try:
                self.assertIsNone(find_config(None))
                self.assertEqual(load_settings(), Settings())
                Path("config.yml").write_text("matcher:\n  n_tokens_blocking: 3\n", encoding="utf-8")
                self.assertEqual(find_config(None).name, "config.yml")
                self.assertEqual(load_settings().matcher.n_tokens_blocking, 3)
            finally:
                os.chdir(previous)


if __name__ == "__main__":
    unittest.main()
