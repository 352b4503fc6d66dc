import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from customer_matcher.cli import main
from customer_matcher.commands import compare as cmd_compare
from customer_matcher.commands import suggest as cmd_suggest
from customer_matcher.commands import validate_rules as cmd_validate_rules
from customer_matcher.commands.inputs import read_names, read_rules
from customer_matcher.commands.output import cache_status, needs_review, rule_status
from customer_matcher.core.matching import CustomerMatcher
from customer_matcher.services import MergeRule, MergeSuggestionService

NEAR_DUPLICATES = ["Acme Trading LLC", "Acme Trading Co.", "Acme Intl Trading"]


def _capture(func, *args, **kwargs):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        result = func(*args, **kwargs)
    return result, buffer.getvalue()


class TestInputs(unittest.TestCase):
    def test_read_names_text_and_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            text = tmp / "names.txt"
            text.write_text("Acme Trading LLC\n\n  Zenith Foods  \n", encoding="utf-8")
            as_json = tmp / "names.json"
            as_json.write_text(json.dumps(NEAR_DUPLICATES), encoding="utf-8")

            self.assertEqual(read_names(text), ["Acme Trading LLC", "Zenith Foods"])
            self.assertEqual(read_names(as_json), NEAR_DUPLICATES)

    def test_read_names_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            with self.assertRaises(SystemExit):
                read_names(tmp / "missing.txt")
            bad = tmp / "bad.json"
            bad.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(SystemExit):
                read_names(bad)

    def test_read_rules(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rules.json"
            path.write_text(
                json.dumps(
                    {
                        "rules": [
                            {
                                "id": 1,
                                "merged_customer_name": "Acme",
                                "original_customers": ["Acme Trading LLC"],
                            }
                        ]
                    }
                ),
                encoding="utf-8",
            )
            rules = read_rules(path, "fp")
        self.assertEqual(rules, [MergeRule("FP", "Acme", ("Acme Trading LLC",), rule_id=1)])


class TestCommands(unittest.TestCase):
    def test_suggest_text_output(self) -> None:
        service = MergeSuggestionService()
        try:
            _, output = _capture(cmd_suggest.run, service, NEAR_DUPLICATES, division="FP")
        finally:
            service.close()
        self.assertIn("[1] acme intl trading (3 customers", output)
        self.assertIn("    - Acme Trading Co.", output)
        self.assertIn("Similarity cache: ENABLED", output)

    def test_suggest_json_output(self) -> None:
        service = MergeSuggestionService()
        try:
            _, output = _capture(
                cmd_suggest.run, service, NEAR_DUPLICATES, division="FP", json_output=True
            )
        finally:
            service.close()
        payload = json.loads(output)
        self.assertEqual(payload["division"], "FP")
        self.assertEqual(payload["suggestions"][0]["mergedName"], "acme intl trading")

    def test_suggest_without_results(self) -> None:
        service = MergeSuggestionService()
        try:
            _, output = _capture(cmd_suggest.run, service, ["Acme", "Zenith Foods"])
        finally:
            service.close()
        self.assertIn("No merge suggestions found.", output)

    def test_compare(self) -> None:
        with CustomerMatcher() as matcher:
            _, output = _capture(cmd_compare.run, matcher, "Acme Trading LLC", "ACME TRADING")
        self.assertIn("100.0%", output)
        self.assertIn("tokenJaccard: 1.000", output)

    def test_validate_rules(self) -> None:
        service = MergeSuggestionService()
        rules = [
            MergeRule("FP", "Acme", ("Acme Trading LLC",)),
            MergeRule("FP", "Gone", ("Old Name Ltd",)),
        ]
        try:
            all_valid, output = _capture(
                cmd_validate_rules.run, service, rules, ["Acme Trading LLC"]
            )
        finally:
            service.close()
        self.assertFalse(all_valid)
        self.assertIn("Acme: VALID (1 found, 0 missing)", output)
        self.assertIn("Gone: ORPHANED (0 found, 1 missing)", output)


class TestOutputHelpers(unittest.TestCase):
    def test_status_lines(self) -> None:
        self.assertEqual(cache_status(None), "Similarity cache: DISABLED")
        self.assertEqual(cache_status(0.25), "Similarity cache: ENABLED (hit rate 25.0%)")
        self.assertEqual(needs_review(4, 0.8), "Large group: REVIEW (4 customers at 80.0%)")
        self.assertEqual(rule_status("Acme", "VALID", 2, 0), "Acme: VALID (2 found, 0 missing)")


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._handlers = root.handlers[:]
        self._level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)

    def test_compare_json(self) -> None:
        _, output = _capture(main, ["compare", "Acme Trading LLC", "ACME TRADING", "--json"])
        payload = json.loads(output)
        self.assertEqual(payload["score"], 1.0)
        self.assertEqual(payload["pair"], ["Acme Trading LLC", "ACME TRADING"])

    def test_suggest_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            names = Path(tmpdir) / "names.txt"
            names.write_text("\n".join(NEAR_DUPLICATES), encoding="utf-8")
            _, output = _capture(main, ["suggest", str(names), "--json", "--division", "tf"])
        payload = json.loads(output)
        self.assertEqual(payload["division"], "TF")
        self.assertEqual(len(payload["suggestions"]), 1)

    def test_validate_rules_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            rules = tmp / "rules.json"
            rules.write_text(
                json.dumps([{"canonical_name": "Gone", "original_names": ["Old Name Ltd"]}]),
                encoding="utf-8",
            )
            names = tmp / "names.txt"
            names.write_text("Acme Trading\n", encoding="utf-8")
            with self.assertRaises(SystemExit) as raised:
                _capture(main, ["validate-rules", str(rules), str(names)])
        self.assertEqual(raised.exception.code, 1)

    def test_benchmark_json(self) -> None:
        _, output = _capture(main, ["benchmark", "--sizes", "20", "40", "--json"])
        payload = json.loads(output)
        self.assertEqual([row["size"] for row in payload], [20, 40])

    def test_missing_config(self) -> None:
        with self.assertRaises(SystemExit):
            main(["--config", "/nonexistent/config.yaml", "compare", "a", "b"])


if __name__ == "__main__":
    unittest.main()
