"""
test_main.py

Command-line tests: records files, request documents, options from flags
and environment, and input errors.
"""

import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from main import main


RECORDS = [
    {"id": 1, "name": "Dell PowerEdge Server", "vendor": "Dell Technologies"},
    {"id": 2, "name": "HP Laptop Fleet", "vendor": "HP Inc"},
    {"id": 3, "name": "Cisco Network Switches", "vendor": "Cisco Systems"},
    {"id": 4, "name": "Desktop Computer", "vendor": None},
]


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.records_path = self._write("records.json", RECORDS)
        env = patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("FUZZY_SEARCH_THRESHOLD", None)
        os.environ.pop("FUZZY_SEARCH_IGNORE_CASE", None)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, name, obj):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(obj, f)
        return path

    def _run(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            rc = main(argv)
        return rc, out.getvalue(), err.getvalue()

    def _run_json(self, argv):
        rc, out, _ = self._run(argv + ["--json"])
        self.assertEqual(rc, 0)
        return json.loads(out)

    def test_json_output(self):
        results = self._run_json(["dell", "--records", self.records_path])
        self.assertEqual(results[0]["item"]["id"], 1)
        self.assertEqual(results[0]["score"], 1.0)
        self.assertEqual(results[0]["matched_fields"], ["name", "vendor"])

    def test_field_selection(self):
        results = self._run_json(["dell", "--records", self.records_path, "--field", "vendor"])
        self.assertEqual(results[0]["matched_fields"], ["vendor"])

    def test_empty_query_lists_everything(self):
        results = self._run_json(["", "--records", self.records_path])
        self.assertEqual([r["item"]["id"] for r in results], [1, 2, 3, 4])

    def test_threshold_flag(self):
        loose = self._run_json(["computr", "--records", self.records_path])
        strict = self._run_json(["computr", "--records", self.records_path, "--threshold", "0.5"])
        self.assertEqual([r["item"]["id"] for r in loose], [4])
        self.assertEqual(strict, [])

    def test_threshold_from_environment(self):
        os.environ["FUZZY_SEARCH_THRESHOLD"] = "0.5"
        self.assertEqual(self._run_json(["computr", "--records", self.records_path]), [])
        # Explicit flag wins.
        results = self._run_json(["computr", "--records", self.records_path, "--threshold", "0.3"])
        self.assertEqual(len(results), 1)

    def test_invalid_environment_value_is_ignored(self):
        os.environ["FUZZY_SEARCH_THRESHOLD"] = "high"
        results = self._run_json(["computr", "--records", self.records_path])
        self.assertEqual(len(results), 1)

    def test_case_sensitive_flag(self):
        loose = self._run_json(["cisco", "--records", self.records_path])
        strict = self._run_json(["cisco", "--records", self.records_path, "--case-sensitive"])
        self.assertEqual(loose[0]["score"], 1.0)
        # "cisco" vs "Cisco" is only one edit away.
        self.assertAlmostEqual(strict[0]["score"], 0.4)

    def test_no_trim_scores_whitespace_query(self):
        trimmed = self._run_json(["   ", "--records", self.records_path])
        self.assertTrue(all(r["score"] == 1.0 and r["matched_fields"] == [] for r in trimmed))

        # Every name has an inner space, matched mid-word.
        untrimmed = self._run_json(["   ", "--records", self.records_path, "--no-trim", "--field", "name"])
        self.assertEqual([r["item"]["id"] for r in untrimmed], [1, 2, 3, 4])
        self.assertEqual([r["score"] for r in untrimmed], [0.95] * 4)
        self.assertTrue(all(r["matched_fields"] == ["name"] for r in untrimmed))

    def test_limit(self):
        results = self._run_json(["", "--records", self.records_path, "--limit", "2"])
        self.assertEqual(len(results), 2)

    def test_explain(self):
        results = self._run_json(["dell", "--records", self.records_path, "--explain", "--field", "name"])
        self.assertEqual(results[0]["fields"], [{"field": "name", "score": 1.0, "strategy": "exact"}])

    def test_yaml_output(self):
        rc, out, _ = self._run(["switches", "--records", self.records_path])
        self.assertEqual(rc, 0)
        self.assertIn("results:", out)
        self.assertIn("  - score: 1.0", out)
        self.assertIn("matched_fields: [name]", out)

    def test_yaml_output_no_results(self):
        rc, out, _ = self._run(["xyz", "--records", self.records_path])
        self.assertEqual(rc, 0)
        self.assertEqual(out.strip(), "results: []")

    def test_request_document(self):
        path = self._write(
            "request.json",
            {"query": "laptop", "records": RECORDS, "keys": ["name"], "threshold": 0.9, "limit": 5},
        )
        results = self._run_json(["--request", path])
        self.assertEqual([r["item"]["id"] for r in results], [2])
        self.assertEqual(results[0]["matched_fields"], ["name"])

    def test_reads_records_from_stdin(self):
        with patch("sys.stdin", io.StringIO(json.dumps(RECORDS))):
            results = self._run_json(["hp"])
        self.assertEqual(results[0]["item"]["id"], 2)

    def test_missing_records_file(self):
        rc, out, err = self._run(["dell", "--records", os.path.join(self.temp_dir, "nope.json")])
        self.assertEqual(rc, 2)
        self.assertEqual(out, "")
        self.assertIn("cannot read", err)

    def test_invalid_json(self):
        path = os.path.join(self.temp_dir, "broken.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("[{")
        rc, _, err = self._run(["dell", "--records", path])
        self.assertEqual(rc, 2)
        self.assertIn("invalid JSON", err)

    def test_records_must_be_objects(self):
        path = self._write("scalars.json", [1, 2, 3])
        rc, _, err = self._run(["dell", "--records", path])
        self.assertEqual(rc, 2)
        self.assertIn("invalid request", err)

    def test_query_required_without_request(self):
        rc, _, err = self._run(["--records", self.records_path])
        self.assertEqual(rc, 2)
        self.assertIn("query is required", err)


if __name__ == "__main__":
    unittest.main()
