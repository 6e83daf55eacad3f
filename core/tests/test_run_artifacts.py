"""Tests for run artifact writer."""

import json
import tempfile
import unittest
from pathlib import Path

from core.run_artifacts import report_path, write_run_report


class TestRunArtifacts(unittest.TestCase):
    def test_write_run_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_run_report(
                report={"status": "success", "stats": {"files_processed": 3}},
                run_id="run-123",
                output_dir=tmpdir,
            )
            self.assertTrue(Path(path).is_file())
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(payload["run_id"], "run-123")
            self.assertEqual(payload["status"], "success")
            self.assertEqual(payload["stats"]["files_processed"], 3)
            self.assertIn("timestamp_utc", payload)

    def test_creates_nested_output_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            nested = Path(tmpdir) / "output" / "run_reports"
            path = write_run_report({"status": "failed"}, run_id="abc", output_dir=str(nested))
            self.assertEqual(Path(path), report_path("abc", str(nested)))
            self.assertTrue(Path(path).is_file())

    def test_existing_run_id_is_kept(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_run_report({"run_id": "given"}, run_id="file-name", output_dir=tmpdir)
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(payload["run_id"], "given")
            self.assertEqual(Path(path).name, "file-name.json")


if __name__ == "__main__":
    unittest.main()
