import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from orchestrator import main as cli
from orchestrator.integrity_report import create_integrity_report, summarize
from services.editing import RecordPaths, TreatmentWorkflow


def _write(path: Path, *lines: str) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class CommandLineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name)
        self.data_dir = self.base / "data"
        self.data_dir.mkdir()
        _write(self.data_dir / "Hospitals.csv", '"Name","Identity"', '"General","H1"', '"Riverside",""')
        _write(self.data_dir / "Patients.csv", '"Medical Reference Number","Patient Name"', '"P1","Jane Doe"')
        _write(
            self.data_dir / "Providers.csv",
            '"Name","Number","Hospital","Doctor"',
            '"John Smith","D1","General","Yes"',
        )
        self.treatments_path = _write(
            self.data_dir / "Treatments.csv",
            '"Details","Hospital","Provider","Patient","Date/Time Discharged"',
            '"Checkup","General","John Smith","P1","2024-01-02 10:00"',
        )
        self.journal_path = self.base / "change_log.json"
        self.env_patcher = patch.dict(
            os.environ,
            {
                "RECORDS_JOURNAL_PATH": str(self.journal_path),
                "RECORDS_REPORT_DIR": str(self.base / "reports"),
            },
        )
        self.env_patcher.start()

    def tearDown(self) -> None:
        self.env_patcher.stop()
        self._tmp.cleanup()

    def _run(self, *argv: str):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(["--data-dir", str(self.data_dir), *argv])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_validate_prints_summary(self) -> None:
        code, output, _ = self._run("validate")

        summary = json.loads(output)
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(summary["loaded"]["treatment"], 1)
        self.assertEqual(summary["rejected"]["hospital"], 1)
        self.assertEqual(summary["reasons"], ["Hospital missing name or identity: Riverside / "])

    def test_append_updates_file_and_journal(self) -> None:
        code, output, _ = self._run(
            "append",
            "--details", "Observation",
            "--hospital", "General",
            "--patient", "P1",
        )

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(json.loads(output)["treatments"], 2)
        self.assertIn('"Observation","General","","P1",""', self.treatments_path.read_text(encoding="utf-8"))

        history = cli.ChangeJournal(self.journal_path).read_history()
        self.assertEqual([(entry["command"], entry["status"]) for entry in history], [("append", "success")])

    def test_out_of_range_edit_is_reported(self) -> None:
        code, output, _ = self._run(
            "edit",
            "--index", "5",
            "--details", "Observation",
            "--hospital", "General",
            "--patient", "P1",
        )

        self.assertEqual(code, cli.EXIT_NOT_APPLIED)
        self.assertFalse(json.loads(output)["applied"])
        history = cli.ChangeJournal(self.journal_path).read_history()
        self.assertEqual(history[0]["status"], "ignored")

    def test_edit_with_discharge_time(self) -> None:
        code, _, _ = self._run(
            "edit",
            "--index", "0",
            "--details", "Surgery",
            "--hospital", "General",
            "--provider", "John Smith",
            "--patient", "P1",
            "--discharged", "2024-05-06 07:08:09",
        )

        self.assertEqual(code, cli.EXIT_OK)
        self.assertIn(
            '"Surgery","General","John Smith","P1","2024-05-06 07:08"',
            self.treatments_path.read_text(encoding="utf-8"),
        )

    def test_malformed_file_exits_with_error(self) -> None:
        _write(self.data_dir / "Hospitals.csv", '"Name","Identity"', '"General"')

        code, _, error = self._run("validate")

        self.assertEqual(code, cli.EXIT_LOAD_FAILED)
        self.assertIn("malformed row", error)

    def test_unwritable_append_exits_with_error_and_keeps_file(self) -> None:
        before = self.treatments_path.read_text(encoding="utf-8")

        code, _, error = self._run(
            "append",
            "--details", "Cast, left arm",
            "--hospital", "General",
            "--patient", "P1",
        )

        self.assertEqual(code, cli.EXIT_LOAD_FAILED)
        self.assertIn("cannot contain", error)
        self.assertEqual(self.treatments_path.read_text(encoding="utf-8"), before)
        history = cli.ChangeJournal(self.journal_path).read_history()
        self.assertEqual(history[0]["status"], "failed")

    def test_corrupted_journal_does_not_hide_saved_change(self) -> None:
        self.journal_path.write_text("{not json", encoding="utf-8")

        with self.assertLogs("orchestrator.main", level="ERROR"):
            code, output, _ = self._run(
                "append",
                "--details", "Observation",
                "--hospital", "General",
                "--patient", "P1",
            )

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(json.loads(output)["treatments"], 2)
        self.assertIn('"Observation","General","","P1",""', self.treatments_path.read_text(encoding="utf-8"))

    def test_report_writes_pdf(self) -> None:
        code, output, _ = self._run("report")

        report_path = Path(json.loads(output)["report"])
        self.assertEqual(code, cli.EXIT_OK)
        self.assertTrue(report_path.exists())
        self.assertTrue(report_path.read_bytes().startswith(b"%PDF"))


class IntegrityReportTests(unittest.TestCase):
    def test_summary_and_pdf_with_many_rejections(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            _write(
                base / "Hospitals.csv",
                '"Name","Identity"',
                *[f'"Hospital {i}",""' for i in range(30)],
            )
            _write(base / "Patients.csv", '"Medical Reference Number","Patient Name"')
            _write(base / "Providers.csv", '"Name","Number","Hospital","Doctor"')
            _write(base / "Treatments.csv", '"Details","Hospital","Provider","Patient","Date/Time Discharged"')

            summary = summarize(TreatmentWorkflow(RecordPaths.from_directory(base)).load())
            report_path = create_integrity_report(summary, output_dir=base / "out")

            self.assertEqual(summary.total_loaded, 0)
            self.assertEqual(summary.rejected["hospital"], 30)
            self.assertTrue(report_path.read_bytes().startswith(b"%PDF"))


class ChangeJournalTests(unittest.TestCase):
    def test_corrupted_journal_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "change_log.json"
            path.write_text("{not json", encoding="utf-8")

            with self.assertRaises(ValueError):
                cli.ChangeJournal(path).read_history()


if __name__ == "__main__":
    unittest.main()
