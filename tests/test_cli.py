import json
import tempfile
import unittest
from pathlib import Path

import yaml
from typer.testing import CliRunner

from logstruct.cli import app


class CommandLineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.tempdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tempdir.cleanup)
        self.root = Path(self.tempdir.name)
        self.samples_path = self.root / "samples.jsonl"
        records = [
            {"time": "2018-05-24 17:28:31,735", "level": "INFO", "bytes": 42},
            {"time": "2018-05-29 11:53:02,837", "level": "WARN", "bytes": 17},
        ]
        self.samples_path.write_text("\n".join(json.dumps(record) for record in records))

    def test_analyze_prints_json_report(self) -> None:
        result = self.runner.invoke(app, ["analyze", str(self.samples_path)])
        self.assertEqual(result.exit_code, 0, result.output)
        report = json.loads(result.stdout)
        self.assertEqual(report["timestamp_field"], "time")
        self.assertEqual(report["field_mappings"]["bytes"], {"type": "long"})
        self.assertNotIn("explanation", report)

    def test_analyze_writes_yaml_with_explanation(self) -> None:
        output_path = self.root / "out" / "report.yaml"
        result = self.runner.invoke(
            app,
            ["analyze", str(self.samples_path), "--format", "yaml", "--explain", "--output", str(output_path)],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        report = yaml.safe_load(output_path.read_text())
        self.assertEqual(report["field_mappings"]["level"], {"type": "keyword"})
        self.assertTrue(report["explanation"])

    def test_analyze_honours_config(self) -> None:
        config_path = self.root / "inference.yaml"
        config_path.write_text("num_top_hits: 1\n")
        result = self.runner.invoke(app, ["analyze", str(self.samples_path), "--config", str(config_path)])
        self.assertEqual(result.exit_code, 0, result.output)
        report = json.loads(result.stdout)
        self.assertEqual(len(report["field_stats"]["level"]["top_hits"]), 1)

    def test_analyze_reports_mixed_object_fields(self) -> None:
        path = self.root / "mixed.jsonl"
        path.write_text('{"foo": {"name": "value1"}}\n{"foo": "value2"}\n')
        result = self.runner.invoke(app, ["analyze", str(path)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Field [foo]", result.output)

    def test_timestamp(self) -> None:
        result = self.runner.invoke(app, ["timestamp", str(self.samples_path)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"field": "time"', result.output)
        self.assertIn("TIMESTAMP_ISO8601", result.output)

    def test_timestamp_not_found(self) -> None:
        path = self.root / "plain.jsonl"
        path.write_text('{"level": "INFO"}\n{"level": "WARN"}\n')
        result = self.runner.invoke(app, ["timestamp", str(path)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("No consistent timestamp field found", result.output)

    def test_formats(self) -> None:
        result = self.runner.invoke(app, ["formats"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Timestamp formats", result.output)


if __name__ == "__main__":
    unittest.main()
