import json
import unittest

from logstruct.errors import MixedObjectFieldError
from logstruct.explain import Explanation
from logstruct.mapping import FieldMapping
from logstruct.stats import FieldStats
from logstruct.structure import (
    find_structure,
    guess_mapping_and_calculate_field_stats,
    guess_mappings_and_calculate_field_stats,
)


def _two_samples() -> list[dict[str, object]]:
    return [
        {"foo": "not a time", "time": "2018-05-24 17:28:31,735", "bar": 42, "nothing": None},
        {"foo": "whatever", "time": "2018-05-29 11:53:02,837", "bar": 17, "nothing": None},
    ]


class GuessMappingsAndStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.explanation = Explanation()

    def test_mappings_and_field_stats(self) -> None:
        analysis = guess_mappings_and_calculate_field_stats(self.explanation, _two_samples())

        mappings = analysis.field_mappings
        self.assertEqual(mappings["foo"], FieldMapping("keyword"))
        self.assertEqual(mappings["time"], FieldMapping("date", "YYYY-MM-dd HH:mm:ss,SSS"))
        self.assertEqual(mappings["bar"], FieldMapping("long"))
        self.assertNotIn("nothing", mappings)

        field_stats = analysis.field_stats
        self.assertEqual(len(field_stats), 3)
        self.assertEqual(
            field_stats["foo"],
            FieldStats(2, 2, [{"value": "not a time", "count": 1}, {"value": "whatever", "count": 1}]),
        )
        self.assertEqual(
            field_stats["time"],
            FieldStats(
                2,
                2,
                [{"value": "2018-05-24 17:28:31,735", "count": 1}, {"value": "2018-05-29 11:53:02,837", "count": 1}],
            ),
        )
        self.assertEqual(
            field_stats["bar"],
            FieldStats(2, 2, [{"value": 42.0, "count": 1}, {"value": 17.0, "count": 1}], 17.0, 42.0, 29.5, 29.5),
        )
        self.assertNotIn("nothing", field_stats)

    def test_results_are_ordered_by_field_name(self) -> None:
        analysis = guess_mappings_and_calculate_field_stats(self.explanation, _two_samples())
        self.assertEqual(list(analysis.field_mappings), ["bar", "foo", "time"])
        self.assertEqual(list(analysis.field_stats), ["bar", "foo", "time"])

    def test_fields_missing_from_some_samples(self) -> None:
        samples = [{"a": "x"}, {"b": 1}, {"a": "y", "b": [2, 3]}]
        analysis = guess_mappings_and_calculate_field_stats(self.explanation, samples)
        self.assertEqual(analysis.field_mappings["a"], FieldMapping("keyword"))
        self.assertEqual(analysis.field_mappings["b"], FieldMapping("long"))
        self.assertEqual(analysis.field_stats["b"].count, 3)
        self.assertEqual(analysis.field_stats["a"].count, 2)

    def test_object_fields_have_no_stats(self) -> None:
        samples = [{"o": {"a": 1}, "n": 1}, {"o": {"a": 2}, "n": 2}]
        analysis = guess_mappings_and_calculate_field_stats(self.explanation, samples)
        self.assertEqual(analysis.field_mappings["o"], FieldMapping("object"))
        self.assertNotIn("o", analysis.field_stats)
        self.assertIn("n", analysis.field_stats)

    def test_mixed_object_field_aborts(self) -> None:
        samples = [{"foo": {"name": "value1"}}, {"foo": "value2"}]
        with self.assertRaises(MixedObjectFieldError) as context:
            guess_mappings_and_calculate_field_stats(self.explanation, samples)
        self.assertIn("[foo]", str(context.exception))

    def test_repeatable(self) -> None:
        first = guess_mappings_and_calculate_field_stats(Explanation(), _two_samples())
        second = guess_mappings_and_calculate_field_stats(Explanation(), _two_samples())
        self.assertEqual(json.dumps(first.to_dict()), json.dumps(second.to_dict()))

    def test_single_field(self) -> None:
        mapping, stats = guess_mapping_and_calculate_field_stats(self.explanation, "level", ["INFO", "WARN", "INFO"])
        self.assertEqual(mapping, FieldMapping("keyword"))
        self.assertEqual(stats.top_hits[0], {"value": "INFO", "count": 2})
        self.assertIsNone(guess_mapping_and_calculate_field_stats(self.explanation, "level", [None]))


class FindStructureTests(unittest.TestCase):
    def test_report(self) -> None:
        report = find_structure(_two_samples())
        self.assertEqual(report.num_samples, 2)
        self.assertEqual(report.timestamp_field, "time")
        self.assertEqual(report.timestamp.grok_pattern_name, "TIMESTAMP_ISO8601")
        self.assertTrue(report.need_client_timezone)
        self.assertEqual(report.field_mappings["time"], FieldMapping("date", "YYYY-MM-dd HH:mm:ss,SSS"))
        self.assertTrue(report.explanation)

    def test_epoch_timestamp_field_is_mapped_as_date(self) -> None:
        samples = [{"ts": 1526400896, "msg": "a"}, {"ts": 1526400900, "msg": "b"}]
        report = find_structure(samples)
        self.assertEqual(report.timestamp_field, "ts")
        self.assertFalse(report.need_client_timezone)
        self.assertEqual(report.field_mappings["ts"], FieldMapping("date", "UNIX"))
        self.assertTrue(report.field_stats["ts"].is_numeric)

    def test_report_without_timestamp(self) -> None:
        report = find_structure([{"level": "INFO"}, {"level": "WARN"}])
        self.assertIsNone(report.timestamp_field)
        self.assertIsNone(report.timestamp)
        self.assertFalse(report.need_client_timezone)

    def test_report_to_dict_is_serialisable(self) -> None:
        data = find_structure(_two_samples()).to_dict()
        encoded = json.loads(json.dumps(data))
        self.assertEqual(encoded["timestamp_field"], "time")
        self.assertEqual(encoded["timestamp"]["date_formats"], ["YYYY-MM-dd HH:mm:ss,SSS"])
        self.assertEqual(encoded["field_mappings"]["bar"], {"type": "long"})
        self.assertEqual(encoded["field_stats"]["bar"]["mean_value"], 29.5)
        self.assertIn("explanation", encoded)
        self.assertNotIn("explanation", find_structure(_two_samples()).to_dict(include_explanation=False))


if __name__ == "__main__":
    unittest.main()
