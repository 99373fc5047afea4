import unittest

from logstruct.stats import FieldStatsCalculator, calculate_field_stats


class FieldStatsTests(unittest.TestCase):
    def test_numeric_stats(self) -> None:
        stats = calculate_field_stats([42, 17])
        self.assertEqual(stats.count, 2)
        self.assertEqual(stats.cardinality, 2)
        self.assertEqual(stats.min_value, 17.0)
        self.assertEqual(stats.max_value, 42.0)
        self.assertEqual(stats.mean_value, 29.5)
        self.assertEqual(stats.median_value, 29.5)
        self.assertEqual(stats.top_hits, [{"value": 42.0, "count": 1}, {"value": 17.0, "count": 1}])

    def test_numeric_equality_across_representations(self) -> None:
        stats = calculate_field_stats([1, "1", 1.0, 2])
        self.assertEqual(stats.count, 4)
        self.assertEqual(stats.cardinality, 2)
        self.assertEqual(stats.top_hits, [{"value": 1.0, "count": 3}, {"value": 2.0, "count": 1}])
        self.assertEqual(stats.mean_value, 1.25)
        self.assertEqual(stats.median_value, 1.0)

    def test_odd_median(self) -> None:
        stats = calculate_field_stats(["3", "-1", "2"])
        self.assertEqual(stats.median_value, 2.0)
        self.assertEqual(stats.min_value, -1.0)

    def test_large_longs_stay_exact(self) -> None:
        big = 2**53
        stats = calculate_field_stats([big, big + 1, str(big + 3)])
        self.assertEqual(stats.cardinality, 3)
        self.assertEqual(stats.min_value, big)
        self.assertEqual(stats.max_value, big + 3)
        self.assertIsInstance(stats.max_value, int)
        self.assertEqual(stats.median_value, big + 1)
        self.assertEqual([hit["value"] for hit in stats.top_hits], [float(big), big + 1, big + 3])

    def test_trailing_newline_is_not_numeric(self) -> None:
        stats = calculate_field_stats(["42\n", "17"])
        self.assertFalse(stats.is_numeric)
        self.assertEqual(stats.top_hits[0], {"value": "42\n", "count": 1})

    def test_string_stats(self) -> None:
        stats = calculate_field_stats(["a", "b", "a", "c", "b", "a"])
        self.assertEqual(stats.count, 6)
        self.assertEqual(stats.cardinality, 3)
        self.assertEqual(
            stats.top_hits,
            [{"value": "a", "count": 3}, {"value": "b", "count": 2}, {"value": "c", "count": 1}],
        )
        self.assertFalse(stats.is_numeric)
        self.assertIsNone(stats.mean_value)
        self.assertNotIn("min_value", stats.to_dict())

    def test_ties_keep_first_occurrence_order(self) -> None:
        stats = calculate_field_stats(["z", "y", "x", "y", "z"])
        self.assertEqual([hit["value"] for hit in stats.top_hits], ["z", "y", "x"])

    def test_top_hits_are_truncated(self) -> None:
        values = [f"v{i}" for i in range(15)] + ["v14"]
        stats = calculate_field_stats(values)
        self.assertEqual(stats.cardinality, 15)
        self.assertEqual(len(stats.top_hits), 10)
        self.assertEqual(stats.top_hits[0], {"value": "v14", "count": 2})
        self.assertEqual(len(calculate_field_stats(values, num_top_hits=3).top_hits), 3)

    def test_mixed_values_are_not_numeric(self) -> None:
        stats = calculate_field_stats([1, "x"])
        self.assertFalse(stats.is_numeric)
        self.assertEqual(stats.top_hits, [{"value": "1", "count": 1}, {"value": "x", "count": 1}])

    def test_booleans_are_not_numeric(self) -> None:
        stats = calculate_field_stats([True, False, True])
        self.assertFalse(stats.is_numeric)
        self.assertEqual(stats.top_hits[0], {"value": "true", "count": 2})

    def test_arrays_and_nulls(self) -> None:
        stats = calculate_field_stats([[1, 2], None, [3, [None]]])
        self.assertEqual(stats.count, 3)
        self.assertEqual(stats.mean_value, 2.0)

    def test_accumulates_across_calls(self) -> None:
        calculator = FieldStatsCalculator()
        calculator.accept([5, 10])
        calculator.accept(["15"])
        stats = calculator.calculate()
        self.assertEqual(stats.count, 3)
        self.assertEqual(stats.max_value, 15.0)
        self.assertEqual(stats.median_value, 10.0)

    def test_to_dict(self) -> None:
        summary = calculate_field_stats([2, 4]).to_dict()
        self.assertEqual(
            summary,
            {
                "count": 2,
                "cardinality": 2,
                "min_value": 2.0,
                "max_value": 4.0,
                "mean_value": 3.0,
                "median_value": 3.0,
                "top_hits": [{"value": 2.0, "count": 1}, {"value": 4.0, "count": 1}],
            },
        )


if __name__ == "__main__":
    unittest.main()
