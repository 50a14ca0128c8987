import json
import unittest
from decimal import Decimal

import msgspec
import numpy as np
import pandas as pd

from periodmetrics.adapters import decode_values, encode_changes, to_frame, to_long_frame, values_from_frame
from periodmetrics.periods import Month, Quarter, Year
from periodmetrics.table import MetricConfiguration, MetricValue, MetricsTable, make_configuration


def _table():
    table = MetricsTable(
        make_configuration(
            [
                MetricConfiguration("revenue", aggregate="sum"),
                MetricConfiguration("headcount"),
            ],
            quarter=True,
        )
    )
    table.update(
        [
            MetricValue("revenue", Month(1, 2023), Decimal("10.5")),
            MetricValue("revenue", Month(2, 2023), Decimal("4.5")),
            MetricValue("headcount", Month(2, 2023), Decimal(3)),
        ]
    )
    return table


class FramesTests(unittest.TestCase):
    def test_to_frame_wide_float(self):
        df = to_frame(_table())

        self.assertListEqual(df.index.tolist(), ["revenue", "headcount"])
        self.assertListEqual(df.columns.tolist(), ["2023-01", "2023-02", "2023-33", "2023-34", "2023-35", "2023-36"])
        self.assertEqual(df.loc["revenue", "2023-33"], 15.0)
        self.assertEqual(df.loc["headcount", "2023-02"], 3.0)
        self.assertTrue(np.isnan(df.loc["headcount", "2023-01"]))
        self.assertEqual(df.dtypes.iloc[0], np.dtype("float64"))

    def test_to_frame_without_aggregates_keeps_decimals(self):
        df = to_frame(_table(), include_aggregates=False, as_float=False)

        self.assertListEqual(df.columns.tolist(), ["2023-01", "2023-02"])
        self.assertEqual(df.loc["revenue", "2023-01"], Decimal("10.5"))
        self.assertIsNone(df.loc["headcount", "2023-01"])

    def test_to_long_frame(self):
        df = to_long_frame(_table())

        self.assertListEqual(df.columns.tolist(), ["metric", "period", "value", "is_aggregate"])
        self.assertEqual(len(df), 7)
        q1 = df[(df["metric"] == "revenue") & (df["period"] == "2023-33")].iloc[0]
        self.assertEqual(q1["value"], Decimal(15))
        self.assertTrue(bool(q1["is_aggregate"]))
        self.assertFalse(bool(df[df["metric"] == "headcount"]["is_aggregate"].any()))

    def test_to_long_frame_empty_table(self):
        df = to_long_frame(MetricsTable(make_configuration([MetricConfiguration("m")])))
        self.assertEqual(len(df), 0)
        self.assertListEqual(df.columns.tolist(), ["metric", "period", "value", "is_aggregate"])

    def test_values_from_frame(self):
        df = pd.DataFrame(
            {
                "metric": ["revenue", "revenue", "headcount", "headcount"],
                "period": ["2023-01", Quarter(2, 2023), 2023, "2023-03"],
                "value": [1.1, 2, np.nan, None],
            }
        )

        values = values_from_frame(df)

        self.assertListEqual(
            values,
            [
                MetricValue("revenue", Month(1, 2023), Decimal("1.1")),
                MetricValue("revenue", Quarter(2, 2023), Decimal(2)),
                MetricValue("headcount", Year(2023), None),
                MetricValue("headcount", Month(3, 2023), None),
            ],
        )

    def test_values_from_frame_round_trips_long_frame(self):
        table = _table()
        df = to_long_frame(table)
        df = df[~df["is_aggregate"]]

        rebuilt = MetricsTable(table.configuration, values_from_frame(df))

        for metric in table.get_metrics():
            for period in table.get_periods():
                self.assertEqual(rebuilt.get_value(metric, period), table.get_value(metric, period))

    def test_values_from_frame_missing_columns(self):
        with self.assertRaises(ValueError):
            values_from_frame(pd.DataFrame({"metric": ["a"], "period": ["2023"]}))

    def test_values_from_frame_malformed_period(self):
        df = pd.DataFrame({"metric": ["a"], "period": ["2023-Q1"], "value": [1.0]})
        with self.assertRaises(ValueError):
            values_from_frame(df)


class RecordsTests(unittest.TestCase):
    def test_decode_values(self):
        payload = json.dumps(
            [
                {"metric": "revenue", "period": "2023-01", "value": "10.50"},
                {"metric": "revenue", "period": "2023-34", "value": 3},
                {"metric": "headcount", "period": "2023", "value": None},
                {"metric": "headcount", "period": "2023-02"},
            ]
        )

        values = decode_values(payload)

        self.assertEqual(values[0], MetricValue("revenue", Month(1, 2023), Decimal("10.50")))
        self.assertEqual(values[1].period, Quarter(2, 2023))
        self.assertEqual(values[1].value, Decimal(3))
        self.assertEqual(values[2], MetricValue("headcount", Year(2023), None))
        self.assertIsNone(values[3].value)

    def test_decode_values_rejects_bad_shape(self):
        with self.assertRaises(msgspec.ValidationError):
            decode_values(b'[{"period": "2023-01", "value": 1}]')

    def test_decode_values_keeps_large_numbers_exact(self):
        values = decode_values(
            b'[{"metric": "m", "period": "2023-01", "value": 12345678901234567891},'
            b' {"metric": "m", "period": "2023-02", "value": 0.1}]'
        )

        self.assertEqual(values[0].value, Decimal("12345678901234567891"))
        self.assertEqual(values[1].value, Decimal("0.1"))

    def test_decode_values_rejects_non_numeric_value(self):
        with self.assertRaises(msgspec.ValidationError):
            decode_values(b'[{"metric": "m", "period": "2023-01", "value": "abc"}]')

    def test_decode_values_rejects_non_finite_value(self):
        for raw in (b'"NaN"', b'"Infinity"', b'"-Infinity"'):
            with self.subTest(raw=raw):
                with self.assertRaises((ValueError, msgspec.ValidationError)):
                    decode_values(b'[{"metric": "m", "period": "2023-01", "value": ' + raw + b"}]")

    def test_decode_values_rejects_bad_period(self):
        with self.assertRaises(ValueError):
            decode_values(b'[{"metric": "m", "period": "2023-13", "value": 1}]')

    def test_encode_changes(self):
        table = _table()
        changes = table.update([MetricValue("revenue", Month(3, 2023), Decimal(1))])

        decoded = json.loads(encode_changes(changes))

        self.assertEqual(decoded[0], {"metric": "revenue", "period": "2023-03", "value": "1", "old_value": None})
        self.assertEqual(decoded[1], {"metric": "revenue", "period": "2023-33", "value": "16.0", "old_value": "15.0"})


if __name__ == "__main__":
    unittest.main()
