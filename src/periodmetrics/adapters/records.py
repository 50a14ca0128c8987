"""
JSON codec for metric values exchanged with data sources and UIs.

Input payloads are JSON arrays of records:

    [{"metric": "beginningMRR", "period": "2023-01", "value": "10.5"}, ...]

`value` may be a JSON number, a numeric string, or null (absent). Both are
decoded straight to Decimal, so integers of any size stay exact. NaN and
infinities are rejected.

Changed-values lists are encoded as:

    [{"metric": ..., "period": "2023-33", "value": "10", "old_value": null}, ...]
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence, Union

import msgspec

from periodmetrics.periods import is_period_key, period_from_key, period_key
from periodmetrics.table import MetricValue, UpdatedMetricValue


# -----------------------------
# msgspec structures
# -----------------------------

class MetricRecord(msgspec.Struct):
    metric: str
    period: str
    value: Optional[Decimal] = None

    def to_metric_value(self) -> MetricValue:
        if not is_period_key(self.period):
            raise ValueError(f"Malformed period key: {self.period!r}")
        if self.value is not None and not self.value.is_finite():
            raise ValueError(f"Non-finite value for {self.metric}@{self.period}: {self.value}")
        return MetricValue(metric=self.metric, period=period_from_key(self.period), value=self.value)


class ChangeRecord(msgspec.Struct):
    metric: str
    period: str
    value: Optional[Decimal]
    old_value: Optional[Decimal]


_decoder = msgspec.json.Decoder(List[MetricRecord])
_encoder = msgspec.json.Encoder()


def decode_values(payload: Union[bytes, str]) -> List[MetricValue]:
    """
    Decode a JSON array of metric records into MetricValue triples.

    Raises
    ------
    msgspec.ValidationError
        If the payload does not have the expected shape, including values
        that are not decimal numbers.
    ValueError
        If a period key is malformed or a value is NaN or infinite.
    """
    return [record.to_metric_value() for record in _decoder.decode(payload)]


def encode_changes(updated: Sequence[UpdatedMetricValue]) -> bytes:
    """
    Encode a changed-values list (as returned by update()) as JSON.
    Decimals are encoded as strings.
    """
    return _encoder.encode(
        [
            ChangeRecord(
                metric=change.metric,
                period=period_key(change.period),
                value=change.value,
                old_value=change.old_value,
            )
            for change in updated
        ]
    )
