"""
Metrics table with per-cell change subscriptions.

Observers subscribe to one (metric, period) cell and are called, without
arguments, each time an update() changes that cell. Callbacks run
synchronously inside update(), after all writes and recomputation.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from periodmetrics import config
from periodmetrics.errors import ReentrantUpdateError, UnknownMetricError
from periodmetrics.periods import Period, period_key
from .configuration import MetricValue, UpdatedMetricValue
from .metrics_table import MetricsTable


Callback = Callable[[], object]


class SubscribableMetricsTable(MetricsTable):
    """
    A MetricsTable notifying subscribers of the cells changed by each update.

    Callbacks may call update() again; nesting is capped at
    `max_update_depth` (config.MAX_UPDATE_DEPTH by default).
    """

    def __init__(self, configuration, initial_values=None, *, logger=None, max_update_depth: Optional[int] = None):
        # Allocated on first subscribe()
        self._subscriptions: Optional[Dict[str, Dict[str, List[Callback]]]] = None
        self._update_depth = 0
        self._max_update_depth = config.MAX_UPDATE_DEPTH if max_update_depth is None else max_update_depth
        super().__init__(configuration, initial_values, logger=logger)

    def subscribe(self, metric: str, period: Period, callback: Callback) -> Callable[[], None]:
        """
        Call `callback` whenever the value of `metric` for `period` changes.

        Returns
        -------
        A function removing this subscription. Calling it more than once is harmless.
        """
        if self._subscriptions is None:
            self._subscriptions = {m.name: {} for m in self.configuration.metrics}
        by_period = self._subscriptions.get(metric)
        if by_period is None:
            raise UnknownMetricError(metric)

        callbacks = by_period.setdefault(period_key(period), [])
        # Wrap so that the same callable subscribed twice is removed one at a time
        handle = _Subscription(callback)
        callbacks.append(handle)

        def unsubscribe() -> None:
            if handle in callbacks:
                callbacks.remove(handle)

        return unsubscribe

    def subscription_count(self, metric: Optional[str] = None, period: Optional[Period] = None) -> int:
        """
        Number of active subscriptions, optionally restricted to a metric and/or a period.
        """
        if self._subscriptions is None:
            return 0
        key = None if period is None else period_key(period)
        n = 0
        for name, by_period in self._subscriptions.items():
            if metric is not None and name != metric:
                continue
            for k, callbacks in by_period.items():
                if key is None or k == key:
                    n += len(callbacks)
        return n

    def update(self, values: Iterable[MetricValue]) -> List[UpdatedMetricValue]:
        if self._update_depth >= self._max_update_depth:
            raise ReentrantUpdateError(
                f"update() nested more than {self._max_update_depth} levels from subscription callbacks"
            )

        self._update_depth += 1
        try:
            updated = super().update(values)
            self._notify(updated)
        finally:
            self._update_depth -= 1
        return updated

    def _clone_kwargs(self) -> dict:
        kwargs = super()._clone_kwargs()
        kwargs["max_update_depth"] = self._max_update_depth
        return kwargs

    def _notify(self, updated: List[UpdatedMetricValue]) -> None:
        """
        Call the subscribers of every changed cell, each cell once.

        Subscribers are collected for the whole pass before the first call,
        so (un)subscribing from a callback only affects later updates.
        If a callback hits the nesting cap, the remaining subscribers of this
        pass are still called and the error is raised afterwards.
        """
        if self._subscriptions is None:
            return
        cells = dict.fromkeys((change.metric, period_key(change.period)) for change in updated)
        pending = [
            handle
            for metric, key in cells
            for handle in list(self._subscriptions.get(metric, {}).get(key, ()))
        ]

        depth_error = None
        for handle in pending:
            try:
                handle.callback()
            except ReentrantUpdateError as exc:
                if depth_error is None:
                    depth_error = exc
        if depth_error is not None:
            raise depth_error


class _Subscription:
    """Identity handle for one subscribe() call."""

    __slots__ = ("callback",)

    def __init__(self, callback: Callback):
        self.callback = callback
