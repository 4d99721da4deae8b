"""Derived metrics: the three numeric blocks shown on the certificate."""

from schemas import DerivedMetrics, FormState, MetricItem

CHECK_IN_DAYS_LABEL = "打卡天数"
TOTAL_TARGET_COUNT_LABEL = "总目标数"
TOTAL_POINTS_LABEL = "总积分数"

MetricInputs = tuple[int | None, int | None, int | None]


def project_metrics(
    check_in_days: int | None,
    total_target_count: int | None,
    total_points: int | None,
) -> DerivedMetrics:
    """Pair each value with its label, in display order. Unset values show 0."""
    return (
        MetricItem(label=CHECK_IN_DAYS_LABEL, value=check_in_days or 0),
        MetricItem(label=TOTAL_TARGET_COUNT_LABEL, value=total_target_count or 0),
        MetricItem(label=TOTAL_POINTS_LABEL, value=total_points or 0),
    )


def metric_inputs(state: FormState) -> MetricInputs:
    return (state.check_in_days, state.total_target_count, state.total_points)


class MetricsProjector:
    """Memoizes ``project_metrics`` on the last three inputs it saw.

    Changes to any other field (avatar, name, camp) return the cached tuple
    itself, so callers can compare by identity to skip re-rendering the
    metric blocks.
    """

    def __init__(self) -> None:
        self._inputs: MetricInputs | None = None
        self._metrics: DerivedMetrics | None = None
        self.computations = 0

    def project(self, state: FormState) -> DerivedMetrics:
        inputs = metric_inputs(state)
        if self._metrics is None or inputs != self._inputs:
            self._metrics = project_metrics(*inputs)
            self._inputs = inputs
            self.computations += 1
        return self._metrics
