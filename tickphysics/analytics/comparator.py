"""Side-by-side comparison of EA runs (baseline vs candidate versions).

Deltas are point differences only; no significance testing is done.
"""

from dataclasses import dataclass, field

import pandas as pd

from tickphysics.analytics.metrics import MetricsSummary, compute_metrics
from tickphysics.utils.constants import LOWER_IS_BETTER

IMPROVED = "improved"
REGRESSED = "regressed"
UNCHANGED = "unchanged"


@dataclass
class MetricDelta:
    metric: str
    baseline: float
    candidate: float
    delta: float
    pct_change: float
    status: str


@dataclass
class Comparison:
    baseline_label: str
    candidate_label: str
    deltas: list[MetricDelta] = field(default_factory=list)

    def get(self, metric: str) -> MetricDelta | None:
        return next((d for d in self.deltas if d.metric == metric), None)

    @property
    def improved(self) -> list[str]:
        return [d.metric for d in self.deltas if d.status == IMPROVED]

    @property
    def regressed(self) -> list[str]:
        return [d.metric for d in self.deltas if d.status == REGRESSED]

    def to_frame(self) -> pd.DataFrame:
        columns = ["metric", "baseline", "candidate", "delta", "pct_change", "status"]
        return pd.DataFrame([d.__dict__ for d in self.deltas], columns=columns).set_index("metric")


def _as_metrics(run) -> dict:
    """Numeric metrics of a summary, dict or raw trade table."""
    if isinstance(run, MetricsSummary):
        data = run.to_dict()
    elif isinstance(run, (pd.DataFrame, pd.Series, list, tuple)):
        data = compute_metrics(run).to_dict()
    elif isinstance(run, dict):
        data = run
    else:
        raise TypeError(f"Cannot compare object of type {type(run).__name__}")
    return {
        k: float(v) for k, v in data.items()
        if isinstance(v, (int, float)) and not isinstance(v, bool)
    }


def classify(metric: str, delta: float) -> str:
    if delta == 0:
        return UNCHANGED
    better = delta < 0 if metric in LOWER_IS_BETTER else delta > 0
    return IMPROVED if better else REGRESSED


def compare(
    baseline,
    candidate,
    labels: tuple[str, str] = ("baseline", "candidate"),
) -> Comparison:
    """Signed delta (candidate - baseline) for every metric both runs share."""
    base = _as_metrics(baseline)
    cand = _as_metrics(candidate)

    comparison = Comparison(baseline_label=labels[0], candidate_label=labels[1])
    for metric, base_val in base.items():
        if metric not in cand:
            continue
        cand_val = cand[metric]
        delta = cand_val - base_val
        pct = delta / abs(base_val) * 100 if base_val else 0.0
        comparison.deltas.append(
            MetricDelta(metric, base_val, cand_val, delta, pct, classify(metric, delta))
        )
    return comparison


def compare_many(runs: dict[str, object]) -> pd.DataFrame:
    """Metrics per run (columns) plus each run's delta against the first run."""
    if not runs:
        return pd.DataFrame()

    metrics = {label: _as_metrics(run) for label, run in runs.items()}
    table = pd.DataFrame(metrics)
    first = next(iter(metrics))
    for label in list(metrics)[1:]:
        table[f"{label} vs {first}"] = table[label] - table[first]
    return table
