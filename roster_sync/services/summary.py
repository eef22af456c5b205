from __future__ import annotations

from ..models.processing_result import ConsolidationResult, RoutingResult

"""SUMMARY line rendering for both pipelines.

Formats:
    SUMMARY source_rows={n} skipped_rows={s} students={k} elapsed_sec={e}
    SUMMARY rows={n} routed={r} created={c} failed={f} elapsed_sec={e}
"""

__all__ = [
    "format_seconds",
    "render_consolidation_summary",
    "render_routing_summary",
]


def format_seconds(seconds: float) -> str:
    """Integer seconds print without decimals; tiny values avoid scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_consolidation_summary(result: ConsolidationResult) -> str:
    return (
        f"SUMMARY source_rows={result.source_rows} "
        f"skipped_rows={result.skipped_rows} "
        f"students={result.students} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )


def render_routing_summary(result: RoutingResult) -> str:
    """
    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    >>> render_routing_summary(RoutingResult(outcomes=[], start_time=t, end_time=t))
    'SUMMARY rows=0 routed=0 created=0 failed=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY rows={len(result.outcomes)} "
        f"routed={result.routed} "
        f"created={result.created} "
        f"failed={len(result.failures)} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
