from dataclasses import dataclass


@dataclass
class StageMetrics:
    """Track work done by each pipeline stage."""
    name: str
    unit_count: int = 0
    cache_hits: int = 0
    fetched: int = 0
    duration_ms: float = 0.0


def format_summary(metrics):
    """Render the end-of-run stage table as a list of lines."""
    lines = [
        "=" * 60,
        "STAGE SUMMARY",
        "=" * 60,
        f"{'Stage':<24} {'Units':>7} {'Cached':>7} {'Fetched':>8} {'Time':>10}",
        "-" * 60,
    ]
    for m in metrics:
        lines.append(
            f"{m.name:<24} {m.unit_count:>7} {m.cache_hits:>7} {m.fetched:>8} {m.duration_ms:>8.0f}ms"
        )
    lines.append("=" * 60)
    return lines
