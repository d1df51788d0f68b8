from __future__ import annotations

from typing import List

from .models import Advice
from .stats import Summary


def render_summary(summary: Summary) -> str:
    lines = []
    lines.append("COACHING DASHBOARD")
    lines.append(
        f"Games: {summary.total_games} | Win rate: {summary.overall_win_rate:.1f}% | "
        f"Avg adherence: {summary.average_adherence:.1f}%"
    )
    lines.append("")

    lines.append("Adherence vs Win Rate")
    for b in summary.adherence_buckets:
        lines.append(f"- {b.range:>8}: win rate {b.win_rate:5.1f}% over {b.games} games")
    lines.append("")

    lines.append(f"Adherence Trend (last {len(summary.recent_trend)})")
    if summary.recent_trend:
        marks = " ".join(f"{p.rate:.0f}{'W' if p.result == 'Win' else 'L'}" for p in summary.recent_trend)
        lines.append("  " + marks)
    else:
        lines.append("  no games recorded yet")
    lines.append("")

    lines.append("Recent Matches")
    for r in summary.recent_history_table:
        lines.append(
            f"- {r.result:<4} {r.subject} ({r.role}) | adherence {r.achievement_rate:.1f}% | {r.timestamp}"
        )

    return "\n".join(lines)


def render_checklist(advice: List[Advice], checked: set) -> str:
    if not advice:
        return "No advice in the knowledge base for this role and champion yet."
    lines = []
    for idx, a in enumerate(advice):
        box = "[x]" if idx in checked else "[ ]"
        lines.append(f"{idx + 1:>2}. {box} ({a.category.value}/{a.importance.value}) {a.content}")
    return "\n".join(lines)
