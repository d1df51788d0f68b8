from __future__ import annotations

import os
import tempfile
from typing import Any, List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from reportlab.lib import colors  # noqa: E402
from reportlab.lib.pagesizes import letter  # noqa: E402
from reportlab.lib.styles import getSampleStyleSheet  # noqa: E402
from reportlab.lib.units import inch  # noqa: E402
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle  # noqa: E402

from .stats import Summary  # noqa: E402


def _save_plot(fig, path: str) -> str:
    fig.tight_layout()
    fig.savefig(path, dpi=160)
    plt.close(fig)
    return path


def plot_adherence_trend(summary: Summary, out_path: str) -> Optional[str]:
    points = summary.recent_trend
    if not points:
        return None
    games = [p.game for p in points]
    rates = [p.rate for p in points]
    fig, ax = plt.subplots(figsize=(6.5, 3.2))
    ax.plot(games, rates, color="#22d3ee", linewidth=2)
    win_x = [p.game for p in points if p.result == "Win"]
    win_y = [p.rate for p in points if p.result == "Win"]
    loss_x = [p.game for p in points if p.result != "Win"]
    loss_y = [p.rate for p in points if p.result != "Win"]
    ax.scatter(win_x, win_y, color="#2f9e44", zorder=3, label="Win")
    ax.scatter(loss_x, loss_y, color="#e03131", zorder=3, label="Loss")
    ax.set_ylim(0, 100)
    ax.set_xlabel("Game")
    ax.set_ylabel("Adherence %")
    ax.set_title(f"Adherence Trend (last {len(points)} games)")
    ax.legend(loc="lower right", fontsize=8)
    return _save_plot(fig, out_path)


def plot_bucket_win_rate(summary: Summary, out_path: str) -> Optional[str]:
    if not summary.total_games:
        return None
    labels = [b.range for b in summary.adherence_buckets]
    values = [b.win_rate for b in summary.adherence_buckets]
    fig, ax = plt.subplots(figsize=(6.5, 3.2))
    bars = ax.bar(labels, values, color="#8b5cf6")
    for bar, b in zip(bars, summary.adherence_buckets):
        ax.annotate(f"{b.games}g", (bar.get_x() + bar.get_width() / 2, bar.get_height()), ha="center", fontsize=7)
    ax.set_ylim(0, 100)
    ax.set_xlabel("Adherence")
    ax.set_ylabel("Win rate %")
    ax.set_title("Win Rate by Adherence")
    return _save_plot(fig, out_path)


def _history_table(summary: Summary) -> Table:
    rows: List[List[str]] = [["Result", "Champion", "Role", "Adherence", "Date"]]
    for r in summary.recent_history_table:
        rows.append([r.result, r.subject, r.role, f"{r.achievement_rate:.1f}%", r.timestamp[:10]])
    if len(rows) == 1:
        rows.append(["-", "-", "-", "-", "-"])
    table = Table(rows, colWidths=[0.8 * inch, 1.6 * inch, 1.0 * inch, 1.0 * inch, 1.2 * inch])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONT", (0, 0), (-1, -1), "Helvetica", 8),
            ]
        )
    )
    return table


def build_pdf(summary: Summary, output_path: str) -> None:
    styles = getSampleStyleSheet()
    story: List[Any] = []
    story.append(Paragraph("Coaching Dashboard", styles["Title"]))
    story.append(
        Paragraph(
            f"Games: <b>{summary.total_games}</b> • Win rate: <b>{summary.overall_win_rate:.1f}%</b> "
            f"• Average adherence: <b>{summary.average_adherence:.1f}%</b>",
            styles["BodyText"],
        )
    )
    story.append(Spacer(1, 0.2 * inch))

    story.append(Paragraph("Recent Matches", styles["Heading3"]))
    story.append(_history_table(summary))
    story.append(Spacer(1, 0.2 * inch))

    with tempfile.TemporaryDirectory() as tmp:
        plots = [
            ("trend.png", plot_adherence_trend, "Adherence per game; dots mark wins and losses."),
            ("buckets.png", plot_bucket_win_rate, "Win rate grouped by how much advice was followed."),
        ]
        for name, fn, caption in plots:
            path = os.path.join(tmp, name)
            img = fn(summary, path)
            if img and os.path.exists(img):
                story.append(Paragraph(caption, styles["BodyText"]))
                story.append(Image(img, width=6.5 * inch, height=3.2 * inch))
                story.append(Spacer(1, 0.2 * inch))

        doc = SimpleDocTemplate(output_path, pagesize=letter)
        doc.build(story)
