"""Plain-text rendering of report summaries.

Output is chat-friendly text; delivery is the caller's concern.
"""
from __future__ import annotations

from zoneinfo import ZoneInfo

from ..common.formatting import fmt_hours, fmt_one_decimal, fmt_time, long_label, short_label, weekday_label
from ..core.enums import DayStatus
from .model import DailySummary, DayLine, PeriodSummary

_STATUS_LABEL = {
    DayStatus.COMPLETED: ("✅", "Completed"),
    DayStatus.IN_PROGRESS: ("🟢", "In progress"),
    DayStatus.INCOMPLETE: ("🟡", "Incomplete"),
    DayStatus.NO_ACTIVITY: ("📍", "No activity recorded"),
}

_DAY_MARKER = {
    DayStatus.COMPLETED: "✅",
    DayStatus.IN_PROGRESS: "🟡",
    DayStatus.INCOMPLETE: "🟡",
    DayStatus.NO_ACTIVITY: "⚪",
}


def daily_title(summary: DailySummary) -> str:
    return f"📊 Daily Report - {long_label(summary.work_date)}"


def weekly_title(summary: PeriodSummary) -> str:
    return f"📊 Weekly Report - {short_label(summary.start)} - {short_label(summary.end)}, {summary.end.year}"


def monthly_title(summary: PeriodSummary) -> str:
    return f"📊 Monthly Report - {summary.start.strftime('%B %Y')}"


def range_title(summary: PeriodSummary) -> str:
    return f"📊 Range Report - {short_label(summary.start)} - {short_label(summary.end)}, {summary.end.year}"


def render_daily(summary: DailySummary, tz: ZoneInfo) -> str:
    icon, label = _STATUS_LABEL[summary.status]
    lines = [daily_title(summary), "", f"{icon} Status: {label}"]

    if summary.first_check_in:
        lines.append(f"📍 Check-in: {fmt_time(summary.first_check_in, tz)}")
    if summary.last_check_out:
        lines.append(f"📤 Check-out: {fmt_time(summary.last_check_out, tz)}")
    lines.append(f"⏱️ Total hours: {fmt_hours(summary.total_hours)}")
    if summary.break_minutes > 0:
        lines.append(f"☕ Break time: {summary.break_minutes} minutes")
    if summary.live_hours is not None:
        lines.extend(["", f"🕐 Currently working for: {fmt_one_decimal(summary.live_hours)} hours"])
    return "\n".join(lines)


def _day_line(line: DayLine, label: str) -> str:
    return f"{_DAY_MARKER[line.status]} {label}: {fmt_hours(line.hours)}h"


def _summary_block(summary: PeriodSummary, *, working_days: str, average_label: str, completed: bool) -> list[str]:
    lines = ["📈 Summary", f"⏱️ Total hours: {fmt_hours(summary.total_hours)}", f"📅 Working days: {working_days}"]
    if completed:
        lines.append(f"✅ Completed days: {summary.completed_days}")
    if summary.average_hours is not None:
        lines.append(f"⚡ {average_label}: {fmt_hours(summary.average_hours)}h")
    if summary.efficiency_percent is not None:
        lines.append(f"📊 Work efficiency: {fmt_one_decimal(summary.efficiency_percent)}%")
    return lines


def render_weekly(summary: PeriodSummary) -> str:
    lines = [weekly_title(summary), ""]
    if summary.working_days == 0:
        lines.extend(["📍 No activity recorded this week", ""])
    lines.extend(
        _summary_block(
            summary,
            working_days=f"{summary.working_days}/{summary.total_days}",
            average_label="Average per day",
            completed=False,
        )
    )
    lines.extend(["", "📊 Daily Breakdown"])
    lines.extend(_day_line(d, d.work_date.strftime("%A")) for d in summary.days)
    return "\n".join(lines)


def render_monthly(summary: PeriodSummary) -> str:
    lines = [monthly_title(summary), ""]
    if summary.working_days == 0:
        lines.extend(["📍 No activity recorded this month", ""])
    lines.extend(
        _summary_block(
            summary,
            working_days=str(summary.working_days),
            average_label="Average per day",
            completed=True,
        )
    )

    if summary.weeks:
        lines.extend(["", "📊 Weekly Breakdown"])
        for w in summary.weeks:
            lines.append(
                f"📅 {short_label(w.week_start)} - {short_label(w.week_end)}: {fmt_hours(w.hours)}h ({w.days} days)"
            )

    if summary.best_day:
        lines.extend(["", "🏆 Records"])
        lines.append(f"🥇 Best day: {short_label(summary.best_day.work_date)} ({fmt_hours(summary.best_day.hours)}h)")
        if summary.shortest_day:
            lines.append(
                f"📉 Shortest day: {short_label(summary.shortest_day.work_date)} "
                f"({fmt_hours(summary.shortest_day.hours)}h)"
            )
    return "\n".join(lines)


def render_range(summary: PeriodSummary) -> str:
    lines = [range_title(summary), ""]
    if summary.working_days == 0:
        lines.extend(["📍 No activity recorded in this period", ""])
    lines.extend(
        _summary_block(
            summary,
            working_days=f"{summary.working_days}/{summary.total_days}",
            average_label="Average per working day",
            completed=True,
        )
    )
    if summary.days:
        lines.extend(["", "📊 Daily Breakdown"])
        lines.extend(_day_line(d, weekday_label(d.work_date)) for d in summary.days)
    return "\n".join(lines)
