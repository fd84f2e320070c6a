from __future__ import annotations

import html
import calendar as _calendar
from datetime import date

from dashboard.constants import MOODS, MOOD_COLORS, MOOD_EMOJIS, MOOD_TO_INT, WEEKDAY_LABELS
from dashboard.theme import get_active_theme


def _active_theme():
    return get_active_theme()[1]


def month_last_day(reference_date):
    days = _calendar.monthrange(reference_date.year, reference_date.month)[1]
    return reference_date.replace(day=days)


def shift_month(reference_date, delta):
    month_index = reference_date.year * 12 + (reference_date.month - 1) + delta
    return date(month_index // 12, month_index % 12 + 1, 1)


def apply_common_plot_style(fig, title, show_xgrid=False, show_ygrid=True):
    theme = _active_theme()
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=theme["plot_grid"],
            tickfont=dict(color=theme["text_soft"]),
            zeroline=False,
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=theme["plot_grid"],
            zeroline=False,
            tickfont=dict(color=theme["text_soft"]),
        ),
    )
    return fig


def weekly_activity_chart(buckets, height=240):
    import plotly.graph_objects as go

    theme = _active_theme()
    fig = go.Figure(
        data=go.Bar(
            x=[bucket.label for bucket in buckets],
            y=[bucket.count for bucket in buckets],
            hovertext=[f"{bucket.day.isoformat()} • {bucket.count} entries" for bucket in buckets],
            hoverinfo="text",
            marker=dict(color=theme["plot_bar"]),
        )
    )
    apply_common_plot_style(fig, "Weekly Activity")
    fig.update_layout(height=height)
    fig.update_yaxes(rangemode="tozero", dtick=1)
    return fig


def mood_distribution_chart(distribution, height=240):
    import plotly.graph_objects as go

    labels = list(distribution.keys())
    fig = go.Figure(
        data=go.Pie(
            labels=labels,
            values=[distribution[mood] for mood in labels],
            marker=dict(colors=[MOOD_COLORS.get(mood, "#8884d8") for mood in labels]),
            textinfo="label+percent",
            sort=False,
        )
    )
    apply_common_plot_style(fig, "Mood Distribution")
    fig.update_layout(height=height, showlegend=False)
    return fig


def build_mood_pixel_grid(year, month, mood_map):
    """One pixel per day laid out like the month calendar: rows are weeks, columns weekdays.

    Returns the mood-index matrix (NaN for empty or out-of-month cells), hover
    text, weekday labels and week labels.
    """
    import numpy as np

    weeks = _calendar.Calendar(firstweekday=0).monthdatescalendar(year, month)
    z = np.full((len(weeks), 7), np.nan)
    text = [["" for _ in range(7)] for _ in weeks]
    for row, week in enumerate(weeks):
        for col, current in enumerate(week):
            if current.month != month:
                continue
            mood = mood_map.get(current)
            if mood in MOOD_TO_INT:
                z[row, col] = MOOD_TO_INT[mood]
            text[row][col] = f"{current.isoformat()} • {mood or 'No entry'}"
    week_labels = [f"W{week[0].isocalendar()[1]}" for week in weeks]
    return z, text, list(WEEKDAY_LABELS), week_labels


def _mood_colorscale():
    # Stepped scale so each mood index maps to exactly one colour.
    steps = len(MOODS)
    scale = []
    for index, mood in enumerate(MOODS):
        scale.append((index / steps, MOOD_COLORS[mood]))
        end = 1.0 if index == steps - 1 else (index + 1) / steps - 1e-6
        scale.append((end, MOOD_COLORS[mood]))
    return scale


def mood_heatmap(z, hover_text, x_labels, y_labels, title=""):
    import plotly.graph_objects as go

    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            x=x_labels,
            y=y_labels,
            text=hover_text,
            hoverinfo="text",
            colorscale=_mood_colorscale(),
            showscale=False,
            zmin=0,
            zmax=len(MOODS) - 1,
            xgap=3,
            ygap=3,
        )
    )
    apply_common_plot_style(fig, title, show_ygrid=False)
    fig.update_xaxes(side="top")
    fig.update_yaxes(autorange="reversed")
    fig.update_layout(height=60 + 40 * len(y_labels))
    return fig


def build_month_calendar_html(year, month, entries_lookup, selected_date=None, today=None):
    """Month table with one cell per day, showing a dot per entry coloured by mood."""
    today = today or date.today()
    header_cells = "".join(f"<th>{label}</th>" for label in WEEKDAY_LABELS)
    rows = []
    for week in _calendar.Calendar(firstweekday=0).monthdatescalendar(year, month):
        cells = []
        for day in week:
            if day.month != month:
                cells.append("<td class='calendar-cell'></td>")
                continue
            classes = ["calendar-cell"]
            if day == selected_date:
                classes.append("selected")
            if day == today:
                classes.append("today")
            day_entries = entries_lookup.get(day, [])
            dots = "".join(
                (
                    f"<span class='mood-dot' style='background:{MOOD_COLORS.get(entry.mood, '#8884d8')}' "
                    f"title='{html.escape(entry.title, quote=True)}'></span>"
                )
                for entry in day_entries[:3]
            )
            extra = f"<span class='small-label'>+{len(day_entries) - 3}</span>" if len(day_entries) > 3 else ""
            cells.append(
                f"<td class='{' '.join(classes)}'>"
                f"<div class='calendar-day'>{day.day}</div>"
                f"<div>{dots}{extra}</div>"
                "</td>"
            )
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return (
        "<table class='calendar-table'>"
        f"<thead><tr>{header_cells}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )


def mood_badge_html(mood):
    color = MOOD_COLORS.get(mood, "#8884d8")
    emoji = MOOD_EMOJIS.get(mood, "")
    return f"<span class='mood-badge' style='background:{color}'>{emoji} {html.escape(mood)}</span>"
