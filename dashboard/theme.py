import streamlit as st

THEME_PRESETS = {
    "dark": {
        "bg_main": "#121017",
        "bg_glow": "#1f1a2a",
        "bg_card": "#1e1a27",
        "border": "#5b4f70",
        "text_main": "#f3edf9",
        "text_soft": "#c8bbd8",
        "accent": "#8e79af",
        "plot_grid": "#3d3550",
        "plot_bar": "#8884d8",
        "today_border": "#d9c979",
        "divider": "rgba(255,255,255,0.08)",
    },
    "light": {
        "bg_main": "#f7f3ed",
        "bg_glow": "#eee2d3",
        "bg_card": "#fff9f1",
        "border": "#c4b59f",
        "text_main": "#1b1b1b",
        "text_soft": "#5d5d5d",
        "accent": "#8f7aa9",
        "plot_grid": "#d9ccbb",
        "plot_bar": "#8884d8",
        "today_border": "#b29a7d",
        "divider": "rgba(0,0,0,0.08)",
    },
}


def resolve_theme_name(preference):
    if preference in THEME_PRESETS:
        return preference
    context_theme = getattr(getattr(st, "context", None), "theme", None)
    detected = getattr(context_theme, "type", None)
    return detected if detected in THEME_PRESETS else "light"


def get_active_theme(preference=None):
    if preference is None:
        preference = st.session_state.get("ui.theme", "system")
    name = resolve_theme_name(preference)
    return name, THEME_PRESETS[name]


def inject_theme_css(preference="system"):
    st.session_state["ui.theme"] = preference
    _, theme = get_active_theme(preference)
    st.markdown(
        f"""
<style>
:root {{
    --bg-main: {theme['bg_main']};
    --bg-glow: {theme['bg_glow']};
    --bg-card: {theme['bg_card']};
    --border: {theme['border']};
    --text-main: {theme['text_main']};
    --text-soft: {theme['text_soft']};
    --accent: {theme['accent']};
    --today-border: {theme['today_border']};
    --divider: {theme['divider']};
}}

.stApp {{
    background: radial-gradient(1400px 900px at 20% 0%, var(--bg-glow) 0%, var(--bg-main) 58%);
    color: var(--text-main);
}}

.section-title {{
    font-size: 18px;
    font-weight: 600;
    margin: 0 0 8px 0;
}}

.small-label {{
    font-size: 12px;
    color: var(--text-soft);
    text-transform: uppercase;
    letter-spacing: 0.6px;
}}

.entry-card {{
    background: var(--bg-card);
    border: 1px solid var(--border);
    border-radius: 14px;
    padding: 12px 16px;
    margin-bottom: 10px;
}}

.mood-badge {{
    display: inline-block;
    border-radius: 999px;
    padding: 2px 10px;
    font-size: 12px;
    color: #ffffff;
    text-transform: capitalize;
}}

.calendar-table {{
    width: 100%;
    border-collapse: collapse;
    table-layout: fixed;
}}

.calendar-table th {{
    font-size: 12px;
    color: var(--text-soft);
    padding: 4px;
}}

.calendar-cell {{
    height: 64px;
    vertical-align: top;
    border: 1px solid var(--divider);
    padding: 4px;
}}

.calendar-cell.today {{
    border: 2px solid var(--today-border);
}}

.calendar-cell.selected {{
    background: var(--bg-card);
}}

.calendar-day {{
    font-size: 12px;
    font-weight: 600;
}}

.mood-dot {{
    display: inline-block;
    width: 8px;
    height: 8px;
    border-radius: 50%;
    margin-right: 2px;
}}
</style>
""",
        unsafe_allow_html=True,
    )
    return theme
