import html
from datetime import datetime

import streamlit as st


def setup_style():
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Manrope:wght@400;600;700;800&display=swap');

        :root {
            --card-bg: rgba(99, 102, 241, 0.06);
            --card-border: rgba(99, 102, 241, 0.25);
            --accent: #4f46e5;
            --text-soft: rgba(55, 65, 81, 0.75);
        }

        html, body, .stApp {
            font-family: 'Manrope', sans-serif;
        }

        .event-card {
            background: var(--card-bg);
            border: 1px solid var(--card-border);
            border-radius: 14px;
            padding: 1rem 1.2rem;
            margin-bottom: 0.8rem;
        }

        .event-meta {
            color: var(--text-soft);
            font-size: 0.9rem;
        }
    </style>
    """, unsafe_allow_html=True)


def render_loading_placeholder(message: str = "Loading..."):
    with st.spinner(message):
        st.empty()


def format_event_date(raw: str) -> str:
    if not raw:
        return ""
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return dt.strftime("%A, %d %B %Y · %H:%M")


def format_money(amount: float) -> str:
    return f"${amount:,.2f}"


def event_card_html(event) -> str:
    # Event fields come from organizers; escape before they reach raw HTML.
    title = html.escape(event.title)
    date = html.escape(format_event_date(event.date))
    location = html.escape(event.location)
    return (
        f"<div class='event-card'><b>{title}</b><br>"
        f"<span class='event-meta'>📅 {date} · 📍 {location} · "
        f"{format_money(event.price)} · {event.available} left</span></div>"
    )


def event_meta_html(event, available: int) -> str:
    date = html.escape(format_event_date(event.date))
    location = html.escape(event.location)
    return (
        f"<div class='event-meta'>📅 {date}<br>"
        f"📍 {location}<br>"
        f"🎟️ {available} tickets available<br>"
        f"💵 {format_money(event.price)} per ticket</div>"
    )
