"""Streamlit UI: upload a financial statement, get a four-step credit analysis."""

import asyncio
from contextlib import aclosing

import streamlit as st

import logger_config  # noqa: F401  (configures logging)
from config import ACCEPTED_EXTENSIONS
from errors import DocumentValidationError
from graph.llm import clear_llm_instance
from graph.session import SessionController
from graph.state import SessionStatus
from presentation import (
    ANALYSIS_STEPS,
    bar_fractions,
    build_ratio_cards,
    format_currency,
    leverage_gauge_position,
)
from workers.document_intake import UploadedDocument, first_upload

# ── Page config ─────────────────────────────────────────────────────────
st.set_page_config(page_title="Loan AI Analyzer", page_icon="📈", layout="wide")

# ── Custom CSS ──────────────────────────────────────────────────────────
st.markdown("""
<style>
    .verdict-chip {
        display: inline-block; padding: 3px 10px; border-radius: 8px;
        font-size: 0.8em; font-weight: 600;
    }
    .verdict-pass   { background: #D1FAE5; color: #065F46; }
    .verdict-fail   { background: #FEE2E2; color: #991B1B; }
    .verdict-review { background: #FEF3C7; color: #92400E; }
    .gauge {
        position: relative; height: 10px; border-radius: 5px;
        background: linear-gradient(90deg, #10b981 0%, #10b981 75%, #ef4444 75%, #ef4444 100%);
    }
    .gauge-marker {
        position: absolute; top: -4px; width: 4px; height: 18px;
        background: #0f172a; border-radius: 2px;
    }
</style>
""", unsafe_allow_html=True)

BUSY_MESSAGES = {
    SessionStatus.UPLOADING: "Reading Document...",
    SessionStatus.ANALYZING: "Performing 4-Step Analysis...",
}


# ── Session state init ──────────────────────────────────────────────────
def _init_session():
    if "controller" not in st.session_state:
        st.session_state.controller = SessionController()
        st.session_state.uploader_key = 0

_init_session()

controller: SessionController = st.session_state.controller


def _reset():
    """Back to IDLE; a new uploader key also clears the widget's selection."""
    controller.reset()
    clear_llm_instance()
    st.session_state.uploader_key += 1


# ── Stream Runner ───────────────────────────────────────────────────────
async def run_session(placeholder):
    """Drive the accepted session, showing the busy message for each status."""
    # Clear LLM singleton: each asyncio.run() creates a new loop and a cached
    # client holds HTTP connections tied to the old one
    clear_llm_instance()
    # Closing the run moves a session interrupted by a script stop to ERROR
    async with aclosing(controller.run()) as snapshots:
        async for snapshot in snapshots:
            message = BUSY_MESSAGES.get(snapshot["status"])
            if message:
                placeholder.info(
                    f"⏳ **{message}**\n\n"
                    "Our AI is checking Cash Flow, Debt Load, Liquidity, and Solvency ratios against banking standards."
                )
    placeholder.empty()


# ── Views ───────────────────────────────────────────────────────────────
def _verdict_chip(card) -> str:
    if card.passed:
        css, icon = "verdict-pass", "✅"
    elif card.needs_review:
        css, icon = "verdict-review", "⚠️"
    else:
        css, icon = "verdict-fail", "❌"
    return f'<span class="verdict-chip {css}">{icon} {card.verdict}</span>'


def render_idle():
    st.markdown("## Will the bank **approve** this loan?")
    cols = st.columns(len(ANALYSIS_STEPS))
    for col, (title, description) in zip(cols, ANALYSIS_STEPS):
        with col:
            st.markdown(f"**{title}**")
            st.caption(description)

    uploads = st.file_uploader(
        "Click or drag to upload statement",
        type=ACCEPTED_EXTENSIONS,
        help="PDF, PNG, JPG or WEBP (max 10MB)",
        key=f"uploader_{st.session_state.uploader_key}",
    )
    upload = first_upload(uploads)
    if upload is None:
        return
    try:
        controller.accept(UploadedDocument.from_streamlit(upload))
    except DocumentValidationError as e:
        st.error(str(e), icon="🚫")
        return
    placeholder = st.empty()
    asyncio.run(run_session(placeholder))
    st.rerun()


def render_error():
    st.error("**Analysis Failed**")
    st.write(controller.state["error_message"])
    if st.button("Try Again", type="primary"):
        _reset()
        st.rerun()


def render_busy():
    st.info(BUSY_MESSAGES.get(controller.status, "Working..."))
    if st.button("Try Again", type="primary"):
        controller.interrupt()
        _reset()
        st.rerun()


def render_card(card, analysis):
    with st.container(border=True):
        st.caption(f"{card.step} · {card.question}")
        st.markdown(f"#### {card.title} &nbsp; {_verdict_chip(card)}", unsafe_allow_html=True)
        st.metric(card.ratio_label, card.ratio_display, help=card.benchmark)
        st.caption(card.benchmark)

        if card.gauge:
            position = leverage_gauge_position(card.ratio)
            st.markdown(
                f'<div class="gauge"><div class="gauge-marker" style="left: {position:.0f}%"></div></div>',
                unsafe_allow_html=True,
            )
        else:
            for label, fraction in bar_fractions(card.figures):
                st.progress(fraction, text=label)

        if st.toggle("Show raw figures", key=f"raw_{card.step}"):
            for label, amount in card.figures:
                st.write(f"**{label}**: {format_currency(amount, analysis.currency)}")

        st.caption(card.narrative)


def render_complete():
    analysis = controller.state["result"]
    st.subheader("Executive Summary")
    st.write(analysis.summary)

    meta = st.columns(3)
    meta[0].metric("Document", controller.state["file_name"] or "-")
    meta[1].metric("Period", analysis.period or "Not stated")
    meta[2].metric("Confidence", f"{analysis.confidence_score:g}")

    cards = build_ratio_cards(analysis)
    for row in (cards[:2], cards[2:]):
        cols = st.columns(2)
        for col, card in zip(cols, row):
            with col:
                render_card(card, analysis)

    if st.button("🔄 Analyze another", type="primary"):
        _reset()
        st.rerun()


# ── Main ────────────────────────────────────────────────────────────────
st.title("📈 Loan AI Analyzer")
st.caption("Full Spectrum Credit Analyzer · Bank-Grade Analysis")

status = controller.status
if status == SessionStatus.IDLE:
    render_idle()
elif status == SessionStatus.ERROR:
    render_error()
elif status == SessionStatus.COMPLETE:
    render_complete()
else:
    render_busy()

st.divider()
st.caption("Powered by Gemini · Private & Secure Analysis · Not Financial Advice")
