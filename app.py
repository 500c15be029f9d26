"""JEE Prep: flashcards with spaced repetition, revision schedule and Pomodoro timer."""
import sys
from pathlib import Path
from datetime import date, datetime

# Ensure project root is in path
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from db import default_user_id, get_store
from engine import DIFFICULTIES, QUALITY_LABELS
from src.pomodoro import PomodoroTimer, SESSION_LABELS, STUDY, BREAK, RUNNING, PAUSED, COMPLETED, IDLE, format_clock
from src.review_session import ReviewSession, deck_stats
from src.revision import bucket_by_due_date, format_relative_due

PAGES = ["Flashcards", "Revision Schedule", "Study Timer"]

st.set_page_config(page_title="JEE Prep", layout="wide")
st.sidebar.title("JEE Prep")
default_page = st.query_params.get("page", "Flashcards")
if default_page not in PAGES:
    default_page = "Flashcards"
page = st.sidebar.radio("Navigate", PAGES, index=PAGES.index(default_page), label_visibility="collapsed")

user_id = st.sidebar.text_input("User ID", value=st.session_state.get("user_id", default_user_id()))
st.session_state["user_id"] = user_id


def _select_plan():
    """Sidebar study plan picker. Returns plan id or None."""
    if not user_id:
        st.info("Enter your user ID in the sidebar (or set JEE_PREP_USER_ID in .env).")
        return None
    try:
        plans = get_store().list_study_plans(user_id)
    except Exception as e:
        st.error(f"Could not load study plans. Check DB and .env (SUPABASE_URL, SUPABASE_KEY). {e}")
        return None
    with st.sidebar.expander("New study plan", expanded=not plans):
        with st.form("create_plan", clear_on_submit=True):
            title = st.text_input("Title")
            if st.form_submit_button("Create plan"):
                try:
                    get_store().create_study_plan(user_id, title)
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))
                except Exception as e:
                    st.error(f"Failed to create study plan: {e}")
    if not plans:
        st.warning("No study plans found for this user. Create one in the sidebar.")
        return None
    titles = {p["id"]: p.get("title") or p["id"] for p in plans}
    return st.sidebar.selectbox("Study plan", list(titles), format_func=lambda pid: titles[pid])


# ----- Flashcards -----
if page == "Flashcards":
    st.header("Flashcards")
    st.caption("Spaced repetition · rate each card Again / Hard / Good / Easy")

    if "review_session" not in st.session_state:
        st.session_state["review_session"] = None
    if "show_answer" not in st.session_state:
        st.session_state["show_answer"] = False

    plan_id = _select_plan()
    if not plan_id:
        st.stop()

    session = st.session_state["review_session"]

    # Active study session
    if session is not None:
        card = session.current_card()
        if card is None:
            summary = session.end_session()
            st.success(f"Study Session Complete! You reviewed {summary['cards_reviewed']} flashcards.")
            col1, col2 = st.columns(2)
            with col1:
                st.metric("Recall rate", f"{summary['recall_rate_percent']:.0f}%")
            with col2:
                st.metric("Lapses", summary["lapses"])
            st.json(summary["quality_breakdown"])
            if st.button("Back to deck"):
                st.session_state["review_session"] = None
                st.rerun()
            st.stop()

        st.progress(session.progress_percent() / 100)
        st.caption(f"Card {session.current_idx + 1} of {len(session.queue)} · {card.subject} • {card.topic} · {card.difficulty}")

        show_answer = st.session_state["show_answer"]
        st.subheader("Answer:" if show_answer else "Question:")
        st.info(card.back if show_answer else card.front)

        if not show_answer:
            if st.button("Show Answer", type="primary"):
                st.session_state["show_answer"] = True
                st.rerun()
        else:
            st.write("How well did you know this?")
            cols = st.columns(len(QUALITY_LABELS))
            for col, (quality, label) in zip(cols, QUALITY_LABELS.items()):
                with col:
                    if st.button(label, key=f"rate_{quality}", use_container_width=True):
                        update = session.rate(quality)
                        try:
                            get_store().update_schedule(card.id, update)
                        except Exception as e:
                            st.error(f"Failed to save review: {e}")
                        st.session_state["show_answer"] = False
                        st.rerun()

        if st.button("Exit Study"):
            st.session_state["review_session"] = None
            st.session_state["show_answer"] = False
            st.rerun()
        st.stop()

    # Deck overview
    try:
        cards = get_store().list_flashcards(user_id, plan_id)
    except Exception as e:
        st.error(f"Could not load flashcards: {e}")
        st.stop()

    stats = deck_stats(cards)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total cards", stats["total"])
    with col2:
        st.metric("Due today", stats["due"])
    with col3:
        st.metric("Reviewed today", stats["reviewed_today"])
    with col4:
        st.metric("Success rate", f"{stats['success_rate_percent']}%")

    if cards and st.button("Start Study Session", type="primary", use_container_width=True):
        st.session_state["review_session"] = ReviewSession(user_id, cards)
        st.session_state["show_answer"] = False
        st.rerun()

    with st.expander("Create flashcard"):
        with st.form("create_card", clear_on_submit=True):
            front = st.text_area("Front (question)")
            back = st.text_area("Back (answer)")
            col1, col2, col3 = st.columns(3)
            with col1:
                subject = st.text_input("Subject")
            with col2:
                topic = st.text_input("Topic")
            with col3:
                difficulty = st.selectbox("Difficulty", DIFFICULTIES, index=1)
            if st.form_submit_button("Create"):
                try:
                    get_store().create_flashcard(user_id, plan_id, front, back, subject, topic, difficulty)
                    st.success("Flashcard created successfully")
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))
                except Exception as e:
                    st.error(f"Failed to create flashcard: {e}")

    for card in cards:
        with st.container(border=True):
            st.write(f"**{card.front}**")
            st.caption(
                f"{card.subject} • {card.topic} · {card.difficulty} · "
                f"next review {format_relative_due(card.next_review_at)} · interval {card.interval}d · EF {card.ease_factor:.2f}"
            )
            if st.button("Delete", key=f"delete_{card.id}"):
                try:
                    get_store().delete_flashcard(card.id)
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to delete flashcard: {e}")

# ----- Revision Schedule -----
elif page == "Revision Schedule":
    st.header("Revision Schedule")
    plan_id = _select_plan()
    if not plan_id:
        st.stop()
    try:
        cards = get_store().list_flashcards(user_id, plan_id)
    except Exception as e:
        st.error(f"Could not load flashcards: {e}")
        st.stop()

    today = date.today()
    buckets = bucket_by_due_date(cards, today)
    counts = buckets.counts()
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Overdue", counts["overdue"])
    with col2:
        st.metric("Due today", counts["due_today"])
    with col3:
        st.metric("Upcoming", counts["upcoming"])

    for title, items in (("Overdue", buckets.overdue), ("Today", buckets.due_today), ("Upcoming", buckets.upcoming)):
        st.subheader(title)
        if not items:
            st.caption("Nothing here.")
        for card in items:
            st.write(
                f"- **{card.topic or card.front[:60]}** ({card.subject}) · "
                f"{format_relative_due(card.next_review_at, today)} · {card.repetitions} review(s)"
            )

# ----- Study Timer -----
elif page == "Study Timer":
    st.header("Study Timer")
    st.caption("Pomodoro Technique for focused study sessions")

    if "timer" not in st.session_state:
        st.session_state["timer"] = PomodoroTimer()
    if "timer_last_tick" not in st.session_state:
        st.session_state["timer_last_tick"] = None
    timer = st.session_state["timer"]

    # Advance by wall-clock time since the last rerun
    now = datetime.now()
    last = st.session_state["timer_last_tick"]
    if timer.state == RUNNING and last is not None:
        if timer.tick(int((now - last).total_seconds())):
            if timer.session_type == STUDY:
                st.balloons()
                st.success(f"Study Session Complete! Next up: {SESSION_LABELS[timer.next_session]}.")
            else:
                st.success("Break Complete! Time to get back to studying!")
    st.session_state["timer_last_tick"] = now

    st.subheader(SESSION_LABELS[timer.session_type])
    st.metric("Time left", format_clock(timer.time_remaining))
    st.progress(timer.progress_percent() / 100)

    col1, col2, col3 = st.columns(3)
    with col1:
        if timer.state == IDLE:
            if st.button("Start", type="primary"):
                timer.start()
                st.rerun()
        elif timer.state == RUNNING:
            if st.button("Pause"):
                timer.pause()
                st.rerun()
        elif timer.state == PAUSED:
            if st.button("Resume", type="primary"):
                timer.resume()
                st.rerun()
        elif timer.state == COMPLETED:
            if st.button(f"Start {SESSION_LABELS[timer.next_session]}", type="primary"):
                timer.start(timer.next_session)
                st.rerun()
    with col2:
        if timer.state == IDLE and st.button("Take a break"):
            timer.start(BREAK)
            st.rerun()
    with col3:
        if st.button("Reset"):
            timer.reset()
            st.rerun()
    if timer.state == RUNNING:
        st.button("Refresh")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Pomodoros", timer.completed_pomodoros)
    with col2:
        st.metric("Study time", f"{timer.total_study_seconds // 60}m")
    with col3:
        st.metric("Streak", timer.current_streak)
