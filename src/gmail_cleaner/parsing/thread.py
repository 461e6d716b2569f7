from __future__ import annotations

from typing import Any, Dict, Iterable

from gmail_cleaner.models import ThreadSummary


def message_subject(message: Dict[str, Any]) -> str:
    # Header names are case-insensitive ("Subject" vs "subject").
    headers = (message.get("payload") or {}).get("headers") or []
    for h in headers:
        if str(h.get("name", "")).lower() == "subject":
            return h.get("value") or ""
    return ""


def derive_subject(messages: Iterable[Dict[str, Any]]) -> str:
    """Subject of the first message that has a non-empty one, else ""."""
    return next((s for s in map(message_subject, messages) if s), "")


def _internal_date_ms(message: Dict[str, Any]) -> int:
    # Gmail returns internalDate as a string of epoch milliseconds.
    return int(message.get("internalDate") or 0)


def summarize_thread(thread: Dict[str, Any]) -> ThreadSummary:
    messages = thread.get("messages") or []
    subject = derive_subject(messages) or thread.get("snippet", "")

    return ThreadSummary(
        thread_id=thread.get("id", ""),
        subject=subject,
        latest_internal_date_ms=max((_internal_date_ms(m) for m in messages), default=0),
        message_count=len(messages),
    )


def format_summary(summary: ThreadSummary) -> str:
    day = summary.latest_datetime.strftime("%Y-%m-%d")
    return f'"{summary.subject}" ({day}, {summary.message_count} messages)'
