# src/gmail_cleaner/app/run.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol

from gmail_cleaner.config.paths import CREDENTIALS_FILENAME, TOKEN_FILENAME, wants_full_scope
from gmail_cleaner.errors import (
    ActionError,
    ConfigError,
    FetchError,
    OverCapError,
    SearchError,
    ValidationError,
)
from gmail_cleaner.gmail.client import FULL_SCOPE, MODIFY_SCOPE, GmailClientConfig
from gmail_cleaner.models import CleanupMode, FilterSpec, RunResult
from gmail_cleaner.parsing.thread import format_summary, summarize_thread
from gmail_cleaner.pipeline.query import build_query, gmail_search_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Dict[str, Any]], None]

DEFAULT_CAP = 500


class ThreadService(Protocol):
    """The slice of GmailClient a cleanup run needs."""

    def iter_thread_pages(
        self, query: str, include_spam_trash: bool = False
    ) -> Iterator[Dict[str, Any]]: ...
    def get_thread(self, thread_id: str) -> Dict[str, Any]: ...
    def trash_thread(self, thread_id: str) -> Any: ...
    def delete_thread(self, thread_id: str) -> Any: ...


def load_gmail_config(config_dir: Path) -> GmailClientConfig:
    credentials_path = config_dir / CREDENTIALS_FILENAME
    if not credentials_path.exists():
        raise ConfigError(
            f"unable to read client credentials file ({CREDENTIALS_FILENAME}) at {credentials_path}"
        )

    scope = FULL_SCOPE if wants_full_scope() else MODIFY_SCOPE
    return GmailClientConfig(
        credentials_path=credentials_path,
        token_path=config_dir / TOKEN_FILENAME,
        user_id="me",
        scopes=[scope],
    )


def resolve_mode(*, trash: bool, delete_permanently: bool) -> CleanupMode:
    if trash and delete_permanently:
        raise ValidationError("only one of --trash or --delete-permanently may be used")
    if trash:
        return CleanupMode.TRASH
    if delete_permanently:
        return CleanupMode.PERMANENT_DELETE
    return CleanupMode.DRY_RUN


def validate_cap(cap: int) -> None:
    if isinstance(cap, bool) or not isinstance(cap, int) or cap < 0:
        raise ValidationError(f"argument 'cap' must be a non-negative integer, got {cap!r}")


def collect_thread_ids(
    client: ThreadService, query: str, *, cap: int, include_spam_trash: bool = False
) -> List[str]:
    """
    Page through search results and return thread IDs in provider order.
    Each page's estimate is checked against the cap before its IDs are kept,
    so an over-cap search never yields anything to act on.
    """
    thread_ids: List[str] = []
    try:
        for page in client.iter_thread_pages(query, include_spam_trash=include_spam_trash):
            estimate = int(page.get("resultSizeEstimate") or 0)
            if estimate > cap:
                raise OverCapError(estimate, cap)
            thread_ids.extend(t["id"] for t in page.get("threads", []) or [])
    except OverCapError:
        raise
    except Exception as exc:
        raise SearchError(f"error searching for threads: {exc}") from exc
    return thread_ids


def _acted_line(mode: CleanupMode, acted: int) -> str:
    if mode == CleanupMode.TRASH:
        return f"trashed {acted} threads."
    return f"irreversibly deleted {acted} threads."


def final_summary_line(result: RunResult) -> str:
    if result.mode == CleanupMode.DRY_RUN:
        return (
            f"matched {result.matched} threads, but did not act "
            "(pass --trash or --delete-permanently)."
        )
    return _acted_line(result.mode, result.acted)


def _log_mode(mode: CleanupMode) -> None:
    if mode == CleanupMode.DRY_RUN:
        logger.info("not modifying anything (flags --trash or --delete-permanently are missing)")
    elif mode == CleanupMode.TRASH:
        logger.info("matching threads will be moved to trash (flag --trash is present)")
    else:
        logger.warning(
            "matching threads will be irreversibly deleted, not moved to trash "
            "(flag --delete-permanently is present)"
        )


def run_cleanup(
    client: ThreadService,
    spec: FilterSpec,
    *,
    mode: CleanupMode = CleanupMode.DRY_RUN,
    cap: int = DEFAULT_CAP,
    include_spam_trash: bool = False,
    progress_cb: Optional[ProgressCallback] = None,
) -> RunResult:
    """
    Execute one cleanup run: search, cap check, then summarize and act per thread.

    Args:
        client: connected GmailClient (or anything with the same thread methods).
        spec: label/age/exclude filters.
        mode: dry run (default), trash or permanent delete.
        cap: abort before any mutation if the estimated match count exceeds this.
        progress_cb: optional (step, payload) hook for UI/CLI consumers.

    Returns:
        RunResult with matched/acted counts. Any remote failure raises instead.
    """

    def report(step: str, **payload: Any) -> None:
        if progress_cb:
            progress_cb(step, payload)

    # --- Validate everything before touching the network ---
    validate_cap(cap)
    query = build_query(spec)
    logger.info('search query: "%s"', query)
    logger.info("gmail search: %s", gmail_search_url(query))

    # --- Search ---
    report("search", query=query, cap=cap)
    thread_ids = collect_thread_ids(
        client, query, cap=cap, include_spam_trash=include_spam_trash
    )

    result = RunResult(mode=mode, matched=len(thread_ids))
    logger.info("found %d threads", result.matched)
    _log_mode(mode)
    report("collected", matched=result.matched)

    # --- Per-thread loop; first failure ends the run ---
    for index, thread_id in enumerate(thread_ids, start=1):
        try:
            thread = client.get_thread(thread_id)
        except Exception as exc:
            raise FetchError(thread_id, exc) from exc

        summary = summarize_thread(thread)
        logger.info(format_summary(summary))

        if mode != CleanupMode.DRY_RUN:
            try:
                if mode == CleanupMode.TRASH:
                    client.trash_thread(thread_id)
                else:
                    client.delete_thread(thread_id)
            except Exception as exc:
                logger.info(_acted_line(mode, result.acted))
                raise ActionError(
                    thread_id=thread_id,
                    subject=summary.subject,
                    acted=result.acted,
                    mode=mode,
                    cause=exc,
                ) from exc
            result.acted += 1

        report(
            "thread",
            index=index,
            total=result.matched,
            thread_id=thread_id,
            subject=summary.subject,
            acted=result.acted,
        )

    logger.info(final_summary_line(result))
    report("done", matched=result.matched, acted=result.acted, mode=mode.value)
    return result
