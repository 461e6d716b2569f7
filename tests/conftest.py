from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import pytest


def make_message(subject: Optional[str], internal_date_ms: int, header_name: str = "Subject") -> Dict[str, Any]:
    headers = [{"name": "From", "value": "shop@example.com"}]
    if subject is not None:
        headers.append({"name": header_name, "value": subject})
    return {"payload": {"headers": headers}, "internalDate": str(internal_date_ms)}


def make_thread(thread_id: str, subject: str, internal_date_ms: int = 1_600_000_000_000) -> Dict[str, Any]:
    return {
        "id": thread_id,
        "snippet": f"snippet of {thread_id}",
        "messages": [make_message(subject, internal_date_ms)],
    }


class FakeGmailClient:
    """In-memory stand-in for GmailClient that records every call."""

    def __init__(
        self,
        pages: Optional[List[Dict[str, Any]]] = None,
        threads: Optional[Dict[str, Dict[str, Any]]] = None,
        fail_trash: Set[str] = frozenset(),
        fail_delete: Set[str] = frozenset(),
        fail_get: Set[str] = frozenset(),
        fail_search_after: Optional[int] = None,
    ):
        self.pages = pages or []
        self.threads = threads or {}
        self.fail_trash = set(fail_trash)
        self.fail_delete = set(fail_delete)
        self.fail_get = set(fail_get)
        self.fail_search_after = fail_search_after
        self.calls: List[Tuple[str, Any]] = []
        self.pages_served = 0

    def iter_thread_pages(self, query: str, include_spam_trash: bool = False) -> Iterator[Dict[str, Any]]:
        self.calls.append(("search", (query, include_spam_trash)))
        for page in self.pages:
            if self.fail_search_after is not None and self.pages_served >= self.fail_search_after:
                raise ConnectionError("network down")
            self.pages_served += 1
            yield page

    def get_thread(self, thread_id: str) -> Dict[str, Any]:
        self.calls.append(("get", thread_id))
        if thread_id in self.fail_get:
            raise ConnectionError("thread fetch failed")
        return self.threads[thread_id]

    def trash_thread(self, thread_id: str) -> Dict[str, Any]:
        self.calls.append(("trash", thread_id))
        if thread_id in self.fail_trash:
            raise ConnectionError("trash failed")
        return {"id": thread_id}

    def delete_thread(self, thread_id: str) -> None:
        self.calls.append(("delete", thread_id))
        if thread_id in self.fail_delete:
            raise ConnectionError("delete failed")

    def calls_of(self, kind: str) -> List[Any]:
        return [arg for name, arg in self.calls if name == kind]


@pytest.fixture
def three_thread_client() -> FakeGmailClient:
    threads = {
        "t1": make_thread("t1", "Summer sale"),
        "t2": make_thread("t2", "Flash deal"),
        "t3": make_thread("t3", "Last chance"),
    }
    pages = [
        {"resultSizeEstimate": 3, "threads": [{"id": "t1"}, {"id": "t2"}], "nextPageToken": "p2"},
        {"resultSizeEstimate": 3, "threads": [{"id": "t3"}]},
    ]
    return FakeGmailClient(pages=pages, threads=threads)
