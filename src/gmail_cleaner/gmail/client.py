from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

# Modify is enough to trash threads; permanent deletion needs the full scope.
MODIFY_SCOPE = "https://www.googleapis.com/auth/gmail.modify"
FULL_SCOPE = "https://mail.google.com/"


@dataclass(frozen=True)
class GmailClientConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"
    scopes: List[str] = field(default_factory=lambda: [MODIFY_SCOPE])


def save_token(path: Path, token_json: str) -> None:
    """Write the token cache readable by the owner only, from the moment it exists."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    # O_CREAT's mode does not apply to an existing file.
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(token_json)


class GmailClient:
    def __init__(self, cfg: GmailClientConfig):
        self._cfg = cfg
        self._creds: Optional[Credentials] = None
        self._service = None

    def connect(self) -> None:
        """Create an authenticated Gmail API service client."""
        creds = None

        # If the scopes change, delete the previously saved token.json.
        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(
                str(self._cfg.token_path), self._cfg.scopes
            )

        # If there are no (valid) credentials available, let the user log in.
        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(self._cfg.credentials_path),
                    self._cfg.scopes,
                )
                creds = flow.run_local_server(port=0)

            # Save the credentials for the next run.
            logger.info("Saving credential file to: %s", self._cfg.token_path)
            save_token(self._cfg.token_path, creds.to_json())

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def iter_thread_pages(
        self, query: str, include_spam_trash: bool = False
    ) -> Iterator[Dict[str, Any]]:
        """
        Yield raw threads.list responses page by page.
        Each page carries 'resultSizeEstimate' and (maybe) 'threads': [{'id': ...}].
        Pages are requested lazily; stop iterating to stop paging.
        """
        threads = self.service.users().threads()
        request = threads.list(
            userId=self._cfg.user_id,
            q=query,
            includeSpamTrash=include_spam_trash,
        )
        while request is not None:
            page = request.execute()
            yield page
            request = threads.list_next(request, page)

    def get_thread(self, thread_id: str) -> Dict[str, Any]:
        """Fetch a thread with its messages (headers + internalDate)."""
        return (
            self.service.users()
            .threads()
            .get(userId=self._cfg.user_id, id=thread_id)
            .execute()
        )

    def trash_thread(self, thread_id: str) -> Dict[str, Any]:
        return (
            self.service.users()
            .threads()
            .trash(userId=self._cfg.user_id, id=thread_id)
            .execute()
        )

    def delete_thread(self, thread_id: str) -> None:
        """Irreversibly delete a thread. Requires the full mail.google.com scope."""
        self.service.users().threads().delete(
            userId=self._cfg.user_id, id=thread_id
        ).execute()
