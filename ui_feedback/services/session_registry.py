"""
Session Registry
================

Maps canonical page URLs (origin + path) to session records. Sessions are
created lazily on first feedback for a page and never deleted.

Uniqueness per canonical URL is enforced by scan-before-insert in
``find_or_create``; the owning store serializes calls to it.
"""

import logging
import uuid
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from ui_feedback.models.feedback import Session, utc_now_iso

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Strip query string and fragment: ``scheme://host[:port]/path``.

    Scheme and host are lowercased and default ports dropped, so URLs that
    differ only in those respects map to the same session.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    origin = f"{scheme}://{host}"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        origin = f"{origin}:{port}"
    return f"{origin}{parts.path or '/'}"


def derive_title(url: str) -> str:
    """Session title: the URL's path, or the raw URL when it has none."""
    return urlsplit(url).path or url


class SessionRegistry:
    """In-memory session table keyed by session ID, in insertion order."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def find_or_create(self, page_url: str) -> str:
        """Return the ID of the session for ``page_url``, creating it if needed."""
        normalized = normalize_url(page_url)
        for session in self._sessions.values():
            if session.page_url == normalized:
                return session.id

        session = Session(
            id=str(uuid.uuid4()),
            page_url=normalized,
            title=derive_title(page_url),
            created_at=utc_now_iso(),
        )
        self._sessions[session.id] = session
        logger.info("session_created", extra={"session_id": session.id, "page_url": normalized})
        return session.id

    def list(self) -> List[Session]:
        return [s.model_copy() for s in self._sessions.values()]

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
