from __future__ import annotations

import uuid

from seatplan.session import EditorSession

# One editing session per open editor tab, kept in process memory.
_sessions: dict[str, EditorSession] = {}


def create_session() -> tuple[str, EditorSession]:
    sid = uuid.uuid4().hex
    session = EditorSession()
    _sessions[sid] = session
    return sid, session


def get_session(sid: str) -> EditorSession | None:
    return _sessions.get(sid)


def drop_session(sid: str) -> bool:
    return _sessions.pop(sid, None) is not None
