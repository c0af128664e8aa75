"""
Signed-in DJ identity for Dancefloor.
The login service stores the DJ in the Flask session under ``dj``; everything
else reads it back through ``current_principal`` instead of poking at the
session dict directly.
"""

import uuid
from dataclasses import dataclass, asdict
from flask import session


SESSION_KEY = "dj"
VISITOR_KEY = "visitor_id"


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    id: str
    name: str
    email: str

    def to_dict(self):
        return asdict(self)


def current_principal():
    """The DJ attached to this session, or None"""
    data = session.get(SESSION_KEY)
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return AuthenticatedPrincipal(
        id=str(data["id"]),
        name=data.get("name", ""),
        email=data.get("email", ""),
    )


def sign_out():
    session.pop(SESSION_KEY, None)


def current_voter_id():
    """Best-effort identity for voting: the DJ if signed in, else a per-browser visitor id"""
    principal = current_principal()
    if principal is not None:
        return principal.id
    if not session.get(VISITOR_KEY):
        session[VISITOR_KEY] = f"visitor_{uuid.uuid4().hex}"
    return session[VISITOR_KEY]
