"""Session identity resolution for API requests.

The token comes from the ``session-id`` header, falling back to the
``session_id`` cookie. Requests without one get a freshly minted token, which
is echoed back in the ``session-id`` response header so the client can keep
using the same cart.
"""

from fastapi import Cookie, Header, Response

from storefront.shared.session import SessionIdentity
from storefront.utils.logging import add_context

SESSION_HEADER = "session-id"
SESSION_COOKIE = "session_id"


def get_session(
    response: Response,
    session_header: str | None = Header(default=None, alias=SESSION_HEADER),
    session_cookie: str | None = Cookie(default=None, alias=SESSION_COOKIE),
) -> SessionIdentity:
    token = (session_header or session_cookie or "").strip()
    identity = SessionIdentity(token=token) if token else SessionIdentity.mint()

    response.headers[SESSION_HEADER] = identity.token
    add_context(session_id=identity.token)
    return identity
