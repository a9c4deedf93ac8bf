"""Session cookie authentication.

The login service stores ``{"userId": "..."}`` as JSON in the session
cookie; this module only reads it.
"""

import json

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from bridal_rentals.config import settings
from bridal_rentals.domain.policies import can_review_approvals, can_view_all_approvals
from bridal_rentals.domain.users import UserRepository
from bridal_rentals.infrastructure.db.connection import get_db
from bridal_rentals.infrastructure.db.models import User


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def session_user_id(request: Request) -> str:
    raw = request.cookies.get(settings.session_cookie_name)
    if not raw:
        raise _unauthorized()
    try:
        session = json.loads(raw)
    except ValueError:
        raise _unauthorized("Invalid session") from None
    user_id = session.get("userId") if isinstance(session, dict) else None
    if not user_id:
        raise _unauthorized()
    return str(user_id)


def get_current_user(
    user_id: str = Depends(session_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def require_admin(
    user_id: str = Depends(session_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = UserRepository(db).get(user_id)
    if not can_review_approvals(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def require_manager(
    user_id: str = Depends(session_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = UserRepository(db).get(user_id)
    if not can_view_all_approvals(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Manager or Admin access required")
    return user
