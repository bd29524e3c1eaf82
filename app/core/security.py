from __future__ import annotations

import logging
from typing import Annotated, get_args

from fastapi import Depends, Header, HTTPException, status

from app.copilot.contracts import Actor, ActorRole

logger = logging.getLogger(__name__)

_ROLES: frozenset[str] = frozenset(get_args(ActorRole))
_COPILOT_ROLES: frozenset[str] = frozenset({"admin", "instructor"})


async def get_current_actor(x_user_id: Annotated[str | None, Header()] = None, x_user_role: Annotated[str | None, Header()] = None) -> Actor:
  """Build the acting user from identity headers set by the upstream session layer."""
  user_id = (x_user_id or "").strip()
  if not user_id:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity")

  role = (x_user_role or "instructor").strip().lower()
  if role not in _ROLES:
    logger.warning("Rejected unknown role=%r user_id=%s", role, user_id)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown user role")

  return Actor(user_id=user_id, role=role)  # type: ignore[arg-type]


async def require_instructor(actor: Actor = Depends(get_current_actor)) -> Actor:  # noqa: B008
  """Only instructors and admins may issue Co-Pilot commands."""
  if actor.role not in _COPILOT_ROLES:
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only instructors can use the Co-Pilot")
  return actor
