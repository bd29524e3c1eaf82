"""Shared FastAPI dependencies for the Co-Pilot routes."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.copilot.orchestrator import CommandOrchestrator


async def get_orchestrator(request: Request) -> CommandOrchestrator:
  """Return the orchestrator wired at startup."""
  orchestrator = getattr(request.app.state, "orchestrator", None)
  if orchestrator is None:
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="The Co-Pilot is not available right now.")
  return orchestrator
