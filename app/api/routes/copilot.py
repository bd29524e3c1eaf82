from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_orchestrator
from app.copilot.contracts import Actor
from app.copilot.orchestrator import CommandOrchestrator
from app.core.security import require_instructor
from app.schema.copilot import CommandRequest, CommandResponse, SubmitCommandResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/command", response_model=SubmitCommandResponse)
async def submit_command(request: CommandRequest, actor: Actor = Depends(require_instructor), orchestrator: CommandOrchestrator = Depends(get_orchestrator)) -> SubmitCommandResponse:  # noqa: B008
  """Run one natural-language command and return its aggregated result."""
  if not request.command:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Command must not be empty.")

  submission = await orchestrator.submit(actor, request.command)
  return SubmitCommandResponse(command=CommandResponse.from_record(submission.command), result=submission.result.to_dict(), summary=submission.summary)


@router.get("/history", response_model=list[CommandResponse])
async def get_history(actor: Actor = Depends(require_instructor), orchestrator: CommandOrchestrator = Depends(get_orchestrator)) -> list[CommandResponse]:  # noqa: B008
  """Return every command the actor has submitted, most recent first."""
  records = await orchestrator.history(actor)
  return [CommandResponse.from_record(record) for record in records]
