"""Scoped fuzzy lookup of courses, quizzes, assignments and lectures by name."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal

from app.copilot.contracts import Actor
from app.storage.domain_repo import AssignmentRecord, CourseRecord, DomainStore, LectureRecord, QuizRecord

logger = logging.getLogger(__name__)

EntityKind = Literal["course", "quiz", "assignment", "lecture"]
Entity = CourseRecord | QuizRecord | AssignmentRecord | LectureRecord

EXACT_MATCH = 3
PREFIX_MATCH = 2
SUBSTRING_MATCH = 1
NO_MATCH = 0


def searchable_names(entity: Entity) -> tuple[str, ...]:
  """Fields a name hint is compared against: title or name, plus the short code for courses."""
  if isinstance(entity, CourseRecord):
    return (entity.name, entity.code)
  return (entity.title,)


def match_rank(names: Sequence[str], hint: str) -> int:
  """Best case-insensitive match of `hint` against any of `names`."""
  needle = hint.strip().casefold()
  if not needle:
    return NO_MATCH
  best = NO_MATCH
  for name in names:
    haystack = (name or "").strip().casefold()
    if haystack == needle:
      return EXACT_MATCH
    if haystack.startswith(needle):
      best = max(best, PREFIX_MATCH)
    elif needle in haystack:
      best = max(best, SUBSTRING_MATCH)
  return best


def rank_candidates(entities: Sequence[Entity], hint: str) -> list[Entity]:
  """
  Order matching entities best first.

  Exact beats prefix beats substring; ties go to the most recently created
  entity, then to the one that appears later in the store's listing.
  Non-matching entities are dropped.
  """
  scored = [(match_rank(searchable_names(entity), hint), entity.created_at, position, entity) for position, entity in enumerate(entities)]
  matching = [entry for entry in scored if entry[0] > NO_MATCH]
  matching.sort(key=lambda entry: (entry[0], entry[1], entry[2]), reverse=True)
  return [entry[3] for entry in matching]


def most_recent(entities: Sequence[Entity]) -> Entity | None:
  if not entities:
    return None
  return max(enumerate(entities), key=lambda pair: (pair[1].created_at, pair[0]))[1]


class EntityResolver:
  """Resolve name hints to records the actor is allowed to act on."""

  def __init__(self, store: DomainStore) -> None:
    self._store = store

  async def scoped(self, kind: EntityKind, actor: Actor, *, course_id: str | None = None) -> list[Entity]:
    """Return every entity of `kind` visible to the actor, in creation order."""
    owner = actor.owner_filter
    if kind == "course":
      courses = await self._store.get_courses(owner)
      return [course for course in courses if course_id is None or course.id == course_id]
    if kind == "quiz":
      return list(await self._store.get_quizzes(owner, course_id=course_id))
    if kind == "assignment":
      return list(await self._store.get_assignments(owner, course_id=course_id))
    if kind == "lecture":
      return list(await self._store.get_lectures(owner, course_id=course_id))
    raise ValueError(f"Unsupported entity kind '{kind}'.")

  async def resolve(self, kind: EntityKind, name_hint: str | None, actor: Actor, *, entity_id: str | None = None, fallback: bool = True) -> Entity | None:
    """
    Return the entity the actor most likely means, or None when nothing is in scope.

    An explicit id wins when it is visible to the actor. A name hint picks the
    best-ranked match. Without a hint, or when the hint matches nothing and
    `fallback` is set, the most recently created entity is returned.
    """
    candidates = await self.scoped(kind, actor)
    if not candidates:
      return None

    if entity_id:
      for candidate in candidates:
        if candidate.id == entity_id:
          return candidate

    if name_hint and name_hint.strip():
      ranked = rank_candidates(candidates, name_hint)
      if ranked:
        return ranked[0]
      logger.info("No %s matched hint=%r user_id=%s fallback=%s", kind, name_hint, actor.user_id, fallback)
      if not fallback:
        return None
    elif entity_id and not fallback:
      return None

    return most_recent(candidates)
