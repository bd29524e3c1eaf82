"""Read-only handlers: listings and dashboard analytics."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from app.copilot.contracts import TaskResult
from app.copilot.handlers.base import HandlerContext, count_noun, display_name, resolve_course_filter, resolve_quiz, succeed
from app.copilot.intents import (
  ListAssignmentsParams,
  ListCoursesParams,
  ListEnrollmentsParams,
  ListLecturesParams,
  ListQuizzesParams,
  ListSubmissionsParams,
  ViewAnalyticsParams,
)
from app.copilot.payloads import to_payload, to_payloads
from app.storage.domain_repo import CourseRecord


def _listing(ctx: HandlerContext, records: Sequence[Any], noun: str, plural: str, *, key: str, scope: CourseRecord | None = None, names: bool = True) -> TaskResult:
  """Preview the first records and report the true count."""
  limit = ctx.settings.copilot_preview_limit
  preview = list(records[:limit])
  message = f"Found {count_noun(len(records), noun, plural)}"
  if scope is not None:
    message += f' in "{scope.name}"'
  if names and preview:
    message += ": " + ", ".join(display_name(record) for record in preview)
  if len(records) > limit:
    message += f" (showing the first {limit})"
  return succeed(message, {key: to_payloads(preview)})


async def list_courses(params: ListCoursesParams, ctx: HandlerContext) -> TaskResult:
  courses = await ctx.store.get_courses(ctx.actor.owner_filter)
  return _listing(ctx, courses, "course", "courses", key="courses")


async def list_quizzes(params: ListQuizzesParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course_filter(ctx, params.course_name, params.course_id)
  quizzes = await ctx.store.get_quizzes(ctx.actor.owner_filter, course_id=course.id if course else None)
  if params.status:
    quizzes = [quiz for quiz in quizzes if quiz.status == params.status]
    return _listing(ctx, quizzes, f"{params.status} quiz", f"{params.status} quizzes", key="quizzes", scope=course)
  return _listing(ctx, quizzes, "quiz", "quizzes", key="quizzes", scope=course)


async def list_assignments(params: ListAssignmentsParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course_filter(ctx, params.course_name, params.course_id)
  assignments = await ctx.store.get_assignments(ctx.actor.owner_filter, course_id=course.id if course else None)
  return _listing(ctx, assignments, "assignment", "assignments", key="assignments", scope=course)


async def list_lectures(params: ListLecturesParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course_filter(ctx, params.course_name, params.course_id)
  lectures = await ctx.store.get_lectures(ctx.actor.owner_filter, course_id=course.id if course else None)
  return _listing(ctx, lectures, "lecture", "lectures", key="lectures", scope=course)


async def list_enrollments(params: ListEnrollmentsParams, ctx: HandlerContext) -> TaskResult:
  course = await resolve_course_filter(ctx, params.course_name, params.course_id)
  enrollments = await ctx.store.get_enrollments(ctx.actor.owner_filter, course_id=course.id if course else None)
  return _listing(ctx, enrollments, "enrollment", "enrollments", key="enrollments", scope=course, names=False)


async def list_submissions(params: ListSubmissionsParams, ctx: HandlerContext) -> TaskResult:
  quiz = await resolve_quiz(ctx, params.quiz_name, params.quiz_id, purpose="show submissions for")
  submissions = await ctx.store.get_quiz_submissions(quiz.id)
  limit = ctx.settings.copilot_preview_limit
  message = f'Found {count_noun(len(submissions), "submission")} for "{quiz.title}"'
  if len(submissions) > limit:
    message += f" (showing the first {limit})"
  return succeed(message, {"submissions": to_payloads(submissions[:limit]), "quiz": to_payload(quiz)})


async def view_analytics(params: ViewAnalyticsParams, ctx: HandlerContext) -> TaskResult:
  stats = await ctx.store.get_dashboard_stats(ctx.actor.owner_filter)
  message = (
    f"Here are your analytics: {count_noun(stats.total_courses, 'course')}, {count_noun(stats.total_quizzes, 'quiz', 'quizzes')}, "
    f"{count_noun(stats.total_students, 'student')} enrolled, {stats.pending_grading} awaiting grading"
  )
  return succeed(message, {"stats": to_payload(stats)})
