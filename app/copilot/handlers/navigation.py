"""Navigation, help and passthrough handlers; these always succeed."""

from __future__ import annotations

from app.copilot.contracts import TaskResult
from app.copilot.handlers.base import HandlerContext, succeed
from app.copilot.intents import HelpParams, NavigateParams, UnknownParams

DEFAULT_ROUTE = "/dashboard"
UNKNOWN_MESSAGE = "I understood your request. How can I help you with EduAssess AI?"

# Checked in order; more specific phrases come before the words they contain.
_ROUTES: tuple[tuple[tuple[str, ...], str, str], ...] = (
  (("new quiz", "quiz builder", "create quiz", "quiz creator", "build a quiz"), "/quizzes/new", "the quiz builder"),
  (("gradebook", "grade book", "grades", "grading"), "/gradebook", "the gradebook"),
  (("proctor",), "/proctoring", "proctoring"),
  (("analytic", "stats", "statistic", "report", "insight"), "/analytics", "analytics"),
  (("lecture",), "/lectures", "lectures"),
  (("assignment", "homework"), "/assignments", "assignments"),
  (("quiz", "quizzes", "exam", "test"), "/quizzes", "quizzes"),
  (("course", "class"), "/courses", "courses"),
  (("setting", "preference", "profile", "account"), "/settings", "settings"),
  (("user", "people", "member"), "/users", "users"),
  (("dashboard", "home", "overview"), "/dashboard", "the dashboard"),
)

HELP_MESSAGE = "\n".join(
  [
    "Here is what I can do:",
    "- Create courses, quizzes (with AI-generated questions), assignments and lectures",
    "- Publish quizzes, one at a time or all drafts at once",
    "- Update quiz settings such as time limit or passing score",
    "- Generate public quiz links, view-only or open for attempts",
    "- Delete courses, quizzes, assignments and lectures",
    "- List courses, quizzes, assignments, lectures, enrollments and submissions",
    "- Show your analytics and take you to any page",
    'Try: "Create a course called Biology 101 and add a quiz on Cell Division".',
  ]
)


def route_for(page: str | None) -> tuple[str, str]:
  """Map a free-text page name to (route, label); unknown pages land on the dashboard."""
  needle = (page or "").strip().lower()
  if needle:
    for keywords, route, label in _ROUTES:
      if any(keyword in needle for keyword in keywords):
        return route, label
  return DEFAULT_ROUTE, "the dashboard"


async def navigate(params: NavigateParams, ctx: HandlerContext) -> TaskResult:
  route, label = route_for(params.page)
  return succeed(f"Taking you to {label}", {"navigateTo": route})


async def show_help(params: HelpParams, ctx: HandlerContext) -> TaskResult:
  return succeed(HELP_MESSAGE)


async def passthrough(params: UnknownParams, ctx: HandlerContext) -> TaskResult:
  return succeed(params.message or UNKNOWN_MESSAGE)
