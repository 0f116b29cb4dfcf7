"""
AI-backed generators for schedules, breakdowns and suggestions.

Each generator is a parse-and-validate stage followed by a fallback stage:
failures from the completion endpoint and malformed answers never leave this
module. What "fallback" means differs per generator:

- schedule: a deterministic plan built locally
- breakdown: an empty list
- suggestions: a fixed list of generic suggestions
"""
import json
import logging
import re
from typing import Iterable

from completion import Completer
from models import ScheduleItem, Task
from prompts import BREAKDOWN_PROMPT, SCHEDULE_PROMPT, SUGGESTIONS_PROMPT

logger = logging.getLogger(__name__)

MAX_BREAKDOWN_ITEMS = 5
MAX_SUGGESTIONS = 6

FALLBACK_SUGGESTIONS = [
    "Review and organize your workspace",
    "Take a 5-minute breathing break",
    "Plan tomorrow's priorities",
    "Drink a glass of water",
    "Send a quick message to a friend or family member",
]

# Any leading bullet or numbering character, e.g. "- x", "1. x", "2) x"
_BREAKDOWN_MARKUP = re.compile(r"^[-*•+.)\d]")
# Numbered lines ("1. x", "2) x", "3 x") and bullets; "10-minute walk" survives
_SUGGESTION_MARKUP = re.compile(r"^(\d+[.)\s]|[-*•+])")
# Few-shot example text leaking into the answer
_EXAMPLE_ARTIFACTS = ("input:", "output:")


class ScheduleValidationError(ValueError):
    pass


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]  # Remove first line (```json)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]  # Remove last line (```)
        text = "\n".join(lines)
    return text


def parse_schedule(text: str, days: int) -> list[ScheduleItem]:
    """
    Parse a model answer into schedule items.
    Raises ScheduleValidationError (or json.JSONDecodeError) when any element is
    unusable; there is no partial acceptance.
    """
    data = json.loads(_strip_code_fence(text))
    if not isinstance(data, list):
        raise ScheduleValidationError(f"expected a list, got {type(data).__name__}")

    items = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ScheduleValidationError(f"item {index} is not an object")
        title = entry.get("title")
        day = entry.get("day")
        if not isinstance(title, str) or not title.strip():
            raise ScheduleValidationError(f"item {index} has no string title")
        # bool is an int subclass; reject it explicitly
        if not isinstance(day, int) or isinstance(day, bool):
            raise ScheduleValidationError(f"item {index} has no integer day")
        if not 1 <= day <= days:
            raise ScheduleValidationError(f"item {index} day {day} outside 1..{days}")
        time = entry.get("time")
        items.append(ScheduleItem(title=title, day=day, time=None if time is None else str(time)))
    return items


def fallback_schedule(description: str, days: int) -> list[ScheduleItem]:
    if days == 1:
        return [
            ScheduleItem(title=f"Start work on: {description}", day=1, time="09:00"),
            ScheduleItem(title=f"Continue and complete: {description}", day=1, time="14:00"),
        ]

    schedule = [ScheduleItem(title=f"Plan and research for: {description}", day=1, time="09:00")]
    for day in range(2, days):
        schedule.append(ScheduleItem(title=f"Work on: {description} (Day {day})", day=day, time="09:00"))
    schedule.append(ScheduleItem(title=f"Finalize and review: {description}", day=days, time="09:00"))
    return schedule


async def generate_schedule(completer: Completer, description: str, days: int) -> list[ScheduleItem]:
    if days < 1:
        raise ValueError("days must be at least 1")

    try:
        text = await completer.complete(SCHEDULE_PROMPT.format(description=description, days=days))
    except Exception as e:  # noqa: BLE001
        logger.warning("Schedule generation failed, using fallback schedule: %s", e)
        return fallback_schedule(description, days)

    try:
        return parse_schedule(text, days)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Invalid schedule from model, using fallback schedule: %s", e)
        logger.debug("Rejected schedule response: %s", text)
        return fallback_schedule(description, days)


def _clean_lines(text: str, markup: re.Pattern, drop_examples: bool) -> list[str]:
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if not line or markup.match(line):
            continue
        lowered = line.lower()
        if drop_examples and any(marker in lowered for marker in _EXAMPLE_ARTIFACTS):
            continue
        lines.append(line)
    return lines


async def generate_breakdown(completer: Completer, text: str) -> list[str]:
    """Sub-steps for one task. A failed breakdown is an empty list, never placeholder content."""
    try:
        response = await completer.complete(BREAKDOWN_PROMPT.format(text=text))
        return _clean_lines(response, _BREAKDOWN_MARKUP, drop_examples=True)[:MAX_BREAKDOWN_ITEMS]
    except Exception as e:  # noqa: BLE001
        logger.warning("Breakdown generation failed: %s", e)
        return []


async def generate_suggestions(completer: Completer, tasks: Iterable[Task]) -> list[str]:
    """Daily suggestions that don't repeat existing tasks; never empty."""
    tasks = list(tasks)
    existing = {task.text.strip().lower() for task in tasks}
    try:
        response = await completer.complete(
            SUGGESTIONS_PROMPT.format(todos=", ".join(task.text for task in tasks))
        )
        suggestions = [
            line for line in _clean_lines(response, _SUGGESTION_MARKUP, drop_examples=False)
            if line.lower() not in existing
        ][:MAX_SUGGESTIONS]
    except Exception as e:  # noqa: BLE001
        logger.warning("Suggestion generation failed, using fallback suggestions: %s", e)
        return list(FALLBACK_SUGGESTIONS)

    if not suggestions:
        logger.info("Model returned no usable suggestions, using fallback suggestions")
        return list(FALLBACK_SUGGESTIONS)
    return suggestions
