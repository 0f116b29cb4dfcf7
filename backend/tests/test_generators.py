"""
Tests for generators.py - schedule, breakdown and suggestion generation.
"""
import asyncio
import json
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from completion import QuotaError, TransportError
from conftest import FakeCompleter
from generators import (
    FALLBACK_SUGGESTIONS,
    ScheduleValidationError,
    fallback_schedule,
    generate_breakdown,
    generate_schedule,
    generate_suggestions,
    parse_schedule,
)
from models import ScheduleItem, Task


def _task(text: str) -> Task:
    return Task(id=text, text=text, created_at="2026-01-01T00:00:00", updated_at="2026-01-01T00:00:00")


class TestFallbackSchedule:
    """The locally built schedule used whenever the model can't be used."""

    def test_one_day(self):
        schedule = fallback_schedule("Write essay", 1)

        assert schedule == [
            ScheduleItem(title="Start work on: Write essay", day=1, time="09:00"),
            ScheduleItem(title="Continue and complete: Write essay", day=1, time="14:00"),
        ]

    def test_two_days_has_no_middle(self):
        schedule = fallback_schedule("Write essay", 2)

        assert [(item.title, item.day) for item in schedule] == [
            ("Plan and research for: Write essay", 1),
            ("Finalize and review: Write essay", 2),
        ]

    def test_three_days_has_one_middle_item(self):
        schedule = fallback_schedule("Write essay", 3)

        assert [(item.title, item.day) for item in schedule] == [
            ("Plan and research for: Write essay", 1),
            ("Work on: Write essay (Day 2)", 2),
            ("Finalize and review: Write essay", 3),
        ]

    @pytest.mark.parametrize("days", [1, 2, 3, 4, 7, 14])
    def test_days_within_range(self, days):
        schedule = fallback_schedule("Project", days)

        assert all(1 <= item.day <= days for item in schedule)
        assert len(schedule) == (2 if days == 1 else days)
        assert schedule[-1].day == days


class TestParseSchedule:

    def test_valid(self):
        text = json.dumps([
            {"title": "Research", "day": 1, "time": "09:00"},
            {"title": "Draft", "day": 2},
        ])

        assert parse_schedule(text, 2) == [
            ScheduleItem(title="Research", day=1, time="09:00"),
            ScheduleItem(title="Draft", day=2, time=None),
        ]

    def test_code_fence_is_stripped(self):
        text = '```json\n[{"title": "Research", "day": 1}]\n```'

        assert parse_schedule(text, 1) == [ScheduleItem(title="Research", day=1)]

    def test_time_accepted_as_given(self):
        text = json.dumps([{"title": "Research", "day": 1, "time": "after lunch"}])

        assert parse_schedule(text, 1)[0].time == "after lunch"

    @pytest.mark.parametrize("payload", [
        {"title": "Not a list", "day": 1},
        [{"title": "Too late", "day": 3}],
        [{"title": "Too early", "day": 0}],
        [{"title": "Float day", "day": 1.5}],
        [{"title": "String day", "day": "1"}],
        [{"title": "Bool day", "day": True}],
        [{"day": 1}],
        [{"title": 42, "day": 1}],
        [{"title": "", "day": 1}],
        [{"title": "   ", "day": 1}],
        ["just a string"],
    ])
    def test_invalid(self, payload):
        with pytest.raises(ScheduleValidationError):
            parse_schedule(json.dumps(payload), 2)

    def test_not_json(self):
        with pytest.raises(ValueError):
            parse_schedule("Sure! Here is your schedule:", 2)


class TestGenerateSchedule:

    def test_uses_model_answer(self):
        answer = json.dumps([
            {"title": "Outline", "day": 1, "time": "09:00"},
            {"title": "Write", "day": 2, "time": "10:00"},
            {"title": "Edit", "day": 3},
        ])
        completer = FakeCompleter(answer)

        schedule = asyncio.run(generate_schedule(completer, "Write essay", 3))

        assert [item.title for item in schedule] == ["Outline", "Write", "Edit"]
        assert "3 day(s)" in completer.prompts[0]
        assert '"Write essay"' in completer.prompts[0]

    def test_one_item_out_of_range_rejects_whole_batch(self):
        answer = json.dumps([
            {"title": "Outline", "day": 1},
            {"title": "Write", "day": 2},
            {"title": "Overflow", "day": 3},
        ])

        schedule = asyncio.run(generate_schedule(FakeCompleter(answer), "Write essay", 2))

        assert schedule == fallback_schedule("Write essay", 2)

    def test_garbage_falls_back(self):
        schedule = asyncio.run(generate_schedule(FakeCompleter("I can't do that."), "Write essay", 1))

        assert schedule == fallback_schedule("Write essay", 1)

    def test_blank_title_falls_back(self):
        text = json.dumps([{"title": "Research", "day": 1}, {"title": "  ", "day": 2}])

        schedule = asyncio.run(generate_schedule(FakeCompleter(text), "Write essay", 2))

        assert schedule == fallback_schedule("Write essay", 2)

    @pytest.mark.parametrize("error", [TransportError("down"), QuotaError("429"), RuntimeError("boom")])
    def test_completion_failure_falls_back(self, error):
        schedule = asyncio.run(generate_schedule(FakeCompleter(error), "Write essay", 4))

        assert schedule == fallback_schedule("Write essay", 4)

    def test_zero_days_rejected(self):
        with pytest.raises(ValueError):
            asyncio.run(generate_schedule(FakeCompleter("[]"), "Write essay", 0))


class TestGenerateBreakdown:

    def test_filters_numbering_blank_and_example_lines(self):
        answer = "1. Do X\nDo Y\n\nInput: example"

        assert asyncio.run(generate_breakdown(FakeCompleter(answer), "Task")) == ["Do Y"]

    def test_filters_bullets_and_output_lines(self):
        answer = "- Bullet\n* Star\n• Dot\nOutput:\nCall the venue\n  Buy snacks  \n2) Two"

        assert asyncio.run(generate_breakdown(FakeCompleter(answer), "Task")) == ["Call the venue", "Buy snacks"]

    def test_caps_at_five(self):
        answer = "\n".join(f"Step {letter}" for letter in "ABCDEFG")

        result = asyncio.run(generate_breakdown(FakeCompleter(answer), "Task"))

        assert result == ["Step A", "Step B", "Step C", "Step D", "Step E"]

    def test_failure_returns_empty(self):
        assert asyncio.run(generate_breakdown(FakeCompleter(TransportError("down")), "Task")) == []

    def test_prompt_contains_task(self):
        completer = FakeCompleter("Step")
        asyncio.run(generate_breakdown(completer, "Plan a trip"))

        assert '"Plan a trip"' in completer.prompts[0]


class TestGenerateSuggestions:

    def test_parses_lines(self):
        answer = "Review emails\nTake a 10-minute walk outside\n\n1. Numbered\n2) Also numbered\n- Bulleted\nStretch"

        result = asyncio.run(generate_suggestions(FakeCompleter(answer), []))

        assert result == ["Review emails", "Take a 10-minute walk outside", "Stretch"]

    def test_caps_at_six(self):
        answer = "\n".join(f"Idea {n}" for n in "ABCDEFGH")

        assert len(asyncio.run(generate_suggestions(FakeCompleter(answer), []))) == 6

    def test_drops_existing_tasks(self):
        answer = "Buy milk\nCall mom\nStretch"

        result = asyncio.run(generate_suggestions(FakeCompleter(answer), [_task("buy milk")]))

        assert result == ["Call mom", "Stretch"]

    def test_existing_tasks_in_prompt(self):
        completer = FakeCompleter("Stretch")
        asyncio.run(generate_suggestions(completer, [_task("Buy milk"), _task("Call mom")]))

        assert '"Buy milk, Call mom"' in completer.prompts[0]

    def test_total_failure_returns_static_list(self):
        result = asyncio.run(generate_suggestions(FakeCompleter(default=TransportError("down")), [_task("x")]))

        assert result == FALLBACK_SUGGESTIONS
        assert len(result) == 5

    def test_nothing_usable_returns_static_list(self):
        result = asyncio.run(generate_suggestions(FakeCompleter("1. only\n2. numbered"), []))

        assert result == FALLBACK_SUGGESTIONS

    def test_static_list_is_a_copy(self):
        result = asyncio.run(generate_suggestions(FakeCompleter(TransportError("down")), []))
        result.append("mutated")

        assert len(FALLBACK_SUGGESTIONS) == 5
