"""Progression rules for multi-day learning programs.

Pure functions over plain rows (dicts as returned by the repositories):

- enrollment: {"status", "current_day", "intro_engaged", ...} or None
- units: published day units, {"unit_index", "title", "mantra", ...}
- day states: {"day", "practiced", "completed", "data", ...}

Nothing here reads or writes storage; LearningService loads the rows,
asks for a decision and persists the result.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from learning.journal_schema import JournalSchema, any_text_answer

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_PAUSED = "paused"

STATE_DONE = "done"
STATE_ACTIVE = "active"
STATE_LOCKED = "locked"

ACTION_SET_DAY = "setDay"
ACTION_COMPLETE_DAY = "completeDay"
ACTION_REOPEN_DAY = "reopenDay"
ACTIONS = (ACTION_SET_DAY, ACTION_COMPLETE_DAY, ACTION_REOPEN_DAY)

INTRO_LABEL = "Introduction"
CONCLUSION_LABEL = "Conclusion"


# ----------------------------
# Helpers
# ----------------------------
def clamp_day(day, last_published: int) -> int:
    """Clamp to [1, last_published]; 1 when nothing is published."""
    upper = max(1, int(last_published or 0))
    try:
        value = int(day)
    except (TypeError, ValueError):
        value = 1
    return max(1, min(upper, value))


def round_percent(done: int, total: int) -> int:
    # half-up, so 12.5 -> 13
    return int(math.floor(done / max(total, 1) * 100 + 0.5))


def pad_day(day: int) -> str:
    return str(int(day)).zfill(2)


def intro_href(slug: str) -> str:
    return f"/learn/{slug}/intro"


def day_href(slug: str, day: int) -> str:
    return f"/learn/{slug}/day/{pad_day(day)}"


def conclusion_href(slug: str) -> str:
    return f"/learn/{slug}/conclusion"


def is_completed(enrollment: dict | None) -> bool:
    return bool(enrollment) and enrollment.get("status") == STATUS_COMPLETED


def is_engaged(enrollment: dict | None) -> bool:
    return bool(enrollment) and bool(enrollment.get("intro_engaged"))


def completed_days(day_states) -> set[int]:
    return {int(s["day"]) for s in (day_states or []) if s.get("completed") is True}


def last_index(units) -> int:
    return max((int(u["unit_index"]) for u in (units or [])), default=0)


# ----------------------------
# Outline (sidebar)
# ----------------------------
def compute_outline(slug: str, enrollment: dict | None, units, day_states) -> dict:
    """Per-day display state plus intro/conclusion pseudo-steps and progress."""
    units = sorted(units or [], key=lambda u: int(u["unit_index"]))
    total = len(units)
    last = last_index(units)
    engaged = is_engaged(enrollment)
    finished = is_completed(enrollment)
    current = clamp_day((enrollment or {}).get("current_day") or 1, last)
    done_set = completed_days(day_states)

    items = [
        {
            "key": "intro",
            "label": INTRO_LABEL,
            "href": intro_href(slug),
            "state": STATE_DONE if engaged else STATE_ACTIVE,
            "locked": False,
            "sub": None,
            "day": None,
        }
    ]
    published = set()
    for u in units:
        day = int(u["unit_index"])
        published.add(day)
        if not engaged:
            state = STATE_LOCKED
        elif day in done_set:
            state = STATE_DONE
        elif not finished and day == current:
            state = STATE_ACTIVE
        else:
            state = STATE_LOCKED
        items.append(
            {
                "key": f"day-{day}",
                "label": u.get("title") or "",
                "href": day_href(slug, day),
                "state": state,
                "locked": state == STATE_LOCKED,
                "sub": u.get("mantra") or None,
                "day": day,
            }
        )
    items.append(
        {
            "key": "conclusion",
            "label": CONCLUSION_LABEL,
            "href": conclusion_href(slug),
            "state": STATE_ACTIVE if finished else STATE_LOCKED,
            "locked": not finished,
            "sub": None,
            "day": None,
        }
    )

    done_count = total if finished else len(done_set & published)
    if finished:
        continue_href = conclusion_href(slug)
    elif not engaged:
        continue_href = intro_href(slug)
    else:
        continue_href = day_href(slug, current)

    return {
        "items": items,
        "percent": round_percent(done_count, total),
        "doneCount": done_count,
        "total": total,
        "currentDay": current,
        "status": (enrollment or {}).get("status") or STATUS_ACTIVE,
        "continueHref": continue_href,
    }


def summarize(enrollment: dict, units, day_states) -> dict:
    outline = compute_outline("", enrollment, units, day_states)
    return {
        "total": outline["total"],
        "currentDay": outline["currentDay"],
        "done": outline["doneCount"],
        "percent": outline["percent"],
        "status": outline["status"],
    }


# ----------------------------
# Completion
# ----------------------------
@dataclass(frozen=True)
class CompletionCheck:
    practiced: bool
    any_text: bool

    @property
    def ok(self) -> bool:
        return self.practiced and self.any_text

    def as_requirements(self) -> dict:
        return {"practiced": self.practiced, "anyText": self.any_text}


def check_completion(state: dict | None, schema: JournalSchema) -> CompletionCheck:
    practiced = bool(state) and state.get("practiced") is True
    if schema.has_text_questions:
        any_text = any_text_answer((state or {}).get("data"))
    else:
        any_text = True
    return CompletionCheck(practiced=practiced, any_text=any_text)


# ----------------------------
# Transitions
# ----------------------------
@dataclass(frozen=True)
class Transition:
    current_day: int
    status: str
    changed: bool = True


def plan_set_day(requested, last_published: int) -> Transition:
    target = clamp_day(requested if requested is not None else 1, last_published)
    status = STATUS_COMPLETED if target >= last_published else STATUS_ACTIVE
    return Transition(current_day=target, status=status)


def plan_complete_day(enrollment: dict, done_day: int, last_published: int) -> Transition:
    """Cursor move after `done_day` was validated and marked completed.

    Completing an earlier day never moves the cursor.
    """
    current = clamp_day(enrollment.get("current_day") or 1, last_published)
    if done_day < current:
        return Transition(current_day=current, status=enrollment.get("status") or STATUS_ACTIVE, changed=False)
    if done_day >= last_published:
        return Transition(current_day=last_published, status=STATUS_COMPLETED)
    return Transition(current_day=done_day + 1, status=STATUS_ACTIVE)


def plan_reopen_day(enrollment: dict, requested, last_published: int) -> Transition:
    current = clamp_day(enrollment.get("current_day") or 1, last_published)
    target = clamp_day(requested if requested is not None else current, last_published)
    return Transition(current_day=target, status=STATUS_ACTIVE)


# ----------------------------
# Navigation
# ----------------------------
@dataclass(frozen=True)
class DayAccess:
    day: int
    redirect: str | None = None  # None | "intro" | "day"

    @property
    def allowed(self) -> bool:
        return self.redirect is None


def resolve_day_access(enrollment: dict | None, requested, last_published: int) -> DayAccess:
    """Which day may be opened when `requested` is asked for."""
    current = clamp_day((enrollment or {}).get("current_day") or 1, last_published)
    if not is_engaged(enrollment):
        return DayAccess(day=current, redirect="intro")
    day = clamp_day(requested, last_published)
    if not is_completed(enrollment) and day > current:
        return DayAccess(day=current, redirect="day")
    return DayAccess(day=day)


def next_step(enrollment: dict | None, total_days: int, has_first_day_state: bool) -> dict:
    if not enrollment or total_days <= 0:
        return {"type": "none", "href": "/programs"}
    slug = str(enrollment.get("program_slug") or "").lower()
    if is_completed(enrollment):
        return {"type": "summary", "href": conclusion_href(slug), "programSlug": slug}
    current = clamp_day(enrollment.get("current_day") or 1, total_days)
    if current == 1 and not has_first_day_state:
        return {"type": "intro", "href": intro_href(slug), "programSlug": slug}
    return {"type": "day", "href": day_href(slug, current), "programSlug": slug, "day": current}
