from __future__ import annotations

import logging

from entity.repositories.day_state_repo import DayStateRepo
from entity.repositories.enrollment_repo import EnrollmentRepo
from entity.repositories.units_repo import UnitsRepo
from learning import errors
from learning import progression as pg
from learning.journal_schema import RATING_KEYS, RATING_MAX, RATING_MIN, parse_journal_schema

log = logging.getLogger("learning")

RATING_TARGETS = ("sliders", "checkout")


class LearningService:
    """Learner progression: read rows, let `progression` decide, write the result.

    Notes:
    - Every operation takes the user id explicitly; identity is resolved by the caller.
    - All checks run before the first write. Writes are single-row upserts.
    """

    def __init__(self, db, settings):
        self.settings = settings
        self.units = UnitsRepo(db)
        self.enroll = EnrollmentRepo(db)
        self.states = DayStateRepo(db)

    def _require_published(self, slug: str) -> int:
        last = int(self.units.last_published_index(slug) or 0)
        if last <= 0:
            raise errors.ProgressionError(errors.NO_PUBLISHED_UNITS)
        return last

    # ----------------------------
    # Intro
    # ----------------------------
    def set_intro_engagement(self, user_id: int, slug: str, engaged: bool) -> dict:
        last = int(self.units.last_published_index(slug) or 0)

        if not engaged:
            # Disengaging wipes every practice of the program.
            deleted = self.states.delete_all(user_id, slug)
            self.enroll.disengage_intro(user_id, slug)
            log.info("intro disengaged user_id=%s slug=%s deleted_states=%s", user_id, slug, deleted)
            return {"engaged": False, "lastPublished": last, "reset": True}

        day = pg.clamp_day(1, last)
        self.enroll.engage_intro(user_id, slug, day)
        log.info("intro engaged user_id=%s slug=%s", user_id, slug)
        return {"engaged": True, "lastPublished": last, "reset": False}

    # ----------------------------
    # Progression actions
    # ----------------------------
    def apply_action(self, user_id: int, slug: str, action: str, day: int | None = None) -> dict:
        if action not in pg.ACTIONS:
            raise errors.ProgressionError(errors.UNKNOWN_ACTION)

        last = self._require_published(slug)
        enr = self.enroll.find_or_create(user_id, slug) or {"status": pg.STATUS_ACTIVE, "current_day": 1}

        if action == pg.ACTION_SET_DAY:
            tr = pg.plan_set_day(day, last)
        elif action == pg.ACTION_REOPEN_DAY:
            tr = pg.plan_reopen_day(enr, day, last)
        else:
            tr = self._complete_day(user_id, slug, enr, day, last)

        if tr.changed:
            self.enroll.set_progress(user_id, slug, tr.current_day, tr.status)
        log.info(
            "progress user_id=%s slug=%s action=%s day=%s -> current_day=%s status=%s",
            user_id, slug, action, day, tr.current_day, tr.status,
        )
        return {"currentDay": tr.current_day, "lastPublished": last, "status": tr.status}

    def _complete_day(self, user_id: int, slug: str, enr: dict, day: int | None, last: int) -> pg.Transition:
        current = pg.clamp_day(enr.get("current_day") or 1, last)
        done_day = pg.clamp_day(day if day is not None else current, last)

        state = self.states.get(user_id, slug, done_day)
        unit = self.units.get_published(slug, done_day)
        schema = parse_journal_schema((unit or {}).get("journal_schema"))

        check = pg.check_completion(state, schema)
        if not check.ok:
            raise errors.ProgressionError(errors.INCOMPLETE_DAY, requirements=check.as_requirements())

        self.states.mark_completed(user_id, slug, done_day)
        return pg.plan_complete_day(enr, done_day, last)

    # ----------------------------
    # Day state
    # ----------------------------
    def save_day_state(self, user_id: int, slug: str, day: int, patch: dict) -> int:
        # Autosave: no journal validation here, completion is checked by completeDay.
        return self.states.upsert_patch(user_id, slug, day, patch)

    def save_answer(self, user_id: int, slug: str, day: int, field_id: str, text: str) -> int:
        state = self.states.get(user_id, slug, day) or {}
        data = dict(state.get("data") or {})
        data[str(field_id)] = (text or "").strip()
        return self.states.upsert_patch(user_id, slug, day, {"data": data})

    def toggle_flag(self, user_id: int, slug: str, day: int, flag: str) -> bool:
        if flag not in ("practiced", "mantra3x"):
            raise errors.ProgressionError(errors.INVALID_BODY)
        state = self.states.get(user_id, slug, day) or {}
        value = not bool(state.get(flag))
        self.states.upsert_patch(user_id, slug, day, {flag: value})
        return value

    def set_rating(self, user_id: int, slug: str, day: int, target: str, key: str, value: int) -> dict:
        """Stores one 0..10 rating in `sliders` (before the practice) or `checkout` (after)."""
        if target not in RATING_TARGETS or key not in RATING_KEYS:
            raise errors.ProgressionError(errors.INVALID_BODY)
        if isinstance(value, bool) or not isinstance(value, int) or not RATING_MIN <= value <= RATING_MAX:
            raise errors.ProgressionError(errors.INVALID_BODY)
        state = self.states.get(user_id, slug, day) or {}
        ratings = dict(state.get(target) or {})
        ratings[key] = value
        self.save_day_state(user_id, slug, day, {target: ratings})
        return ratings

    # ----------------------------
    # Resets
    # ----------------------------
    def reset_day(self, user_id: int, slug: str, day: int) -> dict:
        last = int(self.units.last_published_index(slug) or 0)
        target = pg.clamp_day(day, last)
        deleted = self.states.delete_day(user_id, slug, day)
        self.enroll.set_progress(user_id, slug, target, pg.STATUS_ACTIVE)
        log.info("day reset user_id=%s slug=%s day=%s deleted=%s", user_id, slug, day, deleted)
        return {"day": day, "deleted": deleted, "currentDay": target, "status": pg.STATUS_ACTIVE}

    def reset_program(self, user_id: int, slug: str) -> dict:
        deleted = self.states.delete_all(user_id, slug)
        self.enroll.set_progress(user_id, slug, 1, pg.STATUS_ACTIVE)
        log.info("program reset user_id=%s slug=%s deleted=%s", user_id, slug, deleted)
        return {"all": True, "deleted": deleted, "currentDay": 1, "status": pg.STATUS_ACTIVE}

    # ----------------------------
    # Views
    # ----------------------------
    def outline(self, user_id: int, slug: str) -> dict:
        enr = self.enroll.get(user_id, slug)
        units = self.units.list_published(slug)
        states = self.states.list_for_program(user_id, slug) if enr else []
        return pg.compute_outline(slug, enr, units, states)

    def summary(self, user_id: int, slug: str) -> dict:
        enr = self.enroll.get(user_id, slug)
        if not enr:
            raise errors.ProgressionError(errors.NOT_ENROLLED)
        units = self.units.list_published(slug)
        states = self.states.list_for_program(user_id, slug)
        return {"programSlug": slug, **pg.summarize(enr, units, states)}

    def next_step(self, user_id: int) -> dict:
        enr = self.enroll.latest_for_user(user_id)
        if not enr:
            return pg.next_step(None, 0, False)
        slug = str(enr.get("program_slug") or "").lower()
        last = int(self.units.last_published_index(slug) or 0)
        has_first = self.states.exists(user_id, slug, 1) if last else False
        return pg.next_step(enr, last, has_first)

    def day_view(self, user_id: int, slug: str, day: int) -> dict:
        last = self._require_published(slug)
        enr = self.enroll.get(user_id, slug)
        access = pg.resolve_day_access(enr, day, last)
        unit = self.units.get_published(slug, access.day)
        schema = parse_journal_schema((unit or {}).get("journal_schema"))
        state = self.states.get(user_id, slug, access.day) or {}
        data = state.get("data") or {}
        return {
            "day": access.day,
            "redirect": access.redirect,
            "lastPublished": last,
            "unit": unit,
            "schema": schema,
            "state": state,
            "check": pg.check_completion(state, schema),
            "missing": [f.id for f in schema.missing_required(data)],
        }

    def notes(self, user_id: int, slug: str) -> list[dict]:
        units = {int(u["unit_index"]): u for u in self.units.list_published(slug)}
        out = []
        for st in self.states.list_for_program(user_id, slug):
            day = int(st["day"])
            unit = units.get(day) or {}
            schema = parse_journal_schema(unit.get("journal_schema"))
            for field_id, value in (st.get("data") or {}).items():
                if not isinstance(value, str) or not value.strip():
                    continue
                out.append(
                    {
                        "day": day,
                        "title": unit.get("title") or "",
                        "label": schema.label_for(field_id),
                        "text": value.strip(),
                    }
                )
        return out
