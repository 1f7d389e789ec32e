"""JSON-envelope endpoints of the learner progression.

Each function takes an externally resolved user id and a decoded JSON body
and returns `{"ok": True, ...}` or `{"ok": False, "error": CODE, ...}`.
Exceptions never leave this module.
"""
from __future__ import annotations

import logging

from entity.repositories.users_repo import UsersRepo
from learning import errors
from learning.errors import ProgressionError
from learning.journal_schema import RATING_KEYS, RATING_MAX, RATING_MIN
from learning.learning_service import LearningService

log = logging.getLogger("learning")

BOOL_PATCH_KEYS = ("practiced", "mantra3x", "completed")


def ok(**payload) -> dict:
    return {"ok": True, **payload}


def fail(code: str, **details) -> dict:
    return {"ok": False, "error": code, **details}


def http_status(envelope: dict) -> int:
    if envelope.get("ok"):
        return 200
    return errors.HTTP_STATUS.get(envelope.get("error"), 400)


# ----------------------------
# Body parsing
# ----------------------------
def _require_body(body) -> dict:
    if not isinstance(body, dict):
        raise ProgressionError(errors.INVALID_BODY)
    return body


def parse_slug(body: dict) -> str:
    raw = body.get("programSlug", body.get("slug"))
    if raw is None:
        raise ProgressionError(errors.MISSING_SLUG)
    if not isinstance(raw, str):
        raise ProgressionError(errors.INVALID_BODY)
    slug = raw.strip().lower()
    if not slug:
        raise ProgressionError(errors.MISSING_SLUG)
    return slug


def parse_day(raw, required: bool = False, allow_str: bool = False) -> int | None:
    if raw is None:
        if required:
            raise ProgressionError(errors.INVALID_DAY)
        return None
    if allow_str and isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ProgressionError(errors.INVALID_DAY)
    return raw


def _parse_sliders(raw) -> dict:
    if not isinstance(raw, dict):
        raise ProgressionError(errors.INVALID_BODY)
    out = {}
    for key, value in raw.items():
        if key not in RATING_KEYS:
            raise ProgressionError(errors.INVALID_BODY)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ProgressionError(errors.INVALID_BODY)
        if value < RATING_MIN or value > RATING_MAX:
            raise ProgressionError(errors.INVALID_BODY)
        out[key] = value
    return out


def parse_patch(raw) -> dict:
    """Keeps only the known keys; a key present with a wrong type is INVALID_BODY."""
    if not isinstance(raw, dict):
        raise ProgressionError(errors.INVALID_BODY)
    patch = {}
    if "data" in raw:
        data = raw["data"]
        if not isinstance(data, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
            raise ProgressionError(errors.INVALID_BODY)
        patch["data"] = dict(data)
    for key in ("sliders", "checkout"):
        if key in raw:
            patch[key] = _parse_sliders(raw[key])
    for key in BOOL_PATCH_KEYS:
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ProgressionError(errors.INVALID_BODY)
            patch[key] = raw[key]
    return patch


def _truthy_flag(v) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return v == 1
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes")
    return False


def _user_id(raw) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


# ----------------------------
# Endpoints
# ----------------------------
class LearningApi:
    def __init__(self, db, settings):
        self.settings = settings
        self.users = UsersRepo(db)
        self.learning = LearningService(db, settings)

    def _run(self, user_id, fn) -> dict:
        uid = _user_id(user_id)
        if uid is None:
            return fail(errors.USER_NOT_FOUND)
        try:
            if not self.users.get_active(uid):
                return fail(errors.USER_NOT_FOUND)
            return ok(**fn(uid))
        except ProgressionError as e:
            return fail(e.code, **e.details)
        except Exception:
            log.exception("learning api failed user_id=%s", user_id)
            return fail(errors.SERVER_ERROR)

    def post_intro(self, user_id, body) -> dict:
        def _do(uid: int) -> dict:
            b = _require_body(body)
            slug = parse_slug(b)
            engaged = b.get("engaged")
            if not isinstance(engaged, bool):
                raise ProgressionError(errors.INVALID_BODY)
            return self.learning.set_intro_engagement(uid, slug, engaged)

        return self._run(user_id, _do)

    def post_progress(self, user_id, body) -> dict:
        def _do(uid: int) -> dict:
            b = _require_body(body)
            slug = parse_slug(b)
            action = b.get("action")
            if not isinstance(action, str):
                raise ProgressionError(errors.INVALID_BODY)
            day = parse_day(b.get("day"))
            return self.learning.apply_action(uid, slug, action.strip(), day)

        return self._run(user_id, _do)

    def post_state(self, user_id, body) -> dict:
        def _do(uid: int) -> dict:
            b = _require_body(body)
            slug = parse_slug(b)
            day = parse_day(b.get("day"), required=True)
            patch = parse_patch(b.get("patch"))
            return {"id": self.learning.save_day_state(uid, slug, day, patch)}

        return self._run(user_id, _do)

    def delete_state(self, user_id, body) -> dict:
        def _do(uid: int) -> dict:
            b = _require_body(body)
            slug = parse_slug(b)
            if _truthy_flag(b.get("all")):
                return self.learning.reset_program(uid, slug)
            day = parse_day(b.get("day"), required=True, allow_str=True)
            return self.learning.reset_day(uid, slug, day)

        return self._run(user_id, _do)

    def get_outline(self, user_id, slug) -> dict:
        return self._run(user_id, lambda uid: self.learning.outline(uid, parse_slug({"programSlug": slug})))

    def get_summary(self, user_id, slug) -> dict:
        return self._run(user_id, lambda uid: self.learning.summary(uid, parse_slug({"programSlug": slug})))
