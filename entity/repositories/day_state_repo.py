import json
from entity.db import Database


def _jsonb(value):
    return None if value is None else json.dumps(value)


class DayStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, user_id: int, program_slug: str, day: int):
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT * FROM day_states WHERE user_id=%s AND program_slug=%s AND day=%s",
                (user_id, program_slug, day),
            )
            return cur.fetchone()

    def list_for_program(self, user_id: int, program_slug: str):
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT * FROM day_states WHERE user_id=%s AND program_slug=%s ORDER BY day ASC",
                (user_id, program_slug),
            )
            return cur.fetchall()

    def exists(self, user_id: int, program_slug: str, day: int) -> bool:
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT 1 FROM day_states WHERE user_id=%s AND program_slug=%s AND day=%s LIMIT 1",
                (user_id, program_slug, day),
            )
            return cur.fetchone() is not None

    def upsert_patch(self, user_id: int, program_slug: str, day: int, patch: dict) -> int:
        """Partial upsert: NULL parameters keep the stored value (or the column default on insert)."""
        params = (
            _jsonb(patch.get("data")),
            _jsonb(patch.get("sliders")),
            _jsonb(patch.get("checkout")),
            patch.get("practiced"),
            patch.get("mantra3x"),
            patch.get("completed"),
        )
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO day_states(user_id, program_slug, day, data, sliders, checkout, practiced, mantra3x, completed)
                VALUES (
                  %s, %s, %s,
                  COALESCE(%s::jsonb, '{}'::jsonb), %s::jsonb, %s::jsonb,
                  COALESCE(%s, FALSE), COALESCE(%s, FALSE), COALESCE(%s, FALSE)
                )
                ON CONFLICT(user_id, program_slug, day) DO UPDATE
                  SET data=COALESCE(%s::jsonb, day_states.data),
                      sliders=COALESCE(%s::jsonb, day_states.sliders),
                      checkout=COALESCE(%s::jsonb, day_states.checkout),
                      practiced=COALESCE(%s, day_states.practiced),
                      mantra3x=COALESCE(%s, day_states.mantra3x),
                      completed=COALESCE(%s, day_states.completed),
                      updated_at=NOW()
                RETURNING id
                ''',
                (user_id, program_slug, day) + params + params,
            )
            return int(cur.fetchone()["id"])

    def mark_completed(self, user_id: int, program_slug: str, day: int) -> bool:
        # Update only: completion is never recorded for a day without practice data.
        with self.db.cursor() as cur:
            cur.execute(
                "UPDATE day_states SET completed=TRUE, updated_at=NOW() WHERE user_id=%s AND program_slug=%s AND day=%s",
                (user_id, program_slug, day),
            )
            return cur.rowcount > 0

    def delete_day(self, user_id: int, program_slug: str, day: int) -> int:
        with self.db.cursor() as cur:
            cur.execute(
                "DELETE FROM day_states WHERE user_id=%s AND program_slug=%s AND day=%s",
                (user_id, program_slug, day),
            )
            return cur.rowcount

    def delete_all(self, user_id: int, program_slug: str) -> int:
        with self.db.cursor() as cur:
            cur.execute(
                "DELETE FROM day_states WHERE user_id=%s AND program_slug=%s",
                (user_id, program_slug),
            )
            return cur.rowcount
