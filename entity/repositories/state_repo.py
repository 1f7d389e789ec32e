import json
from entity.db import Database

class StateRepo:
    """Dialog step of the chat surface, one row per user."""

    def __init__(self, db: Database):
        self.db = db

    def set_state(self, user_id: int, step: str, payload: dict | None = None):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO user_state(user_id, step, payload_json, updated_at)
                VALUES (%s, %s, %s::jsonb, NOW())
                ON CONFLICT(user_id) DO UPDATE
                  SET step=EXCLUDED.step,
                      payload_json=EXCLUDED.payload_json,
                      updated_at=NOW()
                ''',
                (user_id, step, json.dumps(payload or {})),
            )

    def clear_state(self, user_id: int):
        with self.db.cursor() as cur:
            cur.execute("DELETE FROM user_state WHERE user_id=%s", (user_id,))

    def get_state(self, user_id: int):
        with self.db.cursor() as cur:
            cur.execute("SELECT step, payload_json FROM user_state WHERE user_id=%s", (user_id,))
            row = cur.fetchone()
        if not row:
            return None
        payload = row.get("payload_json") or {}
        if isinstance(payload, str):
            payload = json.loads(payload)
        return {"step": row.get("step"), "payload": payload}
