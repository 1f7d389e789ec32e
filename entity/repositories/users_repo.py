from entity.db import Database

class UsersRepo:
    def __init__(self, db: Database):
        self.db = db

    def upsert_user(self, user_id: int, username: str | None, display_name: str | None):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO users(id, username, display_name)
                VALUES (%s, %s, %s)
                ON CONFLICT (id) DO UPDATE
                  SET username = EXCLUDED.username,
                      -- keep a name the user already has
                      display_name = COALESCE(users.display_name, EXCLUDED.display_name)
                ''',
                (user_id, username, display_name),
            )

    def get_active(self, user_id: int):
        """Returns the user row, or None when the account is missing or soft-deleted."""
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM users WHERE id=%s AND deleted_at IS NULL", (user_id,))
            return cur.fetchone()

    def get_display_name(self, user_id: int) -> str | None:
        with self.db.cursor() as cur:
            cur.execute("SELECT display_name FROM users WHERE id=%s", (user_id,))
            row = cur.fetchone()
            if not row:
                return None
            return row.get("display_name")
