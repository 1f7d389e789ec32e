from entity.db import Database


class EnrollmentRepo:
    """One row per (user, program).

    Every write is a single-row upsert; a missing row is created with the
    column defaults (active, day 1, intro not engaged).
    """

    def __init__(self, db: Database):
        self.db = db

    def get(self, user_id: int, program_slug: str):
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT * FROM enrollments WHERE user_id=%s AND program_slug=%s",
                (user_id, program_slug),
            )
            return cur.fetchone()

    def find_or_create(self, user_id: int, program_slug: str):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO enrollments(user_id, program_slug, status, current_day)
                VALUES (%s, %s, 'active', 1)
                ON CONFLICT(user_id, program_slug) DO NOTHING
                ''',
                (user_id, program_slug),
            )
            cur.execute(
                "SELECT * FROM enrollments WHERE user_id=%s AND program_slug=%s",
                (user_id, program_slug),
            )
            return cur.fetchone()

    def latest_for_user(self, user_id: int):
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT * FROM enrollments WHERE user_id=%s ORDER BY updated_at DESC LIMIT 1",
                (user_id,),
            )
            return cur.fetchone()

    def engage_intro(self, user_id: int, program_slug: str, current_day: int):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO enrollments(user_id, program_slug, status, current_day, intro_engaged, started_at)
                VALUES (%s, %s, 'active', %s, TRUE, NOW())
                ON CONFLICT(user_id, program_slug) DO UPDATE
                  SET intro_engaged=TRUE,
                      current_day=EXCLUDED.current_day,
                      status='active',
                      started_at=COALESCE(enrollments.started_at, NOW()),
                      updated_at=NOW()
                ''',
                (user_id, program_slug, current_day),
            )

    def disengage_intro(self, user_id: int, program_slug: str):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO enrollments(user_id, program_slug, status, current_day, intro_engaged)
                VALUES (%s, %s, 'active', 1, FALSE)
                ON CONFLICT(user_id, program_slug) DO UPDATE
                  SET intro_engaged=FALSE,
                      current_day=1,
                      status='active',
                      started_at=NULL,
                      completed_at=NULL,
                      updated_at=NOW()
                ''',
                (user_id, program_slug),
            )

    def set_progress(self, user_id: int, program_slug: str, current_day: int, status: str):
        """Moves the cursor. completed_at is stamped the first time the program completes."""
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO enrollments(user_id, program_slug, status, current_day, completed_at)
                VALUES (%s, %s, %s, %s, CASE WHEN %s = 'completed' THEN NOW() END)
                ON CONFLICT(user_id, program_slug) DO UPDATE
                  SET current_day=EXCLUDED.current_day,
                      status=EXCLUDED.status,
                      completed_at=CASE
                        WHEN EXCLUDED.status = 'completed' THEN COALESCE(enrollments.completed_at, NOW())
                        ELSE enrollments.completed_at
                      END,
                      updated_at=NOW()
                ''',
                (user_id, program_slug, status, current_day, status),
            )
