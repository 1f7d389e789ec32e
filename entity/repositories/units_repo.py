import json
from entity.db import Database

UNIT_TYPE_DAY = "day"
STATUS_PUBLISHED = "published"
STATUS_DRAFT = "draft"


class UnitsRepo:
    def __init__(self, db: Database):
        self.db = db

    def upsert_unit(
        self,
        program_slug: str,
        unit_index: int,
        title: str,
        mantra: str = "",
        status: str = STATUS_PUBLISHED,
        journal_schema: dict | None = None,
    ) -> int:
        with self.db.cursor() as cur:
            cur.execute(
                '''
                INSERT INTO units(program_slug, unit_type, unit_index, title, mantra, status, journal_schema)
                VALUES (%s, %s, %s, %s, %s, %s, %s::jsonb)
                ON CONFLICT(program_slug, unit_type, unit_index) DO UPDATE
                  SET title=EXCLUDED.title,
                      mantra=EXCLUDED.mantra,
                      status=EXCLUDED.status,
                      journal_schema=EXCLUDED.journal_schema,
                      updated_at=NOW()
                RETURNING id
                ''',
                (program_slug, UNIT_TYPE_DAY, unit_index, title, mantra or "", status, json.dumps(journal_schema or {})),
            )
            return int(cur.fetchone()["id"])

    def list_published(self, program_slug: str):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                SELECT unit_index, title, mantra, journal_schema
                FROM units
                WHERE program_slug=%s AND unit_type=%s AND status=%s
                ORDER BY unit_index ASC
                ''',
                (program_slug, UNIT_TYPE_DAY, STATUS_PUBLISHED),
            )
            return cur.fetchall()

    def last_published_index(self, program_slug: str) -> int:
        """Highest published day index, 0 when nothing is published."""
        with self.db.cursor() as cur:
            cur.execute(
                "SELECT MAX(unit_index) AS last FROM units WHERE program_slug=%s AND unit_type=%s AND status=%s",
                (program_slug, UNIT_TYPE_DAY, STATUS_PUBLISHED),
            )
            row = cur.fetchone() or {}
            return int(row.get("last") or 0)

    def get_published(self, program_slug: str, unit_index: int):
        with self.db.cursor() as cur:
            cur.execute(
                '''
                SELECT unit_index, title, mantra, journal_schema
                FROM units
                WHERE program_slug=%s AND unit_type=%s AND status=%s AND unit_index=%s
                ''',
                (program_slug, UNIT_TYPE_DAY, STATUS_PUBLISHED, unit_index),
            )
            return cur.fetchone()
