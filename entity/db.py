import logging
from contextlib import contextmanager
import psycopg
from psycopg.rows import dict_row
from entity.settings import Settings

log = logging.getLogger("db")

SCHEMA_SQL = r'''
CREATE TABLE IF NOT EXISTS users (
  id BIGINT PRIMARY KEY,
  username TEXT,
  display_name TEXT,
  deleted_at TIMESTAMPTZ,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Dialog step of the chat surface (e.g. waiting for a journal answer).
CREATE TABLE IF NOT EXISTS user_state (
  user_id BIGINT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
  step TEXT,
  payload_json JSONB,
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Program catalog: one row per day unit. Read-only for the progression engine.
CREATE TABLE IF NOT EXISTS units (
  id SERIAL PRIMARY KEY,
  program_slug TEXT NOT NULL,
  unit_type TEXT NOT NULL DEFAULT 'day',
  unit_index INT NOT NULL CHECK (unit_index >= 1),
  title TEXT NOT NULL,
  mantra TEXT NOT NULL DEFAULT '',
  status TEXT NOT NULL DEFAULT 'published', -- 'draft' | 'published'
  journal_schema JSONB NOT NULL DEFAULT '{}'::jsonb,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  UNIQUE(program_slug, unit_type, unit_index)
);

CREATE INDEX IF NOT EXISTS idx_units_program_status ON units(program_slug, unit_type, status, unit_index);

CREATE TABLE IF NOT EXISTS enrollments (
  user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  program_slug TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'active', -- 'active' | 'completed' | 'paused'
  current_day INT NOT NULL DEFAULT 1 CHECK (current_day >= 1),
  intro_engaged BOOLEAN NOT NULL DEFAULT FALSE,
  started_at TIMESTAMPTZ,
  completed_at TIMESTAMPTZ,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  PRIMARY KEY (user_id, program_slug)
);

CREATE INDEX IF NOT EXISTS idx_enrollments_user_updated ON enrollments(user_id, updated_at);

-- Practice data per (user, program, day).
CREATE TABLE IF NOT EXISTS day_states (
  id SERIAL PRIMARY KEY,
  user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  program_slug TEXT NOT NULL,
  day INT NOT NULL CHECK (day >= 1),
  data JSONB NOT NULL DEFAULT '{}'::jsonb,
  sliders JSONB,
  checkout JSONB,
  practiced BOOLEAN NOT NULL DEFAULT FALSE,
  mantra3x BOOLEAN NOT NULL DEFAULT FALSE,
  completed BOOLEAN NOT NULL DEFAULT FALSE,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  UNIQUE(user_id, program_slug, day)
);

'''

MIGRATIONS_SQL = [
    "ALTER TABLE users ADD COLUMN IF NOT EXISTS display_name TEXT",
    "ALTER TABLE users ADD COLUMN IF NOT EXISTS deleted_at TIMESTAMPTZ",
    "ALTER TABLE units ADD COLUMN IF NOT EXISTS mantra TEXT NOT NULL DEFAULT ''",
    "ALTER TABLE enrollments ADD COLUMN IF NOT EXISTS intro_engaged BOOLEAN NOT NULL DEFAULT FALSE",
    "ALTER TABLE enrollments ADD COLUMN IF NOT EXISTS started_at TIMESTAMPTZ",
    "ALTER TABLE enrollments ADD COLUMN IF NOT EXISTS completed_at TIMESTAMPTZ",
    "ALTER TABLE day_states ADD COLUMN IF NOT EXISTS sliders JSONB",
    "ALTER TABLE day_states ADD COLUMN IF NOT EXISTS checkout JSONB",
    "ALTER TABLE day_states ADD COLUMN IF NOT EXISTS mantra3x BOOLEAN NOT NULL DEFAULT FALSE",
]

class Database:
    def __init__(self, settings: Settings):
        self.settings = settings

    def connect(self):
        return psycopg.connect(
            host=self.settings.db_host,
            port=self.settings.db_port,
            dbname=self.settings.db_name,
            user=self.settings.db_user,
            password=self.settings.db_password,
            row_factory=dict_row,
        )

    @contextmanager
    def session(self):
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def cursor(self):
        with self.session() as conn:
            cur = conn.cursor()
            try:
                yield cur
            finally:
                cur.close()

    def init_schema(self):
        with self.session() as conn:
            cur = conn.cursor()
            cur.execute(SCHEMA_SQL)
            for stmt in MIGRATIONS_SQL:
                # Each migration runs in its own savepoint so one failure
                # doesn't abort the whole transaction.
                try:
                    with conn.transaction():
                        cur.execute(stmt)
                except psycopg.Error:
                    log.warning("Migration skipped: %s", stmt)
            cur.close()
