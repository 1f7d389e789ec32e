"""Import program day units from a JSON file.

Accepted shapes:

    {"programSlug": "reset-7", "units": [{"unitIndex": 1, "title": "...", ...}]}
    [{"programSlug": "reset-7", "units": [...]}, ...]
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from entity.repositories.units_repo import STATUS_DRAFT, STATUS_PUBLISHED
from event_bus.callbacks import SLUG_MAX_LEN, is_valid_slug

log = logging.getLogger("learning")


def parse_programs(raw) -> list[tuple[str, list[dict]]]:
    programs = raw if isinstance(raw, list) else [raw]
    out = []
    for p in programs:
        if not isinstance(p, dict):
            raise ValueError("program entry must be an object")
        slug = str(p.get("programSlug") or p.get("slug") or "").strip().lower()
        if not slug:
            raise ValueError("program entry without programSlug")
        if not is_valid_slug(slug):
            raise ValueError(f"{slug}: slug must be lowercase letters, digits, - or _, at most {SLUG_MAX_LEN} chars")
        units = []
        for u in p.get("units") or []:
            idx = int(u.get("unitIndex") or u.get("unit_index") or 0)
            if idx < 1:
                raise ValueError(f"{slug}: unitIndex must be >= 1")
            status = str(u.get("status") or STATUS_PUBLISHED)
            if status not in (STATUS_DRAFT, STATUS_PUBLISHED):
                raise ValueError(f"{slug}: unknown status {status!r}")
            units.append(
                {
                    "unit_index": idx,
                    "title": str(u.get("title") or f"День {idx}"),
                    "mantra": str(u.get("mantra") or ""),
                    "status": status,
                    "journal_schema": u.get("journalSchema") or u.get("journal_schema") or {},
                }
            )
        out.append((slug, units))
    return out


def seed_units(units_repo, path: str) -> int:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    count = 0
    for slug, units in parse_programs(raw):
        for u in units:
            units_repo.upsert_unit(slug, u["unit_index"], u["title"], u["mantra"], u["status"], u["journal_schema"])
            count += 1
    log.info("units seeded path=%s count=%s", path, count)
    return count
