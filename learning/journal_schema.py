from __future__ import annotations

from dataclasses import dataclass
import json

KIND_TEXT_SHORT = "text_short"
KIND_TEXT_LONG = "text_long"
KIND_SLIDER = "slider"
KIND_CHECKBOX = "checkbox"
KIND_CHIPS = "chips"
KIND_SCORE_GROUP = "score_group"

TEXT_KINDS = (KIND_TEXT_SHORT, KIND_TEXT_LONG)
FIELD_KINDS = TEXT_KINDS + (KIND_SLIDER, KIND_CHECKBOX, KIND_CHIPS, KIND_SCORE_GROUP)

# Stored keys of the "sliders" (before) and "checkout" (after) ratings.
RATING_KEYS = ("energie", "focus", "paix", "estime")
RATING_MIN = 0
RATING_MAX = 10


@dataclass(frozen=True)
class JournalField:
    id: str
    kind: str
    label: str = ""
    required: bool = False
    min_len: int | None = None
    max_len: int | None = None
    min: float | None = None
    max: float | None = None
    options: tuple[str, ...] = ()
    placeholder: str = ""

    @property
    def is_text(self) -> bool:
        return self.kind in TEXT_KINDS

    def is_filled(self, data: dict) -> bool:
        """Per-kind predicate: does `data` hold an acceptable value for this field?"""
        value = (data or {}).get(self.id)
        if self.kind in TEXT_KINDS:
            if not isinstance(value, str):
                return False
            return len(value.strip()) >= (self.min_len if self.min_len is not None else 1)
        if self.kind == KIND_SLIDER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self.kind == KIND_CHECKBOX:
            return value is True
        if self.kind == KIND_CHIPS:
            if isinstance(value, (list, tuple)):
                return len(value) > 0
            if isinstance(value, str):
                return bool(value.strip())
            return False
        # score_group is a layout container, never blocking
        return True


DEFAULT_SLIDERS = (
    JournalField(id="energie", kind=KIND_SLIDER, label="Энергия", min=RATING_MIN, max=RATING_MAX),
    JournalField(id="focus", kind=KIND_SLIDER, label="Ясность", min=RATING_MIN, max=RATING_MAX),
    JournalField(id="paix", kind=KIND_SLIDER, label="Покой", min=RATING_MIN, max=RATING_MAX),
)
DEFAULT_CHECKS = (
    JournalField(id="practiced", kind=KIND_CHECKBOX, label="Практика выполнена"),
    JournalField(id="mantra3x", kind=KIND_CHECKBOX, label="Мантра ×3"),
)


@dataclass(frozen=True)
class JournalSchema:
    fields: tuple[JournalField, ...] = ()
    # "sliders" / "checks" sections the unit spelled out itself, even empty.
    declared: frozenset[str] = frozenset()

    @property
    def has_text_questions(self) -> bool:
        return any(f.is_text for f in self.fields)

    def text_fields(self) -> list[JournalField]:
        return [f for f in self.fields if f.is_text]

    def slider_fields(self) -> list[JournalField]:
        """Rated scales of the day, restricted to the stored rating keys."""
        fields = [f for f in self.fields if f.kind == KIND_SLIDER]
        if "sliders" not in self.declared and not fields:
            fields = list(DEFAULT_SLIDERS)
        return [f for f in fields if f.id in RATING_KEYS]

    def check_fields(self) -> list[JournalField]:
        fields = [f for f in self.fields if f.kind == KIND_CHECKBOX]
        if "checks" not in self.declared and not fields:
            fields = list(DEFAULT_CHECKS)
        return fields

    def field(self, field_id: str) -> JournalField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def missing_required(self, data: dict) -> list[JournalField]:
        return [f for f in self.fields if f.required and not f.is_filled(data)]

    def label_for(self, field_id: str) -> str:
        f = self.field(field_id)
        if f and f.label:
            return f.label
        return field_id


def _opt_number(v):
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return v


def normalize_check_key(key: str | None, label: str | None = None) -> str:
    """Map the free-form check keys used by units onto the stored flags."""
    k = (key or "").strip().lower()
    lbl = (label or "").strip().lower()
    if k in ("pratique", "practice", "practiced", "fait", "faite", "done") or "pratique" in lbl or "practice" in lbl:
        return "practiced"
    if k in ("mantra", "mantra3x", "mantra_3x", "mantra×3", "mantra x3", "mantra x 3") or "mantra" in lbl:
        return "mantra3x"
    return k


def _parse_field(raw: dict, position: int) -> JournalField | None:
    kind = str(raw.get("type") or raw.get("kind") or "").strip()
    if kind == "group":
        kind = KIND_SCORE_GROUP
    if kind == "text":
        kind = KIND_TEXT_SHORT
    if kind not in FIELD_KINDS:
        return None
    field_id = str(raw.get("id") or raw.get("key") or f"f{position}").strip()
    min_len = _opt_number(raw.get("minLen", raw.get("min_len")))
    max_len = _opt_number(raw.get("maxLen", raw.get("max_len")))
    options = raw.get("options") or ()
    return JournalField(
        id=field_id,
        kind=kind,
        label=str(raw.get("label") or ""),
        required=bool(raw.get("required")),
        min_len=int(min_len) if min_len is not None else None,
        max_len=int(max_len) if max_len is not None else None,
        min=_opt_number(raw.get("min")),
        max=_opt_number(raw.get("max")),
        options=tuple(str(o) for o in options if isinstance(o, str)),
        placeholder=str(raw.get("placeholder") or ""),
    )


def _parse_question(raw, position: int) -> JournalField | None:
    # Bare prompt strings have no key of their own.
    if isinstance(raw, str):
        return JournalField(id=f"q{position}", kind=KIND_TEXT_LONG, label=raw)
    if not isinstance(raw, dict):
        return None
    return JournalField(
        id=str(raw.get("key") or raw.get("id") or f"q{position}").strip(),
        kind=KIND_TEXT_LONG,
        label=str(raw.get("label") or raw.get("text") or ""),
        placeholder=str(raw.get("placeholder") or ""),
    )


def _parse_slider(raw) -> JournalField | None:
    if not isinstance(raw, dict) or not raw.get("key"):
        return None
    lo = _opt_number(raw.get("min"))
    hi = _opt_number(raw.get("max"))
    return JournalField(
        id=str(raw["key"]).strip(),
        kind=KIND_SLIDER,
        label=str(raw.get("label") or ""),
        min=lo if lo is not None else RATING_MIN,
        max=hi if hi is not None else RATING_MAX,
    )


def _parse_check(raw) -> JournalField | None:
    if not isinstance(raw, dict):
        return None
    key = normalize_check_key(raw.get("key"), raw.get("label"))
    if not key:
        return None
    return JournalField(id=key, kind=KIND_CHECKBOX, label=str(raw.get("label") or ""))


def parse_journal_schema(raw) -> JournalSchema:
    """Build a JournalSchema from the stored JSON.

    Accepts typed `fields` as well as the `questions` / `sliders` / `checks`
    sections. Unknown field kinds and malformed entries are dropped; a missing
    or unreadable schema is an empty one.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return JournalSchema()
    if not isinstance(raw, dict):
        return JournalSchema()

    fields = []
    for i, item in enumerate(raw.get("fields") or []):
        if not isinstance(item, dict):
            continue
        parsed = _parse_field(item, i)
        if parsed:
            fields.append(parsed)

    for i, q in enumerate(raw.get("questions") or []):
        parsed = _parse_question(q, i)
        if parsed:
            fields.append(parsed)
    for s in raw.get("sliders") or []:
        parsed = _parse_slider(s)
        if parsed:
            fields.append(parsed)
    for c in raw.get("checks") or []:
        parsed = _parse_check(c)
        if parsed:
            fields.append(parsed)

    seen = set()
    unique = []
    for f in fields:
        if f.id in seen:
            continue
        seen.add(f.id)
        unique.append(f)

    declared = frozenset(k for k in ("sliders", "checks") if isinstance(raw.get(k), list))
    return JournalSchema(fields=tuple(unique), declared=declared)


def any_text_answer(data: dict | None) -> bool:
    return any(isinstance(v, str) and v.strip() for v in (data or {}).values())
