from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ui import texts
from event_bus import callbacks as cb
from learning.journal_schema import RATING_MAX, RATING_MIN


def _btn(text: str, data: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(text, callback_data=data)


def outline_label(item: dict) -> str:
    icon = texts.STATE_ICONS.get(item.get("state"), "")
    if item["key"] == "intro":
        label = texts.OUTLINE_INTRO
    elif item["key"] == "conclusion":
        label = texts.OUTLINE_CONCLUSION
    else:
        label = texts.OUTLINE_DAY.format(dd=str(item["day"]).zfill(2), title=item.get("label") or "")
    return f"{icon} {label}".strip()


def kb_outline(slug: str, outline: dict) -> InlineKeyboardMarkup:
    rows = []
    for item in outline["items"]:
        if item.get("locked"):
            # Locked steps stay visible but are not clickable.
            rows.append([_btn(outline_label(item), cb.make(cb.LEARN_OUTLINE, slug))])
            continue
        if item["key"] == "intro":
            data = cb.make(cb.LEARN_INTRO_ON, slug) if item["state"] == "active" else cb.make(cb.LEARN_OUTLINE, slug)
        elif item["key"] == "conclusion":
            data = cb.make(cb.LEARN_CONCLUSION, slug)
        else:
            data = cb.make(cb.LEARN_DAY, slug, item["day"])
        rows.append([_btn(outline_label(item), data)])
    return InlineKeyboardMarkup(rows)


def kb_intro(slug: str, engaged: bool) -> InlineKeyboardMarkup:
    if engaged:
        rows = [
            [_btn(texts.BTN_CONTINUE, cb.make(cb.LEARN_DAY, slug, 0))],
            [_btn(texts.BTN_DISENGAGE, cb.make(cb.LEARN_INTRO_OFF, slug))],
        ]
    else:
        rows = [[_btn(texts.BTN_ENGAGE, cb.make(cb.LEARN_INTRO_ON, slug))]]
    rows.append([_btn(texts.BTN_OUTLINE, cb.make(cb.LEARN_OUTLINE, slug))])
    return InlineKeyboardMarkup(rows)


def kb_confirm(confirm_text: str, confirm_data: str, cancel_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[_btn(confirm_text, confirm_data), _btn(texts.BTN_CANCEL, cancel_data)]])


def rating_label(field) -> str:
    return field.label or texts.RATING_LABELS.get(field.id, field.id)


def kb_day(slug: str, view: dict) -> InlineKeyboardMarkup:
    day = int(view["day"])
    state = view.get("state") or {}
    schema = view["schema"]
    unit = view.get("unit") or {}

    practiced = bool(state.get("practiced"))
    rows = [[_btn(texts.BTN_PRACTICED_ON if practiced else texts.BTN_PRACTICED_OFF, cb.make(cb.LEARN_PRACTICED, slug, day))]]
    if unit.get("mantra") or any(f.id == "mantra3x" for f in schema.check_fields()):
        mantra = bool(state.get("mantra3x"))
        rows.append([_btn(texts.BTN_MANTRA_ON if mantra else texts.BTN_MANTRA_OFF, cb.make(cb.LEARN_MANTRA, slug, day))])

    before = state.get("sliders") or {}
    after = state.get("checkout") or {}
    for f in schema.slider_fields():
        label = rating_label(f)
        rows.append(
            [
                _btn(texts.BTN_RATE_BEFORE.format(label=label, value=before.get(f.id, "–")), cb.make(cb.LEARN_RATE, slug, day, "s", f.id)),
                _btn(texts.BTN_RATE_AFTER.format(label=label, value=after.get(f.id, "–")), cb.make(cb.LEARN_RATE, slug, day, "c", f.id)),
            ]
        )

    # Fields are addressed by position so long keys never hit the callback size limit.
    for i, f in enumerate(schema.text_fields()):
        rows.append([_btn(texts.BTN_ANSWER.format(label=f.label or f.id), cb.make(cb.LEARN_ANSWER, slug, day, i))])

    rows.append([_btn(texts.BTN_COMPLETE, cb.make(cb.LEARN_COMPLETE, slug, day))])
    if day > 1:
        rows.append([_btn(texts.BTN_REOPEN_PREV.format(day=day - 1), cb.make(cb.LEARN_REOPEN, slug, day - 1))])
    rows.append([_btn(texts.BTN_RESET_DAY, cb.make(cb.LEARN_RESET_DAY, slug, day))])
    rows.append([_btn(texts.BTN_OUTLINE, cb.make(cb.LEARN_OUTLINE, slug))])
    return InlineKeyboardMarkup(rows)


def kb_rating(slug: str, day: int, code: str, key: str) -> InlineKeyboardMarkup:
    values = list(range(RATING_MIN, RATING_MAX + 1))
    rows = [
        [_btn(str(v), cb.make(cb.LEARN_RATE_SET, slug, day, code, key, v)) for v in values[:6]],
        [_btn(str(v), cb.make(cb.LEARN_RATE_SET, slug, day, code, key, v)) for v in values[6:]],
        [_btn(texts.BTN_BACK_DAY, cb.make(cb.LEARN_DAY, slug, day))],
    ]
    return InlineKeyboardMarkup(rows)


def continue_data(step: dict, fallback_slug: str) -> str:
    """Callback that opens the screen `next_step` points at."""
    slug = step.get("programSlug") or ""
    if not cb.is_valid_slug(slug):
        return cb.make(cb.LEARN_OUTLINE, fallback_slug)
    kind = step.get("type")
    if kind == "intro":
        return cb.make(cb.LEARN_INTRO, slug)
    if kind == "day":
        return cb.make(cb.LEARN_DAY, slug, int(step.get("day") or 0))
    if kind == "summary":
        return cb.make(cb.LEARN_CONCLUSION, slug)
    return cb.make(cb.LEARN_OUTLINE, fallback_slug)


def kb_start(step: dict, fallback_slug: str) -> InlineKeyboardMarkup:
    label = texts.BTN_START_PROGRAM if step.get("type") in ("none", "intro") else texts.BTN_CONTINUE
    return InlineKeyboardMarkup([[_btn(label, continue_data(step, fallback_slug))]])


def kb_conclusion(slug: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [_btn(texts.BTN_RESET_ALL, cb.make(cb.LEARN_RESET_ALL, slug))],
            [_btn(texts.BTN_OUTLINE, cb.make(cb.LEARN_OUTLINE, slug))],
        ]
    )
