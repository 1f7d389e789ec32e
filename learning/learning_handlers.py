import logging

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes, CommandHandler, CallbackQueryHandler, MessageHandler, filters

from event_bus import callbacks as cb
from learning import errors
from learning import progression as pg
from ui import texts
from ui.keyboards import menus

logger = logging.getLogger("learning")

STEP_WAIT_ANSWER = "learn_wait_answer"


def _error_text(envelope: dict) -> str:
    code = envelope.get("error") or errors.SERVER_ERROR
    text = texts.ERRORS.get(code, texts.ERRORS[errors.SERVER_ERROR])
    req = envelope.get("requirements") or {}
    if code == errors.INCOMPLETE_DAY and req:
        lines = [text]
        if not req.get("practiced"):
            lines.append(texts.INCOMPLETE_NOT_PRACTICED)
        if not req.get("anyText"):
            lines.append(texts.INCOMPLETE_NO_TEXT)
        text = "\n".join(lines)
    return text


def outline_text(outline: dict, first_name: str) -> str:
    total = int(outline["total"])
    lines = [texts.OUTLINE_HELLO.format(name=first_name or "друг")]
    if total <= 0:
        lines.append(texts.OUTLINE_NO_UNITS)
        return "\n".join(lines)
    if outline["status"] == pg.STATUS_COMPLETED:
        lines.append(texts.OUTLINE_FINISHED.format(total=total))
    else:
        lines.append(texts.OUTLINE_DAY_OF.format(day=min(outline["currentDay"], total), total=total))
    lines.append(texts.OUTLINE_PROGRESS.format(percent=outline["percent"], done=outline["doneCount"], total=total))
    return "\n".join(lines)


def day_text(view: dict) -> str:
    unit = view.get("unit") or {}
    state = view.get("state") or {}
    schema = view["schema"]
    lines = [texts.DAY_HEADER.format(dd=pg.pad_day(view["day"]), title=unit.get("title") or "")]
    if unit.get("mantra"):
        lines.append(texts.DAY_MANTRA.format(mantra=unit["mantra"]))

    answers = [(k, v) for k, v in (state.get("data") or {}).items() if isinstance(v, str) and v.strip()]
    if answers:
        lines.append("")
        lines.append(texts.DAY_ANSWERS)
        for field_id, value in answers:
            lines.append(texts.DAY_ANSWER_ROW.format(label=schema.label_for(field_id), text=value.strip()))

    if view.get("missing"):
        labels = ", ".join(schema.label_for(fid) for fid in view["missing"])
        lines.append("")
        lines.append(texts.DAY_MISSING.format(labels=labels))
    if state.get("completed"):
        lines.append("")
        lines.append(texts.DAY_COMPLETED)
    return "\n".join(lines)


async def edit_screen(q, text: str, reply_markup=None):
    """Edit the message behind an inline button; an unchanged screen is not an error."""
    try:
        await q.edit_message_text(text=text, reply_markup=reply_markup)
    except BadRequest as e:
        if "not modified" not in str(e).lower():
            raise
        logger.debug("edit skipped uid=%s", q.from_user.id)


def register_learning_handlers(app, settings, services):
    api = services["learning_api"]
    learning = services["learning"]
    user_svc = services["user"]

    def _default_slug(context: ContextTypes.DEFAULT_TYPE) -> str | None:
        slug = context.args[0].strip().lower() if context.args else settings.default_program_slug
        return slug if cb.is_valid_slug(slug) else None

    def _ensure(update: Update) -> int:
        u = update.effective_user
        user_svc.ensure_user(u.id, u.username, u.full_name)
        return int(u.id)

    # ----------------------------
    # Screens
    # ----------------------------
    def _outline_screen(uid: int, slug: str):
        env = api.get_outline(uid, slug)
        if not env["ok"]:
            return _error_text(env), None
        text = outline_text(env, user_svc.first_name(uid))
        return text, menus.kb_outline(slug, env)

    def _intro_screen(uid: int, slug: str, prefix: str = ""):
        outline = learning.outline(uid, slug)
        engaged = outline["items"][0]["state"] == pg.STATE_DONE
        text = f"{prefix}\n\n{texts.INTRO_TEXT}" if prefix else texts.INTRO_TEXT
        return text, menus.kb_intro(slug, engaged)

    def _day_screen(uid: int, slug: str, day: int, prefix: str = ""):
        if day <= 0:
            day = learning.outline(uid, slug)["currentDay"]
        try:
            view = learning.day_view(uid, slug, day)
        except errors.ProgressionError as e:
            return _error_text({"error": e.code}), None
        if view["redirect"] == "intro":
            return _intro_screen(uid, slug, texts.DAY_REDIRECT_INTRO)
        if view["redirect"] == "day":
            prefix = texts.DAY_REDIRECT_CURRENT
        text = day_text(view)
        if prefix:
            text = f"{prefix}\n\n{text}"
        return text, menus.kb_day(slug, view)

    def _conclusion_screen(uid: int, slug: str):
        env = api.get_summary(uid, slug)
        if not env["ok"]:
            return _error_text(env), None
        if env["status"] != pg.STATUS_COMPLETED:
            return _outline_screen(uid, slug)
        return texts.CONCLUSION_TEXT.format(total=env["total"]), menus.kb_conclusion(slug)

    def _step_screen(uid: int, step: dict):
        slug = step.get("programSlug") or ""
        if not cb.is_valid_slug(slug):
            return _outline_screen(uid, settings.default_program_slug)
        if step["type"] == "intro":
            return _intro_screen(uid, slug)
        if step["type"] == "day":
            return _day_screen(uid, slug, int(step.get("day") or 0))
        if step["type"] == "summary":
            return _conclusion_screen(uid, slug)
        return _outline_screen(uid, settings.default_program_slug)

    # ----------------------------
    # Commands
    # ----------------------------
    async def start_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE):
        uid = _ensure(update)
        step = learning.next_step(uid)
        await update.effective_message.reply_text(
            texts.START_TEXT, reply_markup=menus.kb_start(step, settings.default_program_slug)
        )

    async def continue_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE):
        uid = _ensure(update)
        text, kb = _step_screen(uid, learning.next_step(uid))
        await update.effective_message.reply_text(text, reply_markup=kb)

    async def learn_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE):
        uid = _ensure(update)
        slug = _default_slug(context)
        if not slug:
            await update.effective_message.reply_text(texts.BAD_SLUG)
            return
        text, kb = _outline_screen(uid, slug)
        await update.effective_message.reply_text(text, reply_markup=kb)

    async def notes_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE):
        uid = _ensure(update)
        slug = _default_slug(context)
        if not slug:
            await update.effective_message.reply_text(texts.BAD_SLUG)
            return
        rows = learning.notes(uid, slug)
        if not rows:
            await update.effective_message.reply_text(texts.NOTES_EMPTY)
            return
        lines = [texts.NOTES_HEADER.format(slug=slug)]
        last_day = None
        for row in rows:
            if row["day"] != last_day:
                lines.append("")
                lines.append(texts.NOTES_DAY.format(dd=pg.pad_day(row["day"]), title=row["title"]))
                last_day = row["day"]
            lines.append(texts.DAY_ANSWER_ROW.format(label=row["label"], text=row["text"]))
        await update.effective_message.reply_text("\n".join(lines))

    # ----------------------------
    # Inline buttons
    # ----------------------------
    async def on_learn_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
        q = update.callback_query
        await q.answer()
        parsed = cb.parse(q.data or "")
        if not parsed:
            return
        verb, slug, rest = parsed
        uid = _ensure(update)

        day = 0
        if rest:
            try:
                day = int(rest[0])
            except ValueError:
                return

        if verb == "outline":
            await edit_screen(q, *_outline_screen(uid, slug))

        elif verb == "intro":
            await edit_screen(q, *_intro_screen(uid, slug))

        elif verb == "intro_on":
            env = api.post_intro(uid, {"programSlug": slug, "engaged": True})
            if not env["ok"]:
                await edit_screen(q, _error_text(env))
                return
            await edit_screen(q, *_intro_screen(uid, slug, texts.INTRO_ENGAGED))

        elif verb == "intro_off":
            await edit_screen(
                q,
                texts.INTRO_DISENGAGE_WARN,
                menus.kb_confirm(texts.BTN_DISENGAGE_CONFIRM, cb.make(cb.LEARN_INTRO_OFF_OK, slug), cb.make(cb.LEARN_OUTLINE, slug)),
            )

        elif verb == "intro_off_ok":
            env = api.post_intro(uid, {"programSlug": slug, "engaged": False})
            if not env["ok"]:
                await edit_screen(q, _error_text(env))
                return
            await edit_screen(q, *_intro_screen(uid, slug, texts.INTRO_RESET_DONE))

        elif verb == "day":
            await edit_screen(q, *_day_screen(uid, slug, day))

        elif verb in ("practiced", "mantra"):
            flag = "practiced" if verb == "practiced" else "mantra3x"
            try:
                learning.toggle_flag(uid, slug, day, flag)
            except Exception:
                logger.exception("toggle failed uid=%s slug=%s day=%s flag=%s", uid, slug, day, flag)
                await edit_screen(q, texts.ERRORS[errors.SERVER_ERROR])
                return
            await edit_screen(q, *_day_screen(uid, slug, day))

        elif verb == "answer":
            if len(rest) < 2 or not rest[1].isdigit():
                return
            try:
                view = learning.day_view(uid, slug, day)
            except errors.ProgressionError as e:
                await edit_screen(q, _error_text({"error": e.code}))
                return
            fields = view["schema"].text_fields()
            idx = int(rest[1])
            if idx >= len(fields):
                await edit_screen(q, *_day_screen(uid, slug, day))
                return
            field = fields[idx]
            user_svc.set_step(uid, STEP_WAIT_ANSWER, {"slug": slug, "day": view["day"], "field_id": field.id})
            ask = texts.DAY_ASK_ANSWER.format(label=field.label or field.id)
            if field.placeholder:
                ask = f"{ask}\n{texts.DAY_ASK_HINT.format(placeholder=field.placeholder)}"
            await context.bot.send_message(chat_id=uid, text=ask)

        elif verb == "rate":
            if len(rest) < 3 or rest[1] not in cb.RATING_TARGET_CODES:
                return
            code, key = rest[1], rest[2]
            try:
                view = learning.day_view(uid, slug, day)
            except errors.ProgressionError as e:
                await edit_screen(q, _error_text({"error": e.code}))
                return
            field = next((f for f in view["schema"].slider_fields() if f.id == key), None)
            if field is None or view["redirect"]:
                await edit_screen(q, *_day_screen(uid, slug, day))
                return
            text = texts.RATE_ASK.format(label=menus.rating_label(field), when=texts.RATE_WHEN[code])
            await edit_screen(q, text, menus.kb_rating(slug, view["day"], code, key))

        elif verb == "rate_set":
            if len(rest) < 4 or rest[1] not in cb.RATING_TARGET_CODES or not rest[3].isdigit():
                return
            target = cb.RATING_TARGET_CODES[rest[1]]
            try:
                learning.set_rating(uid, slug, day, target, rest[2], int(rest[3]))
            except errors.ProgressionError as e:
                await edit_screen(q, _error_text({"error": e.code}))
                return
            await edit_screen(q, *_day_screen(uid, slug, day, texts.RATE_SAVED))

        elif verb == "complete":
            env = api.post_progress(uid, {"programSlug": slug, "action": pg.ACTION_COMPLETE_DAY, "day": day})
            if not env["ok"]:
                await context.bot.send_message(chat_id=uid, text=_error_text(env))
                return
            if env["status"] == pg.STATUS_COMPLETED:
                text, kb = _conclusion_screen(uid, slug)
                await edit_screen(q, f"{texts.DAY_PROGRAM_DONE}\n\n{text}", kb)
                return
            await edit_screen(q, *_day_screen(uid, slug, env["currentDay"], texts.DAY_COMPLETE_OK.format(day=day)))

        elif verb == "reopen":
            env = api.post_progress(uid, {"programSlug": slug, "action": pg.ACTION_REOPEN_DAY, "day": day})
            if not env["ok"]:
                await edit_screen(q, _error_text(env))
                return
            await edit_screen(q, *_day_screen(uid, slug, env["currentDay"]))

        elif verb == "reset_day":
            env = api.delete_state(uid, {"programSlug": slug, "day": day})
            if not env["ok"]:
                await edit_screen(q, _error_text(env))
                return
            await edit_screen(q, *_day_screen(uid, slug, env["currentDay"], texts.DAY_RESET_DONE.format(day=day)))

        elif verb == "reset_all":
            await edit_screen(
                q,
                texts.RESET_ALL_WARN,
                menus.kb_confirm(texts.BTN_RESET_ALL_CONFIRM, cb.make(cb.LEARN_RESET_ALL_OK, slug), cb.make(cb.LEARN_CONCLUSION, slug)),
            )

        elif verb == "reset_all_ok":
            env = api.delete_state(uid, {"programSlug": slug, "all": True})
            if not env["ok"]:
                await edit_screen(q, _error_text(env))
                return
            await edit_screen(q, *_intro_screen(uid, slug, texts.RESET_ALL_DONE))

        elif verb == "conclusion":
            await edit_screen(q, *_conclusion_screen(uid, slug))

    # ----------------------------
    # Journal answers typed as plain text
    # ----------------------------
    async def on_plain_text(update: Update, context: ContextTypes.DEFAULT_TYPE):
        msg = update.effective_message
        if not msg or not msg.text or msg.text.startswith("/"):
            return
        uid = int(update.effective_user.id)
        st = user_svc.get_step(uid)
        if not st or st.get("step") != STEP_WAIT_ANSWER:
            return

        payload = st.get("payload") or {}
        slug = str(payload.get("slug") or "")
        day = int(payload.get("day") or 0)
        field_id = str(payload.get("field_id") or "")
        if not slug or day <= 0 or not field_id:
            user_svc.set_step(uid, None)
            return

        user_svc.set_step(uid, None)
        try:
            learning.save_answer(uid, slug, day, field_id, msg.text)
        except Exception:
            logger.exception("answer save failed uid=%s slug=%s day=%s", uid, slug, day)
            await msg.reply_text(texts.ERRORS[errors.SERVER_ERROR])
            return
        text, kb = _day_screen(uid, slug, day, texts.DAY_ANSWER_SAVED)
        await msg.reply_text(text, reply_markup=kb)

    # ----------------------------
    # Handlers
    # ----------------------------
    app.add_handler(CommandHandler("start", start_cmd))
    app.add_handler(CommandHandler("continue", continue_cmd))
    app.add_handler(CommandHandler("learn", learn_cmd))
    app.add_handler(CommandHandler("notes", notes_cmd))
    app.add_handler(CallbackQueryHandler(on_learn_callback, pattern=f"^{cb.LEARN_PREFIX}"))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, on_plain_text), group=5)
