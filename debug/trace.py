import logging

from telegram.ext import CallbackQueryHandler, MessageHandler, filters


log = logging.getLogger("trace")


async def trace_update(update, context):
    u = update.effective_user
    uid = u.id if u else None
    if update.callback_query:
        log.info("[TRACE] uid=%s callback=%r", uid, update.callback_query.data)
    elif update.message and update.message.text and update.message.text.startswith("/"):
        log.info("[TRACE] uid=%s command=%r", uid, update.message.text)
    elif update.message:
        # Journal answers are personal, only their size is logged.
        log.info("[TRACE] uid=%s text_len=%s", uid, len(update.message.text or ""))


def register_trace(app):
    """Log every update before the learning handlers see it."""

    app.add_handler(CallbackQueryHandler(trace_update), group=-100)
    app.add_handler(MessageHandler(filters.ALL, trace_update), group=-100)
