# Common UI texts used across handlers.

# Outline
OUTLINE_HELLO = "Привет, {name} 👋"
OUTLINE_PROGRESS = "Прогресс: {percent}% ({done}/{total})"
OUTLINE_DAY_OF = "День {day}/{total}"
OUTLINE_FINISHED = "Программа пройдена ({total})"
OUTLINE_INTRO = "Введение"
OUTLINE_DAY = "День {dd} — {title}"
OUTLINE_CONCLUSION = "Заключение и итоги"
STATE_ICONS = {"done": "✅", "active": "▶️", "locked": "🔒"}
OUTLINE_NO_UNITS = "В программе пока нет опубликованных дней."

# Buttons
BTN_CONTINUE = "▶️ Продолжить"
BTN_OUTLINE = "📋 Программа"
BTN_ENGAGE = "🚀 Начать программу"
BTN_DISENGAGE = "↩️ Отказаться от участия"
BTN_DISENGAGE_CONFIRM = "Да, удалить всё"
BTN_PRACTICED_ON = "✅ Практика выполнена"
BTN_PRACTICED_OFF = "⬜ Практика выполнена"
BTN_MANTRA_ON = "✅ Мантра ×3"
BTN_MANTRA_OFF = "⬜ Мантра ×3"
BTN_ANSWER = "✍️ {label}"
BTN_COMPLETE = "🏁 Завершить день"
BTN_REOPEN_PREV = "⬅️ Вернуться к дню {day}"
BTN_RESET_DAY = "🗑 Очистить этот день"
BTN_RESET_ALL = "🔄 Начать программу заново"
BTN_RESET_ALL_CONFIRM = "Да, начать заново"
BTN_CANCEL = "Отмена"
BTN_RATE_BEFORE = "📊 До · {label}: {value}"
BTN_RATE_AFTER = "📈 После · {label}: {value}"
BTN_BACK_DAY = "⬅️ К дню"
BTN_START_PROGRAM = "🚀 К программе"

# Intro
INTRO_TEXT = (
    "📖 Введение\n\n"
    "Каждый день — короткая практика, мантра и несколько вопросов дневника.\n"
    "Следующий день открывается, когда текущий завершён."
)
INTRO_ENGAGED = "Ты в программе. Первый день открыт 🌱"
INTRO_DISENGAGE_WARN = (
    "⚠️ Все ответы и отметки этой программы будут удалены без возможности восстановления.\n"
    "Продолжить?"
)
INTRO_RESET_DONE = "Участие отменено, прогресс сброшен."

# Day
DAY_HEADER = "📅 День {dd} — {title}"
DAY_MANTRA = "🕉 Мантра: {mantra}"
DAY_ANSWERS = "Ответы:"
DAY_ANSWER_ROW = "• {label}: {text}"
DAY_MISSING = "Осталось заполнить: {labels}"
DAY_COMPLETED = "✅ День завершён"
DAY_REDIRECT_INTRO = "Сначала начни программу во введении."
DAY_REDIRECT_CURRENT = "Этот день ещё закрыт. Открываю текущий день."
DAY_ASK_ANSWER = "✍️ {label}\n\nНапиши ответ одним сообщением."
DAY_ASK_HINT = "Подсказка: {placeholder}"
DAY_ANSWER_SAVED = "✅ Ответ сохранён."
DAY_COMPLETE_OK = "🎉 День {day} завершён!"
DAY_PROGRAM_DONE = "🏆 Программа пройдена! Заключение открыто."
DAY_RESET_DONE = "День {day} очищен."

# Ratings (0..10)
RATING_LABELS = {"energie": "Энергия", "focus": "Ясность", "paix": "Покой", "estime": "Самооценка"}
RATE_WHEN = {"s": "до практики", "c": "после практики"}
RATE_ASK = "Оцени «{label}» {when} от 0 до 10:"
RATE_SAVED = "✅ Оценка сохранена."

# Conclusion
CONCLUSION_TEXT = "🏁 Заключение\n\nТы прошёл(ла) все {total} дн. программы. Заметки: /notes"
RESET_ALL_WARN = "⚠️ Все ответы и отметки будут удалены, прогресс вернётся к дню 1. Продолжить?"
RESET_ALL_DONE = "Прогресс сброшен. Начинаем с первого дня."

# Notes
NOTES_EMPTY = "Пока нет заметок."
NOTES_HEADER = "📝 Заметки — {slug}"
NOTES_DAY = "День {dd} — {title}"

# Errors (by code)
ERRORS = {
    "USER_NOT_FOUND": "Не удалось определить пользователя. Нажми /start.",
    "NO_PUBLISHED_UNITS": "В программе пока нет опубликованных дней.",
    "INCOMPLETE_DAY": "Чтобы завершить день, отметь практику и ответь хотя бы на один вопрос.",
    "INVALID_DAY": "Такого дня нет.",
    "MISSING_SLUG": "Не указана программа.",
    "INVALID_BODY": "Некорректный запрос.",
    "UNKNOWN_ACTION": "Неизвестное действие.",
    "NOT_ENROLLED": "Ты ещё не начал(а) эту программу.",
    "SERVER_ERROR": "⚠️ Что-то пошло не так, попробуй позже.",
}
INCOMPLETE_NOT_PRACTICED = "• отметь «Практика выполнена»"
INCOMPLETE_NO_TEXT = "• ответь хотя бы на один вопрос"

START_TEXT = "Привет! Команды:\n/learn — программа\n/continue — продолжить с того места, где остановился(ась)\n/notes — мои заметки"
BAD_SLUG = "Неизвестная программа. Название: латиница, цифры и дефис, до 24 символов."
