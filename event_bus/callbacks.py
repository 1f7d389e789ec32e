# Inline callback data: learn:<verb>:<slug>[:<day>[:<more>...]]
# Telegram rejects callback_data longer than 64 bytes (BUTTON_DATA_INVALID).
import re

MAX_DATA_BYTES = 64
SLUG_MAX_LEN = 24
_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")

LEARN_PREFIX = "learn:"

LEARN_OUTLINE = "learn:outline:"
LEARN_INTRO = "learn:intro:"
LEARN_INTRO_ON = "learn:intro_on:"
LEARN_INTRO_OFF = "learn:intro_off:"
LEARN_INTRO_OFF_OK = "learn:intro_off_ok:"

LEARN_DAY = "learn:day:"
LEARN_PRACTICED = "learn:practiced:"
LEARN_MANTRA = "learn:mantra:"
# learn:answer:<slug>:<day>:<index of the text field>
LEARN_ANSWER = "learn:answer:"
# learn:rate:<slug>:<day>:<s|c>:<key> opens the 0..10 picker,
# learn:rate_set:<slug>:<day>:<s|c>:<key>:<value> stores the pick.
LEARN_RATE = "learn:rate:"
LEARN_RATE_SET = "learn:rate_set:"
LEARN_COMPLETE = "learn:complete:"
LEARN_REOPEN = "learn:reopen:"

LEARN_RESET_DAY = "learn:reset_day:"
LEARN_RESET_ALL = "learn:reset_all:"
LEARN_RESET_ALL_OK = "learn:reset_all_ok:"

LEARN_CONCLUSION = "learn:conclusion:"

# s = "sliders" (before the practice), c = "checkout" (after)
RATING_TARGET_CODES = {"s": "sliders", "c": "checkout"}


def is_valid_slug(slug: str | None) -> bool:
    """Slugs go into every button of the program, so they stay short and colon-free."""
    return bool(slug) and len(slug) <= SLUG_MAX_LEN and bool(_SLUG_RE.match(slug))


def make(prefix: str, slug: str, *parts) -> str:
    data = prefix + ":".join([slug, *[str(p) for p in parts]])
    if len(data.encode("utf-8")) > MAX_DATA_BYTES:
        raise ValueError(f"callback data too long: {data!r}")
    return data


def parse(data: str) -> tuple[str, str, list[str]] | None:
    """learn:<verb>:<slug>:<rest...> -> (verb, slug, rest)."""
    if not (data or "").startswith(LEARN_PREFIX):
        return None
    parts = data.split(":")
    if len(parts) < 3 or not parts[1] or not parts[2]:
        return None
    return parts[1], parts[2], parts[3:]
