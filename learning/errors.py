USER_NOT_FOUND = "USER_NOT_FOUND"
NO_PUBLISHED_UNITS = "NO_PUBLISHED_UNITS"
INCOMPLETE_DAY = "INCOMPLETE_DAY"
INVALID_DAY = "INVALID_DAY"
MISSING_SLUG = "MISSING_SLUG"
INVALID_BODY = "INVALID_BODY"
UNKNOWN_ACTION = "UNKNOWN_ACTION"
NOT_ENROLLED = "NOT_ENROLLED"
SERVER_ERROR = "SERVER_ERROR"

HTTP_STATUS = {
    USER_NOT_FOUND: 401,
    NO_PUBLISHED_UNITS: 400,
    INCOMPLETE_DAY: 400,
    INVALID_DAY: 400,
    MISSING_SLUG: 400,
    INVALID_BODY: 400,
    UNKNOWN_ACTION: 400,
    NOT_ENROLLED: 403,
    SERVER_ERROR: 500,
}


class ProgressionError(Exception):
    """A rejected learner action. `code` is one of the constants above."""

    def __init__(self, code: str, **details):
        super().__init__(code)
        self.code = code
        self.details = details

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, 400)
