from entity.repositories.users_repo import UsersRepo
from entity.repositories.state_repo import StateRepo

class UserService:
    def __init__(self, db, settings):
        self.settings = settings
        self.users = UsersRepo(db)
        self.state = StateRepo(db)

    def ensure_user(self, tg_id: int, username: str | None, display_name: str | None):
        self.users.upsert_user(tg_id, username, display_name)

    def first_name(self, user_id: int, fallback: str = "") -> str:
        name = (self.users.get_display_name(user_id) or "").strip()
        if not name:
            return fallback
        return name.split(" ")[0]

    def set_step(self, user_id: int, step: str | None, payload: dict | None = None):
        if step is None:
            self.state.clear_state(user_id)
        else:
            self.state.set_state(user_id, step, payload or {})

    def get_step(self, user_id: int):
        return self.state.get_state(user_id)
