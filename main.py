import logging

from telegram.ext import Application

from debug.trace import register_trace
from entity.db import Database
from entity.repositories.units_repo import UnitsRepo
from entity.settings import get_settings
from learning.catalog_seed import seed_units
from learning.learning_api import LearningApi
from learning.learning_handlers import register_learning_handlers
from user.user_service import UserService


def build_services(db, settings) -> dict:
    api = LearningApi(db, settings)
    return {
        "learning": api.learning,
        "learning_api": api,
        "user": UserService(db, settings),
    }


def main():
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every polling request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    db = Database(settings)
    db.init_schema()
    if settings.units_seed_path:
        seed_units(UnitsRepo(db), settings.units_seed_path)

    app = Application.builder().token(settings.bot_token).build()
    register_trace(app)
    register_learning_handlers(app, settings, build_services(db, settings))
    app.run_polling()


if __name__ == "__main__":
    main()
