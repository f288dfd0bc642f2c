from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables
from .database.connection import DBConfig

from .container import Container, build_container
from .accounts.controller import register as register_accounts
from .assistant.controller import register as register_assistant
from .attendance.controller import register as register_attendance
from .catalog.controller import register as register_catalog
from .classes.controller import register as register_classes
from .people.controller import register as register_people
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder=str(REPO_ROOT / "templates"), static_folder=str(REPO_ROOT / "static"))

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        db = DBConfig.from_dict(db_config)
        logger.info("settings=%s db=%s", settings_module, db.describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_accounts(db)
            logger.info("demo seed ready")

        container = build_container(db_config=db_config, llm_config=getattr(settings, "LLM_CONFIG", None))

    app.extensions["container"] = container

    register_accounts(app, container)
    register_catalog(app, container)
    register_people(app, container)
    register_classes(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_assistant(app, container)

    return app
