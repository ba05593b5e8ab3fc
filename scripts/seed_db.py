from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module
from timekeeping.core.logging import configure_logging
from timekeeping.database.bootstrap import DEMO_MEMBERS, ensure_demo_business

logger = logging.getLogger("timekeeping.scripts.seed_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    business_id = ensure_demo_business(dict(settings.DB_CONFIG))
    for username, _, password, role in DEMO_MEMBERS:
        logger.info("business=%s login %s / %s (%s)", business_id, username, password, role)


if __name__ == "__main__":
    main()
