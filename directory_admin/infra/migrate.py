from __future__ import annotations

import logging

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)


def run_upgrade_head(config_path: str = "alembic.ini") -> None:
    config = Config(config_path)
    logger.info("running migrations to head using %s", config_path)
    command.upgrade(config, "head")


if __name__ == "__main__":
    run_upgrade_head()
