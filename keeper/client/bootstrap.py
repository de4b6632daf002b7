"""Keeper - process startup helpers.

The host application calls `create_store()` once at launch and passes the
resulting Store to its screens.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from keeper.client.state import Store
from keeper.shared.core.configuration import LoggingConfig, SystemConfig, get_config_manager
from keeper.shared.domain.auth.verifier import CredentialVerifier
from keeper.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(config: LoggingConfig) -> None:
    """Install console and optional rotating-file handlers on the root logger.

    File handler: everything at `config.level` to `config.log_file`.
    Console handler: `config.console_level` and above.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level))

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(getattr(logging, config.level))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, config.console_level))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    # Suppress verbose third-party library logs
    logging.getLogger("duckdb").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger.info(f"Logging configured: file={config.log_file or 'disabled'}, console={config.console_level}+")


async def create_store(
    config: Optional[SystemConfig] = None,
    *,
    kv_store: Optional[KeyValueStore] = None,
    verifier: Optional[CredentialVerifier] = None,
    env_file: Optional[Path] = None,
    setup_logging: bool = True,
) -> Store:
    """Build the application Store and run the startup restores.

    Args:
        config: Resolved configuration; loaded via ConfigManager when omitted
        kv_store: Backend override (tests, custom storage)
        verifier: Credential verifier override
        env_file: `.env` file to load before reading configuration
        setup_logging: Whether to configure root logging from `config.logging`
    """
    if config is None:
        load_dotenv(dotenv_path=env_file or Path(os.getcwd()) / ".env")
        config = get_config_manager().get_config()

    if setup_logging:
        configure_logging(config.logging)

    store = Store.from_config(config, kv_store=kv_store, verifier=verifier)
    await store.initialize()
    return store
