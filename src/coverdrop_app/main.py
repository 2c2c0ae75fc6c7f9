"""Application entry point."""

from __future__ import annotations

import logging

import uvicorn

from coverdrop_app.api.app import create_app
from coverdrop_app.core.config import load_config
from coverdrop_app.core.container import build_container
from coverdrop_app.core.observability import setup_logging

logger = logging.getLogger(__name__)


def run() -> None:
    """Run startup housekeeping and serve the HTTP API."""
    config = load_config()
    setup_logging(config.logging.level, config.logging.format)
    container = build_container(config)

    removed = container.audit_repo.cleanup_old_logs(config.logging.retention_days)
    if removed:
        logger.info("Cleaned old audit logs: %s", removed)
    container.policy_service.expire_due_policies()

    uvicorn.run(create_app(container), host=config.api.host, port=config.api.port, log_config=None)


if __name__ == "__main__":
    run()
