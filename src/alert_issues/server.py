from __future__ import annotations

import logging

import structlog
import uvicorn

from alert_issues.app import create_app
from alert_issues.config import get_settings


def configure_logging(level: str = "info") -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
    )


def main() -> int:
    settings = get_settings()
    configure_logging(settings.log_level)
    log = structlog.get_logger().bind(service="alertmanager-issues")
    log.info(
        "starting",
        repository=settings.repository,
        host=settings.listen_host,
        port=settings.listen_port,
        serialize_by_identity=settings.serialize_by_identity,
    )
    app = create_app(settings)
    uvicorn.run(app, host=settings.listen_host, port=settings.listen_port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
