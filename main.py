"""
Main entrypoint: cart-abandonment scheduler + status API.

The scheduler loop runs as a background asyncio task inside the FastAPI
lifespan, so the API stays responsive and uvicorn owns SIGINT/SIGTERM
handling. With STATUS_API_ENABLED=0 the headless runtime is used instead.

Env: CANDIDATE_USER_IDS (required), CART_SERVICE_URL, PRODUCT_CATALOG_SERVICE_URL,
EMAIL_SERVICE_URL, ANALYSIS_SERVICE_URL, POLL_INTERVAL_SEC, INACTIVITY_THRESHOLD_SEC,
API_HOST, API_PORT, LOG_LEVEL, LOG_FORMAT.

Headless (no API): python -m cartwatch.agent_worker.runtime
"""

import sys

# Default JSON logging until settings are loaded
from cartwatch.cartwatch_logging import configure_logging, get_logger

logger = get_logger("main")


def main() -> int:
    """Validate config, then serve the status API with the scheduler in its lifespan."""
    from cartwatch.config.settings import get_settings
    from cartwatch.core.exceptions import ConfigError

    try:
        settings = get_settings()
        settings.require_candidates()
        configure_logging(settings)
    except ConfigError as e:
        logger.error("main_config_error", error=str(e))
        return 2

    if not settings.status_api_enabled:
        from cartwatch.agent_worker.runtime import main as runtime_main

        return runtime_main()

    import uvicorn

    from cartwatch.api_server.server import create_app

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        candidate_count=len(settings.candidate_user_ids),
    )
    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
