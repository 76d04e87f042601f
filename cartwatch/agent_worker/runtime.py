"""
Persistent headless runtime for the cartwatch agent.

Runs as a separate process (CLI entrypoint). Builds the service clients on
one shared httpx.AsyncClient, wires tracker → enricher → decision engine →
notifier into the scheduler, and ticks until SIGINT/SIGTERM. Per-user and
per-tick exceptions are isolated by the scheduler; the loop never crashes.

Usage: python -m cartwatch.agent_worker.runtime
"""

from __future__ import annotations

import asyncio
import signal
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from cartwatch.agent_worker.candidates import StaticCandidateSource
from cartwatch.agent_worker.runner import CartAbandonmentScheduler, SchedulerConfig
from cartwatch.cartwatch_logging import configure_logging, get_logger
from cartwatch.clients.cart_source import HttpCartSource
from cartwatch.clients.delivery import HttpEmailChannel
from cartwatch.clients.product_catalog import HttpProductCatalog
from cartwatch.config.settings import Settings, get_settings
from cartwatch.core.exceptions import ConfigError
from cartwatch.decision.engine import DecisionEngine, DiscountStrategy
from cartwatch.decision.remote import RemoteModelStrategy
from cartwatch.decision.rules import RuleBasedStrategy
from cartwatch.enrichment.enricher import CartEnricher
from cartwatch.inactivity.tracker import InactivityTracker
from cartwatch.notify.notifier import DiscountNotifier

logger = get_logger(__name__)


def build_strategy(settings: Settings, client: httpx.AsyncClient) -> DiscountStrategy:
    """Remote model when ANALYSIS_SERVICE_URL is set, rule-based otherwise."""
    if settings.analysis_service_url:
        return RemoteModelStrategy(
            settings.analysis_service_url,
            client,
            timeout_sec=settings.decision_timeout_sec,
        )
    return RuleBasedStrategy()


@asynccontextmanager
async def build_scheduler(
    settings: Settings,
    *,
    tracker: InactivityTracker | None = None,
) -> AsyncIterator[CartAbandonmentScheduler]:
    """Wire a scheduler to HTTP collaborators; the shared client closes on exit."""
    candidates = StaticCandidateSource(settings.require_candidates())
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout_sec)) as client:
        strategy = build_strategy(settings, client)
        scheduler = CartAbandonmentScheduler(
            candidates=candidates,
            carts=HttpCartSource(settings.cart_service_url, client),
            tracker=tracker or InactivityTracker(),
            enricher=CartEnricher(HttpProductCatalog(settings.product_catalog_service_url, client)),
            decisions=DecisionEngine(strategy, timeout_sec=settings.decision_timeout_sec),
            notifier=DiscountNotifier(HttpEmailChannel(settings.email_service_url, client)),
            config=SchedulerConfig(
                interval_sec=settings.poll_interval_sec,
                inactivity_threshold_sec=settings.inactivity_threshold_sec,
                recipient_template=settings.recipient_email_template,
            ),
        )
        logger.info(
            "runtime_scheduler_built",
            candidate_count=len(settings.candidate_user_ids),
            strategy=getattr(strategy, "name", type(strategy).__name__),
            cart_service_url=settings.cart_service_url,
            product_catalog_service_url=settings.product_catalog_service_url,
            email_service_url=settings.email_service_url,
        )
        yield scheduler


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info("runtime_shutdown_signal", signal=sig.name)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig)
        except (NotImplementedError, RuntimeError):
            # Windows / non-main thread: fall back to KeyboardInterrupt handling in main()
            pass


async def run_service(settings: Settings, stop_event: asyncio.Event | None = None) -> None:
    """Run the scheduler until stop_event is set (or a shutdown signal arrives)."""
    stop = stop_event or asyncio.Event()
    _install_signal_handlers(stop)
    async with build_scheduler(settings) as scheduler:
        await scheduler.run(stop)


def main() -> int:
    """CLI entrypoint: load settings from env and run the scheduler loop."""
    try:
        settings = get_settings()
        configure_logging(settings)
        asyncio.run(run_service(settings))
        return 0
    except KeyboardInterrupt:
        logger.info("runtime_shutdown_signal", signal="SIGINT")
        return 0
    except ConfigError as e:
        logger.error("runtime_config_error", error=str(e))
        return 2
    except Exception as e:
        logger.exception("runtime_fatal", error=str(e))
        return 1
    finally:
        logger.info("runtime_stopped")


if __name__ == "__main__":
    sys.exit(main())
