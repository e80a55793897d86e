"""Worker process for the periodic reconciliation pass.

Only reports: findings are logged for an operator, nothing is repaired.
"""

from __future__ import annotations

import logging
import time

from leavedesk.config import get_settings
from leavedesk.logging_config import configure_logging
from leavedesk.services.desk import LeaveDesk
from leavedesk.store import build_document_store

logger = logging.getLogger(__name__)


def run_once(desk: LeaveDesk) -> bool:
    """Run one reconciliation pass. Returns True when it completed and was clean."""
    try:
        report = desk.reconcile()
    except Exception:
        logger.exception("Reconciliation run failed")
        return False
    return report.clean


def run_reconciliation_loop() -> None:
    """Main worker loop that reconciles balances against requests at a fixed interval."""
    settings = get_settings()
    store = build_document_store(settings)
    desk = LeaveDesk(store, settings)

    logger.info("Reconciliation worker started (interval=%ds)", settings.reconcile_interval_seconds)
    try:
        while True:
            run_once(desk)
            time.sleep(settings.reconcile_interval_seconds)
    finally:
        store.close()


def main() -> None:
    """Entry point for the worker process."""
    configure_logging(get_settings().log_level)
    run_reconciliation_loop()


if __name__ == "__main__":
    main()
