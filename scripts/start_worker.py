#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with an embedded beat scheduler, so one process
# handles notifications, the daily digest and reminder polling.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or run worker and beat separately
#   celery -A workers.celery_app worker --loglevel=info -Q default,notifications
#   celery -A workers.celery_app beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import logging

from workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker with beat."""
    logger.info("Starting RDR client portal worker (Ctrl+C to stop)")

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=2",
        "--queues=default,notifications",
    ])


if __name__ == "__main__":
    main()
