#!/usr/bin/env python3
"""
RQ Worker for notification fan-out.

Processes events queued by NotificationDispatcher when
notifications.use_async_queue is enabled.

Usage:
    python -m notification.worker
    python -m notification.worker --burst
    python -m notification.worker --verbose
"""

import sys
import argparse
import logging

from redis import Redis
from rq import Worker

from core.config_loader import load_config, configure_logging
from database.database import configure_database

logger = logging.getLogger(__name__)


def start_worker(config_path: str = "config.yaml", burst: bool = False, queues: list = None, verbose: bool = False):
    """Start the RQ worker."""
    config = load_config(config_path)
    configure_logging(config.logging)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # process_fanout_task opens its own units of work against this database
    configure_database(
        url=config.database.url,
        echo=config.database.echo,
        statement_timeout_ms=config.database.statement_timeout_ms
    )

    redis_url = config.notifications.redis_url or 'redis://localhost:6379/0'
    if queues is None:
        queues = [config.notifications.queue_name]

    logger.info("Starting RQ Worker")
    logger.info(f"Redis URL: {redis_url}")
    logger.info(f"Queues: {', '.join(queues)}")
    logger.info(f"Burst mode: {burst}")

    try:
        redis_conn = Redis.from_url(redis_url)
        redis_conn.ping()
        logger.info("Connected to Redis")

        worker = Worker(queues, connection=redis_conn)

        if burst:
            logger.info("Running in burst mode...")
            worker.work(burst=True)
        else:
            logger.info("Worker started. Press Ctrl+C to stop.")
            worker.work()

    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description='Bursary notification worker')
    parser.add_argument('--config', default='config.yaml')
    parser.add_argument('--burst', action='store_true', help='Process all and exit')
    parser.add_argument('--queues', nargs='+', default=None)
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args()

    start_worker(config_path=args.config, burst=args.burst, queues=args.queues, verbose=args.verbose)


if __name__ == '__main__':
    main()
