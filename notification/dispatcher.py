#!/usr/bin/env python3
"""
Notification dispatcher.

Services publish fan-out events here after their own transaction commits.
Depending on configuration the event is processed inline (sync mode) or
enqueued on the 'notifications' Redis queue for notification.worker.

publish() never raises: a notification problem must not surface as a
failure of the write that caused it.
"""

import logging
from typing import Optional

from redis import Redis
from rq import Queue, Retry
from sqlalchemy.orm import sessionmaker

from core.config_loader import NotificationConfig
from notification.fanout import event_to_payload, process_fanout_event, process_fanout_task

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


class NotificationDispatcher:
    """Routes fan-out events to inline processing or the RQ queue."""

    def __init__(
        self,
        config: Optional[NotificationConfig] = None,
        session_factory: Optional[sessionmaker] = None
    ):
        self.config = config or NotificationConfig()
        self.session_factory = session_factory
        self.redis_url = self.config.redis_url or DEFAULT_REDIS_URL

        if not self.config.use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False
        else:
            try:
                self.redis_conn = Redis.from_url(self.redis_url)
                # Validate connection with ping before using
                self.redis_conn.ping()
                self.queue = Queue(self.config.queue_name, connection=self.redis_conn)
                self.async_mode = True
                logger.info("Notification dispatcher connected to Redis")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.redis_conn = None
                self.queue = None
                self.async_mode = False

    def publish(self, event) -> Optional[str]:
        """
        Dispatch one fan-out event.

        Returns:
            RQ job id when queued, None when processed inline or dropped
        """
        if not self.config.enabled:
            logger.debug(f"Notifications disabled; dropping {event}")
            return None

        if self.async_mode:
            try:
                job = self.queue.enqueue(
                    process_fanout_task,
                    event_to_payload(event),
                    job_timeout=self.config.job_timeout,
                    result_ttl=86400,
                    retry=Retry(max=3, interval=[10, 30, 60])
                )
                logger.info(f"Queued {event.event_type} as job {job.id}")
                return job.id
            except Exception as e:
                logger.error(f"Failed to enqueue {event}: {e}. Processing inline.")

        process_fanout_event(event, self.session_factory)
        return None

    def get_queue_status(self) -> dict:
        if not self.async_mode:
            return {'status': 'sync_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except Exception as e:
            return {'status': 'error', 'error': str(e)}
