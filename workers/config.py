# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied to the Celery app via app.config_from_object().
# =============================================================================

from app.config import settings


class CeleryConfig:
    """Celery settings for the Bright Ops worker."""

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a worker crash requeues the task
    task_acks_late = True

    worker_prefetch_multiplier = 1

    # Chat replies are only useful for a few minutes
    result_expires = 3600
    task_time_limit = 120
    task_soft_time_limit = 90

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "chat_tasks": {
            "exchange": "chat_tasks",
            "routing_key": "chat_tasks",
        },
    }

    # OpenAI calls get their own queue so slow replies don't block other work
    task_routes = {
        "workers.tasks.generate_autopilot_response": {"queue": "chat_tasks"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    task_annotations = {
        "*": {
            "max_retries": 3,
            "default_retry_delay": 30,
        }
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
