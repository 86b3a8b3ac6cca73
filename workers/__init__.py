# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Celery configuration and task definitions for work that runs outside the
# request cycle.
#
# Components:
# - celery_app.py: Celery application and lifecycle logging
# - tasks.py: Task definitions (chat autopilot)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q default,chat_tasks --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import generate_autopilot_response
#   result = generate_autopilot_response.delay(conversation_id, visitor_message)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
