"""APScheduler setup for background polling."""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from stayops.config import get_setting

logger = logging.getLogger(__name__)


def create_scheduler() -> BackgroundScheduler:
    """Create the background scheduler; jobs are added by the screens that need them."""
    scheduler = BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})
    logger.info(
        "Scheduler configured (approval poll every %ss)",
        get_setting("scheduler", "approval_poll_seconds", 5),
    )
    return scheduler


def watch_for_approval(auth, scheduler: BackgroundScheduler, user_id: str):
    """Poll ``auth``'s profile on ``scheduler`` until the account is approved."""
    from stayops.modules.auth import ApprovalWatcher

    watcher = ApprovalWatcher(auth, scheduler, job_id=f"approval_poll:{user_id}")
    watcher.start()
    return watcher
