from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..container import Container
from .config import PipelineConfig

logger = logging.getLogger(__name__)


def build_scheduler(container: Container, config: PipelineConfig) -> BackgroundScheduler:
    """Background jobs for the reconciliation service (not started)."""

    scheduler = BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})

    scheduler.add_job(
        container.pipeline.run_once,
        IntervalTrigger(minutes=config.poll_interval_minutes),
        id="reconciliation_pipeline",
        name="Poll BioTime and reconcile attendance",
    )
    scheduler.add_job(
        container.gap_filler.fill,
        IntervalTrigger(minutes=config.gap_fill_interval_minutes),
        id="biotime_gap_fill",
        name="Recover missing BioTime data",
    )
    scheduler.add_job(
        container.auto_punchout_service.run,
        IntervalTrigger(hours=1),
        id="auto_punchout",
        name="Close sessions open past the threshold",
    )
    scheduler.add_job(
        container.staging_maintenance.remove_duplicates,
        CronTrigger(hour=config.cleanup_hour, minute=0),
        id="staging_duplicate_cleanup",
        name="Remove duplicate staged punches",
    )

    for job in scheduler.get_jobs():
        logger.info("Scheduled job %s (%s)", job.id, job.trigger)
    return scheduler
