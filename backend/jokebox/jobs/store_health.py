import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jokebox.core.config import Settings
from jokebox.services.joke_service import JokeService

logger = logging.getLogger(__name__)


class StoreHealthMonitor:
    """Periodically pings the jokes store and logs its connectivity.

    Failures are logged only; the monitor never stops the server.
    """

    JOB_ID = "store_health_check"

    def __init__(self, service: JokeService, settings: Settings):
        self.service = service
        self.settings = settings
        self.scheduler = AsyncIOScheduler()
        self.last_result: bool | None = None
        self._setup_jobs()

    def _setup_jobs(self):
        self.scheduler.add_job(
            func=self.check,
            trigger=IntervalTrigger(seconds=self.settings.health_check_interval_seconds),
            id=self.JOB_ID,
            name="Check jokes store connectivity",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    async def start(self):
        """Start the scheduler."""
        logger.info(
            "Starting store health monitor (every %ss)",
            self.settings.health_check_interval_seconds,
        )
        self.scheduler.start()

    async def stop(self):
        """Stop the scheduler."""
        if self.scheduler.running:
            logger.info("Stopping store health monitor")
            self.scheduler.shutdown(wait=False)
            # AsyncIOScheduler flips to stopped on the next loop iteration.
            await asyncio.sleep(0)

    async def check(self) -> bool:
        """Run one connectivity check and log the outcome."""
        healthy = await self.service.check_store()
        if healthy:
            logger.info("Database connection is healthy")
        else:
            logger.warning("Database connection check failed")
        self.last_result = healthy
        return healthy

    def get_job_info(self) -> dict:
        """Get information about scheduled jobs."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": next_run.isoformat() if next_run else None,
                    "trigger": str(job.trigger),
                }
            )

        return {
            "scheduler_running": self.scheduler.running,
            "last_result": self.last_result,
            "jobs": jobs,
        }
