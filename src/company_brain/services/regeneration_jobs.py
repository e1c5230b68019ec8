"""Nightly rebuild of every embedding from the current source rows."""

import asyncio
from collections.abc import Awaitable
from datetime import datetime
from typing import Any, TypeVar

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import BaseModel, computed_field

from company_brain.core.base import ErrorLevel
from company_brain.core.constants import (
    REGENERATION_HOUR_DEFAULT,
    REGENERATION_JOB_ID,
    REGENERATION_MINUTE_DEFAULT,
)
from company_brain.core.decorators import with_error_handling
from company_brain.core.logging import get_logger, log_context
from company_brain.domain.models import CompanyBrain, Project
from company_brain.domain.models.utils import utc_now
from company_brain.services import SourceRepository
from company_brain.services.indexing_service import IndexingReport, IndexingService

logger = get_logger(__name__)
T = TypeVar("T")


class RegenerationStats(BaseModel):
    companies_processed: int = 0
    company_info_embeddings: int = 0
    additional_context_chunks: int = 0
    company_documents: int = 0
    projects_processed: int = 0
    project_metadata_embeddings: int = 0
    project_documents: int = 0
    removed_embeddings: int = 0
    failures: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_embeddings(self) -> int:
        return (
            self.company_info_embeddings
            + self.additional_context_chunks
            + self.company_documents
            + self.project_metadata_embeddings
            + self.project_documents
        )


class RegenerationJob:
    """Full, stateless sweep over every company brain and project.

    Entities are processed one at a time to stay inside provider rate limits.
    A failing step is logged and counted once; the rest of that entity and
    every other entity are still swept.
    """

    def __init__(self, sources: SourceRepository, indexer: IndexingService):
        self.sources = sources
        self.indexer = indexer
        self._running = asyncio.Lock()
        self.last_stats: RegenerationStats | None = None

    @property
    def running(self) -> bool:
        return self._running.locked()

    def _tally(self, stats: RegenerationStats, report: IndexingReport) -> IndexingReport:
        stats.failures += len(report.warnings)
        stats.removed_embeddings += report.removed
        for warning in report.warnings:
            logger.warning("Regeneration warning", warning=warning)
        return report

    async def _attempt(self, stats: RegenerationStats, event: str, step: Awaitable[T], **log_fields: Any) -> T | None:
        """Await one sweep step; a failure is logged, counted and turned into None."""
        try:
            return await step
        except Exception:
            stats.failures += 1
            logger.exception(event, **log_fields)
            return None

    async def run(self) -> RegenerationStats:
        async with self._running:
            stats = RegenerationStats(started_at=utc_now())
            logger.info("Embedding regeneration started")

            brains = await self._attempt(stats, "Could not list company brains", self.sources.list_company_brains())
            for brain in brains or []:
                await self._regenerate_company(brain, stats)

            # Every uploaded document, whether or not its tenant has saved a brain profile
            documents = await self._attempt(
                stats,
                "Could not list company documents",
                self.sources.list_brain_documents(include_deleted=True),
            )
            for doc in documents or []:
                with log_context(tenant_id=doc.tenant_id, document_id=doc.id):
                    report = await self._attempt(
                        stats, "Company document regeneration failed", self.indexer.index_company_document(doc)
                    )
                    if report is not None:
                        stats.company_documents += self._tally(stats, report).stored

            projects = await self._attempt(stats, "Could not list projects", self.sources.list_projects())
            for project in projects or []:
                await self._regenerate_project(project, stats)

            stats.finished_at = utc_now()
            self.last_stats = stats
            logger.info("Embedding regeneration finished", **stats.model_dump(exclude={"started_at", "finished_at"}))
            return stats

    async def _regenerate_company(self, brain: CompanyBrain, stats: RegenerationStats) -> None:
        with log_context(tenant_id=brain.tenant_id, company_brain_id=brain.id):
            report = await self._attempt(
                stats, "Company profile regeneration failed", self.indexer.index_company_profile(brain)
            )
            if report is not None:
                stats.company_info_embeddings += self._tally(stats, report).stored

            report = await self._attempt(
                stats, "Additional context regeneration failed", self.indexer.index_additional_context(brain)
            )
            if report is not None:
                stats.additional_context_chunks += self._tally(stats, report).stored

            stats.companies_processed += 1

    async def _regenerate_project(self, project: Project, stats: RegenerationStats) -> None:
        with log_context(tenant_id=project.tenant_id, project_id=project.id):
            metadata = await self._attempt(
                stats, "Could not load project metadata", self.sources.get_project_metadata(project.id)
            )
            if metadata is not None:
                report = await self._attempt(
                    stats,
                    "Project metadata regeneration failed",
                    self.indexer.index_project_metadata(metadata, project),
                )
                if report is not None:
                    stats.project_metadata_embeddings += self._tally(stats, report).stored

            documents = await self._attempt(
                stats,
                "Could not list project documents",
                self.sources.list_project_documents(project.id, include_deleted=True),
            )
            for doc in documents or []:
                report = await self._attempt(
                    stats,
                    "Project document regeneration failed",
                    self.indexer.index_project_document(doc, project),
                    document_id=doc.id,
                )
                if report is not None:
                    stats.project_documents += self._tally(stats, report).stored

            stats.projects_processed += 1



class RegenerationScheduler:
    """Runs ``RegenerationJob`` once a day on the event loop."""

    def __init__(
        self,
        job: RegenerationJob,
        hour: int = REGENERATION_HOUR_DEFAULT,
        minute: int = REGENERATION_MINUTE_DEFAULT,
    ):
        self.job = job
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.nightly_regeneration,
            "cron",
            hour=hour,
            minute=minute,
            id=REGENERATION_JOB_ID,
            max_instances=1,
            coalesce=True,
        )

    async def start(self) -> None:
        self.scheduler.start()
        logger.info("RegenerationScheduler started", job_id=REGENERATION_JOB_ID)

    async def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
        logger.info("RegenerationScheduler shutdown complete")

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False)
    async def nightly_regeneration(self) -> None:
        await self.job.run()

    async def trigger_now(self) -> RegenerationStats:
        return await self.job.run()

    def get_job_status(self) -> dict[str, Any]:
        """Get status of all scheduled jobs."""
        jobs = self.scheduler.get_jobs()
        last = self.job.last_stats
        return {
            "scheduler_running": self.scheduler.running,
            "regeneration_running": self.job.running,
            "last_run": last.model_dump(mode="json") if last else None,
            "jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
                    "func": job.func.__name__,
                }
                for job in jobs
            ],
        }
