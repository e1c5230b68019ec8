"""Admin endpoints for embedding regeneration."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from company_brain.api.dependencies import get_regeneration_job, get_regeneration_scheduler
from company_brain.core.logging import get_logger
from company_brain.services.regeneration_jobs import (
    RegenerationJob,
    RegenerationScheduler,
    RegenerationStats,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class JobStatusResponse(BaseModel):
    scheduler_running: bool
    regeneration_running: bool
    active_jobs: int
    jobs: list[dict[str, Any]]
    last_run: dict[str, Any] | None = None


@router.post("/regenerate", response_model=RegenerationStats, operation_id="regenerate")
async def regenerate(job: RegenerationJob = Depends(get_regeneration_job)) -> RegenerationStats:
    """Run the full regeneration sweep now and return its counts."""
    logger.info("Manual regeneration requested")
    return await job.run()


@router.get("/jobs/status", response_model=JobStatusResponse, operation_id="job_status")
async def get_job_status(
    job: RegenerationJob = Depends(get_regeneration_job),
    scheduler: RegenerationScheduler | None = Depends(get_regeneration_scheduler),
) -> JobStatusResponse:
    """Get regeneration scheduler status."""
    if scheduler is None:
        last = job.last_stats
        return JobStatusResponse(
            scheduler_running=False,
            regeneration_running=job.running,
            active_jobs=0,
            jobs=[],
            last_run=last.model_dump(mode="json") if last else None,
        )
    status = scheduler.get_job_status()
    return JobStatusResponse(
        scheduler_running=status["scheduler_running"],
        regeneration_running=status["regeneration_running"],
        active_jobs=len(status["jobs"]),
        jobs=status["jobs"],
        last_run=status["last_run"],
    )
