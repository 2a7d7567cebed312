"""these are tasks which we run through celery"""

from celery import Celery
from django.conf import settings

from regionwatch.celery import app
from regionwatch.core.exceptions import (
    RegionStatsError,
    PartialPropagationError,
)
from regionwatch.services.region_stats_service import RegionStatsService
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch")


@app.task(bind=False)
def recompute_all_regions() -> dict:
    """full reconciliation of every region's statistics"""
    updated = RegionStatsService().recompute_all()
    under_threat = [region.id for region in updated if region.under_threat]
    logger.info(
        "recomputed %s regions, %s under threat", len(updated), len(under_threat)
    )
    return {"recomputed": len(updated), "under_threat": under_threat}


@app.task(bind=False)
def propagate_region(region_id: str) -> dict:
    """recompute a region whose people changed, and its ancestors"""
    try:
        updated = RegionStatsService().recompute_and_propagate(region_id)
    except PartialPropagationError as error:
        return {
            "status": "partial",
            "error_code": error.error_code,
            "last_succeeded_id": error.last_succeeded_id,
        }
    except RegionStatsError as error:
        logger.error(error.message)
        return {"status": "failed", "error_code": error.error_code, "message": error.message}
    return {"status": "success", "updated": [region.id for region in updated]}


@app.task(bind=False)
def eliminate_region(region_id: str, deadline: float = None) -> dict:
    """run an elimination in the background"""
    try:
        result = RegionStatsService().eliminate(region_id, deadline=deadline)
    except PartialPropagationError as error:
        return {
            "status": "partial",
            "error_code": error.error_code,
            "message": error.message,
            "last_succeeded_id": error.last_succeeded_id,
        }
    except RegionStatsError as error:
        logger.info(error.message)
        return {"status": "rejected", "error_code": error.error_code, "message": error.message}

    return {
        "status": "success",
        "eliminated": result.eliminated_count,
        "affected_regions": result.affected_region_ids,
        "propagated_regions": result.propagated_region_ids,
        "refreshed_regions": result.refreshed_region_ids,
    }


@app.on_after_finalize.connect
def setup_periodic_tasks(sender: Celery, **kwargs):
    """periodic celery tasks"""
    # full reconciliation of region statistics; every RECOMPUTE_ALL_SCHEDULE_MINUTES
    sender.add_periodic_task(
        60 * float(settings.RECOMPUTE_ALL_SCHEDULE_MINUTES),
        recompute_all_regions.s(),
        name="recompute statistics of every region",
    )
