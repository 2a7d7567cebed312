"""Region statistics service

Entry point used by the celery workers, the management commands and the person
mutations. Every public operation is one blocking unit of work and holds the locks
of the regions it writes for as long as it runs.
"""

from typing import List, Optional

from regionwatch.models.region import Region
from regionwatch.core.regionstores import (
    RegionStore,
    PersonRegistry,
    DjangoRegionStore,
    DjangoPersonRegistry,
)
from regionwatch.core.aggregation import StatisticsAggregator
from regionwatch.core.cascade import CascadePropagator, PropagationResult
from regionwatch.core.elimination import EliminationEngine, EliminationResult
from regionwatch.core.exceptions import RegionNotFoundError, PartialPropagationError
from regionwatch.core.regiontree import lineage_of
from regionwatch.core import threat
from regionwatch.utils.regionlocks import RegionLockManager
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch.region_stats_service")


class RegionStatsService:
    """Service class for region statistics operations"""

    def __init__(
        self,
        region_store: Optional[RegionStore] = None,
        person_registry: Optional[PersonRegistry] = None,
        lock_manager: Optional[RegionLockManager] = None,
    ):
        self.region_store = region_store or DjangoRegionStore()
        self.person_registry = person_registry or DjangoPersonRegistry()
        self.lock_manager = lock_manager or RegionLockManager()
        self.aggregator = StatisticsAggregator(self.region_store, self.person_registry)
        self.propagator = CascadePropagator(self.region_store, self.aggregator)

    def _get_region(self, region_id: str) -> Region:
        region = self.region_store.find_by_id(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        return region

    def _lineage_ids(self, region: Region) -> List[str]:
        return [ancestor.id for ancestor in lineage_of(self.region_store, region)]

    def assess(self, region: Region) -> bool:
        """whether the region's current statistics put it under threat"""
        return threat.assess(region)

    def recompute(self, region_id: str) -> Region:
        """Recompute one region's statistics from its children and direct people.

        Raises:
            RegionNotFoundError: If the region doesn't exist
        """
        with self.lock_manager.hold([region_id]):
            return self.aggregator.recompute(region_id)

    def propagate_upward(self, region_id: str) -> PropagationResult:
        """Recompute every ancestor of the region, nearest first.

        Raises:
            RegionNotFoundError: If the region doesn't exist
            PartialPropagationError: If an ancestor disappeared part way up
        """
        region = self._get_region(region_id)
        with self.lock_manager.hold(self._lineage_ids(region)):
            try:
                return self.propagator.propagate_upward(region_id)
            except PartialPropagationError as error:
                logger.warning(
                    f"partial propagation from {region_id}; re-run recompute_all or "
                    f"propagate_upward from {error.last_succeeded_id}"
                )
                raise

    def recompute_and_propagate(self, region_id: str) -> List[Region]:
        """Recompute a region whose people changed, then all of its ancestors.

        Returns:
            the recomputed regions, the region itself first

        Raises:
            RegionNotFoundError: If the region doesn't exist
            PartialPropagationError: If an ancestor disappeared part way up
        """
        region = self._get_region(region_id)
        with self.lock_manager.hold(self._lineage_ids(region)):
            updated = [self.aggregator.recompute(region_id)]
            propagation = self.propagator.propagate_upward(region_id)
            updated.extend(
                self.region_store.find_by_id(ancestor_id)
                for ancestor_id in propagation.updated_region_ids
            )
            return updated

    def eliminate(self, target_region_id: str, deadline: Optional[float] = None) -> EliminationResult:
        """Eliminate everyone in the region's subtree and recompute the hierarchy.

        Args:
            target_region_id: The region to eliminate
            deadline: Optional number of seconds the elimination may run for

        Raises:
            RegionNotFoundError: If the region doesn't exist
            RegionNotEligibleError: If the region is not under threat
            PartialPropagationError: If the elimination stopped part way, including
                EliminationTimeoutError when the deadline passed
        """
        target = self._get_region(target_region_id)
        engine = EliminationEngine(
            self.region_store, self.person_registry, self.aggregator, self.propagator
        )
        people, subtree = engine.collect(target)
        locked = {region.id: region for region in lineage_of(self.region_store, target)}
        locked.update((region.id, region) for region in subtree)
        for region_id in engine.outside_region_ids(people, subtree):
            outside = self.region_store.find_by_id(region_id)
            if outside is not None:
                locked.update(
                    (region.id, region) for region in lineage_of(self.region_store, outside)
                )
        # the same root-to-leaf order as recompute_all
        lock_ids = [
            region.id
            for region in sorted(locked.values(), key=lambda region: (region.kind.depth, region.id))
        ]
        with self.lock_manager.hold(lock_ids, timeout=deadline):
            try:
                return engine.eliminate(target_region_id, deadline=deadline)
            except PartialPropagationError as error:
                logger.warning(
                    f"elimination of {target_region_id} stopped part way in state "
                    f"{engine.state.value}; last consistent region is {error.last_succeeded_id}"
                )
                raise

    def recompute_all(self) -> List[Region]:
        """Recompute every stored region, districts first"""
        regions = self.region_store.find_all()
        lock_ids = [
            region.id
            for region in sorted(regions, key=lambda region: (region.kind.depth, region.id))
        ]
        with self.lock_manager.hold(lock_ids):
            updated = self.aggregator.recompute_all()
        logger.info(f"recomputed statistics for {len(updated)} regions")
        return updated
