"""
Elimination: every active person in a region's subtree is deactivated and the
statistics of the subtree and of the region's ancestors are recomputed.

The engine runs through these states, in order:

    IDLE -> ASSESSING -> COLLECTING -> DEACTIVATING
         -> RECOMPUTING_SUBTREE -> PROPAGATING_ANCESTORS -> DONE

The subtree is recomputed children first so that no region aggregates stale
numbers from a child, and only then are the ancestors above the target updated.
A person found through a coarser slot of the subtree may be counted in a region
outside of it; those regions and their ancestors are recomputed last.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from regionwatch.models.region import Region
from regionwatch.models.person import Person, SocialStatus
from regionwatch.core.regionstores import RegionStore, PersonRegistry
from regionwatch.core.aggregation import StatisticsAggregator
from regionwatch.core.cascade import CascadePropagator
from regionwatch.core.exceptions import (
    RegionNotFoundError,
    RegionNotEligibleError,
    EliminationTimeoutError,
    PartialPropagationError,
)
from regionwatch.core.regiontree import subtree_postorder
from regionwatch.core import threat
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch")


class EliminationState(str, Enum):
    """the steps of an elimination"""

    IDLE = "idle"
    ASSESSING = "assessing"
    COLLECTING = "collecting"
    DEACTIVATING = "deactivating"
    RECOMPUTING_SUBTREE = "recomputing_subtree"
    PROPAGATING_ANCESTORS = "propagating_ancestors"
    DONE = "done"


@dataclass
class EliminationResult:
    """what a successful elimination did"""

    target_region_id: str
    region: Optional[Region] = None
    eliminated_person_ids: List[str] = field(default_factory=list)
    affected_region_ids: List[str] = field(default_factory=list)
    propagated_region_ids: List[str] = field(default_factory=list)
    refreshed_region_ids: List[str] = field(default_factory=list)
    state: EliminationState = EliminationState.IDLE

    @property
    def eliminated_count(self) -> int:
        return len(self.eliminated_person_ids)


class EliminationEngine:
    """Runs one elimination at a time; see the module docstring for the steps"""

    def __init__(
        self,
        region_store: RegionStore,
        person_registry: PersonRegistry,
        aggregator: Optional[StatisticsAggregator] = None,
        propagator: Optional[CascadePropagator] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.region_store = region_store
        self.person_registry = person_registry
        self.aggregator = aggregator or StatisticsAggregator(region_store, person_registry)
        self.propagator = propagator or CascadePropagator(region_store, self.aggregator)
        self.clock = clock
        self.state = EliminationState.IDLE
        self._expires_at: Optional[float] = None
        self._last_succeeded_id: Optional[str] = None

    def _enter(self, state: EliminationState, result: EliminationResult) -> None:
        self._check_deadline()
        self.state = state
        result.state = state

    def _check_deadline(self) -> None:
        if self._expires_at is not None and self.clock() > self._expires_at:
            logger.warning(
                f"elimination ran past its deadline in state {self.state.value}, "
                f"last consistent region {self._last_succeeded_id}"
            )
            raise EliminationTimeoutError(self._last_succeeded_id, self.state.value)

    def collect(self, target: Region) -> Tuple[List[Person], List[Region]]:
        """
        every distinct active person in the target's subtree, and every region of the
        subtree with children listed before their parents.
        each region is asked for the people in its own slot so that people assigned
        directly to an intermediate region are found, and a person found at more than
        one level is kept once
        """
        affected_regions = subtree_postorder(self.region_store, target)
        people: Dict[str, Person] = {}
        for region in affected_regions:
            self._check_deadline()
            for person in self.person_registry.find_active_by_region_slot(region.id, region.kind):
                if person.id not in people:
                    people[person.id] = person
        return list(people.values()), affected_regions

    @staticmethod
    def outside_region_ids(people: List[Person], affected_regions: List[Region]) -> List[str]:
        """the regions outside the subtree in which some of the collected people are counted"""
        subtree_ids = {region.id for region in affected_regions}
        outside_ids = {person.effective_region_id for person in people} - subtree_ids
        outside_ids.discard(None)
        return sorted(outside_ids)

    def deactivate(self, person: Person) -> Person:
        """zero the person's rating and take them out of every aggregate"""
        person.social_rating = 0
        person.status = SocialStatus.LOW.value
        person.active = False
        return self.person_registry.save(person)

    def eliminate(self, target_region_id: str, deadline: Optional[float] = None) -> EliminationResult:
        """
        eliminate everyone in the subtree of target_region_id.

        Args:
            target_region_id: the region to eliminate
            deadline: optional number of seconds the elimination may take; writes
                committed before the deadline are kept

        Returns:
            EliminationResult

        Raises:
            RegionNotFoundError: if the target does not exist
            RegionNotEligibleError: if the target is not under threat; nothing is written
            EliminationTimeoutError: if the deadline passes part way through
            PartialPropagationError: if an ancestor disappears while propagating
        """
        self.state = EliminationState.IDLE
        self._expires_at = self.clock() + deadline if deadline is not None else None
        self._last_succeeded_id = None
        result = EliminationResult(target_region_id=target_region_id)

        self._enter(EliminationState.ASSESSING, result)
        target = self.region_store.find_by_id(target_region_id)
        if target is None:
            logger.info(f"elimination of {target_region_id} rejected: region not found")
            raise RegionNotFoundError(target_region_id)

        eligible = threat.should_eliminate(target)
        if not eligible and target.population_count > 0:
            logger.info(f"elimination of {target_region_id} rejected: region is not under threat")
            raise RegionNotEligibleError(target_region_id)

        self._enter(EliminationState.COLLECTING, result)
        people, affected_regions = self.collect(target)
        if not eligible and people:
            # the stored statistics say empty but people are still there
            logger.info(
                f"elimination of {target_region_id} rejected: stored statistics are stale, "
                f"{len(people)} active people remain"
            )
            raise RegionNotEligibleError(target_region_id)
        result.affected_region_ids = [region.id for region in affected_regions]
        logger.info(
            f"eliminating {len(people)} people across {len(affected_regions)} regions "
            f"under {target_region_id}"
        )

        self._enter(EliminationState.DEACTIVATING, result)
        for person in people:
            self._check_deadline()
            saved = self.deactivate(person)
            result.eliminated_person_ids.append(saved.id)

        self._enter(EliminationState.RECOMPUTING_SUBTREE, result)
        for region in affected_regions:
            self._check_deadline()
            try:
                result.region = self.aggregator.recompute(region.id)
            except RegionNotFoundError:
                logger.warning(
                    f"region {region.id} disappeared while recomputing the subtree of "
                    f"{target_region_id}"
                )
                raise PartialPropagationError(self._last_succeeded_id)
            self._last_succeeded_id = region.id

        self._enter(EliminationState.PROPAGATING_ANCESTORS, result)
        propagation = self.propagator.propagate_upward(target.id)
        result.propagated_region_ids = propagation.updated_region_ids
        if propagation.updated_region_ids:
            self._last_succeeded_id = propagation.updated_region_ids[-1]

        for region_id in self.outside_region_ids(people, affected_regions):
            self._check_deadline()
            try:
                self.aggregator.recompute(region_id)
            except RegionNotFoundError:
                logger.warning(
                    f"region {region_id} of an eliminated person no longer exists, skipping it"
                )
                continue
            self.propagator.propagate_upward(region_id)
            result.refreshed_region_ids.append(region_id)

        self.state = EliminationState.DONE
        result.state = EliminationState.DONE
        logger.info(
            f"elimination of {target_region_id} done: {result.eliminated_count} people, "
            f"{len(result.affected_region_ids)} regions recomputed, "
            f"{len(result.propagated_region_ids)} ancestors updated, "
            f"{len(result.refreshed_region_ids)} regions outside the subtree refreshed"
        )
        return result
