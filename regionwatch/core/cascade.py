"""propagates a change in one region's statistics up to the root of the hierarchy"""

from dataclasses import dataclass, field
from typing import List

from regionwatch.models.region import RegionType
from regionwatch.core.regionstores import RegionStore
from regionwatch.core.aggregation import StatisticsAggregator
from regionwatch.core.exceptions import RegionNotFoundError, PartialPropagationError
from regionwatch.core.regiontree import parent_id_of
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch")


@dataclass
class PropagationResult:
    """the ancestors recomputed by a propagation, nearest first"""

    start_region_id: str
    updated_region_ids: List[str] = field(default_factory=list)


class CascadePropagator:
    """
    Recomputes each ancestor of a region in turn, nearest first.
    A parent is only recomputed once its child has been saved
    """

    def __init__(self, region_store: RegionStore, aggregator: StatisticsAggregator):
        self.region_store = region_store
        self.aggregator = aggregator

    def propagate_upward(self, region_id: str) -> PropagationResult:
        """
        recompute every ancestor of the region, up to and including its country.
        the region itself is not recomputed

        Raises:
            RegionNotFoundError: if the starting region does not exist
            PartialPropagationError: if an ancestor disappeared part way up; the
                ancestors below it stay updated
        """
        current = self.region_store.find_by_id(region_id)
        if current is None:
            raise RegionNotFoundError(region_id)

        result = PropagationResult(start_region_id=region_id)
        last_succeeded_id = current.id
        seen = {current.id}

        while current.kind != RegionType.COUNTRY:
            parent_id = parent_id_of(current)
            if parent_id is None or parent_id in seen:
                break
            try:
                current = self.aggregator.recompute(parent_id)
            except RegionNotFoundError:
                logger.warning(
                    f"propagation from {region_id} stopped: parent {parent_id} not found, "
                    f"last consistent region is {last_succeeded_id}"
                )
                raise PartialPropagationError(last_succeeded_id)
            seen.add(current.id)
            last_succeeded_id = current.id
            result.updated_region_ids.append(current.id)

        return result
