"""
Recomputes a region's population, average social rating, important persons count
and threat flag from its child regions and from the people assigned directly to it.

A region's rating is the population-weighted mean of its children's ratings.
People assigned directly to the region (every person in a district; officials pinned
at a city, federal region or country) are folded in as children with a population of
one and their own rating.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from regionwatch.models.region import Region, RegionType
from regionwatch.models.person import Person
from regionwatch.core.regionstores import RegionStore, PersonRegistry
from regionwatch.core.exceptions import RegionNotFoundError
from regionwatch.core import threat
from regionwatch.core.regiontree import normalize_region_id
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch")


@dataclass(frozen=True)
class RegionStats:
    """the derived statistics of a region"""

    population_count: int = 0
    average_social_rating: float = 0.0
    important_persons_count: int = 0

    @classmethod
    def of(cls, region: Region) -> "RegionStats":
        """the statistics currently stored on a region"""
        return cls(
            population_count=region.population_count,
            average_social_rating=region.average_social_rating,
            important_persons_count=region.important_persons_count,
        )


def aggregate_region_stats(
    children: Iterable[RegionStats], direct_people: Iterable[Person]
) -> RegionStats:
    """
    combine the children's statistics and the directly assigned people into the
    statistics of their parent. inactive people are skipped
    """
    population = 0
    weighted_rating_sum = 0.0
    important = 0

    for child in children:
        population += child.population_count
        weighted_rating_sum += child.average_social_rating * child.population_count
        important += child.important_persons_count

    for person in direct_people:
        if not person.active:
            continue
        population += 1
        weighted_rating_sum += person.social_rating
        if person.is_important:
            important += 1

    if population <= 0:
        return RegionStats()

    return RegionStats(
        population_count=population,
        average_social_rating=weighted_rating_sum / population,
        important_persons_count=important,
    )


class StatisticsAggregator:
    """Recomputes and stores the statistics of one region at a time"""

    def __init__(self, region_store: RegionStore, person_registry: PersonRegistry):
        self.region_store = region_store
        self.person_registry = person_registry

    def direct_people(self, region: Region, has_children: bool = True) -> List[Person]:
        """the active people whose finest-grained assignment is this region"""
        if region.kind == RegionType.DISTRICT:
            return self.person_registry.find_active_by_region_slot(region.id, RegionType.DISTRICT)

        if region.kind == RegionType.COUNTRY and not has_children:
            # a country without any regions below it counts everyone who lives in it
            # and everyone who has not been placed anywhere
            return [
                person
                for person in self.person_registry.find_all_active()
                if person.country_id == region.id or person.effective_region_id is None
            ]

        return [
            person
            for person in self.person_registry.find_active_by_region_slot(region.id, region.kind)
            if normalize_region_id(person.effective_region_id) == region.id
        ]

    def compute(self, region: Region) -> RegionStats:
        """the statistics the region should have, from the current state of the stores"""
        if region.kind == RegionType.DISTRICT:
            children = []
        else:
            children = self.region_store.find_children(region.id)
        direct_people = self.direct_people(region, has_children=len(children) > 0)
        return aggregate_region_stats(
            [RegionStats.of(child) for child in children], direct_people
        )

    def recompute(self, region_id: str) -> Region:
        """
        recompute the region's statistics and threat flag and save it.

        Raises:
            RegionNotFoundError: if the region does not exist; nothing is written
        """
        region = self.region_store.find_by_id(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)

        stats = self.compute(region)
        region.population_count = stats.population_count
        region.average_social_rating = stats.average_social_rating
        region.important_persons_count = stats.important_persons_count
        region.under_threat = threat.assess(region)

        logger.debug(
            "recomputed %s: population=%s rating=%.3f important=%s under_threat=%s",
            region.id,
            region.population_count,
            region.average_social_rating,
            region.important_persons_count,
            region.under_threat,
        )
        return self.region_store.save(region)

    def recompute_all(self) -> List[Region]:
        """
        recompute every stored region, districts first, so that a single pass leaves
        every parent consistent with its children
        """
        regions = sorted(
            self.region_store.find_all(), key=lambda region: (-region.kind.depth, region.id)
        )
        updated = []
        for region in regions:
            try:
                updated.append(self.recompute(region.id))
            except RegionNotFoundError:
                # removed after we listed it
                logger.warning(f"region {region.id} vanished during a full recompute")
        return updated


def stats_differ(before: RegionStats, after: RegionStats, tolerance: float = 1e-9) -> bool:
    """whether two sets of statistics differ beyond floating point noise"""
    return (
        before.population_count != after.population_count
        or before.important_persons_count != after.important_persons_count
        or abs(before.average_social_rating - after.average_social_rating) > tolerance
    )


def find_inconsistent_regions(
    region_store: RegionStore, person_registry: PersonRegistry, region_ids: Optional[list] = None
) -> List[str]:
    """ids of the regions whose stored statistics no longer match what a recompute would give"""
    aggregator = StatisticsAggregator(region_store, person_registry)
    regions = (
        [region_store.find_by_id(region_id) for region_id in region_ids]
        if region_ids is not None
        else region_store.find_all()
    )
    return [
        region.id
        for region in regions
        if region is not None
        and stats_differ(RegionStats.of(region), aggregator.compute(region))
    ]
