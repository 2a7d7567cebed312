"""the threat predicate, evaluated the same way at every level of the hierarchy"""

from regionwatch.models.region import Region, RegionType
from regionwatch.utils.constants import THREAT_RATING_THRESHOLD, THREAT_IMPORTANT_RATIO_THRESHOLD


def is_under_threat(
    region_type: RegionType,
    population_count: int,
    average_social_rating: float,
    important_persons_count: int,
) -> bool:
    """
    a region is under threat when its average rating is low and it has
    almost no important people. a country is never under threat and
    an empty region is never under threat
    """
    if region_type == RegionType.COUNTRY:
        return False
    if population_count <= 0:
        return False
    return (
        average_social_rating < THREAT_RATING_THRESHOLD
        and important_persons_count / population_count < THREAT_IMPORTANT_RATIO_THRESHOLD
    )


def assess(region: Region) -> bool:
    """whether the region's current statistics put it under threat; does no i/o"""
    return is_under_threat(
        region.kind,
        region.population_count,
        region.average_social_rating,
        region.important_persons_count,
    )


def should_eliminate(region: Region) -> bool:
    """eligibility for elimination uses the threat predicate on the stored statistics"""
    return assess(region)
