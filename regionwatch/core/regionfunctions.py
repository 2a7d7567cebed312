"""read-only queries over the region hierarchy"""

from typing import List, Optional

from regionwatch.models.region import Region, RegionType
from regionwatch.core.regionstores import RegionStore, DjangoRegionStore
from regionwatch.core.exceptions import RegionNotFoundError
from regionwatch.core.regiontree import lineage_of
from regionwatch.utils.constants import THREAT_RATING_THRESHOLD


def get_region(region_id: str) -> Region:
    """fetch a region or raise RegionNotFoundError"""
    region = Region.objects.filter(id=region_id).first()
    if region is None:
        raise RegionNotFoundError(region_id)
    return region


def find_sub_regions(parent_id: str) -> List[Region]:
    """the direct children of a region"""
    return list(Region.objects.filter(parent_id=parent_id).order_by("id"))


def find_regions_by_type(region_type: RegionType) -> List[Region]:
    """every region at one level of the hierarchy"""
    return list(Region.objects.filter(region_type=region_type.value).order_by("id"))


def find_regions_under_threat(region_type: Optional[RegionType] = None) -> List[Region]:
    """regions flagged by the last recompute, optionally at one level only"""
    query = Region.objects.filter(under_threat=True)
    if region_type is not None:
        query = query.filter(region_type=region_type.value)
    return list(query.order_by("id"))


def find_low_rated_regions_without_important_persons(
    threshold: float = THREAT_RATING_THRESHOLD,
) -> List[Region]:
    """populated regions rated below the threshold which have no important people at all"""
    return list(
        Region.objects.filter(
            average_social_rating__lt=threshold,
            important_persons_count=0,
            population_count__gt=0,
        ).order_by("id")
    )


def get_region_lineage(region_id: str, region_store: RegionStore = None) -> List[str]:
    """ids from the root down to the region"""
    region_store = region_store or DjangoRegionStore()
    region = region_store.find_by_id(region_id)
    if region is None:
        raise RegionNotFoundError(region_id)
    return [ancestor.id for ancestor in lineage_of(region_store, region)]
