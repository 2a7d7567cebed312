"""fixtures shared by the regionwatch tests"""

from typing import Optional

import pytest

from regionwatch.models.region import Region, RegionType
from regionwatch.models.person import Person, status_for_rating
from regionwatch.core.regionstores import InMemoryRegionStore, InMemoryPersonRegistry
from regionwatch.services.region_stats_service import RegionStatsService
from regionwatch.utils.regionlocks import RegionLockManager


def make_region(
    region_id: str,
    region_type: RegionType,
    parent_id: Optional[str] = None,
    population_count: int = 0,
    average_social_rating: float = 0.0,
    important_persons_count: int = 0,
) -> Region:
    """an unsaved Region"""
    return Region(
        id=region_id,
        name=region_id.upper(),
        region_type=region_type.value,
        parent_id=parent_id,
        population_count=population_count,
        average_social_rating=average_social_rating,
        important_persons_count=important_persons_count,
    )


def make_person(
    person_id: str,
    rating: float,
    district: Optional[str] = None,
    city: Optional[str] = None,
    federal_region: Optional[str] = None,
    country: Optional[str] = None,
    active: bool = True,
) -> Person:
    """an unsaved Person"""
    return Person(
        id=person_id,
        full_name=f"Person {person_id}",
        social_rating=rating,
        status=status_for_rating(rating).value,
        active=active,
        district_id=district,
        city_id=city,
        federal_region_id=federal_region,
        country_id=country,
    )


def resident(person_id: str, rating: float, district: str, **kwargs) -> Person:
    """a person living in one of the districts of the `tree` fixture"""
    city = {"d1": "c1", "d2": "c1", "d3": "c2"}[district]
    return make_person(
        person_id, rating, district=district, city=city, federal_region="fr1", country="ru", **kwargs
    )


@pytest.fixture
def tree():
    """
    ru (country)
      fr1 (federal region)
        c1 (city): d1, d2 (districts)
        c2 (city): d3 (district)
    """
    return [
        make_region("ru", RegionType.COUNTRY),
        make_region("fr1", RegionType.FEDERAL_REGION, "ru"),
        make_region("c1", RegionType.CITY, "fr1"),
        make_region("c2", RegionType.CITY, "fr1"),
        make_region("d1", RegionType.DISTRICT, "c1"),
        make_region("d2", RegionType.DISTRICT, "c1"),
        make_region("d3", RegionType.DISTRICT, "c2"),
    ]


@pytest.fixture
def region_store(tree):
    """the `tree` fixture in an in-memory store"""
    return InMemoryRegionStore(tree)


@pytest.fixture
def person_registry():
    """an empty in-memory person registry"""
    return InMemoryPersonRegistry()


@pytest.fixture
def service(region_store, person_registry):
    """a RegionStatsService over the in-memory stores, without locks"""
    return RegionStatsService(
        region_store=region_store,
        person_registry=person_registry,
        lock_manager=RegionLockManager(enabled=False),
    )
