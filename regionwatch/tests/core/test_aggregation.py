import pytest

from regionwatch.models.region import RegionType
from regionwatch.core.aggregation import (
    RegionStats,
    StatisticsAggregator,
    aggregate_region_stats,
    find_inconsistent_regions,
)
from regionwatch.core.exceptions import RegionNotFoundError
from regionwatch.core.regionstores import InMemoryRegionStore, InMemoryPersonRegistry
from regionwatch.tests.conftest import make_region, make_person, resident


@pytest.fixture
def aggregator(region_store, person_registry):
    return StatisticsAggregator(region_store, person_registry)


# ================================================================================
# aggregate_region_stats
# ================================================================================


def test_aggregate_weights_children_by_population():
    stats = aggregate_region_stats(
        [RegionStats(10, 20.0, 1), RegionStats(30, 60.0, 2)], []
    )
    assert stats.population_count == 40
    assert stats.average_social_rating == pytest.approx((10 * 20.0 + 30 * 60.0) / 40)
    assert stats.important_persons_count == 3


def test_aggregate_direct_people_count_as_children_of_one():
    governor = make_person("g", 90.0, federal_region="fr1")
    stats = aggregate_region_stats([RegionStats(3, 30.0, 0)], [governor])
    assert stats.population_count == 4
    assert stats.average_social_rating == pytest.approx((3 * 30.0 + 90.0) / 4)
    assert stats.important_persons_count == 1


def test_aggregate_skips_inactive_people():
    people = [make_person("a", 50.0), make_person("b", 99.0, active=False)]
    stats = aggregate_region_stats([], people)
    assert stats == RegionStats(1, 50.0, 0)


def test_aggregate_of_nothing_is_zero():
    assert aggregate_region_stats([RegionStats(0, 0.0, 0)], []) == RegionStats(0, 0.0, 0)


# ================================================================================
# StatisticsAggregator.recompute
# ================================================================================


def test_recompute_district(aggregator, person_registry, region_store):
    """three active people rated 20, 30 and 50, none of them important"""
    person_registry.save(resident("p1", 20.0, "d1"))
    person_registry.save(resident("p2", 30.0, "d1"))
    person_registry.save(resident("p3", 50.0, "d1"))

    region = aggregator.recompute("d1")

    assert region.population_count == 3
    assert region.average_social_rating == pytest.approx(33.333, abs=1e-3)
    assert region.important_persons_count == 0
    assert region.under_threat is True
    assert region_store.find_by_id("d1").population_count == 3


def test_recompute_district_without_people(aggregator):
    region = aggregator.recompute("d1")
    assert region.population_count == 0
    assert region.average_social_rating == 0
    assert region.important_persons_count == 0
    assert region.under_threat is False


def test_recompute_district_ignores_inactive_people(aggregator, person_registry):
    person_registry.save(resident("p1", 20.0, "d1"))
    person_registry.save(resident("p2", 80.0, "d1", active=False))

    region = aggregator.recompute("d1")

    assert region.population_count == 1
    assert region.average_social_rating == pytest.approx(20.0)


def test_recompute_city_with_an_empty_district():
    region_store = InMemoryRegionStore(
        [
            make_region("c1", RegionType.CITY, "fr1"),
            make_region(
                "d1", RegionType.DISTRICT, "c1", population_count=3, average_social_rating=33.33
            ),
            make_region("d2", RegionType.DISTRICT, "c1"),
        ]
    )
    aggregator = StatisticsAggregator(region_store, InMemoryPersonRegistry())

    region = aggregator.recompute("c1")

    assert region.population_count == 3
    assert region.average_social_rating == pytest.approx(33.33)


def test_recompute_sets_under_threat(aggregator, person_registry):
    for index in range(10):
        person_registry.save(resident(f"p{index}", 10.0, "d1"))

    assert aggregator.recompute("d1").under_threat is True


def test_recompute_includes_direct_officials_at_every_level(aggregator, person_registry):
    person_registry.save(resident("p1", 20.0, "d1"))
    person_registry.save(make_person("mayor", 70.0, city="c1", federal_region="fr1", country="ru"))
    person_registry.save(make_person("governor", 95.0, federal_region="fr1", country="ru"))
    person_registry.save(make_person("president", 100.0, country="ru"))

    for region_id in ["d1", "d2", "d3", "c1", "c2", "fr1"]:
        aggregator.recompute(region_id)
    country = aggregator.recompute("ru")

    assert country.population_count == 4
    assert country.average_social_rating == pytest.approx((20.0 + 70.0 + 95.0 + 100.0) / 4)
    assert country.important_persons_count == 3
    assert country.under_threat is False


def test_recompute_does_not_count_district_residents_as_city_officials(
    aggregator, person_registry
):
    person_registry.save(resident("p1", 20.0, "d1"))

    city = aggregator.recompute("c1")

    # the district has not been recomputed yet, so the city sees no one
    assert city.population_count == 0


def test_recompute_accepts_legacy_none_marker(aggregator, person_registry):
    person_registry.save(
        make_person("mayor", 80.0, district="none", city="c1", federal_region="fr1", country="ru")
    )
    assert aggregator.recompute("c1").population_count == 1


def test_recompute_childless_country_counts_everyone_in_it():
    region_store = InMemoryRegionStore([make_region("ru", RegionType.COUNTRY)])
    person_registry = InMemoryPersonRegistry(
        [
            make_person("a", 40.0, country="ru"),
            make_person("b", 60.0),
            make_person("c", 90.0, country="by"),
        ]
    )
    country = StatisticsAggregator(region_store, person_registry).recompute("ru")

    assert country.population_count == 2
    assert country.average_social_rating == pytest.approx(50.0)


def test_recompute_missing_region(aggregator, region_store):
    with pytest.raises(RegionNotFoundError) as excinfo:
        aggregator.recompute("nowhere")
    assert excinfo.value.error_code == "REGION_NOT_FOUND"
    assert region_store.find_by_id("nowhere") is None


def test_recompute_is_idempotent(aggregator, person_registry):
    person_registry.save(resident("p1", 33.0, "d1"))
    person_registry.save(resident("p2", 71.0, "d1"))

    first = aggregator.recompute("d1").to_json()
    second = aggregator.recompute("d1").to_json()

    assert first == second


def test_recompute_only_writes_derived_fields(aggregator, person_registry, region_store):
    person_registry.save(resident("p1", 33.0, "d1"))
    before = region_store.find_by_id("d1")

    after = aggregator.recompute("d1")

    assert (after.id, after.region_type, after.parent_id, after.name) == (
        before.id,
        before.region_type,
        before.parent_id,
        before.name,
    )


# ================================================================================
# recompute_all
# ================================================================================


def test_recompute_all_leaves_every_parent_consistent(aggregator, person_registry, region_store):
    ratings = {"d1": [10.0, 20.0, 95.0], "d2": [45.0], "d3": [5.0, 75.0]}
    for district, district_ratings in ratings.items():
        for index, rating in enumerate(district_ratings):
            person_registry.save(resident(f"{district}-{index}", rating, district))

    updated = aggregator.recompute_all()

    assert len(updated) == 7
    for region in region_store.find_all():
        if region.kind == RegionType.DISTRICT:
            continue
        children = region_store.find_children(region.id)
        assert region.population_count == sum(child.population_count for child in children)
        assert region.important_persons_count == sum(
            child.important_persons_count for child in children
        )
        if region.population_count > 0:
            weighted = sum(
                child.average_social_rating * child.population_count for child in children
            )
            assert region.average_social_rating == pytest.approx(
                weighted / region.population_count
            )

    assert region_store.find_by_id("ru").population_count == 6
    assert find_inconsistent_regions(region_store, person_registry) == []


def test_find_inconsistent_regions(aggregator, person_registry, region_store):
    aggregator.recompute_all()
    person_registry.save(resident("late", 50.0, "d3"))

    assert find_inconsistent_regions(region_store, person_registry) == ["d3"]


def test_recompute_counts_important_people_by_rating(aggregator, person_registry):
    """a status left at its default does not hide a high rating"""
    person = resident("p1", 95.0, "d1")
    person.status = "low"
    person_registry.save(person)

    region = aggregator.recompute("d1")

    assert region.important_persons_count == 1
    assert person_registry.find_by_id("p1").status == "vip"


def test_recompute_district_with_an_important_person(aggregator, person_registry):
    person_registry.save(resident("p1", 20.0, "d1"))
    person_registry.save(resident("p2", 30.0, "d1"))
    person_registry.save(resident("p3", 75.0, "d1"))

    region = aggregator.recompute("d1")

    assert region.important_persons_count == 1
    assert region.average_social_rating == pytest.approx(125.0 / 3)
    assert region.under_threat is False
