import pytest

from regionwatch.models.region import Region, RegionType
from regionwatch.models.person import Person
from regionwatch.core.regionstores import (
    DjangoRegionStore,
    DjangoPersonRegistry,
    InMemoryRegionStore,
    InMemoryPersonRegistry,
)
from regionwatch.tests.conftest import make_region, make_person, resident


@pytest.fixture
def db_tree(tree):
    """the `tree` fixture saved to the db, parents first"""
    for region in tree:
        region.save()
    return tree


# ================================================================================
# django stores
# ================================================================================


@pytest.mark.django_db
def test_django_region_store_find_by_id(db_tree):
    store = DjangoRegionStore()
    region = store.find_by_id("c1")
    assert region.kind == RegionType.CITY
    assert region.parent_id == "fr1"
    assert store.find_by_id("nowhere") is None


@pytest.mark.django_db
def test_django_region_store_find_children(db_tree):
    store = DjangoRegionStore()
    assert [region.id for region in store.find_children("c1")] == ["d1", "d2"]
    assert store.find_children("d1") == []
    assert len(store.find_all()) == 7


@pytest.mark.django_db
def test_django_region_store_save(db_tree):
    store = DjangoRegionStore()
    region = store.find_by_id("d1")
    region.population_count = 12
    region.average_social_rating = 41.5
    store.save(region)

    stored = Region.objects.get(id="d1")
    assert stored.population_count == 12
    assert stored.average_social_rating == 41.5
    assert stored.updated_at is not None


@pytest.mark.django_db
def test_django_person_registry_slots(db_tree):
    registry = DjangoPersonRegistry()
    registry.save(resident("p1", 50.0, "d1"))
    registry.save(resident("p2", 60.0, "d2"))
    registry.save(resident("p3", 70.0, "d1", active=False))
    registry.save(make_person("mayor", 80.0, city="c1", federal_region="fr1", country="ru"))

    assert [person.id for person in registry.find_active_by_region_slot("d1", RegionType.DISTRICT)] == [
        "p1"
    ]
    assert [person.id for person in registry.find_active_by_region_slot("c1", RegionType.CITY)] == [
        "mayor",
        "p1",
        "p2",
    ]
    assert len(registry.find_active_by_region_slot("ru", RegionType.COUNTRY)) == 3
    assert [person.id for person in registry.find_all_active()] == ["mayor", "p1", "p2"]
    assert registry.find_by_id("p3").active is False
    assert registry.find_by_id("nobody") is None


@pytest.mark.django_db
def test_django_person_registry_save(db_tree):
    registry = DjangoPersonRegistry()
    person = registry.save(resident("p1", 50.0, "d1"))
    person.social_rating = 10.0
    registry.save(person)

    assert Person.objects.get(id="p1").social_rating == 10.0


@pytest.mark.django_db
def test_django_person_save_derives_status_from_rating(db_tree):
    Person.objects.create(id="p1", full_name="P1", social_rating=95.0, district_id="d1")

    assert Person.objects.get(id="p1").status == "vip"
    assert Person.objects.get(id="p1").is_important is True


# ================================================================================
# in-memory stores
# ================================================================================


def test_in_memory_region_store_hands_out_copies(region_store):
    region = region_store.find_by_id("d1")
    region.population_count = 99

    assert region_store.find_by_id("d1").population_count == 0


def test_in_memory_region_store_keeps_children_index(region_store):
    assert [region.id for region in region_store.find_children("c1")] == ["d1", "d2"]

    moved = region_store.find_by_id("d2")
    moved.parent_id = "c2"
    region_store.save(moved)

    assert [region.id for region in region_store.find_children("c1")] == ["d1"]
    assert [region.id for region in region_store.find_children("c2")] == ["d3", "d2"]


def test_in_memory_region_store_save_twice_does_not_duplicate_children(region_store):
    region_store.save(region_store.find_by_id("d1"))
    assert [region.id for region in region_store.find_children("c1")] == ["d1", "d2"]


def test_in_memory_region_store_remove(region_store):
    region_store.remove("d2")
    assert region_store.find_by_id("d2") is None
    assert [region.id for region in region_store.find_children("c1")] == ["d1"]


def test_in_memory_person_registry():
    registry = InMemoryPersonRegistry(
        [resident("p1", 50.0, "d1"), resident("p2", 60.0, "d1", active=False)]
    )
    found = registry.find_active_by_region_slot("d1", RegionType.DISTRICT)
    assert [person.id for person in found] == ["p1"]

    found[0].social_rating = 0
    assert registry.find_by_id("p1").social_rating == 50.0
    assert [person.id for person in registry.find_all_active()] == ["p1"]


def test_in_memory_region_store_accepts_regions_in_any_order():
    store = InMemoryRegionStore(
        [make_region("d1", RegionType.DISTRICT, "c1"), make_region("c1", RegionType.CITY, "fr1")]
    )
    assert [region.id for region in store.find_children("c1")] == ["d1"]
