import pytest

from regionwatch.models.region import RegionType
from regionwatch.core.threat import assess, is_under_threat, should_eliminate
from regionwatch.tests.conftest import make_region


def district(population, rating, important):
    return make_region(
        "d",
        RegionType.DISTRICT,
        "c",
        population_count=population,
        average_social_rating=rating,
        important_persons_count=important,
    )


def test_rating_just_below_threshold_is_under_threat():
    assert assess(district(100, 38.999, 0)) is True


def test_rating_at_threshold_is_not_under_threat():
    assert assess(district(100, 39.0, 0)) is False


@pytest.mark.parametrize("rating", [0.0, 10.0, 38.999, 100.0])
def test_empty_region_is_never_under_threat(rating):
    assert assess(district(0, rating, 0)) is False


def test_important_ratio_boundary():
    # 2 / 100 is not below 0.02, 1 / 100 is
    assert assess(district(100, 20.0, 2)) is False
    assert assess(district(100, 20.0, 1)) is True


def test_ratio_uses_real_division():
    # integer division would turn 1 / 30 into 0
    assert assess(district(30, 20.0, 1)) is False


@pytest.mark.parametrize(
    "region_type", [RegionType.DISTRICT, RegionType.CITY, RegionType.FEDERAL_REGION]
)
def test_same_rule_at_every_level_below_country(region_type):
    assert is_under_threat(region_type, 100, 10.0, 0) is True


def test_country_is_never_under_threat():
    country = make_region(
        "ru", RegionType.COUNTRY, population_count=100, average_social_rating=1.0
    )
    assert assess(country) is False
    assert should_eliminate(country) is False


def test_should_eliminate_matches_assess():
    region = district(10, 20.0, 0)
    assert should_eliminate(region) == assess(region) is True
