"""functions which change a person and bring the statistics of their regions up to date"""

from typing import Dict, List, Optional

from django.utils import timezone

from regionwatch.models.person import Person, SocialStatus, status_for_rating
from regionwatch.models.region import RegionType
from regionwatch.core.exceptions import (
    PersonNotFoundError,
    PersonInactiveError,
    RegionNotFoundError,
    PartialPropagationError,
)
from regionwatch.core.regiontree import normalize_region_id, ancestors_of
from regionwatch.services.region_stats_service import RegionStatsService
from regionwatch.utils.constants import (
    MIN_SOCIAL_RATING,
    MAX_SOCIAL_RATING,
    PEER_RATING_RATIO_FACTOR,
    PEER_RATING_MAX_RATIO_MULTIPLIER,
)
from regionwatch.utils.custom_logger import CustomLogger

logger = CustomLogger("regionwatch")

STATUS_WEIGHTS = {
    SocialStatus.LOW: 1,
    SocialStatus.REGULAR: 2,
    SocialStatus.IMPORTANT: 3,
    SocialStatus.VIP: 4,
}


def _get_active_person(service: RegionStatsService, person_id: str) -> Person:
    person = service.person_registry.find_by_id(person_id)
    if person is None:
        raise PersonNotFoundError(person_id)
    if not person.active:
        raise PersonInactiveError(person_id)
    return person


def _check_rating(rating: float) -> None:
    if not MIN_SOCIAL_RATING <= rating <= MAX_SOCIAL_RATING:
        raise ValueError(
            f"social rating must be between {MIN_SOCIAL_RATING} and {MAX_SOCIAL_RATING}"
        )


def _resolve_slots(
    service: RegionStatsService,
    district_id: Optional[str],
    city_id: Optional[str],
    federal_region_id: Optional[str],
    country_id: Optional[str],
) -> Dict[RegionType, Optional[str]]:
    """
    validate a position in the hierarchy and fill in the coarser slots left empty.
    every slot given must name an existing region of the right type, and all of them
    must lie on the lineage of the finest one

    Raises:
        RegionNotFoundError: if a slot names a region which does not exist
        ValueError: if a slot names a region of the wrong type, or the slots do not
            form one lineage
    """
    slots = {
        RegionType.DISTRICT: normalize_region_id(district_id),
        RegionType.CITY: normalize_region_id(city_id),
        RegionType.FEDERAL_REGION: normalize_region_id(federal_region_id),
        RegionType.COUNTRY: normalize_region_id(country_id),
    }
    finest = None
    for region_type, region_id in slots.items():
        if region_id is None:
            continue
        region = service.region_store.find_by_id(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        if region.kind != region_type:
            raise ValueError(f"region {region_id} is a {region.region_type}, not a {region_type.value}")
        if finest is None:
            finest = region

    if finest is None:
        return slots

    lineage = {ancestor.kind: ancestor.id for ancestor in ancestors_of(service.region_store, finest)}
    for region_type in RegionType:
        if region_type.depth >= finest.kind.depth:
            continue
        expected = lineage.get(region_type)
        if slots[region_type] is None:
            slots[region_type] = expected
        elif slots[region_type] != expected:
            raise ValueError(f"region {finest.id} does not lie in {slots[region_type]}")
    return slots


def _refresh_regions_of(service: RegionStatsService, region_id: Optional[str]) -> None:
    """recompute the region a person was counted in, and its ancestors"""
    if region_id is None:
        return
    try:
        service.recompute_and_propagate(region_id)
    except RegionNotFoundError:
        logger.warning(f"person was assigned to region {region_id} which no longer exists")
    except PartialPropagationError as error:
        logger.warning(
            f"statistics above region {error.last_succeeded_id} are stale after a person update"
        )


def create_person(
    full_name: str,
    social_rating: float,
    district_id: Optional[str] = None,
    city_id: Optional[str] = None,
    federal_region_id: Optional[str] = None,
    country_id: Optional[str] = None,
    person_id: Optional[str] = None,
    service: RegionStatsService = None,
) -> Person:
    """
    add a person and count them in the region they are assigned to.
    the coarser slots are filled in from the finest region given
    """
    _check_rating(social_rating)
    service = service or RegionStatsService()
    slots = _resolve_slots(service, district_id, city_id, federal_region_id, country_id)

    person = Person(full_name=full_name, social_rating=social_rating, active=True)
    if person_id is not None:
        person.id = person_id
    for region_type, region_id in slots.items():
        setattr(person, region_type.person_slot, region_id)
    person.last_location_update = timezone.now()
    person = service.person_registry.save(person)
    logger.info(f"created person {person.id} in {person.effective_region_id}")

    _refresh_regions_of(service, person.effective_region_id)
    return person


def update_social_rating(
    person_id: str, new_rating: float, service: RegionStatsService = None
) -> Person:
    """set a person's rating and status, then update the regions they are counted in"""
    _check_rating(new_rating)
    service = service or RegionStatsService()
    person = _get_active_person(service, person_id)

    person.social_rating = new_rating
    person.status = status_for_rating(new_rating).value
    person = service.person_registry.save(person)
    logger.info(f"person {person.id} rating set to {new_rating} ({person.status})")

    _refresh_regions_of(service, person.effective_region_id)
    return person


def update_person_location(
    person_id: str,
    district_id: Optional[str] = None,
    city_id: Optional[str] = None,
    federal_region_id: Optional[str] = None,
    country_id: Optional[str] = None,
    service: RegionStatsService = None,
) -> Person:
    """
    move a person to a new position in the hierarchy. "none" is accepted for any
    slot the person is not assigned at, and coarser slots left empty are filled in.
    the region the person was counted in is recomputed before the one they now
    count towards
    """
    service = service or RegionStatsService()
    person = _get_active_person(service, person_id)
    new_slots = _resolve_slots(service, district_id, city_id, federal_region_id, country_id)

    old_region_id = person.effective_region_id
    for region_type, region_id in new_slots.items():
        setattr(person, region_type.person_slot, region_id)
    person.last_location_update = timezone.now()
    person = service.person_registry.save(person)

    new_region_id = person.effective_region_id
    if old_region_id != new_region_id:
        logger.info(f"person {person.id} moved from {old_region_id} to {new_region_id}")
        _refresh_regions_of(service, old_region_id)
    _refresh_regions_of(service, new_region_id)
    return person


def rate_person(
    rater_id: str, target_id: str, rating_change: float, service: RegionStatsService = None
) -> Person:
    """
    one person likes (rating_change > 0) or dislikes (rating_change <= 0) another.
    the impact grows with the rater's status relative to the target's, and with the
    rater's rating relative to the target's, capped at PEER_RATING_MAX_RATIO_MULTIPLIER.
    the target's rating stays within [0, 100]
    """
    service = service or RegionStatsService()
    rater = _get_active_person(service, rater_id)
    target = _get_active_person(service, target_id)

    direction = 1.0 if rating_change > 0 else -1.0
    status_multiplier = STATUS_WEIGHTS[status_for_rating(rater.social_rating)] / max(
        1, STATUS_WEIGHTS[status_for_rating(target.social_rating)]
    )
    rating_ratio = max(0.0, rater.social_rating) / max(1.0, target.social_rating)
    ratio_multiplier = min(rating_ratio * PEER_RATING_RATIO_FACTOR, PEER_RATING_MAX_RATIO_MULTIPLIER)
    impact = direction * status_multiplier * ratio_multiplier

    new_rating = max(MIN_SOCIAL_RATING, min(MAX_SOCIAL_RATING, target.social_rating + impact))
    logger.info(
        f"person {rater.id} rated {target.id}: impact {impact:.3f}, "
        f"rating {target.social_rating:.3f} -> {new_rating:.3f}"
    )

    target.social_rating = new_rating
    target.status = status_for_rating(new_rating).value
    target = service.person_registry.save(target)

    _refresh_regions_of(service, target.effective_region_id)
    return target


def find_people_in_region(region_id: str, service: RegionStatsService = None) -> List[Person]:
    """every active person assigned to the region or anywhere below it"""
    service = service or RegionStatsService()
    region = service.region_store.find_by_id(region_id)
    if region is None:
        raise RegionNotFoundError(region_id)
    people = service.person_registry.find_active_by_region_slot(region.id, region.kind)
    return sorted(people, key=lambda person: person.id)


def find_important_people_in_region(
    region_id: str, service: RegionStatsService = None
) -> List[Person]:
    """the important and vip people in the region or anywhere below it"""
    return [
        person for person in find_people_in_region(region_id, service) if person.is_important
    ]


def find_people_below_rating(threshold: float, service: RegionStatsService = None) -> List[Person]:
    """every active person rated strictly below the threshold"""
    service = service or RegionStatsService()
    return sorted(
        (
            person
            for person in service.person_registry.find_all_active()
            if person.social_rating < threshold
        ),
        key=lambda person: person.id,
    )
