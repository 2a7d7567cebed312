"""Person model; people are counted in the aggregates of the regions they are assigned to"""

import uuid
from enum import Enum
from typing import Optional
from django.db import models

from regionwatch.models.region import Region, RegionType
from regionwatch.utils.constants import (
    NO_REGION,
    VIP_RATING_THRESHOLD,
    IMPORTANT_RATING_THRESHOLD,
    REGULAR_RATING_THRESHOLD,
)


class SocialStatus(str, Enum):
    """status of a person, derived from their social rating"""

    LOW = "low"
    REGULAR = "regular"
    IMPORTANT = "important"
    VIP = "vip"

    @classmethod
    def choices(cls):
        """django model definition needs an iterable for `choices`"""
        return [(key.value, key.name) for key in cls]


def status_for_rating(rating: float) -> SocialStatus:
    """the social status which goes with a rating"""
    if rating >= VIP_RATING_THRESHOLD:
        return SocialStatus.VIP
    if rating >= IMPORTANT_RATING_THRESHOLD:
        return SocialStatus.IMPORTANT
    if rating >= REGULAR_RATING_THRESHOLD:
        return SocialStatus.REGULAR
    return SocialStatus.LOW


def generate_person_id() -> str:
    """opaque id for a new person"""
    return uuid.uuid4().hex


class Person(models.Model):
    """
    A person and their position in the region hierarchy.
    Normally a person is assigned to a district (and carries the ids of the district's
    ancestors as well); officials may be pinned at a city, federal region or country
    with the finer-grained slots left empty
    """

    id = models.CharField(primary_key=True, max_length=64, default=generate_person_id)
    full_name = models.CharField(max_length=255, default="")
    social_rating = models.FloatField(default=0.0)
    status = models.CharField(
        max_length=20, choices=SocialStatus.choices(), default=SocialStatus.LOW.value
    )
    active = models.BooleanField(default=True)

    district = models.ForeignKey(
        Region, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    city = models.ForeignKey(
        Region, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    federal_region = models.ForeignKey(
        Region, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    country = models.ForeignKey(
        Region, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    last_location_update = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "regionwatch_person"
        indexes = [
            models.Index(fields=["district", "active"], name="person_district_active_idx"),
            models.Index(fields=["city", "active"], name="person_city_active_idx"),
            models.Index(fields=["federal_region", "active"], name="person_fedregion_active_idx"),
            models.Index(fields=["country", "active"], name="person_country_active_idx"),
        ]

    def __str__(self) -> str:
        return f"Person[{self.id}|{self.full_name}|{self.status}]"

    def save(self, *args, **kwargs):
        self.refresh_status()
        super().save(*args, **kwargs)

    def refresh_status(self) -> None:
        """the status always follows the rating"""
        self.status = status_for_rating(self.social_rating).value

    @property
    def is_important(self) -> bool:
        """important and vip people count towards a region's important persons"""
        return status_for_rating(self.social_rating) in (SocialStatus.IMPORTANT, SocialStatus.VIP)

    @property
    def effective_region_id(self) -> Optional[str]:
        """the finest-grained region this person is assigned to"""
        for region_type in RegionType:
            slot_value = getattr(self, region_type.person_slot)
            if slot_value and slot_value != NO_REGION:
                return slot_value
        return None

    def to_json(self) -> dict:
        """JSON representation"""
        return {
            "id": self.id,
            "full_name": self.full_name,
            "social_rating": self.social_rating,
            "status": self.status,
            "active": self.active,
            "district_id": self.district_id,
            "city_id": self.city_id,
            "federal_region_id": self.federal_region_id,
            "country_id": self.country_id,
        }
