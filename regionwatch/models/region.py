"""Region model for the district -> city -> federal region -> country hierarchy"""

from enum import Enum
from django.db import models


class RegionType(str, Enum):
    """the four levels of the region hierarchy, leaf first"""

    DISTRICT = "district"
    CITY = "city"
    FEDERAL_REGION = "federal_region"
    COUNTRY = "country"

    @classmethod
    def choices(cls):
        """django model definition needs an iterable for `choices`"""
        return [(key.value, key.name) for key in cls]

    @property
    def person_slot(self) -> str:
        """name of the Person field which assigns a person to a region of this type"""
        return f"{self.value}_id"

    @property
    def depth(self) -> int:
        """0 for a country, 3 for a district"""
        return REGION_TYPE_DEPTH[self]


REGION_TYPE_DEPTH = {
    RegionType.COUNTRY: 0,
    RegionType.FEDERAL_REGION: 1,
    RegionType.CITY: 2,
    RegionType.DISTRICT: 3,
}


class Region(models.Model):
    """A node in the region hierarchy along with its aggregate statistics"""

    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255, default="")
    region_type = models.CharField(max_length=20, choices=RegionType.choices())
    parent = models.ForeignKey(
        "self", on_delete=models.PROTECT, null=True, blank=True, related_name="children"
    )

    # derived from the people in the region; written only by the aggregator
    population_count = models.PositiveIntegerField(default=0)
    average_social_rating = models.FloatField(default=0.0)
    important_persons_count = models.PositiveIntegerField(default=0)
    under_threat = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "regionwatch_region"
        indexes = [
            models.Index(fields=["region_type"], name="region_type_idx"),
            models.Index(fields=["parent"], name="region_parent_idx"),
        ]

    def __str__(self) -> str:
        return f"Region[{self.region_type}|{self.id}|{self.name}]"

    @property
    def kind(self) -> RegionType:
        """the region type as an enum member"""
        return RegionType(self.region_type)

    @property
    def is_leaf(self) -> bool:
        """districts are the only leaves"""
        return self.kind == RegionType.DISTRICT

    def to_json(self) -> dict:
        """JSON representation"""
        return {
            "id": self.id,
            "name": self.name,
            "region_type": self.region_type,
            "parent_id": self.parent_id,
            "population_count": self.population_count,
            "average_social_rating": self.average_social_rating,
            "important_persons_count": self.important_persons_count,
            "under_threat": self.under_threat,
        }
