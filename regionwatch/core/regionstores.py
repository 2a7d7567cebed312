"""
Storage interfaces used by the region statistics engine.
The engine only reads and writes regions and people through these classes and
never holds on to a region or person between calls.
"""

import copy
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from regionwatch.models.region import Region, RegionType
from regionwatch.models.person import Person


class RegionStore(ABC):
    """Where the region hierarchy lives"""

    @abstractmethod
    def find_by_id(self, region_id: str) -> Optional[Region]:
        """the region with this id, or None"""

    @abstractmethod
    def find_children(self, parent_id: str) -> List[Region]:
        """every direct child of the region, without duplicates"""

    @abstractmethod
    def find_all(self) -> List[Region]:
        """every stored region"""

    @abstractmethod
    def save(self, region: Region) -> Region:
        """persist the region and return the stored value"""


class PersonRegistry(ABC):
    """Where people live"""

    @abstractmethod
    def find_by_id(self, person_id: str) -> Optional[Person]:
        """the person with this id, or None"""

    @abstractmethod
    def find_active_by_region_slot(self, region_id: str, level: RegionType) -> List[Person]:
        """active people whose slot for `level` holds `region_id`"""

    @abstractmethod
    def find_all_active(self) -> List[Person]:
        """every active person"""

    @abstractmethod
    def save(self, person: Person) -> Person:
        """persist the person and return the stored value"""


class DjangoRegionStore(RegionStore):
    """RegionStore backed by the django db"""

    def find_by_id(self, region_id: str) -> Optional[Region]:
        return Region.objects.filter(id=region_id).first()

    def find_children(self, parent_id: str) -> List[Region]:
        return list(Region.objects.filter(parent_id=parent_id).order_by("id"))

    def find_all(self) -> List[Region]:
        return list(Region.objects.all().order_by("id"))

    def save(self, region: Region) -> Region:
        region.save()
        return region


class DjangoPersonRegistry(PersonRegistry):
    """PersonRegistry backed by the django db"""

    def find_by_id(self, person_id: str) -> Optional[Person]:
        return Person.objects.filter(id=person_id).first()

    def find_active_by_region_slot(self, region_id: str, level: RegionType) -> List[Person]:
        return list(
            Person.objects.filter(active=True, **{level.person_slot: region_id}).order_by("id")
        )

    def find_all_active(self) -> List[Person]:
        return list(Person.objects.filter(active=True).order_by("id"))

    def save(self, person: Person) -> Person:
        person.save()
        return person


class InMemoryRegionStore(RegionStore):
    """
    Regions kept in a dict keyed by id, with a side index from parent id to child ids.
    Copies go in and out so callers never share an instance with the store
    """

    def __init__(self, regions: Iterable[Region] = ()):
        self.regions: Dict[str, Region] = {}
        self.children_by_parent: Dict[str, List[str]] = {}
        for region in regions:
            self.save(region)

    def find_by_id(self, region_id: str) -> Optional[Region]:
        region = self.regions.get(region_id)
        return copy.copy(region) if region is not None else None

    def find_children(self, parent_id: str) -> List[Region]:
        return [
            copy.copy(self.regions[child_id])
            for child_id in self.children_by_parent.get(parent_id, [])
        ]

    def find_all(self) -> List[Region]:
        return [copy.copy(region) for region in self.regions.values()]

    def save(self, region: Region) -> Region:
        previous = self.regions.get(region.id)
        if previous is not None and previous.parent_id != region.parent_id:
            self.children_by_parent[previous.parent_id].remove(region.id)
        if region.parent_id is not None and (
            previous is None or previous.parent_id != region.parent_id
        ):
            self.children_by_parent.setdefault(region.parent_id, []).append(region.id)
        self.regions[region.id] = copy.copy(region)
        return copy.copy(region)

    def remove(self, region_id: str) -> None:
        """drop a region; only used to simulate a region vanishing underneath the engine"""
        region = self.regions.pop(region_id)
        if region.parent_id is not None:
            self.children_by_parent[region.parent_id].remove(region_id)


class InMemoryPersonRegistry(PersonRegistry):
    """People kept in a dict keyed by id"""

    def __init__(self, people: Iterable[Person] = ()):
        self.people: Dict[str, Person] = {}
        for person in people:
            self.save(person)

    def find_by_id(self, person_id: str) -> Optional[Person]:
        person = self.people.get(person_id)
        return copy.copy(person) if person is not None else None

    def find_active_by_region_slot(self, region_id: str, level: RegionType) -> List[Person]:
        return [
            copy.copy(person)
            for person in self.people.values()
            if person.active and getattr(person, level.person_slot) == region_id
        ]

    def find_all_active(self) -> List[Person]:
        return [copy.copy(person) for person in self.people.values() if person.active]

    def save(self, person: Person) -> Person:
        person.refresh_status()
        self.people[person.id] = copy.copy(person)
        return copy.copy(person)
