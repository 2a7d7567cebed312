"""errors raised by the region statistics engine"""

from typing import Optional


class RegionStatsError(Exception):
    """Base exception for region statistics errors"""

    def __init__(self, message: str, error_code: str = "REGION_STATS_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class RegionNotFoundError(RegionStatsError):
    """Raised when a region id does not exist"""

    def __init__(self, region_id: str):
        super().__init__(f"Region with id {region_id} not found", "REGION_NOT_FOUND")
        self.region_id = region_id


class PersonNotFoundError(RegionStatsError):
    """Raised when a person id does not exist"""

    def __init__(self, person_id: str):
        super().__init__(f"Person with id {person_id} not found", "PERSON_NOT_FOUND")
        self.person_id = person_id


class PersonInactiveError(RegionStatsError):
    """Raised when a mutation targets a person who has been eliminated"""

    def __init__(self, person_id: str):
        super().__init__(f"Person with id {person_id} is not active", "PERSON_INACTIVE")
        self.person_id = person_id


class RegionNotEligibleError(RegionStatsError):
    """Raised when elimination is requested on a region which is not under threat"""

    def __init__(self, region_id: str):
        super().__init__(
            f"Region with id {region_id} is not eligible for elimination", "REGION_NOT_ELIGIBLE"
        )
        self.region_id = region_id


class PartialPropagationError(RegionStatsError):
    """
    Raised when a multi-region update stops part way.
    Updates applied before the failure are kept; last_succeeded_id is the last region
    whose statistics are known to be consistent
    """

    def __init__(self, last_succeeded_id: Optional[str], message: Optional[str] = None):
        super().__init__(
            message or f"Propagation stopped after region {last_succeeded_id}",
            "PARTIAL_FAILURE",
        )
        self.last_succeeded_id = last_succeeded_id


class EliminationTimeoutError(PartialPropagationError):
    """Raised when an elimination runs past its deadline"""

    def __init__(self, last_succeeded_id: Optional[str], state: str):
        super().__init__(
            last_succeeded_id,
            f"Elimination ran past its deadline in state {state}; "
            f"last consistent region {last_succeeded_id}",
        )
        self.state = state


class RegionLockError(RegionStatsError):
    """Raised when the lock on a region could not be acquired"""

    def __init__(self, region_id: str):
        super().__init__(f"Could not lock region {region_id}", "REGION_LOCKED")
        self.region_id = region_id
