from regionwatch.models.region import Region, RegionType
from regionwatch.models.person import Person, SocialStatus, status_for_rating
