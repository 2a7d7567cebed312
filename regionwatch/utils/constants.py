# a region is under threat when its average rating is below this...
THREAT_RATING_THRESHOLD = 39
# ...and its share of important people is below this
THREAT_IMPORTANT_RATIO_THRESHOLD = 0.02

# social status thresholds, checked from the top down
VIP_RATING_THRESHOLD = 90
IMPORTANT_RATING_THRESHOLD = 70
REGULAR_RATING_THRESHOLD = 40

MIN_SOCIAL_RATING = 0
MAX_SOCIAL_RATING = 100

# peer rating; see core.personfunctions.rate_person
PEER_RATING_RATIO_FACTOR = 0.2
PEER_RATING_MAX_RATIO_MULTIPLIER = 2.5

# legacy marker for "no assignment at this level" on a person's slot fields
NO_REGION = "none"

# redis key prefix for the per-region locks
REGION_LOCK_PREFIX = "regionwatch-region-lock"
