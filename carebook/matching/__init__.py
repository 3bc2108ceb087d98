from carebook.matching.geo_matcher import TrainerMatch, haversine_km, match_trainers
from carebook.matching.postcodes import (
    format_uk_postcode,
    leading_prefixes,
    region_from_postcode,
    validate_uk_postcode,
)

__all__ = [
    "TrainerMatch",
    "format_uk_postcode",
    "haversine_km",
    "leading_prefixes",
    "match_trainers",
    "region_from_postcode",
    "validate_uk_postcode",
]
