"""
Trainer-to-family matching by region, postcode area and service radius.

Three strategies are tried for every trainer and a trainer matches if any of
them succeeds:
1. Region  -- the family's region is one of the trainer's service regions
2. Postcode -- the first one or two letters of the family's postcode equal
   one of the trainer's prefixes ("S" and "SW" both serve "SW1A")
3. Radius  -- Haversine distance from the trainer's base <= service radius

The matcher never leaves the caller with nothing to show while at least one
trainer exists. When the capability filter empties the matched set, the
location matches are returned as ``fallback``. When nothing matches on
location, the whole roster is the fallback.

Usage:
    result = match_trainers(family, roster, CapabilityTag.SCHOOL_RUN)
    options = result.matched or result.fallback
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from carebook.config import GeoConfig, settings
from carebook.matching.postcodes import leading_prefixes, region_from_postcode
from carebook.schemas.trainer_schema import CapabilityTag, Coordinates, FamilyLocation, Trainer

logger = logging.getLogger(__name__)


@dataclass
class TrainerMatch:
    """Ranked match result. ``distances_km`` holds distances where both sides have coordinates."""
    matched: list[Trainer] = field(default_factory=list)
    fallback: list[Trainer] = field(default_factory=list)
    distances_km: dict[str, float] = field(default_factory=dict)

    @property
    def has_exact_match(self) -> bool:
        return bool(self.matched)

    @property
    def options(self) -> list[Trainer]:
        """What the caller should offer: exact matches, else the fallback."""
        return self.matched or self.fallback


def haversine_km(a: Coordinates, b: Coordinates, config: Optional[GeoConfig] = None) -> float:
    """Great-circle distance in kilometres, unrounded."""
    config = config or settings.geo
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    h = min(1.0, h)
    return config.earth_radius_km * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_label(distance_km: float) -> str:
    if distance_km < 1:
        return "Less than 1 km away"
    rounded = round(distance_km, 1)
    if distance_km < 5:
        return f"{rounded} km away (nearby)"
    if distance_km < 20:
        return f"{rounded} km away"
    return f"{rounded} km away (distant)"


def _region_match(region: Optional[str], trainer: Trainer) -> bool:
    if not region:
        return False
    wanted = region.casefold()
    return any(r.casefold() == wanted for r in trainer.service_regions)


def _postcode_match(prefixes: tuple[str, ...], trainer: Trainer) -> bool:
    return any(p in trainer.service_postcode_prefixes for p in prefixes)


def _radius_match(distance: Optional[float], trainer: Trainer) -> bool:
    return (
        distance is not None
        and trainer.service_radius_km is not None
        and distance <= trainer.service_radius_km
    )


def _rank(trainers: list[Trainer], roster_order: dict[str, int], distances: dict[str, float]) -> list[Trainer]:
    return sorted(
        trainers,
        key=lambda t: (
            t.id not in distances,
            distances.get(t.id, 0.0),
            -len(t.capabilities),
            roster_order[t.id],
        ),
    )


def match_trainers(
    family: FamilyLocation,
    trainers: Sequence[Trainer],
    required_capability: Optional[CapabilityTag] = None,
    infer_region: bool = False,
    config: Optional[GeoConfig] = None,
) -> TrainerMatch:
    """Return trainers who can serve ``family``, ranked nearest first.

    Args:
        family: The family's region, postcode and/or coordinates.
        trainers: Candidate roster, already pruned for availability.
        required_capability: When given, exact matches must offer it.
        infer_region: Derive the family's region from its postcode area
            when no region was supplied.

    Returns:
        A TrainerMatch. Pure: identical inputs give identical results.
    """
    roster_order = {t.id: i for i, t in enumerate(trainers)}
    region = family.region
    if region is None and infer_region:
        region = region_from_postcode(family.postcode)
    prefixes = leading_prefixes(family.postcode)

    distances: dict[str, float] = {}
    if family.coordinates is not None:
        for trainer in trainers:
            if trainer.home_location is not None:
                distances[trainer.id] = haversine_km(family.coordinates, trainer.home_location, config)

    if not family.has_any():
        logger.warning("Family location is empty; offering the full roster as fallback")

    located = [
        t for t in trainers
        if _region_match(region, t)
        or _postcode_match(prefixes, t)
        or _radius_match(distances.get(t.id), t)
    ]

    if not located:
        logger.info("No trainer matched on location; falling back to %d trainers", len(trainers))
        return TrainerMatch(
            fallback=_rank(list(trainers), roster_order, distances), distances_km=distances
        )

    ranked = _rank(located, roster_order, distances)
    if required_capability is None:
        return TrainerMatch(matched=ranked, distances_km=distances)

    capable = [t for t in ranked if required_capability in t.capabilities]
    if not capable:
        logger.info(
            "No located trainer offers %s; returning %d location matches as fallback",
            required_capability.value, len(ranked),
        )
        return TrainerMatch(fallback=ranked, distances_km=distances)
    return TrainerMatch(matched=capable, distances_km=distances)
