"""Tests for trainer matching by region, postcode and radius."""

import logging
import math

import pytest

from carebook.matching.geo_matcher import distance_label, haversine_km, match_trainers
from carebook.schemas.trainer_schema import CapabilityTag, Coordinates, FamilyLocation
from tests.conftest import HATFIELD, LONDON_CENTRE, MANCHESTER, ST_ALBANS, make_trainer


class TestHaversine:
    def test_near_antipodal_points_do_not_fail(self):
        a = Coordinates(latitude=45.0, longitude=0.0)
        b = Coordinates(latitude=-45.0, longitude=180.0)
        assert haversine_km(a, b) == pytest.approx(math.pi * 6371.0, abs=1.0)

    def test_zero_distance_to_self(self):
        assert haversine_km(HATFIELD, HATFIELD) == pytest.approx(0.0)

    def test_known_distance(self):
        # London to Manchester is roughly 262 km as the crow flies.
        assert haversine_km(LONDON_CENTRE, MANCHESTER) == pytest.approx(262, abs=5)

    def test_symmetric(self):
        assert haversine_km(HATFIELD, ST_ALBANS) == pytest.approx(haversine_km(ST_ALBANS, HATFIELD))


class TestDistanceLabel:
    @pytest.mark.parametrize("km,label", [
        (0.4, "Less than 1 km away"),
        (3.24, "3.2 km away (nearby)"),
        (12.0, "12.0 km away"),
        (45.66, "45.7 km away (distant)"),
    ])
    def test_labels(self, km, label):
        assert distance_label(km) == label


class TestStrategies:
    def test_region_match_is_case_insensitive(self):
        trainer = make_trainer("T1", regions=["Hertfordshire"])
        result = match_trainers(FamilyLocation(region="hertfordshire"), [trainer])
        assert result.matched == [trainer]
        assert result.has_exact_match is True

    def test_postcode_prefix_match(self):
        trainer = make_trainer("T1", prefixes=["al"])
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), [trainer])
        assert result.matched == [trainer]

    def test_single_letter_prefix_serves_two_letter_area(self):
        trainer = make_trainer("T1", prefixes=["S"])
        result = match_trainers(FamilyLocation(postcode="SW1A 1AA"), [trainer])
        assert result.matched == [trainer]

    def test_two_letter_prefix_must_match_both_letters(self):
        trainer = make_trainer("T1", prefixes=["SE"])
        result = match_trainers(FamilyLocation(postcode="SW1A 1AA"), [trainer])
        assert result.matched == []

    def test_two_letter_prefix_does_not_serve_one_letter_area(self):
        trainer = make_trainer("T1", prefixes=["ME"])
        result = match_trainers(FamilyLocation(postcode="M1 1AE"), [trainer])
        assert result.matched == []

    def test_radius_match_includes_boundary(self):
        distance = haversine_km(ST_ALBANS, HATFIELD)
        trainer = make_trainer("T1", home=HATFIELD, radius_km=distance)
        result = match_trainers(FamilyLocation(coordinates=ST_ALBANS), [trainer])
        assert result.matched == [trainer]
        assert result.distances_km["T1"] == pytest.approx(distance)

    def test_radius_just_short_of_distance_does_not_match(self):
        distance = haversine_km(ST_ALBANS, HATFIELD)
        trainer = make_trainer("T1", home=HATFIELD, radius_km=distance - 0.001)
        result = match_trainers(FamilyLocation(coordinates=ST_ALBANS), [trainer])
        assert result.matched == []

    def test_any_single_strategy_is_enough(self):
        by_region = make_trainer("R", regions=["Essex"])
        by_prefix = make_trainer("P", prefixes=["AL"])
        by_radius = make_trainer("D", home=HATFIELD, radius_km=15)
        family = FamilyLocation(region="Essex", postcode="AL10 1AA", coordinates=ST_ALBANS)
        result = match_trainers(family, [by_region, by_prefix, by_radius])
        assert {t.id for t in result.matched} == {"R", "P", "D"}

    def test_region_inferred_from_postcode_only_when_enabled(self):
        trainer = make_trainer("T1", regions=["Hertfordshire"])
        family = FamilyLocation(postcode="AL10 1AA")
        assert match_trainers(family, [trainer]).matched == []
        assert match_trainers(family, [trainer], infer_region=True).matched == [trainer]


class TestCapabilityFilter:
    def test_capability_narrows_matches(self):
        escort = make_trainer("T1", prefixes=["AL"], capabilities={CapabilityTag.TRAVEL_ESCORT})
        respite = make_trainer("T2", prefixes=["AL"], capabilities={CapabilityTag.RESPITE})
        result = match_trainers(
            FamilyLocation(postcode="AL10 1AA"), [escort, respite], CapabilityTag.RESPITE
        )
        assert result.matched == [respite]
        assert result.fallback == []

    def test_located_trainers_become_fallback_when_none_capable(self):
        nearby = make_trainer("T1", prefixes=["AL"])
        far = make_trainer("T2", prefixes=["M"])
        result = match_trainers(
            FamilyLocation(postcode="AL10 1AA"), [nearby, far], CapabilityTag.OVERNIGHT
        )
        assert result.matched == []
        assert result.fallback == [nearby]
        assert result.options == [nearby]


class TestFallback:
    def test_no_location_match_falls_back_to_whole_roster(self):
        roster = [make_trainer("T1", prefixes=["M"]), make_trainer("T2", regions=["Kent"])]
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), roster)
        assert result.has_exact_match is False
        assert [t.id for t in result.fallback] == ["T1", "T2"]

    def test_region_only_trainer_offered_as_fallback_when_alone(self):
        essex = make_trainer("T1", regions=["Essex"])
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), [essex])
        assert result.matched == []
        assert result.fallback == [essex]

    def test_empty_family_location_logs_warning(self, caplog):
        roster = [make_trainer("T1", prefixes=["AL"])]
        with caplog.at_level(logging.WARNING, logger="carebook.matching.geo_matcher"):
            result = match_trainers(FamilyLocation(postcode="   "), roster)
        assert result.fallback == roster
        assert "Family location is empty" in caplog.text

    def test_empty_roster_gives_empty_result(self):
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), [])
        assert result.options == []


class TestRanking:
    def test_nearest_first(self):
        near = make_trainer("NEAR", home=ST_ALBANS, radius_km=50)
        far = make_trainer("FAR", home=LONDON_CENTRE, radius_km=50)
        result = match_trainers(FamilyLocation(coordinates=HATFIELD), [far, near])
        assert [t.id for t in result.matched] == ["NEAR", "FAR"]

    def test_trainers_without_distance_rank_last(self):
        located = make_trainer("GEO", prefixes=["AL"], home=LONDON_CENTRE)
        no_home = make_trainer("NOHOME", prefixes=["AL"])
        family = FamilyLocation(postcode="AL10 1AA", coordinates=HATFIELD)
        result = match_trainers(family, [no_home, located])
        assert [t.id for t in result.matched] == ["GEO", "NOHOME"]

    def test_more_capabilities_break_distance_ties(self):
        basic = make_trainer("BASIC", prefixes=["AL"])
        broad = make_trainer(
            "BROAD", prefixes=["AL"],
            capabilities={CapabilityTag.RESPITE, CapabilityTag.SCHOOL_RUN},
        )
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), [basic, broad])
        assert [t.id for t in result.matched] == ["BROAD", "BASIC"]

    def test_roster_order_is_final_tie_break(self):
        first = make_trainer("A", prefixes=["AL"])
        second = make_trainer("B", prefixes=["AL"])
        result = match_trainers(FamilyLocation(postcode="AL10 1AA"), [second, first])
        assert [t.id for t in result.matched] == ["B", "A"]

    def test_deterministic(self):
        roster = [
            make_trainer("T1", home=HATFIELD, radius_km=30),
            make_trainer("T2", home=ST_ALBANS, radius_km=30),
        ]
        family = FamilyLocation(coordinates=Coordinates(latitude=51.75, longitude=-0.3))
        assert match_trainers(family, roster) == match_trainers(family, roster)
