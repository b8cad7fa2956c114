from uuid import UUID, uuid4

import pytest

from app.schemas.matching import LeadPreferences, PropertyListing
from app.services.property_matching import match, rank_suggestions


def _prefs(**overrides) -> LeadPreferences:
    data = {
        "interest_type": "buy",
        "budget_min": 100_000,
        "budget_max": 200_000,
        "preferred_areas": ["Westlands"],
    }
    data.update(overrides)
    return LeadPreferences(**data)


def _listing(**overrides) -> PropertyListing:
    data = {
        "property_id": uuid4(),
        "title": "Listing",
        "type": "apartment",
        "listing_type": "sale",
        "price": 150_000,
        "currency": "KES",
        "location": "Westlands, Nairobi",
        "status": "available",
    }
    data.update(overrides)
    return PropertyListing(**data)


class TestMatch:
    """Per-facet scoring of one lead–property pair."""

    def test_perfect_match(self):
        result = match(_prefs(), _listing())

        assert result.total_score == 100
        assert result.match_reasons == [
            "For sale matches interest",
            "Price within budget range",
            "Location matches: Westlands",
            "Property is available",
        ]
        assert result.warnings == []

    def test_interest_mismatch_is_scored_not_excluded(self):
        result = match(_prefs(interest_type="rent"), _listing())

        assert result.interest_type_score == 0
        assert result.total_score == 70
        assert result.warnings[0] == "Lead wants to rent, but property is for sale"

    def test_rent_interest_matches_rent_listing(self):
        result = match(_prefs(interest_type="rent"), _listing(listing_type="rent"))

        assert result.interest_type_score == 30
        assert result.match_reasons[0] == "For rent matches interest"

    def test_identical_input_gives_identical_output(self):
        prefs = _prefs(preferred_areas=["Kilimani", "westlands"])
        listing = _listing(price=230_000, status="under_offer")

        assert match(prefs, listing).model_dump_json() == match(
            prefs, listing
        ).model_dump_json()


class TestBudgetFacet:
    @pytest.mark.parametrize(
        "price, points, message",
        [
            (200_000, 35.0, "Price within budget range"),
            (90_000, 28.0, "Price slightly under budget"),
            (50_000, 17.5, "Price 50% under minimum budget"),
            (210_000, 24.5, "Price slightly over budget (5%)"),
            (240_000, 14.0, "Price over budget by 20%"),
            (300_000, 0.0, "Price significantly over budget (50%)"),
        ],
    )
    def test_bands(self, price, points, message):
        result = match(_prefs(), _listing(price=price))

        assert result.budget_score == points
        assert message in result.match_reasons + result.warnings

    def test_at_max_beats_far_over_max(self):
        at_max = match(_prefs(), _listing(price=200_000)).budget_score
        far_over = match(_prefs(), _listing(price=300_000)).budget_score

        assert at_max >= far_over

    def test_no_budget_is_no_constraint(self):
        result = match(
            _prefs(budget_min=None, budget_max=None), _listing(price=9_000_000)
        )

        assert result.budget_score == 35
        assert "No budget constraint" in result.match_reasons

    def test_min_only_has_no_ceiling(self):
        result = match(_prefs(budget_max=None), _listing(price=5_000_000))
        assert result.budget_score == 35


class TestLocationFacet:
    def test_no_preferred_areas_is_neutral(self):
        result = match(_prefs(preferred_areas=[]), _listing(location="Anywhere"))

        assert result.location_score == 12.5
        assert "No area preference" in result.match_reasons
        assert not any("location" in w.lower() for w in result.warnings)

    def test_blank_areas_count_as_none(self):
        result = match(_prefs(preferred_areas=["  "]), _listing())
        assert result.location_score == 12.5

    def test_case_insensitive_containment(self):
        result = match(_prefs(preferred_areas=["WESTLANDS"]), _listing())
        assert result.location_score == 25

    def test_matched_areas_are_sorted(self):
        result = match(
            _prefs(preferred_areas=["westlands", "Kilimani"]),
            _listing(location="Kilimani / Westlands"),
        )
        assert "Location matches: Kilimani, westlands" in result.match_reasons

    def test_partial_word_match(self):
        result = match(
            _prefs(preferred_areas=["Kilimani Estate"]),
            _listing(location="Kilimani Road"),
        )

        assert result.location_score == 15
        assert "Partial location match: Kilimani Estate" in result.match_reasons

    def test_no_match_warns(self):
        result = match(_prefs(preferred_areas=["Runda"]), _listing(location="Karen"))

        assert result.location_score == 0
        assert 'Location "Karen" not in preferred areas' in result.warnings


class TestAvailabilityFacet:
    @pytest.mark.parametrize(
        "status, points",
        [("available", 10), ("under_offer", 5), ("let", 0), ("sold", 0), ("off_market", 0)],
    )
    def test_status_points(self, status, points):
        assert match(_prefs(), _listing(status=status)).availability_score == points

    def test_terminal_status_warns(self):
        result = match(_prefs(), _listing(status="sold"))
        assert result.warnings == ["Property status: sold"]


def _ranking_candidates():
    """Three listings scoring exactly 10, 90 and 50 for ``_ranking_prefs``."""
    return [
        _listing(listing_type="rent", price=1_000_000, location="Karen"),
        _listing(location="Westlands Road"),
        _listing(listing_type="rent", location="Westlands Road", status="sold"),
    ]


def _ranking_prefs():
    return _prefs(preferred_areas=["Upper Westlands"])


class TestRankSuggestions:
    """Filter, sort, then cut."""

    def test_candidate_scores(self):
        scores = [match(_ranking_prefs(), c).total_score for c in _ranking_candidates()]
        assert scores == [10, 90, 50]

    def test_filters_sorts_then_limits(self):
        result = rank_suggestions(
            _ranking_prefs(), _ranking_candidates(), limit=2, min_score=20
        )

        assert [s.total_score for s in result.suggestions] == [90, 50]
        assert result.matched_count == 2
        assert result.total_available_properties == 3

    def test_matched_count_is_taken_before_limit(self):
        result = rank_suggestions(
            _ranking_prefs(), _ranking_candidates(), limit=1, min_score=0
        )

        assert len(result.suggestions) == 1
        assert result.matched_count == 3

    def test_min_score_is_inclusive(self):
        result = rank_suggestions(
            _ranking_prefs(), _ranking_candidates(), limit=10, min_score=50
        )
        assert [s.total_score for s in result.suggestions] == [90, 50]

    def test_ties_break_by_property_id(self):
        first = UUID("00000000-0000-0000-0000-000000000001")
        second = UUID("00000000-0000-0000-0000-000000000002")
        candidates = [_listing(property_id=second), _listing(property_id=first)]

        result = rank_suggestions(_prefs(), candidates, limit=10, min_score=0)

        assert [s.property.property_id for s in result.suggestions] == [first, second]

    def test_empty_candidate_set(self):
        result = rank_suggestions(_prefs(), [], limit=10, min_score=0)

        assert result.matched_count == 0
        assert result.total_available_properties == 0
        assert result.suggestions == []

    def test_everything_filtered(self):
        result = rank_suggestions(
            _ranking_prefs(), _ranking_candidates(), limit=10, min_score=95
        )

        assert result.matched_count == 0
        assert result.total_available_properties == 3
        assert result.suggestions == []

    def test_caller_supplied_inventory_size(self):
        result = rank_suggestions(
            _ranking_prefs(),
            _ranking_candidates(),
            limit=10,
            min_score=0,
            total_available=5,
        )

        assert result.total_available_properties == 5
        assert result.matched_count == 3
