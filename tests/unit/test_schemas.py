"""
Unit tests for domain models.
"""
import pytest
from pydantic import ValidationError

from app.models.schemas import PreferenceProfile, RankedElement, RankedResult
from tests.fakes import make_item


class TestPreferenceProfile:
    def test_defaults_are_neutral(self):
        profile = PreferenceProfile()

        assert profile.non_neutral_sliders() == []
        assert profile.has_subjective_signal() is False
        assert profile.language_code() is None

    def test_accepts_camel_case_payload(self):
        profile = PreferenceProfile.model_validate({
            "yearRange": [2000, 2010],
            "ratingRange": [7, 10],
            "humorLevel": 9,
            "ageRating": "PG-13",
        })

        assert profile.year_range == (2000, 2010)
        assert profile.rating_range == (7.0, 10.0)
        assert profile.humor_level == 9
        assert profile.age_rating == "PG-13"

    @pytest.mark.parametrize("field", ["year_range", "runtime_range", "rating_range"])
    def test_inverted_range_rejected(self, field):
        with pytest.raises(ValidationError):
            PreferenceProfile(**{field: (10, 5)})

    def test_degenerate_range_allowed(self):
        profile = PreferenceProfile(year_range=(1999, 1999))
        assert profile.year_range == (1999, 1999)

    @pytest.mark.parametrize("value", [0, 11])
    def test_slider_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            PreferenceProfile(mood_intensity=value)

    def test_genre_affinity_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            PreferenceProfile(genres={"Horror": 12})

    def test_description_is_subjective_signal(self):
        assert PreferenceProfile(description="mind-bending sci-fi").has_subjective_signal()

    def test_blank_description_is_not_signal(self):
        assert not PreferenceProfile(description="   ").has_subjective_signal()

    def test_single_non_neutral_slider_is_signal(self):
        profile = PreferenceProfile(violence_level=2)

        assert profile.has_subjective_signal()
        assert profile.non_neutral_sliders() == [("violence_level", 2)]

    def test_genre_affinities_are_not_signal(self):
        profile = PreferenceProfile(genres={"Horror": 10, "Romance": 1})
        assert not profile.has_subjective_signal()

    def test_language_names_and_codes(self):
        assert PreferenceProfile(language="Korean").language_code() == "ko"
        assert PreferenceProfile(language="FR").language_code() == "fr"
        assert PreferenceProfile(language="Any").language_code() is None

    def test_unknown_language_rejected(self):
        with pytest.raises(ValidationError):
            PreferenceProfile(language="Klingon")


class TestRankedModels:
    def test_ranked_result_serializes_camel_case(self):
        result = RankedResult.from_item(make_item(7), 0.75, "Great fit")
        data = result.model_dump(by_alias=True)

        assert data["matchScore"] == 0.75
        assert data["matchReason"] == "Great fit"
        assert data["releaseDate"] is not None

    def test_ranked_result_score_bounds(self):
        with pytest.raises(ValidationError):
            RankedResult.from_item(make_item(7), 1.2, "Too good")

    def test_ranked_element_accepts_tmdb_id_alias(self):
        element = RankedElement.model_validate({"tmdbId": 550, "score": 0.9, "reason": "x", "extra": 1})
        assert element.id == 550
