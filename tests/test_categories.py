"""Tests for site normalisation helpers."""

import pytest

from heritage_pulse.domain.categories import (
    DEFAULT_PLACEHOLDER,
    NO_CONTEXT,
    categorize_site,
    format_historical_context,
    narrative_title,
    site_images,
    slugify,
    title_from_url,
    visit_duration_minutes,
    visiting_info,
)
from heritage_pulse.domain.models import NarrativeSummary, SiteCategory


class TestCategorizeSite:
    @pytest.mark.parametrize(
        "tags, label, expected",
        [
            ({}, "UNESCO World Heritage Site", SiteCategory.UNESCO),
            ({"heritage": "1", "historic": "monument"}, "", SiteCategory.UNESCO),
            ({"historic": "temple"}, "", SiteCategory.TEMPLE),
            ({"religion": "hindu"}, "", SiteCategory.TEMPLE),
            ({}, "mosque", SiteCategory.TEMPLE),
            ({"historic": "castle"}, "", SiteCategory.FORT),
            ({}, "palace", SiteCategory.PALACE),
            ({"tourism": "museum"}, "", SiteCategory.MUSEUM),
            ({}, "art gallery", SiteCategory.MUSEUM),
            ({"historic": "memorial"}, "", SiteCategory.MEMORIAL),
            ({"historic": "ruins"}, "", SiteCategory.RUINS),
            ({"historic": "monument"}, "", SiteCategory.MONUMENT),
            ({}, "architectural structure", SiteCategory.MONUMENT),
            ({"tourism": "attraction"}, "", SiteCategory.OTHER),
        ],
    )
    def test_mapping(self, tags, label, expected):
        assert categorize_site(tags, label) is expected

    def test_name_is_a_hint(self):
        assert categorize_site({"historic": "yes"}, name="Amber Fort") is SiteCategory.FORT

    @pytest.mark.parametrize(
        "tags, name, expected",
        [
            ({"historic": "memorial"}, "Comfort Women Memorial", SiteCategory.MEMORIAL),
            ({"historic": "ruins"}, "Templeton Mill Ruins", SiteCategory.RUINS),
            ({"historic": "monument"}, "Fort Gate Obelisk", SiteCategory.MONUMENT),
        ],
    )
    def test_historic_tag_beats_name(self, tags, name, expected):
        assert categorize_site(tags, name=name) is expected

    @pytest.mark.parametrize(
        "name",
        ["Comfort Women Statue", "Templeton Clock Tower", "Effort Square"],
    )
    def test_name_matches_whole_words(self, name):
        assert categorize_site({"historic": "yes"}, name=name) is SiteCategory.MONUMENT

    def test_memorial_duration_unaffected_by_name(self):
        category = categorize_site({"historic": "memorial"}, name="Comfort Women Memorial")

        assert visit_duration_minutes(category) == 60


class TestVisitDuration:
    @pytest.mark.parametrize(
        "category, minutes",
        [
            (SiteCategory.UNESCO, 90),
            (SiteCategory.PALACE, 90),
            (SiteCategory.FORT, 90),
            (SiteCategory.MUSEUM, 90),
            (SiteCategory.TEMPLE, 60),
            (SiteCategory.MONUMENT, 60),
            ("Art Gallery", 90),
            ("Church", 60),
            ("anything else", 60),
        ],
    )
    def test_durations(self, category, minutes):
        assert visit_duration_minutes(category) == minutes


class TestFormatHistoricalContext:
    def test_strips_citations_and_whitespace(self):
        text = "Built in 1639.[1]  Expanded   later.[citation needed]"

        assert format_historical_context(text) == "Built in 1639. Expanded later."

    def test_truncates_at_sentence(self):
        text = "First sentence. Second sentence is much longer than the limit."

        assert format_historical_context(text, max_length=30) == "First sentence."

    def test_truncates_without_sentence(self):
        assert format_historical_context("a" * 20, max_length=10) == "a" * 10 + "..."

    def test_empty(self):
        assert format_historical_context(None) == NO_CONTEXT


class TestPresentation:
    def test_slugify(self):
        assert slugify("Humayun's Tomb") == "humayun-s-tomb"
        assert slugify("") == "unknown-site"

    def test_visiting_info_defaults(self, site_factory):
        fort = site_factory("Red Fort", category=SiteCategory.FORT)
        other = site_factory("Old Well", category=SiteCategory.OTHER)

        assert visiting_info(fort) == {"visiting_hours": "09:00 - 17:00", "entry_fee": "₹20 - ₹600"}
        assert visiting_info(other)["visiting_hours"] == "Sunrise to Sunset"

    def test_site_images_order(self, site_factory):
        site = site_factory("Old Well", category=SiteCategory.OTHER, image_url="https://img/own.jpg")
        narrative = NarrativeSummary(
            found=True, title="Old Well", summary="", url=None, image_url="https://img/wiki.jpg"
        )

        assert site_images(site, narrative) == ("https://img/wiki.jpg",)
        assert site_images(site) == ("https://img/own.jpg",)
        assert site_images(site_factory("Bare", category=SiteCategory.OTHER)) == (DEFAULT_PLACEHOLDER,)


class TestNarrativeTitle:
    def test_title_from_url(self):
        assert title_from_url("https://en.wikipedia.org/wiki/Humayun%27s_Tomb") == "Humayun's Tomb"
        assert title_from_url("https://example.com/page") is None
        assert title_from_url(None) is None

    def test_prefers_linked_article(self, site_factory):
        linked = site_factory("Lal Qila", wikipedia_url="https://en.wikipedia.org/wiki/Red_Fort")

        assert narrative_title(linked) == "Red Fort"
        assert narrative_title(site_factory("Purana Qila")) == "Purana Qila"
