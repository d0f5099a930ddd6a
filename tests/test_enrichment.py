"""Tests for concurrent, fault-tolerant narrative enrichment."""

from heritage_pulse.domain.categories import DEFAULT_PLACEHOLDER, PLACEHOLDER_IMAGES
from heritage_pulse.domain.models import SiteCategory
from heritage_pulse.services.enrichment import SUMMARY_UNAVAILABLE, SiteEnricher

from conftest import FakeNarrative


def _five_sites(site_factory):
    names = ["Red Fort", "Qutub Minar", "India Gate", "Lotus Temple", "Purana Qila"]
    return [site_factory(name, 28.6 + i * 0.01, 77.2) for i, name in enumerate(names)]


class TestSiteEnricher:
    def test_one_failure_does_not_affect_others(self, site_factory):
        sites = _five_sites(site_factory)
        narrative = FakeNarrative(
            summaries={s.name: f"{s.name} is a landmark." for s in sites},
            failing=["India Gate"],
        )

        enriched = SiteEnricher(narrative, max_workers=4).enrich(sites)

        assert len(enriched) == 5
        assert [s.id for s in enriched] == [s.id for s in sites]
        failed = enriched[2]
        assert failed.summary == SUMMARY_UNAVAILABLE
        assert failed.verified is False
        for site in enriched[:2] + enriched[3:]:
            assert site.verified is True
            assert site.summary == f"{site.name} is a landmark."

    def test_missing_article_is_unverified(self, site_factory):
        site = site_factory("Obscure Stepwell", category=SiteCategory.MONUMENT)

        [enriched] = SiteEnricher(FakeNarrative()).enrich([site])

        assert enriched.verified is False
        assert enriched.summary == SUMMARY_UNAVAILABLE
        assert enriched.images == (DEFAULT_PLACEHOLDER,)

    def test_images_prefer_narrative_then_source(self, site_factory):
        found = site_factory("Red Fort")
        own_image = site_factory("Agrasen ki Baoli", image_url="https://img.example/baoli.jpg")
        museum = site_factory("National Museum", category=SiteCategory.MUSEUM)
        narrative = FakeNarrative(summaries={"Red Fort": "A fort."})

        result = SiteEnricher(narrative).enrich([found, own_image, museum])

        assert result[0].images == ("https://img.example/Red_Fort.jpg",)
        assert result[1].images == ("https://img.example/baoli.jpg",)
        assert result[2].images == (PLACEHOLDER_IMAGES[SiteCategory.MUSEUM],)

    def test_looks_up_title_from_wikipedia_url(self, site_factory):
        site = site_factory(
            "Lal Qila", wikipedia_url="https://en.wikipedia.org/wiki/Red_Fort"
        )
        narrative = FakeNarrative(summaries={"Red Fort": "Built in 1639."})

        [enriched] = SiteEnricher(narrative).enrich([site])

        assert narrative.titles == ["Red Fort"]
        assert enriched.verified is True

    def test_summary_is_cleaned_and_truncated(self, site_factory):
        site = site_factory("Red Fort")
        long_text = "The fort was built in 1639.[1] " + "It is large. " * 100
        narrative = FakeNarrative(summaries={"Red Fort": long_text})

        [enriched] = SiteEnricher(narrative, max_summary_chars=100).enrich([site])

        assert "[1]" not in enriched.summary
        assert len(enriched.summary) <= 100
        assert enriched.summary.endswith(".")

    def test_empty_input(self):
        assert SiteEnricher(FakeNarrative()).enrich([]) == []
