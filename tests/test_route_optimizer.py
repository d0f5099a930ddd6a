"""Tests for the greedy multi-day route optimizer."""

import pytest

from heritage_pulse.domain.models import DayWindow, GeoLocation, SiteCategory
from heritage_pulse.services.route_optimizer import RouteOptimizer, overrun_minutes, summarize

DELHI = GeoLocation(28.6139, 77.2090)
NINE_TO_SIX = DayWindow.from_strings("09:00", "18:00")


@pytest.fixture
def optimizer():
    return RouteOptimizer(speed_kmh=30, buffer_minutes=5)


@pytest.fixture
def delhi_sites(site_factory):
    return [
        site_factory("Taj Mahal", 27.1751, 78.0421, category=SiteCategory.UNESCO, site_id="Q9141"),
        site_factory("India Gate", 28.6129, 77.2295, category=SiteCategory.MONUMENT, site_id="Q170"),
        site_factory("Red Fort", 28.6562, 77.2410, category=SiteCategory.FORT, site_id="Q170495"),
        site_factory("Qutub Minar", 28.5245, 77.1855, category=SiteCategory.UNESCO, site_id="Q188920"),
        site_factory("Humayun's Tomb", 28.5933, 77.2507, category=SiteCategory.UNESCO, site_id="Q170497"),
    ]


def _scheduled_ids(days):
    return [stop.site.id for day in days for stop in day.stops]


class TestTravelMinutes:
    def test_rounds_up_and_adds_buffer(self, optimizer):
        assert optimizer.travel_minutes(0) == 5
        assert optimizer.travel_minutes(15) == 35
        assert optimizer.travel_minutes(15.01) == 36

    def test_rejects_non_positive_speed(self):
        with pytest.raises(ValueError):
            RouteOptimizer(speed_kmh=0)


class TestOptimize:
    def test_every_site_scheduled_exactly_once(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        ids = _scheduled_ids(days)
        assert sorted(ids) == sorted(s.id for s in delhi_sites)
        assert len(ids) == len(set(ids))

    def test_far_site_pushed_to_later_day(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        first_day = {stop.site.name for stop in days[0].stops}
        assert first_day == {"India Gate", "Red Fort", "Qutub Minar", "Humayun's Tomb"}
        assert len(days) == 2
        assert [stop.site.name for stop in days[1].stops] == ["Taj Mahal"]

    def test_nearest_site_first(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        first = days[0].stops[0]
        assert first.site.name == "India Gate"
        assert first.arrival_minutes == NINE_TO_SIX.start_minutes + first.travel_minutes

    def test_day_window_respected(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        for day in days:
            assert not day.has_forced_stop
            arrivals = [stop.arrival_minutes for stop in day.stops]
            assert arrivals == sorted(arrivals)
            assert day.stats().total_minutes <= NINE_TO_SIX.length_minutes
            assert day.stops[-1].departure_minutes <= NINE_TO_SIX.end_minutes

    def test_days_are_numbered_from_one(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        assert [day.day for day in days] == [1, 2]

    def test_empty_input(self, optimizer):
        assert optimizer.optimize([], NINE_TO_SIX, start=DELHI) == []

    def test_without_start_uses_first_site(self, optimizer, site_factory):
        site = site_factory("Jantar Mantar", 28.6271, 77.2166, category=SiteCategory.MONUMENT)

        days = optimizer.optimize([site], NINE_TO_SIX)

        stop = days[0].stops[0]
        assert stop.travel_distance_km == 0
        assert stop.travel_minutes == 5
        assert stop.arrival_time == "09:05"

    def test_deterministic(self, optimizer, delhi_sites):
        first = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)
        second = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)

        assert _scheduled_ids(first) == _scheduled_ids(second)


class TestForcedStops:
    def test_site_longer_than_window_is_forced(self, optimizer, site_factory):
        window = DayWindow.from_strings("09:00", "10:00")
        palace = site_factory("City Palace", 28.6139, 77.2090, category=SiteCategory.PALACE)

        days = optimizer.optimize([palace], window, start=DELHI)

        assert len(days) == 1
        stop = days[0].stops[0]
        assert stop.forced is True
        assert stop.departure_minutes > window.end_minutes

    def test_every_forced_site_gets_own_day(self, optimizer, site_factory):
        window = DayWindow.from_strings("09:00", "10:00")
        sites = [
            site_factory(f"Museum {i}", 28.61 + i * 0.01, 77.20, category=SiteCategory.MUSEUM)
            for i in range(3)
        ]

        days = optimizer.optimize(sites, window, start=DELHI)

        assert len(days) == 3
        assert all(len(day.stops) == 1 and day.has_forced_stop for day in days)
        assert sorted(_scheduled_ids(days)) == sorted(s.id for s in sites)


class TestSummarize:
    def test_reports_overrun_of_forced_days(self, optimizer, site_factory):
        window = DayWindow.from_strings("09:00", "10:00")
        site = site_factory("Agrasen ki Baoli", 28.6139, 77.2090, category=SiteCategory.UNESCO)

        days = optimizer.optimize([site], window, start=DELHI)
        report = summarize(days, window)

        # 5 min buffer + 90 min visit from 09:00 ends at 10:35
        assert overrun_minutes(days[0], window) == 35
        assert report["forced_days"] == [{"day": 1, "overrun_minutes": 35}]
        assert report["max_overrun_minutes"] == 35
        assert report["days"][0]["site_count"] == 1

    def test_no_forced_days(self, optimizer, delhi_sites):
        days = optimizer.optimize(delhi_sites, NINE_TO_SIX, start=DELHI)
        report = summarize(days, NINE_TO_SIX)

        assert report["forced_days"] == []
        assert report["max_overrun_minutes"] == 0
        assert [d["day"] for d in report["days"]] == [1, 2]
