"""Tests for the OSRM routing adapter and its straight-line fallback."""

from unittest.mock import MagicMock

import pytest

from heritage_pulse.adapters.routing import OSRMRoutingAdapter
from heritage_pulse.config import RoutingConfig
from heritage_pulse.domain.errors import RequestValidationError, TransportError
from heritage_pulse.domain.geo import path_length_km
from heritage_pulse.domain.models import GeoLocation

RED_FORT = GeoLocation(28.6562, 77.2410)
QUTUB = GeoLocation(28.5245, 77.1855)
INDIA_GATE = GeoLocation(28.6129, 77.2295)


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def adapter(http):
    return OSRMRoutingAdapter(config=RoutingConfig(), http=http)


class TestRoute:
    def test_routed_result(self, adapter, http):
        http.get_json.return_value = {
            "code": "Ok",
            "routes": [
                {
                    "distance": 18250.0,
                    "duration": 2700.0,
                    "geometry": {"coordinates": [[77.241, 28.6562], [77.1855, 28.5245]]},
                }
            ],
        }

        route = adapter.route([RED_FORT, QUTUB])

        assert route.source == "routed"
        assert route.distance_km == 18.25
        assert route.duration_hours == 0.75
        assert route.geometry == ((28.6562, 77.241), (28.5245, 77.1855))

    def test_url_uses_lng_lat_order(self, adapter, http):
        http.get_json.return_value = {"code": "Ok", "routes": [{"distance": 1, "duration": 1}]}

        adapter.route([RED_FORT, QUTUB])

        url = http.get_json.call_args[0][0]
        assert url == (
            "http://router.project-osrm.org/route/v1/driving/77.241,28.6562;77.1855,28.5245"
        )

    def test_trip_service_when_optimizing(self, adapter, http):
        http.get_json.return_value = {"code": "Ok", "trips": [{"distance": 5000, "duration": 600}]}

        route = adapter.route([RED_FORT, INDIA_GATE, QUTUB], optimize=True)

        assert "/trip/v1/" in http.get_json.call_args[0][0]
        assert route.distance_km == 5.0

    def test_fallback_when_service_fails(self, adapter, http):
        http.get_json.side_effect = TransportError("down", url="osrm", attempts=3)
        points = [RED_FORT, INDIA_GATE, QUTUB]

        route = adapter.route(points)

        expected_km = path_length_km(points)
        assert route.source == "fallback"
        assert route.is_fallback
        assert route.distance_km == round(expected_km, 2)
        assert route.duration_hours == round(expected_km / 60, 2)
        assert set(route.to_dict()) == {"distance_km", "duration_hours", "source"}

    def test_fallback_on_error_code(self, adapter, http):
        http.get_json.return_value = {"code": "NoRoute", "message": "Impossible route"}

        assert adapter.route([RED_FORT, QUTUB]).source == "fallback"

    def test_fallback_on_incomplete_route(self, adapter, http):
        http.get_json.return_value = {"code": "Ok", "routes": []}

        assert adapter.route([RED_FORT, QUTUB]).source == "fallback"

    def test_needs_two_points(self, adapter, http):
        with pytest.raises(RequestValidationError):
            adapter.route([RED_FORT])

        http.get_json.assert_not_called()
