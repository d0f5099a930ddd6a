"""Tests for the Nominatim geocoder adapter."""

from unittest.mock import MagicMock

import pytest
from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from heritage_pulse.adapters.cache import InMemoryCache, NullCache
from heritage_pulse.adapters.geocoding import NominatimGeocoderAdapter
from heritage_pulse.adapters.http import RetryPolicy
from heritage_pulse.config import GeocodingConfig
from heritage_pulse.domain.errors import GeocodingError


def _location(lat=28.6139, lng=77.2090):
    location = MagicMock()
    location.latitude = lat
    location.longitude = lng
    location.raw = {
        "display_name": "New Delhi, Delhi, India",
        "type": "city",
        "address": {"city": "New Delhi", "country": "India"},
        "boundingbox": ["28.40", "28.88", "76.84", "77.34"],
    }
    return location


def _adapter(geocode_fn, cache=None):
    adapter = NominatimGeocoderAdapter(
        config=GeocodingConfig(),
        cache=cache if cache is not None else NullCache(),
        retry=RetryPolicy(max_attempts=2, sleep=lambda _: None),
    )
    adapter._geocode_fn = geocode_fn
    return adapter


class TestGeocode:
    def test_returns_place(self):
        geocode_fn = MagicMock(return_value=_location())

        place = _adapter(geocode_fn).geocode("Delhi")

        assert place.name == "New Delhi, Delhi, India"
        assert (place.location.latitude, place.location.longitude) == (28.6139, 77.2090)
        assert place.place_type == "city"
        assert place.address["country"] == "India"
        assert place.bounding_box == (28.40, 28.88, 76.84, 77.34)
        geocode_fn.assert_called_once_with(
            "Delhi", exactly_one=True, addressdetails=True, language="en"
        )

    def test_no_match_is_none(self):
        assert _adapter(MagicMock(return_value=None)).geocode("Atlantis") is None

    def test_blank_query_skips_service(self):
        geocode_fn = MagicMock()

        assert _adapter(geocode_fn).geocode("  ") is None
        geocode_fn.assert_not_called()

    def test_timeout_is_retried(self):
        geocode_fn = MagicMock(side_effect=[GeocoderTimedOut("slow"), _location()])

        assert _adapter(geocode_fn).geocode("Delhi") is not None
        assert geocode_fn.call_count == 2

    def test_service_down_raises(self):
        geocode_fn = MagicMock(side_effect=GeocoderTimedOut("slow"))

        with pytest.raises(GeocodingError) as excinfo:
            _adapter(geocode_fn).geocode("Delhi")

        assert excinfo.value.query == "Delhi"
        assert geocode_fn.call_count == 2

    def test_non_transient_error_not_retried(self):
        geocode_fn = MagicMock(side_effect=GeocoderServiceError("bad request"))

        with pytest.raises(GeocodingError):
            _adapter(geocode_fn).geocode("Delhi")

        assert geocode_fn.call_count == 1

    def test_results_are_cached(self):
        geocode_fn = MagicMock(return_value=_location())
        adapter = _adapter(geocode_fn, cache=InMemoryCache())

        first = adapter.geocode("Delhi")
        second = adapter.geocode("delhi ")

        assert first == second
        geocode_fn.assert_called_once()
