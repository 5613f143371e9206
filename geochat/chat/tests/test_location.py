"""Tests for the location provider and the reported geolocation capability."""

from unittest.mock import MagicMock

import pytest

from geochat.chat.location import (
    LocationProvider,
    ReportedGeolocation,
    geolocation_from_report,
)
from geochat.chat.schemas import LocationReport, UserLocation


@pytest.fixture
def listener():
    """Listener recording which callback fired."""
    return MagicMock()


class TestLocationProvider:
    def test_success(self, listener):
        report = LocationReport(latitude=37.77, longitude=-122.41)

        LocationProvider(geolocation_from_report(report)).request(listener)

        listener.on_location_acquired.assert_called_once_with(
            UserLocation(latitude=37.77, longitude=-122.41)
        )
        listener.on_location_error.assert_not_called()

    def test_denied(self, listener):
        report = LocationReport(error="User denied Geolocation")

        LocationProvider(geolocation_from_report(report)).request(listener)

        listener.on_location_error.assert_called_once_with("User denied Geolocation")
        listener.on_location_acquired.assert_not_called()

    def test_missing_coordinates_is_an_error(self, listener):
        LocationProvider(ReportedGeolocation(LocationReport())).request(listener)

        listener.on_location_error.assert_called_once_with("Position unavailable")

    def test_unsupported(self, listener):
        report = LocationReport(supported=False)

        provider = LocationProvider(geolocation_from_report(report))
        provider.request(listener)

        assert provider.capability is None
        listener.on_location_unsupported.assert_called_once_with()

    def test_requests_only_once(self, listener):
        capability = MagicMock()
        provider = LocationProvider(capability)

        provider.request(listener)
        provider.request(listener)

        capability.get_current_position.assert_called_once_with(
            listener.on_location_acquired, listener.on_location_error
        )
