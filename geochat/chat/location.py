"""
Location provider.

Reads the device position once through an injected geolocation capability
and reports the outcome to a listener (the coordinator). A missing capability
means the client cannot locate itself at all.
"""

from typing import Callable, Protocol

from geochat.chat.schemas import LocationReport, UserLocation
from geochat.utils.logger import logger


class GeolocationCapability(Protocol):
    """One-shot, permission-gated position source."""

    def get_current_position(
        self,
        on_success: Callable[[UserLocation], None],
        on_error: Callable[[str], None],
    ) -> None: ...


class LocationListener(Protocol):
    def on_location_acquired(self, location: UserLocation) -> None: ...

    def on_location_error(self, reason: str) -> None: ...

    def on_location_unsupported(self) -> None: ...


class ReportedGeolocation:
    """Capability backed by a position the browser already read and posted."""

    def __init__(self, report: LocationReport) -> None:
        self.report = report

    def get_current_position(
        self,
        on_success: Callable[[UserLocation], None],
        on_error: Callable[[str], None],
    ) -> None:
        report = self.report
        if report.error is not None:
            on_error(report.error)
        elif report.latitude is None or report.longitude is None:
            on_error("Position unavailable")
        else:
            on_success(
                UserLocation(latitude=report.latitude, longitude=report.longitude)
            )


def geolocation_from_report(report: LocationReport) -> GeolocationCapability | None:
    if not report.supported:
        return None
    return ReportedGeolocation(report)


class LocationProvider:
    """Requests the position at most once; there is no retry."""

    def __init__(self, capability: GeolocationCapability | None) -> None:
        self.capability = capability
        self._requested = False

    def request(self, listener: LocationListener) -> None:
        if self._requested:
            logger.debug("Location already requested, ignoring")
            return
        self._requested = True

        if self.capability is None:
            logger.warning("Geolocation capability unavailable")
            listener.on_location_unsupported()
            return

        self.capability.get_current_position(
            listener.on_location_acquired, listener.on_location_error
        )
