"""Tests for the bundled HTTP directions providers using fake sessions."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict, List, Optional

import polyline
import pytest
import requests

from route_planner.errors import DirectionsAuthError, DirectionsProviderError
from route_planner.models import Coordinate, ManeuverType
from route_planner.providers import (
    GoogleDirectionsProvider,
    MapboxDirectionsProvider,
    OSRMDirectionsProvider,
    PROVIDERS,
    normalize_google_maneuver,
    normalize_osrm_maneuver,
)
from route_planner.providers.base import DirectionsRequest
from route_planner.providers.google import strip_html
from route_planner.providers.osrm import compose_instruction, decode_polyline6
from route_planner.providers.session import create_default_session

BERLIN = [Coordinate(13.388860, 52.517037), Coordinate(13.397634, 52.529407)]


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, exc: Exception | None = None) -> None:
        self.response = response or FakeResponse(200, {})
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def _request(*coords: Coordinate, profile: str | None = None) -> DirectionsRequest:
    return DirectionsRequest(waypoints=list(coords or BERLIN), profile=profile)


def _osrm_payload() -> Dict[str, Any]:
    line = [(52.517037, 13.388860), (52.523, 13.391), (52.529407, 13.397634)]
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": polyline.encode(line, 6),
                "distance": 1884.6,
                "duration": 251.2,
                "legs": [
                    {
                        "steps": [
                            {
                                "name": "Unter den Linden",
                                "distance": 900.0,
                                "duration": 120.0,
                                "geometry": polyline.encode(line[:2], 6),
                                "maneuver": {"type": "depart", "modifier": "north"},
                            },
                            {
                                "name": "Friedrichstraße",
                                "distance": 984.6,
                                "duration": 131.2,
                                "geometry": polyline.encode(line[1:], 6),
                                "maneuver": {"type": "turn", "modifier": "slight left"},
                            },
                            {
                                "name": "",
                                "distance": 0.0,
                                "duration": 0.0,
                                "geometry": polyline.encode(line[2:], 6),
                                "maneuver": {"type": "arrive"},
                            },
                        ]
                    }
                ],
            }
        ],
    }


# --- Maneuver vocabularies -------------------------------------------
@pytest.mark.parametrize(
    "kind, modifier, expected",
    [
        ("depart", "north", ManeuverType.DEPART.value),
        ("arrive", None, ManeuverType.ARRIVE.value),
        ("turn", "left", ManeuverType.TURN_LEFT.value),
        ("turn", "sharp right", ManeuverType.TURN_SHARP_RIGHT.value),
        ("end of road", "right", ManeuverType.TURN_RIGHT.value),
        ("turn", "uturn", ManeuverType.UTURN.value),
        ("fork", "slight left", ManeuverType.FORK_LEFT.value),
        ("fork", "right", ManeuverType.FORK_RIGHT.value),
        ("rotary", "straight", ManeuverType.ROUNDABOUT.value),
        ("exit roundabout", "right", ManeuverType.EXIT_ROUNDABOUT.value),
        ("new name", "straight", ManeuverType.CONTINUE.value),
        ("use lane", "left", "use lane"),
    ],
)
def test_normalize_osrm_maneuver(kind: str, modifier: Optional[str], expected: str) -> None:
    assert normalize_osrm_maneuver(kind, modifier) == expected


@pytest.mark.parametrize(
    "maneuver, first, expected",
    [
        (None, True, ManeuverType.DEPART.value),
        (None, False, ManeuverType.CONTINUE.value),
        ("turn-left", False, ManeuverType.TURN_LEFT.value),
        ("uturn-right", False, ManeuverType.UTURN.value),
        ("keep-left", False, ManeuverType.FORK_LEFT.value),
        ("roundabout-right", False, ManeuverType.ROUNDABOUT.value),
        ("ferry", False, "ferry"),
    ],
)
def test_normalize_google_maneuver(maneuver: Optional[str], first: bool, expected: str) -> None:
    assert normalize_google_maneuver(maneuver, first=first) == expected


def test_compose_instruction() -> None:
    assert compose_instruction("depart", "north", "Main St") == "Head north on Main St"
    assert compose_instruction("turn", "left", "Oak Ave") == "Turn left onto Oak Ave"
    assert compose_instruction("arrive", None, None) == "You have arrived at your destination"
    assert compose_instruction("fork", None, None) == "Keep ahead at the fork"


def test_strip_html() -> None:
    assert strip_html("Turn <b>left</b> onto <b>A&amp;B Rd</b>") == "Turn left onto A&B Rd"


def test_decode_polyline6_returns_lon_lat() -> None:
    encoded = polyline.encode([(52.5, 13.4), (52.6, 13.5)], 6)
    assert decode_polyline6(encoded) == [
        pytest.approx((13.4, 52.5)),
        pytest.approx((13.5, 52.6)),
    ]
    assert decode_polyline6("") == []


# --- OSRM ------------------------------------------------------------
def test_osrm_builds_lon_lat_url_and_parses_route() -> None:
    session = FakeSession(FakeResponse(200, _osrm_payload()))
    provider = OSRMDirectionsProvider(base_url="http://osrm.local/", session=session, timeout=3)

    response = asyncio.run(provider.get_directions(_request(profile="foot")))

    call = session.calls[0]
    assert call["url"] == (
        "http://osrm.local/route/v1/foot/13.38886,52.517037;13.397634,52.529407"
    )
    assert call["params"] == {"overview": "full", "geometries": "polyline6", "steps": "true"}
    assert call["timeout"] == 3

    assert response is not None
    assert response.distance_meters == pytest.approx(1884.6)
    assert response.duration_seconds == pytest.approx(251.2)
    assert response.geometry[0] == pytest.approx((13.388860, 52.517037))
    assert [s.maneuver_type for s in response.steps] == ["depart", "turn-slight-left", "arrive"]
    assert response.steps[1].instruction == "Turn slight left onto Friedrichstraße"


def test_osrm_default_profile_is_driving(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("route_planner.providers.base.DIRECTIONS_DEFAULT_PROFILE", "")
    session = FakeSession(FakeResponse(200, _osrm_payload()))
    provider = OSRMDirectionsProvider(base_url="http://osrm.local", session=session)

    asyncio.run(provider.get_directions(_request()))

    assert "/route/v1/driving/" in session.calls[0]["url"]


def test_osrm_no_route_returns_none() -> None:
    session = FakeSession(FakeResponse(400, {"code": "NoRoute", "message": "Impossible route"}))
    provider = OSRMDirectionsProvider(session=session)
    assert asyncio.run(provider.get_directions(_request())) is None


def test_osrm_vendor_error_raises() -> None:
    session = FakeSession(FakeResponse(400, {"code": "InvalidQuery", "message": "bad coords"}))
    provider = OSRMDirectionsProvider(session=session)
    with pytest.raises(DirectionsProviderError, match="InvalidQuery"):
        asyncio.run(provider.get_directions(_request()))


def test_single_waypoint_skips_http() -> None:
    session = FakeSession()
    provider = OSRMDirectionsProvider(session=session)
    assert asyncio.run(provider.get_directions(_request(BERLIN[0]))) is None
    assert session.calls == []


# --- Transport failures ----------------------------------------------
def test_transport_error_is_wrapped() -> None:
    session = FakeSession(exc=requests.ConnectionError("refused"))
    provider = OSRMDirectionsProvider(session=session)
    with pytest.raises(DirectionsProviderError, match="refused"):
        asyncio.run(provider.get_directions(_request()))


@pytest.mark.parametrize("status", [401, 403])
def test_auth_statuses_raise_auth_error(status: int) -> None:
    session = FakeSession(FakeResponse(status, {"message": "Not Authorized"}))
    provider = MapboxDirectionsProvider("tok", session=session)
    with pytest.raises(DirectionsAuthError):
        asyncio.run(provider.get_directions(_request()))


def test_invalid_json_raises() -> None:
    session = FakeSession(FakeResponse(200, ValueError("no json")))
    provider = OSRMDirectionsProvider(session=session)
    with pytest.raises(DirectionsProviderError, match="invalid JSON"):
        asyncio.run(provider.get_directions(_request()))


def test_server_error_with_detail() -> None:
    session = FakeSession(FakeResponse(503, {"message": "overloaded", "routes": []}))
    provider = OSRMDirectionsProvider(session=session)
    with pytest.raises(DirectionsProviderError, match="overloaded"):
        asyncio.run(provider.get_directions(_request()))


def test_cancel_discards_in_flight_response() -> None:
    started = threading.Event()
    release = threading.Event()

    class SlowSession(FakeSession):
        def get(self, url: str, params: Any = None, timeout: Any = None) -> FakeResponse:
            started.set()
            release.wait(5)
            return super().get(url, params, timeout)

    provider = OSRMDirectionsProvider(session=SlowSession(FakeResponse(200, _osrm_payload())))

    async def scenario() -> Any:
        task = asyncio.create_task(provider.get_directions(_request()))
        await asyncio.to_thread(started.wait, 5)
        provider.cancel()
        release.set()
        return await task

    assert asyncio.run(scenario()) is None


# --- Mapbox ----------------------------------------------------------
def _mapbox_payload() -> Dict[str, Any]:
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {"type": "LineString", "coordinates": [[13.38886, 52.517037], [13.397634, 52.529407]]},
                "distance": 1500.0,
                "duration": 1100.0,
                "legs": [
                    {
                        "steps": [
                            {
                                "distance": 1500.0,
                                "duration": 1100.0,
                                "geometry": {"type": "LineString", "coordinates": [[13.38886, 52.517037], [13.397634, 52.529407]]},
                                "maneuver": {"type": "depart", "instruction": "Walk north"},
                            },
                            {
                                "distance": 0.0,
                                "duration": 0.0,
                                "geometry": {"type": "LineString", "coordinates": [[13.397634, 52.529407]]},
                                "maneuver": {"type": "arrive", "instruction": "You have arrived"},
                            },
                        ]
                    }
                ],
            }
        ],
    }


def test_mapbox_request_and_parse(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("route_planner.providers.base.DIRECTIONS_DEFAULT_PROFILE", "")
    session = FakeSession(FakeResponse(200, _mapbox_payload()))
    provider = MapboxDirectionsProvider("pk.test", base_url="https://mapbox.local/mapbox", session=session)

    response = asyncio.run(provider.get_directions(_request()))

    call = session.calls[0]
    assert call["url"].startswith("https://mapbox.local/mapbox/walking/13.38886,52.517037;")
    assert call["params"]["access_token"] == "pk.test"
    assert call["params"]["geometries"] == "geojson"
    assert response is not None
    assert response.geometry == [(13.38886, 52.517037), (13.397634, 52.529407)]
    assert [s.instruction for s in response.steps] == ["Walk north", "You have arrived"]
    assert [s.maneuver_type for s in response.steps] == ["depart", "arrive"]


def test_mapbox_without_token_is_unavailable() -> None:
    session = FakeSession()
    provider = MapboxDirectionsProvider("", session=session)

    assert asyncio.run(provider.is_available()) is False
    with pytest.raises(DirectionsAuthError):
        asyncio.run(provider.get_directions(_request()))
    assert session.calls == []


# --- Google ----------------------------------------------------------
def _google_payload() -> Dict[str, Any]:
    overview = polyline.encode([(52.517037, 13.38886), (52.52, 13.39), (52.529407, 13.397634)])
    return {
        "status": "OK",
        "routes": [
            {
                "overview_polyline": {"points": overview},
                "legs": [
                    {
                        "distance": {"value": 700},
                        "duration": {"value": 500},
                        "steps": [
                            {
                                "html_instructions": "Head <b>north</b>",
                                "distance": {"value": 700},
                                "duration": {"value": 500},
                                "polyline": {"points": polyline.encode([(52.517037, 13.38886), (52.52, 13.39)])},
                            }
                        ],
                    },
                    {
                        "distance": {"value": 800},
                        "duration": {"value": 600},
                        "steps": [
                            {
                                "html_instructions": "Turn <b>right</b>",
                                "maneuver": "turn-right",
                                "distance": {"value": 800},
                                "duration": {"value": 600},
                                "polyline": {"points": polyline.encode([(52.52, 13.39), (52.529407, 13.397634)])},
                            }
                        ],
                    },
                ],
            }
        ],
    }


def test_google_request_and_parse() -> None:
    session = FakeSession(FakeResponse(200, _google_payload()))
    provider = GoogleDirectionsProvider("key-123", url="https://google.local/json", session=session)
    middle = Coordinate(13.39, 52.52)

    response = asyncio.run(
        provider.get_directions(_request(BERLIN[0], middle, BERLIN[1], profile="cycling"))
    )

    params = session.calls[0]["params"]
    assert session.calls[0]["url"] == "https://google.local/json"
    assert params["origin"] == "52.517037,13.38886"
    assert params["destination"] == "52.529407,13.397634"
    assert params["waypoints"] == "52.52,13.39"
    assert params["mode"] == "bicycling"
    assert params["key"] == "key-123"

    assert response is not None
    assert response.distance_meters == 1500.0
    assert response.duration_seconds == 1100.0
    assert response.geometry[0] == pytest.approx((13.38886, 52.517037))
    assert [s.instruction for s in response.steps] == ["Head north", "Turn right"]
    assert [s.maneuver_type for s in response.steps] == ["depart", "turn-right"]


def test_google_zero_results_returns_none() -> None:
    session = FakeSession(FakeResponse(200, {"status": "ZERO_RESULTS", "routes": []}))
    provider = GoogleDirectionsProvider("key", session=session)
    assert asyncio.run(provider.get_directions(_request())) is None


def test_google_request_denied_is_auth_error() -> None:
    session = FakeSession(
        FakeResponse(200, {"status": "REQUEST_DENIED", "error_message": "bad key"})
    )
    provider = GoogleDirectionsProvider("key", session=session)
    with pytest.raises(DirectionsAuthError, match="bad key"):
        asyncio.run(provider.get_directions(_request()))


# --- Registry & session ----------------------------------------------
def test_provider_registry() -> None:
    assert PROVIDERS == {
        "osrm": OSRMDirectionsProvider,
        "mapbox": MapboxDirectionsProvider,
        "google": GoogleDirectionsProvider,
    }


def test_default_session_mounts_retrying_adapter() -> None:
    session = create_default_session(max_retries=2)
    adapter = session.get_adapter("https://router.project-osrm.org")

    assert adapter.max_retries.total == 2
    assert 503 in adapter.max_retries.status_forcelist
    assert session.headers["Accept"] == "application/json"
    session.close()
