"""Tests for the command-line launcher."""

import json
import logging

import pytest

import start
from cab_booking.config import reset_config


@pytest.fixture(autouse=True)
def isolated_logging(monkeypatch):
    monkeypatch.setenv("CAB_LOG_LEVEL", "ERROR")
    reset_config()
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    reset_config()


class TestQuoteCommand:
    def test_quote_prints_breakdown(self, capsys):
        code = start.main(
            ["quote", "--distance", "5000", "--duration", "600", "--at", "2026-03-10 10:00"]
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "Tariff 1 - Daytime" in out
        data = json.loads(out[out.index("{"):])
        assert data["total"] == 17.25
        assert data["units"] == 31.1

    def test_luxury_quote_has_no_tariff_line(self, capsys):
        start.main(["quote", "--distance", "0", "--duration", "3600", "--luxury"])

        out = capsys.readouterr().out
        assert not out.startswith("Tariff")
        assert json.loads(out)["total"] == 80.0


class TestCompileCommand:
    def test_compile_prints_payload(self, tmp_path, capsys):
        path = tmp_path / "itinerary.json"
        path.write_text(
            json.dumps(
                {
                    "pickup": {"address": "Jersey Airport", "lat": 49.2079, "lng": -2.1955},
                    "dropoff": {"address": "Elizabeth Harbour", "lat": 49.1786, "lng": -2.1160},
                    "stops": [{"address": "St Aubin", "lat": 49.1883, "lng": -2.1683}],
                    "rider": {"first_name": "Ada", "last_name": "Lovelace", "phone": "123"},
                    "time": "asap",
                    "passengers": 2,
                }
            ),
            encoding="utf-8",
        )

        assert start.main(["compile", str(path)]) == 0

        payload = json.loads(capsys.readouterr().out)
        route = payload["order"]["route"]
        assert len(route["nodes"]) == 3
        assert len(route["legs"]) == 2
        assert route["nodes"][0]["times"]["arrive"]["target"] == 0
        assert payload["order"]["items"][0]["require"]["seats"] == 2

    def test_load_itinerary_defaults(self, tmp_path):
        path = tmp_path / "itinerary.json"
        path.write_text(
            json.dumps({"pickup": {"address": "A"}, "dropoff": {"address": "B"}}),
            encoding="utf-8",
        )

        itinerary = start.load_itinerary(path, "Europe/Jersey")
        assert itinerary.is_asap
        assert itinerary.stops == ()
        assert itinerary.passenger.display_name() == "Passenger"
        assert not itinerary.pickup.has_coordinates
