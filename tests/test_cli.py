import json
import logging

import pytest

import pasturepickup.cli as cli
from pasturepickup.domain.models import Vendor
from pasturepickup.storage.repository import InMemoryVendorRepository


@pytest.fixture(autouse=True)
def _repo(monkeypatch):
    vendors = [
        Vendor(id="a1", name="Austin One", city="Austin", state_code="TX", latitude=30.27, longitude=-97.74,
               service_types=["Dead Horse Removal"], status="Active"),
        Vendor(id="h1", name="Houston One", city="Houston", state_code="TX", latitude=29.76, longitude=-95.37,
               service_types=["Dead Cattle Removal"], status="Active"),
    ]
    monkeypatch.setattr(cli, "build_repository", lambda settings: InMemoryVendorRepository(vendors))


def test_search_json(capsys):
    assert cli.main(["search", "--lat", "30.27", "--lng", "-97.74", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total"] == 1
    assert data["items"][0]["id"] == "a1"


def test_search_text_output(capsys):
    assert cli.main(["search", "--lat", "30.27", "--lng", "-97.74"]) == 0
    out = capsys.readouterr().out
    assert "1 vendors" in out
    assert "Austin One" in out


def test_region_city_and_service(capsys):
    assert cli.main(["region", "texas", "austin", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [v["id"] for v in data["local"]] == ["a1"]
    assert [v["id"] for v in data["nearby"]] == ["h1"]

    assert cli.main(["region", "texas", "dead-horse-removal", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    # Loose matching: "dead" also matches "Dead Cattle Removal".
    assert [v["id"] for v in data["local"]] == ["a1", "h1"]


def test_unknown_region_exits_with_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["region", "atlantis"])
    assert exc.value.code == 2
    assert "state not found: atlantis" in capsys.readouterr().err


def test_paths_json(capsys):
    assert cli.main(["paths", "--json"]) == 0
    paths = json.loads(capsys.readouterr().out)
    assert "/texas" in paths


def test_quality_report(capsys):
    assert cli.main(["quality-report"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["vendor_count"] == 2


def test_region_city_with_service_option(capsys):
    assert cli.main(["region", "texas", "houston", "--service", "dead-cattle-removal", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [v["id"] for v in data["local"]] == ["h1"]
    assert [v["id"] for v in data["nearby"]] == ["a1"]


@pytest.fixture
def _root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.setLevel(level)
    root.handlers[:] = handlers


def test_json_output_runs_quietly(capsys, _root_logger):
    assert cli.main(["paths", "--json"]) == 0
    assert _root_logger.level == logging.WARNING
    logging.getLogger("pasturepickup.test").info("not shown")
    assert capsys.readouterr().err == ""


def test_log_level_flag_wins_over_json_default(_root_logger):
    assert cli.main(["--log-level", "DEBUG", "paths", "--json"]) == 0
    assert _root_logger.level == logging.DEBUG


def test_bad_log_level_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--log-level", "chatty", "paths"])
    assert exc.value.code == 2
    assert "Unknown log level" in capsys.readouterr().err
