import json
from decimal import Decimal

import pytest

from mandelmovie.palette.factory import PaletteType, UnknownPaletteError
from mandelmovie.poi.catalog import STANDARD_POINTS_OF_INTEREST, find_point_of_interest
from mandelmovie.poi.model import (
    FORMAT_VERSION,
    PointOfInterest,
    PointOfInterestFormatError,
    load_point_of_interest,
    save_point_of_interest,
)

DEEP_X = "-1.749721929742338571328512183204793465117897644259904770681747353482121708665972660839800936317633296441980469665826685985285388"


def _document(**overrides):
    data = {
        "version": "1.1.0",
        "name": "Snail",
        "x": DEEP_X,
        "y": "0.000029016647753686084545360932647113026525960648184743451989371745927172996759411354785502498950354939680922076169129062986700",
        "zoom": 10.0,
        "paletteType": "Fire",
        "paletteSeed": 4,
        "paletteStep": 20,
        "maxIterationsConst": 2000,
        "maxIterationsLinear": 50,
    }
    data.update(overrides)
    return data


def test_save_and_load_keep_every_digit(tmp_path):
    poi = PointOfInterest.from_dict(_document())
    path = save_point_of_interest(poi, str(tmp_path / "pois" / "snail.json"))
    loaded = load_point_of_interest(path)
    assert loaded == poi
    assert format(loaded.x, "f") == DEEP_X
    assert loaded.palette_type is PaletteType.FIRE

    raw = json.loads((tmp_path / "pois" / "snail.json").read_text())
    assert raw["version"] == FORMAT_VERSION
    assert isinstance(raw["x"], str)


def test_rejects_other_major_versions():
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(_document(version="2.0.0"))
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(_document(version=None))


def test_iteration_defaults():
    data = _document()
    del data["maxIterationsConst"]
    del data["maxIterationsLinear"]
    poi = PointOfInterest.from_dict(data)
    assert (poi.max_iterations_const, poi.max_iterations_linear) == (1000, 1000)

    data = _document()
    del data["maxIterationsLinear"]
    poi = PointOfInterest.from_dict(data)
    assert (poi.max_iterations_const, poi.max_iterations_linear) == (2000, 0)
    assert poi.max_iterations(50) == 2000


def test_missing_and_malformed_fields():
    data = _document()
    del data["zoom"]
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(data)
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(_document(x="not a number"))
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(_document(x=0.25))
    with pytest.raises(PointOfInterestFormatError):
        PointOfInterest.from_dict(["not", "an", "object"])
    with pytest.raises(UnknownPaletteError):
        PointOfInterest.from_dict(_document(paletteType="Sunset"))


def test_load_rejects_broken_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    with pytest.raises(PointOfInterestFormatError):
        load_point_of_interest(str(path))


def test_draw_request_and_palette():
    poi = PointOfInterest.from_dict(_document())
    request = poi.draw_request()
    assert request.x == Decimal(DEEP_X)
    assert request.max_iterations == 2500
    assert poi.draw_request(20).max_iterations == 3000
    assert poi.palette().color_for(7) == poi.palette().color_for(7)
    assert poi.replace(zoom=3).zoom == 3.0


def test_catalog():
    names = [poi.name for poi in STANDARD_POINTS_OF_INTEREST]
    assert names[0] == "Initial"
    assert len(set(names)) == len(names)
    assert find_point_of_interest("snail shell").name == "Snail Shell"
    assert find_point_of_interest("nowhere") is None
    for poi in STANDARD_POINTS_OF_INTEREST:
        assert poi.palette() is not None
        assert poi.draw_request().max_iterations > 0
