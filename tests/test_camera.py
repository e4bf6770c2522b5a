import dataclasses
from decimal import Decimal

import pytest

from mandelmovie.camera import DrawRequest, translate, with_center, with_max_iterations, zoom_by


def test_derived_fields():
    request = DrawRequest("0.25", "-0.5", 10.9, 500)
    assert request.x == Decimal("0.25")
    assert request.y == Decimal("-0.5")
    assert request.coordinates_precision == 14
    assert request.precision == 20
    assert request.radius < Decimal("2E-10")


def test_rejects_non_positive_budget():
    with pytest.raises(ValueError):
        DrawRequest(0, 0, 0, 0)
    with pytest.raises(ValueError):
        DrawRequest(0, 0, 0, -3)


def test_for_zoom_uses_iteration_policy():
    assert DrawRequest.for_zoom(0, 0, 2).max_iterations == 1200
    assert DrawRequest.for_zoom(0, 0, 2, 300, 0).max_iterations == 300


def test_requests_are_immutable():
    request = DrawRequest(0, 0, 0, 10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.zoom = 3


def test_updates_return_new_requests():
    request = DrawRequest(0, 0, 0, 10)
    deeper = zoom_by(request, 20)
    assert request.zoom == 0
    assert deeper.zoom == 20
    assert deeper.precision == request.precision + 20
    assert with_center(request, "1.5", "-2").x == Decimal("1.5")
    assert with_max_iterations(request, 99).max_iterations == 99


def test_translate_by_pixels():
    request = DrawRequest(0, 0, 0, 10)
    moved = translate(request, 400, -200, 800, 800)
    assert moved.x == Decimal(1)
    assert moved.y == Decimal("-0.5")
    assert moved.zoom == request.zoom


def test_translate_keeps_deep_coordinates_exact():
    x = Decimal("-0.7436438870371587047521915061147746")
    request = DrawRequest(x, 0, 30, 10)
    moved = translate(request, 1, 0, 1000, 1000)
    assert moved.x - x == Decimal("2E-33")


def test_progressive_block_size():
    assert DrawRequest(0, 0, 5, 10).progressive_block_size == 4
    assert DrawRequest(0, 0, 20, 10).progressive_block_size == 16
    assert DrawRequest(0, 0, 45, 10).progressive_block_size == 32
    assert DrawRequest(0, 0, 70, 10).progressive_block_size == 64
    assert DrawRequest(0, 0, 300, 10).progressive_block_size == 128
