import pytest

from mandelmovie.camera import DrawRequest
from mandelmovie.movie.planner import MovieStep
from mandelmovie.palette.factory import create_palette


@pytest.fixture
def shallow_request():
    """Whole set in view, cheap to iterate in doubles."""
    return DrawRequest("-0.5", "0", 0.0, 60)


@pytest.fixture
def deep_request():
    """Past the double threshold, so the mpmath engine runs."""
    return DrawRequest(
        "-0.743643887037158704752191506114774",
        "0.131825904205311970493132056385139",
        13.0,
        40,
    )


@pytest.fixture
def palette():
    return create_palette("RandomColor", 1, 10)


@pytest.fixture
def step_factory(palette):
    def make(x, y, zoom, step_palette=None):
        return MovieStep(x, y, zoom, step_palette or palette)
    return make
