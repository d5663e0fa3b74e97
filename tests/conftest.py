"""Shared pytest fixtures and configuration."""

import math
from collections.abc import Iterator

import pytest

from kerf.config import Settings
from kerf.geometry import Arc2D, Ellipse2D, Line2D, Point2D
from kerf.utils.logging import clear_correlation_context, configure_logging


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def origin() -> Point2D:
    return Point2D(x=0.0, y=0.0)


@pytest.fixture
def unit_line() -> Line2D:
    """Horizontal segment (0, 0) - (100, 0)."""
    return Line2D(start=Point2D(x=0.0, y=0.0), end=Point2D(x=100.0, y=0.0))


@pytest.fixture
def quarter_arc() -> Arc2D:
    """CCW quarter circle of radius 10 at the origin, from 0 to pi/2."""
    return Arc2D(
        center=Point2D(x=0.0, y=0.0),
        radius=10.0,
        start_angle=0.0,
        end_angle=math.pi / 2,
        counter_clockwise=True,
    )


@pytest.fixture
def rotated_ellipse() -> Ellipse2D:
    """Full ellipse, semi-axes 10 and 5, major axis at 30 degrees."""
    angle = math.radians(30.0)
    return Ellipse2D(
        center=Point2D(x=2.0, y=-3.0),
        major_axis_end=Point2D(
            x=2.0 + 10.0 * math.cos(angle), y=-3.0 + 10.0 * math.sin(angle)
        ),
        minor_axis_ratio=0.5,
    )
