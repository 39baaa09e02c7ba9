"""Shared test fixtures for the routesketch test suite.

Fixture Naming Convention
=========================

- ``{n}_point_sequence``: sequence built from one Line gesture of n vertices
- ``{backend}_controller``: controller wired to the named gesture backend
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from routesketch import (
    DrawingSessionController,
    InMemoryGestureBackend,
    WaypointSequence,
)

# =============================================================================
# Hypothesis Configuration for Performance
# =============================================================================
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,  # Disable deadline in CI (variable performance)
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Set HYPOTHESIS_PROFILE=ci in CI environments for faster tests
_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)


# =============================================================================
# --- Fixtures ---
# =============================================================================
@pytest.fixture
def three_point_sequence() -> WaypointSequence:
    """Sequence from the Line gesture (0,0) -> (1,1) -> (2,2)."""
    return WaypointSequence.from_positions(
        [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)],
        source_kind="Line",
    )


@pytest.fixture
def in_memory_backend() -> InMemoryGestureBackend:
    """Headless gesture backend."""
    return InMemoryGestureBackend()


@pytest.fixture
def in_memory_controller(
    in_memory_backend: InMemoryGestureBackend,
) -> DrawingSessionController:
    """Controller wired to a headless backend, empty route."""
    return DrawingSessionController(in_memory_backend)
