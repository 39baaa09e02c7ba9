"""End-to-end drawing scenarios through the headless backend."""

import pytest

from routesketch import (
    DrawingSessionController,
    InMemoryGestureBackend,
    InsertionSelector,
)


@pytest.fixture
def session():
    """Controller, backend and selector wired together."""
    backend = InMemoryGestureBackend()
    controller = DrawingSessionController(backend)
    return controller, backend, InsertionSelector(controller)


def _draw(backend, vertices):
    backend.trace(vertices)
    backend.finish()


class TestDrawingScenarios:
    """User-level flows: draw, insert, cancel."""

    def test_draw_single_line(self, session):
        """A three-vertex line becomes WP(00)..WP(02)."""
        controller, backend, _ = session

        controller.begin_session("Line")
        _draw(backend, [(0, 0), (1, 1), (2, 2)])

        assert controller.sequence.labels() == ["WP(00)", "WP(01)", "WP(02)"]
        assert not controller.is_active

    def test_insert_polygon_before_waypoint(self, session):
        """Inserted block lands before the target and everything relabels."""
        controller, backend, selector = session
        controller.begin_session("Line")
        _draw(backend, [(0, 0), (1, 1), (2, 2)])

        selector.request_insertion(1, "before")
        assert controller.state.geometry_kind == "Polygon"
        _draw(backend, [(9, 9), (8, 8)])

        sequence = controller.sequence
        assert [wp.position for wp in sequence] == [
            (0.0, 0.0),
            (9.0, 9.0),
            (8.0, 8.0),
            (1.0, 1.0),
            (2.0, 2.0),
        ]
        assert sequence.labels() == [
            "WP(00)",
            "WP(01)",
            "WP(02)",
            "WP(03)",
            "WP(04)",
        ]
        assert sequence.describe(3) == "WP(03): 1.0, 1.0"

    def test_insert_after_last_then_append(self, session):
        """Insert after the last waypoint, then a plain append."""
        controller, backend, selector = session
        controller.begin_session("Line")
        _draw(backend, [(0, 0), (1, 1)])

        selector.request_insertion(1, "after")
        _draw(backend, [(5, 5)])
        controller.begin_session("Line")
        _draw(backend, [(6, 6)])

        assert [wp.position[0] for wp in controller.sequence] == [0.0, 1.0, 5.0, 6.0]

    def test_commit_key_on_insertion_session(self, session):
        """The commit key honors a pending insertion."""
        controller, backend, selector = session
        controller.begin_session("Line")
        _draw(backend, [(0, 0), (1, 1), (2, 2)])

        selector.request_insertion(0, "after")
        backend.add_vertex((7, 7))
        assert controller.handle_key("Enter") == "commit"

        assert controller.sequence.at(1).position == (7.0, 7.0)
        assert len(controller.sequence) == 4

    def test_begin_then_cancel(self, session):
        """Cancel leaves the route untouched."""
        controller, backend, _ = session
        controller.begin_session("Line")
        _draw(backend, [(0, 0)])
        before = controller.sequence

        controller.begin_session("Polygon")
        backend.add_vertex((3, 3))
        assert controller.handle_key("Escape") == "cancel"

        assert controller.sequence is before
        assert not controller.is_active
        assert backend.finish() is False

    def test_polygon_from_shapely(self, session):
        """Tracing a shapely polygon adds its ring without the closing vertex."""
        shapely = pytest.importorskip("shapely")
        controller, backend, _ = session

        controller.begin_session("Polygon")
        _draw(backend, shapely.Polygon([(0, 0), (4, 0), (4, 4), (0, 4)]))

        assert len(controller.sequence) == 4
        assert controller.sequence.to_linestring().length == pytest.approx(12.0)
