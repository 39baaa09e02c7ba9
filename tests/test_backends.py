"""Tests for the headless gesture backend."""

import pytest

from routesketch import (
    DrawingConfig,
    DrawingSessionController,
    GestureBackend,
    InMemoryGestureBackend,
)


class TestInMemoryGestureBackend:
    """Tests for InMemoryGestureBackend."""

    def test_satisfies_protocol(self):
        """The headless backend is a GestureBackend."""
        assert isinstance(InMemoryGestureBackend(), GestureBackend)

    def test_starts_detached(self):
        """A fresh backend is not attached."""
        backend = InMemoryGestureBackend()

        assert not backend.is_attached
        assert backend.pending_vertices() == []

    def test_vertices_ignored_when_detached(self):
        """Clicks outside a session are dropped."""
        backend = InMemoryGestureBackend()

        backend.add_vertex((1, 1))

        assert backend.pending_vertices() == []

    def test_add_vertex_converts_to_float_tuple(self):
        """Vertices are stored as float tuples."""
        backend = InMemoryGestureBackend()
        backend.start("Line")

        backend.add_vertex([1, 2])

        assert backend.pending_vertices() == [(1.0, 2.0)]

    def test_pending_vertices_is_a_copy(self):
        """Callers cannot mutate captured vertices."""
        backend = InMemoryGestureBackend()
        backend.start("Line")
        backend.add_vertex((0, 0))

        backend.pending_vertices().clear()

        assert len(backend.pending_vertices()) == 1

    def test_finish_delivers_and_clears(self):
        """finish() hands the vertices to the callback."""
        backend = InMemoryGestureBackend()
        received = []
        backend.start("Polygon")
        backend.on_gesture_complete(received.append)
        backend.trace([(0, 0), (1, 0), (1, 1)])

        assert backend.finish() is True
        assert received == [[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]]
        assert backend.pending_vertices() == []

    def test_finish_without_callback(self):
        """No callback means nothing is delivered."""
        backend = InMemoryGestureBackend()
        backend.start("Line")

        assert backend.finish() is False

    def test_detach_drops_callback(self):
        """Late finishes after detach are not delivered."""
        backend = InMemoryGestureBackend()
        received = []
        backend.start("Line")
        backend.on_gesture_complete(received.append)
        backend.add_vertex((0, 0))

        backend.detach()
        backend.detach()

        assert backend.finish() is False
        assert received == []
        assert not backend.is_attached

    def test_start_resets_previous_gesture(self):
        """Restarting discards vertices and callback."""
        backend = InMemoryGestureBackend()
        backend.start("Line")
        backend.on_gesture_complete(lambda vertices: None)
        backend.add_vertex((0, 0))

        backend.start("Polygon")

        assert backend.pending_vertices() == []
        assert backend.finish() is False

    def test_trace_polygon_geometry(self):
        """Shapely polygons are traced without the closing vertex."""
        shapely = pytest.importorskip("shapely")
        backend = InMemoryGestureBackend()
        backend.start("Polygon")

        backend.trace(shapely.Polygon([(0, 0), (2, 0), (2, 2)]))

        assert backend.pending_vertices() == [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0)]

    def test_trace_polygon_with_closing_vertex(self):
        """include_closing_vertex keeps the repeated first vertex."""
        shapely = pytest.importorskip("shapely")
        backend = InMemoryGestureBackend(include_closing_vertex=True)
        backend.start("Polygon")

        backend.trace(shapely.Polygon([(0, 0), (2, 0), (2, 2)]))

        assert len(backend.pending_vertices()) == 4


class TestClosingVertexConfig:
    """DrawingConfig.include_closing_vertex reaches the waypoints."""

    def _polygon_waypoint_count(self, config):
        backend = InMemoryGestureBackend.from_config(config)
        controller = DrawingSessionController(backend, config=config)
        controller.begin_session("Polygon")
        backend.trace([(0, 0), (4, 0), (4, 4)])
        backend.finish()
        return len(controller.sequence)

    def test_default_keeps_ring_open(self):
        """By default a triangle gives three waypoints."""
        assert self._polygon_waypoint_count(DrawingConfig()) == 3

    def test_closing_vertex_adds_waypoint(self):
        """include_closing_vertex=True repeats the first vertex."""
        config = DrawingConfig(include_closing_vertex=True)

        assert self._polygon_waypoint_count(config) == 4

    def test_closing_vertex_on_commit(self):
        """The commit path delivers the closed ring as well."""
        config = DrawingConfig(include_closing_vertex=True)
        backend = InMemoryGestureBackend.from_config(config)
        controller = DrawingSessionController(backend, config=config)
        controller.begin_session("Polygon")
        backend.trace([(0, 0), (4, 0), (4, 4)])

        controller.commit()

        assert controller.sequence.at(3).position == (0.0, 0.0)

    def test_lines_are_not_closed(self):
        """Only polygon gestures are closed."""
        config = DrawingConfig(include_closing_vertex=True)
        backend = InMemoryGestureBackend.from_config(config)
        controller = DrawingSessionController(backend, config=config)
        controller.begin_session("Line")
        backend.trace([(0, 0), (4, 0), (4, 4)])
        backend.finish()

        assert len(controller.sequence) == 3

    def test_shapely_ring_is_not_doubled(self):
        """A ring that is already closed is delivered unchanged."""
        shapely = pytest.importorskip("shapely")
        backend = InMemoryGestureBackend.from_config(
            DrawingConfig(include_closing_vertex=True),
        )
        backend.start("Polygon")

        backend.trace(shapely.Polygon([(0, 0), (2, 0), (2, 2)]))

        assert len(backend.pending_vertices()) == 4
