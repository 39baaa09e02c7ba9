"""Interactive waypoint route drawing.

**routesketch** builds an ordered route of waypoints from Line and Polygon
gestures drawn with a pointer, and lets the user re-open the drawing tool to
splice a new gesture before or after any existing waypoint.

Core Classes
------------
DrawingSessionController : Owns the drawing lifecycle (Idle/Active)
    Begin, complete, commit and cancel sessions; one session at a time.
WaypointSequence : Immutable ordered route
    Append and before/after splicing; labels computed from position.
InsertionSelector : Turns "insert before/after waypoint i" into a session.
DrawingConfig : Keys, label format and insertion geometry policy.

Examples
--------
>>> from routesketch import DrawingSessionController, select_insertion
>>> controller = DrawingSessionController()
>>> controller.begin_session("Line")
>>> _ = controller.complete_session([(0, 0), (1, 1), (2, 2)])
>>> controller.begin_session("Polygon", select_insertion(1, "before"))
>>> _ = controller.complete_session([(9, 9), (8, 8)])
>>> [controller.sequence.describe(i) for i in range(3)]
['WP(00): 0.0, 0.0', 'WP(01): 9.0, 9.0', 'WP(02): 8.0, 8.0']

Interactive drawing on a napari canvas (requires the ``gui`` extra)::

    from routesketch import draw_route
    route = draw_route(image)

"""

import logging

from routesketch._backends import GestureBackend, InMemoryGestureBackend
from routesketch._state import Active, Idle, InsertionRequest
from routesketch._types import DrawingConfig, GeometryKind, InsertionSide
from routesketch.app import draw_route
from routesketch.capture import to_positions, vertices_from_geometry
from routesketch.controller import (
    BeginDrawing,
    CancelRequested,
    CommitRequested,
    CompletionResult,
    DrawingSessionController,
    GestureFinished,
)
from routesketch.selector import InsertionSelector, select_insertion
from routesketch.sequence import Waypoint, WaypointSequence, format_label

# Add NullHandler to prevent "No handler found" warnings if user doesn't configure logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Active",
    "BeginDrawing",
    "CancelRequested",
    "CommitRequested",
    "CompletionResult",
    "DrawingConfig",
    "DrawingSessionController",
    "GeometryKind",
    "GestureBackend",
    "GestureFinished",
    "Idle",
    "InMemoryGestureBackend",
    "InsertionRequest",
    "InsertionSelector",
    "InsertionSide",
    "Waypoint",
    "WaypointSequence",
    "draw_route",
    "format_label",
    "select_insertion",
    "to_positions",
    "vertices_from_geometry",
]
