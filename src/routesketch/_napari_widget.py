"""napari layers and magicgui dock widget for route drawing.

The widget is a presentation layer only: it reads `WaypointSequence`
snapshots from the controller and sends begin/insert/commit/cancel requests
back to it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from routesketch._napari_backend import xy_to_napari
from routesketch._types import INSERTION_SIDES
from routesketch.controller import (
    BeginDrawing,
    CancelRequested,
    CommitRequested,
    DrawingSessionController,
)
from routesketch.selector import InsertionSelector

if TYPE_CHECKING:
    from collections.abc import Callable

    import napari
    from magicgui.widgets import Container
    from napari.layers import Points, Shapes

    from routesketch._types import DrawingConfig
    from routesketch.sequence import WaypointSequence


WAYPOINT_COLOR: str = "#1f77b4"
"""Blue - waypoint markers."""

ROUTE_COLOR: str = "#ff7f0e"
"""Orange - route path through the waypoints."""

DRAW_COLOR: str = "#2ca02c"
"""Green - gesture being drawn."""


def setup_route_layers(viewer: napari.Viewer) -> tuple[Shapes, Shapes, Points]:
    """Create the drawing, route and waypoint layers.

    Returns
    -------
    drawing_layer : napari.layers.Shapes
        Layer gestures are drawn on (top).
    route_layer : napari.layers.Shapes
        Path through all waypoints.
    waypoints_layer : napari.layers.Points
        One point per waypoint, labeled with its computed label.

    """
    route_layer = viewer.add_shapes(
        name="Route",
        shape_type="path",
        edge_color=ROUTE_COLOR,
        edge_width=3,
    )
    waypoints_layer = viewer.add_points(
        name="Waypoints",
        size=12,
        face_color=WAYPOINT_COLOR,
        border_color="white",
        border_width=2,
        border_width_is_relative=False,
        features={"label": np.array([], dtype=str)},
        text={
            "string": "{label}",
            "size": 10,
            "color": "white",
            "anchor": "upper_left",
            "translation": [-5, 5],
        },
    )
    drawing_layer = viewer.add_shapes(
        name="Drawing",
        edge_color=DRAW_COLOR,
        face_color="transparent",
        edge_width=2,
    )
    return drawing_layer, route_layer, waypoints_layer


def sync_layers_from_sequence(
    sequence: WaypointSequence,
    route_layer: Shapes,
    waypoints_layer: Points,
    config: DrawingConfig,
) -> None:
    """Redraw the route and waypoint layers from a sequence snapshot.

    Labels are recomputed from the current order on every call.
    """
    import pandas as pd

    if len(sequence) == 0:
        waypoints_layer.data = np.empty((0, 2), dtype=np.float64)
        route_layer.data = []
        return

    data = xy_to_napari(sequence.positions[:, :2])
    labels = sequence.labels(config.label_prefix, config.label_width)
    waypoints_layer.data = data
    waypoints_layer.features = pd.DataFrame({"label": labels})
    waypoints_layer.refresh()

    route_layer.data = []
    if len(data) >= 2:
        route_layer.add_paths([data])


def waypoint_choices(
    sequence: WaypointSequence,
    config: DrawingConfig,
) -> tuple[tuple[str, int], ...]:
    """(display text, index) choices for the waypoint list, in route order."""
    return tuple(
        (sequence.describe(i, config.label_prefix, config.label_width), i)
        for i in range(len(sequence))
    )


def session_status_text(controller: DrawingSessionController) -> str:
    """Status line describing the current session state."""
    state = controller.state
    n = len(controller.sequence)
    if not state.is_active:
        return f"Idle - {n} waypoint(s)"
    request = state.pending_insertion
    commit = controller.config.commit_key
    cancel = controller.config.cancel_key
    if request is None:
        target = "append"
    elif n == 0:
        target = f"insert {request.side} start"
    else:
        index = min(max(request.target_index, 0), n - 1)
        label = controller.sequence.label_of(
            index,
            controller.config.label_prefix,
            controller.config.label_width,
        )
        target = f"insert {request.side} {label}"
    return (
        f"Drawing {state.geometry_kind} ({target}) - "
        f"double-click or {commit} to finish, {cancel} to cancel"
    )


def bind_session_keys(
    drawing_layer: Shapes,
    controller: DrawingSessionController,
) -> Callable[[], None]:
    """Bind the commit and cancel keys on the drawing layer.

    The bindings go on the layer instance: the Shapes class keymap maps
    Enter and Escape to napari's own finish-drawing action, and instance
    bindings take precedence over it.

    Returns
    -------
    callable
        Call it to remove both bindings.

    """
    config = controller.config

    def on_commit_key(layer: Shapes) -> None:
        controller.handle_key(config.commit_key)

    def on_cancel_key(layer: Shapes) -> None:
        controller.handle_key(config.cancel_key)

    drawing_layer.bind_key(config.commit_key, on_commit_key, overwrite=True)
    drawing_layer.bind_key(config.cancel_key, on_cancel_key, overwrite=True)

    def unbind() -> None:
        drawing_layer.bind_key(config.commit_key, None)
        drawing_layer.bind_key(config.cancel_key, None)

    return unbind


def create_route_widget(
    viewer: napari.Viewer,
    controller: DrawingSessionController,
    route_layer: Shapes,
    waypoints_layer: Points,
) -> Container:
    """Create the route drawing dock widget.

    Parameters
    ----------
    viewer : napari.Viewer
        The napari viewer instance.
    controller : DrawingSessionController
        Controller owning the session and the sequence.
    route_layer, waypoints_layer : napari layers
        Display layers from `setup_route_layers`.

    Returns
    -------
    Container
        Magicgui container with drawing and insertion controls.

    """
    from magicgui.widgets import ComboBox, Container, Label, PushButton, Select

    config = controller.config
    selector = InsertionSelector(controller)

    instructions = Label(
        value=(
            "─── DRAWING ───\n"
            "• Draw Line / Draw Polygon, click points on the map\n"
            f"• Double-click or {config.commit_key} to finish\n"
            f"• {config.cancel_key} to cancel\n"
            "\n"
            "─── INSERTING ───\n"
            "• Select a waypoint, choose before/after\n"
            "• Insert at Selected, then draw the new shape\n"
        ),
    )
    status = Label(value=session_status_text(controller))
    line_btn = PushButton(text="Draw Line")
    polygon_btn = PushButton(text="Draw Polygon")
    waypoint_list = Select(choices=[], label="Waypoints:", allow_multiple=False)
    side_selector = ComboBox(
        choices=list(INSERTION_SIDES),
        value="before",
        label="Insert:",
    )
    insert_btn = PushButton(text="Insert at Selected", enabled=False)
    finish_btn = PushButton(text=f"Finish ({config.commit_key})")
    cancel_btn = PushButton(text=f"Cancel ({config.cancel_key})")

    def refresh(sequence: WaypointSequence | None = None) -> None:
        sequence = sequence if sequence is not None else controller.sequence
        sync_layers_from_sequence(sequence, route_layer, waypoints_layer, config)
        waypoint_list.choices = waypoint_choices(sequence, config)
        refresh_status()

    def refresh_status() -> None:
        status.value = session_status_text(controller)
        viewer.status = status.value

    def selected_index() -> int | None:
        selection = waypoint_list.value
        # Select returns a list even with allow_multiple=False
        if isinstance(selection, list):
            selection = selection[0] if selection else None
        return selection if isinstance(selection, int) else None

    @line_btn.clicked.connect
    def draw_line() -> None:
        controller.dispatch(BeginDrawing("Line"))
        refresh_status()

    @polygon_btn.clicked.connect
    def draw_polygon() -> None:
        controller.dispatch(BeginDrawing("Polygon"))
        refresh_status()

    @waypoint_list.changed.connect
    def on_waypoint_selected(selection: Any) -> None:
        insert_btn.enabled = selected_index() is not None

    @insert_btn.clicked.connect
    def insert_at_selected() -> None:
        index = selected_index()
        if index is None:
            return
        selector.request_insertion(index, side_selector.value)
        refresh_status()

    @finish_btn.clicked.connect
    def finish() -> None:
        controller.dispatch(CommitRequested())
        refresh_status()

    @cancel_btn.clicked.connect
    def cancel() -> None:
        controller.dispatch(CancelRequested())
        refresh_status()

    controller.subscribe(refresh)
    refresh()

    return Container(
        widgets=[
            instructions,
            status,
            line_btn,
            polygon_btn,
            waypoint_list,
            side_selector,
            insert_btn,
            finish_btn,
            cancel_btn,
        ],
        labels=False,
    )
