"""Interactive route drawing entry point.

Examples
--------
>>> from routesketch import draw_route
>>> route = draw_route()  # doctest: +SKIP
>>> route.to_dataframe()  # doctest: +SKIP

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routesketch._napari_backend import NapariShapesBackend
from routesketch._napari_widget import (
    bind_session_keys,
    create_route_widget,
    setup_route_layers,
)
from routesketch._types import DrawingConfig
from routesketch.controller import DrawingSessionController
from routesketch.sequence import WaypointSequence

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

__all__ = ["draw_route"]


def draw_route(
    image: NDArray[np.uint8] | None = None,
    *,
    initial_positions: NDArray[np.float64] | None = None,
    config: DrawingConfig | None = None,
) -> WaypointSequence:
    """Launch an interactive napari session to draw a waypoint route.

    Users can:

    - Draw a Line or Polygon; each vertex becomes a waypoint appended to
      the route
    - Select a waypoint, pick before/after, and draw a new shape whose
      vertices are spliced in at that point
    - Finish the current shape with the commit key even if napari has not
      finished it, or cancel it

    Parameters
    ----------
    image : NDArray, optional
        Background image (H, W) or (H, W, 3). Waypoint coordinates are in
        image pixels with x = column, y = row.
    initial_positions : NDArray, optional
        Existing route, shape (n_waypoints, 2) as (x, y).
    config : DrawingConfig, optional
        Keys, label format and insertion geometry policy.

    Returns
    -------
    WaypointSequence
        The route as it was when the viewer closed.

    Raises
    ------
    ImportError
        If napari is not installed.

    Notes
    -----
    Blocks until the viewer is closed. The commit and cancel keys are bound
    on the drawing layer only for the duration of this call.

    """
    try:
        import napari
    except ImportError as e:
        raise ImportError(
            "napari is required for interactive route drawing. "
            "Install with: pip install routesketch[gui]",
        ) from e

    config = config if config is not None else DrawingConfig()
    sequence = (
        WaypointSequence.from_positions(initial_positions)
        if initial_positions is not None
        else WaypointSequence()
    )

    viewer = napari.Viewer(title="Route Sketch")
    if image is not None:
        viewer.add_image(image, name="background", rgb=image.ndim == 3)

    drawing_layer, route_layer, waypoints_layer = setup_route_layers(viewer)
    backend = NapariShapesBackend.from_config(drawing_layer, config)
    controller = DrawingSessionController(backend, sequence=sequence, config=config)

    widget = create_route_widget(viewer, controller, route_layer, waypoints_layer)
    viewer.window.add_dock_widget(widget, name="Route", area="right")

    unbind_keys = bind_session_keys(drawing_layer, controller)
    viewer.layers.selection.active = drawing_layer

    try:
        napari.run()
    finally:
        unbind_keys()
        result = controller.sequence
        controller.close()

    logger.debug("Route drawing finished with %d waypoint(s)", len(result))
    return result
