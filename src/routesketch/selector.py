"""Bridge a "insert before/after waypoint i" choice into a drawing session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routesketch._state import InsertionRequest

if TYPE_CHECKING:
    from routesketch._types import GeometryKind, InsertionSide
    from routesketch.controller import DrawingSessionController

logger = logging.getLogger(__name__)

_FALLBACK_KIND: GeometryKind = "Polygon"


def select_insertion(index: int, side: InsertionSide) -> InsertionRequest:
    """Build the insertion request for waypoint ``index``.

    Pure construction; no session is started.

    Examples
    --------
    >>> select_insertion(1, "after")
    InsertionRequest(target_index=1, side='after')

    """
    return InsertionRequest(index, side)


class InsertionSelector:
    """Starts insertion-triggered sessions on a controller.

    The geometry kind of such sessions follows
    ``controller.config.insertion_kind``: a fixed kind, or "match" to reuse
    the kind that produced the target waypoint.

    Parameters
    ----------
    controller : DrawingSessionController
        Controller whose sequence is read and whose sessions are started.

    """

    def __init__(self, controller: DrawingSessionController) -> None:
        self.controller = controller

    def geometry_kind_for(self, index: int) -> GeometryKind:
        """Geometry kind an insertion at ``index`` should be drawn with."""
        policy = self.controller.config.insertion_kind
        if policy != "match":
            return policy

        sequence = self.controller.sequence
        if len(sequence) == 0:
            return _FALLBACK_KIND
        clamped = min(max(index, 0), len(sequence) - 1)
        source_kind = sequence.at(clamped).source_kind
        return source_kind if source_kind is not None else _FALLBACK_KIND

    def select(self, index: int, side: InsertionSide) -> InsertionRequest:
        """Same as `select_insertion`."""
        return select_insertion(index, side)

    def request_insertion(self, index: int, side: InsertionSide) -> InsertionRequest:
        """Build the request and immediately begin a session with it.

        Returns
        -------
        InsertionRequest
            The request handed to ``begin_session``.

        """
        request = self.select(index, side)
        geometry_kind = self.geometry_kind_for(request.target_index)
        logger.debug(
            "Insertion %s waypoint %d requested; drawing %s",
            request.side,
            request.target_index,
            geometry_kind,
        )
        self.controller.begin_session(geometry_kind, request)
        return request
