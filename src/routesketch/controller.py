"""Drawing-session controller: owns the "user is drawing" lifecycle.

The controller holds the only mutable references of the engine: the current
session state (`Idle` or `Active`) and the current `WaypointSequence`
snapshot. Gesture backends, key sources and list displays talk to it
through `dispatch` (or the equivalent methods) and read snapshots back.

Both completion paths, the backend's natural "gesture finished" signal and
the explicit commit key, end in `complete_session`, so waypoint conversion
and splicing behave identically whichever way a gesture ends.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, NamedTuple, Union

from routesketch._state import IDLE, Active, InsertionRequest, SessionState
from routesketch._types import DrawingConfig, GeometryKind, validate_geometry_kind
from routesketch.capture import to_positions
from routesketch.sequence import WaypointSequence

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from routesketch._backends import GestureBackend

logger = logging.getLogger(__name__)


class CompletionResult(NamedTuple):
    """Result from `DrawingSessionController.complete_session`.

    Attributes
    ----------
    outcome : str
        "appended", "inserted", "empty" (no vertices, treated as a cancel),
        "ignored" (no active session) or "stale" (completion addressed to a
        session that already ended).
    n_added : int
        Number of waypoints added to the sequence.
    offset : int or None
        Index of the first new waypoint, or None if nothing was added.

    """

    outcome: str
    n_added: int
    offset: int | None


# =============================================================================
# Inbound events
# =============================================================================


@dataclass(frozen=True)
class BeginDrawing:
    """Request a new drawing session."""

    geometry_kind: GeometryKind
    insertion_request: InsertionRequest | None = None


@dataclass(frozen=True)
class GestureFinished:
    """A gesture finished with ``vertices``.

    ``session_id`` is set by backend callbacks so late deliveries from a
    torn-down session can be recognized; None means "the current session".
    """

    vertices: Sequence[Sequence[float]]
    session_id: int | None = None


@dataclass(frozen=True)
class CommitRequested:
    """Force-complete the active session with the vertices captured so far."""


@dataclass(frozen=True)
class CancelRequested:
    """Abandon the active session."""


SessionEvent = Union[BeginDrawing, GestureFinished, CommitRequested, CancelRequested]


class DrawingSessionController:
    """State machine for drawing gestures onto a waypoint sequence.

    Parameters
    ----------
    backend : GestureBackend, optional
        Pointer-drawing capability started for every session. Without a
        backend, completions must be fed through `complete_session` or
        `dispatch`.
    sequence : WaypointSequence, optional
        Initial route. Defaults to an empty sequence.
    config : DrawingConfig, optional
        Key bindings and label format. Defaults to ``DrawingConfig()``.

    Examples
    --------
    >>> controller = DrawingSessionController()
    >>> controller.begin_session("Line")
    >>> controller.complete_session([(0, 0), (1, 1), (2, 2)])
    CompletionResult(outcome='appended', n_added=3, offset=0)
    >>> controller.sequence.labels()
    ['WP(00)', 'WP(01)', 'WP(02)']
    >>> controller.is_active
    False

    """

    def __init__(
        self,
        backend: GestureBackend | None = None,
        *,
        sequence: WaypointSequence | None = None,
        config: DrawingConfig | None = None,
    ) -> None:
        self.backend = backend
        self.config = config if config is not None else DrawingConfig()
        self._sequence = sequence if sequence is not None else WaypointSequence()
        self._state: SessionState = IDLE
        self._session_ids = itertools.count(1)
        self._subscribers: list[Callable[[WaypointSequence], None]] = []
        self._key_sources: list[Any] = []
        self._queue: deque[SessionEvent] = deque()
        self._dispatching = False

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current session state value."""
        return self._state

    @property
    def is_active(self) -> bool:
        """Whether a drawing session is in progress."""
        return self._state.is_active

    @property
    def sequence(self) -> WaypointSequence:
        """Current waypoint sequence snapshot."""
        return self._sequence

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def begin_session(
        self,
        geometry_kind: GeometryKind,
        insertion_request: InsertionRequest | None = None,
    ) -> None:
        """Start drawing a gesture of ``geometry_kind``.

        An already active session is discarded and replaced; its backend is
        detached first so it cannot deliver into the new session.

        Parameters
        ----------
        geometry_kind : {"Line", "Polygon"}
            Shape the backend should capture.
        insertion_request : InsertionRequest, optional
            Splice the finished gesture before/after a waypoint instead of
            appending it.

        Raises
        ------
        ValueError
            If ``geometry_kind`` is unknown.

        """
        validate_geometry_kind(geometry_kind)
        if isinstance(self._state, Active):
            logger.info(
                "Replacing active %s session %d with a new %s session",
                self._state.geometry_kind,
                self._state.session_id,
                geometry_kind,
            )
            self._teardown_backend()

        session_id = next(self._session_ids)
        self._state = Active(geometry_kind, insertion_request, session_id)

        if self.backend is not None:
            self.backend.start(geometry_kind)
            self.backend.on_gesture_complete(
                partial(self._on_backend_complete, session_id),
            )
        logger.debug(
            "Began %s session %d (insertion=%s)",
            geometry_kind,
            session_id,
            insertion_request,
        )

    def complete_session(
        self,
        raw_vertices: Sequence[Sequence[float]],
    ) -> CompletionResult:
        """Finish the active session with ``raw_vertices``.

        Appends the converted waypoints, or splices them before/after the
        pending insertion target (clamped to the current length). The
        controller returns to idle whatever happens.

        Parameters
        ----------
        raw_vertices : sequence of coordinates
            The gesture's vertices in drawing order.

        Returns
        -------
        CompletionResult
            What happened to the sequence.

        """
        state = self._state
        if not isinstance(state, Active):
            logger.info("Gesture completion ignored: no drawing session is active")
            return CompletionResult("ignored", 0, None)

        self._state = IDLE
        self._teardown_backend()

        try:
            positions = to_positions(raw_vertices)
        except (ValueError, TypeError):
            logger.exception(
                "Discarding %s session %d: malformed gesture vertices",
                state.geometry_kind,
                state.session_id,
            )
            return CompletionResult("empty", 0, None)

        if not positions:
            logger.debug(
                "%s session %d finished without vertices; treated as cancel",
                state.geometry_kind,
                state.session_id,
            )
            return CompletionResult("empty", 0, None)

        request = state.pending_insertion
        if request is None:
            offset = len(self._sequence)
            new_sequence = self._sequence.append(
                positions,
                source_kind=state.geometry_kind,
            )
            outcome = "appended"
        else:
            offset = self._sequence.insertion_offset(
                request.target_index,
                request.side,
            )
            new_sequence = self._sequence.splice(
                offset,
                positions,
                source_kind=state.geometry_kind,
            )
            outcome = "inserted"

        self._set_sequence(new_sequence)
        logger.debug(
            "%s session %d %s %d waypoint(s) at offset %d",
            state.geometry_kind,
            state.session_id,
            outcome,
            len(positions),
            offset,
        )
        return CompletionResult(outcome, len(positions), offset)

    def commit(self) -> CompletionResult:
        """Force-complete the active session with the vertices captured so far."""
        if not self.is_active:
            logger.info("Commit ignored: no drawing session is active")
            return CompletionResult("ignored", 0, None)
        vertices = self.backend.pending_vertices() if self.backend is not None else []
        return self.complete_session(vertices)

    def cancel_session(self) -> None:
        """Discard the active session without touching the sequence.

        Safe to call when idle.
        """
        if isinstance(self._state, Active):
            logger.debug(
                "Cancelled %s session %d",
                self._state.geometry_kind,
                self._state.session_id,
            )
        self._state = IDLE
        self._teardown_backend()

    # ------------------------------------------------------------------
    # Event channel
    # ------------------------------------------------------------------

    def dispatch(self, event: SessionEvent) -> CompletionResult | None:
        """Process one inbound event.

        Events raised while another event is being processed (for example
        by a subscriber reacting to a sequence change) are queued and run
        after it, in arrival order.

        Returns
        -------
        CompletionResult or None
            Result for completion events processed by this call, None for
            other events or when the event was queued.

        """
        self._queue.append(event)
        if self._dispatching:
            return None

        self._dispatching = True
        result: CompletionResult | None = None
        try:
            first = True
            while self._queue:
                outcome = self._handle(self._queue.popleft())
                if first:
                    result = outcome
                    first = False
        finally:
            self._dispatching = False
        return result

    def _handle(self, event: SessionEvent) -> CompletionResult | None:
        if isinstance(event, BeginDrawing):
            self.begin_session(event.geometry_kind, event.insertion_request)
            return None
        if isinstance(event, GestureFinished):
            if event.session_id is not None and not self._is_current(event.session_id):
                logger.info(
                    "Discarding late completion from ended session %d",
                    event.session_id,
                )
                return CompletionResult("stale", 0, None)
            return self.complete_session(event.vertices)
        if isinstance(event, CommitRequested):
            return self.commit()
        if isinstance(event, CancelRequested):
            self.cancel_session()
            return None
        raise TypeError(f"Unknown session event: {event!r}")

    def _is_current(self, session_id: int) -> bool:
        return isinstance(self._state, Active) and self._state.session_id == session_id

    def _on_backend_complete(
        self,
        session_id: int,
        vertices: Sequence[Sequence[float]],
    ) -> None:
        self.dispatch(GestureFinished(vertices, session_id))

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def handle_key(
        self,
        key: str,
        modifiers: Sequence[str] | None = None,
    ) -> str | None:
        """Handle a key press.

        Parameters
        ----------
        key : str
            Key name, e.g. "Enter" or "Escape".
        modifiers : Sequence[str], optional
            Modifier keys held. Any modifier disables the bindings.

        Returns
        -------
        str or None
            Action taken: "commit", "cancel", or None.

        """
        if modifiers:
            return None
        if key == self.config.commit_key and self.is_active:
            self.dispatch(CommitRequested())
            return "commit"
        if key == self.config.cancel_key and self.is_active:
            self.dispatch(CancelRequested())
            return "cancel"
        return None

    def listen_keys(self, source: Any) -> None:
        """Subscribe to a key-event emitter until `close` is called.

        ``source`` must provide ``connect(callback)`` and
        ``disconnect(callback)``, as napari/psygnal emitters do. Emitted
        values may be key strings or objects with ``key`` and optional
        ``modifiers`` attributes.
        """
        source.connect(self._on_key_event)
        self._key_sources.append(source)

    def _on_key_event(self, event: Any) -> None:
        key = getattr(event, "key", event)
        modifiers = getattr(event, "modifiers", None)
        self.handle_key(str(key), list(modifiers) if modifiers else None)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(
        self,
        callback: Callable[[WaypointSequence], None],
    ) -> Callable[[], None]:
        """Call ``callback`` with each new sequence snapshot.

        Returns
        -------
        callable
            Call it to unsubscribe.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_sequence(self, sequence: WaypointSequence) -> None:
        self._sequence = sequence
        for callback in list(self._subscribers):
            callback(sequence)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _teardown_backend(self) -> None:
        if self.backend is not None:
            self.backend.detach()

    def close(self) -> None:
        """Cancel any session and release backend, key and observer hooks."""
        self.cancel_session()
        for source in self._key_sources:
            source.disconnect(self._on_key_event)
        self._key_sources.clear()
        self._subscribers.clear()

    def __enter__(self) -> DrawingSessionController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
