"""
ListeningSession - State machine owning one speech recognition session.

The session acquires the capture backend, turns its callbacks into immutable
events, matches transcripts against the current target and recovers from
recognizer errors within a bounded error budget.

State Machine:
- IDLE       -- start()                      -> ACTIVE (error_count=0)
- ACTIVE     -- transcript(text)             -> ACTIVE (advance cursor on match)
- ACTIVE     -- recognizer error             -> ACTIVE | RECOVERING(n) | FAILED
- RECOVERING -- restart timer fires          -> ACTIVE (error_count=n) | FAILED
- ACTIVE/RECOVERING -- stop() or start()     -> IDLE
- FAILED     -- stop()                       -> IDLE
- FAILED     -- start()                      -> ACTIVE (error_count=0)

All mutations run under one re-entrant lock. Observers are notified outside
the lock with (old_state, new_state). Delivery of a transition stops once a
newer transition has happened; observers that paint state should still read
current_state() when they run.
"""
import logging
import threading
from typing import Callable, List, Optional, Tuple, Union

from numberexplorer.errors import AcquisitionError, PermissionDeniedError
from numberexplorer.NumeralInterpreter import NumeralInterpreter
from numberexplorer.protocols import CaptureBackend, CaptureHandle
from numberexplorer.RecoveryPolicy import RecoveryPolicy
from numberexplorer.Scheduler import ScheduledCall, TimerScheduler
from numberexplorer.TargetSequence import TargetSequence
from numberexplorer.types import (
    ErrorBudget,
    LearningMode,
    RecognizerError,
    RecognizerFailed,
    RecoveryAction,
    RestartDue,
    SessionState,
    SessionStatus,
    TargetItem,
    TranscriptReceived,
)

logger = logging.getLogger(__name__)

SessionEvent = Union[TranscriptReceived, RecognizerFailed, RestartDue]
StateObserver = Callable[[SessionState, SessionState], None]


class _SessionSink:
    """SpeechEventSink handed to the capture backend for one acquisition.

    Events carry the generation they were created for; the session drops
    events whose generation is no longer current.
    """

    def __init__(self, session: "ListeningSession", generation: int):
        self._session = session
        self._generation = generation

    def on_transcript(self, text: str, is_final: bool) -> None:
        self._session.handle_event(TranscriptReceived(text, is_final, self._generation))

    def on_error(self, domain: str, code: int, message: str) -> None:
        error = RecognizerError(domain=domain, code=code, message=message)
        self._session.handle_event(RecognizerFailed(error, self._generation))


class ListeningSession:
    """
    Owns the session state, the error budget and the capture resource.

    This is the only component that moves the TargetSequence cursor.

    Args:
        sequence: Targets to work through; outlives start/stop cycles
        capture: Backend that acquires the microphone and recognizer
        interpreter: Transcript interpreter; built from mode when omitted
        policy: Recovery rules; defaults to 3 errors / 0.5s restart delay
        scheduler: Deferred callback runner for the restart delay
        mode: Learning mode selecting the spelled-number locale
    """

    def __init__(self,
                 sequence: TargetSequence,
                 capture: CaptureBackend,
                 interpreter: Optional[NumeralInterpreter] = None,
                 policy: Optional[RecoveryPolicy] = None,
                 scheduler: Optional[TimerScheduler] = None,
                 mode: LearningMode = LearningMode.ENGLISH):
        self._sequence = sequence
        self._capture = capture
        self._mode = mode
        self._interpreter = interpreter or NumeralInterpreter(mode.locale)
        self._policy = policy or RecoveryPolicy()
        self._scheduler = scheduler or TimerScheduler()

        self._state = SessionState()
        self._budget: ErrorBudget = self._policy.fresh_budget()
        self._handle: Optional[CaptureHandle] = None
        self._pending_restart: Optional[ScheduledCall] = None
        self._generation = 0
        self._transition_seq = 0

        self._lock = threading.RLock()
        self._observers: List[StateObserver] = []

    # ------------------------------------------------------------------
    # Read-only surface for presentation
    # ------------------------------------------------------------------

    def current_state(self) -> SessionState:
        with self._lock:
            return self._state

    def sequence_snapshot(self) -> Tuple[TargetItem, ...]:
        return self._sequence.snapshot()

    def error_budget(self) -> ErrorBudget:
        with self._lock:
            return self._budget

    @property
    def is_listening(self) -> bool:
        return self.current_state().is_listening

    @property
    def mode(self) -> LearningMode:
        with self._lock:
            return self._mode

    def register_observer(self, observer: StateObserver) -> None:
        """
        Args:
            observer: Callable that receives (old_state, new_state)
        """
        with self._lock:
            self._observers.append(observer)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle_listening(self) -> None:
        """Start when not listening, stop when listening."""
        self.start()

    def start(self) -> None:
        """Begin listening; acts as stop() when already listening."""
        self._run(self._start_locked)

    def stop(self) -> None:
        """Release all capture resources and return to IDLE.

        Idempotent and never raises. Pending restarts are cancelled and events
        still in flight from the released capture are discarded.
        """
        self._run(self._stop_locked)

    def set_mode(self, mode: LearningMode) -> None:
        """Switch learning mode; affects how later transcripts are interpreted."""
        with self._lock:
            if mode is self._mode:
                return
            self._mode = mode
            self._interpreter = NumeralInterpreter(mode.locale)
        logger.info("ListeningSession: mode set to %s", mode.value)

    def on_availability_changed(self, available: bool) -> None:
        """Recognizer availability callback; losing the recognizer stops the session."""
        if not available:
            logger.warning("ListeningSession: recognizer unavailable, stopping")
            self.stop()

    def handle_event(self, event: SessionEvent) -> None:
        """Process one event from the capture backend or the restart timer."""
        self._run(lambda: self._dispatch_locked(event))

    # ------------------------------------------------------------------
    # Transition helpers (lock held)
    # ------------------------------------------------------------------

    def _run(self, action: Callable[[], None]) -> None:
        with self._lock:
            old_state = self._state
            action()
            new_state = self._state
            observers = list(self._observers)
            if new_state != old_state:
                self._transition_seq += 1
            seq = self._transition_seq

        if new_state != old_state:
            logger.info(
                "ListeningSession: %s -> %s (errors=%s)",
                old_state.status.name, new_state.status.name, new_state.error_count
            )
            self._notify_observers(observers, old_state, new_state, seq)

    def _start_locked(self) -> None:
        if self._state.is_listening:
            self._stop_locked()
            return

        self._cancel_restart_locked()
        self._release_locked()
        self._budget = self._policy.fresh_budget()

        try:
            self._acquire_locked()
        except PermissionDeniedError as e:
            logger.error("ListeningSession: microphone permission denied: %s", e)
            self._state = SessionState(SessionStatus.IDLE, 0, last_failure=f"Permission denied: {e}")
            return
        except AcquisitionError as e:
            logger.error("ListeningSession: could not start capture: %s", e)
            self._state = SessionState(SessionStatus.FAILED, 0, last_failure=f"Capture unavailable: {e}")
            return

        self._state = SessionState(SessionStatus.ACTIVE, 0)

    def _stop_locked(self) -> None:
        self._generation += 1
        self._cancel_restart_locked()
        self._release_locked()

        if self._state.status is SessionStatus.IDLE:
            return

        self._budget = self._policy.fresh_budget()
        self._state = SessionState(SessionStatus.IDLE, 0)

    def _acquire_locked(self) -> None:
        self._generation += 1
        sink = _SessionSink(self, self._generation)
        self._handle = self._capture.request_start(sink)

    def _release_locked(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            self._capture.release(handle)
        except Exception:
            logger.exception("ListeningSession: error releasing capture %s", handle)

    def _cancel_restart_locked(self) -> None:
        pending, self._pending_restart = self._pending_restart, None
        if pending is not None:
            pending.cancel()

    def _dispatch_locked(self, event: SessionEvent) -> None:
        if event.generation != self._generation:
            logger.debug("ListeningSession: dropping stale %s", type(event).__name__)
            return

        if isinstance(event, TranscriptReceived):
            self._on_transcript_locked(event)
        elif isinstance(event, RecognizerFailed):
            self._on_error_locked(event.error)
        elif isinstance(event, RestartDue):
            self._on_restart_due_locked()

    def _on_transcript_locked(self, event: TranscriptReceived) -> None:
        if self._state.status is not SessionStatus.ACTIVE:
            return

        target = self._sequence.current_target()
        if target is None:
            return

        if self._interpreter.matches(event.text, target.value):
            logger.info("ListeningSession: heard '%s' -> %s", event.text, target.value)
            self._sequence.advance_if_match(target.value)

    def _on_error_locked(self, error: RecognizerError) -> None:
        if self._state.status is not SessionStatus.ACTIVE:
            logger.debug("ListeningSession: ignoring error in %s: %s", self._state.status.name, error)
            return

        classification = self._policy.classify(error, self._budget)
        decision = self._policy.on_error(self._budget, classification)

        if decision.action is RecoveryAction.CONTINUE:
            logger.debug("ListeningSession: ignorable recognizer error %s/%s", error.domain, error.code)
            return

        self._budget = decision.budget
        self._release_locked()
        self._generation += 1

        if decision.action is RecoveryAction.RESTART_AFTER:
            logger.warning(
                "ListeningSession: recognition error (%s/%s): %s/%s %s",
                self._budget.count, self._budget.max, error.domain, error.code, error.message
            )
            generation = self._generation
            self._state = SessionState(SessionStatus.RECOVERING, self._budget.count)
            self._pending_restart = self._scheduler.schedule(
                decision.delay, lambda: self.handle_event(RestartDue(generation))
            )
            return

        logger.error(
            "ListeningSession: recognition error (%s/%s), giving up: %s/%s %s",
            self._budget.count, self._budget.max, error.domain, error.code, error.message
        )
        self._state = SessionState(
            SessionStatus.FAILED,
            self._budget.count,
            last_failure=f"{error.domain} {error.code}: {error.message}",
        )

    def _on_restart_due_locked(self) -> None:
        self._pending_restart = None
        if self._state.status is not SessionStatus.RECOVERING:
            return

        try:
            self._acquire_locked()
        except AcquisitionError as e:
            logger.error("ListeningSession: restart failed: %s", e)
            self._state = SessionState(
                SessionStatus.FAILED,
                self._budget.count,
                last_failure=f"Capture unavailable: {e}",
            )
            return

        self._state = SessionState(SessionStatus.ACTIVE, self._budget.count)

    def _notify_observers(self,
                          observers: List[StateObserver],
                          old_state: SessionState,
                          new_state: SessionState,
                          seq: int) -> None:
        for observer in observers:
            if self._is_superseded(seq):
                logger.debug("ListeningSession: skipping superseded notification %s", new_state.status.name)
                return
            try:
                observer(old_state, new_state)
            except Exception as e:
                logger.error("ListeningSession: state observer failed: %s", e, exc_info=True)

    def _is_superseded(self, seq: int) -> bool:
        with self._lock:
            return seq != self._transition_seq
