# tests/conftest.py
import pytest
from typing import Callable, List, Optional

from numberexplorer.errors import AcquisitionError
from numberexplorer.ListeningSession import ListeningSession
from numberexplorer.protocols import CaptureHandle
from numberexplorer.RecoveryPolicy import RecoveryPolicy
from numberexplorer.TargetSequence import TargetSequence


class ManualCall:
    """Scheduled callback that only runs when the test fires it."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.callback()


class ManualScheduler:
    """Scheduler double: records calls instead of starting timers."""

    def __init__(self):
        self.calls: List[ManualCall] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(delay, callback)
        self.calls.append(call)
        return call

    def pending(self) -> List[ManualCall]:
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def fire_pending(self) -> None:
        for call in self.pending():
            call.fire()


class FakeCapture:
    """CaptureBackend double recording every sink and release.

    Exceptions appended to `failures` are raised by the next request_start calls.
    """

    def __init__(self):
        self.sinks: list = []
        self.active: Optional[CaptureHandle] = None
        self.released: List[CaptureHandle] = []
        self.failures: List[Exception] = []
        self.release_error: Optional[Exception] = None

    @property
    def sink(self):
        return self.sinks[-1]

    def request_start(self, sink) -> CaptureHandle:
        if self.failures:
            raise self.failures.pop(0)
        if self.active is not None:
            raise AcquisitionError("A capture is already active")
        self.sinks.append(sink)
        self.active = CaptureHandle(id=len(self.sinks))
        return self.active

    def release(self, handle: CaptureHandle) -> None:
        self.released.append(handle)
        if self.active == handle:
            self.active = None
        if self.release_error is not None:
            raise self.release_error


@pytest.fixture
def config():
    """Provide standard test configuration.

    Returns:
        Dict: Configuration dictionary matching production config structure
    """
    return {
        'session': {
            'max_errors': 3,
            'restart_delay': 0.5,
            'target_range': [0, 100],
            'locale': 'en-US',
            'mode': 'English',
            'ignorable_errors': [{'domain': 'SpeechRecognizer', 'code': 1110}]
        },
        'audio': {
            'sample_rate': 16000,
            'chunk_duration': 0.032,
            'silence_threshold': 0.01,
            'silence_timeout': 0.6,
            'partial_interval': 0.5,
            'no_speech_timeout': 5.0,
            'max_utterance_duration': 6.0
        },
        'model': {
            'name': 'nemo-parakeet-tdt-0.6b-v3',
            'path': 'parakeet',
            'quantization': 'int8'
        }
    }


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def capture():
    return FakeCapture()


@pytest.fixture
def sequence():
    return TargetSequence.from_range(0, 100)


@pytest.fixture
def session(sequence, capture, scheduler):
    """ListeningSession wired to fakes; restart timers fire only on demand."""
    return ListeningSession(
        sequence=sequence,
        capture=capture,
        policy=RecoveryPolicy(max_errors=3, restart_delay=0.5),
        scheduler=scheduler,
    )
