"""Value types shared by the listening session components."""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional


@dataclass(frozen=True)
class TargetItem:
    """One value the learner has to say aloud.

    Attributes:
        value: Integer target value
        digit_form: Digit rendering (e.g. "23")
        spoken_form: Chinese numeral label (e.g. "二十三")
        is_completed: True once the value was recognized; never reset
        is_active: True only for the item under the cursor
    """
    value: int
    digit_form: str
    spoken_form: str
    is_completed: bool = False
    is_active: bool = False


class SessionStatus(Enum):
    """State machine states for a listening session.

    State Transitions:
    - IDLE -> ACTIVE: start() acquired the capture resource
    - ACTIVE -> RECOVERING: retryable recognizer error within budget
    - ACTIVE -> FAILED: error budget spent
    - RECOVERING -> ACTIVE: restart timer fired and capture re-acquired
    - RECOVERING -> FAILED: re-acquisition failed
    - any -> IDLE: stop()
    """
    IDLE = auto()
    ACTIVE = auto()
    RECOVERING = auto()
    FAILED = auto()


@dataclass(frozen=True)
class SessionState:
    """Read-only snapshot of a session's state.

    Attributes:
        status: Current SessionStatus
        error_count: Retryable errors spent since the last fresh start
        last_failure: Reason of the last acquisition failure or abort, if any
    """
    status: SessionStatus = SessionStatus.IDLE
    error_count: int = 0
    last_failure: Optional[str] = None

    @property
    def is_listening(self) -> bool:
        return self.status in (SessionStatus.ACTIVE, SessionStatus.RECOVERING)


@dataclass(frozen=True)
class ErrorBudget:
    """Bounded count of consecutive retryable failures."""
    count: int = 0
    max: int = 3

    def __post_init__(self):
        if self.count < 0:
            raise ValueError("ErrorBudget count must be >= 0")

    @property
    def exhausted(self) -> bool:
        return self.count >= self.max

    def spend(self) -> "ErrorBudget":
        return replace(self, count=self.count + 1)


@dataclass(frozen=True)
class RecognizerError:
    """Error reported by the speech recognizer collaborator."""
    domain: str
    code: int
    message: str = ""


class ErrorClass(Enum):
    IGNORABLE = auto()
    RETRYABLE = auto()
    FATAL = auto()


class RecoveryAction(Enum):
    CONTINUE = auto()
    RESTART_AFTER = auto()
    ABORT = auto()


@dataclass(frozen=True)
class RecoveryDecision:
    """Outcome of RecoveryPolicy.on_error.

    Attributes:
        action: What the session should do next
        budget: Error budget after the decision
        delay: Restart delay in seconds (RESTART_AFTER only)
    """
    action: RecoveryAction
    budget: ErrorBudget
    delay: Optional[float] = None


class LearningMode(Enum):
    """Which numeral form the learner practises."""
    ENGLISH = "English"
    CHINESE = "Chinese"

    @property
    def locale(self) -> str:
        return "zh-CN" if self is LearningMode.CHINESE else "en-US"


# Session events. Capture callbacks are turned into these immutable messages
# and processed strictly one at a time by ListeningSession.handle_event().

@dataclass(frozen=True)
class TranscriptReceived:
    text: str
    is_final: bool
    generation: int


@dataclass(frozen=True)
class RecognizerFailed:
    error: RecognizerError
    generation: int


@dataclass(frozen=True)
class RestartDue:
    generation: int
