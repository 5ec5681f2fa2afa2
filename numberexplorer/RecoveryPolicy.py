"""
RecoveryPolicy - Classifies recognizer failures and decides how to recover.

Decision table:
- IGNORABLE (e.g. "no speech detected" during silence) -> CONTINUE, budget unchanged
- RETRYABLE and count + 1 < max                        -> RESTART_AFTER(restart_delay), budget spent
- anything else                                        -> ABORT, budget spent
"""
from typing import FrozenSet, Iterable, Tuple

from numberexplorer.types import (
    ErrorBudget,
    ErrorClass,
    RecognizerError,
    RecoveryAction,
    RecoveryDecision,
)


# Recognizer error domain; NO_SPEECH_CODE marks a window that closed without speech.
RECOGNIZER_DOMAIN = "SpeechRecognizer"
NO_SPEECH_CODE = 1110

DEFAULT_MAX_ERRORS = 3
DEFAULT_RESTART_DELAY = 0.5


class RecoveryPolicy:
    """
    Stateless recovery rules; the error budget itself is owned by the session.

    Args:
        max_errors: Retryable errors tolerated before aborting
        restart_delay: Seconds to wait before re-acquiring capture
        ignorable_errors: (domain, code) pairs that never count against the budget
    """

    def __init__(self,
                 max_errors: int = DEFAULT_MAX_ERRORS,
                 restart_delay: float = DEFAULT_RESTART_DELAY,
                 ignorable_errors: Iterable[Tuple[str, int]] = ((RECOGNIZER_DOMAIN, NO_SPEECH_CODE),)):
        if max_errors < 1:
            raise ValueError("max_errors must be >= 1")
        if restart_delay < 0:
            raise ValueError("restart_delay must be >= 0")

        self.max_errors: int = max_errors
        self.restart_delay: float = restart_delay
        self.ignorable_errors: FrozenSet[Tuple[str, int]] = frozenset(
            (domain, int(code)) for domain, code in ignorable_errors
        )

    def fresh_budget(self) -> ErrorBudget:
        return ErrorBudget(count=0, max=self.max_errors)

    def classify(self, error: RecognizerError, budget: ErrorBudget) -> ErrorClass:
        """
        Args:
            error: Error reported by the recognizer
            budget: Current error budget

        Returns:
            IGNORABLE for known benign conditions, FATAL once the budget is
            exhausted, RETRYABLE otherwise
        """
        if (error.domain, error.code) in self.ignorable_errors:
            return ErrorClass.IGNORABLE
        if budget.exhausted:
            return ErrorClass.FATAL
        return ErrorClass.RETRYABLE

    def on_error(self, budget: ErrorBudget, classification: ErrorClass) -> RecoveryDecision:
        """
        Args:
            budget: Error budget before this error
            classification: Result of classify()

        Returns:
            RecoveryDecision carrying the action and the updated budget
        """
        if classification is ErrorClass.IGNORABLE:
            return RecoveryDecision(action=RecoveryAction.CONTINUE, budget=budget)

        spent = budget.spend()
        if classification is ErrorClass.RETRYABLE and spent.count < spent.max:
            return RecoveryDecision(
                action=RecoveryAction.RESTART_AFTER,
                budget=spent,
                delay=self.restart_delay,
            )

        return RecoveryDecision(action=RecoveryAction.ABORT, budget=spent)
