"""Protocol definitions for the capture collaborator.

This module defines structural interfaces using Python's Protocol for duck typing.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class CaptureHandle:
    """Opaque token for one acquired capture resource."""
    id: int


class SpeechEventSink(Protocol):
    """Receiver of recognizer events.

    Thread Safety:
        Implementations must handle calls from background threads.
        The capture backend invokes these methods from its worker thread.
    """

    def on_transcript(self, text: str, is_final: bool) -> None:
        """Handle a (possibly partial) transcript of the current utterance.

        Args:
            text: Transcribed text
            is_final: True when the utterance is finished
        """
        ...

    def on_error(self, domain: str, code: int, message: str) -> None:
        """Handle an error reported by the recognizer.

        Args:
            domain: Error domain identifying the reporting component
            code: Domain-specific error code
            message: Human readable description
        """
        ...


class CaptureBackend(Protocol):
    """Audio capture plus speech recognition, owned by one ListeningSession."""

    def request_start(self, sink: SpeechEventSink) -> CaptureHandle:
        """Acquire the microphone and start streaming events to sink.

        Raises:
            AcquisitionError: capture resource unavailable
            PermissionDeniedError: microphone access denied
        """
        ...

    def release(self, handle: CaptureHandle) -> None:
        """Release a capture acquired by request_start().

        Must tolerate unknown or already released handles.
        """
        ...
