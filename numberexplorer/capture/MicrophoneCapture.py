"""Capture backend combining the microphone stream and the transcription worker.

At most one capture is active at a time. Each request_start() builds a fresh
queue, AudioSource and TranscriptionWorker; release() tears them down.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import sounddevice as sd

from numberexplorer.capture.AudioSource import AudioSource
from numberexplorer.capture.TranscriptionWorker import TranscriptionWorker
from numberexplorer.errors import AcquisitionError, PermissionDeniedError
from numberexplorer.protocols import CaptureHandle, SpeechEventSink

logger = logging.getLogger(__name__)

_QUEUE_MAXSIZE = 200


@dataclass
class _ActiveCapture:
    handle: CaptureHandle
    source: AudioSource
    worker: TranscriptionWorker


class MicrophoneCapture:
    """CaptureBackend backed by sounddevice and an onnx-asr model.

    Args:
        model: Pre-loaded speech recognition model with recognize() method
        config: Configuration dictionary (audio section required)
        verbose: Enable verbose logging
    """

    def __init__(self, model: Any, config: Dict[str, Any], verbose: bool = False) -> None:
        self._model = model
        self._config = config
        self._verbose = verbose
        self._active: Optional[_ActiveCapture] = None
        self._next_id = 0
        self._released_workers: List[TranscriptionWorker] = []
        self._lock = threading.Lock()

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active is not None

    def request_start(self, sink: SpeechEventSink) -> CaptureHandle:
        """Open the microphone and start transcribing into sink.

        Raises:
            PermissionDeniedError: platform denied microphone access
            AcquisitionError: a capture is already active or no input device
        """
        with self._lock:
            if self._active is not None:
                raise AcquisitionError("A capture is already active")

            chunk_queue: queue.Queue = queue.Queue(maxsize=_QUEUE_MAXSIZE)
            source = AudioSource(chunk_queue=chunk_queue, config=self._config, verbose=self._verbose)
            try:
                source.start()
            except PermissionError as e:
                raise PermissionDeniedError(str(e)) from e
            except (sd.PortAudioError, OSError) as e:
                raise AcquisitionError(f"Microphone unavailable: {e}") from e

            worker = TranscriptionWorker(
                chunk_queue=chunk_queue,
                model=self._model,
                sink=sink,
                config=self._config,
                verbose=self._verbose,
            )
            worker.start()

            self._next_id += 1
            handle = CaptureHandle(id=self._next_id)
            self._active = _ActiveCapture(handle=handle, source=source, worker=worker)

        logger.info("MicrophoneCapture: capture %s started", handle.id)
        return handle

    def release(self, handle: CaptureHandle) -> None:
        """Stop the capture identified by handle; unknown handles are ignored.

        The worker thread is signalled but not joined, so release() may be
        called from inside a sink callback; close() joins released workers.
        """
        with self._lock:
            if self._active is None or self._active.handle != handle:
                return
            active, self._active = self._active, None
            self._released_workers = [w for w in self._released_workers if w.thread and w.thread.is_alive()]
            self._released_workers.append(active.worker)

        active.worker.stop()
        try:
            active.source.stop()
        except sd.PortAudioError as e:
            logger.warning("MicrophoneCapture: error closing input stream: %s", e)
        logger.info("MicrophoneCapture: capture %s released", handle.id)

    def close(self) -> None:
        """Release any active capture and wait for every released worker thread."""
        with self._lock:
            active = self._active
        if active is not None:
            self.release(active.handle)

        with self._lock:
            workers, self._released_workers = self._released_workers, []
        for worker in workers:
            worker.join()
