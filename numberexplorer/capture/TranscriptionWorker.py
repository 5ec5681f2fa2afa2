import queue
import threading
import logging
import numpy as np
from typing import Any, Dict, List, Optional

from numberexplorer.protocols import SpeechEventSink
from numberexplorer.RecoveryPolicy import NO_SPEECH_CODE, RECOGNIZER_DOMAIN

logger = logging.getLogger(__name__)

RECOGNITION_FAILED_CODE = 1


class TranscriptionWorker:
    """Turns raw audio chunks into transcript and error callbacks.

    Speech is detected by RMS energy. While the learner speaks, the growing
    utterance is re-recognized every partial_interval seconds and reported as
    a partial transcript; trailing silence of silence_timeout seconds closes
    the utterance with a final transcript. A quiet period of no_speech_timeout
    seconds without any utterance is reported as the "no speech detected"
    recognizer error, which the session treats as ignorable.

    A model exception is reported as a recognizer error and ends the worker,
    the same way a platform recognition task ends after an error.

    Args:
        chunk_queue: Queue of raw chunks from AudioSource ({audio, timestamp, chunk_id})
        model: Speech model with a recognize(waveform) method
        sink: Receiver of transcript and error callbacks
        config: Configuration dictionary (audio section)
        verbose: Enable verbose logging
    """

    def __init__(self,
                 chunk_queue: queue.Queue,
                 model: Any,
                 sink: SpeechEventSink,
                 config: Dict[str, Any],
                 verbose: bool = False) -> None:
        audio_config = config['audio']
        self.chunk_queue: queue.Queue = chunk_queue
        self.model = model
        self.sink: SpeechEventSink = sink
        self.verbose: bool = verbose

        self.sample_rate: int = audio_config['sample_rate']
        self.silence_threshold: float = audio_config.get('silence_threshold', 0.01)
        self.silence_timeout: float = audio_config.get('silence_timeout', 0.6)
        self.partial_interval: float = audio_config.get('partial_interval', 0.5)
        self.no_speech_timeout: float = audio_config.get('no_speech_timeout', 5.0)
        self.max_utterance_duration: float = audio_config.get('max_utterance_duration', 6.0)

        self.is_running: bool = False
        self.thread: Optional[threading.Thread] = None

        self._utterance: List[np.ndarray] = []
        self._utterance_samples: int = 0
        self._recognized_samples: int = 0
        self._last_speech_time: float = 0.0
        self._quiet_since: Optional[float] = None

    def process_chunk(self, chunk: Dict[str, Any]) -> None:
        """Feed one audio chunk through speech detection.

        Args:
            chunk: Dict with 'audio' (float32 ndarray) and 'timestamp' (seconds)
        """
        audio: np.ndarray = chunk['audio']
        timestamp: float = chunk['timestamp']

        if self._quiet_since is None:
            self._quiet_since = timestamp

        rms = float(np.sqrt(np.mean(audio ** 2))) if audio.size else 0.0

        if rms >= self.silence_threshold:
            self._append(audio)
            self._last_speech_time = timestamp

            if self._duration(self._utterance_samples) >= self.max_utterance_duration:
                self._finish_utterance(timestamp)
            elif self._duration(self._utterance_samples - self._recognized_samples) >= self.partial_interval:
                self._recognize(is_final=False)
            return

        if self._utterance:
            # trailing silence belongs to the utterance
            self._append(audio)
            if timestamp - self._last_speech_time >= self.silence_timeout:
                self._finish_utterance(timestamp)
            return

        if timestamp - self._quiet_since >= self.no_speech_timeout:
            self._quiet_since = timestamp
            if self.is_running:
                self.sink.on_error(RECOGNIZER_DOMAIN, NO_SPEECH_CODE, "No speech detected")

    def _append(self, audio: np.ndarray) -> None:
        self._utterance.append(audio)
        self._utterance_samples += len(audio)

    def _duration(self, samples: int) -> float:
        return samples / self.sample_rate

    def _finish_utterance(self, timestamp: float) -> None:
        self._recognize(is_final=True)
        self._utterance = []
        self._utterance_samples = 0
        self._recognized_samples = 0
        self._quiet_since = timestamp

    def _recognize(self, is_final: bool) -> None:
        if not self.is_running or not self._utterance:
            return

        waveform = np.concatenate(self._utterance)
        self._recognized_samples = self._utterance_samples

        try:
            result = self.model.recognize(waveform)
        except Exception as e:
            logger.error(f"Recognition failed: {e}", exc_info=self.verbose)
            self.is_running = False
            self.sink.on_error(RECOGNIZER_DOMAIN, RECOGNITION_FAILED_CODE, str(e))
            return

        text = result if isinstance(result, str) else getattr(result, 'text', '')
        text = (text or '').strip()

        if self.verbose:
            logger.debug(f"recognize(): final={is_final}, samples={len(waveform)}, text='{text}'")

        if text and self.is_running:
            self.sink.on_transcript(text, is_final)

    def process(self) -> None:
        """Process chunks from queue continuously until stop() is called."""
        while self.is_running:
            try:
                chunk = self.chunk_queue.get(timeout=0.1)
            except queue.Empty:
                continue
            self.process_chunk(chunk)

    def start(self) -> None:
        """Start processing chunks in a background daemon thread."""
        self.is_running = True
        self.thread = threading.Thread(target=self.process, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        """Signal the processing loop to exit; no further callbacks are made."""
        self.is_running = False

    def join(self, timeout: float = 2.0) -> None:
        thread = self.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
