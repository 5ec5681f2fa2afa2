# numberexplorer/capture/AudioSource.py
from __future__ import annotations
import sounddevice as sd
import queue
import numpy as np
import time
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)


class AudioSource:
    """Captures audio from microphone and emits raw chunks to queue.

    AudioSource uses sounddevice to capture real-time audio from the microphone
    and immediately puts raw audio chunks to chunk_queue. No processing is done
    in the callback to prevent blocking and audio dropouts.

    All processing (speech detection, recognition) happens in the
    TranscriptionWorker thread.

    Args:
        chunk_queue: Queue to send raw audio chunks (dict with audio, timestamp, chunk_id)
        config: Configuration dictionary loaded from number_explorer_config.json
        verbose: Enable verbose logging
    """

    def __init__(self,
                 chunk_queue: queue.Queue,
                 config: Dict[str, Any],
                 verbose: bool = False):

        self.chunk_queue: queue.Queue = chunk_queue
        self.verbose: bool = verbose

        self.sample_rate: int = config['audio']['sample_rate']
        chunk_duration = config['audio']['chunk_duration']

        self.chunk_size: int = int(self.sample_rate * chunk_duration)
        self.is_running: bool = False
        self.stream: sd.InputStream | None = None
        self.chunk_id_counter: int = 0

    def audio_callback(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """Callback from sounddevice that processes incoming audio data.

        Minimal processing - just convert to mono float32 and put to queue.

        Args:
            indata: Input audio data as numpy array (shape: [frames, channels])
            frames: Number of audio frames
            time_info: Timing information from sounddevice
            status: Status information from sounddevice
        """
        if status:
            logger.error(f"Audio error: {status}")

        audio_float: np.ndarray = indata[:, 0].astype(np.float32)

        chunk_data = {
            'audio': audio_float,
            'timestamp': time.time(),
            'chunk_id': self.chunk_id_counter
        }

        self.chunk_id_counter += 1

        try:
            self.chunk_queue.put_nowait(chunk_data)
        except queue.Full:
            logger.warning("chunk_queue full, dropping audio chunk")

    def start(self) -> None:
        """Start capturing audio from the microphone.

        Raises:
            sd.PortAudioError: no usable input device
            PermissionError: microphone access denied by the platform
        """
        stream = sd.InputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype='float32',
            callback=self.audio_callback,
            blocksize=self.chunk_size
        )
        try:
            stream.start()
        except Exception:
            stream.close()
            raise

        self.stream = stream
        self.is_running = True
        if self.verbose:
            logger.debug(f"AudioSource started: {self.sample_rate}Hz, blocksize={self.chunk_size}")

    def stop(self) -> None:
        """Stop and close the input stream. Safe to call when not started."""
        self.is_running = False
        stream, self.stream = self.stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
