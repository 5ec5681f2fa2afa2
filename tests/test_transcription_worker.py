# tests/test_transcription_worker.py
import queue
import time
from unittest.mock import Mock

import numpy as np
import pytest

from numberexplorer.capture.TranscriptionWorker import RECOGNITION_FAILED_CODE, TranscriptionWorker
from numberexplorer.RecoveryPolicy import NO_SPEECH_CODE, RECOGNIZER_DOMAIN

SAMPLE_RATE = 16000
CHUNK = 1600  # 100ms


def speech(timestamp):
    return {'audio': np.full(CHUNK, 0.1, dtype=np.float32), 'timestamp': timestamp, 'chunk_id': 0}


def silence(timestamp):
    return {'audio': np.zeros(CHUNK, dtype=np.float32), 'timestamp': timestamp, 'chunk_id': 0}


@pytest.fixture
def worker_config():
    return {
        'audio': {
            'sample_rate': SAMPLE_RATE,
            'chunk_duration': 0.1,
            'silence_threshold': 0.01,
            'silence_timeout': 0.3,
            'partial_interval': 0.2,
            'no_speech_timeout': 1.0,
            'max_utterance_duration': 6.0
        }
    }


@pytest.fixture
def model():
    model = Mock()
    model.recognize.return_value = "forty two"
    return model


@pytest.fixture
def sink():
    return Mock()


@pytest.fixture
def worker(model, sink, worker_config):
    worker = TranscriptionWorker(queue.Queue(), model, sink, worker_config)
    worker.is_running = True
    return worker


class TestSpeechDetection:

    def test_partial_transcript_while_speaking(self, worker, sink, model):
        """Logic: 0.2s of speech reaches partial_interval -> one partial transcript."""
        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))

        model.recognize.assert_called_once()
        assert len(model.recognize.call_args[0][0]) == 2 * CHUNK
        sink.on_transcript.assert_called_once_with("forty two", False)

    def test_final_transcript_after_trailing_silence(self, worker, sink):
        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))
        for t in (0.2, 0.3, 0.45, 0.6, 0.8):
            worker.process_chunk(silence(t))

        finals = [c for c in sink.on_transcript.call_args_list if c[0][1] is True]
        assert len(finals) == 1
        assert finals[0][0][0] == "forty two"

    def test_long_utterance_closed_at_max_duration(self, worker_config, model, sink):
        worker_config['audio']['max_utterance_duration'] = 0.3
        worker = TranscriptionWorker(queue.Queue(), model, sink, worker_config)
        worker.is_running = True

        for t in (0.0, 0.1, 0.2):
            worker.process_chunk(speech(t))

        assert sink.on_transcript.call_args[0] == ("forty two", True)

    def test_result_object_with_text_attribute(self, worker, sink, model):
        model.recognize.return_value = Mock(text=" 42 ")

        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))

        sink.on_transcript.assert_called_once_with("42", False)

    def test_empty_recognition_not_reported(self, worker, sink, model):
        model.recognize.return_value = ""

        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))

        sink.on_transcript.assert_not_called()


class TestErrors:

    def test_no_speech_reported_after_timeout(self, worker, sink, model):
        for t in (0.0, 0.6, 1.2):
            worker.process_chunk(silence(t))

        sink.on_error.assert_called_once_with(RECOGNIZER_DOMAIN, NO_SPEECH_CODE, "No speech detected")
        model.recognize.assert_not_called()

    def test_model_failure_reported_and_worker_stops(self, worker, sink, model):
        model.recognize.side_effect = RuntimeError("model crashed")

        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))

        sink.on_error.assert_called_once_with(RECOGNIZER_DOMAIN, RECOGNITION_FAILED_CODE, "model crashed")
        assert worker.is_running is False

    def test_stopped_worker_makes_no_callbacks(self, worker, sink, model):
        worker.stop()

        worker.process_chunk(speech(0.0))
        worker.process_chunk(speech(0.1))
        for t in (0.6, 1.2, 2.0):
            worker.process_chunk(silence(t))

        model.recognize.assert_not_called()
        sink.on_transcript.assert_not_called()
        sink.on_error.assert_not_called()


class TestThreading:

    def test_background_thread_processes_queue(self, model, sink, worker_config):
        chunk_queue = queue.Queue()
        worker = TranscriptionWorker(chunk_queue, model, sink, worker_config)

        worker.start()
        chunk_queue.put(speech(0.0))
        chunk_queue.put(speech(0.1))

        deadline = time.monotonic() + 2.0
        while not sink.on_transcript.called and time.monotonic() < deadline:
            time.sleep(0.01)

        worker.stop()
        worker.join()

        sink.on_transcript.assert_called_once_with("forty two", False)
        assert not worker.thread.is_alive()
