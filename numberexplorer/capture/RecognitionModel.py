import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import onnx_asr
import onnxruntime as rt

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "nemo-parakeet-tdt-0.6b-v3"


def load_recognition_model(config: Dict[str, Any],
                           models_dir: Path,
                           providers: Optional[List[str]] = None) -> Any:
    """Load the speech-to-text model described by the "model" config section.

    A local model directory under models_dir is used when present; otherwise
    onnx-asr downloads the model into its cache.

    Args:
        config: Configuration dictionary
        models_dir: Directory holding local model folders
        providers: onnxruntime execution providers (default: CPU)

    Returns:
        Model adapter exposing recognize(waveform) -> str
    """
    model_config = config.get('model', {})
    name = model_config.get('name', DEFAULT_MODEL_NAME)
    model_dir = models_dir / model_config.get('path', 'parakeet')
    quantization = model_config.get('quantization')

    sess_options = rt.SessionOptions()
    sess_options.graph_optimization_level = rt.GraphOptimizationLevel.ORT_ENABLE_ALL

    path = str(model_dir) if model_dir.exists() else None
    logger.info(f"Loading recognition model {name} from {path or 'download cache'}")

    return onnx_asr.load_model(
        name,
        path,
        quantization=quantization,
        providers=providers or ['CPUExecutionProvider'],
        sess_options=sess_options,
    )
