# main.py
import sys
import logging
from pathlib import Path

from numberexplorer.LoggingSetup import setup_logging
from numberexplorer.PathResolver import PathResolver
from numberexplorer.SessionConfig import SessionConfig, load_config


# ============================================================================
# RESOLVE PATHS AT MODULE LOAD TIME
# ============================================================================
if hasattr(sys.modules['__main__'], '__file__'):
    SCRIPT_PATH = Path(sys.modules['__main__'].__file__).resolve()
else:
    SCRIPT_PATH = Path(__file__).resolve()

PATH_RESOLVER = PathResolver(SCRIPT_PATH)
PATHS = PATH_RESOLVER.paths


def parse_args(argv: list) -> dict:
    """Parse -v and --config=<path> from the command line."""
    options = {
        "verbose": "-v" in argv,
        "config_path": PATH_RESOLVER.get_config_path(),
    }
    for arg in argv[1:]:
        if arg.startswith("--config="):
            options["config_path"] = Path(arg.split("=", 1)[1])
    return options


def build_session(config: dict, session_config: SessionConfig, verbose: bool = False):
    """Wire model, capture backend, target sequence and listening session."""
    from numberexplorer.capture.MicrophoneCapture import MicrophoneCapture
    from numberexplorer.capture.RecognitionModel import load_recognition_model
    from numberexplorer.ListeningSession import ListeningSession
    from numberexplorer.NumeralInterpreter import NumeralInterpreter
    from numberexplorer.TargetSequence import TargetSequence
    from numberexplorer.types import LearningMode

    model = load_recognition_model(config, PATHS.models_dir)
    capture = MicrophoneCapture(model=model, config=config, verbose=verbose)

    sequence = TargetSequence.from_range(session_config.target_start, session_config.target_stop)
    mode = session_config.mode
    locale = session_config.locale if mode is LearningMode.ENGLISH else mode.locale

    session = ListeningSession(
        sequence=sequence,
        capture=capture,
        interpreter=NumeralInterpreter(locale),
        policy=session_config.build_policy(),
        mode=mode,
    )
    return session, capture


if __name__ == "__main__":
    capture = None
    try:
        options = parse_args(sys.argv)

        PATH_RESOLVER.ensure_local_dir_structure()
        setup_logging(PATHS.logs_dir, verbose=options["verbose"], console=not getattr(sys, 'frozen', False))

        config = load_config(str(options["config_path"]))
        session_config = SessionConfig.from_dict(config)
        logging.info(f"Session config: {session_config}")

        session, capture = build_session(config, session_config, verbose=options["verbose"])

        from numberexplorer.gui.ApplicationWindow import ApplicationWindow
        window = ApplicationWindow(session)
        window.run()

    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"ERROR: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if capture is not None:
            capture.close()
