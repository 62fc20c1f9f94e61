from .config import EngineConfig, load_engine_config
from .overlay_state import AppKind, ModeCandidate, OverlayState, PlayMode
from .signal_hub import FocusCoordinator
from .state_store import OverlayStateStore

__all__ = [
    "AppKind",
    "EngineConfig",
    "FocusCoordinator",
    "ModeCandidate",
    "OverlayState",
    "OverlayStateStore",
    "PlayMode",
    "load_engine_config",
]
