from .config import EngineConfig, engine_config_from, load_config, validate_config

__all__ = ["EngineConfig", "engine_config_from", "load_config", "validate_config"]
