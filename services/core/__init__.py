# Core components: config, logging
from .config import engine_settings, EngineSettings
from .logging_config import setup_logging
