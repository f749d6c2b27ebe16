from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "assessment_engine" / "data"


class EngineSettings(BaseSettings):
    core_quota: int = 50  # per core taxonomy, before exploratory ones open up
    data_dir: Path = PACKAGED_DATA_DIR
    database_url: str = "sqlite:///./assessment.db"
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(env_prefix='ASSESSMENT_')


# Instantiate settings
engine_settings = EngineSettings()
