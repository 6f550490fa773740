import os
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
load_dotenv(os.path.join(BASE_DIR, '.env'))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SPELLOTRON_', extra='ignore')

    PROJECT_NAME: str = 'SPELLOTRON'

    # Recognition
    SIMILARITY_THRESHOLD: float = 92.0
    REQUIRED_FRAMES: int = 15
    SUSTAIN_SECONDS: Optional[float] = None  # set to key confirmation on held time instead of frames
    SIMILARITY_HISTORY_SIZE: int = 1000
    MAX_JOINT_DEVIATION: float = 1.0  # torso lengths
    INFERRED_JOINT_WEIGHT: float = 0.5

    # Progression / scoring
    MAX_SCORE: float = 1234567
    CHAR_GOAL_TIME: float = 21.5  # seconds
    MAX_WORD_LENGTH: int = 10

    # Pipeline
    TICK_INTERVAL_MS: int = 10
    FRAME_QUEUE_SIZE: int = 30

    # Resources
    POSE_LIBRARY_PATH: str = os.path.join(BASE_DIR, 'resources', 'poses', 'pose_library.json')
    WORD_LIST_PATH: str = os.path.join(BASE_DIR, 'resources', 'text')

    # Logging
    LOGGING_CONFIG_FILE: str = os.path.join(BASE_DIR, 'logging.ini')
    SESSION_LOG_ENABLED: bool = False
    SESSION_LOG_DIR: str = os.path.join(BASE_DIR, 'data', 'logs')


settings = Settings()
