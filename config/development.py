import os

from .config import biotime_config_from_env, env_flag, pipeline_config_from_env

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "nexlinx_ems"),
}

BIOTIME_CONFIG = biotime_config_from_env()
PIPELINE_CONFIG = pipeline_config_from_env()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
ENABLE_SCHEDULER = env_flag("ENABLE_SCHEDULER", "0")
