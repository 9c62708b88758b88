import os

from .config import pipeline_config_from_env

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "nexlinx_ems_test"),
}

# Tests never talk to a real BioTime server.
BIOTIME_CONFIG = {"base_url": "", "username": "", "password": ""}
PIPELINE_CONFIG = pipeline_config_from_env()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
ENABLE_SCHEDULER = False
