"""Environment configuration for the insights engine."""

import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./insights.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Name attached to every log line
SERVICE_NAME = os.getenv("SERVICE_NAME", "financial-insights")
