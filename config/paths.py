"""
Project Path Configuration

Centralized path definitions for input tables and pipeline outputs
Using Medallion Architecture: Bronze (raw) → Silver (tidy) → Gold (aggregates, model summaries)

The data root can be moved with the INCIDENT_TRENDS_DATA_ROOT environment
variable (also read from a .env file at the project root).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

# ==============================================================================
# MEDALLION ARCHITECTURE (Bronze / Silver / Gold)
# ==============================================================================

DATA_ROOT = Path(os.environ.get("INCIDENT_TRENDS_DATA_ROOT", PROJECT_ROOT / "data"))

# Bronze Layer: Raw, immutable tables (as downloaded)
BRONZE = DATA_ROOT / "bronze"

# Silver Layer: Tidy (long-form) tables with derived fields
SILVER = DATA_ROOT / "silver"

# Gold Layer: Aggregates and fitted model summaries
GOLD = DATA_ROOT / "gold"
GOLD_AGGREGATES = GOLD / "aggregates"
GOLD_MODELS = GOLD / "models"

# ==============================================================================
# CONFIGURATION FILES
# ==============================================================================

CONFIG_DIR = PROJECT_ROOT / "config"
EXAMPLE_CONFIGS = CONFIG_DIR / "examples"

# ==============================================================================
# DIRECTORY INITIALIZATION
# ==============================================================================

def ensure_directories():
    """Create all necessary directories if they don't exist"""
    all_dirs = [BRONZE, SILVER, GOLD, GOLD_AGGREGATES, GOLD_MODELS]

    for directory in all_dirs:
        directory.mkdir(parents=True, exist_ok=True)

    return all_dirs
