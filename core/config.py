from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# --------------------------------------------------------------------------------------
# Paths / data source
# --------------------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Directory holding the six report JSON files.
REPORTS_DATA_DIR = Path(os.getenv("REPORTS_DATA_DIR", str(PROJECT_ROOT / "data")))

# When set, report files are fetched over HTTP from <REPORTS_DATA_URL>/<file name>.
REPORTS_DATA_URL: Optional[str] = os.getenv("REPORTS_DATA_URL") or None

REPORTS_HTTP_TIMEOUT = float(os.getenv("REPORTS_HTTP_TIMEOUT", "10"))

# Artificial delay after each load, handy when demoing the loading state.
REPORTS_SIMULATED_LATENCY_MS = int(os.getenv("REPORTS_SIMULATED_LATENCY_MS", "0"))

# --------------------------------------------------------------------------------------
# Table
# --------------------------------------------------------------------------------------

PAGE_SIZE = 50

# --------------------------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------------------------

REPORTS_LOG_LEVEL = os.getenv("REPORTS_LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or REPORTS_LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
