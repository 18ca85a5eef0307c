import os
import logging
from dotenv import load_dotenv

load_dotenv()

# --- Logging ---
LOG_LEVEL_FROM_ENV = os.getenv("SHH_LOG_LEVEL", "WARNING").upper()
numeric_level = getattr(logging, LOG_LEVEL_FROM_ENV, logging.WARNING)
logging.getLogger("shh").setLevel(numeric_level)

# --- Sealing defaults ---
DEFAULT_TTL = int(os.getenv("SHH_DEFAULT_TTL", "50"))            # seconds
DEFAULT_WORK_MS = int(os.getenv("SHH_DEFAULT_WORK_MS", "50"))    # proof-of-work budget, milliseconds

# --- Proof-of-work ---
POW_BATCH = int(os.getenv("SHH_POW_BATCH", "1024"))  # candidates hashed between deadline checks

if POW_BATCH < 1:
    logging.getLogger(__name__).warning("SHH_POW_BATCH=%d is not positive, using 1024", POW_BATCH)
    POW_BATCH = 1024
