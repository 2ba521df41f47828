from pathlib import Path

# Relative to the working directory, like the rest of the Data/ tree
DATA_DIR = Path("Data")
LOGS_DIR = DATA_DIR / "Logs"
LOG_FILE_NAME = "frameplay.log"
