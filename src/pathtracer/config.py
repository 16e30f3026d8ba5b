"""Configuration for the path tracer, read from environment variables."""

import os
from pathlib import Path
from typing import Optional

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Paths
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))
IMAGE_DIR = os.getenv("IMAGE_DIR", "images")
OBJECT_DIR = os.getenv("OBJECT_DIR", "objects")

# Rendering settings
RENDER_WORKERS = int(os.getenv("RENDER_WORKERS", str(os.cpu_count() or 1)))


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


# Unset means a different noise pattern on every run
RENDER_SEED = _optional_int(os.getenv("RENDER_SEED"))

# Quality presets; each entry overrides the scene's image settings
QUALITY_LEVELS = {
    "preview": {"samples": 4, "depth": 8, "width": 200},
    "balanced": {"samples": 25, "depth": 20, "width": 400},
    "final": {"samples": 100, "depth": 50, "width": 600},
}
