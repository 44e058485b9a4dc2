from pathlib import Path

RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"

LOCAL_EXAMPLE = RESOURCES_DIR / "local.overrides"
DDEV_EXAMPLE = RESOURCES_DIR / "ddev.overrides"
