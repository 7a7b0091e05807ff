"""Backend Package

FastAPI REST API used by the web app.
"""

from pathlib import Path


PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "args" / "dashboard.yaml"
