"""Runtime configuration state management."""

import os
from typing import Optional

PROJECT_ID_ENV_VARS = ("TRACEPARENT_PROJECT_ID", "GOOGLE_CLOUD_PROJECT")

# Global runtime configuration state
_config = {
    "project_id": None,
}


def set_project_id(value: Optional[str]) -> None:
    _config["project_id"] = value


def get_project_id() -> Optional[str]:
    return _config["project_id"]


def load_from_env() -> None:
    """Fill unset values from the environment; the first non-empty variable wins."""
    if _config["project_id"] is None:
        for name in PROJECT_ID_ENV_VARS:
            value = os.environ.get(name)
            if value:
                _config["project_id"] = value
                break


def reset() -> None:
    _config["project_id"] = None
