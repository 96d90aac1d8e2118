import os
from pathlib import Path
from typing import Optional

import yaml

from commitscrub_core.history import MAX_COMMITS

DEFAULT_CONFIG: dict = {
    "store": "memory",  # memory | sqlite | gist
    "store_path": ".commitscrub.db",
    "gist_id": None,
    "max_commits": MAX_COMMITS,
    "per_page": 100,
    "github_api_url": None,  # None = derived from the repository host
}


def _connector_identity() -> Optional[str]:
    if os.environ.get("REPL_IDENTITY"):
        return "repl " + os.environ["REPL_IDENTITY"]
    if os.environ.get("WEB_REPL_RENEWAL"):
        return "depl " + os.environ["WEB_REPL_RENEWAL"]
    return None


def load_config(config_path: str = ".commitscrub.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .commitscrub.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The history cap can be lowered, never raised.
    config["max_commits"] = min(int(config["max_commits"]), MAX_COMMITS)

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["connectors_hostname"] = os.environ.get("REPLIT_CONNECTORS_HOSTNAME")
    config["connectors_identity"] = _connector_identity()

    return config
