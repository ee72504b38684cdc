import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "heroku_api_url": "https://api.heroku.com",
    "request_timeout": 30,  # seconds per HTTP call; the CI job timeout bounds the run
    "fail_on_error": False,  # exit non-zero when the reconciliation reports a failure
    "pipeline_id": None,
}


class ConfigError(ValueError):
    """Required configuration (credentials, pipeline id) is missing."""


def load_config(config_path: str = ".reviewapps.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewapps.yml in the current directory
      3. Environment (credentials, pipeline id, CI event inputs)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    # Credentials are only ever read from the environment.
    config["heroku_api_token"] = os.environ.get("HEROKU_API_TOKEN")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    config["pipeline_id"] = os.environ.get("HEROKU_PIPELINE_ID") or config.get("pipeline_id")
    config["event_path"] = os.environ.get("GITHUB_EVENT_PATH")
    config["repository"] = os.environ.get("GITHUB_REPOSITORY")
    config["action"] = os.environ.get("INPUT_ACTION")

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def require(config: dict, key: str, hint: str) -> str:
    """Return ``config[key]`` or raise ConfigError with ``hint``."""
    value = config.get(key)
    if not value:
        raise ConfigError(hint)
    return value
