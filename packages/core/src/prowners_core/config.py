import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "attribute": "owners",
    "git_dir": ".",
    "git_timeout": None,  # seconds per git command; None = no limit
    "changes": "github",  # "github" (PR files API) or "git" (local three-dot diff)
    "exclude": [],  # fnmatch patterns or directory names never queried (e.g. "vendor/", "*.lock")
    "max_files": 0,  # stop after this many checked files; 0 = unlimited
    "assign_draft_prs": False,
    "store": "noop",
}

CHANGE_SOURCES = ("github", "git")


def load_config(config_path: str = ".prowners.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prowners.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if config["changes"] not in CHANGE_SOURCES:
        raise ValueError(f"Unknown change source: {config['changes']!r}. Choose 'github' or 'git'.")

    # Credentials only ever come from the environment, never from the file.
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["admin_token"] = os.environ.get("PROWNERS_ADMIN_TOKEN")

    return config
