import copy
import os

import toml
import yaml

DEFAULT_CONFIG_PATH = "./config.toml"
ENV_CONFIG_DIR_VAR = "DIRWATCH_CONFIG_DIR"

DEFAULT_CONFIG = {
    "monitor": {
        "stream_buffer": 0,
        "poll_interval": 0.1,
        "stop_timeout": 5.0,
    },
    "logging": {
        "level": "INFO",
        "log_dir": "",
        "log_filename": "dirwatch.log",
        "console": True,
    },
    "output": {
        "time_format": "%H:%M:%S",
        "summary": False,
    },
}


def load_config_file(config_path):
    """
    Parse a TOML or YAML configuration file.

    The format is chosen by extension: .yaml/.yml is read as YAML,
    anything else as TOML.

    Returns:
        dict: The parsed settings (empty if the file is empty).
    """
    with open(config_path, "r") as f:
        if config_path.endswith((".yaml", ".yml")):
            data = yaml.safe_load(f)
        else:
            data = toml.load(f)
    return data or {}


def merge_config(base, override):
    """
    Recursively merge override into a copy of base.

    Returns:
        dict: The merged configuration.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(cli_config_path=None):
    """
    Load configuration, filling anything unset from DEFAULT_CONFIG.

    Precedence:
      1. cli_config_path if provided (must exist).
      2. Environment variable DIRWATCH_CONFIG_DIR (looking for config.toml).
      3. ./config.toml if present.
      4. Built-in defaults.

    Returns:
        dict: The configuration settings.
    """
    if cli_config_path:
        if not os.path.exists(cli_config_path):
            raise FileNotFoundError(f"Configuration file not found: {cli_config_path}")
        config_path = cli_config_path
    elif os.environ.get(ENV_CONFIG_DIR_VAR):
        config_path = os.path.join(os.environ[ENV_CONFIG_DIR_VAR], "config.toml")
    else:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        return copy.deepcopy(DEFAULT_CONFIG)

    return merge_config(DEFAULT_CONFIG, load_config_file(config_path))
