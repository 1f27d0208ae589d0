import os
from pathlib import Path
from typing import Optional

import tomli as toml

from nativegen import logging as nativegen_logging

logger = nativegen_logging.get_logger(__name__)

CONFIG_ENV = "NATIVEGEN_CONFIG"
CONFIG_FILE_NAME = "nativegen.toml"

_RESOURCE_DIR = Path(__file__).resolve().parent / "_resources"


def merge_config(overrides: dict, defaults: dict, _path: tuple[str, ...] = ()) -> dict:
    """Overlay ``overrides`` on ``defaults``, table by table.

    A table may only be replaced by a table; keys unknown to the defaults are
    carried over unchanged.
    """
    merged = dict(defaults)
    for key, value in overrides.items():
        default = defaults.get(key)
        key_path = (*_path, key)
        if isinstance(default, dict) and isinstance(value, dict):
            merged[key] = merge_config(value, default, key_path)
        elif key in defaults and (isinstance(default, dict) or isinstance(value, dict)):
            raise TypeError(f"Type mismatch for key '{'.'.join(key_path)}': "
                            f"expected {type(default).__name__}, got {type(value).__name__}")
        else:
            merged[key] = value
    return merged


def load_toml(path) -> dict:
    with open(path, "rb") as f:
        return toml.load(f)


def load_resource_toml(name: str) -> dict:
    resource = _RESOURCE_DIR / name
    if not resource.is_file():
        raise FileNotFoundError(f"Missing packaged resource _resources/{name}")
    return load_toml(resource)


def load_default_config() -> dict:
    """The bundled defaults, freshly parsed on every call."""
    return load_resource_toml("nativegen.default.toml")


def find_user_config(config_file: Optional[str] = None) -> Optional[Path]:
    """Locate the user configuration file, if any.

    Resolution order:
    1. Explicit `config_file` argument.
    2. `NATIVEGEN_CONFIG` environment variable.
    3. `./nativegen.toml` relative to current working directory.
    An explicitly named file that does not exist is an error.
    """
    if config_file:
        path = Path(config_file).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Could not find config file {path}")
        return path

    from_env = os.environ.get(CONFIG_ENV)
    if from_env:
        path = Path(from_env).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"{CONFIG_ENV}={from_env} does not point to a readable file")
        return path

    path = Path.cwd() / CONFIG_FILE_NAME
    return path if path.is_file() else None


def try_load_config(config_file: Optional[str] = None) -> dict:
    """Load the user configuration merged on top of the defaults."""
    defaults = load_default_config()
    path = find_user_config(config_file)
    if path is None:
        logger.debug("No user config found, using the bundled defaults")
        return defaults
    logger.debug("Using config file %s", path)
    return merge_config(load_toml(path), defaults)


def read_file(path: str) -> str:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Could not find file {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def save_code(path: str, code: str) -> bool:
    """Write a generated source file; returns False when it was already up to date."""
    if os.path.isfile(path) and read_file(path) == code:
        return False
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    # Generated files always use \n, whatever the platform
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(code)
    return True
