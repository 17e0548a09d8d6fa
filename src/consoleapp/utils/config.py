import configparser
import copy
import json
import logging
from pathlib import Path

import yaml

from consoleapp.errors import ConfigNotFoundError, ConfigParseError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "oneInstanceOnly": True,
    "consoleOnly": True,
}

# Looked up next to the working directory when no --config is given
DEFAULT_SUFFIXES = (".ini", ".yaml", ".yml", ".json")

_INI_ROOT = "__root__"


def resolve_config_path(app_name, explicit=None, search_dir=None):
    """Work out which configuration file to read.

    Args:
        app_name (str): Used to build ``<app_name>.ini`` style default names.
        explicit (str, optional): Path given on the command line.
        search_dir (str, optional): Where to look for default files.
            Defaults to the current working directory.

    Returns:
        Path or None: The file to read, or None to use built-in defaults.

    Raises:
        ConfigNotFoundError: if ``explicit`` is given but does not exist.
    """
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise ConfigNotFoundError("Failed to read configuration from", path)
        return path

    base = Path(search_dir) if search_dir else Path.cwd()
    for suffix in DEFAULT_SUFFIXES:
        candidate = base / f"{app_name}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def _ini_scalar(raw):
    if raw == "":
        return raw
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, (dict, list)) or value is None:
        return raw
    return value


def _read_ini(text):
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    # Allow keys before the first section header
    parser.read_string(f"[{_INI_ROOT}]\n{text}")
    result = {}
    for section in parser.sections():
        for key, raw in parser.items(section, raw=True):
            result[key] = _ini_scalar(raw)
    return result


def read_config_file(path):
    """Read a configuration file into a flat mapping.

    The format is picked from the suffix: ``.json``, ``.yaml``/``.yml``,
    anything else is treated as ini. A missing file yields an empty mapping.

    Raises:
        ConfigParseError: if the file exists but cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        return {}

    try:
        text = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()
        if suffix == ".json":
            data = json.loads(text) if text.strip() else {}
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = _read_ini(text)
    except (OSError, ValueError, yaml.YAMLError, configparser.Error) as e:
        raise ConfigParseError(f"Failed to parse configuration ({e}) from", path) from e

    if not isinstance(data, dict):
        raise ConfigParseError("Configuration must be a mapping in", path)
    return data


def load_config(path=None, defaults=None):
    """Merge built-in defaults with the contents of ``path``.

    File values override defaults key by key; keys unknown to the defaults
    are kept as they are.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG if defaults is None else defaults)
    if path is not None:
        user_config = read_config_file(path)
        logger.debug("Loaded %d configuration keys from %s", len(user_config), path)
        merged.update(user_config)
    return merged
