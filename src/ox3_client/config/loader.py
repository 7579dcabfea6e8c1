"""JSON credentials file support.

The file format predates this package and keeps its historic
``consumer_secrect`` key::

    {
        "domain": "enter domain",
        "realm": "enter realm",
        "consumer_key": "enter key",
        "consumer_secrect": "enter secrect key",
        "email": "enter email",
        "password": "enter password"
    }
"""

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigError
from ..models import Credentials

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "openx_config.json"

CONFIG_TEMPLATE = {
    "domain": "enter domain",
    "realm": "enter realm",
    "consumer_key": "enter key",
    "consumer_secrect": "enter secrect key",
    "email": "enter email",
    "password": "enter password",
}


def load_credentials(path: Union[str, Path]) -> Credentials:
    """Read :class:`Credentials` from a JSON file.

    Missing keys load as blank strings and are rejected later by
    :meth:`Credentials.validate_fields`.

    :param path: Path of the JSON credentials file
    :return: Credentials (not yet validated)
    :rtype: Credentials
    :raises ConfigError: If the file cannot be read or decoded, is not a
        JSON object, or holds values of the wrong type
    """
    path = Path(path).expanduser()
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"could not read {path}: {e}", path=str(path)) from e

    try:
        data = json.loads(contents)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"could not decode {path} as JSON: {e}", path=str(path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"{path} must contain a JSON object, got {type(data).__name__}",
            path=str(path),
        )

    try:
        return Credentials.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(
            f"invalid credentials in {path}: {e.error_count()} field(s) rejected",
            path=str(path),
        ) from e


def create_config_template(path: Union[str, Path]) -> Path:
    """Write a credentials template to ``path``.

    When ``path`` is a directory, or does not name a ``.json`` file,
    ``openx_config.json`` is created inside it.

    :param path: Target file or directory
    :return: Path of the written file
    :rtype: Path
    :raises ConfigError: If the file cannot be written
    """
    path = Path(path).expanduser()
    if path.is_dir() or path.suffix != ".json":
        path = path / DEFAULT_CONFIG_FILENAME

    try:
        path.write_text(
            json.dumps(CONFIG_TEMPLATE, indent=4) + "\n", encoding="utf-8"
        )
    except OSError as e:
        raise ConfigError(f"could not create {path}: {e}", path=str(path)) from e

    logger.info(f"Config template created: {path}")
    return path
