"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables (``FILETX_`` prefix, ``__`` for nesting)
3) ``~/.config/simplefiletx/simplefiletx.yaml`` or an explicit path
4) Built-in model defaults

Example: ``FILETX_TRANSPORT__BASE_DIR=/srv/files`` -> ``transport.base_dir``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import FileTransportSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> FileTransportSettings:
    """Resolve settings, optionally reading YAML from ``config_path``."""
    if config_path is None:
        return FileTransportSettings(**dict(cli_params or {}))

    yaml_file = Path(config_path)

    class _PathBoundSettings(FileTransportSettings):
        model_config = SettingsConfigDict(yaml_file=yaml_file)

    return _PathBoundSettings(**dict(cli_params or {}))
