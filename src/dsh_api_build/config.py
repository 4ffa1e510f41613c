"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for dsh_api_build:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.dsh-api-build/`` on macOS and Windows. Only the data directory is
  used, for crash logs. See :func:`get_data_dir`.
* **Project config** -- A ``dsh-api-build.json`` file in the working
  directory, deserialised into a :class:`~dsh_api_build.models.GeneratorConfig`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the project config into the effective
  configuration.

All generated files are written with :func:`atomic_write` (temp file then
rename), so a failed build never leaves a truncated module behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dsh_api_build.exceptions import ConfigError, OutputError
from dsh_api_build.models import GeneratorConfig

_APP_NAME = "dsh-api-build"
_PROJECT_CONFIG_FILENAME = "dsh-api-build.json"

ENV_SPEC = "DSH_API_BUILD_SPEC"
ENV_FEATURES = "DSH_API_BUILD_FEATURES"
ENV_TYPES_MODULE = "DSH_API_BUILD_TYPES_MODULE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/dsh-api-build/`` (default
    ``~/.local/share/dsh-api-build/``).
    On macOS/Windows: ``~/.dsh-api-build/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is removed and *path* keeps its previous content.

    Raises:
        OutputError: If the directory cannot be created or the file cannot
            be written. The original :class:`OSError` is chained.
    """
    fd = None
    tmp_path: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException as exc:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        if isinstance(exc, OSError):
            raise OutputError(f"Failed to write {path}: {exc}") from exc
        raise


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./dsh-api-build.json``.

    Args:
        directory: Directory to look in, the working directory by default.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or is not
            a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _split_features(value: str) -> list[str]:
    return [feature.strip() for feature in value.split(",") if feature.strip()]


# --- Precedence resolution ---


def resolve_config(
    cli_spec: Optional[str] = None,
    cli_features: Optional[list[str]] = None,
    cli_out_dir: Optional[str] = None,
    cli_types_module: Optional[str] = None,
    directory: Optional[Path] = None,
) -> GeneratorConfig:
    """Resolve the generator config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_spec``, ``cli_features``, ``cli_out_dir``,
           ``cli_types_module``)
        2. Environment variables (``DSH_API_BUILD_SPEC``,
           ``DSH_API_BUILD_FEATURES``, ``DSH_API_BUILD_TYPES_MODULE``)
        3. Project config (``./dsh-api-build.json``)
        4. Defaults

    Returns:
        The validated :class:`~dsh_api_build.models.GeneratorConfig`.

    Raises:
        ConfigError: If the project file is invalid or the merged values
            fail validation (for example an unknown feature name).
    """
    # 4 + 3. Defaults layered with the project file
    data: dict[str, Any] = dict(load_project_config(directory) or {})

    # 2. Environment variables
    env_spec = os.environ.get(ENV_SPEC)
    if env_spec:
        data["spec"] = env_spec
    env_features = os.environ.get(ENV_FEATURES)
    if env_features is not None:
        data["features"] = _split_features(env_features)
    env_types_module = os.environ.get(ENV_TYPES_MODULE)
    if env_types_module:
        data["types_module"] = env_types_module

    # 1. CLI flags (highest precedence)
    if cli_spec is not None:
        data["spec"] = cli_spec
    if cli_features:
        data["features"] = list(cli_features)
    if cli_out_dir is not None:
        data["out_dir"] = cli_out_dir
    if cli_types_module is not None:
        data["types_module"] = cli_types_module

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
