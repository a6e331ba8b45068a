"""httpcli core - config directory, config loading, session resolution."""

import datetime
import functools
import os
from pathlib import Path

import yaml

from httpcli.errors import ContextError

CONFIG_DIR = Path.home() / ".config" / "http"
CONFIG_FILE_NAME = "config.yaml"

SESSION_ENV_VAR = "HTTPCLI_SESSION_ID"
CONFIG_DIR_ENV_VAR = "HTTPCLI_CONFIG_DIR"
BACKEND_ENV_VAR = "HTTPCLI_BACKEND"

BACKENDS = ("file", "env")
DEFAULT_BACKEND = "file"


def resolve_config_dir() -> Path:
    """Return the per-user config directory.

    $HTTPCLI_CONFIG_DIR wins over ~/.config/http. The directory is not
    created here; writers call ensure_config_dir().
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR


def ensure_config_dir(path: Path | None = None) -> Path:
    path = path or resolve_config_dir()
    path.mkdir(mode=0o700, parents=True, exist_ok=True)
    return path


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the config file to use.

    Resolution order:
      1. Explicit -c flag (no fallthrough if missing)
      2. <config-dir>/config.yaml
    """
    if config_file:
        p = Path(config_file)
        return p.resolve() if p.exists() else None
    p = resolve_config_dir() / CONFIG_FILE_NAME
    return p if p.exists() else None


def load_config(config_path: str | Path | None) -> dict:
    """Load YAML config file. Returns empty defaults if not found."""
    if config_path is None:
        return {"defaults": {}}
    path = Path(config_path)
    if not path.exists():
        return {"defaults": {}}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ContextError(f"Config file {path} must contain a mapping.")
    return {"defaults": data.get("defaults") or {}}


def resolve_backend(defaults: dict) -> str:
    """Pick the persistence backend: $HTTPCLI_BACKEND > config > 'file'."""
    backend = os.environ.get(BACKEND_ENV_VAR) or defaults.get("backend") or DEFAULT_BACKEND
    backend = str(backend).lower()
    if backend not in BACKENDS:
        raise ContextError(
            f"Unknown backend '{backend}'. Expected one of: {', '.join(BACKENDS)}.",
        )
    return backend


@functools.lru_cache(maxsize=None)
def resolve_session() -> str:
    """Return the session id scoping the persisted context.

    $HTTPCLI_SESSION_ID is returned verbatim when set. Otherwise the id
    groups every command run from the same parent shell on the same day:
    "<YYYY-MM-DD>-<ppid as 8 hex digits>". Scripts run in a sub-shell get
    a fresh session unless they set the override.
    """
    session_id = os.environ.get(SESSION_ENV_VAR)
    if session_id:
        return session_id
    datestamp = datetime.date.today().isoformat()
    return f"{datestamp}-{os.getppid():08x}"


def session_env_path(config_dir: Path | None = None) -> Path:
    """Path of the current session's state file."""
    config_dir = config_dir or resolve_config_dir()
    name = resolve_session().replace(os.sep, "_").replace("/", "_")
    return config_dir / f"{name}.env"
