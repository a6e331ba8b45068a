"""httpcli store - persisted HTTP context (base URL + headers) per session.

Two media are supported:

- FileContextStore: one KEY='value' file per session under the config dir.
- EnvContextStore: HTTPCLI_* environment variables. A child process can't
  change its parent shell's environment, so store() prints a script the
  shell has to eval for the change to stick.
"""

import contextlib
import os
import tempfile
from pathlib import Path

import click
from dotenv import dotenv_values

from httpcli import core
from httpcli.errors import InvalidBaseURL, PersistenceError
from httpcli.headers import Headers, decode_headers, encode_headers, is_header_key
from httpcli.urls import parse_absolute_url

URL_KEY = "URL"
CLEAR_SENTINEL = "-"
ENV_PREFIX = "HTTPCLI_"


class Context:
    """Flat storage mapping for one session, plus a snapshot of it as loaded."""

    def __init__(self, values: dict[str, str] | None = None):
        self.initial: dict[str, str] = dict(values or {})
        self.values: dict[str, str] = dict(values or {})

    def set(self, key: str, value: str | None) -> None:
        """Set a storage key; an empty value removes it."""
        if value:
            self.values[key] = value
        else:
            self.values.pop(key, None)

    @property
    def removed_keys(self) -> list[str]:
        return sorted(k for k in self.initial if k not in self.values)


# ── Base URL ─────────────────────────────────────────────────────────────


def get_base_url(ctx: Context) -> str | None:
    """Return the stored base URL, or None if unset.

    A stored value that isn't an absolute URL raises InvalidBaseURL.
    """
    url_s = ctx.values.get(URL_KEY)
    if not url_s:
        return None
    try:
        parts = parse_absolute_url(url_s)
    except ValueError as e:
        raise InvalidBaseURL(f"Error parsing base URL: {e}") from e
    if parts is None:
        raise InvalidBaseURL(f"Base URL must be an absolute URL, got '{url_s}'.")
    return parts.geturl()


def set_base_url(ctx: Context, url_s: str | None) -> None:
    """Set the base URL; '-', '' and None clear it."""
    if not url_s or url_s == CLEAR_SENTINEL:
        ctx.set(URL_KEY, None)
        return
    try:
        parts = parse_absolute_url(url_s)
    except ValueError as e:
        raise InvalidBaseURL(f"Error parsing absolute URL: {e}") from e
    if parts is None:
        raise InvalidBaseURL(f"Base URL must be an absolute URL, got '{url_s}'.")
    ctx.set(URL_KEY, parts.geturl())


# ── Headers ──────────────────────────────────────────────────────────────


def get_headers(ctx: Context) -> Headers:
    return decode_headers(ctx.values)


def set_headers(ctx: Context, headers: Headers | None) -> None:
    """Replace the stored header set; None clears every header."""
    encoded = encode_headers(headers)
    for key in [k for k in ctx.values if is_header_key(k)]:
        if key not in encoded:
            del ctx.values[key]
    for key, value in encoded.items():
        ctx.set(key, value)


# ── File backend ─────────────────────────────────────────────────────────


def _quote_value(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def render_env_file(values: dict[str, str]) -> str:
    return "".join(f"{key}={_quote_value(values[key])}\n" for key in sorted(values))


class FileContextStore:
    """Context persisted in <config-dir>/<session>.env."""

    def __init__(self, path: Path | None = None):
        self.path = path or core.session_env_path()

    def load(self) -> Context:
        """Read the session file; missing or unreadable means empty."""
        try:
            raw = dotenv_values(self.path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            raw = {}
        return Context({k: v for k, v in raw.items() if v})

    def store(self, ctx: Context) -> None:
        """Atomically rewrite the session file (mode 0600)."""
        try:
            core.ensure_config_dir(self.path.parent)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(render_env_file(ctx.values))
                os.replace(tmp, self.path)
            except OSError:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise PersistenceError(f"Error writing {self.path}: {e}") from e
        ctx.initial = dict(ctx.values)


# ── Environment backend ──────────────────────────────────────────────────


def _shell_quote(value: str) -> str:
    """Quote for bash's $'...' form."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"$'{escaped}'"


def _is_context_key(key: str) -> bool:
    return key == URL_KEY or is_header_key(key)


class EnvContextStore:
    """Context held in HTTPCLI_URL / HTTPCLI_HEADER_* environment variables."""

    def __init__(self, environ=None, prefix: str = ENV_PREFIX):
        self.environ = os.environ if environ is None else environ
        self.prefix = prefix

    def load(self) -> Context:
        values = {}
        for name, value in self.environ.items():
            if not name.startswith(self.prefix) or not value:
                continue
            key = name[len(self.prefix) :]
            if _is_context_key(key):
                values[key] = value
        return Context(values)

    def render_script(self, ctx: Context) -> str:
        lines = [f"unset {self.prefix}{key}" for key in ctx.removed_keys]
        for key in sorted(ctx.values):
            lines.append(f"export {self.prefix}{key}={_shell_quote(ctx.values[key])}")
        return "".join(line + "\n" for line in lines)

    def store(self, ctx: Context) -> None:
        """Update environ in place and print the script for the parent shell."""
        script = self.render_script(ctx)
        for key in ctx.removed_keys:
            self.environ.pop(self.prefix + key, None)
        for key, value in ctx.values.items():
            self.environ[self.prefix + key] = value
        ctx.initial = dict(ctx.values)
        click.echo(script, nl=False)


def make_store(backend: str, config_dir: Path | None = None):
    if backend == "env":
        return EnvContextStore()
    return FileContextStore(core.session_env_path(config_dir))
