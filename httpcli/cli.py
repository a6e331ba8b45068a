"""httpcli CLI - HTTP client that remembers a base URL and headers per shell session."""

import sys

import click

from httpcli import core, executor
from httpcli.errors import (
    EXIT_CLIENT_ERROR,
    EXIT_CONTEXT,
    EXIT_OK,
    EXIT_SERVER_ERROR,
    EXIT_USAGE,
    TransportError,
)
from httpcli.headers import (
    CONTENT_TYPE,
    delete_header,
    exclude_headers,
    format_headers,
    get_header,
    is_valid_header_name,
    set_header,
    split_header_names,
    to_request_headers,
)
from httpcli.output import format_request, format_response, write_body
from httpcli.store import get_base_url, get_headers, make_store, set_base_url, set_headers
from httpcli.urls import combine_urls

DEFAULT_CONTENT_TYPE = "application/json"
BODY_METHODS = ("POST", "PUT")

TOOL_HELP = """\
httpcli: HTTP client that keeps a base URL and headers between calls.

Context is stored per session: by default one file per parent shell per
day under ~/.config/http/. Set HTTPCLI_SESSION_ID to pick a session
explicitly (scripts run in a sub-shell need this).

\b
CONTEXT
───────
  httpcli url                      Print the base URL
  httpcli url <absolute-url>       Set the base URL ("-" clears it)
  httpcli set <name> <value>       Set a header
  httpcli set <name>               Remove a header
  httpcli list                     Print headers
  httpcli clear                    Remove all headers
  httpcli reset                    Remove all headers and the base URL
  httpcli env                      Print base URL and headers
  httpcli session                  Print the session id

\b
REQUESTS
────────
  httpcli GET     <url>
  httpcli DELETE  <url>
  httpcli POST    <url> [content-type]
  httpcli PUT     <url> [content-type]
  httpcli <VERB>  <url> [content-type]

  A relative <url> is combined with the base URL: paths are joined and
  query parameters merged (the argument's win). An absolute <url> is
  used as-is.

  POST and PUT read the request body from stdin. Other methods send a
  body only when [content-type] is given. Content-Type defaults to the
  stored header, then application/json.

  -x NAMES     Comma-delimited headers to leave out of this request
  -p           Pretty-print JSON responses
  -q           Don't dump request/response metadata to stderr

\b
EXIT CODES
──────────
  0 success, 1 usage, 2 base URL/context, 3 network or stdin,
  4 HTTP 4xx, 5 HTTP 5xx

\b
CONFIG FILE (~/.config/http/config.yaml)
────────────────────────────────────────
  \b
  defaults:
    backend: file          # file | env (HTTPCLI_BACKEND overrides)
    timeout: 30            # seconds; unset waits forever
    pretty: false
    quiet: false
    exclude: []            # headers never sent
    content_type: application/json

  With backend "env" the context lives in HTTPCLI_* variables and
  commands that change it print a script to eval:
    eval "$(httpcli url https://api.example.com)"
"""


class VerbGroup(click.Group):
    """Dispatches known verbs case-insensitively; anything else is an HTTP method."""

    def get_command(self, ctx, cmd_name):
        cmd = super().get_command(ctx, cmd_name.lower())
        if cmd is not None:
            return cmd
        return _http_command(cmd_name.upper())

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_USAGE
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = EXIT_USAGE
            raise


@click.group(
    cls=VerbGroup,
    help=TOOL_HELP,
    invoke_without_command=True,
    context_settings={"max_content_width": 88},
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: config.yaml in the config dir.",
)
@click.pass_context
def main(ctx, config_file):
    """HTTP client that remembers a base URL and headers per shell session."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help(), err=True)
        ctx.exit(EXIT_USAGE)

    config = core.load_config(core.resolve_config_path(config_file))
    ctx.obj = config["defaults"]


# ── Context verbs ───────────────────────────────────────────────────────


def _open_store(defaults):
    store = make_store(core.resolve_backend(defaults))
    return store, store.load()


@main.command("url")
@click.argument("base_url", required=False)
@click.pass_obj
def url_cmd(defaults, base_url):
    """Print or set the base URL ("-" clears it)."""
    store, context = _open_store(defaults)
    if base_url is None:
        current = get_base_url(context)
        if current is None:
            click.echo("No base URL set.", err=True)
            sys.exit(EXIT_CONTEXT)
        click.echo(current, nl=False)
        click.echo(err=True)
        return
    set_base_url(context, base_url)
    store.store(context)


@main.command("set")
@click.argument("name")
@click.argument("value", required=False)
@click.pass_obj
def set_cmd(defaults, name, value):
    """Set a header, or remove it when no value is given."""
    if not is_valid_header_name(name):
        raise click.UsageError(
            f"Invalid header name '{name}': only letters, digits and '-' are allowed.",
        )
    store, context = _open_store(defaults)
    headers = get_headers(context)
    if value is None:
        delete_header(headers, name)
    else:
        set_header(headers, name, value)
    set_headers(context, headers)
    store.store(context)


@main.command("list")
@click.pass_obj
def list_cmd(defaults):
    """Print the stored headers."""
    _, context = _open_store(defaults)
    click.echo(format_headers(get_headers(context)), nl=False)


@main.command("clear")
@click.pass_obj
def clear_cmd(defaults):
    """Remove all stored headers."""
    store, context = _open_store(defaults)
    set_headers(context, None)
    store.store(context)


@main.command("reset")
@click.pass_obj
def reset_cmd(defaults):
    """Remove all stored headers and the base URL."""
    store, context = _open_store(defaults)
    set_headers(context, None)
    set_base_url(context, None)
    store.store(context)


@main.command("env")
@click.pass_obj
def env_cmd(defaults):
    """Print the base URL and headers."""
    _, context = _open_store(defaults)
    click.echo(f"{get_base_url(context) or ''}\n")
    click.echo(format_headers(get_headers(context)), nl=False)


@main.command("session")
def session_cmd():
    """Print the session id."""
    click.echo(core.resolve_session())


# ── HTTP verbs ──────────────────────────────────────────────────────────


def _http_command(method):
    @click.command(name=method, help=f"Send an HTTP {method} request.")
    @click.argument("url")
    @click.argument("content_type", required=False)
    @click.option(
        "-x",
        "--exclude",
        multiple=True,
        help="Comma-delimited header names to leave out. Repeatable.",
    )
    @click.option("-p", "--pretty", is_flag=True, default=False, help="Pretty-print JSON.")
    @click.option("-q", "--quiet", is_flag=True, default=False, help="No stderr dump.")
    @click.option("--timeout", type=float, default=None, help="Timeout in seconds.")
    @click.pass_obj
    def http_cmd(defaults, url, content_type, exclude, pretty, quiet, timeout):
        code = _cmd_http(
            defaults,
            method,
            url,
            content_type,
            exclude,
            pretty or bool(defaults.get("pretty")),
            quiet or bool(defaults.get("quiet")),
            timeout if timeout is not None else defaults.get("timeout"),
        )
        if code != EXIT_OK:
            sys.exit(code)

    return http_cmd


def _cmd_http(defaults, method, url, content_type, exclude, pretty, quiet, timeout):
    _, context = _open_store(defaults)
    base_url = get_base_url(context)
    headers = get_headers(context)

    target = combine_urls(base_url, url)

    names = list(defaults.get("exclude") or []) + split_header_names(exclude)
    headers = exclude_headers(headers, names)

    body = None
    if method in BODY_METHODS or content_type is not None:
        body = _read_stdin()
        content_type = _resolve_content_type(content_type, headers, defaults)
        set_header(headers, CONTENT_TYPE, content_type)

    if not quiet:
        click.echo(format_request(method, target, headers, body), err=True, nl=False)

    result = executor.execute_request(
        method=method,
        url=target,
        headers=to_request_headers(headers),
        body=body,
        timeout=timeout,
    )
    if result.error:
        raise TransportError(f"HTTP error: {result.error}")

    try:
        if not quiet:
            click.echo(format_response(result), err=True, nl=False)
        write_body(result, pretty=pretty, quiet=quiet)
    finally:
        result.close()

    if result.body_error:
        click.echo(f"Error copying response body to stdout: {result.body_error}", err=True)

    return _status_exit_code(result.status_code)


def _read_stdin():
    try:
        return click.get_binary_stream("stdin").read()
    except OSError as e:
        raise TransportError(f"Error reading stdin: {e}") from e


def _resolve_content_type(explicit, headers, defaults):
    """CLI argument > stored header > config default > application/json."""
    if explicit:
        return explicit
    return (
        get_header(headers, CONTENT_TYPE)
        or defaults.get("content_type")
        or DEFAULT_CONTENT_TYPE
    )


def _status_exit_code(status_code):
    if status_code >= 500:
        return EXIT_SERVER_ERROR
    if status_code >= 400:
        return EXIT_CLIENT_ERROR
    return EXIT_OK
