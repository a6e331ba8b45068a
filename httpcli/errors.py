"""httpcli errors - fatal conditions and their exit codes."""

import click

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONTEXT = 2
EXIT_TRANSPORT = 3
EXIT_CLIENT_ERROR = 4
EXIT_SERVER_ERROR = 5


class ContextError(click.ClickException):
    """Missing, invalid or unpersistable HTTP context."""

    exit_code = EXIT_CONTEXT


class MissingBaseURL(ContextError):
    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Relative URL passed as argument but no absolute base URL is set. "
            'Either supply an absolute URL or use "httpcli url <base-url>" to set one.',
        )


class InvalidBaseURL(ContextError):
    pass


class PersistenceError(ContextError):
    pass


class TransportError(click.ClickException):
    """Network failure or unreadable stdin."""

    exit_code = EXIT_TRANSPORT
