"""
Exception hierarchy for the Planka MCP server.

Kept in its own module so the client, auth and config code can share it
without circular imports.
"""


class PlankaError(Exception):
    """Base class for every failure talking to Planka or reading config."""

    prefix = "Planka error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{self.prefix}: {self.message}"


class PlankaHTTPError(PlankaError):
    """The request never produced a response (DNS, connection, TLS...)."""

    prefix = "HTTP error"


class PlankaStatusError(PlankaError):
    """Planka answered with a non-2xx status.

    The raw response body is kept unparsed so diagnostics survive even when
    the error payload does not look like the success schema.
    """

    def __init__(self, status_code, body):
        super().__init__(body)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        return f"HTTP status {self.status_code}: {self.body}"


class PlankaConfigError(PlankaError):
    """Missing or invalid configuration, or a login response without a token."""

    prefix = "Configuration error"


class PlankaJSONError(PlankaError):
    """A 2xx response whose body could not be decoded into the expected shape."""

    prefix = "JSON error"
