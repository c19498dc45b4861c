"""
Typed Exception Hierarchy for the Selection Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A selection runs on behalf of an HTTP caller. Anything that goes wrong while
resolving selectors must reach the transport layer as ONE recognisable kind
carrying a status code, never as a raw ValueError, TypeError or driver error:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - handling at the API boundary:
    try:
        items = finalizer.get_selection(query, request)
    except SelectionError as e:
        return json_response({"error": e.code, "message": str(e)}, e.status_code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    SelectionKernelError (base)
    |
    +-- SelectionError              caller-visible, carries status_code
    |   +-- EmptySelectionError     status_code 416
    |
    +-- DateParsingError            internal, wrapped by date selectors
    |
    +-- ConfigurationError          raised at registration / load time
    |   +-- UnknownSelectorError
    |
    +-- UnknownColumnError          internal, raised by query builders

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|--------------------------------------
Selection       | SELECTION_ERROR               | Bad selector value, arity, conflict
                | EMPTY_SELECTION               | Result empty and emptiness disallowed
----------------|-------------------------------|--------------------------------------
Dates           | DATE_PARSING_ERROR            | Unparseable date or invalid interval
----------------|-------------------------------|--------------------------------------
Configuration   | SELECTION_CONFIGURATION_ERROR | Malformed resource configuration
                | UNKNOWN_SELECTOR              | Selector name has no transformation
----------------|-------------------------------|--------------------------------------
Query           | UNKNOWN_COLUMN                | Column not mapped on the entity

===============================================================================
PROPAGATION
===============================================================================

Only SelectionError (and subclasses) may leave SelectionResolver during a
request. DateParsingError and UnknownColumnError are converted at the
selector / resolver boundary. Configuration errors never happen per request:
they surface when a registry is built.
"""


class SelectionKernelError(Exception):
    """
    Base exception for all selection kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SELECTION_KERNEL_ERROR"


# Caller-visible selection errors


class SelectionError(SelectionKernelError):
    """
    A selection could not be resolved for the current request.

    The only error kind callers see. `status_code` follows HTTP conventions
    so the transport layer can map it directly.
    """

    code: str = "SELECTION_ERROR"
    default_status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = (
            status_code if status_code is not None else self.default_status_code
        )
        super().__init__(message)

    def prefixed(self, selector: str) -> "SelectionError":
        """Copy of this error with the selector name in front of the message."""
        return type(self)(f"{selector}: {self}", status_code=self.status_code)


class EmptySelectionError(SelectionError):
    """The resolved selection is empty and the resource does not allow it."""

    code: str = "EMPTY_SELECTION"
    default_status_code: int = 416


# Date errors


class DateParsingError(SelectionKernelError):
    """A date value or an interval could not be interpreted."""

    code: str = "DATE_PARSING_ERROR"

    def __init__(self, message: str, value: object = None, fmt: str | None = None):
        self.value = value
        self.fmt = fmt
        super().__init__(message)


# Configuration errors


class ConfigurationError(SelectionKernelError):
    """Base exception for malformed selection configuration."""

    code: str = "SELECTION_CONFIGURATION_ERROR"


class UnknownSelectorError(ConfigurationError):
    """A configured selector name has no registered transformation."""

    code: str = "UNKNOWN_SELECTOR"

    def __init__(self, selector: str, available: list[str]):
        self.selector = selector
        self.available = available
        super().__init__(
            f"Unknown selector '{selector}'. "
            f"Available selectors: {', '.join(available)}"
        )


# Query errors


class UnknownColumnError(SelectionKernelError):
    """A column name is not mapped on the queried entity."""

    code: str = "UNKNOWN_COLUMN"

    def __init__(self, column: str, entity: str):
        self.column = column
        self.entity = entity
        super().__init__(f"Column '{column}' does not exist on {entity}")
