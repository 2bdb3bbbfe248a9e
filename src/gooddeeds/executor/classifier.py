"""Map raw backend exceptions onto the user-facing error taxonomy.

Classification runs through an ordered list of rules; the first rule that
matches wins:

1. Timeout / network failures (retryable)
2. Credential and input validation failures reported by auth (not retryable)
3. Server-side 5xx failures (retryable)
4. Not-found, permission and other 4xx / constraint failures (not retryable)
5. Argument and format errors raised on the client (not retryable)
6. Anything else is UNKNOWN and not retryable

Within each rule structured fields (exception type, status_code, code) are
checked before message keywords. Keyword matching on exception text is a
best-effort path for adapters that only hand back a message.
"""

import asyncio
import logging
import socket

from gooddeeds.models.errors import (
    AuthError,
    BackendCallError,
    BackendError,
    ErrorClassification,
    ErrorKind,
    QueryError,
)

logger = logging.getLogger(__name__)

__all__ = ["ErrorClassifier"]

# Keyword tables (lowercase)
_TIMEOUT_KEYWORDS = ("timeout", "timed out")
_NETWORK_KEYWORDS = (
    "network",
    "connection",
    "socket",
    "dns",
    "unreachable",
    "failed to connect",
    "no internet",
    "handshake",
)
_SERVER_KEYWORDS = (
    "internal server error",
    "server error",
    "service unavailable",
    "bad gateway",
)
_PERMISSION_KEYWORDS = ("permission denied", "insufficient privilege")
_CONSTRAINT_KEYWORDS = ("duplicate key", "foreign key", "check constraint")

# (keyword, kind, user message)
_CREDENTIAL_RULES = (
    (
        "invalid login credentials",
        ErrorKind.AUTHENTICATION,
        "Invalid email or password. Please check your credentials and try again.",
    ),
    (
        "email not confirmed",
        ErrorKind.AUTHENTICATION,
        "Please check your email and click the confirmation link before signing in.",
    ),
    (
        "user already registered",
        ErrorKind.AUTHENTICATION,
        "An account with this email already exists. Please sign in instead.",
    ),
    (
        "email already registered",
        ErrorKind.AUTHENTICATION,
        "An account with this email already exists. Please sign in instead.",
    ),
    (
        "weak password",
        ErrorKind.VALIDATION,
        "Password is too weak. Please use at least 8 characters with a mix of "
        "letters and numbers.",
    ),
    (
        "invalid email",
        ErrorKind.VALIDATION,
        "Please enter a valid email address.",
    ),
)

_MSG_TIMEOUT = "The operation timed out. Please check your internet connection and try again."
_MSG_NETWORK = "Please check your internet connection and try again."
_MSG_AUTH_NETWORK = (
    "Unable to connect to the authentication server. Please check your internet connection."
)
_MSG_DB_NETWORK = "Unable to connect to the database. Please check your internet connection."
_MSG_SERVER = "A server error occurred. Please try again later."
_MSG_NOT_FOUND = "The requested information was not found."
_MSG_PERMISSION = "You do not have permission to perform this action."
_MSG_DUPLICATE = "This information already exists. Please use different values."
_MSG_DEPENDENCY = "Unable to complete the operation due to data dependencies."
_MSG_DATABASE = "A database error occurred. Please try again."
_MSG_AUTH = "Authentication failed. Please try again."
_MSG_INVALID_INPUT = "Some of the information entered is not valid. Please check it and try again."
_MSG_UNKNOWN = "An unexpected error occurred. Please try again."

# PostgREST "no rows returned" and SQLSTATE insufficient_privilege
_CODE_NOT_FOUND = "PGRST116"
_CODE_INSUFFICIENT_PRIVILEGE = "42501"


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def _error_text(error: BaseException) -> str:
    """Lowercased message plus type name, so 'SocketException'-style names match too."""
    message = error.message if isinstance(error, BackendCallError) else str(error)
    return f"{type(error).__name__} {message}".lower()


class ErrorClassifier:
    """
    Classify exceptions raised by backend operations.

    Stateless; one instance can be shared by every runner.

    Example:
        ```python
        classifier = ErrorClassifier()
        c = classifier.classify(AuthError("Invalid login credentials"), "sign_in")
        assert c.kind is ErrorKind.AUTHENTICATION
        assert not c.is_retryable
        ```
    """

    def classify(self, error: BaseException, operation_name: str = "") -> ErrorClassification:
        """Classify error; never raises."""
        if isinstance(error, BackendError):
            # Already classified further down the call stack
            return error.classification

        technical = self._technical_message(error)
        text = _error_text(error)

        for rule in (
            self._network_rule,
            self._credential_rule,
            self._server_rule,
            self._client_rule,
            self._argument_rule,
        ):
            result = rule(error, text)
            if result is not None:
                kind, user_message, retryable = result
                break
        else:
            kind, user_message, retryable = ErrorKind.UNKNOWN, _MSG_UNKNOWN, False

        classification = ErrorClassification(
            kind=kind,
            user_message=user_message,
            technical_message=technical,
            is_retryable=retryable,
            operation_name=operation_name,
        )
        logger.debug(
            f"Classified {type(error).__name__} from {operation_name!r} as {kind} "
            f"(retryable={retryable})"
        )
        return classification

    def is_retryable(self, error: BaseException) -> bool:
        return self.classify(error).is_retryable

    def user_message(self, error: BaseException) -> str:
        return self.classify(error).user_message

    # ------------------------------------------------------------------
    # Rules: each returns (kind, user_message, is_retryable) or None
    # ------------------------------------------------------------------

    def _network_rule(self, error, text):
        if isinstance(error, TimeoutError | asyncio.TimeoutError):
            return ErrorKind.TIMEOUT, _MSG_TIMEOUT, True
        if isinstance(error, ConnectionError | socket.gaierror):
            return ErrorKind.NETWORK, self._network_message(error), True

        if _contains_any(text, _TIMEOUT_KEYWORDS):
            return ErrorKind.TIMEOUT, _MSG_TIMEOUT, True
        if _contains_any(text, _NETWORK_KEYWORDS):
            return ErrorKind.NETWORK, self._network_message(error), True
        return None

    def _credential_rule(self, error, text):
        for keyword, kind, message in _CREDENTIAL_RULES:
            if keyword in text:
                return kind, message, False
        return None

    def _server_rule(self, error, text):
        status = getattr(error, "status_code", None)
        if isinstance(status, int) and 500 <= status <= 599:
            return ErrorKind.SERVER, _MSG_SERVER, True

        code = error.code if isinstance(error, QueryError) else None
        if code and code.startswith("5"):
            return ErrorKind.SERVER, _MSG_SERVER, True

        if _contains_any(text, _SERVER_KEYWORDS):
            return ErrorKind.SERVER, _MSG_SERVER, True
        return None

    def _client_rule(self, error, text):
        if not isinstance(error, BackendCallError):
            # Third-party client errors may still carry an HTTP status
            status = getattr(error, "status_code", None)
            if status == 404:
                return ErrorKind.NOT_FOUND, _MSG_NOT_FOUND, False
            if status in (401, 403) or _contains_any(text, _PERMISSION_KEYWORDS):
                return ErrorKind.PERMISSION, _MSG_PERMISSION, False
            if isinstance(status, int) and 400 <= status <= 499:
                return ErrorKind.DATABASE, _MSG_DATABASE, False
            return None

        status = error.status_code
        code = error.code if isinstance(error, QueryError) else None

        if code == _CODE_NOT_FOUND or status == 404:
            return ErrorKind.NOT_FOUND, _MSG_NOT_FOUND, False
        if (
            code == _CODE_INSUFFICIENT_PRIVILEGE
            or (isinstance(error, QueryError) and status in (401, 403))
            or _contains_any(text, _PERMISSION_KEYWORDS)
        ):
            return ErrorKind.PERMISSION, _MSG_PERMISSION, False

        if isinstance(error, AuthError):
            return ErrorKind.AUTHENTICATION, _MSG_AUTH, False

        if code == "23505" or "duplicate key" in text:
            return ErrorKind.DATABASE, _MSG_DUPLICATE, False
        if code == "23503" or "foreign key" in text:
            return ErrorKind.DATABASE, _MSG_DEPENDENCY, False
        if (code and code.startswith("23")) or _contains_any(text, _CONSTRAINT_KEYWORDS):
            return ErrorKind.DATABASE, _MSG_DATABASE, False

        # Remaining QueryErrors, 4xx or not
        return ErrorKind.DATABASE, _MSG_DATABASE, False

    def _argument_rule(self, error, text):
        if isinstance(error, ValueError | TypeError):
            return ErrorKind.VALIDATION, _MSG_INVALID_INPUT, False
        return None

    # ------------------------------------------------------------------

    @staticmethod
    def _network_message(error: BaseException) -> str:
        if isinstance(error, AuthError):
            return _MSG_AUTH_NETWORK
        if isinstance(error, QueryError):
            return _MSG_DB_NETWORK
        return _MSG_NETWORK

    @staticmethod
    def _technical_message(error: BaseException) -> str:
        message = error.message if isinstance(error, BackendCallError) else str(error)
        return f"{type(error).__name__}: {message}" if message else type(error).__name__
