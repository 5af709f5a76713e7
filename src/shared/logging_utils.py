"""
Colored logging utilities for the OAuth 2.0 token endpoint.

Each component gets its own logger under the shared ``oauth`` logger. Messages
are rendered as a colored "source → destination" header followed by one line
per field, so a token request can be followed from validation through grant
dispatch to the response in the console.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum

from colorama import Fore, Style, init

init(autoreset=True)  # Initialize colorama for Windows compatibility

ROOT_LOGGER_NAME = "oauth"

COLORS = {
    'CLIENT': Fore.BLUE + Style.BRIGHT,
    'TOKEN-ENDPOINT': Fore.GREEN + Style.BRIGHT,
    'AUTH-AUTHORITY': Fore.YELLOW + Style.BRIGHT,
    'AUTH-STORAGE': Fore.CYAN + Style.BRIGHT,
    'SYSTEM': Fore.MAGENTA + Style.BRIGHT,
    'ERROR': Fore.RED + Style.BRIGHT,
    'SUCCESS': Fore.GREEN + Style.BRIGHT,
    'INFO': Fore.CYAN,
    'HEADER': Fore.WHITE + Style.BRIGHT,
    'SEPARATOR': Fore.WHITE + Style.DIM,
    'RESET': Style.RESET_ALL
}

SEPARATOR = '-' * 60

# Field names containing these fragments are never logged
REDACTED_FRAGMENTS = ('password', 'secret', 'key')
# Field names containing these fragments are logged truncated
TRUNCATED_FRAGMENTS = ('token', 'code')
TRUNCATED_LENGTH = 10

REDACTED_HEADERS = frozenset({'authorization', 'cookie', 'x-api-key'})


class ComponentType(str, Enum):
    """Token endpoint component types."""
    CLIENT = "CLIENT"
    TOKEN_ENDPOINT = "TOKEN-ENDPOINT"
    AUTH_AUTHORITY = "AUTH-AUTHORITY"
    AUTH_STORAGE = "AUTH-STORAGE"
    SYSTEM = "SYSTEM"


class MessageType(str, Enum):
    """Token endpoint message types for logging."""
    REQUEST = "REQUEST"
    RESPONSE = "RESPONSE"
    ERROR = "ERROR"
    INFO = "INFO"
    DEBUG = "DEBUG"
    VALIDATION_FAILURE = "VALIDATION-FAILURE"
    GRANT_DISPATCH = "GRANT-DISPATCH"
    TOKEN_ISSUED = "TOKEN-ISSUED"
    GRANT_REJECTED = "GRANT-REJECTED"


SUCCESS_MESSAGE_TYPES = frozenset({MessageType.RESPONSE.value, MessageType.TOKEN_ISSUED.value, 'SUCCESS'})


def configure_logging(level: str = "INFO") -> None:
    """
    Set the level shared by every component logger.

    Args:
        level: Standard logging level name (DEBUG, INFO, WARNING, ...)
    """
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level.upper())


def _paint(color_name: str, text: str) -> str:
    return f"{COLORS.get(color_name, COLORS['INFO'])}{text}{COLORS['RESET']}"


class OAuthLogger:
    """
    Colored logger for one token endpoint component.

    Output goes through the standard ``logging`` module: successful flows at
    INFO, failures at WARNING. The level is taken from the shared ``oauth``
    logger, see ``configure_logging``.
    """

    def __init__(self, component_name: str):
        """
        Args:
            component_name: Name of the component (TOKEN-ENDPOINT, AUTH-AUTHORITY, etc.)
        """
        self.component_name = component_name.upper()
        self.colors = COLORS

        root = logging.getLogger(ROOT_LOGGER_NAME)
        if root.level == logging.NOTSET:
            root.setLevel(logging.INFO)

        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name.lower()}")

        # One handler per component logger, however often it is created
        self.logger.handlers.clear()
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _format_timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    @staticmethod
    def _truncate(value: Any) -> Any:
        if isinstance(value, list):
            return [OAuthLogger._truncate(item) for item in value]
        if isinstance(value, str) and len(value) > TRUNCATED_LENGTH:
            return f"{value[:TRUNCATED_LENGTH]}..."
        return value

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Redact secrets and truncate tokens and codes before they are logged.

        Multi-valued fields are given as lists; each value is truncated.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if any(fragment in key_lower for fragment in REDACTED_FRAGMENTS):
                sanitized[key] = '[REDACTED]'
            elif key_lower != 'error_code' and any(fragment in key_lower for fragment in TRUNCATED_FRAGMENTS):
                sanitized[key] = self._truncate(value)
            else:
                sanitized[key] = value

        return sanitized

    def log_oauth_message(self,
                          source: str,
                          destination: str,
                          message_type: str,
                          data: Dict[str, Any],
                          success: bool = True):
        """
        Log a message passed between two components.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Type of message (REQUEST, TOKEN-ISSUED, etc.)
            data: Message fields, sanitized before output
            success: Whether the operation was successful
        """
        if not success:
            type_color = 'ERROR'
        elif message_type in SUCCESS_MESSAGE_TYPES:
            type_color = 'SUCCESS'
        else:
            type_color = 'INFO'

        header = (
            f"{COLORS['HEADER']}[{self._format_timestamp()}] "
            f"{_paint(source.upper(), source)} → {_paint(destination.upper(), destination)}"
        )
        lines = [header, _paint(type_color, f"{message_type}:")]
        lines.extend(f"  {_paint('INFO', key + ':')} {value}" for key, value in self._sanitize_data(data).items())
        lines.append(_paint('SEPARATOR', SEPARATOR))

        log = self.logger.info if success else self.logger.warning
        log("\n".join(lines))

    def log_http_request(self,
                         method: str,
                         path: str,
                         params: Optional[Dict[str, Any]] = None,
                         headers: Optional[Dict[str, str]] = None):
        """Log an incoming request with its form parameters and headers."""
        request_data: Dict[str, Any] = {"method": method, "path": path}

        if params:
            request_data.update(self._sanitize_data(params))

        if headers:
            request_data["headers"] = {
                key: '[REDACTED]' if key.lower() in REDACTED_HEADERS else value
                for key, value in headers.items()
            }

        self.log_oauth_message(
            source=ComponentType.CLIENT.value,
            destination=self.component_name,
            message_type="HTTP-REQUEST",
            data=request_data
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        error_data = {"error_type": error_type, "message": message, **(details or {})}

        self.log_oauth_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type=MessageType.ERROR.value,
            data=error_data,
            success=False
        )

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None):
        lines = [_paint('INFO', f"[{self._format_timestamp()}] {self.component_name}: {message}")]
        lines.extend(f"  {key}: {value}" for key, value in (details or {}).items())
        self.logger.info("\n".join(lines))

    def log_startup(self, port: int, additional_info: Optional[Dict[str, Any]] = None):
        """Log the address a component is serving on."""
        lines = [_paint('SUCCESS', f"🚀 {self.component_name} started on port {port}")]
        lines.extend(f"   {key}: {value}" for key, value in (additional_info or {}).items())
        lines.append(_paint('SEPARATOR', SEPARATOR))
        self.logger.info("\n".join(lines))
