"""
Strata server configuration and logging setup.

ServerConfig is assembled from the parsed global flags before any command
runs. It validates the listen addresses, the rate limit and the TLS pair, and
reports violations as InvalidConfigError faults.

Environment
- STRATA_LOG_LEVEL: logging level name used when --debug is not given
  (defaults to WARNING).
"""
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

from .faults import FaultCode, InvalidConfigError, getdoc

logger = logging.getLogger(__name__)


def _invalid(message, hint, /):
    return InvalidConfigError(
        message,
        title="invalid configuration",
        code=FaultCode.INVALID_CONFIG,
        hint=hint,
        docs=getdoc(FaultCode.INVALID_CONFIG),
    )


def split_address(address, /):
    """
    Split "[host]:port" into (host, port); an empty host means every interface.

    Raises
    - InvalidConfigError: missing colon, non-numeric port or port out of range.
    """
    host, colon, port = str(address).rpartition(":")
    if not colon or not port.isdigit() or not 0 < int(port) < 65536:
        raise _invalid(
            "address %r is not a valid [host]:port pair" % address,
            "use a form like ':9000' or 'localhost:9000'",
        )
    return host, int(port)


@dataclass(frozen=True)
class ServerConfig:
    address: str = ":9000"
    controller_address: str = ":9001"
    rpc_address: str = ":9002"
    anonymous: bool = False
    cert_file: str | None = None
    key_file: str | None = None
    rate_limit: int = 16
    json: bool = False
    debug: bool = False

    def __post_init__(self):
        for address in (self.address, self.controller_address, self.rpc_address):
            split_address(address)
        if self.rate_limit < 1:
            raise _invalid(
                "rate limit must be a positive integer, got %d" % self.rate_limit,
                "pass --ratelimit with a value of at least 1",
            )
        if bool(self.cert_file) != bool(self.key_file):
            raise _invalid(
                "tls needs both a certificate and a key",
                "pass --cert and --key together, or neither",
            )

    @property
    def tls(self):
        return bool(self.cert_file and self.key_file)

    @classmethod
    def from_options(cls, options: Mapping) -> "ServerConfig":
        """
        Build a config from parsed flag values keyed by parameter name.

        Missing keys fall back to the dataclass defaults; None values are ignored.
        """
        fields = {
            "address": "address",
            "address_controller": "controller_address",
            "address_server_rpc": "rpc_address",
            "anonymous": "anonymous",
            "cert": "cert_file",
            "key": "key_file",
            "ratelimit": "rate_limit",
            "json": "json",
            "debug": "debug",
        }
        values = {
            field: options[param] for param, field in fields.items() if options.get(param) is not None
        }
        return cls(**values)

    def summary(self) -> dict:
        return {
            "address": self.address,
            "controller-address": self.controller_address,
            "rpc-address": self.rpc_address,
            "anonymous": self.anonymous,
            "tls": self.tls,
            "rate-limit": self.rate_limit,
        }


def configure_logging(debug=False, /):
    """
    Route the root logger through a rich handler on the error stream.

    --debug wins over STRATA_LOG_LEVEL; unknown level names fall back to WARNING.
    """
    if debug:
        level = logging.DEBUG
    else:
        level = logging.getLevelNamesMapping().get(os.getenv("STRATA_LOG_LEVEL", "WARNING").upper(), logging.WARNING)

    # Clear existing handlers to avoid duplication in repeated runs
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler])
    logger.debug("logging configured at %s", logging.getLevelName(level))
    return level


__all__ = (
    "ServerConfig",
    "split_address",
    "configure_logging",
)
