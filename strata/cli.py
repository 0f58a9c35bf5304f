"""
strata command line entry point.

Commands (registration order): server, gateway, controller, version.
Global flags (registration order): --address, --address-controller,
--address-server-rpc, --ratelimit, --anonymous, --cert, --key, --json, --debug.

The storage engine itself is not part of this binary's front end: the server,
gateway and controller actions resolve and report the configuration they were
started with, which is what the engine consumes.
"""
import logging
from collections.abc import Mapping

from rich.console import Console
from rich.table import Table

from . import __release__, __commit__, __version__
from .application import bootstrap, run
from .config import ServerConfig, configure_logging, split_address
from .descriptors import Command, Flag

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "This version of the strata binary is built on an erasure coded backend. "
    "Each data block is coded as 8 data x 8 parity. Objects are immutable once written."
)


def _report(invocation, role, address, /):
    config = invocation.state
    host, port = split_address(address)
    logger.info("%s configured on %s:%d (tls=%s)", role, host or "*", port, config.tls)

    console = Console()
    if config.json:
        console.print_json(data={"role": role, **config.summary()})
        return

    table = Table(title="%s %s" % (invocation.application.name, role), title_justify="left", show_header=False)
    table.add_column(style="bold")
    table.add_column()
    for key, value in config.summary().items():
        table.add_row(key, str(value))
    console.print(table)


def server(invocation, /):
    _report(invocation, "server", invocation.state.address)


def gateway(invocation, /):
    _report(invocation, "gateway", invocation.state.address)


def controller(invocation, /):
    _report(invocation, "controller", invocation.state.controller_address)


def version(invocation, /):
    invocation.application.show_version(json=invocation.state.json)


COMMANDS = (
    Command("server", "start object storage server", action=server,
            descr="Start the object storage server, serving the S3 compatible API on --address."),
    Command("gateway", "start object storage gateway", action=gateway,
            descr="Start an object storage gateway in front of a set of storage servers."),
    Command("controller", "start the cluster controller", action=controller,
            descr="Start the controller that tracks storage servers over RPC."),
    Command("version", "print version and runtime diagnostics", action=version),
)

FLAGS = (
    Flag("address", default=":9000", descr="address for incoming server requests",
         envvar="STRATA_ADDRESS"),
    Flag("address-controller", default=":9001", descr="address for incoming controller requests",
         envvar="STRATA_ADDRESS_CONTROLLER"),
    Flag("address-server-rpc", default=":9002", descr="address for incoming server RPC requests",
         envvar="STRATA_ADDRESS_SERVER_RPC"),
    Flag("ratelimit", default=16, descr="limit for total concurrent requests",
         envvar="STRATA_RATELIMIT"),
    Flag("anonymous", default=False, descr="allow anonymous (unsigned) requests",
         envvar="STRATA_ANONYMOUS"),
    Flag("cert", default=None, descr="TLS certificate file",
         envvar="STRATA_CERT"),
    Flag("key", default=None, descr="TLS private key file",
         envvar="STRATA_KEY"),
    Flag("json", default=False, descr="enable json formatted output",
         envvar="STRATA_JSON"),
    Flag("debug", default=False, descr="enable debug logging"),
)


def before(options: Mapping) -> ServerConfig:
    """
    Runs once the global flags are parsed, before any command.
    """
    configure_logging(bool(options.get("debug")))
    return ServerConfig.from_options(options)


def build(**overrides):
    """
    Bootstrap the strata application (preconditions, registration, descriptor).
    """
    return bootstrap(
        COMMANDS,
        FLAGS,
        name="strata",
        usage="Cloud Storage Server",
        descr=DESCRIPTION,
        version=__version__,
        release=__release__,
        commit=__commit__,
        before=before,
        **overrides,
    )


def main(args=None):
    application = build()
    if args is None:
        return run(application)
    return run(application, args)


if __name__ == "__main__":
    main()
