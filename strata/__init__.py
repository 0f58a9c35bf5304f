__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'strata'
__author__ = 'Strata Developers'
__license__ = 'Apache-2.0'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"
# Placeholders, stamped by the release build.
__release__ = "DEVELOPMENT"
__commit__ = "0000000"

from .application import *
from .descriptors import *
from .diagnostics import *
from .faults import *
from .registry import *
from .tries import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "__release__",
    "__commit__",
    "version_info"
)

# Load the exposed API of the application
__all__ += application.__all__  # type: ignore[attr-defined]
# Load the exposed API of the descriptors
__all__ += descriptors.__all__  # type: ignore[attr-defined]
# Load the exposed API of the diagnostics
__all__ += diagnostics.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry
__all__ += registry.__all__  # type: ignore[attr-defined]
# Load the exposed API of the tries
__all__ += tries.__all__  # type: ignore[attr-defined]
