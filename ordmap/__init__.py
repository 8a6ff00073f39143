"""
`ordmap` provides `OrderedMap`, a mapping whose keys also have positions.

Entries can be reached by key in average constant time and by position, and
the key order can be changed explicitly through `insert`, `sort` and friends.

Behaviour that is a matter of policy (integrity checks after each mutation,
what to do when a positional write hits an existing key, copy-on-write) is
controlled through `ordmap.config`, whose defaults can be overridden with the
``ORDMAP_FLAGS`` environment variable, e.g.
``ORDMAP_FLAGS="check_invariants=True,on_ignored_index=warn"``.
"""

__docformat__ = "restructuredtext en"

# Set a default logger. It is important to do this before importing some other
# ordmap code, since this code may want to log some messages.
import logging


ordmap_logger = logging.getLogger("ordmap")
logging_default_handler = logging.StreamHandler()
logging_default_formatter = logging.Formatter(
    fmt="%(levelname)s (%(name)s): %(message)s"
)
logging_default_handler.setFormatter(logging_default_formatter)
ordmap_logger.setLevel(logging.WARNING)

if not ordmap_logger.hasHandlers():
    ordmap_logger.addHandler(logging_default_handler)


# Disable default log handler added to ordmap_logger when the module
# is imported.
def disable_log_handler(logger=ordmap_logger, handler=logging_default_handler):
    if logger.hasHandlers():
        logger.removeHandler(handler)


__version__ = "0.1.0"

from ordmap.configdefaults import config


change_flags = config.change_flags

from ordmap.ordered_map import (
    CLEAR,
    Element,
    OrderedItemsView,
    OrderedKeysView,
    OrderedMap,
    OrderedValuesView,
)
from ordmap.printing import debugprint, dump
from ordmap.utils import (
    IgnoredIndexWarning,
    InconsistencyError,
    PreconditionViolation,
)


__all__ = [
    "CLEAR",
    "Element",
    "IgnoredIndexWarning",
    "InconsistencyError",
    "OrderedItemsView",
    "OrderedKeysView",
    "OrderedMap",
    "OrderedValuesView",
    "PreconditionViolation",
    "change_flags",
    "config",
    "debugprint",
    "disable_log_handler",
    "dump",
]
