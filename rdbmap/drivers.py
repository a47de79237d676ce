"""Driver registry — process-wide, append-only registration of database drivers.

A driver is named by its dotted import path: a DB-API module such as
``sqlite3`` or ``psycopg2``, or a class inside one such as
``mypackage.drivers.TestDriver``. Registration loads the driver once and
remembers it; registering an already registered name does nothing.

Descriptors receive a registry by injection. ``default_registry`` is the
shared instance used when none is given.
"""

from __future__ import annotations

import importlib
import logging
import threading
from typing import Any, Iterable

from .errors import DriverNotFound

logger = logging.getLogger(__name__)


# Driver used when a descriptor connects through an ODBC DSN
ODBC_BRIDGE_DRIVER = "pyodbc"
ODBC_URL_PREFIX = "jdbc:odbc:"

# Drivers registered by ``register_default_drivers`` when they are installed
DEFAULT_DRIVERS: tuple[str, ...] = (
    "pymysql",
    "psycopg2",
)

# Connection string prefixes claimed by well-known drivers that do not
# declare their own
KNOWN_URL_PREFIXES: dict[str, tuple[str, ...]] = {
    "sqlite3": ("sqlite:", "jdbc:sqlite:"),
    "pymysql": ("mysql:", "jdbc:mysql:"),
    "MySQLdb": ("mysql:", "jdbc:mysql:"),
    "psycopg2": ("postgresql:", "postgres:", "jdbc:postgresql:"),
    "psycopg": ("postgresql:", "postgres:", "jdbc:postgresql:"),
    "pyodbc": ("odbc:", ODBC_URL_PREFIX),
    "oracledb": ("oracle:", "jdbc:oracle:"),
}

# Raised by importlib for missing modules and for malformed names (empty,
# relative)
_LOAD_ERRORS = (ImportError, ValueError, TypeError)


def load_driver(name: str) -> Any:
    """Import the driver named by *name*.

    Tries *name* as a module first, then as ``module.attribute``.
    Raises ImportError if neither resolves, ValueError or TypeError for a
    malformed name.
    """
    try:
        return importlib.import_module(name)
    except ImportError:
        module_name, sep, attr = name.rpartition(".")
        if not sep:
            raise
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ImportError(f"{module_name} has no driver {attr!r}") from exc


class DriverRegistry:
    """Loaded drivers indexed by name."""

    def __init__(self) -> None:
        self._drivers: dict[str, Any] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: str) -> bool:
        return name in self._drivers

    def __len__(self) -> int:
        return len(self._drivers)

    def registered(self) -> list[str]:
        """Names of registered drivers, in registration order."""
        return list(self._drivers)

    def get(self, name: str) -> Any | None:
        return self._drivers.get(name)

    def _register(self, name: str) -> Any:
        with self._lock:
            if name in self._drivers:
                return self._drivers[name]
            driver = load_driver(name)
            self._drivers[name] = driver
        logger.debug("Registered database driver %s", name)
        return driver

    def register_if_present(self, name: str) -> bool:
        """Register *name* if it can be loaded; otherwise do nothing.

        Returns whether the driver is registered afterwards.
        """
        try:
            self._register(name)
        except _LOAD_ERRORS:
            logger.debug("Database driver %s not present, skipped", name)
            return False
        return True

    def register_strict(self, name: str) -> Any:
        """Register *name* or raise DriverNotFound.

        This is the path taken whenever a database actually needs its driver.
        """
        try:
            return self._register(name)
        except _LOAD_ERRORS as exc:
            raise DriverNotFound(name) from exc

    def register_defaults(self, names: Iterable[str] = DEFAULT_DRIVERS) -> list[str]:
        """Register each of *names* that is installed; return those registered."""
        return [name for name in names if self.register_if_present(name)]

    def guess_driver_for_url(self, url: str) -> str | None:
        """Name of a registered driver that claims *url*, or None.

        Best-effort: only drivers registered earlier are consulted, so a
        suitable driver that was never loaded is not found.
        """
        with self._lock:
            candidates = list(self._drivers.items())
        for name, driver in candidates:
            if _claims(name, driver, url):
                return name
        return None


def _claims(name: str, driver: Any, url: str) -> bool:
    accepts = getattr(driver, "accepts_url", None)
    if callable(accepts):
        return bool(accepts(url))
    prefixes = getattr(driver, "url_prefixes", None)
    if prefixes is None:
        prefixes = KNOWN_URL_PREFIXES.get(name, ())
    return any(url.startswith(prefix) for prefix in prefixes)


default_registry = DriverRegistry()


def register_default_drivers(registry: DriverRegistry | None = None) -> list[str]:
    """Pre-register the common drivers that happen to be installed."""
    target = registry if registry is not None else default_registry
    return target.register_defaults()
