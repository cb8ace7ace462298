# core/registry.py — Module Registry for dependency injection
#
# Tracks interface providers registered by modules (e.g. the assets module
# provides AssetStatusProvider to the maintenance module). Supports checking
# that every declared REQUIRES has a provider before the app starts serving.

import logging
from typing import Any

log = logging.getLogger("upkeep.registry")


class ModuleRegistry:
    """
    Lightweight dependency injection registry.

    Modules call register_provider() to advertise what interfaces they implement.
    Other modules call get_provider() to retrieve an implementation.
    validate_dependencies() checks that every REQUIRES declaration across all
    loaded modules has a matching registered provider.
    """

    def __init__(self):
        self._providers: dict[str, Any] = {}
        self._declared_requires: list[tuple[str, str]] = []  # (module_id, interface)

    def register_provider(self, interface_name: str, impl: Any) -> None:
        """Register an implementation for the named interface (last writer wins)."""
        existing = self._providers.get(interface_name)
        if existing is not None and existing is not impl:
            log.warning(
                f"Interface '{interface_name}' already registered by "
                f"{type(existing).__name__!r}; overwriting with "
                f"{type(impl).__name__!r}"
            )
        self._providers[interface_name] = impl
        log.debug(f"Registered provider for '{interface_name}': {type(impl).__name__}")

    def get_provider(self, interface_name: str) -> Any:
        """Return the registered provider for an interface, or None.

        Callers decide whether a missing provider is fatal; a warning is
        logged so misconfigurations are visible.
        """
        provider = self._providers.get(interface_name)
        if provider is None:
            log.warning(
                f"No provider registered for interface '{interface_name}'. "
                "Check that the providing module is loaded."
            )
        return provider

    def record_requires(self, module_id: str, requires: list[str]) -> None:
        """Record a module's REQUIRES list for validate_dependencies()."""
        for iface in requires:
            self._declared_requires.append((module_id, iface))

    def validate_dependencies(self) -> bool:
        """Return True when every REQUIRES declaration has a provider.

        Logs each unsatisfied dependency; does not raise.
        """
        missing = [
            (module_id, iface)
            for module_id, iface in self._declared_requires
            if iface not in self._providers
        ]
        for module_id, interface_name in missing:
            log.error(
                f"Unsatisfied dependency: module '{module_id}' requires "
                f"'{interface_name}' but no provider is registered."
            )
        if missing:
            return False

        log.info(
            f"All module dependencies satisfied "
            f"({len(self._declared_requires)} declarations checked)."
        )
        return True

    @property
    def providers(self) -> dict[str, Any]:
        """Read-only view of all registered providers."""
        return dict(self._providers)


registry = ModuleRegistry()
