"""Registry mapping connection descriptor schemes to backend factories."""

from collections.abc import Callable
import logging

from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import ConfigException

from .consul import ConsulStore
from .etcd import EtcdStore
from .store import Store

__all__ = [
    "BackendFactory",
    "BackendRegistry",
    "default_registry",
]

_LOGGER = logging.getLogger(__name__)

BackendFactory = Callable[[StoreConfig], Store]


class BackendRegistry:
    """A set of backend factories keyed by descriptor scheme."""

    def __init__(self) -> None:
        """Initialize an empty BackendRegistry."""
        self._factories: dict[str, BackendFactory] = {}

    def register(self, scheme: str, factory: BackendFactory) -> None:
        """Register a factory for a scheme, replacing any existing one."""
        self._factories[scheme.lower()] = factory

    @property
    def schemes(self) -> list[str]:
        """The registered schemes."""
        return sorted(self._factories)

    def create(self, config: StoreConfig) -> Store:
        """Create the backend selected by the configured scheme."""
        if (factory := self._factories.get(config.scheme.lower())) is None:
            raise ConfigException(
                f"Unsupported store scheme '{config.scheme}' "
                f"(supported: {', '.join(self.schemes)})"
            )
        _LOGGER.debug("Creating %s store for hosts %s", config.scheme, config.hosts)
        return factory(config)


def default_registry() -> BackendRegistry:
    """Return a registry with the consul and etcd backends."""
    registry = BackendRegistry()
    registry.register("consul", ConsulStore)
    registry.register("etcd", EtcdStore)
    return registry
