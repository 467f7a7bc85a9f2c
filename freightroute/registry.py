"""Region-keyed directory of named networks.

The registry owns every network added to it: removing a network, or
closing the registry, closes the network exactly once. Names are unique
within a region, and the same name may be used in different regions.

Train networks and road simulation configs live in separate maps, each
guarded by its own reader-writer lock. Change events are delivered after
the locks are released.

Usage:
    registry = get_registry()
    registry.add_train_network("main", "north", TrainNetwork.from_files(...))
    registry.train_network("main", "north").shortest_path(1, 4)
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from .concurrency import ReadWriteLock
from .domain.models import RegistryEvent
from .events import EventCallback, EventEmitter
from .networks.road_network import RoadNetwork
from .networks.simulation_config import RoadSimulationConfig
from .networks.train_network import TrainNetwork
from .ports.network import NetworkPort

T = TypeVar("T")

RegionMap = Dict[str, Dict[str, T]]


def _lookup(regions: RegionMap[T], name: str, region: str) -> Optional[T]:
    return regions.get(region, {}).get(name)


def _holds(regions: RegionMap[T], item: T) -> bool:
    return any(held is item for names in regions.values() for held in names.values())


def _pop(regions: RegionMap[T], name: str, region: str) -> Optional[T]:
    names = regions.get(region)
    if names is None or name not in names:
        return None
    item = names.pop(name)
    if not names:
        del regions[region]
    return item


class NetworkRegistry:
    """Named train networks and road simulation configs per region.

    Use get_registry() for the process-wide instance. Separate instances
    are useful in tests and tools that need an isolated directory.
    """

    def __init__(self) -> None:
        self._train_networks: RegionMap[TrainNetwork] = {}
        self._road_configs: RegionMap[RoadSimulationConfig] = {}
        self._train_lock = ReadWriteLock()
        self._road_lock = ReadWriteLock()
        self._events = EventEmitter("registry")
        self._closed = False
        self._logger = logging.getLogger(__name__)

    def __enter__(self) -> NetworkRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback for RegistryEvent notifications."""
        return self._events.subscribe(callback)

    # ------------------------------------------------------------------
    # Train networks

    def add_train_network(
        self, name: str, region: str, network: Optional[TrainNetwork]
    ) -> bool:
        """Take ownership of a train network.

        Returns:
            False if the network is None or already held. Also False when
            the name is taken in the region or the registry is closed.
        """
        if network is None:
            return False
        with self._events.deferred():
            with self._train_lock.write_locked():
                if self._closed or _holds(self._train_networks, network):
                    return False
                names = self._train_networks.setdefault(region, {})
                if name in names:
                    return False
                names[name] = network
                self._events.emit(RegistryEvent.TRAIN_NETWORK_ADDED, name, region)
            network.set_network_name(name)

        self._logger.info(
            "Train network added", extra={"network": name, "region": region}
        )
        return True

    def train_network(self, name: str, region: str) -> Optional[TrainNetwork]:
        with self._train_lock.read_locked():
            return _lookup(self._train_networks, name, region)

    def remove_train_network(self, name: str, region: str) -> bool:
        """Remove and close a train network.

        Returns:
            False if no such network exists.
        """
        with self._events.deferred():
            with self._train_lock.write_locked():
                network = _pop(self._train_networks, name, region)
                if network is None:
                    return False
                self._events.emit(RegistryEvent.TRAIN_NETWORK_REMOVED, name, region)
            network.close()

        self._logger.info(
            "Train network removed", extra={"network": name, "region": region}
        )
        return True

    def rename_train_network(self, old_name: str, new_name: str, region: str) -> bool:
        """Rename a train network within its region.

        Returns:
            False if the network is missing or the new name is taken.
        """
        with self._events.deferred():
            with self._train_lock.write_locked():
                names = self._train_networks.get(region, {})
                if old_name not in names or new_name in names:
                    return False
                network = names.pop(old_name)
                names[new_name] = network
                self._events.emit(
                    RegistryEvent.TRAIN_NETWORK_RENAMED, old_name, new_name, region
                )
            network.set_network_name(new_name)
        return True

    def train_networks_in_region(self, region: str) -> Dict[str, TrainNetwork]:
        """Snapshot of the train networks of a region by name."""
        with self._train_lock.read_locked():
            return dict(self._train_networks.get(region, {}))

    def train_network_names_in_region(self, region: str) -> List[str]:
        with self._train_lock.read_locked():
            return list(self._train_networks.get(region, {}))

    def train_network_exists(self, name: str, region: str) -> bool:
        with self._train_lock.read_locked():
            return _lookup(self._train_networks, name, region) is not None

    def clear_train_networks(self) -> int:
        """Remove and close every train network.

        Returns:
            Number of networks removed.
        """
        with self._train_lock.write_locked():
            removed = [
                network for names in self._train_networks.values() for network in names.values()
            ]
            self._train_networks = {}
        for network in removed:
            network.close()
        self._logger.info("Train networks cleared", extra={"count": len(removed)})
        return len(removed)

    # ------------------------------------------------------------------
    # Road networks

    def add_road_network(
        self, name: str, region: str, config: Optional[RoadSimulationConfig]
    ) -> bool:
        """Take ownership of a road simulation config and its network.

        Returns:
            False if the config is None or already held. Also False when
            the name is taken in the region or the registry is closed.
        """
        if config is None:
            return False
        with self._events.deferred():
            with self._road_lock.write_locked():
                if self._closed or _holds(self._road_configs, config):
                    return False
                names = self._road_configs.setdefault(region, {})
                if name in names:
                    return False
                names[name] = config
                self._events.emit(RegistryEvent.ROAD_NETWORK_ADDED, name, region)
            config.set_network_name(name)

        self._logger.info(
            "Road network added", extra={"network": name, "region": region}
        )
        return True

    def road_network_config(
        self, name: str, region: str
    ) -> Optional[RoadSimulationConfig]:
        with self._road_lock.read_locked():
            return _lookup(self._road_configs, name, region)

    def road_network(self, name: str, region: str) -> Optional[RoadNetwork]:
        config = self.road_network_config(name, region)
        return config.network if config is not None else None

    def remove_road_network_config(self, name: str, region: str) -> bool:
        """Remove and close a road simulation config and its network.

        Returns:
            False if no such config exists.
        """
        with self._events.deferred():
            with self._road_lock.write_locked():
                config = _pop(self._road_configs, name, region)
                if config is None:
                    return False
                self._events.emit(RegistryEvent.ROAD_NETWORK_REMOVED, name, region)
            config.close()

        self._logger.info(
            "Road network removed", extra={"network": name, "region": region}
        )
        return True

    def rename_road_network_config(
        self, old_name: str, new_name: str, region: str
    ) -> bool:
        """Rename a road simulation config within its region.

        Returns:
            False if the config is missing or the new name is taken.
        """
        with self._events.deferred():
            with self._road_lock.write_locked():
                names = self._road_configs.get(region, {})
                if old_name not in names or new_name in names:
                    return False
                config = names.pop(old_name)
                names[new_name] = config
                self._events.emit(
                    RegistryEvent.ROAD_NETWORK_RENAMED, old_name, new_name, region
                )
            config.set_network_name(new_name)
        return True

    def road_network_configs_in_region(
        self, region: str
    ) -> Dict[str, RoadSimulationConfig]:
        """Snapshot of the road simulation configs of a region by name."""
        with self._road_lock.read_locked():
            return dict(self._road_configs.get(region, {}))

    def road_network_names_in_region(self, region: str) -> List[str]:
        with self._road_lock.read_locked():
            return list(self._road_configs.get(region, {}))

    def road_network_exists(self, name: str, region: str) -> bool:
        with self._road_lock.read_locked():
            return _lookup(self._road_configs, name, region) is not None

    def clear_road_networks(self) -> int:
        """Remove and close every road simulation config.

        Returns:
            Number of configs removed.
        """
        with self._road_lock.write_locked():
            removed = [
                config for names in self._road_configs.values() for config in names.values()
            ]
            self._road_configs = {}
        for config in removed:
            config.close()
        self._logger.info("Road networks cleared", extra={"count": len(removed)})
        return len(removed)

    # ------------------------------------------------------------------
    # Regions

    @property
    def closed(self) -> bool:
        with self._train_lock.read_locked():
            return self._closed

    def regions(self) -> List[str]:
        """Sorted regions holding at least one network of either kind."""
        with self._train_lock.read_locked():
            regions = set(self._train_networks)
        with self._road_lock.read_locked():
            regions.update(self._road_configs)
        return sorted(regions)

    def network(self, name: str, region: str) -> Optional[NetworkPort]:
        """Train network or road network with this name, train first."""
        train = self.train_network(name, region)
        if train is not None:
            return train
        return self.road_network(name, region)

    def network_exists_in_region(self, name: str, region: str) -> bool:
        """Whether a train network or road config with this name exists."""
        return self.train_network_exists(name, region) or self.road_network_exists(
            name, region
        )

    def rename_region(self, old_region: str, new_region: str) -> bool:
        """Move every network of a region to another region.

        Networks already in the target region are kept. Nothing moves if
        any name exists in both regions.

        Returns:
            False if the old region is empty, the regions are equal, or a
            name collides.
        """
        if old_region == new_region:
            return False
        with self._events.deferred():
            with self._train_lock.write_locked(), self._road_lock.write_locked():
                trains = self._train_networks.get(old_region, {})
                roads = self._road_configs.get(old_region, {})
                if not trains and not roads:
                    return False
                if set(trains) & set(self._train_networks.get(new_region, {})):
                    return False
                if set(roads) & set(self._road_configs.get(new_region, {})):
                    return False
                for regions, moved in (
                    (self._train_networks, trains),
                    (self._road_configs, roads),
                ):
                    if moved:
                        regions.setdefault(new_region, {}).update(moved)
                        del regions[old_region]
                self._events.emit(RegistryEvent.REGION_RENAMED, old_region, new_region)

        self._logger.info(
            "Region renamed", extra={"old_region": old_region, "new_region": new_region}
        )
        return True

    def clear_region(self, region: str) -> int:
        """Remove and close every network of a region.

        Returns:
            Number of networks and configs removed.
        """
        with self._events.deferred():
            with self._train_lock.write_locked(), self._road_lock.write_locked():
                trains = self._train_networks.pop(region, {})
                roads = self._road_configs.pop(region, {})
                if trains or roads:
                    self._events.emit(RegistryEvent.REGION_CLEARED, region)
            for network in trains.values():
                network.close()
            for config in roads.values():
                config.close()
        return len(trains) + len(roads)

    def clear(self) -> None:
        """Remove and close every network."""
        self.clear_train_networks()
        self.clear_road_networks()

    def _counts(self) -> Tuple[int, int]:
        with self._train_lock.read_locked():
            trains = sum(len(names) for names in self._train_networks.values())
        with self._road_lock.read_locked():
            roads = sum(len(names) for names in self._road_configs.values())
        return trains, roads

    def close(self) -> None:
        """Close every held network once and empty the registry.

        A closed registry refuses new networks.
        """
        with self._train_lock.write_locked(), self._road_lock.write_locked():
            if self._closed:
                return
            self._closed = True
        trains, roads = self._counts()
        self.clear()
        self._logger.debug(
            "Registry closed", extra={"train_networks": trains, "road_networks": roads}
        )


# Global default registry (lazy initialized)
_default_registry: Optional[NetworkRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> NetworkRegistry:
    """Get the process-wide network registry.

    Returns:
        The default NetworkRegistry instance (creates one if needed).
    """
    global _default_registry
    if _default_registry is None:
        with _registry_lock:
            if _default_registry is None:
                _default_registry = NetworkRegistry()
    return _default_registry


def reset_registry() -> None:
    """Close and drop the process-wide registry.

    Call this in tests and at shutdown. The next get_registry() call
    creates a fresh instance.
    """
    global _default_registry
    with _registry_lock:
        if _default_registry is not None:
            _default_registry.close()
        _default_registry = None
