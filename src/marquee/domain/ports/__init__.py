from .catalog_provider import CatalogProviderPort
from .process_spawner import ProcessSpawnerPort
from .swarm_helper import SwarmHelperPort
from .video_locator import VideoLocatorPort

__all__ = [
    "CatalogProviderPort",
    "ProcessSpawnerPort",
    "SwarmHelperPort",
    "VideoLocatorPort",
]
