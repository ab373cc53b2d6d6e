"""Configuration for ShopMaze."""

from shopmaze.config.settings import (
    GameSettings,
    ItemSpec,
    PlayerSettings,
    RelaySettings,
    RemoteSettings,
    Settings,
    get_settings,
)

__all__ = [
    "GameSettings",
    "ItemSpec",
    "PlayerSettings",
    "RelaySettings",
    "RemoteSettings",
    "Settings",
    "get_settings",
]
