"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ItemSpec(BaseModel):
    """A purchasable item ("t-shirt") in the shop catalog."""

    id: str
    name: str
    image: str
    price: int = Field(ge=0)
    spawn_threshold: int = Field(ge=0)
    description: str = ""


DEFAULT_ITEMS = [
    ItemSpec(
        id="ansible",
        name="Ansible T-Shirt",
        image="assets/t_shirt_ansible.png",
        price=10,
        spawn_threshold=10,
        description="Automate everything with style!",
    ),
    ItemSpec(
        id="openshift",
        name="OpenShift T-Shirt",
        image="assets/t_shirt_openshift.png",
        price=15,
        spawn_threshold=15,
        description="Container orchestration made easy!",
    ),
    ItemSpec(
        id="rhel",
        name="RHEL T-Shirt",
        image="assets/t_shirt_rhel.png",
        price=20,
        spawn_threshold=20,
        description="The foundation of enterprise computing!",
    ),
]


class GameSettings(BaseSettings):
    """Game mechanics constants."""

    model_config = SettingsConfigDict(env_prefix="SHOPMAZE_GAME_", extra="ignore")

    # Grid and frame rate
    tile_size: int = 32
    fps: int = 60

    # Player
    player_pixel_step: float = 5.0
    start_lives: int = 3
    invincibility_ms: float = 3000.0
    blink_interval_ms: float = 150.0

    # Input
    continuous_move_interval_ms: float = 200.0
    min_swipe_distance: float = 30.0
    gesture_timeout_ms: float = 3000.0
    gesture_check_interval_ms: float = 100.0

    # Coins
    coins_per_level: int = 25

    # Ghosts
    max_ghosts: int = 4
    ghost_spawn_delay_s: float = 3.0
    ghost_recurring_spawn_s: float = 10.0
    ghost_spawn_retry_ms: float = 1000.0
    ghost_spawn_attempts: int = 100

    # Progressive ghost difficulty
    ghost_base_speed: float = 5.0
    ghost_base_pixel_step: float = 5.0
    ghost_base_chase_interval_ms: float = 1000.0
    ghost_speed_per_level: float = 50.0
    ghost_pixel_step_per_level: float = 20.0
    ghost_chase_reduction_per_level: float = 250.0
    ghost_min_chase_interval_ms: float = 500.0

    # Timed collectibles
    item_lifetime_s: int = 15
    bonus_spawn_interval_s: float = 30.0
    bonus_lifetime_s: int = 20
    notification_ms: float = 2000.0

    items: list[ItemSpec] = Field(default_factory=lambda: list(DEFAULT_ITEMS))


class RemoteSettings(BaseSettings):
    """Host side of the remote control channel."""

    model_config = SettingsConfigDict(env_prefix="SHOPMAZE_REMOTE_", extra="ignore")

    enabled: bool = True
    url: str = "ws://localhost:8080/game-control"
    game_name: str = "Red Hat Quest v2.1"
    reconnect_delay_s: float = 3.0
    max_reconnect_attempts: int = 5


class RelaySettings(BaseSettings):
    """Relay process serving operators and the leaderboard."""

    model_config = SettingsConfigDict(env_prefix="SHOPMAZE_RELAY_", extra="ignore")

    host: str = "0.0.0.0"
    ws_port: int = 8080
    path: str = "/game-control"
    http_port: int = 8081
    leaderboard_limit: int = 100
    admin_source: str = "admin-panel"
    console: bool = True


class PlayerSettings(BaseSettings):
    """Identity supplied by the registration step."""

    model_config = SettingsConfigDict(env_prefix="SHOPMAZE_PLAYER_", extra="ignore")

    user_id: str = ""
    email: str = ""
    username: str = ""


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SHOPMAZE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["window", "headless"] = "window"
    debug: bool = False

    # Window
    window_title: str = "ShopMaze"
    window_scale: int = 2

    # Nested settings
    game: GameSettings = Field(default_factory=GameSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)

    @property
    def is_headless(self) -> bool:
        """Check if running without a display."""
        return self.env == "headless"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
