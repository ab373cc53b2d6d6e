"""Coins, timed items and the shopping basket."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional
import logging
import random

from shopmaze.config.settings import GameSettings, ItemSpec
from shopmaze.core.events import Event, EventBus, EventType
from shopmaze.core.scheduler import Scheduler, TimerHandle
from shopmaze.game.maze import Maze, Tile
from shopmaze.game.world import WorldView

logger = logging.getLogger(__name__)

TIMER_GROUP = "collectibles"
BONUS_SPAWN_GROUP = "bonus_spawn"


class ItemKind(Enum):
    PURCHASABLE = auto()  # t-shirt
    BONUS = auto()        # red hat pickup


@dataclass
class Coin:
    tile: Tile
    collected: bool = False


@dataclass
class TimedItem:
    """A collectible that disappears when its lifetime runs out."""

    kind: ItemKind
    tile: Tile
    lifetime: int
    spec: Optional[ItemSpec] = None
    collected: bool = False
    _countdown: Optional[TimerHandle] = field(default=None, repr=False)

    def stop_timer(self) -> None:
        if self._countdown:
            self._countdown.cancel()
            self._countdown = None


@dataclass(frozen=True)
class BasketEntry:
    item_id: str
    cost: int
    image: str


class PurchaseOutcome(Enum):
    PURCHASED = auto()
    UNAFFORDABLE = auto()


@dataclass
class CollectionReport:
    """What the player picked up on one tile."""

    coins: int = 0
    purchase: Optional[PurchaseOutcome] = None
    bonus: bool = False

    @property
    def anything(self) -> bool:
        return bool(self.coins or self.purchase or self.bonus)


class CollectibleManager:
    """Owns the coin batch, both timed-item slots, the balance and basket.

    Args:
        scheduler: Shared game-clock scheduler
        world: Returns a fresh read-only WorldView
        settings: Game settings (coin count, lifetimes, item catalog)
        event_bus: Optional bus for spawn/expiry/purchase notifications
        rng: Random source (injectable for tests)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        world: Callable[[], WorldView],
        settings: GameSettings,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ):
        self._scheduler = scheduler
        self._world = world
        self.settings = settings
        self._event_bus = event_bus
        self._rng = rng or random.Random()

        self.coins: List[Coin] = []
        self.balance = 0
        self.basket: List[BasketEntry] = []
        self.item: Optional[TimedItem] = None
        self.bonus: Optional[TimedItem] = None
        self._purchased: Dict[str, bool] = {spec.id: False for spec in settings.items}
        self._bonus_spawner: Optional[TimerHandle] = None

    # -- coins ---------------------------------------------------------

    def seed_coins(self, maze: Maze, spawn_tile: Tile) -> None:
        """Scatter a fresh coin batch over the open tiles, skipping spawn."""
        cells = [t for t in maze.open_tiles() if t != spawn_tile]
        self._rng.shuffle(cells)
        count = min(self.settings.coins_per_level, len(cells))
        self.coins = [Coin(tile) for tile in cells[:count]]
        logger.debug(f"Placed {count} coins on {maze.name}")

    @property
    def coin_tiles(self) -> frozenset:
        return frozenset(c.tile for c in self.coins if not c.collected)

    def all_coins_collected(self) -> bool:
        return all(c.collected for c in self.coins)

    # -- collection ----------------------------------------------------

    def collect_at(self, tile: Tile) -> CollectionReport:
        """Pick up everything collectible on tile."""
        report = CollectionReport()

        for coin in self.coins:
            if not coin.collected and coin.tile == tile:
                coin.collected = True
                self.balance += 1
                report.coins += 1

        if report.coins:
            self._emit(EventType.COIN_COLLECTED, {"count": report.coins, "balance": self.balance})

        item = self.item
        if item and not item.collected and item.tile == tile:
            report.purchase = self._try_purchase(item)

        bonus = self.bonus
        if bonus and not bonus.collected and bonus.tile == tile:
            bonus.collected = True
            bonus.stop_timer()
            self.bonus = None
            report.bonus = True

        return report

    def _try_purchase(self, item: TimedItem) -> PurchaseOutcome:
        spec = item.spec
        if self.balance < spec.price:
            logger.info(f"Cannot afford {spec.id}: {self.balance}/{spec.price}")
            self._emit(EventType.ITEM_UNAFFORDABLE, {"item": spec.id, "cost": spec.price, "balance": self.balance})
            return PurchaseOutcome.UNAFFORDABLE

        item.collected = True
        self.balance -= spec.price
        self.basket.append(BasketEntry(item_id=spec.id, cost=spec.price, image=spec.image))
        self._purchased[spec.id] = True
        self.remove_item()
        logger.info(f"Purchased {spec.id} for {spec.price}, balance {self.balance}")
        self._emit(EventType.ITEM_PURCHASED, {"item": spec.id, "cost": spec.price, "balance": self.balance})
        return PurchaseOutcome.PURCHASED

    # -- purchasable item ----------------------------------------------

    def eligible_items(self) -> List[ItemSpec]:
        return [
            spec for spec in self.settings.items
            if not self._purchased.get(spec.id, False) and self.balance >= spec.spawn_threshold
        ]

    def should_spawn_item(self) -> bool:
        return self.item is None and bool(self.eligible_items())

    def spawn_item(self) -> Optional[TimedItem]:
        """Place a random eligible item. No-op while one is live."""
        if self.item is not None:
            return None

        eligible = self.eligible_items()
        if not eligible:
            return None

        spec = self._rng.choice(eligible)
        tile = self._pick_tile(self._world().free_tiles(ignore_item=True))
        if tile is None:
            return None

        item = TimedItem(ItemKind.PURCHASABLE, tile, self.settings.item_lifetime_s, spec=spec)
        self.item = item
        self._start_countdown(item, self.remove_item)
        logger.info(f"Item {spec.id} spawned at {tile}")
        self._emit(EventType.ITEM_SPAWNED, {"item": spec.id, "tile": tile})
        return item

    def remove_item(self) -> None:
        if self.item:
            self.item.stop_timer()
            self.item = None

    # -- bonus item ----------------------------------------------------

    def start_bonus_spawning(self) -> None:
        self.stop_bonus_spawning()
        self._bonus_spawner = self._scheduler.call_every(
            self.settings.bonus_spawn_interval_s * 1000,
            self.spawn_bonus,
            group=BONUS_SPAWN_GROUP,
        )

    def stop_bonus_spawning(self) -> None:
        if self._bonus_spawner:
            self._bonus_spawner.cancel()
            self._bonus_spawner = None

    def spawn_bonus(self) -> Optional[TimedItem]:
        """Place a bonus life pickup. No-op while one is live."""
        if self.bonus is not None:
            return None

        tile = self._pick_tile(self._world().free_tiles(ignore_bonus=True))
        if tile is None:
            return None

        bonus = TimedItem(ItemKind.BONUS, tile, self.settings.bonus_lifetime_s)
        self.bonus = bonus
        self._start_countdown(bonus, self.remove_bonus)
        logger.info(f"Bonus red hat spawned at {tile}")
        self._emit(EventType.BONUS_SPAWNED, {"tile": tile})
        return bonus

    def remove_bonus(self) -> None:
        if self.bonus:
            self.bonus.stop_timer()
            self.bonus = None

    # -- lifecycle -----------------------------------------------------

    def reset_for_level(self) -> None:
        """Drop live items and re-open the catalog; balance and basket stay."""
        self.remove_item()
        self.remove_bonus()
        self._purchased = {spec.id: False for spec in self.settings.items}

    def reset_for_new_game(self) -> None:
        self.reset_for_level()
        self.stop_bonus_spawning()
        self.coins = []
        self.balance = 0
        self.basket = []

    def stop(self) -> None:
        """Cancel every collectible timer (game over)."""
        self.stop_bonus_spawning()
        if self.item:
            self.item.stop_timer()
        if self.bonus:
            self.bonus.stop_timer()
        self._scheduler.cancel_group(TIMER_GROUP)

    # -- helpers -------------------------------------------------------

    def _pick_tile(self, candidates: List[Tile]) -> Optional[Tile]:
        if not candidates:
            return None
        return self._rng.choice(candidates)

    def _start_countdown(self, item: TimedItem, on_expire: Callable[[], None]) -> None:
        def tick() -> None:
            item.lifetime -= 1
            if item.lifetime <= 0:
                item.stop_timer()
                logger.debug(f"{item.kind.name} at {item.tile} expired")
                on_expire()
                self._emit(EventType.ITEM_EXPIRED, {"kind": item.kind.name, "tile": item.tile})

        item._countdown = self._scheduler.call_every(1000, tick, group=TIMER_GROUP)

    def _emit(self, event_type: EventType, data: dict) -> None:
        if self._event_bus:
            self._event_bus.emit(Event(event_type, data=data, source="collectibles"))
