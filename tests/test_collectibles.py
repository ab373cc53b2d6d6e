import pytest

from shopmaze.config.settings import ItemSpec
from shopmaze.core.events import EventType
from shopmaze.game.collectibles import CollectibleManager, ItemKind, PurchaseOutcome
from shopmaze.game.world import WorldView

ANSIBLE = ItemSpec(id="ansible", name="Ansible T-Shirt", image="ansible.png", price=10, spawn_threshold=10)


@pytest.fixture
def game_settings(settings):
    return settings.model_copy(update={"items": [ANSIBLE], "coins_per_level": 5})


@pytest.fixture
def manager(scheduler, open_room, game_settings, event_bus, rng):
    holder = {}

    def world() -> WorldView:
        mgr = holder["manager"]
        return WorldView(
            maze=open_room,
            player_tile=(1, 1),
            coin_tiles=mgr.coin_tiles,
            item_tile=mgr.item.tile if mgr.item else None,
            bonus_tile=mgr.bonus.tile if mgr.bonus else None,
        )

    mgr = CollectibleManager(scheduler, world, game_settings, event_bus, rng)
    holder["manager"] = mgr
    mgr.seed_coins(open_room, (1, 1))
    return mgr


def test_seed_coins(manager):
    assert len(manager.coins) == 5
    assert all(not c.collected for c in manager.coins)
    assert (1, 1) not in manager.coin_tiles
    assert len(manager.coin_tiles) == 5


def test_seed_coins_limited_by_open_tiles(manager, corridor):
    manager.seed_coins(corridor, (1, 1))

    assert [c.tile for c in manager.coins] == [(2, 1)]


def test_coin_collection_is_idempotent(manager, event_bus):
    tile = manager.coins[0].tile

    first = manager.collect_at(tile)
    second = manager.collect_at(tile)

    assert first.coins == 1
    assert second.coins == 0
    assert not second.anything
    assert manager.balance == 1
    assert len(event_bus.get_history(EventType.COIN_COLLECTED)) == 1


def test_all_coins_collected(manager):
    for coin in list(manager.coins):
        assert not manager.all_coins_collected()
        manager.collect_at(coin.tile)

    assert manager.all_coins_collected()


def test_empty_batch_counts_as_collected(manager):
    manager.coins = []
    assert manager.all_coins_collected()


def test_item_spawns_once_threshold_reached(manager):
    manager.balance = 9
    assert not manager.should_spawn_item()

    manager.balance = 10
    assert manager.should_spawn_item()

    item = manager.spawn_item()
    assert item.kind is ItemKind.PURCHASABLE
    assert item.spec.id == "ansible"
    assert item.lifetime == 15
    assert item.tile != (1, 1)
    assert item.tile not in manager.coin_tiles


def test_single_live_item(manager):
    manager.balance = 10
    first = manager.spawn_item()

    assert manager.spawn_item() is None
    assert manager.item is first
    assert not manager.should_spawn_item()


def test_unaffordable_item_stays(manager, event_bus):
    manager.balance = 10
    item = manager.spawn_item()
    manager.balance = 8

    report = manager.collect_at(item.tile)

    assert report.purchase is PurchaseOutcome.UNAFFORDABLE
    assert manager.item is item
    assert not item.collected
    assert manager.balance == 8
    assert manager.basket == []
    assert len(event_bus.get_history(EventType.ITEM_UNAFFORDABLE)) == 1


def test_purchase(manager):
    manager.balance = 12
    item = manager.spawn_item()

    report = manager.collect_at(item.tile)

    assert report.purchase is PurchaseOutcome.PURCHASED
    assert manager.balance == 2
    assert manager.item is None
    assert [(e.item_id, e.cost) for e in manager.basket] == [("ansible", 10)]

    # Bought items are not offered again this level
    manager.balance = 50
    assert manager.eligible_items() == []


def test_reset_for_level_reopens_catalog(manager):
    manager.balance = 10
    manager.collect_at(manager.spawn_item().tile)

    manager.reset_for_level()
    manager.balance = 10

    assert [spec.id for spec in manager.eligible_items()] == ["ansible"]
    assert len(manager.basket) == 1


def test_item_expires(manager, scheduler, event_bus):
    manager.balance = 10
    manager.spawn_item()

    scheduler.advance(14_999)
    assert manager.item is not None
    assert manager.item.lifetime == 1

    scheduler.advance(1)
    assert manager.item is None
    assert len(event_bus.get_history(EventType.ITEM_EXPIRED)) == 1
    assert scheduler.pending == 0


def test_bonus_spawning_cadence_and_expiry(manager, scheduler, game_settings):
    manager.start_bonus_spawning()

    scheduler.advance(game_settings.bonus_spawn_interval_s * 1000)
    bonus = manager.bonus
    assert bonus is not None
    assert bonus.kind is ItemKind.BONUS

    scheduler.advance(game_settings.bonus_lifetime_s * 1000)
    assert manager.bonus is None


def test_single_live_bonus(manager):
    first = manager.spawn_bonus()

    assert manager.spawn_bonus() is None
    assert manager.bonus is first


def test_collect_bonus(manager, scheduler):
    bonus = manager.spawn_bonus()

    report = manager.collect_at(bonus.tile)

    assert report.bonus
    assert manager.bonus is None
    assert bonus.collected
    scheduler.advance(60_000)
    assert scheduler.pending == 0


def test_item_and_bonus_never_share_a_tile(manager):
    manager.balance = 10
    item = manager.spawn_item()
    bonus = manager.spawn_bonus()

    assert item.tile != bonus.tile


def test_reset_for_new_game(manager, scheduler):
    manager.balance = 10
    manager.collect_at(manager.spawn_item().tile)
    manager.start_bonus_spawning()
    manager.spawn_bonus()

    manager.reset_for_new_game()

    assert manager.balance == 0
    assert manager.basket == []
    assert manager.coins == []
    assert manager.bonus is None
    assert scheduler.pending == 0


def test_stop_cancels_timers(manager, scheduler):
    manager.balance = 10
    manager.spawn_item()
    manager.start_bonus_spawning()

    manager.stop()
    scheduler.advance(120_000)

    assert manager.bonus is None
    assert scheduler.pending == 0
