from lokal.models.saved_deal import SavedDeal
from lokal.services.saved_deals import get_saved_deals, is_deal_saved, toggle_save_deal
from tests.fixtures_data import seed_catalog


def test_toggle_twice_restores_original_state(db):
    seed_catalog(db)

    assert toggle_save_deal(db, "user-1", "deal-1") is True
    assert is_deal_saved(db, "user-1", "deal-1") is True

    assert toggle_save_deal(db, "user-1", "deal-1") is False
    assert is_deal_saved(db, "user-1", "deal-1") is False
    assert db.query(SavedDeal).count() == 0


def test_saved_state_follows_toggle_parity(db):
    seed_catalog(db)

    for _ in range(5):
        toggle_save_deal(db, "user-1", "deal-2")

    assert is_deal_saved(db, "user-1", "deal-2") is True
    assert db.query(SavedDeal).count() == 1


def test_saved_deals_are_per_user(db):
    seed_catalog(db)
    toggle_save_deal(db, "user-1", "deal-1")

    assert is_deal_saved(db, "user-2", "deal-1") is False
    assert get_saved_deals(db, "user-2") == []


def test_get_saved_deals_joins_business(db):
    seed_catalog(db)
    toggle_save_deal(db, "user-1", "deal-2")

    saved = get_saved_deals(db, "user-1")

    assert len(saved) == 1
    assert saved[0]["id"] == "deal-2"
    assert saved[0]["businessName"] == "Fix-It Bikes"
    assert saved[0]["imageUrl"] == "https://img.example.com/bikes.png"
    assert saved[0]["distance"] == "Varies"
