from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from lokal.models.consumer_usage import ConsumerUsageDetail
from lokal.models.profile import UserProfile
from lokal.models.redemption import Redemption
from lokal.services.redemptions import (
    compute_commission_due,
    get_redemption_count,
    redeem_deal,
)
from tests.fixtures_data import seed_catalog, seed_profile


def _points(db, user_id="user-1"):
    db.expire_all()
    return db.query(UserProfile).filter(UserProfile.id == user_id).one().points


@pytest.mark.parametrize(
    ("percentage", "expected"),
    [(None, 0.0), (0, 0.0), (5, 2.0), (10, 4.0), (Decimal("12.5"), 5.0)],
)
def test_compute_commission_due(percentage, expected):
    assert compute_commission_due(percentage) == expected


def test_redeem_deal_without_contract_records_zero_commission(db):
    seed_catalog(db)
    seed_profile(db, "user-1", points=0)

    assert redeem_deal(db, "user-1", "deal-1", "user1@example.com") is True

    usage = db.query(ConsumerUsageDetail).one()
    assert usage.business_id == "biz-1"
    assert usage.deal_id == "deal-1"
    assert float(usage.commission_due) == 0.0
    assert usage.deal_details == "Free Croissant - FREE GIFT"
    assert usage.consumer_email == "user1@example.com"
    assert usage.amount_received is None
    assert usage.date_commission_was_paid is None
    assert db.query(Redemption).count() == 1
    assert _points(db) == 50


def test_redeem_deal_with_contract_uses_assumed_basket(db):
    seed_catalog(db, commission_percentage=10)
    seed_profile(db, "user-1")

    assert redeem_deal(db, "user-1", "deal-2") is True

    usage = db.query(ConsumerUsageDetail).one()
    assert float(usage.commission_due) == 4.0


def test_redeem_deal_with_five_percent_contract(db):
    seed_catalog(db, commission_percentage=5)
    seed_profile(db, "user-1")

    redeem_deal(db, "user-1", "deal-2")

    usage = db.query(ConsumerUsageDetail).one()
    assert float(usage.commission_due) == 2.0


def test_repeat_redemptions_award_points_each_time(db):
    seed_catalog(db)
    seed_profile(db, "user-1", points=0)

    assert redeem_deal(db, "user-1", "deal-2") is True
    assert redeem_deal(db, "user-1", "deal-2") is True

    assert _points(db) == 100
    assert db.query(ConsumerUsageDetail).count() == 2
    assert get_redemption_count(db, "user-1") == 2


def test_redeem_unknown_deal_has_no_side_effects(db):
    seed_catalog(db)
    seed_profile(db, "user-1", points=0)

    assert redeem_deal(db, "user-1", "missing-deal") is False

    assert db.query(ConsumerUsageDetail).count() == 0
    assert db.query(Redemption).count() == 0
    assert _points(db) == 0


def test_failed_redemption_insert_keeps_ledger_row(db):
    seed_catalog(db)
    seed_profile(db, "user-1", points=0)

    with patch(
        "lokal.services.redemptions._insert_redemption",
        side_effect=SQLAlchemyError("insert rejected"),
    ):
        assert redeem_deal(db, "user-1", "deal-2") is False

    assert db.query(ConsumerUsageDetail).count() == 1
    assert db.query(Redemption).count() == 0
    assert _points(db) == 0


def test_redeem_without_profile_still_records_event(db):
    seed_catalog(db)

    assert redeem_deal(db, "ghost", "deal-1") is True

    assert get_redemption_count(db, "ghost") == 1
    assert db.query(UserProfile).count() == 0


def test_redemption_count_is_per_user(db):
    seed_catalog(db)
    seed_profile(db, "user-1")
    seed_profile(db, "user-2", email="user2@example.com")

    redeem_deal(db, "user-1", "deal-1")
    redeem_deal(db, "user-2", "deal-1")
    redeem_deal(db, "user-2", "deal-2")

    assert get_redemption_count(db, "user-1") == 1
    assert get_redemption_count(db, "user-2") == 2
    assert get_redemption_count(db, "user-3") == 0
