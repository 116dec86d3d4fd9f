from sqlalchemy.exc import SQLAlchemyError

from lokal.models.profile import UserProfile
from lokal.services.profiles import (
    get_user_profile,
    is_admin,
    resolve_role,
    set_profile_role,
    update_user_profile,
)
from tests.fixtures_data import SUPER_ADMIN_EMAIL, seed_profile


class FakeProfileQuery:
    def filter(self, *_args, **_kwargs):
        return self

    def first(self):
        return None


class RejectingDb:
    """Session double whose writes are refused, like a store policy rejection."""

    def __init__(self):
        self.rolled_back = False

    def query(self, _model):
        return FakeProfileQuery()

    def add(self, _obj):
        return None

    def commit(self):
        raise SQLAlchemyError('new row violates row-level security policy for table "profiles"')

    def rollback(self):
        self.rolled_back = True


def test_first_fetch_creates_consumer_profile_with_starting_points(db):
    profile = get_user_profile(db, "user-1", "someone@example.com")

    assert profile.role == "consumer"
    assert profile.points == 50
    assert db.query(UserProfile).filter(UserProfile.id == "user-1").count() == 1


def test_first_fetch_for_allow_listed_email_bootstraps_admin(db):
    profile = get_user_profile(db, "owner-1", SUPER_ADMIN_EMAIL.upper())

    assert profile.role == "admin"
    assert profile.points == 999
    assert is_admin(profile) is True


def test_repeated_fetch_is_idempotent(db):
    first = get_user_profile(db, "user-1", "someone@example.com")
    first_role, first_points = first.role, first.points

    second = get_user_profile(db, "user-1", "someone@example.com")

    assert (second.role, second.points) == (first_role, first_points)
    assert db.query(UserProfile).count() == 1


def test_existing_profile_role_is_not_recomputed(db):
    seed_profile(db, "owner-1", role="consumer", points=7, email=SUPER_ADMIN_EMAIL)

    profile = get_user_profile(db, "owner-1", SUPER_ADMIN_EMAIL)

    assert profile.role == "consumer"
    assert profile.points == 7


def test_rejected_insert_still_returns_unsaved_profile():
    db = RejectingDb()

    profile = get_user_profile(db, "user-9", SUPER_ADMIN_EMAIL)

    assert db.rolled_back is True
    assert profile.id == "user-9"
    assert profile.role == "admin"
    assert profile.points == 999


def test_resolve_role_uses_injected_allow_list():
    assert resolve_role("boss@example.com", ["Boss@Example.com"]) == "admin"
    assert resolve_role("boss@example.com", []) == "consumer"
    assert resolve_role(None) == "consumer"


def test_update_user_profile_applies_partial_patch(db):
    seed_profile(db, "user-1")

    assert update_user_profile(db, "user-1", {"full_name": "Ana", "role": "admin"}) is True

    profile = db.query(UserProfile).filter(UserProfile.id == "user-1").first()
    db.refresh(profile)
    assert profile.full_name == "Ana"
    assert profile.avatar_url is None
    assert profile.role == "consumer"


def test_update_user_profile_returns_false_on_failure():
    class FailingUpdateQuery(FakeProfileQuery):
        def update(self, _values):
            raise SQLAlchemyError("permission denied for table profiles")

    class FailingDb(RejectingDb):
        def query(self, _model):
            return FailingUpdateQuery()

    db = FailingDb()

    assert update_user_profile(db, "user-1", {"avatar_url": "https://img.example.com/a.png"}) is False
    assert db.rolled_back is True


def test_set_profile_role_promotes_by_email(db):
    seed_profile(db, "user-1", email="Person@Example.com")

    profile = set_profile_role(db, email="person@example.com", role="admin")

    assert profile is not None
    assert profile.role == "admin"
    assert set_profile_role(db, email="missing@example.com", role="admin") is None
