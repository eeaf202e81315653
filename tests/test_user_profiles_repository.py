import pytest
from sqlalchemy import select

from catalys.db.enums import UserTypeEnum
from catalys.db.models import UserProfile
from catalys.db.repositories.base import AlreadyExistsError, NotFoundError
from catalys.db.repositories.user_profiles import UserProfilesRepository


def test_create_and_get_profile(db_session):
    repo = UserProfilesRepository(db_session)
    profile = repo.create("user_1", UserTypeEnum.FOUNDER)

    assert profile.user_type == UserTypeEnum.FOUNDER
    assert profile.onboarding_completed is False
    assert repo.get_by_user_id("user_1").id == profile.id
    assert repo.get_by_user_id("missing") is None


def test_create_twice_is_rejected(db_session):
    repo = UserProfilesRepository(db_session)
    repo.create("user_1", UserTypeEnum.FOUNDER)

    with pytest.raises(AlreadyExistsError, match="User profile already exists"):
        repo.create("user_1", UserTypeEnum.INVESTOR)


def test_concurrent_create_is_settled_by_unique_index(db_session, monkeypatch):
    repo = UserProfilesRepository(db_session)
    repo.create("user_1", UserTypeEnum.FOUNDER)
    monkeypatch.setattr(repo, "get_by_user_id", lambda user_id: None)

    with pytest.raises(AlreadyExistsError, match="User profile already exists"):
        repo.create("user_1", UserTypeEnum.INVESTOR)

    profiles = db_session.scalars(select(UserProfile).where(UserProfile.user_id == "user_1")).all()
    assert len(profiles) == 1
    assert profiles[0].user_type == UserTypeEnum.FOUNDER


def test_update_changes_user_type(db_session):
    repo = UserProfilesRepository(db_session)
    repo.create("user_1", UserTypeEnum.FOUNDER)

    updated = repo.update("user_1", UserTypeEnum.INVESTOR)
    assert updated.user_type == UserTypeEnum.INVESTOR


def test_update_missing_profile(db_session):
    with pytest.raises(NotFoundError, match="User profile not found"):
        UserProfilesRepository(db_session).update("ghost", UserTypeEnum.INVESTOR)


def test_mark_onboarding_completed(db_session):
    repo = UserProfilesRepository(db_session)
    repo.create("user_1", UserTypeEnum.FOUNDER)

    assert repo.mark_onboarding_completed("user_1") is True
    db_session.expire_all()
    assert repo.get_by_user_id("user_1").onboarding_completed is True
    assert repo.mark_onboarding_completed("nobody") is False
