from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalys.db.enums import UserTypeEnum
from catalys.db.models import UserProfile
from catalys.db.repositories.base import AlreadyExistsError, NotFoundError, Repository


class UserProfilesRepository(Repository):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        stmt = select(UserProfile).where(UserProfile.user_id == user_id)
        return self.session.scalars(stmt).first()

    def create(self, user_id: str, user_type: UserTypeEnum) -> UserProfile:
        if self.get_by_user_id(user_id):
            raise AlreadyExistsError("User profile already exists")

        profile = UserProfile(user_id=user_id, user_type=user_type)
        self.session.add(profile)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # A concurrent sign-up inserted the same user_id after our lookup.
            self.session.rollback()
            raise AlreadyExistsError("User profile already exists") from exc
        self.session.refresh(profile)
        return profile

    def update(self, user_id: str, user_type: UserTypeEnum) -> UserProfile:
        profile = self.get_by_user_id(user_id)
        if not profile:
            raise NotFoundError("User profile not found")
        profile.user_type = user_type
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def mark_onboarding_completed(self, user_id: str, completed: bool = True, *, commit: bool = True) -> bool:
        """Set the onboarding flag for ``user_id``; returns False when no profile exists."""
        stmt = (
            update(UserProfile)
            .where(UserProfile.user_id == user_id)
            .values(onboarding_completed=completed)
        )
        result = self.session.execute(stmt)
        if commit:
            self.session.commit()
        return result.rowcount > 0
