from sqlalchemy.orm import Session


class RepositoryError(Exception):
    """Base class for errors raised by the record stores."""


class NotFoundError(RepositoryError):
    pass


class AlreadyExistsError(RepositoryError):
    pass


class DuplicateSlugError(AlreadyExistsError):
    pass


class InvitationAlreadyRespondedError(RepositoryError):
    pass


class Repository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj
