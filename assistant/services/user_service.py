from pydantic import validate_email
from sqlalchemy.exc import IntegrityError

from assistant.errors import PersistenceError, ValidationError
from assistant.models.user import User
from assistant.repositories.entity_store import EntityStore


def create_user(store: EntityStore, email: str, name: str) -> User:
    """New user with a unique email. Duplicate or malformed email is a ValidationError."""
    try:
        _, email = validate_email(email.strip())
    except ValueError:
        raise ValidationError(f"Invalid email address: {email!r}") from None
    email = email.lower()
    if store.session.query(User.id).filter(User.email == email).first() is not None:
        raise ValidationError(f"A user with email {email} already exists")
    try:
        return store.insert(User(email=email, name=name.strip()))
    except PersistenceError as e:
        # lost a race with another request for the same email
        if isinstance(e.__cause__, IntegrityError):
            raise ValidationError(f"A user with email {email} already exists") from e
        raise
