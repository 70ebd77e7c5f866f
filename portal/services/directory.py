"""User directory: verified identities to persistent ``users`` rows."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..exceptions import DirectoryError
from ..models.user import User
from .identity import verify_identity

logger = logging.getLogger(__name__)


def _fail(action):
    db.session.rollback()
    logger.exception("Error %s", action)
    return DirectoryError(f"Error {action}")


def find_or_create(email, external_id, given_name, family_name):
    """Return the user for ``email``, inserting it on first sight.

    Two simultaneous first logins for the same address both miss the lookup;
    the unique index on ``users.email`` rejects the second insert, which then
    surfaces here as ``DirectoryError``.
    """
    try:
        user = User.query.filter_by(email=email).first()
        if user:
            logger.info("User found: %s", user.email)
            return user
        user = User(
            email=email,
            microsoft_id=external_id,
            name=given_name,
            surname=family_name,
            bio="",
        )
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("finding or creating user") from e
    logger.info("User created: %s (id=%s)", user.email, user.id)
    return user


def authenticate(claims, allowed_domains):
    identity = verify_identity(claims, allowed_domains)
    return find_or_create(identity.email, identity.external_id, identity.given_name, identity.family_name)


def find_by_id(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
    except SQLAlchemyError as e:
        raise _fail("loading user") from e


def _require(user_id):
    user = find_by_id(user_id)
    if user is None:
        raise DirectoryError(f"User {user_id} does not exist")
    return user


def update_profile(user_id, given_name, family_name, bio):
    user = _require(user_id)
    user.name = given_name
    user.surname = family_name
    user.bio = bio
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("updating profile") from e
    logger.info("Profile updated for user: %s", user.email)
    return user


def update_profile_picture(user_id, storage_path):
    user = _require(user_id)
    user.profile_picture = storage_path
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("updating profile picture") from e
    logger.info("Profile picture updated for user: %s", user.email)
    return user
