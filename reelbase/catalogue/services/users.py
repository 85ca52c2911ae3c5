"""User registration services."""

from __future__ import annotations

import typing as typ
import uuid

from reelbase.catalogue.domain import User
from reelbase.catalogue.errors import ConflictError
from reelbase.logging import get_logger, log_info

from ._versioning import DEFAULT_RULES, require_found, utc_now

if typ.TYPE_CHECKING:
    from reelbase.catalogue.payloads import UserCreateData
    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.config import ValidationRules

logger = get_logger(__name__)


async def create_user(
    uow: CatalogueUnitOfWork,
    *,
    data: UserCreateData,
    rules: ValidationRules = DEFAULT_RULES,
) -> User:
    """Register a user.

    Parameters
    ----------
    uow : CatalogueUnitOfWork
        Unit-of-work providing repositories and transactional boundaries.
    data : UserCreateData
        Profile fields; the password is already hashed.
    rules : ValidationRules, optional
        Validation thresholds.

    Returns
    -------
    User
        The stored user.

    Raises
    ------
    ValidationError
        If a field breaks the configured thresholds.
    ConflictError
        If the email address is already registered.
    """
    data.validate(rules.user)
    if await uow.users.get_by_email(data.email) is not None:
        msg = f"Email {data.email!r} is already registered."
        raise ConflictError(msg)
    user = User(
        id=uuid.uuid4(),
        email=data.email,
        hashed_password=data.hashed_password,
        first_name=data.first_name,
        last_name=data.last_name,
        bio=data.bio,
        birthdate=data.birthdate,
        avatar=data.avatar,
        jointime=utc_now(),
    )
    await uow.users.add(user)
    await uow.commit()
    log_info(logger, "Registered user %s.", user.id)
    return user


async def get_user(uow: CatalogueUnitOfWork, *, user_id: uuid.UUID) -> User:
    """Fetch a user by identifier.

    Raises
    ------
    NotFoundError
        If no user has this identifier.
    """
    user = await uow.users.get(user_id)
    return require_found(user, f"User {user_id} not found.", user_id)
