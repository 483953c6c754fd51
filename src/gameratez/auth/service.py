"""Two-step signup and email/password login.

Step 1 (``start_signup``) checks the email and parks the password hash
behind a short-lived completion token. Step 2 (``complete_signup``) turns
that token plus the profile choices into a user record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from gameratez.auth.email_validation import MxResolver, email_domain, is_valid_email_syntax
from gameratez.auth.password import hash_password, needs_rehash, verify_password
from gameratez.auth.tokens import CompleteTokenStore
from gameratez.errors import ConflictError, UnauthorizedError, ValidationError
from gameratez.storage.base import USERS, Store
from gameratez.storage.records import FEED_PREFERENCES, UserRecord, new_id, normalize_platform

logger = structlog.get_logger()


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_handle(username: str | None) -> str:
    """Trim and drop one leading ``@``."""
    handle = (username or "").strip()
    if handle.startswith("@"):
        handle = handle[1:].strip()
    return handle


async def get_user_by_email(store: Store, email: str) -> UserRecord | None:
    return await store.first(USERS, email=normalize_email(email))


async def get_user_by_username(store: Store, username: str) -> UserRecord | None:
    return await store.first(USERS, username_normalized=normalize_handle(username).lower())


async def start_signup(
    store: Store,
    tokens: CompleteTokenStore,
    resolver: MxResolver,
    email: str | None,
    password: str | None,
) -> tuple[str, str]:
    """Validate the email and issue a completion token. Returns (email, token)."""
    if not email or not password:
        raise ValidationError("Email and password required")
    normalized = normalize_email(email)
    if not is_valid_email_syntax(normalized):
        raise ValidationError("Please enter a valid email address.")
    if not await resolver.has_mx(email_domain(normalized)):
        raise ValidationError(
            "Please use an email address from a real email provider (this domain does not accept email)."
        )
    if await get_user_by_email(store, normalized) is not None:
        raise ConflictError("An account with this email already exists")

    token = tokens.issue(normalized, hash_password(password))
    logger.info("signup_started", email_domain=email_domain(normalized), pending=len(tokens))
    return normalized, token


async def complete_signup(
    store: Store,
    tokens: CompleteTokenStore,
    *,
    complete_token: str | None,
    display_name: str | None,
    username: str | None,
    now: datetime,
    favorite_game_kinds: Any = None,
    feed_preference: Any = None,
    platform: Any = None,
) -> UserRecord:
    """Materialize the user behind ``complete_token``.

    A taken username leaves the token in place so the profile step can be
    resubmitted with another handle.
    """
    if not complete_token or not (display_name or "").strip() or not (username or "").strip():
        raise ValidationError("completeToken, displayName, and username required")

    pending = tokens.get(complete_token)
    if pending is None:
        raise ValidationError("Invalid or expired session")
    if tokens.is_expired(pending):
        tokens.consume(complete_token)
        raise ValidationError("Session expired. Please start again.")

    if await get_user_by_email(store, pending.email) is not None:
        tokens.consume(complete_token)
        raise ConflictError("Account already completed")

    handle = normalize_handle(username)
    if not handle:
        raise ValidationError("username required")
    if await get_user_by_username(store, handle) is not None:
        raise ConflictError("Username is already taken")

    kinds = [k for k in favorite_game_kinds if isinstance(k, str)] if isinstance(favorite_game_kinds, list) else []
    user = UserRecord(
        id=new_id("profile"),
        email=pending.email,
        username=handle,
        username_normalized=handle.lower(),
        display_name=display_name.strip(),
        favorite_game_kinds=kinds,
        feed_preference=feed_preference if feed_preference in FEED_PREFERENCES else "all",
        platform=normalize_platform(platform),
        password_hash=pending.password_hash,
        created_at=now,
    )
    if not await store.insert(USERS, user):
        raise ConflictError("An account with this email or username already exists")
    tokens.consume(complete_token)
    logger.info("user_created", user_id=user.id, username=user.username_normalized)
    return user


async def login(store: Store, email: str | None, password: str | None) -> UserRecord:
    if not email or not password:
        raise ValidationError("Email and password required")
    user = await get_user_by_email(store, email)
    if user is None:
        raise UnauthorizedError("Invalid email or password")
    if not user.password_hash:
        raise ValidationError("This account has no password. Use the sign-in method it was created with.")
    if not verify_password(password, user.password_hash):
        logger.info("login_failed", user_id=user.id)
        raise UnauthorizedError("Invalid email or password")

    if needs_rehash(user.password_hash):
        await store.update(USERS, user.id, {"password_hash": hash_password(password)})
    logger.info("user_logged_in", user_id=user.id)
    return user
