import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lenscart.adapters.clock import SystemClock
from lenscart.adapters.fs.filestore import FileSystemStore
from lenscart.adapters.sqlite.repos import (
    SQLiteCartRepo,
    SQLiteCatalogRepo,
    SQLiteOrderRepo,
)
from lenscart.api.auth_utils import decode_access_token
from lenscart.components.cart import CartOwner
from lenscart.components.checkout import CheckoutSettings
from lenscart.components.lens_config import FileConstraints
from lenscart.components.prescriptions import constraints_from_rules
from lenscart.domain.entities import User
from lenscart.rules.loader import DEFAULT_RULES_PATH, load_rules
from lenscart.rules.models import Rules

logger = logging.getLogger(__name__)

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9-]{8,64}$")


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("LENSCART_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "lenscart.db")
        self.files_dir = self.data_dir / "files"
        self.migrations_dir = str(Path(__file__).resolve().parent.parent.parent / "migrations")
        self.rules_path = Path(os.environ.get("LENSCART_RULES", str(DEFAULT_RULES_PATH)))
        self.jwt_secret = os.environ.get("LENSCART_JWT_SECRET", "dev-secret-unsafe")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_upload_constraints(rules: Rules = Depends(get_rules)) -> FileConstraints:
    return constraints_from_rules(rules.uploads.prescriptions)


def get_checkout_settings(rules: Rules = Depends(get_rules)) -> CheckoutSettings:
    return CheckoutSettings(
        number_prefix=rules.orders.number_prefix,
        payment_methods=tuple(rules.orders.payment_methods),
        required_address_fields=tuple(rules.orders.required_address_fields),
        free_shipping_threshold=rules.shipping.free_shipping_threshold,
        flat_fee=rules.shipping.flat_fee,
    )


# --- Repos ---
def get_catalog_repo(settings: Settings = Depends(get_settings)) -> SQLiteCatalogRepo:
    return SQLiteCatalogRepo(settings.db_path)


def get_cart_repo(settings: Settings = Depends(get_settings)) -> SQLiteCartRepo:
    return SQLiteCartRepo(settings.db_path)


def get_order_repo(settings: Settings = Depends(get_settings)) -> SQLiteOrderRepo:
    return SQLiteOrderRepo(settings.db_path)


def get_file_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=settings.files_dir)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> User | None:
    """The signed-in user, or None for guests. A bad token is an error, not a guest."""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials, settings.jwt_secret, rules.auth.algorithm)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    try:
        uid = UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    claimed = payload.get(rules.auth.roles_claim) or []
    if isinstance(claimed, str):
        claimed = [claimed]
    roles = ["admin" if r == rules.auth.admin_role else "customer" for r in claimed]
    return User(id=uid, email=payload.get("email"), roles=sorted(set(roles)))


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def get_cart_owner(
    request: Request,
    user: User | None = Depends(get_optional_user),
    rules: Rules = Depends(get_rules),
) -> CartOwner:
    """Signed-in users own their cart; guests are identified by a session header."""
    if user is not None:
        return CartOwner(user_id=user.id)

    session_id = request.headers.get(rules.cart.session_header)
    if not session_id or not _SESSION_ID_RE.match(session_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Sign in or send a {rules.cart.session_header} header",
        )
    return CartOwner(session_id=session_id)
