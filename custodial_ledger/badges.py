"""
Badge (Credential) Module

Badges are signed JWTs that prove who is calling. A bank issues three
kinds: the external admin badge handed to its creator, an internal admin
badge it keeps for itself, and one customer badge per registration carrying
the customer's identity key and registration data.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
import logging
import uuid

import jwt

from .customers import CustomerRegistration
from .errors import AccessDenied, InvalidCredential


logger = logging.getLogger(__name__)


class BadgeKind(Enum):
    """Kinds of badge a bank can issue"""
    ADMIN = "admin"
    INTERNAL_ADMIN = "internal_admin"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class Badge:
    """A verified badge"""
    kind: BadgeKind
    badge_id: str
    issuer_id: str
    registration: Optional[CustomerRegistration] = None

    @property
    def is_admin(self) -> bool:
        return self.kind in (BadgeKind.ADMIN, BadgeKind.INTERNAL_ADMIN)

    @property
    def badge_type(self) -> str:
        return badge_type(self.issuer_id, self.kind)


def badge_type(issuer_id: str, kind: BadgeKind) -> str:
    """Descriptor shared by all badges of one kind from one issuer"""
    return f"{issuer_id}:{kind.value}"


class BadgeIssuer:
    """Mints and verifies badges for one bank"""

    def __init__(self, secret: str, algorithm: str = "HS256", issuer_id: Optional[str] = None):
        if not secret:
            raise ValueError("Badge signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.issuer_id = issuer_id or uuid.uuid4().hex

    @property
    def customer_badge_type(self) -> str:
        return badge_type(self.issuer_id, BadgeKind.CUSTOMER)

    def mint_admin_badge(self) -> str:
        return self._encode(BadgeKind.ADMIN, uuid.uuid4().hex)

    def mint_internal_admin_badge(self) -> str:
        return self._encode(BadgeKind.INTERNAL_ADMIN, uuid.uuid4().hex)

    def mint_customer_badge(
        self,
        authority: str,
        customer_id: str,
        registration: CustomerRegistration
    ) -> str:
        """
        Mint a customer badge.

        Args:
            authority: The bank's internal admin badge; nobody else may mint
            customer_id: Identity key the badge resolves to
            registration: Registration data stored in the badge

        Returns:
            Encoded badge token
        """
        if self.resolve(authority).kind != BadgeKind.INTERNAL_ADMIN:
            raise AccessDenied("Only the internal admin badge can mint customer badges")

        return self._encode(BadgeKind.CUSTOMER, customer_id, {
            "first_name": registration.first_name,
            "last_name": registration.last_name
        })

    def resolve(self, token: str) -> Badge:
        """Verify a badge token and return what it proves"""
        if not token:
            raise InvalidCredential("Badge is required")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer_id,
                options={"require": ["iss", "sub", "kind"]}
            )
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected badge: %s", e)
            raise InvalidCredential(f"Invalid badge: {e}") from e

        try:
            kind = BadgeKind(payload["kind"])
        except ValueError as e:
            raise InvalidCredential(f"Unknown badge kind: {payload['kind']}") from e

        registration = None
        if kind == BadgeKind.CUSTOMER:
            registration = CustomerRegistration(
                first_name=payload.get("first_name", ""),
                last_name=payload.get("last_name", "")
            )

        return Badge(
            kind=kind,
            badge_id=payload["sub"],
            issuer_id=payload["iss"],
            registration=registration
        )

    def _encode(self, kind: BadgeKind, subject: str, claims: Optional[Dict[str, Any]] = None) -> str:
        payload = {
            "iss": self.issuer_id,
            "sub": subject,
            "kind": kind.value
        }
        if claims:
            payload.update(claims)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)
