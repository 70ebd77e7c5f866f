"""Identity verification for assertions coming back from the identity provider.

Nothing in here talks to the provider or the database: ``verify_identity``
takes the decoded ID-token claims and either returns a ``VerifiedIdentity``
or raises an ``AuthError`` subclass.
"""
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..exceptions import DomainNotAllowedError, MissingIdentityError

UNKNOWN_NAME = "Unknown"

# claims that may carry the institutional address, most specific first
EMAIL_CLAIMS = ("upn", "unique_name")


@dataclass(frozen=True)
class VerifiedIdentity:
    email: str
    external_id: Optional[str]
    given_name: str
    family_name: str


def email_domain_allowed(email: str, allowed_domains: Iterable[str]) -> bool:
    email = email.lower()
    return any(email.endswith("@" + d.lower().lstrip("@")) for d in allowed_domains)


def extract_email(claims: Mapping) -> Optional[str]:
    for key in EMAIL_CLAIMS:
        value = claims.get(key)
        if value:
            return value.strip()
    return None


def verify_identity(claims: Mapping, allowed_domains: Iterable[str]) -> VerifiedIdentity:
    email = extract_email(claims)
    if not email:
        raise MissingIdentityError()
    if not email_domain_allowed(email, allowed_domains):
        raise DomainNotAllowedError(email)

    return VerifiedIdentity(
        email=email,
        external_id=claims.get("sub") or claims.get("oid"),
        given_name=claims.get("given_name") or UNKNOWN_NAME,
        family_name=claims.get("family_name") or UNKNOWN_NAME,
    )
