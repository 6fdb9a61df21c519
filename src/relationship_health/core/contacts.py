"""Contact address parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from relationship_health.core.errors import ValidationError

_NAMED_ADDRESS = re.compile(r"^\s*\"?([^<\"]*?)\"?\s*<([^>]+)>\s*$")
_ADDRESS = re.compile(r"^[^@\s<>\"]+@[^@\s<>\"]+$")


@dataclass(frozen=True)
class ContactAddress:
    """A normalized contact address."""

    email: str
    display_name: str

    @property
    def domain(self) -> str:
        """Domain part of the address."""
        return self.email.rpartition("@")[2]


def name_from_local_part(email: str) -> str:
    """Guess a display name from the local part of an address.

    ``jane.doe@acme.com`` becomes ``Jane Doe``.
    """
    local = email.partition("@")[0]
    words = re.sub(r"[._]+", " ", local).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def parse_contact(raw: str | None) -> ContactAddress:
    """Parse a bare address or the ``Name <address>`` form.

    Args:
        raw: Address as received.

    Returns:
        Lower-cased address with a display name.

    Raises:
        ValidationError: If the address is missing or malformed.
    """
    if raw is None or not raw.strip():
        raise ValidationError("contact_email", "is required")

    text = raw.strip()
    quoted_name = ""
    match = _NAMED_ADDRESS.match(text)
    if match:
        quoted_name = match.group(1).strip()
        text = match.group(2).strip()

    if not _ADDRESS.match(text):
        raise ValidationError("contact_email", f"{raw!r} is not an email address")

    email = text.lower()
    return ContactAddress(email=email, display_name=quoted_name or name_from_local_part(email))


def contact_domain(raw: str) -> str:
    """Domain of a contact address.

    Raises:
        ValidationError: If the address is missing or malformed.
    """
    return parse_contact(raw).domain
