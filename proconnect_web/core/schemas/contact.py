"""Contact-reveal schemas"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

_NON_DIGITS = re.compile(r"\D")

NO_CONTACT_MESSAGE = "No contact details available."


def whatsapp_url(number: str) -> Optional[str]:
    """Build a wa.me deep link from a free-form phone string, or None if it has no digits."""
    digits = _NON_DIGITS.sub("", number or "")
    if not digits:
        return None
    return f"https://wa.me/{digits}"


class ContactLink(BaseModel):
    kind: str
    label: str
    value: str
    href: str
    external: bool = False


class ProfessionalContact(BaseModel):
    """Private contact channels returned once a visitor's email is verified"""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None

    @field_validator("email", "phone", "whatsapp", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def links(self) -> List[ContactLink]:
        """Actionable links for every channel that is present, in display order."""
        links = []
        if self.email:
            links.append(ContactLink(kind="email", label="Email", value=self.email, href=f"mailto:{self.email}"))
        if self.phone:
            links.append(ContactLink(kind="phone", label="Phone", value=self.phone, href=f"tel:{self.phone}"))
        if self.whatsapp:
            href = whatsapp_url(self.whatsapp)
            if href:
                links.append(
                    ContactLink(kind="whatsapp", label="WhatsApp", value=self.whatsapp, href=href, external=True)
                )
        return links

    @property
    def is_empty(self) -> bool:
        return not self.links()
