"""Session-held shadow copy of the logged-in professional.

Only used to render navigation before (or instead of) an authoritative
``/api/auth/me`` fetch. It is never trusted for access decisions and is
replaced or cleared whenever the backend answers.
"""

from typing import Any, MutableMapping, Optional

from pydantic import ValidationError

from proconnect_web.core.schemas.auth import AuthProfessional

SHADOW_KEY = "identity_shadow"


class IdentityShadow:
    def __init__(self, session: MutableMapping[str, Any]):
        self._session = session

    def load(self) -> Optional[AuthProfessional]:
        data = self._session.get(SHADOW_KEY)
        if not data:
            return None
        try:
            return AuthProfessional.model_validate(data)
        except ValidationError:
            self.clear()
            return None

    def store(self, professional: AuthProfessional) -> None:
        self._session[SHADOW_KEY] = professional.model_dump(mode="json", by_alias=True)

    def clear(self) -> None:
        self._session.pop(SHADOW_KEY, None)
