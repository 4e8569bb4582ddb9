"""Profile edit form schema"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_COUNTRY = "India"
DEFAULT_CURRENCY = "INR"

TEXT_FIELDS = (
    "first_name",
    "last_name",
    "display_name",
    "headline",
    "bio",
    "email",
    "phone",
    "whatsapp",
    "avatar_url",
    "city",
    "state",
    "country",
    "currency",
)
STRING_FIELDS = tuple(name for name in TEXT_FIELDS if name != "email")
RATE_FIELDS = ("hourly_rate_min", "hourly_rate_max")
LOCATION_FIELDS = ("city", "state", "country", "remote")

TRUTHY = ("on", "true", "1", "yes")


class ProfileFormError(ValueError):
    """The submitted profile form cannot be sent to the backend."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def _parse_rate(name: str, raw: Any) -> Optional[float]:
    text = str(raw if raw is not None else "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        raise ProfileFormError("Hourly rates must be numbers.", field=name) from None
    if value < 0:
        raise ProfileFormError("Hourly rates cannot be negative.", field=name)
    return value


class ProfileForm(BaseModel):
    """Editable fields of the logged-in professional's public profile"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    headline: str = ""
    bio: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    whatsapp: str = ""
    avatar_url: str = ""
    city: str = ""
    state: str = ""
    country: str = DEFAULT_COUNTRY
    remote: bool = False
    hourly_rate_min: Optional[float] = None
    hourly_rate_max: Optional[float] = None
    currency: str = DEFAULT_CURRENCY

    @field_validator(*STRING_FIELDS, mode="before")
    @classmethod
    def _text(cls, v: object) -> object:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("country")
    @classmethod
    def _default_country(cls, v: str) -> str:
        return v or DEFAULT_COUNTRY

    @field_validator("currency")
    @classmethod
    def _default_currency(cls, v: str) -> str:
        return v.upper() or DEFAULT_CURRENCY

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ProfileForm":
        """Build from posted form fields, raising ``ProfileFormError`` on bad input."""
        data: Dict[str, Any] = {name: form.get(name) for name in TEXT_FIELDS}
        data["remote"] = str(form.get("remote", "")).strip().lower() in TRUTHY
        for name in RATE_FIELDS:
            data[name] = _parse_rate(name, form.get(name))

        low, high = data["hourly_rate_min"], data["hourly_rate_max"]
        if low is not None and high is not None and low > high:
            raise ProfileFormError("Minimum hourly rate cannot exceed the maximum.", field="hourly_rate_min")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            errors = exc.errors()
            field = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else None
            if field == "email":
                raise ProfileFormError("Enter a valid email address.", field="email") from exc
            raise ProfileFormError("Please check the profile fields and try again.", field=field) from exc

    @classmethod
    def from_backend(cls, body: Any) -> "ProfileForm":
        """Prefill from a backend profile, whose location may be nested or flat."""
        if not isinstance(body, dict):
            return cls()
        data = dict(body)
        location = data.pop("location", None)
        if isinstance(location, dict):
            for key in LOCATION_FIELDS:
                data.setdefault(key, location.get(key))
        data = {key: value for key, value in data.items() if value is not None}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            # Stored values that no longer validate are left blank in the form.
            bad = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
            return cls.model_validate({key: value for key, value in data.items() if key not in bad})

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for ``PUT /api/professionals/me``."""
        display_name = self.display_name or f"{self.first_name} {self.last_name}".strip()
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "displayName": display_name,
            "headline": self.headline,
            "bio": self.bio,
            "email": self.email,
            "phone": self.phone or None,
            "whatsapp": self.whatsapp or None,
            "avatarUrl": self.avatar_url or None,
            "location": {
                "city": self.city,
                "state": self.state,
                "country": self.country,
                "remote": self.remote,
            },
            "hourlyRateMin": self.hourly_rate_min,
            "hourlyRateMax": self.hourly_rate_max,
            "currency": self.currency,
        }


def _display(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def form_values(source: Any) -> Dict[str, Any]:
    """Values to prefill the edit form with, from a ``ProfileForm`` or raw posted fields."""
    if isinstance(source, ProfileForm):
        return {name: _display(value) for name, value in source.model_dump().items()}
    values: Dict[str, Any] = {name: str(source.get(name) or "") for name in TEXT_FIELDS + RATE_FIELDS}
    values["remote"] = str(source.get("remote", "")).strip().lower() in TRUTHY
    return values
