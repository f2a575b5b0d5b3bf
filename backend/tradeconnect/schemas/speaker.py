"""Speaker Schemas - request validation and response shapes for /api/speakers.

Invariants:
    - SpeakerCreate: names 2-100, valid email, baseRate >= 0, >= 1 modality and language
    - SpeakerUpdate: every field optional, same bounds when present; explicit
      null is rejected for columns that cannot be empty
    - AvailabilityBlockCreate: endDate strictly after startDate
    - EvaluationCreate: overallRating and every criteria rating in 1-5
    - Validation messages are the Spanish texts clients display verbatim

Design Decisions:
    - Length checks live in field validators (not Field constraints) so the
      error message is ours, not pydantic's English default
    - Private fields (nit, cui, rtu, fullBio, cvFile) live only on SpeakerPrivate
"""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator, ValidationInfo

from tradeconnect.core import messages
from tradeconnect.core.clock import ensure_utc
from tradeconnect.core.domain_types import (
    EvaluatorType, Modality, RateType, RecurrencePattern, SpeakerCategory,
    SpeakerLanguage,
)
from tradeconnect.schemas.common import (
    CamelModel, UtcDatetime, check_url, strip_optional,
)


_BOUNDS: dict[str, tuple[int, int, str]] = {
    "first_name": (2, 100, "El nombre debe tener entre 2 y 100 caracteres"),
    "last_name": (2, 100, "El apellido debe tener entre 2 y 100 caracteres"),
    "phone": (8, 20, "El teléfono debe tener entre 8 y 20 caracteres"),
    "country": (2, 100, "El país debe tener entre 2 y 100 caracteres"),
    "nit": (8, 20, "El NIT debe tener un formato válido"),
    "cui": (8, 20, "El CUI debe tener un formato válido"),
    "rtu": (5, 50, "El RTU debe tener entre 5 y 50 caracteres"),
    "short_bio": (0, 200, "La biografía corta no puede exceder 200 caracteres"),
    "full_bio": (0, 2000, "La biografía completa no puede exceder 2000 caracteres"),
}

_URL_MESSAGES: dict[str, str] = {
    "profile_image": "La URL de la imagen de perfil debe ser válida",
    "linkedin_url": "La URL de LinkedIn debe ser válida",
    "twitter_url": "La URL de Twitter debe ser válida",
    "website_url": "La URL del sitio web debe ser válida",
    "cv_file": "La URL del CV debe ser válida",
}

# Omitted on update means "unchanged"; an explicit null is rejected.
_REQUIRED_ON_UPDATE: dict[str, str] = {
    "first_name": "El nombre no puede ser nulo",
    "last_name": "El apellido no puede ser nulo",
    "email": "El email no puede ser nulo",
    "base_rate": "La tarifa base no puede ser nula",
    "rate_type": "El tipo de tarifa no puede ser nulo",
    "modalities": "Debe seleccionar al menos una modalidad",
    "languages": "Debe seleccionar al menos un idioma",
    "category": "La categoría no puede ser nula",
    "is_active": "El estado activo no puede ser nulo",
}


def _check_bounds(value: str | None, info: ValidationInfo) -> str | None:
    if value is None:
        return None
    value = value.strip()
    low, high, message = _BOUNDS[info.field_name]
    if not (low <= len(value) <= high):
        raise ValueError(message)
    return value


def _check_url_field(value: str | None, info: ValidationInfo) -> str | None:
    try:
        return check_url(value)
    except ValueError:
        raise ValueError(_URL_MESSAGES[info.field_name])


class _SpeakerFields(CamelModel):
    """Shared validators for create and update payloads."""

    @field_validator(*_BOUNDS, check_fields=False)
    @classmethod
    def check_lengths(cls, v, info: ValidationInfo):
        return _check_bounds(v, info)

    @field_validator(*_URL_MESSAGES, check_fields=False)
    @classmethod
    def check_urls(cls, v, info: ValidationInfo):
        return _check_url_field(v, info)

    @field_validator("base_rate", check_fields=False)
    @classmethod
    def check_base_rate(cls, v):
        if v is not None and v < 0:
            raise ValueError("La tarifa base debe ser un número positivo")
        return v

    @field_validator("modalities", check_fields=False)
    @classmethod
    def check_modalities(cls, v):
        if v is not None and not v:
            raise ValueError("Debe seleccionar al menos una modalidad")
        return list(dict.fromkeys(v)) if v else v

    @field_validator("languages", check_fields=False)
    @classmethod
    def check_languages(cls, v):
        if v is not None and not v:
            raise ValueError("Debe seleccionar al menos un idioma")
        return list(dict.fromkeys(v)) if v else v

    @field_validator("specialty_ids", check_fields=False)
    @classmethod
    def check_specialty_ids(cls, v):
        if v is not None and any(i < 1 for i in v):
            raise ValueError(
                "Los IDs de especialidades deben ser números enteros positivos",
            )
        return list(dict.fromkeys(v)) if v else v


class SpeakerCreate(_SpeakerFields):
    first_name: str
    last_name: str
    email: EmailStr
    phone: str | None = None
    country: str | None = None
    nit: str | None = None
    cui: str | None = None
    rtu: str | None = None
    profile_image: str | None = None
    short_bio: str | None = None
    full_bio: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    website_url: str | None = None
    base_rate: float = 0
    rate_type: RateType = RateType.HOURLY
    modalities: list[Modality]
    languages: list[SpeakerLanguage]
    cv_file: str | None = None
    category: SpeakerCategory = SpeakerCategory.NATIONAL
    specialty_ids: list[int] = Field(default_factory=list)


class SpeakerUpdate(_SpeakerFields):
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    country: str | None = None
    nit: str | None = None
    cui: str | None = None
    rtu: str | None = None
    profile_image: str | None = None
    short_bio: str | None = None
    full_bio: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    website_url: str | None = None
    base_rate: float | None = None
    rate_type: RateType | None = None
    modalities: list[Modality] | None = None
    languages: list[SpeakerLanguage] | None = None
    cv_file: str | None = None
    category: SpeakerCategory | None = None
    specialty_ids: list[int] | None = None
    is_active: bool | None = None

    @field_validator(*_REQUIRED_ON_UPDATE)
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(_REQUIRED_ON_UPDATE[info.field_name])
        return v


# --- Availability & evaluations ----------------------------------------------

class AvailabilityBlockCreate(CamelModel):
    start_date: datetime
    end_date: datetime
    reason: str | None = None
    is_recurring: bool
    recurrence_pattern: RecurrencePattern | None = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_date")
        if start is not None and ensure_utc(v) <= ensure_utc(start):
            raise ValueError(messages.END_AFTER_START)
        return v

    @field_validator("reason")
    @classmethod
    def check_reason(cls, v: str | None) -> str | None:
        v = strip_optional(v)
        if v is not None and len(v) > 500:
            raise ValueError("La razón no puede exceder 500 caracteres")
        return v


class EvaluationCreate(CamelModel):
    event_id: int = Field(ge=1)
    overall_rating: float
    criteria_ratings: dict[str, float] | None = None
    comments: str | None = None
    is_public: bool = False
    evaluation_date: datetime | None = None
    evaluator_type: EvaluatorType = EvaluatorType.ORGANIZER

    @field_validator("overall_rating")
    @classmethod
    def check_overall(cls, v: float) -> float:
        if not (1 <= v <= 5):
            raise ValueError("El rating general debe estar entre 1 y 5")
        return v

    @field_validator("criteria_ratings")
    @classmethod
    def check_criteria(cls, v: dict[str, float] | None):
        if v and any(not (1 <= r <= 5) for r in v.values()):
            raise ValueError("Los ratings por criterio deben estar entre 1 y 5")
        return v

    @field_validator("comments")
    @classmethod
    def check_comments(cls, v: str | None) -> str | None:
        v = strip_optional(v)
        if v is not None and len(v) > 1000:
            raise ValueError("Los comentarios no pueden exceder 1000 caracteres")
        return v


# --- Responses ----------------------------------------------------------------

class SpecialtyResponse(CamelModel):
    id: int
    name: str
    category: str | None = None


class AvailabilityBlockResponse(CamelModel):
    id: int
    speaker_id: int
    start_date: UtcDatetime
    end_date: UtcDatetime
    reason: str | None = None
    is_recurring: bool
    recurrence_pattern: str | None = None
    created_at: UtcDatetime


class EvaluationResponse(CamelModel):
    id: int
    speaker_id: int
    event_id: int
    evaluator_id: int
    evaluator_type: str
    overall_rating: float
    criteria_ratings: dict | None = None
    comments: str | None = None
    is_public: bool
    evaluation_date: UtcDatetime


class SpeakerPublic(CamelModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str | None = None
    country: str | None = None
    profile_image: str | None = None
    short_bio: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    website_url: str | None = None
    base_rate: float
    rate_type: str
    modalities: list[str]
    languages: list[str]
    category: str
    rating: float
    total_events: int
    is_active: bool
    verified_at: UtcDatetime | None = None
    created_at: UtcDatetime
    specialties: list[SpecialtyResponse] = Field(default_factory=list)


class SpeakerPrivate(SpeakerPublic):
    nit: str | None = None
    cui: str | None = None
    rtu: str | None = None
    full_bio: str | None = None
    cv_file: str | None = None
    verified_by: int | None = None
    created_by: int
    updated_by: int | None = None
