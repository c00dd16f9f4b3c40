"""Field checks shared by the services.  Each returns a FieldError or None."""
from app.errors import FieldError, ValidationError
from app.ids import id_error


def clean_text(value) -> str | None:
    """Trimmed *value*, or None when it is not a non-blank string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def text_error(field: str, value, msg: str | None = None) -> FieldError | None:
    if clean_text(value) is None:
        return FieldError(field, msg or f"{field.capitalize()} is required")
    return None


def raise_for_errors(*errors: FieldError | None) -> None:
    """Raise a ValidationError carrying every non-None error, if any."""
    found = [e for e in errors if e is not None]
    if found:
        raise ValidationError(found)


def require_id(field: str, value) -> str:
    raise_for_errors(id_error(field, value))
    return value
