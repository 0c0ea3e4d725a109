from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

FieldErrors = Dict[str, List[str]]

FORM_ERRORS_KEY = "_form"


def flatten_errors(exc: ValidationError) -> FieldErrors:
    """Group pydantic errors by the top-level input field they belong to."""
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        key = str(loc[0]) if loc else FORM_ERRORS_KEY
        msg = err.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(key, []).append(msg)
    return errors


def validate(model: Type[M], data: Any) -> Tuple[Optional[M], Optional[FieldErrors]]:
    """Return ``(value, None)`` when ``data`` is valid, else ``(None, field_errors)``."""
    if not isinstance(data, dict):
        return None, {FORM_ERRORS_KEY: ["Expected a JSON object"]}
    try:
        return model.model_validate(data), None
    except ValidationError as e:
        return None, flatten_errors(e)


def honeypot_tripped(data: Any) -> bool:
    """True when the hidden ``_honeypot`` field was filled in."""
    if not isinstance(data, dict):
        return False
    value = data.get("_honeypot")
    if value is None:
        return False
    return bool(str(value).strip())
