"""Request payload checks shared by the stores and routes.

Each helper reads one key from a JSON payload, records a message in
`errors` if the value is unusable, and returns the cleaned value. Callers
collect every field's errors first and then call raise_if_errors(), so a
bad request reports all of its problems at once and writes nothing.
"""

from datetime import date
from uuid import UUID

from flask import request

from forge.errors import ValidationError

_TRUE_STRINGS = {'1', 'true', 'on', 'yes'}
_FALSE_STRINGS = {'0', 'false', 'off', 'no', ''}


def _label(key):
    return key.replace('_', ' ')


def raise_if_errors(errors):
    if errors:
        raise ValidationError(errors)


def string(data, key, errors, required=False, max_length=None):
    """Stripped string, or None when blank and not required."""
    value = data.get(key)
    if value is None:
        if required:
            errors[key] = f'The {_label(key)} field is required.'
        return None
    if not isinstance(value, str):
        errors[key] = f'The {_label(key)} field must be a string.'
        return None
    value = value.strip()
    if not value:
        if required:
            errors[key] = f'The {_label(key)} field is required.'
        return None
    if max_length is not None and len(value) > max_length:
        errors[key] = f'The {_label(key)} field must not be greater than {max_length} characters.'
        return None
    return value


def choice(data, key, choices, errors, required=False, default=None):
    """A value from a closed set. Missing values fall back to default."""
    value = data.get(key)
    if value is None or value == '':
        if required and default is None:
            errors[key] = f'The {_label(key)} field is required.'
        return default
    if value not in choices:
        allowed = ', '.join(choices)
        errors[key] = f'The selected {_label(key)} is invalid. Expected one of: {allowed}.'
        return None
    return value


def integer(data, key, errors, required=False, min_value=None, max_value=None):
    value = data.get(key)
    if value is None or value == '':
        if required:
            errors[key] = f'The {_label(key)} field is required.'
        return None
    if isinstance(value, bool):
        errors[key] = f'The {_label(key)} field must be an integer.'
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors[key] = f'The {_label(key)} field must be an integer.'
        return None
    if isinstance(value, float) and value != number:
        errors[key] = f'The {_label(key)} field must be an integer.'
        return None
    if min_value is not None and number < min_value:
        errors[key] = f'The {_label(key)} field must be at least {min_value}.'
        return None
    if max_value is not None and number > max_value:
        errors[key] = f'The {_label(key)} field must not be greater than {max_value}.'
        return None
    return number


def boolean(data, key, errors, default=False):
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    errors[key] = f'The {_label(key)} field must be true or false.'
    return default


def mapping(data, key, errors, string_fields=(), mapping_fields=()):
    """A JSON object. Listed sub-keys must be strings (or mappings) when present."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors[key] = f'The {_label(key)} field must be an object.'
        return {}
    for field in string_fields:
        sub = value.get(field)
        if sub is not None and not isinstance(sub, str):
            errors[f'{key}.{field}'] = f'The {_label(key)}.{field} field must be a string.'
    for field in mapping_fields:
        sub = value.get(field)
        if sub is not None and not isinstance(sub, dict):
            errors[f'{key}.{field}'] = f'The {_label(key)}.{field} field must be an object.'
    return dict(value)


def iso_date(data, key, errors):
    value = data.get(key)
    if value is None or value == '':
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        errors[key] = f'The {_label(key)} field must be a date (YYYY-MM-DD).'
        return None


def uuid_string(data, key, errors, required=False):
    """A node id. Returns the canonical lowercase UUID string."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            errors[key] = f'The {_label(key)} field is required.'
        return None
    try:
        return str(UUID(str(value)))
    except ValueError:
        errors[key] = f'The {_label(key)} field must be a valid UUID.'
        return None


def json_body():
    """The request's JSON object, or {} when the body is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError({'body': 'The request body must be a JSON object.'})
    return data
