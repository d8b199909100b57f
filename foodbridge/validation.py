"""Field parsers for JSON request bodies.

Each parser takes the body, the field name and an ``errors`` dict. A bad
value is recorded under the field name and ``None`` returned, so a handler
can check every field before raising a single ``ValidationError``.
"""
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from flask import request

from foodbridge.errors import ValidationError

CENTS = Decimal('0.01')


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('not json', {'body': 'Expected a JSON object'})
    return data


def raise_if(errors):
    if errors:
        raise ValidationError(errors=errors)


def text(data, field, errors, required=False, min_length=None,
         max_length=None):
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors[field] = f'{field} is required'
        return None if required else ''
    if not isinstance(value, str):
        errors[field] = f'{field} must be a string'
        return None
    value = value.strip()
    if min_length and len(value) < min_length:
        errors[field] = f'{field} must be at least {min_length} characters long'
        return None
    if max_length and len(value) > max_length:
        errors[field] = f'{field} must be less than {max_length} characters'
        return None
    return value


def positive_float(data, field, errors, required=False):
    value = data.get(field)
    if value is None or value == '':
        if required:
            errors[field] = f'{field} is required'
        return None
    if isinstance(value, bool):
        errors[field] = f'{field} must be a number'
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors[field] = f'{field} must be a number'
        return None
    if math.isnan(number) or math.isinf(number):
        errors[field] = f'{field} must be a number'
        return None
    if number <= 0:
        errors[field] = f'{field} must be greater than 0'
        return None
    return number


def positive_decimal(data, field, errors, required=False):
    """Parse a monetary value, quantized to two places."""
    value = data.get(field)
    if value is None or value == '':
        if required:
            errors[field] = f'{field} is required'
        return None
    if isinstance(value, bool):
        errors[field] = f'{field} must be a number'
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors[field] = f'{field} must be a number'
        return None
    if not number.is_finite():
        errors[field] = f'{field} must be a number'
        return None
    number = number.quantize(CENTS, rounding=ROUND_HALF_UP)
    if number <= 0:
        errors[field] = f'{field} must be greater than 0'
        return None
    return number


def integer(data, field, errors, required=False):
    value = data.get(field)
    if value is None or value == '':
        if required:
            errors[field] = f'{field} is required'
        return None
    if isinstance(value, bool):
        errors[field] = f'{field} must be an integer'
        return None
    if isinstance(value, float):
        if not value.is_integer():
            errors[field] = f'{field} must be an integer'
            return None
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        errors[field] = f'{field} must be an integer'
        return None


def timestamp(data, field, errors, required=False):
    value = data.get(field)
    if value is None or value == '':
        if required:
            errors[field] = f'{field} is required'
        return None
    if not isinstance(value, str):
        errors[field] = f'{field} must be an ISO-8601 date'
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        errors[field] = f'{field} must be an ISO-8601 date'
        return None
    # stored naive, in UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def choice(value, enum_cls, field, errors, default=None):
    """Map a string onto a member of ``enum_cls`` by value."""
    if value is None or value == '':
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(m.value for m in enum_cls)
        errors[field] = f'{field} must be one of: {allowed}'
        return None


def status_filter(args, enum_cls, default=None):
    """Status query argument; ``all`` (or nothing) disables filtering."""
    value = args.get('status')
    if value == 'all':
        return None
    errors = {}
    status = choice(value, enum_cls, 'status', errors, default=default)
    raise_if(errors)
    return status
