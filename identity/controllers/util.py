"""Helpers for controllers."""

from typing import Any, Dict, Optional, Tuple

from werkzeug.datastructures import MultiDict

from .. import domain

ResponseData = Tuple[dict, int, dict]

FIELD_NAMES = {
    'account_id': 'id',
    'account_type': 'accountType',
    'company_id': 'companyOrOrganization',
    'created': 'createdAt',
    'updated': 'updatedAt',
}
"""Names under which account fields are exposed to clients."""


def serialize(account: Optional[domain.Account]) -> Optional[Dict[str, Any]]:
    """Get a client-safe representation of an account (no password)."""
    if account is None:
        return None
    data = domain.to_dict(account)
    data['account_type'] = account.account_type
    if account.KIND is domain.AccountKind.USER:
        data['company'] = serialize(account.company)
    return {FIELD_NAMES.get(key, key): value for key, value in data.items()}


def to_params(payload: Any) -> MultiDict:
    """
    Load a JSON payload into a :class:`.MultiDict` for form processing.

    Forms expect text, so numbers and booleans are passed along as strings.
    Anything other than a JSON object yields no params.
    """
    if not payload or not isinstance(payload, dict):
        return MultiDict()
    return MultiDict({key: value if isinstance(value, str) else str(value)
                      for key, value in payload.items()
                      if value is not None})


def as_bool(value: Any) -> bool:
    """Interpret a flag that may have arrived as a string."""
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)
