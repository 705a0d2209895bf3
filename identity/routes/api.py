"""
Provides the JSON API for accounts.

Each route corresponds to one operation of the account API (``createUser``,
``login``, ``getUser``, and so on); responses are keyed by operation name.
Routes that act on behalf of an account require a bearer token issued by
``login``, passed in the ``Authorization`` header.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, Tuple

from flask import Blueprint, Response, current_app, g, jsonify, make_response, \
    request
from werkzeug.exceptions import BadRequest, HTTPException, \
    ServiceUnavailable, Unauthorized

from .. import domain, tokens
from ..controllers import authentication, profile, registration
from ..controllers.util import ResponseData, as_bool, to_params
from ..exceptions import InvalidToken, StoreUnavailable
from ..services.store import current_store

logger = logging.getLogger(__name__)
blueprint = Blueprint('api', __name__, url_prefix='')

INVALID_TOKEN = 'Invalid authorization token'


def _bearer_token() -> Optional[str]:
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def _load_account(claims: dict) -> Optional[domain.Account]:
    store = current_store()
    account: Optional[domain.Account] = None
    if claims.get('kind') == domain.AccountKind.COMPANY.value:
        account = store.find_company_by_email(claims['sub'])
    elif claims.get('kind') == domain.AccountKind.USER.value:
        account = store.find_user_by_email(claims['sub'])
    # The address may have been released and taken by someone else.
    if account is None or account.account_id != claims.get('id'):
        return None
    return account


def authenticated(*kinds: domain.AccountKind) -> Callable:
    """
    Generate a decorator that requires a valid bearer token.

    The account named by the token is loaded and placed on ``g.account``.
    If ``kinds`` are given, the account must be one of those kinds.
    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            token = _bearer_token()
            if token is None:
                logger.debug('No bearer token; aborting')
                raise Unauthorized(INVALID_TOKEN)
            try:
                claims = tokens.decode(token, current_app.config['JWT_SECRET'])
            except InvalidToken as e:
                logger.debug('Rejected token: %s', e)
                raise Unauthorized(INVALID_TOKEN) from e
            try:
                account = _load_account(claims)
            except StoreUnavailable as e:
                raise ServiceUnavailable('Cannot authenticate') from e
            if account is None or (kinds and account.KIND not in kinds):
                logger.debug('Token does not name an acceptable account')
                raise Unauthorized(INVALID_TOKEN)
            g.account = account
            return func(*args, **kwargs)
        return wrapper
    return protector


def _payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest('Request body must be a JSON object')
    return payload


def _respond(result: ResponseData) -> Response:
    data, code, headers = result
    response: Response = make_response(jsonify(data), code)
    response.headers.extend(headers)
    return response


@blueprint.after_app_request
def apply_response_headers(response: Response) -> Response:
    """Apply CORS and security headers to all responses."""
    response.headers['Access-Control-Allow-Origin'] = \
        current_app.config['CORS_ORIGIN']
    response.headers['Access-Control-Allow-Credentials'] = 'true'
    response.headers['Access-Control-Allow-Headers'] = \
        'Authorization, Content-Type'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    response.headers['Vary'] = 'Origin'
    response.headers['X-Frame-Options'] = 'DENY'
    return response


@blueprint.app_errorhandler(HTTPException)
def handle_http_exception(error: HTTPException) -> Tuple[Response, int]:
    """Render HTTP errors as JSON."""
    return jsonify({'reason': error.description}), error.code or 500


@blueprint.route('/users', methods=['POST'])
def create_user() -> Response:
    """Register a new user."""
    return _respond(registration.create_user(to_params(_payload())))


@blueprint.route('/companies', methods=['POST'])
def create_company() -> Response:
    """Register a new company."""
    return _respond(registration.create_company(to_params(_payload())))


@blueprint.route('/login', methods=['POST'])
def login() -> Response:
    """Sign in as a user or as a company, as the ``isCompany`` flag says."""
    payload = _payload()
    flag = payload.get('isCompany', request.args.get('isCompany'))
    if flag is None:
        raise BadRequest('isCompany is required')
    is_company = as_bool(flag)
    return _respond(authentication.login(to_params(payload), is_company))


@blueprint.route('/profile', methods=['POST'])
@authenticated()
def update_user() -> Response:
    """Update the profile of the authenticated user or company."""
    return _respond(profile.update_user(to_params(_payload()),
                                        g.account))


@blueprint.route('/user', methods=['GET'])
@authenticated(domain.AccountKind.USER)
def get_user() -> Response:
    """Full profile of the authenticated user."""
    return _respond(profile.get_user(g.account))


@blueprint.route('/company', methods=['GET'])
@authenticated(domain.AccountKind.COMPANY)
def get_company() -> Response:
    """Profile of the authenticated company."""
    return _respond(profile.get_company(g.account))


@blueprint.route('/companies', methods=['GET'])
def get_all_companies() -> Response:
    """All companies."""
    return _respond(profile.get_all_companies())


@blueprint.route('/companies/<string:company_id>/employees', methods=['GET'])
@authenticated()
def get_all_employees(company_id: str) -> Response:
    """Users affiliated with a company."""
    return _respond(profile.get_all_employees(company_id))
