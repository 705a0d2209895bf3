"""Controller for signing in."""

import logging
from http import HTTPStatus as status

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import ServiceUnavailable, Unauthorized

from ..accounts import current_service
from ..exceptions import InvalidCredentials, StoreUnavailable
from .forms import LoginForm
from .util import ResponseData, serialize

logger = logging.getLogger(__name__)


def login(params: MultiDict, is_company: bool) -> ResponseData:
    """
    Handle a ``login`` request.

    On success the response carries ``accessToken`` and either ``user`` or
    ``company``, depending on ``is_company``.
    """
    form = LoginForm(params)
    if not form.validate():
        logger.debug('Login form not valid')
        return {'errors': form.errors}, status.BAD_REQUEST, {}

    try:
        token, account = current_service().sign_in(
            form.email.data, form.password.data, is_company
        )
    except InvalidCredentials as e:
        raise Unauthorized(str(e)) from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Cannot log in') from e
    key = 'company' if is_company else 'user'
    data = {'login': {'accessToken': token, key: serialize(account)}}
    return data, status.OK, {}
