"""Controllers for user and company registration."""

import logging
from http import HTTPStatus as status

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, ServiceUnavailable

from ..accounts import current_service
from ..exceptions import RegistrationFailed, StoreUnavailable
from .forms import CreateCompanyForm, CreateUserForm
from .util import ResponseData, serialize

logger = logging.getLogger(__name__)


def create_user(params: MultiDict) -> ResponseData:
    """Handle a ``createUser`` request."""
    form = CreateUserForm(params)
    if not form.validate():
        logger.debug('Registration form not valid')
        return {'errors': form.errors}, status.BAD_REQUEST, {}

    try:
        result = current_service().register_user(
            name=form.name.data,
            email=form.email.data,
            password=form.password.data,
            username=form.username.data,
            age=form.age.data
        )
    except RegistrationFailed as e:
        raise BadRequest(str(e)) from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Registration is unavailable') from e
    return {'createUser': result}, status.CREATED, {}


def create_company(params: MultiDict) -> ResponseData:
    """Handle a ``createCompany`` request."""
    form = CreateCompanyForm(params)
    if not form.validate():
        logger.debug('Company registration form not valid')
        return {'errors': form.errors}, status.BAD_REQUEST, {}

    try:
        company = current_service().register_company(
            name=form.name.data,
            email=form.email.data,
            password=form.password.data
        )
    except RegistrationFailed as e:
        raise BadRequest(str(e)) from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Registration is unavailable') from e
    return {'createCompany': serialize(company)}, status.CREATED, {}
