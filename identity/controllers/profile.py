"""Controllers for viewing and editing account profiles."""

import logging
from http import HTTPStatus as status

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, InternalServerError, NotFound, \
    ServiceUnavailable

from .. import domain
from ..accounts import current_service
from ..exceptions import InternalError, InvalidUpdate, NoSuchAccount, \
    RegistrationFailed, StoreUnavailable
from .forms import UpdateProfileForm
from .util import ResponseData, serialize

logger = logging.getLogger(__name__)


def get_user(user: domain.User) -> ResponseData:
    """Get the full profile of the authenticated user."""
    try:
        profile = current_service().fetch_profile(user)
    except NoSuchAccount as e:
        raise NotFound('No such user') from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Profiles are unavailable') from e
    return {'getUser': serialize(profile)}, status.OK, {}


def get_company(company: domain.Company) -> ResponseData:
    """Get the profile of the authenticated company."""
    try:
        profile = current_service().fetch_profile(company)
    except NoSuchAccount as e:
        raise NotFound('No such company') from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Profiles are unavailable') from e
    return {'getCompany': serialize(profile)}, status.OK, {}


def get_all_companies() -> ResponseData:
    """List every company."""
    try:
        companies = current_service().list_companies()
    except StoreUnavailable as e:
        raise ServiceUnavailable('Profiles are unavailable') from e
    data = {'getAllCompanies': [serialize(c) for c in companies]}
    return data, status.OK, {}


def get_all_employees(company_id: str) -> ResponseData:
    """List the users affiliated with the company ``company_id``."""
    service = current_service()
    try:
        company = service.store.find_company_by_id(company_id)
        if company is None:
            raise NotFound('No such company')
        employees = service.list_employees(company)
    except StoreUnavailable as e:
        raise ServiceUnavailable('Profiles are unavailable') from e
    data = {'getAllEmployees': [serialize(user) for user in employees]}
    return data, status.OK, {}


def update_user(params: MultiDict, account: domain.Account) -> ResponseData:
    """Handle an ``updateUser`` request for a user or a company."""
    form = UpdateProfileForm(params)
    if not form.validate():
        logger.debug('Profile form not valid')
        return {'errors': form.errors}, status.BAD_REQUEST, {}

    update = domain.ProfileUpdate(
        name=form.name.data,
        email=form.email.data,
        age=form.age.data,
        username=form.username.data,
        bio=form.bio.data
    )
    try:
        updated = current_service().update_profile(update, account)
    except (RegistrationFailed, InvalidUpdate) as e:
        raise BadRequest(str(e)) from e
    except NoSuchAccount as e:
        raise NotFound('No such account') from e
    except InternalError as e:
        logger.error('Update failed for %s: %s', account.account_id, e)
        raise InternalServerError(str(e)) from e
    except StoreUnavailable as e:
        raise ServiceUnavailable('Could not save profile') from e
    return {'updateUser': serialize(updated)}, status.OK, {}
