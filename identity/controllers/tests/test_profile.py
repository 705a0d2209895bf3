"""Tests for :mod:`identity.controllers.profile`."""

from http import HTTPStatus as status
from unittest import TestCase, mock

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, InternalServerError, NotFound, \
    ServiceUnavailable

from ... import domain
from ...exceptions import InternalError, InvalidUpdate, NoSuchAccount, \
    StoreUnavailable
from .. import profile

USER = domain.User(account_id='u1', email='foo@bar.com', name='Foo',
                   password='hashed', username='foouser', company_id='c1')
COMPANY = domain.Company(account_id='c1', email='acme@acme.com',
                         name='Acme', password='hashed')


class TestUpdateUser(TestCase):
    """Tests for :func:`profile.update_user`."""

    @mock.patch(f'{profile.__name__}.current_service')
    def test_update(self, mock_service):
        """Supplied fields are handed to the service."""
        mock_service.return_value.update_profile.return_value = \
            USER._replace(age=29)
        data, code, _ = profile.update_user(MultiDict({'age': '29'}), USER)
        self.assertEqual(code, status.OK)
        self.assertEqual(data['updateUser']['age'], 29)
        update, target = mock_service.return_value.update_profile.call_args[0]
        self.assertEqual(update.age, '29')
        self.assertFalse(update.name)
        self.assertIs(target, USER)

    @mock.patch(f'{profile.__name__}.current_service')
    def test_invalid_email(self, mock_service):
        """A malformed e-mail address is refused by the form."""
        data, code, _ = profile.update_user(MultiDict({'email': 'nope'}),
                                            USER)
        self.assertEqual(code, status.BAD_REQUEST)
        self.assertIn('email', data['errors'])
        mock_service.return_value.update_profile.assert_not_called()

    @mock.patch(f'{profile.__name__}.current_service')
    def test_errors(self, mock_service):
        """Service exceptions become HTTP exceptions."""
        cases = [(InvalidUpdate('bad'), BadRequest),
                 (NoSuchAccount('gone'), NotFound),
                 (InternalError('oops'), InternalServerError),
                 (StoreUnavailable('down'), ServiceUnavailable)]
        for exc, expected in cases:
            mock_service.return_value.update_profile.side_effect = exc
            with self.assertRaises(expected):
                profile.update_user(MultiDict({'bio': 'x'}), COMPANY)


class TestGetProfiles(TestCase):
    """Tests for profile retrieval."""

    @mock.patch(f'{profile.__name__}.current_service')
    def test_get_user(self, mock_service):
        """The user comes back with the company embedded."""
        mock_service.return_value.fetch_profile.return_value = \
            USER._replace(company=COMPANY)
        data, code, _ = profile.get_user(USER)
        self.assertEqual(code, status.OK)
        self.assertEqual(data['getUser']['company']['name'], 'Acme')
        self.assertEqual(data['getUser']['companyOrOrganization'], 'c1')
        self.assertNotIn('password', data['getUser']['company'])

    @mock.patch(f'{profile.__name__}.current_service')
    def test_get_company_missing(self, mock_service):
        """A company that cannot be found is a 404."""
        mock_service.return_value.fetch_profile.side_effect = \
            NoSuchAccount('gone')
        with self.assertRaises(NotFound):
            profile.get_company(COMPANY)

    @mock.patch(f'{profile.__name__}.current_service')
    def test_get_all_employees_unknown_company(self, mock_service):
        """Employees of a company that does not exist are a 404."""
        mock_service.return_value.store.find_company_by_id.return_value = None
        with self.assertRaises(NotFound):
            profile.get_all_employees('nope')
        mock_service.return_value.list_employees.assert_not_called()

    @mock.patch(f'{profile.__name__}.current_service')
    def test_get_all_companies_unavailable(self, mock_service):
        """Database trouble is reported as such."""
        mock_service.return_value.list_companies.side_effect = \
            StoreUnavailable('down')
        with self.assertRaises(ServiceUnavailable):
            profile.get_all_companies()
