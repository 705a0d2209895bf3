"""Tests for :mod:`identity.services.store`."""

from unittest import TestCase, mock

from sqlalchemy.exc import OperationalError

from ....exceptions import AlreadyExists, NoSuchAccount, StoreUnavailable
from ....tests.util import temporary_store
from ... import store as store_module
from .. import AccountStore


class SetUpStoreMixin(object):
    """Mixin that provides a store with one company and one user."""

    def setUp(self):
        """Create the store and some records."""
        self._ctx = temporary_store()
        self.store = self._ctx.__enter__()
        self.company = self.store.create_company(
            email='co@example.com', name='Co', password='cohash'
        )
        self.user = self.store.create_user(
            email='first@last.iv', name='First', password='userhash',
            username='foouser', age=30, company_id=self.company.account_id
        )

    def tearDown(self):
        """Throw the store away."""
        self._ctx.__exit__(None, None, None)


class TestCreate(SetUpStoreMixin, TestCase):
    """Creating records assigns identifiers and timestamps."""

    def test_user_created(self):
        """The new user has an id, timestamps, and the default picture."""
        self.assertTrue(self.user.account_id)
        self.assertIsNotNone(self.user.created)
        self.assertIsNotNone(self.user.updated)
        self.assertEqual(self.user.picture, 'cat')
        self.assertEqual(self.user.password, 'userhash')

    def test_duplicate_user_email(self):
        """E-mail addresses are unique among users."""
        with self.assertRaises(AlreadyExists):
            self.store.create_user(email='first@last.iv', name='Other',
                                   password='x', username='otheruser')

    def test_duplicate_username(self):
        """Usernames are unique among users."""
        with self.assertRaises(AlreadyExists):
            self.store.create_user(email='other@last.iv', name='Other',
                                   password='x', username='foouser')

    def test_duplicate_company_email(self):
        """E-mail addresses are unique among companies."""
        with self.assertRaises(AlreadyExists):
            self.store.create_company(email='co@example.com', name='Co2',
                                      password='x')

    def test_email_shared_across_kinds(self):
        """A user and a company may share an e-mail address."""
        company = self.store.create_company(email='first@last.iv',
                                            name='Also first', password='x')
        self.assertEqual(company.email, self.user.email)


class TestFind(SetUpStoreMixin, TestCase):
    """Lookups return records or ``None``."""

    def test_find_user(self):
        """Users can be found by e-mail, username, and id."""
        self.assertEqual(self.store.find_user_by_email('first@last.iv'),
                         self.user)
        self.assertEqual(self.store.find_user_by_username('foouser'),
                         self.user)
        self.assertEqual(self.store.find_user_by_id(self.user.account_id),
                         self.user)

    def test_find_user_with_company(self):
        """The company is resolved when asked for."""
        user = self.store.find_user_by_email('first@last.iv',
                                             with_company=True)
        self.assertEqual(user.company, self.company)
        self.assertIsNone(self.store.find_user_by_email('first@last.iv')
                          .company)

    def test_not_found(self):
        """Missing records are ``None``, not errors."""
        self.assertIsNone(self.store.find_user_by_email('no@body.com'))
        self.assertIsNone(self.store.find_user_by_username('nobody'))
        self.assertIsNone(self.store.find_user_by_id('nope'))
        self.assertIsNone(self.store.find_company_by_email('no@body.com'))
        self.assertIsNone(self.store.find_company_by_id('nope'))

    def test_find_company(self):
        """Companies can be found by e-mail and id."""
        self.assertEqual(self.store.find_company_by_email('co@example.com'),
                         self.company)
        self.assertEqual(
            self.store.find_company_by_id(self.company.account_id),
            self.company
        )

    def test_list_companies(self):
        """All companies are listed."""
        other = self.store.create_company(email='b@example.com', name='B',
                                          password='x')
        self.assertEqual(self.store.list_companies(), [self.company, other])

    def test_list_users_by_company(self):
        """Only users of the company are listed."""
        other = self.store.create_company(email='b@example.com', name='B',
                                          password='x')
        self.store.create_user(email='b@user.com', name='B', password='x',
                               username='buser', company_id=other.account_id)
        users = self.store.list_users_by_company(self.company.account_id)
        self.assertEqual([u.account_id for u in users],
                         [self.user.account_id])
        self.assertEqual(users[0].company, self.company)
        self.assertEqual(self.store.list_users_by_company('nope'), [])


class TestSave(SetUpStoreMixin, TestCase):
    """Saving an existing record writes all of its fields."""

    def test_save_user(self):
        """Changes to a user are persisted."""
        saved = self.store.save_user(
            self.user._replace(name='Changed', age=31, bio='Hi')
        )
        self.assertEqual(saved.name, 'Changed')
        reloaded = self.store.find_user_by_id(self.user.account_id)
        self.assertEqual(reloaded.name, 'Changed')
        self.assertEqual(reloaded.age, 31)
        self.assertEqual(reloaded.bio, 'Hi')
        self.assertEqual(reloaded.username, 'foouser')

    def test_save_company(self):
        """Changes to a company are persisted."""
        self.store.save_company(self.company._replace(bio='We make things'))
        reloaded = self.store.find_company_by_id(self.company.account_id)
        self.assertEqual(reloaded.bio, 'We make things')

    def test_save_missing(self):
        """Saving a record that does not exist is an error."""
        with self.assertRaises(NoSuchAccount):
            self.store.save_user(self.user._replace(account_id='nope'))
        with self.assertRaises(NoSuchAccount):
            self.store.save_company(self.company._replace(account_id='nope'))

    def test_save_conflict(self):
        """A save that violates uniqueness changes nothing."""
        other = self.store.create_user(email='b@user.com', name='B',
                                       password='x', username='buser')
        with self.assertRaises(AlreadyExists):
            self.store.save_user(other._replace(name='Bee',
                                                username='foouser'))
        self.assertEqual(self.store.find_user_by_id(other.account_id).name,
                         'B')


class TestUnavailable(TestCase):
    """I/O failures become :class:`.StoreUnavailable`."""

    def test_operational_error(self):
        """The database cannot be reached."""
        store = AccountStore('sqlite://')
        store.create_all()
        error = OperationalError('SELECT 1', {}, Exception('gone'))
        with mock.patch.object(store, '_sessions') as mock_sessions:
            session = mock_sessions.return_value
            session.query.side_effect = error
            with self.assertRaises(StoreUnavailable):
                store.find_user_by_email('first@last.iv')
            session.rollback.assert_called_once()
            session.close.assert_called_once()

    def test_in_memory(self):
        """The in-memory database is shared by every session."""
        store = AccountStore('sqlite://')
        store.create_all()
        store.create_company(email='co@example.com', name='Co', password='x')
        self.assertIsNotNone(store.find_company_by_email('co@example.com'))


class TestAppIntegration(TestCase):
    """The store can be attached to a Flask application."""

    def test_init_app(self):
        """The store is available in the application context."""
        from flask import Flask
        app = Flask('test')
        app.config['DATABASE_URI'] = 'sqlite://'
        store_module.init_app(app)
        with app.app_context():
            self.assertIsInstance(store_module.current_store(), AccountStore)
