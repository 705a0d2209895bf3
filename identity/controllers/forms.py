"""Input forms for account operations."""

from wtforms import Form, IntegerField, PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, NumberRange, \
    Regexp, optional

PASSWORD_PATTERN = r'((?=.*\d)|(?=.*\W+))(?![.\n])(?=.*[A-Z])(?=.*[a-z]).*$'
PASSWORD_SEARCH = r'^.*?(?:' + PASSWORD_PATTERN + ')'
"""Finds the pattern anywhere, since :class:`.Regexp` only matches at 0."""

PASSWORD_MESSAGE = ('The password must be between 8 and 32, with uppercase,'
                    ' lowercase, and special characters!')


def _password_validators() -> list:
    return [DataRequired(), Length(min=8, max=32),
            Regexp(PASSWORD_SEARCH, message=PASSWORD_MESSAGE)]


class CreateUserForm(Form):
    """Fields accepted by ``createUser``."""

    name = StringField('Name', validators=[DataRequired(), Length(min=1)])
    email = StringField('Email address', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=_password_validators())
    username = StringField('Username',
                           validators=[DataRequired(), Length(min=4, max=16)])
    age = IntegerField('Age', validators=[optional(), NumberRange(min=0)])


class CreateCompanyForm(Form):
    """Fields accepted by ``createCompany``."""

    name = StringField('Name', validators=[DataRequired(), Length(min=1)])
    email = StringField('Email address', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=_password_validators())


class LoginForm(Form):
    """Fields accepted by ``login``."""

    email = StringField('Email address', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])


class UpdateProfileForm(Form):
    """
    Fields accepted by ``updateUser``.

    Everything is optional; blank fields are left alone. ``age`` is kept as
    text here and parsed by the service.
    """

    name = StringField('Name', validators=[optional()])
    email = StringField('Email address', validators=[optional(), Email()])
    age = StringField('Age', validators=[optional()])
    username = StringField('Username',
                           validators=[optional(), Length(min=4, max=16)])
    bio = StringField('Bio', validators=[optional()])
