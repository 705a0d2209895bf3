"""Install the identity service."""

from setuptools import setup, find_packages

setup(
    name='identity-service',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "werkzeug",
        "sqlalchemy>=1.4",
        "pyjwt>=2",
        "pytz",
        "WTForms[email]",
        "python-json-logger"
    ],
    extras_require={
        'test': ['pytest']
    },
    zip_safe=False
)
