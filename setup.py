"""Install the friendnet services."""

from setuptools import setup, find_packages

setup(
    name='friendnet',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    install_requires=[
        "flask",
        "werkzeug",
        "sqlalchemy",
        "flask-sqlalchemy",
        "pyjwt",
        "pytz",
        "requests",
        "click"
    ],
    extras_require={
        'test': ['pytest']
    },
    entry_points={
        'console_scripts': ['friendnet=friendnet.cli:cli']
    },
    zip_safe=False
)
