#!/usr/bin/env python3

"""Setup script"""

from setuptools import setup, find_packages

setup(
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['test']),
    package_data={'userconfig.test': ['*.json']},
    use_scm_version={
        'fallback_version': '0.1.0',
    },
    setup_requires=[
        'setuptools_scm',
    ],
    install_requires=[
        'python-ldap',
        'pyyaml',
    ],
    extras_require={
        'test': [
            'python-ldap-faker',
        ],
    },
    entry_points={
        'userconfig.plugins': [
            'ldap=userconfig.ldap:LdapDatabase',
            'dict=userconfig.dummy:DictDatabase',
        ],
    },
    test_suite='test',
)
