"""Unit test common functionality"""

from .common import LdapTestCase

__all__ = [
    'LdapTestCase',
]
