"""Per-user configuration stored in an LDAP directory"""

from .base import Option, OptionRegistry, Database, UserConfig
from .ldap import (LdapConfig, LdapDatabase, LdapError, LdapConnectionError,
                   LdapQueryError, LdapCommitError)

__all__ = [
    'Option',
    'OptionRegistry',
    'Database',
    'UserConfig',
    'LdapConfig',
    'LdapDatabase',
    'LdapError',
    'LdapConnectionError',
    'LdapQueryError',
    'LdapCommitError',
]
