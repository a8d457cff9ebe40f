"""Unit test common functionality"""

import os.path
import unittest
import ldap
from ldap_faker.unittest import LDAPFakerMixin
from ..base import OptionRegistry
from ..ldap import LdapDatabase

FIXTURE = os.path.join(os.path.dirname(__file__), 'directory.json')


class LdapTestCase(LDAPFakerMixin, unittest.TestCase):
    """LDAP configuration database test case base class

    The directory is faked by ``python-ldap-faker`` and loaded from
    ``directory.json``, which contains an administrator and two
    users: ``bob`` (with no stored options) and ``carol`` (with
    options already stored under the ``userPrefs`` data class).
    """

    ldap_modules = ['userconfig.ldap']
    ldap_fixtures = FIXTURE

    host = 'ldap://ldap.example.com'
    rootdn = 'ou=people,dc=example,dc=com'
    binddn = 'uid=%s,ou=people,dc=example,dc=com'
    bindpwd = 'secret'

    admin = 'cn=admin,dc=example,dc=com'
    adminpwd = 'adminpw'

    def setUp(self):
        super().setUp()
        self.registry = OptionRegistry()
        self.registry.declare('Prefs', 'colour', dataclass='userPrefs',
                              default='red')
        self.registry.declare('Prefs', 'languages', dataclass='userPrefs')
        self.registry.declare('Ns', 'opt', dataclass='nsPrefs')
        self.db = self.ldap_database()

    def ldap_database(self, **kwargs):
        """Construct LDAP configuration database"""
        params = {
            'host': self.host,
            'rootdn': self.rootdn,
            'binddn': self.binddn,
            'bindpwd': self.bindpwd,
        }
        params.update(kwargs)
        return LdapDatabase(registry=self.registry, **params)

    def admin_connection(self, user, write, context):
        """Connection factory binding as the directory administrator"""
        # pylint: disable=unused-argument
        conn = ldap.initialize(self.host)
        if write:
            conn.simple_bind_s(self.admin, self.adminpwd)
        return conn

    @property
    def store(self):
        """Fake directory contents"""
        return self.fake_ldap.stores[self.host]

    def directory_entry(self, dn):
        """Get raw directory entry"""
        return self.store.get(dn)

    def calls(self, api_name, conn=None):
        """Get recorded calls to an LDAP connection method"""
        if conn is None:
            conn = self.last_connection()
        return conn.calls.filter_calls(api_name)

    def assertObjectClasses(self, dn, expected):
        """Assert that entry object classes are correct"""
        entry = self.directory_entry(dn)
        self.assertEqual({x.decode().lower() for x in entry['objectClass']},
                         {x.lower() for x in expected})
