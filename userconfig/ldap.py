"""LDAP configuration database

Option values are stored as attributes of the user's own directory
entry.  The attribute name is derived from the option's namespace and
name, and the option's data class is used as an auxiliary object
class, which is added to the entry on demand.
"""

from contextlib import contextmanager
import io
import logging
import os
import pkgutil
import ldap
import ldap.dn
import ldap.filter
import ldap.modlist
import ldif
from .base import Config, Database

logger = logging.getLogger(__name__)

SCOPES = {
    'base': ldap.SCOPE_BASE,
    'one': ldap.SCOPE_ONELEVEL,
    'sub': ldap.SCOPE_SUBTREE,
}
"""Search scopes by name"""

DEBUG_ENV = 'LDAP_DEBUG'
"""Environment variable enabling search and modification traces"""


##############################################################################
#
# Base types


class LdapAttributeDict(dict):
    """An LDAP attribute dictionary"""

    def __init__(self, raw):
        # Force all keys to lower case
        super().__init__({k.lower(): v for k, v in raw.items()})


##############################################################################
#
# Exceptions


class LdapError(Exception):
    """LDAP configuration database error"""


class LdapConnectionError(LdapError, ConnectionError):
    """Unable to connect or bind to LDAP server"""

    def __str__(self):
        return "Connection error: %s" % self.args


class LdapQueryError(LdapError):
    """LDAP search failed"""

    def __str__(self):
        return "Query error: %s" % self.args


class LdapCommitError(LdapError):
    """LDAP add or modify operation failed"""

    def __str__(self):
        return "Commit error: %s" % self.args


def describe(exc):
    """Describe an LDAP exception using the server's diagnostic text"""
    info = exc.args[0] if exc.args else None
    if not isinstance(info, dict):
        return str(exc)
    text = [str(info[k]).strip() for k in ('desc', 'info') if info.get(k)]
    return ": ".join(text) if text else str(exc)


##############################################################################
#
# Naming strategies


def default_ns2attribute(namespace, name, context=None):
    """Construct attribute name from option namespace and name

    Namespace separators are replaced by underscores, and the option
    name is appended with a further underscore, so that option
    ``baz`` within namespace ``Foo::Bar`` is stored as ``Foo_Bar_baz``.
    """
    # pylint: disable=unused-argument
    return '%s_%s' % (namespace.replace('::', '_'), name)


def encode(value):
    """Encode option value as a list of raw attribute values

    A value of ``None`` encodes as an empty list, which removes the
    attribute from the entry.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [x for v in value for x in encode(v)]
    if isinstance(value, bytes):
        return [value]
    return [str(value).encode()]


def decode(value):
    """Decode raw attribute value

    Values that are not valid UTF-8 are returned as raw bytes.
    """
    try:
        return value.decode()
    except UnicodeDecodeError:
        return value


def resolve(obj):
    """Resolve a callable optionally named as ``package.module:name``"""
    if isinstance(obj, str):
        obj = pkgutil.resolve_name(obj)
    if obj is not None and not callable(obj):
        raise ValueError("Not callable: %r" % obj)
    return obj


##############################################################################
#
# LDAP database


class LdapConfig(Config):
    """LDAP configuration database configuration"""

    def __init__(self, host=None, rootdn=None, scope='sub', userattr='uid',
                 binddn=None, bindpwd=None, default_objectclass='posixAccount',
                 connection_factory=None, ns2attribute=None, searchstr=None,
                 **kwargs):
        # pylint: disable=too-many-arguments
        super().__init__(**kwargs)
        if scope not in SCOPES:
            raise ValueError("Invalid scope %r (must be one of %s)" %
                             (scope, ", ".join(SCOPES)))
        self.connection_factory = resolve(connection_factory)
        if self.connection_factory is None:
            if not host:
                raise ValueError("Missing LDAP host")
            if rootdn is None:
                raise ValueError("Missing LDAP root DN")
        self.host = host
        self.rootdn = rootdn if rootdn is not None else ''
        self.scope = scope
        self.userattr = userattr
        self.binddn = binddn
        self.bindpwd = bindpwd
        self.default_objectclass = default_objectclass
        self.ns2attribute = (resolve(ns2attribute) or
                             default_ns2attribute)
        self.searchstr = resolve(searchstr) or self.default_searchstr

    def default_searchstr(self, namespace, name, user, context=None):
        """Search filter for the user's entry"""
        # pylint: disable=unused-argument
        return '(%s=%s)' % (self.userattr,
                            ldap.filter.escape_filter_chars(user))

    def userdn(self, user):
        """Distinguished name of a newly created user entry"""
        rdn = '%s=%s' % (self.userattr, ldap.dn.escape_dn_chars(user))
        return ','.join(x for x in (rdn, self.rootdn) if x)


class LdapDatabase(Database):
    """An LDAP configuration database"""

    Config = LdapConfig

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.config.rootdn)

    @property
    def trace(self):
        """Detailed tracing is enabled"""
        return bool(os.environ.get(DEBUG_ENV))

    def attribute(self, namespace, name, context=None):
        """Attribute name for a configuration option"""
        return self.config.ns2attribute(namespace, name, context)

    def search_filter(self, namespace, name, user, context=None):
        """Search filter locating a user's entry"""
        return self.config.searchstr(namespace, name, user, context)

    def connect(self, user, write=False, context=None):
        """Obtain a bound connection

        A configured connection factory is trusted to return a
        connection bound with privileges appropriate to ``write``.
        Otherwise, a new connection is opened and bound anonymously
        for reading, or as the DN constructed from the bind DN
        template for writing.
        """
        config = self.config
        conn = None
        try:
            if config.connection_factory is not None:
                return config.connection_factory(user, write, context)
            conn = ldap.initialize(config.host)
            conn.protocol_version = ldap.VERSION3
            if write and config.binddn:
                who = config.binddn % ldap.dn.escape_dn_chars(user)
                logger.debug("Binding to %s as %s", config.host, who)
                conn.simple_bind_s(who, config.bindpwd or '')
            else:
                logger.debug("Binding anonymously to %s", config.host)
                conn.simple_bind_s()
        except ldap.LDAPError as e:
            if conn is not None:
                self.disconnect(conn)
            raise LdapConnectionError(describe(e)) from e
        return conn

    @staticmethod
    def disconnect(conn):
        """Unbind a self-built connection"""
        try:
            conn.unbind_s()
        except ldap.LDAPError as e:
            logger.debug("Unbind failed: %s", describe(e))

    @contextmanager
    def connection(self, user, write=False, context=None):
        """Bound connection for the duration of a single operation"""
        conn = self.connect(user, write, context)
        if self.config.connection_factory is not None:
            # Connection lifetime is controlled by the factory
            yield conn
            return
        try:
            yield conn
        finally:
            self.disconnect(conn)

    def search(self, conn, namespace, name, user, context, attrs):
        """Search for the user's entry"""
        config = self.config
        search = self.search_filter(namespace, name, user, context)
        logger.debug("Searching for %s", search)
        if self.trace:
            logger.info("search:\n\tdn: %s\n\tscope: %s\n\tattrs: %s\n\t"
                        "search: %s", config.rootdn, config.scope,
                        ", ".join(attrs), search)
        try:
            res = conn.search_s(config.rootdn, SCOPES[config.scope], search,
                                attrs)
        except ldap.NO_SUCH_OBJECT:
            res = []
        except ldap.LDAPError as e:
            raise LdapQueryError(describe(e)) from e
        res = [(dn, data) for dn, data in res if dn is not None]
        if self.trace:
            with io.StringIO() as fh:
                writer = ldif.LDIFWriter(fh)
                for dn, data in res:
                    writer.unparse(dn, data)
                logger.info("%s", fh.getvalue())
        return [(dn, LdapAttributeDict(data)) for dn, data in res]

    def get(self, namespace, user, name, context=None):
        """Get stored values of a configuration option"""
        attr = self.attribute(namespace, name, context)
        with self.connection(user, False, context) as conn:
            entries = self.search(conn, namespace, name, user, context,
                                  [attr])
        return [decode(value) for dn, attrs in entries
                for value in attrs.get(attr.lower(), ())]

    def set(self, namespace, user, name, context, value):
        """Store value of a configuration option"""
        # pylint: disable=too-many-arguments
        config = self.config
        attr = self.attribute(namespace, name, context)
        values = encode(value)
        dataclass = self.registry.dataclass(namespace, name)
        with self.connection(user, True, context) as conn:
            entries = self.search(conn, namespace, name, user, context,
                                  ['objectClass'])
            if entries:
                dn, attrs = entries[0]
                present = {x.decode().lower()
                           for x in attrs.get('objectclass', ())}
                modlist = [(ldap.MOD_REPLACE, attr, values)]
                if dataclass.lower() not in present:
                    modlist.insert(0, (ldap.MOD_ADD, 'objectClass',
                                       [dataclass.encode()]))
                self.trace_set(dn, 'modify', attr, value, modlist)
                try:
                    conn.modify_s(dn, modlist)
                except ldap.LDAPError as e:
                    raise LdapCommitError(describe(e)) from e
            else:
                dn = config.userdn(user)
                objectclass = [config.default_objectclass]
                if dataclass.lower() != config.default_objectclass.lower():
                    objectclass.append(dataclass)
                entry = {
                    'objectClass': [x.encode() for x in objectclass],
                    config.userattr: [user.encode()],
                    attr: values,
                }
                self.trace_set(dn, 'add', attr, value, entry['objectClass'])
                try:
                    conn.add_s(dn, ldap.modlist.addModlist(entry))
                except ldap.LDAPError as e:
                    raise LdapCommitError(describe(e)) from e
        logger.debug("Stored %s for %s", attr, dn)

    def trace_set(self, dn, cmd, attr, value, changes):
        """Trace an entry modification"""
        # pylint: disable=too-many-arguments
        if self.trace:
            logger.info("set:\n\tdn: %s\n\tcmd: %s\n\tch: %r\n\t%s: %r",
                        dn, cmd, changes, attr, value)
