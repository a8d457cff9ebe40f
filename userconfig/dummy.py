"""In-memory configuration database"""

from collections import defaultdict
from .base import Config, Database


class DictConfig(Config):
    """In-memory configuration database configuration"""


class DictDatabase(Database):
    """An in-memory configuration database

    Values are held in a dictionary keyed by user, namespace and
    option name.  Nothing survives the lifetime of the database
    object, which makes this mainly useful for testing.
    """

    Config = DictConfig

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.data = defaultdict(dict)

    def __repr__(self):
        return "%s(%d users)" % (self.__class__.__name__, len(self.data))

    def get(self, namespace, user, name, context=None):
        """Get stored values of a configuration option"""
        value = self.data[user].get((namespace, name))
        if value is None:
            return []
        return list(value) if isinstance(value, (list, tuple)) else [value]

    def set(self, namespace, user, name, context, value):
        """Store value of a configuration option"""
        self.data[user][(namespace, name)] = value
