"""Configuration files"""

from abc import abstractmethod
from typing import ClassVar, Type
import yaml
from .base import OptionRegistry, UserConfig
from .plugins import plugins


class ConfigError(Exception):
    """Configuration error"""

    def __str__(self):
        return "Configuration error: %s" % self.args


class Config:
    """A configuration subtree"""

    @classmethod
    @abstractmethod
    def parse(cls, config):
        """Parse configuration"""

    @classmethod
    def load(cls, filename):
        """Load configuration from YAML file"""
        with open(filename, 'r') as f:
            config = yaml.safe_load(f)
            try:
                return cls.parse(config)
            except ConfigError as e:
                raise ConfigError("In file '%s': %s" % (filename,
                                                        *e.args)) from e


class DatabaseConfig(Config):
    """A database configuration"""

    def __init__(self, plugin, params):
        self.plugin = plugin
        self.params = params

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.plugin,
                               self.params)

    @classmethod
    def parse(cls, config):
        """Parse configuration"""
        if not isinstance(config, dict):
            raise ConfigError("Expected a mapping")
        if 'plugin' not in config:
            raise ConfigError("Missing declaration 'plugin'")
        params = dict(config)
        plugin = params.pop('plugin')
        if plugin not in plugins:
            raise ConfigError("Unknown plugin '%s'" % plugin)
        return cls(plugin, params)

    @property
    def database(self):
        """Configured database"""
        return plugins[self.plugin](**self.params)


class OptionsConfig(Config):
    """A list of option declarations"""

    KEYS = {'namespace', 'name', 'dataclass', 'default'}
    """Permitted keys within an option declaration"""

    def __init__(self, options):
        self.options = options

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.options)

    @classmethod
    def parse(cls, config):
        """Parse configuration"""
        if not isinstance(config, list):
            raise ConfigError("Expected a list of options")
        options = []
        for option in config:
            for k in ('namespace', 'name'):
                if k not in option:
                    raise ConfigError("Missing option declaration '%s'" % k)
            unknown = set(option) - cls.KEYS
            if unknown:
                raise ConfigError("Unexpected option declarations: %s" %
                                  ", ".join(sorted(unknown)))
            options.append(dict(option))
        return cls(options)

    @property
    def registry(self):
        """Configured option registry"""
        registry = OptionRegistry()
        for option in self.options:
            registry.declare(**option)
        return registry


DatabaseConfigType = Type[DatabaseConfig]
OptionsConfigType = Type[OptionsConfig]


class UserConfigConfig(Config):
    """A user configuration"""

    DatabaseConfig: ClassVar[DatabaseConfigType] = DatabaseConfig
    OptionsConfig: ClassVar[OptionsConfigType] = OptionsConfig

    def __init__(self, db, options):
        self.db = db
        self.options = options

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.db, self.options)

    @classmethod
    def parse(cls, config):
        """Parse configuration"""
        if 'database' not in config:
            raise ConfigError("Missing section 'database'")
        try:
            db = cls.DatabaseConfig.parse(config['database'])
        except ConfigError as e:
            raise ConfigError("In section 'database': %s" % e.args) from e
        try:
            options = cls.OptionsConfig.parse(config.get('options', []))
        except ConfigError as e:
            raise ConfigError("In section 'options': %s" % e.args) from e
        return cls(db, options)

    @property
    def userconfig(self):
        """Configured user configuration"""
        registry = self.options.registry
        return UserConfig(self.db.database, registry)
