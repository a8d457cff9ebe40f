"""User configuration database"""

from __future__ import annotations

from abc import abstractmethod
from collections import abc
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple


DEFAULT_DATACLASS = 'extensibleObject'
"""Data class used for options which do not declare one"""


##############################################################################
#
# Options


@dataclass
class Option:
    """A declared configuration option"""

    namespace: str
    name: str
    dataclass: Optional[str] = None
    default: Any = None

    @property
    def key(self) -> Tuple[str, str]:
        """Registry lookup key"""
        return (self.namespace, self.name)


class OptionRegistry(abc.Mapping):
    """A registry of declared configuration options"""

    def __init__(self) -> None:
        self.options: Dict[Tuple[str, str], Option] = {}

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, list(self.options))

    def __getitem__(self, key: Tuple[str, str]) -> Option:
        return self.options[key]

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)

    def declare(self, namespace: str, name: str, **kwargs: Any) -> Option:
        """Declare configuration option"""
        option = Option(namespace, name, **kwargs)
        self.options[option.key] = option
        return option

    def option(self, namespace: str, name: str) -> Optional[Option]:
        """Look up configuration option"""
        return self.options.get((namespace, name))

    def dataclass(self, namespace: str, name: str) -> str:
        """Look up data class of a configuration option

        Options which are unknown or which do not declare a data class
        fall back to :data:`DEFAULT_DATACLASS`.
        """
        option = self.option(namespace, name)
        if option is None or not option.dataclass:
            return DEFAULT_DATACLASS
        return option.dataclass


##############################################################################
#
# Configuration database


class Config:
    """A configuration database configuration"""

    def __init__(self, **kwargs: Any) -> None:
        if kwargs:
            raise ValueError("Unexpected arguments: %s" % ", ".join(kwargs))


class Database:
    """A configuration database

    A configuration database stores the values of configuration
    options on behalf of individual users.  Values are always
    returned as a list, since a stored option may hold several
    values.
    """

    Config: type = Config
    """Configuration class for this database"""

    config: Config
    """Configuration for this database"""

    registry: OptionRegistry
    """Declared configuration options"""

    def __init__(self, registry: Optional[OptionRegistry] = None,
                 **kwargs: Any) -> None:
        self.config = self.Config(**kwargs)
        self.registry = registry if registry is not None else OptionRegistry()

    @abstractmethod
    def get(self, namespace: str, user: str, name: str,
            context: Any = None) -> List[Any]:
        """Get stored values of a configuration option"""

    @abstractmethod
    def set(self, namespace: str, user: str, name: str, context: Any,
            value: Any) -> None:
        """Store value of a configuration option"""

    def get_value(self, namespace: str, user: str, name: str,
                  context: Any = None) -> Any:
        """Get first stored value of a configuration option"""
        values = self.get(namespace, user, name, context)
        return values[0] if values else None


##############################################################################
#
# User configuration


class UserConfig:
    """Per-user configuration

    This ties together a set of declared options and the database
    used to hold their values.  Options with no stored value fall
    back to their declared default.
    """

    def __init__(self, db: Database,
                 registry: Optional[OptionRegistry] = None) -> None:
        self.db = db
        self.registry = registry if registry is not None else db.registry
        self.db.registry = self.registry

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self.db)

    def declare(self, namespace: str, name: str, **kwargs: Any) -> Option:
        """Declare configuration option"""
        return self.registry.declare(namespace, name, **kwargs)

    def getall(self, namespace: str, user: str, name: str,
               context: Any = None) -> List[Any]:
        """Get all values of a configuration option"""
        values = self.db.get(namespace, user, name, context)
        if values:
            return values
        option = self.registry.option(namespace, name)
        if option is None or option.default is None:
            return []
        default = option.default
        return list(default) if isinstance(default, (list, tuple)) else [default]

    def get(self, namespace: str, user: str, name: str,
            context: Any = None) -> Any:
        """Get value of a configuration option"""
        values = self.getall(namespace, user, name, context)
        return values[0] if values else None

    def set(self, namespace: str, user: str, name: str, value: Any,
            context: Any = None) -> None:
        """Set value of a configuration option"""
        self.db.set(namespace, user, name, context, value)
