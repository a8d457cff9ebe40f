"""Plugin registration"""

from importlib.metadata import entry_points

__all__ = [
    'plugins',
]

plugins = {ep.name: ep.load() for ep in entry_points(group=__name__)}
