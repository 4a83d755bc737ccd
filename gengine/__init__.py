"""Game engine core: cvars, command console, statistics, culling, scene, systems and input."""

__version__ = "0.1.0"