"""
Exception types raised by Jiefen.

Only loading raises. Segmentation itself resolves every lookup miss
through default values and never raises.
"""


class JiefenError(Exception):
    """Base class for all Jiefen errors."""


class DictionaryLoadError(JiefenError):
    """The main dictionary is missing, unreadable, or empty."""


class ModelLoadError(JiefenError):
    """An HMM parameter table is missing or malformed."""


class CacheError(JiefenError):
    """The compiled dictionary cache could not be read."""
