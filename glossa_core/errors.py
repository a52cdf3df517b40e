"""
Exception types for glossa.

The annotation engine itself never raises into the page: lookup misses,
pattern non-matches and missing structural anchors are normal outcomes.
These exceptions only surface while bootstrapping (loading dictionaries,
attaching to a browser page).
"""


class GlossaError(Exception):
    """Base class for glossa errors"""
    pass


class DictionaryError(GlossaError):
    """Dictionary manifest or source file is missing or malformed"""
    pass


class BridgeError(GlossaError):
    """The in-page bridge could not be installed or answered unexpectedly"""
    pass
