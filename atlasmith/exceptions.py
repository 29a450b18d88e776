"""Custom exceptions for atlas packing and building"""


class AtlasError(Exception):
    """Base exception for atlasmith errors"""
    pass


class PackError(AtlasError):
    """Packing did not place every sprite

    Attributes:
        failures: List of SpriteFailure entries, one per offending sprite
    """

    def __init__(self, message, failures=None):
        super().__init__(message)
        self.failures = list(failures or [])


class InvalidCatalogError(PackError):
    """Catalog rejected before placement (duplicate ids, bad sizes, oversized sprites)"""
    pass


class PackFailedError(PackError):
    """Some sprites fit on no page; carries the partial layout for inspection"""

    def __init__(self, message, layout):
        super().__init__(message, layout.failures)
        self.layout = layout


class SourceError(AtlasError):
    """Sprite source could not be loaded (bad file, unknown format, missing page)"""
    pass


class SerializationError(AtlasError):
    """Layout document could not be encoded or decoded"""
    pass
