class ImgineError(Exception):
    """Base class for every error raised by imgine."""
    pass


class UnknownColorspaceError(ImgineError, KeyError):
    """Raised when a colorspace name does not resolve to a Colorspace."""
    pass


class UnsupportedColorspaceError(ImgineError, ValueError):
    """Raised when an operation has no meaning in the requested colorspace."""
    pass


class NoRouteError(ImgineError, LookupError):
    """Raised when the route table has no conversion for a colorspace pair."""
    pass


class UnsupportedChannelCountError(ImgineError, ValueError):
    """Raised when an image has a channel count the operation cannot handle."""
    pass


class DegenerateStatisticsError(ImgineError, ValueError):
    """Raised for zero-area or zero-variance regions."""
    pass


class RoiOutOfBoundsError(ImgineError, ValueError):
    """Raised when a ROI reaches outside its image."""
    pass


class CanvasNotFoundError(ImgineError, KeyError):
    """Raised when a workspace has no canvas under the given name."""
    pass


class ImageLoadError(ImgineError, OSError):
    """Raised when an image file cannot be read."""
    pass
