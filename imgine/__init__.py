__version__ = "0.3.0"

from .exceptions import (
    ImgineError, UnknownColorspaceError, UnsupportedColorspaceError, NoRouteError,
    UnsupportedChannelCountError, DegenerateStatisticsError, RoiOutOfBoundsError,
    CanvasNotFoundError, ImageLoadError,
)
from .models.colorspace import Colorspace
from .models.image import Image
from .models.roi import Roi
from .pipeline.procedures import (
    convert_colorspace, region_statistics, color_transfer,
    grayscale, equalize_histogram, render_histogram,
)
from .services.workspace_service import Workspace
