from .base import Surface, DEFAULT_CANVAS_SIZE
from .tree_part import TreePart
from .time_series import TimeSeries
from .clades import Clades, clade_extents
from .image import TreeImage
