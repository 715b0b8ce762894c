__version__ = "0.3.0"

from .color import Color, palette
from .date import Date, months_between
from .geometry import Location, Size, Viewport
from .tree import Node, Tree, iterate
from .settings import (
    Settings,
    TreeSettings,
    TimeSeriesSettings,
    CladesSettings,
    ColoringSettings,
    TitleSettings,
    CladeArrow,
    BranchAnnotation,
    SubtreeTopBottom,
    load_settings,
    dump_settings,
)
from .colorings import Coloring, ColoringByContinent, ColoringByPosAA, make_coloring
from .drawing import TreeImage, Surface
from .parsers import (
    parse_newick,
    import_tree,
    tree_from_json,
    tree_to_json,
)
from .errors import (
    PhyloPdfError,
    InputOutputError,
    FormatUnrecognizedError,
    ParsingError,
    JsonStructureError,
    DecompressionError,
    DateFormatError,
    ColorFormatError,
    SurfaceInitError,
)
