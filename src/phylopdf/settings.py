"""
Layout settings and their JSON codec.

Settings are plain dataclasses. They are loaded in two stages: the JSON text is
parsed into a dict, then applied field by field onto an existing (default)
settings object. Numbers are applied only when non-negative and strings or
dates only when non-empty, so that a settings file can say "keep the default"
with ``-1`` or ``""``. Colours and booleans are always applied.

The layout writes the values it computes (label scale, horizontal step, date
range, clade slots) back into the same objects, so dumping after drawing gives
settings that reproduce the image.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from .color import Color
from .date import Date
from .errors import InputOutputError, JsonStructureError


@dataclass
class CladeArrow:
    """Arrow marking the extent of one clade.

    ``begin``/``end``/``slot`` equal to -1 mean "not set" in overrides.
    """

    begin: int = -1
    end: int = -1
    label: str = ""
    id: str = ""
    slot: int = -1
    label_position: str = "middle"  # "middle", "top", "bottom"
    label_position_offset: float = 0.0
    label_rotation: float = 0.0
    label_offset: float = 3.0
    show: bool = True

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CladeArrow":
        _expect_object(data, "per_clade entry")
        arrow = cls()
        arrow.id = str(data.get("id", data.get("_id", "")))
        arrow.label = str(data.get("label", ""))
        arrow.begin = int(data.get("begin", -1))
        arrow.end = int(data.get("end", -1))
        arrow.slot = int(data.get("slot", -1))
        arrow.label_position = str(data.get("label_position", ""))
        arrow.label_position_offset = float(data.get("label_position_offset", 0.0))
        arrow.label_rotation = float(data.get("label_rotation", 0.0))
        arrow.label_offset = float(data.get("label_offset", 3.0))
        arrow.show = bool(data.get("show", True))
        return arrow

    def to_json(self) -> Dict[str, Any]:
        return _dump(self)


@dataclass
class BranchAnnotation:
    """Per-branch display overrides keyed by branch id.

    Negative ``label_size``/``line_interleave`` fall back to the tree defaults.
    A positive ``line_length`` draws a connector from the branch midpoint down
    to the label.
    """

    id: str = ""
    label: str = ""
    show: bool = True
    color: Color = field(default_factory=lambda: Color(0x000000))
    label_size: float = -1.0
    line_interleave: float = -1.0
    label_offset_x: float = 0.0
    label_offset_y: float = 0.0
    line_length: float = 0.0
    line_color: Color = field(default_factory=lambda: Color(0x000000))
    line_width: float = 0.2

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "BranchAnnotation":
        _expect_object(data, "per_branch entry")
        annotation = cls()
        annotation.id = str(data.get("id", ""))
        annotation.label = str(data.get("label", ""))
        annotation.show = bool(data.get("show", True))
        if "color" in data:
            annotation.color = _as_color(data["color"])
        annotation.label_size = float(data.get("label_size", -1.0))
        annotation.line_interleave = float(data.get("line_interleave", -1.0))
        annotation.label_offset_x = float(data.get("label_offset_x", 0.0))
        annotation.label_offset_y = float(data.get("label_offset_y", 0.0))
        annotation.line_length = float(data.get("line_length", 0.0))
        if "line_color" in data:
            annotation.line_color = _as_color(data["line_color"])
        annotation.line_width = float(data.get("line_width", 0.2))
        return annotation

    def to_json(self) -> Dict[str, Any]:
        return _dump(self)


@dataclass
class SubtreeTopBottom:
    """Horizontal guides across the time series at the first and last leaf of a branch."""

    branch_id: str = ""
    color: Color = field(default_factory=lambda: Color(0x808080))
    line_width: float = 0.2
    show: bool = True

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SubtreeTopBottom":
        _expect_object(data, "subtree_top_bottom entry")
        item = cls()
        item.branch_id = str(data.get("branch_id", ""))
        if "color" in data:
            item.color = _as_color(data["color"])
        item.line_width = float(data.get("line_width", 0.2))
        item.show = bool(data.get("show", True))
        return item

    def to_json(self) -> Dict[str, Any]:
        return _dump(self)


@dataclass
class TreeSettings:
    horizontal_step: float = 5.0
    line_width: float = 0.2
    label_scale: float = 1.0
    line_color: Color = field(default_factory=lambda: Color(0x000000))
    name_offset: float = 0.2
    root_edge: float = 0.0
    origin_x: float = -1.0
    number_strains_threshold: int = 20
    show_branch_ids: bool = False
    branch_annotation_size: float = 4.0
    branch_annotation_color: Color = field(default_factory=lambda: Color(0x000000))
    line_interleave: float = 1.2
    branch_id_size: float = 3.0
    branch_id_color: Color = field(default_factory=lambda: Color(0x808080))
    per_branch: List[BranchAnnotation] = field(default_factory=list)


@dataclass
class TimeSeriesSettings:
    show: bool = True
    begin: Date = field(default_factory=Date)
    end: Date = field(default_factory=Date)
    month_width: float = 10.0
    dash_width: float = 0.5  # relative to month_width
    dash_line_width: float = 1.0
    month_label_scale: float = 0.9
    max_number_of_months: int = 20
    month_separator_color: Color = field(default_factory=lambda: Color(0x000000))
    month_separator_width: float = 0.1
    origin_x: float = -1.0
    show_subtree_top_bottom: bool = False
    subtree_top_bottom: List[SubtreeTopBottom] = field(default_factory=list)


@dataclass
class CladesSettings:
    show: bool = False
    slot_width: float = 5.0
    line_width: float = 1.0
    arrow_width: float = 3.0
    arrow_color: Color = field(default_factory=lambda: Color(0x000000))
    arrow_extra: float = 0.5  # fraction of vertical step
    label_color: Color = field(default_factory=lambda: Color(0x000000))
    label_size: float = 10.0
    separator_color: Color = field(default_factory=lambda: Color(0x808080))
    separator_width: float = 0.2
    separator_in_tree: bool = True
    separator_in_time_series: bool = True
    origin_x: float = -1.0
    per_clade: List[CladeArrow] = field(default_factory=list)


@dataclass
class LegendSettings:
    show: bool = True
    offset_x: float = 10.0
    offset_y: float = 0.0
    label_size: float = 8.0
    line_interleave: float = 1.2


@dataclass
class ColoringSettings:
    coloring: str = "black"  # "black", "continent", "pos"
    pos: str = ""
    legend: LegendSettings = field(default_factory=LegendSettings)


@dataclass
class TitleSettings:
    show: bool = False
    text: str = ""
    offset_x: float = 0.0
    offset_y: float = 0.0
    size: float = 12.0
    color: Color = field(default_factory=lambda: Color(0x000000))


@dataclass
class Settings:
    border: float = 0.1  # relative to the canvas size
    space_tree_ts: float = 5.0
    space_ts_clades: float = 5.0
    tree: TreeSettings = field(default_factory=TreeSettings)
    time_series: TimeSeriesSettings = field(default_factory=TimeSeriesSettings)
    clades: CladesSettings = field(default_factory=CladesSettings)
    coloring: ColoringSettings = field(default_factory=ColoringSettings)
    title: TitleSettings = field(default_factory=TitleSettings)


LIST_ITEM_TYPES = {
    "per_clade": CladeArrow,
    "per_branch": BranchAnnotation,
    "subtree_top_bottom": SubtreeTopBottom,
}

COMMENTS = {
    Settings: "Layout settings, negative values and empty strings mean default",
    TreeSettings: "Tree settings, negative values mean default",
    TimeSeriesSettings: "Time series settings, negative values mean default",
    CladesSettings: "Clade marking settings, negative values mean default",
}


# ----------------------------------------------------------------------
# loading


def _expect_object(data: Any, what: str) -> None:
    if not isinstance(data, dict):
        raise JsonStructureError(f"cannot load settings: {what} is not an object: {data!r}")


def _as_color(value: Any) -> Color:
    if isinstance(value, int) and not isinstance(value, bool):
        return Color(value)
    return Color.parse(value)


def _as_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise JsonStructureError(f"cannot load settings: {key!r} must be a number, got {value!r}")
    return value


def load_into(target: Any, data: Dict[str, Any]) -> Any:
    """Apply the JSON object ``data`` onto the settings dataclass ``target``."""
    _expect_object(data, type(target).__name__)
    for f in fields(target):
        if f.name not in data:
            continue
        value = data[f.name]
        current = getattr(target, f.name)
        if f.name in LIST_ITEM_TYPES:
            if not isinstance(value, list):
                raise JsonStructureError(f"cannot load settings: {f.name!r} must be an array")
            setattr(target, f.name, [LIST_ITEM_TYPES[f.name].from_json(item) for item in value])
        elif is_dataclass(current):
            load_into(current, value)
        elif isinstance(current, bool):
            setattr(target, f.name, bool(value))
        elif isinstance(current, (int, float)):
            number = _as_number(value, f.name)
            if number >= 0:
                setattr(target, f.name, type(current)(number))
        elif isinstance(current, Color):
            setattr(target, f.name, _as_color(value))
        elif isinstance(current, Date):
            if value:
                setattr(target, f.name, Date.parse(str(value)))
        elif isinstance(current, str):
            if value:
                setattr(target, f.name, str(value))
    return target


def load_settings(data: Union[Dict[str, Any], str], settings: Settings = None) -> Settings:
    """Load a ``_settings`` object (dict or JSON text) onto ``settings`` or the defaults."""
    if settings is None:
        settings = Settings()
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as err:
            raise JsonStructureError(f"cannot load settings: {err}") from err
    return load_into(settings, data)


def read_settings_file(filename: Union[str, Path], settings: Settings = None) -> Settings:
    """Read settings from a file holding either a bare settings object or a tree JSON with ``_settings``."""
    try:
        text = Path(filename).read_text()
    except OSError as err:
        raise InputOutputError(f"cannot read {filename}: {err}") from err
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise JsonStructureError(f"cannot load settings from {filename}: {err}") from err
    _expect_object(data, "settings file")
    if "_settings" in data:
        data = data["_settings"]
    return load_settings(data, settings)


# ----------------------------------------------------------------------
# dumping


def _dump(obj: Any) -> Any:
    if is_dataclass(obj):
        result: Dict[str, Any] = {}
        if type(obj) in COMMENTS:
            result["_comment"] = COMMENTS[type(obj)]
        for f in fields(obj):
            result[f.name] = _dump(getattr(obj, f.name))
        return result
    if isinstance(obj, (Color, Date)):
        return str(obj)
    if isinstance(obj, list):
        return [_dump(item) for item in obj]
    return obj


def dump_settings(settings: Any) -> Dict[str, Any]:
    """JSON-ready dict for a settings dataclass (any level)."""
    return _dump(settings)
