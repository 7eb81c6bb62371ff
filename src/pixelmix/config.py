"""
Render configuration.

:py:class:`RenderConfig` is an immutable value holding every pipeline
parameter, grouped by the stage that reads it. Settings files store the
same parameters as one flat record, e.g.::

    {"combine": "Mix", "mode": "SoftLight", "img_blur_1": 12.0,
     "octaves": 3, "cutoff": 0.1, "screen": false}

:py:meth:`RenderConfig.from_dict` accepts such records as-is: unknown keys
are ignored and missing keys take their defaults, so older settings files
keep loading.
"""

import json
import logging
import os
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

import attrs
from attrs import define, field
from attrs.validators import ge

from pixelmix.constants import (
    MIX_BLEND_MODES,
    BlendMode,
    Combine,
    LineColor,
    SortBy,
    SortKey,
    SortOrder,
    WarpProjection,
)
from pixelmix.validators import in_, positive, range_

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

PathLike = Union[str, bytes, os.PathLike]

DEFAULT_MIX_MODE = BlendMode.NORMAL


def enum_converter(cls: Type[E]) -> Callable[[Any], E]:
    """
    Build a converter accepting a member, its value, its name, or its label
    as written in settings files (``"HardLight"``, ``"hard_light"``,
    ``"Blend"``).
    """

    def convert(value: Any) -> E:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace(" ", "_").replace("-", "_")
            for member in cls:
                if key == member.name:
                    return member
                if isinstance(member.value, str) and key == member.value.upper():
                    return member
            raise ValueError("Unknown %s: %r" % (cls.__name__, value))
        return cls(value)

    return convert


def fallback_mode(combine: Combine, mode: BlendMode) -> BlendMode:
    """
    Blend mode to pair with ``combine`` when the caller did not choose one:
    ``mode`` itself, or :py:data:`DEFAULT_MIX_MODE` when mix cannot use it.
    """
    if combine == Combine.MIX and mode not in MIX_BLEND_MODES:
        return DEFAULT_MIX_MODE
    return mode


def label(member: Enum) -> str:
    """Settings-file spelling of an enum member."""
    if isinstance(member.value, str):
        return member.value
    return member.name.title()


@define(frozen=True)
class ImageSettings:
    """
    Pre-processing of one source image.

    .. py:attribute:: blur

        Standard deviation of the Gaussian blur; 0 skips the blur.

    .. py:attribute:: hue_rotation

        Hue rotation in degrees, -360 to 360.

    .. py:attribute:: opacity

        Alpha multiplier, 0 to 255.
    """

    blur: float = field(default=0.0, converter=float, validator=ge(0.0))
    hue_rotation: int = field(default=0, converter=int, validator=range_(-360, 360))
    opacity: int = field(default=255, converter=int, validator=range_(0, 255))


@define(frozen=True)
class NoiseSettings:
    """Noise threshold of the divide and mix modes."""

    octaves: int = field(default=2, converter=int, validator=range_(0, 8))
    contamination: float = field(default=0.25, converter=float, validator=ge(0.0))
    cutoff: float = field(default=0.0, converter=float)


@define(frozen=True)
class WarpSettings:
    """Polar warp parameters."""

    angle_scale: float = field(default=1.0, converter=float)
    angle_factor: float = field(default=5.0, converter=float)
    radius_scale: float = field(default=1.0, converter=float)
    radius_factor: float = field(default=1000.0, converter=float)
    projection: WarpProjection = field(
        default=WarpProjection.LIGHTNESS,
        converter=enum_converter(WarpProjection),
        validator=in_(WarpProjection),
    )


@define(frozen=True)
class SortSettings:
    """Pixel sort parameters."""

    key: SortKey = field(
        default=SortKey.LIGHTNESS,
        converter=enum_converter(SortKey),
        validator=in_(SortKey),
    )
    by: SortBy = field(
        default=SortBy.ROW, converter=enum_converter(SortBy), validator=in_(SortBy)
    )
    row_order: SortOrder = field(
        default=SortOrder.ASCENDING,
        converter=enum_converter(SortOrder),
        validator=in_(SortOrder),
    )
    col_order: SortOrder = field(
        default=SortOrder.ASCENDING,
        converter=enum_converter(SortOrder),
        validator=in_(SortOrder),
    )


@define(frozen=True)
class OverlaySettings:
    """Faded line grid drawn over the result."""

    enabled: bool = field(default=True, converter=bool)
    spacing: float = field(default=25.0, converter=float, validator=positive)
    thickness: float = field(default=0.5, converter=float, validator=ge(0.0))
    subdivisions: int = field(default=75, converter=int, validator=ge(1))
    min_opacity: float = field(default=0.1, converter=float, validator=range_(0.0, 1.0))
    max_opacity: float = field(default=0.9, converter=float, validator=range_(0.0, 1.0))
    line_color: LineColor = field(
        default=LineColor.BLACK,
        converter=enum_converter(LineColor),
        validator=in_(LineColor),
    )


@define(frozen=True)
class GrainSettings:
    """Film grain; a zero scale or factor disables it."""

    scale: float = field(default=0.35, converter=float, validator=ge(0.0))
    factor: float = field(default=10.0, converter=float)


def _group(cls: type) -> Any:
    return field(factory=cls, validator=attrs.validators.instance_of(cls))


@define(frozen=True)
class RenderConfig:
    """
    Every parameter of one render.

    Example::

        config = RenderConfig(width=800, height=600, combine=Combine.DIVIDE,
                              noise=NoiseSettings(octaves=4, cutoff=0.2))
        config = attrs.evolve(config, seed=7)

    .. py:attribute:: combine

        :py:class:`~pixelmix.constants.Combine` strategy.

    .. py:attribute:: mode

        :py:class:`~pixelmix.constants.BlendMode` used by blend and mix. Mix
        only accepts modes listed in
        :py:data:`~pixelmix.constants.MIX_BLEND_MODES`.

    .. py:attribute:: seed

        Seed of every noise field and of the dither generator.
    """

    image1: ImageSettings = field(
        factory=lambda: ImageSettings(blur=100.0),
        validator=attrs.validators.instance_of(ImageSettings),
    )
    image2: ImageSettings = field(
        factory=lambda: ImageSettings(blur=75.0),
        validator=attrs.validators.instance_of(ImageSettings),
    )
    width: int = field(default=4032, converter=int, validator=positive)
    height: int = field(default=3024, converter=int, validator=positive)
    combine: Combine = field(
        default=Combine.BLEND, converter=enum_converter(Combine), validator=in_(Combine)
    )
    mode: BlendMode = field(
        default=BlendMode.SCREEN,
        converter=enum_converter(BlendMode),
        validator=in_(BlendMode),
    )
    noise: NoiseSettings = _group(NoiseSettings)
    warp: WarpSettings = _group(WarpSettings)
    sort: SortSettings = _group(SortSettings)
    overlay: OverlaySettings = _group(OverlaySettings)
    grain: GrainSettings = _group(GrainSettings)
    seed: int = field(default=13, converter=int)

    @mode.validator
    def _validate_mode(self, attribute: Any, value: BlendMode) -> None:
        if self.combine == Combine.MIX and value not in MIX_BLEND_MODES:
            raise ValueError(
                "%s blend mode cannot be mixed; choose one of %s"
                % (label(value), ", ".join(sorted(label(m) for m in MIX_BLEND_MODES)))
            )

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "RenderConfig":
        """
        Build a config from a flat settings record.

        :param record: flat mapping as stored in settings files.
        :return: :py:class:`RenderConfig`
        :raises ValueError: when a present value is invalid.
        """
        kwargs: Dict[str, Any] = {}
        groups: Dict[str, Dict[str, Any]] = {}
        for key, value in record.items():
            target = FLAT_FIELDS.get(key)
            if target is None:
                if key not in IGNORED_KEYS:
                    logger.debug("Ignoring unknown setting %r" % key)
                continue
            group, name = target
            if group is None:
                kwargs[name] = value
            else:
                groups.setdefault(group, {})[name] = value

        defaults = cls()
        for group, values in groups.items():
            kwargs[group] = attrs.evolve(getattr(defaults, group), **values)
        if "mode" not in kwargs:
            combine = enum_converter(Combine)(kwargs.get("combine", defaults.combine))
            kwargs["mode"] = fallback_mode(combine, defaults.mode)
        return cls(**kwargs)

    def with_combine(self, combine: Any) -> "RenderConfig":
        """
        Switch the combine strategy, replacing a blend mode it cannot use by
        :py:data:`DEFAULT_MIX_MODE`.
        """
        combine = enum_converter(Combine)(combine)
        mode = fallback_mode(combine, self.mode)
        if mode != self.mode:
            logger.warning(
                "%s blend mode cannot be mixed; using %s" % (label(self.mode), label(mode))
            )
        return attrs.evolve(self, combine=combine, mode=mode)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into a settings record."""
        record: Dict[str, Any] = {}
        for key, (group, name) in FLAT_FIELDS.items():
            value = getattr(self, name) if group is None else getattr(
                getattr(self, group), name
            )
            record[key] = label(value) if isinstance(value, Enum) else value
        return record

    @classmethod
    def load(cls, path: PathLike) -> "RenderConfig":
        """Load a JSON settings file."""
        return cls.from_dict(read_record(path))

    def save(self, path: PathLike, **extra: Any) -> None:
        """
        Save as a JSON settings file.

        :param extra: additional record entries, e.g. ``img_path_1``.
        """
        record = self.to_dict()
        record.update(extra)
        with open(path, "w") as f:
            json.dump(record, f, indent=2)


def read_record(path: PathLike) -> Dict[str, Any]:
    """Read a flat JSON settings record."""
    with open(path, "r") as f:
        record = json.load(f)
    if not isinstance(record, dict):
        raise ValueError("Settings file must hold a JSON object: %s" % (path,))
    return record


# Flat settings key to (group, attribute); a None group is top-level.
FLAT_FIELDS: Dict[str, Tuple[Optional[str], str]] = {
    "img_blur_1": ("image1", "blur"),
    "img_blur_2": ("image2", "blur"),
    "hue_rotation_1": ("image1", "hue_rotation"),
    "hue_rotation_2": ("image2", "hue_rotation"),
    "opacity_1": ("image1", "opacity"),
    "opacity_2": ("image2", "opacity"),
    "width": (None, "width"),
    "height": (None, "height"),
    "combine": (None, "combine"),
    "mode": (None, "mode"),
    "seed": (None, "seed"),
    "octaves": ("noise", "octaves"),
    "contamination": ("noise", "contamination"),
    "cutoff": ("noise", "cutoff"),
    "angle_scale": ("warp", "angle_scale"),
    "angle_factor": ("warp", "angle_factor"),
    "radius_scale": ("warp", "radius_scale"),
    "radius_factor": ("warp", "radius_factor"),
    "warp_projection": ("warp", "projection"),
    "sort_key": ("sort", "key"),
    "sort_by": ("sort", "by"),
    "row_sort_order": ("sort", "row_order"),
    "col_sort_order": ("sort", "col_order"),
    "screen": ("overlay", "enabled"),
    "spacing": ("overlay", "spacing"),
    "thickness": ("overlay", "thickness"),
    "subdivisions": ("overlay", "subdivisions"),
    "min_opacity": ("overlay", "min_opacity"),
    "max_opacity": ("overlay", "max_opacity"),
    "line_color": ("overlay", "line_color"),
    "grain_scale": ("grain", "scale"),
    "grain_factor": ("grain", "factor"),
}

# Known keys that do not configure the render itself.
IGNORED_KEYS = frozenset(("img_path_1", "img_path_2"))
