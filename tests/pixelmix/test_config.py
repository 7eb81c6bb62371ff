import pytest
from attrs import evolve

from pixelmix.config import (
    GrainSettings,
    ImageSettings,
    NoiseSettings,
    OverlaySettings,
    RenderConfig,
    SortSettings,
    WarpSettings,
    enum_converter,
    label,
    read_record,
)
from pixelmix.constants import (
    BlendMode,
    Combine,
    LineColor,
    SortBy,
    SortKey,
    SortOrder,
    WarpProjection,
)


def test_defaults():
    config = RenderConfig()
    assert config.size == (4032, 3024)
    assert config.image1 == ImageSettings(blur=100.0)
    assert config.image2 == ImageSettings(blur=75.0)
    assert config.combine == Combine.BLEND
    assert config.mode == BlendMode.SCREEN
    assert config.noise == NoiseSettings(octaves=2, contamination=0.25, cutoff=0.0)
    assert config.warp == WarpSettings(1.0, 5.0, 1.0, 1000.0)
    assert config.sort == SortSettings()
    assert config.overlay.enabled
    assert config.overlay.spacing == 25.0
    assert config.overlay.line_color == LineColor.BLACK
    assert config.grain == GrainSettings(scale=0.35, factor=10.0)
    assert config.seed == 13


def test_from_dict_empty():
    assert RenderConfig.from_dict({}) == RenderConfig()


def test_from_dict_mix_default_mode():
    config = RenderConfig.from_dict({"combine": "Mix"})
    assert config.combine == Combine.MIX
    assert config.mode == BlendMode.NORMAL

    config = RenderConfig.from_dict({"combine": "Mix", "mode": "Overlay"})
    assert config.mode == BlendMode.OVERLAY

    assert RenderConfig.from_dict({"combine": "Divide"}).mode == BlendMode.SCREEN

    with pytest.raises(ValueError):
        RenderConfig.from_dict({"combine": "Mix", "mode": "Screen"})


def test_with_combine():
    config = RenderConfig().with_combine("Mix")
    assert config.combine == Combine.MIX
    assert config.mode == BlendMode.NORMAL

    config = RenderConfig(mode=BlendMode.SOFT_LIGHT).with_combine(Combine.MIX)
    assert config.mode == BlendMode.SOFT_LIGHT

    config = RenderConfig().with_combine(Combine.DIVIDE)
    assert config.combine == Combine.DIVIDE
    assert config.mode == BlendMode.SCREEN


def test_from_dict():
    config = RenderConfig.from_dict(
        {
            "combine": "Mix",
            "mode": "SoftLight",
            "img_blur_1": 12,
            "opacity_2": 128,
            "octaves": 3,
            "cutoff": 0.1,
            "screen": False,
            "sort_by": "RowCol",
            "sort_key": "WrappedHue",
            "row_sort_order": "Descending",
            "line_color": "White",
            "warp_projection": "Opponent",
            "img_path_1": "a.png",
            "unknown": 1,
        }
    )
    assert config.combine == Combine.MIX
    assert config.mode == BlendMode.SOFT_LIGHT
    assert config.image1.blur == 12.0
    assert config.image1.opacity == 255
    assert config.image2.opacity == 128
    assert config.image2.blur == 75.0
    assert config.noise.octaves == 3
    assert config.noise.cutoff == 0.1
    assert not config.overlay.enabled
    assert config.sort.by == SortBy.ROW_THEN_COL
    assert config.sort.key == SortKey.WRAPPED_HUE
    assert config.sort.row_order == SortOrder.DESCENDING
    assert config.sort.col_order == SortOrder.ASCENDING
    assert config.overlay.line_color == LineColor.WHITE
    assert config.warp.projection == WarpProjection.OPPONENT


def test_to_dict_labels():
    record = RenderConfig().to_dict()
    assert record["combine"] == "Blend"
    assert record["mode"] == "Screen"
    assert record["row_sort_order"] == "Ascending"
    assert record["sort_by"] == "Row"
    assert record["screen"] is True
    assert record["img_blur_1"] == 100.0


def test_dict_round_trip():
    config = RenderConfig(
        image1=ImageSettings(blur=3.0, hue_rotation=-90, opacity=10),
        width=640,
        height=480,
        combine=Combine.MIX,
        mode=BlendMode.HARD_LIGHT,
        noise=NoiseSettings(octaves=5, contamination=1.5, cutoff=-0.2),
        sort=SortSettings(SortKey.CHROMA, SortBy.COL_THEN_ROW, SortOrder.DESCENDING),
        overlay=OverlaySettings(enabled=False, spacing=10.0, subdivisions=3),
        grain=GrainSettings(scale=1.0, factor=-4.0),
        seed=99,
    )
    assert RenderConfig.from_dict(config.to_dict()) == config


def test_save_load(tmp_path):
    path = tmp_path / "settings.json"
    config = evolve(RenderConfig(), combine=Combine.WARP, seed=5)
    config.save(str(path), img_path_1="a.png")
    assert read_record(str(path))["img_path_1"] == "a.png"
    assert RenderConfig.load(str(path)) == config


def test_read_record_requires_object(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        read_record(str(path))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(width=0),
        dict(height=-5),
        dict(image1=ImageSettings(opacity=255), combine="Mix"),
        dict(combine=Combine.MIX, mode=BlendMode.MULTIPLY),
        dict(mode="Sparkle"),
        dict(combine=9),
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)


@pytest.mark.parametrize(
    "cls, kwargs",
    [
        (ImageSettings, dict(opacity=256)),
        (ImageSettings, dict(hue_rotation=400)),
        (ImageSettings, dict(blur=-1)),
        (NoiseSettings, dict(octaves=9)),
        (NoiseSettings, dict(contamination=-0.1)),
        (OverlaySettings, dict(spacing=0)),
        (OverlaySettings, dict(subdivisions=0)),
        (OverlaySettings, dict(max_opacity=1.5)),
        (GrainSettings, dict(scale=-1)),
    ],
)
def test_invalid_settings(cls, kwargs):
    with pytest.raises(ValueError):
        cls(**kwargs)


def test_invalid_record_value():
    with pytest.raises(ValueError):
        RenderConfig.from_dict({"octaves": 12})


@pytest.mark.parametrize(
    "value",
    ["HardLight", "hard_light", "HARD_LIGHT", "hard light", BlendMode.HARD_LIGHT],
)
def test_enum_converter(value):
    assert enum_converter(BlendMode)(value) == BlendMode.HARD_LIGHT


@pytest.mark.parametrize(
    "member, expected",
    [
        (Combine.UNSORT, "Unsort"),
        (SortOrder.DESCENDING, "Descending"),
        (BlendMode.SOFT_LIGHT, "SoftLight"),
        (SortBy.COL_THEN_ROW, "ColRow"),
    ],
)
def test_label(member, expected):
    assert label(member) == expected
    assert enum_converter(type(member))(expected) == member
