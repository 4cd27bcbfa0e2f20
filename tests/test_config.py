import pytest

from structree import ConfigError, StructureConfig, resolve_config


def test_defaults():
    config = resolve_config()
    assert config == StructureConfig()
    assert config.include_hidden is False
    assert config.max_depth == 0
    assert config.respect_gitignore is True
    assert config.sort_by == "name"
    assert config.output_format == "tree"
    assert config.compress_large_dirs is True
    assert config.compression_threshold == 50
    assert config.needs_stat is False


def test_accepts_host_names_and_python_names():
    config = resolve_config({"includeHidden": True, "max_depth": 3}, sortBy="size")
    assert config.include_hidden is True
    assert config.max_depth == 3
    assert config.sort_by == "size"


def test_normalizes_lists_and_icons():
    config = resolve_config(
        extension_filter=[".JS", "css"],
        exclude_folders=["node_modules"],
        custom_icons={"VUE": "V", ".py": "P"},
    )
    assert config.extension_filter == ("js", "css")
    assert config.exclude_folders == ("node_modules",)
    assert config.exclude_patterns is None
    assert config.custom_icons == {".vue": "V", ".py": "P"}


def test_overrides_apply_on_top_of_existing_config():
    base = resolve_config(include_size=True)
    config = resolve_config(base, output_format="json")
    assert config.include_size is True
    assert config.output_format == "json"
    assert config.needs_stat is True
    assert base.output_format == "tree"


def test_config_is_immutable():
    config = resolve_config()
    with pytest.raises(AttributeError):
        config.max_depth = 3


@pytest.mark.parametrize(
    "options",
    [
        {"max_depth": -1},
        {"maxDepth": 1.5},
        {"compression_threshold": -5},
        {"sort_by": "color"},
        {"output_format": "yaml"},
        {"icon_style": "fancy"},
        {"include_hidden": "yes"},
        {"extension_filter": "js"},
        {"exclude_patterns": ["*.log", 3]},
        {"custom_icons": ["x"]},
        {"notAnOption": True},
    ],
)
def test_invalid_values_are_rejected(options):
    with pytest.raises(ConfigError):
        resolve_config(options)


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        resolve_config(max_depth=-1)


def test_round_trips_through_host_dict():
    config = resolve_config(extension_filter=["py"], icon_style="ascii", use_streaming=True)
    data = config.to_dict()
    assert data["extensionFilter"] == ["py"]
    assert data["iconStyle"] == "ascii"
    assert data["useStreaming"] is True
    assert StructureConfig.from_dict(data) == config


def test_compression_only_applies_to_text_formats():
    assert resolve_config(output_format="tree").should_compress(51)
    assert resolve_config(output_format="markdown").should_compress(51)
    assert not resolve_config(output_format="tree").should_compress(50)
    assert not resolve_config(output_format="json").should_compress(500)
    assert not resolve_config(compress_large_dirs=False).should_compress(500)
