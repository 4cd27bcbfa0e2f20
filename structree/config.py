# structree/config.py

"""
Traversal configuration.

A :class:`StructureConfig` is an immutable snapshot of every option that
influences one traversal: filtering, metadata, ordering, output format and
execution mode. Hosts usually hand over a partial mapping (often with the
camelCase names used in settings files); :func:`resolve_config` turns it into
a fully-populated, validated config before any filesystem access happens.
"""


from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from structree.errors import ConfigError

SORT_KEYS = ("name", "size", "modified", "type")
OUTPUT_FORMATS = ("tree", "json", "markdown", "xml", "csv")
ICON_STYLES = ("emoji", "unicode", "ascii", "none")

# Formats that render a collapsed summary line instead of large directories.
COMPRESSIBLE_FORMATS = ("tree", "markdown")


@dataclass(frozen=True)
class StructureConfig:
    """
    Fully-resolved options for a single traversal.

    Build instances through :func:`resolve_config` rather than directly, so
    that list values are normalized and every field is validated.
    """

    # filtering
    include_hidden: bool = False
    extension_filter: tuple[str, ...] | None = None
    exclude_folders: tuple[str, ...] | None = None
    exclude_patterns: tuple[str, ...] | None = None
    max_depth: int = 0
    respect_gitignore: bool = True

    # metadata
    include_size: bool = False
    include_permissions: bool = False
    include_modified_date: bool = False

    # output / execution
    sort_by: str = "name"
    output_format: str = "tree"
    use_worker: bool = False
    use_streaming: bool = False

    # visual tweaks
    icon_style: str = "emoji"
    custom_icons: Mapping[str, str] = field(default_factory=dict)

    # compression of large directories
    compress_large_dirs: bool = True
    compression_threshold: int = 50

    @property
    def needs_stat(self) -> bool:
        """Whether entries must be stat'ed (one call serves all three flags)."""
        return self.include_size or self.include_permissions or self.include_modified_date

    @property
    def compresses(self) -> bool:
        """Whether large directories are collapsed in the selected output format."""
        return self.compress_large_dirs and self.output_format in COMPRESSIBLE_FORMATS

    def should_compress(self, item_count: int) -> bool:
        """
        Decide whether a directory with ``item_count`` children is collapsed.

        Parameters
        ----------
        item_count : int
            Number of children left after filtering.

        Returns
        -------
        bool
            ``True`` when compression is active for the output format and the
            count exceeds ``compression_threshold``.
        """

        return self.compresses and item_count > self.compression_threshold

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping using the host's camelCase names."""
        out: dict[str, Any] = {}
        for name, value in asdict(self).items():
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Mapping):
                value = dict(value)
            out[_CAMEL_NAMES[name]] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StructureConfig:
        """Inverse of :meth:`to_dict`; accepts partial mappings too."""
        return resolve_config(data)


_FIELD_NAMES = tuple(f.name for f in fields(StructureConfig))


def _camel(name: str) -> str:
    """``include_size`` -> ``includeSize``."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


_CAMEL_NAMES = {name: _camel(name) for name in _FIELD_NAMES}
_ALIASES = {camel: name for name, camel in _CAMEL_NAMES.items()}

_BOOL_FIELDS = (
    "include_hidden",
    "respect_gitignore",
    "include_size",
    "include_permissions",
    "include_modified_date",
    "use_worker",
    "use_streaming",
    "compress_large_dirs",
)


def _string_tuple(name: str, value: Any) -> tuple[str, ...] | None:
    """
    Validate an optional list-of-strings option.

    Parameters
    ----------
    name : str
        Option name, used in error messages.
    value : Any
        Raw value; ``None`` is passed through.

    Returns
    -------
    tuple[str, ...] | None
        The values as a tuple.

    Raises
    ------
    ConfigError
        If ``value`` is a bare string, not iterable, or holds non-strings.
    """

    if value is None:
        return None
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigError(f"{name} must be a list of strings, got {value!r}")
    items = tuple(value)
    for item in items:
        if not isinstance(item, str):
            raise ConfigError(f"{name} must only contain strings, got {item!r}")
    return items


def _non_negative_int(name: str, value: Any) -> int:
    """Validate an integer option that must be ``>= 0``."""
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")
    return value


def _choice(name: str, value: Any, allowed: tuple[str, ...]) -> str:
    """Validate an option restricted to ``allowed``."""
    if value not in allowed:
        raise ConfigError(f"{name} must be one of {', '.join(allowed)}; got {value!r}")
    return value


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def _normalize_icon_key(key: str) -> str:
    key = key.strip().lower()
    return key if key.startswith(".") else "." + key


def _canonical_items(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rename host (camelCase) keys of ``data`` to field names.

    Raises
    ------
    ConfigError
        If a key names no known option.
    """

    out: dict[str, Any] = {}
    for key, value in data.items():
        name = key if key in _FIELD_NAMES else _ALIASES.get(key)
        if name is None:
            raise ConfigError(f"Unknown configuration option: {key!r}")
        out[name] = value
    return out


def resolve_config(
    config: StructureConfig | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> StructureConfig:
    """
    Merge a partial configuration with the defaults and validate the result.

    Parameters
    ----------
    config : StructureConfig | Mapping | None, optional
        Starting point. Mappings may use either the Python field names
        (``max_depth``) or the host names (``maxDepth``). ``None`` means
        all defaults.
    **overrides
        Field values applied on top of ``config``, under the same naming rules.

    Returns
    -------
    StructureConfig
        A frozen config with every field populated and normalized.

    Raises
    ------
    ConfigError
        If an option is unknown or a value is out of range.
    """

    if isinstance(config, StructureConfig):
        values = asdict(config)
    elif config is None:
        values = {}
    elif isinstance(config, Mapping):
        values = _canonical_items(config)
    else:
        raise ConfigError(f"Unsupported configuration object: {type(config).__name__}")
    values.update(_canonical_items(overrides))

    base = StructureConfig()
    for name in _BOOL_FIELDS:
        if name in values and not isinstance(values[name], bool):
            raise ConfigError(f"{name} must be a boolean, got {values[name]!r}")

    extensions = _string_tuple("extension_filter", values.get("extension_filter"))
    if extensions is not None:
        values["extension_filter"] = tuple(_normalize_extension(e) for e in extensions)
    values["exclude_folders"] = _string_tuple("exclude_folders", values.get("exclude_folders"))
    values["exclude_patterns"] = _string_tuple("exclude_patterns", values.get("exclude_patterns"))

    values["max_depth"] = _non_negative_int("max_depth", values.get("max_depth", base.max_depth))
    values["compression_threshold"] = _non_negative_int(
        "compression_threshold", values.get("compression_threshold", base.compression_threshold)
    )

    values["sort_by"] = _choice("sort_by", values.get("sort_by", base.sort_by), SORT_KEYS)
    values["output_format"] = _choice(
        "output_format", values.get("output_format", base.output_format), OUTPUT_FORMATS
    )
    values["icon_style"] = _choice("icon_style", values.get("icon_style", base.icon_style), ICON_STYLES)

    icons = values.get("custom_icons") or {}
    if not isinstance(icons, Mapping):
        raise ConfigError(f"custom_icons must be a mapping, got {icons!r}")
    values["custom_icons"] = {_normalize_icon_key(str(k)): str(v) for k, v in icons.items()}

    return replace(base, **values)
