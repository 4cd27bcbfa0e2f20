# structree/formatting.py

"""
Rendering of complete traversal results.

Five output formats are supported: a Unicode ``tree`` drawing, ``json``,
``markdown`` (the tree inside a fenced block), ``xml`` and ``csv``. The line
and row helpers defined here are shared with the per-event renderer in
:mod:`structree.stream_format`, so both traversal modes produce the same text.
"""


from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import datetime, timezone
from xml.sax.saxutils import quoteattr

from anytree import ContStyle, PreOrderIter, RenderTree

from structree.builder import BuildResult
from structree.config import StructureConfig
from structree.entry import DIRECTORY, SYMLINK, FileEntry, format_timestamp, human_file_size

RULE = "─" * 50
CSV_HEADER = "Path,Type,Size (bytes),Permissions,Modified"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_CONNECTOR = "├── "
_LAST_CONNECTOR = "└── "

EMOJI_EXTENSIONS = {
    ".js": "🟨",
    ".ts": "🔷",
    ".json": "🗒️",
    ".md": "📝",
    ".txt": "📃",
    ".yml": "⚙️",
    ".yaml": "⚙️",
    ".xml": "🗂️",
    ".html": "🌐",
    ".css": "🎨",
    ".scss": "🎨",
    ".py": "🐍",
    ".java": "☕",
    ".c": "⚡",
    ".cpp": "⚡",
    ".go": "🐹",
    ".rs": "🦀",
    ".php": "🐘",
    ".sh": "🐚",
    ".dockerfile": "🐳",
}

TYPE_ICONS = {
    "emoji": {DIRECTORY: "📁", SYMLINK: "🔗", "file": "📄"},
    "unicode": {DIRECTORY: "▸", SYMLINK: "↪", "file": "•"},
    "ascii": {DIRECTORY: "[D]", SYMLINK: "[L]", "file": "[F]"},
}


def _extension(name: str) -> str:
    """Lowercased extension of ``name`` including the dot, or ``""``."""
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


def get_icon(entry: FileEntry, config: StructureConfig) -> str:
    """
    Resolve the icon prefix (icon plus a space) for ``entry``.

    Lookup order: the user's ``custom_icons`` by extension, the built-in
    extension table (emoji style, files only), the type default of the
    active style. The ``none`` style yields an empty string.
    """

    if config.icon_style == "none":
        return ""
    ext = _extension(entry.name)
    if ext and ext in config.custom_icons:
        return config.custom_icons[ext] + " "
    if config.icon_style == "emoji" and entry.kind == "file" and ext in EMOJI_EXTENSIONS:
        return EMOJI_EXTENSIONS[ext] + " "
    return TYPE_ICONS[config.icon_style][entry.kind] + " "


def metadata_suffix(entry: FileEntry, config: StructureConfig) -> str:
    """
    Build the metadata decoration appended to a tree line.

    Parameters
    ----------
    entry : FileEntry
        Entry being drawn.
    config : StructureConfig
        Active configuration; only enabled metadata fields are shown.

    Returns
    -------
    str
        Size, permissions and modification date in that order, each with a
        leading space, or ``""`` when nothing is enabled.
    """

    parts = []
    if config.include_size and entry.size_bytes is not None:
        parts.append(f" ({human_file_size(entry.size_bytes)})")
    if config.include_permissions and entry.permissions:
        parts.append(f" [{entry.permissions}]")
    if config.include_modified_date and entry.modified_at is not None:
        parts.append(f" ⏰ {entry.modified_at.date().isoformat()}")
    return "".join(parts)


def connector(is_last: bool) -> str:
    """Branch connector for an entry, depending on whether it is the last sibling."""
    return _LAST_CONNECTOR if is_last else _CONNECTOR


def entry_line(entry: FileEntry, pre: str, config: StructureConfig) -> str:
    """One tree line; ``pre`` already ends with the branch connector."""
    return f"{pre}{get_icon(entry, config)}{entry.name}{metadata_suffix(entry, config)}"


def collapsed_line(fill: str, item_count: int) -> str:
    """
    Summary line drawn in place of a compressed directory's children.

    Parameters
    ----------
    fill : str
        Prefix of the directory's children (the continuation of its branch).
    item_count : int
        Number of children left after filtering.

    Returns
    -------
    str
        Line of the form ``… (N items, collapsed)``.
    """

    return f"{fill}… ({item_count} items, collapsed)"


def root_line(root: FileEntry, config: StructureConfig) -> str:
    """First line of a tree drawing: the root's icon and name."""
    return f"{get_icon(root, config)}{root.name}"


def timing_lines(elapsed_ms: int, total_items: int) -> list[str]:
    """Footer lines of the tree format."""
    return [f"⏱️  Generated in {elapsed_ms} ms", f"📊 Total items: {total_items}"]


def generated_at() -> str:
    """Current UTC time as an ISO 8601 string with milliseconds."""
    return format_timestamp(datetime.now(timezone.utc))


def tree_body(root: FileEntry, config: StructureConfig) -> Iterator[str]:
    """
    Yield the tree lines below ``root``.

    Directories with more children than the compression threshold are drawn
    as a single summary line; the root itself is never collapsed.
    """

    def childiter(children):
        if children and children[0].parent is not root and config.should_compress(len(children)):
            return ()
        return children

    for row in RenderTree(root, style=ContStyle(), childiter=childiter):
        node = row.node
        if node is root:
            continue
        yield entry_line(node, row.pre, config)
        if node.is_dir and config.should_compress(len(node.children)):
            yield collapsed_line(row.fill, len(node.children))


def format_tree(result: BuildResult, config: StructureConfig) -> str:
    """
    Render ``result`` as a Unicode tree.

    The document is the root line, a horizontal rule, the tree body, a blank
    line and the timing footer.
    """

    lines = [root_line(result.root, config), RULE]
    lines.extend(tree_body(result.root, config))
    lines.append("")
    lines.extend(timing_lines(result.elapsed_ms, result.processed))
    return "\n".join(lines) + "\n"


def markdown_header(root: FileEntry, config: StructureConfig) -> list[str]:
    """Lines preceding the tree body in Markdown, ending inside the code fence."""
    return [
        f"# {root_line(root, config)}",
        "",
        f"**Generated:** {generated_at()}",
        "",
        "## Directory tree",
        "```",
        root_line(root, config),
    ]


def markdown_footer(elapsed_ms: int, total_items: int) -> list[str]:
    """Lines closing the code fence and reporting timing in Markdown."""
    return [
        "```",
        "",
        f"**Generation time:** {elapsed_ms} ms",
        f"**Items processed:** {total_items}",
    ]


def format_markdown(result: BuildResult, config: StructureConfig) -> str:
    """Render ``result`` as a Markdown document with the tree in a fenced block."""
    lines = markdown_header(result.root, config)
    lines.extend(tree_body(result.root, config))
    lines.extend(markdown_footer(result.elapsed_ms, result.processed))
    return "\n".join(lines) + "\n"


def json_document(structure: dict, config: StructureConfig, elapsed_ms: int, total_items: int) -> str:
    """
    Serialize a nested entry mapping with its ``meta`` block.

    Parameters
    ----------
    structure : dict
        Root entry in the shape returned by :meth:`FileEntry.to_dict`.
    config : StructureConfig
        Configuration echoed under ``meta.config``.
    elapsed_ms : int
        Traversal time in milliseconds.
    total_items : int
        Number of entries processed.

    Returns
    -------
    str
        Indented JSON, newline-terminated. Non-ASCII names are kept as is.
    """

    meta = {
        "generatedAt": generated_at(),
        "generationTime": f"{elapsed_ms}ms",
        "itemsProcessed": total_items,
        "config": config.to_dict(),
    }
    return json.dumps({"meta": meta, "structure": structure}, indent=2, ensure_ascii=False) + "\n"


def format_json(result: BuildResult, config: StructureConfig) -> str:
    """Render ``result`` as a JSON document."""
    return json_document(result.root.to_dict(), config, result.elapsed_ms, result.processed)


def xml_attributes(entry: FileEntry) -> str:
    """
    Attribute string of a ``<node>`` element.

    ``name`` and ``type`` are always present and escaped; ``size``, ``perm``
    and ``mod`` only when the entry carries them.
    """

    attrs = [f"name={quoteattr(entry.name)}", f"type={quoteattr(entry.kind)}"]
    if entry.size_bytes is not None:
        attrs.append(f'size="{entry.size_bytes}"')
    if entry.permissions:
        attrs.append(f'perm="{entry.permissions}"')
    if entry.modified_at is not None:
        attrs.append(f'mod="{format_timestamp(entry.modified_at)}"')
    return " ".join(attrs)


def xml_open(entry: FileEntry, depth: int, *, empty: bool) -> str:
    """
    Opening tag of ``entry`` indented two spaces per level.

    Parameters
    ----------
    entry : FileEntry
        Entry to describe.
    depth : int
        Nesting level; the root node sits at depth 1.
    empty : bool
        Write a self-closing element when the entry has no children.

    Returns
    -------
    str
        The indented tag.
    """

    pad = "  " * depth
    return f"{pad}<node {xml_attributes(entry)} />" if empty else f"{pad}<node {xml_attributes(entry)}>"


def xml_close(depth: int) -> str:
    """Closing ``</node>`` tag at ``depth``."""
    return "  " * depth + "</node>"


def xml_header() -> list[str]:
    """XML declaration and opening ``<folderStructure>`` element."""
    return [XML_DECLARATION, f"<folderStructure generated={quoteattr(generated_at())}>"]


def xml_footer(elapsed_ms: int, total_items: int) -> list[str]:
    """Closing ``</folderStructure>`` element and the timing comment."""
    return ["</folderStructure>", f"<!-- Generated in {elapsed_ms} ms, {total_items} items -->"]


def _xml_nodes(entry: FileEntry, depth: int) -> Iterator[str]:
    """Yield the element lines of ``entry`` and its subtree."""
    if not entry.children:
        yield xml_open(entry, depth, empty=True)
        return
    yield xml_open(entry, depth, empty=False)
    for child in entry.children:
        yield from _xml_nodes(child, depth + 1)
    yield xml_close(depth)


def format_xml(result: BuildResult, config: StructureConfig) -> str:
    """Render ``result`` as an XML document of nested ``<node>`` elements."""
    lines = xml_header()
    lines.extend(_xml_nodes(result.root, 1))
    lines.extend(xml_footer(result.elapsed_ms, result.processed))
    return "\n".join(lines) + "\n"


def csv_row(entry: FileEntry) -> str:
    """
    CSV row for one entry.

    The path cell is always double-quoted with embedded quotes doubled;
    missing metadata leaves the cell empty.
    """

    path = str(entry.fs_path).replace('"', '""')
    return ",".join(
        [
            f'"{path}"',
            entry.kind,
            "" if entry.size_bytes is None else str(entry.size_bytes),
            entry.permissions or "",
            "" if entry.modified_at is None else format_timestamp(entry.modified_at),
        ]
    )


def format_csv(result: BuildResult, config: StructureConfig) -> str:
    """Render ``result`` as CSV, root first, then entries in pre-order."""
    rows = [CSV_HEADER]
    rows.extend(csv_row(entry) for entry in PreOrderIter(result.root))
    return "\n".join(rows) + "\n"


_RENDERERS = {
    "tree": format_tree,
    "json": format_json,
    "markdown": format_markdown,
    "xml": format_xml,
    "csv": format_csv,
}


def render(result: BuildResult, config: StructureConfig) -> str:
    """
    Render a materialized traversal in ``config.output_format``.

    Parameters
    ----------
    result : BuildResult
        Output of :meth:`structree.builder.StructureBuilder.build`.
    config : StructureConfig
        Active configuration; selects the format and the tree decorations.

    Returns
    -------
    str
        The formatted document, newline-terminated.
    """

    return _RENDERERS[config.output_format](result, config)
