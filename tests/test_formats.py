# tests/test_formats.py
import json
import os
import sys
from pathlib import Path

import pytest

from structree import generate_text, resolve_config
from structree.entry import FileEntry
from structree.formatting import RULE, get_icon


def _make_file(p: Path, content: str = "x"):
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")


def _lines(s: str):
    return s.splitlines()


def _text(root: Path, **options):
    options.setdefault("respect_gitignore", False)
    options.setdefault("icon_style", "none")
    return generate_text(root, options)


def _without_timing(text: str):
    volatile = ("⏱️", "📊", "**Generated:**", "**Generation time:**", "**Items processed:**", "<folderStructure", "<!--")
    return [line for line in _lines(text) if not line.startswith(volatile)]


def test_tree_single_level(tmp_path: Path):
    (tmp_path / "bDir").mkdir()
    (tmp_path / "ADir").mkdir()
    _make_file(tmp_path / "z.txt")
    _make_file(tmp_path / "A.txt")

    lines = _lines(_text(tmp_path))

    # Root line, rule, then dirs first and files, both case-insensitive
    assert lines[0] == tmp_path.resolve().name
    assert lines[1] == RULE
    assert lines[2:6] == [
        "├── ADir",
        "├── bDir",
        "├── A.txt",
        "└── z.txt",
    ]
    assert lines[6] == ""
    assert lines[7].startswith("⏱️  Generated in ") and lines[7].endswith(" ms")
    assert lines[8] == "📊 Total items: 4"


def test_tree_nested_structure(tmp_path: Path):
    # project/
    #   src/
    #     a.py
    #   docs/
    #     readme.md
    (tmp_path / "src").mkdir()
    (tmp_path / "docs").mkdir()
    _make_file(tmp_path / "src/a.py")
    _make_file(tmp_path / "docs/readme.md")

    lines = _lines(_text(tmp_path))

    assert lines[2:6] == [
        "├── docs",
        "│   └── readme.md",
        "└── src",
        "    └── a.py",
    ]


def test_default_config_draws_icons_and_puts_directories_first(tmp_path: Path):
    _make_file(tmp_path / "file1.txt", "hello")
    _make_file(tmp_path / "src/main.ts")

    lines = _lines(generate_text(tmp_path))

    assert lines[0] == "📁 " + tmp_path.resolve().name
    assert lines[2:5] == [
        "├── 📁 src",
        "│   └── 🔷 main.ts",
        "└── 📃 file1.txt",
    ]


def test_extension_filter_keeps_directories(tmp_path: Path):
    for name in ("app.js", "style.css", "main.py", "src/lib.js", "src/notes.txt"):
        _make_file(tmp_path / name)

    out = _text(tmp_path, extension_filter=["js", "css"])

    assert "app.js" in out
    assert "style.css" in out
    assert "lib.js" in out
    assert "main.py" not in out
    assert "notes.txt" not in out
    assert "└── src" not in out and "├── src" in out


def test_large_directory_collapses_to_summary_line(tmp_path: Path):
    for i in range(60):
        _make_file(tmp_path / f"big/item{i}.txt")
    _make_file(tmp_path / "small.txt")

    lines = _lines(_text(tmp_path))

    assert lines[2:5] == [
        "├── big",
        "│   … (60 items, collapsed)",
        "└── small.txt",
    ]


def test_compression_can_be_disabled_or_tuned(tmp_path: Path):
    for i in range(5):
        _make_file(tmp_path / f"sub/item{i}.txt")

    assert "items, collapsed)" not in _text(tmp_path)
    assert "(5 items, collapsed)" in _text(tmp_path, compression_threshold=4)
    assert "items, collapsed)" not in _text(tmp_path, compression_threshold=4, compress_large_dirs=False)


def test_root_is_never_collapsed(tmp_path: Path):
    for i in range(60):
        _make_file(tmp_path / f"item{i}.txt")

    body = _lines(_text(tmp_path))[2:-3]
    assert len(body) == 60
    assert not any(line.endswith("items, collapsed)") for line in body)
    assert "└── item59.txt" in body


def test_metadata_suffix(tmp_path: Path):
    f = tmp_path / "a.txt"
    _make_file(f, "abc")
    f.chmod(0o644)

    lines = _lines(_text(tmp_path, include_size=True, include_permissions=True))
    assert lines[2] == "└── a.txt (3.0 B) [rw-r--r--]"

    dated = _lines(_text(tmp_path, include_modified_date=True))
    assert dated[2].startswith("└── a.txt ⏰ ")


def test_markdown_wraps_tree_in_fenced_block(tmp_path: Path):
    _make_file(tmp_path / "docs/readme.md")

    lines = _lines(_text(tmp_path, output_format="markdown"))
    name = tmp_path.resolve().name

    assert lines[0] == f"# {name}"
    assert lines[2].startswith("**Generated:** ")
    assert lines[4:10] == ["## Directory tree", "```", name, "└── docs", "    └── readme.md", "```"]
    assert lines[-1] == "**Items processed:** 2"


def test_json_document(tmp_path: Path):
    _make_file(tmp_path / "src/main.py", "print()")
    _make_file(tmp_path / "README.md")

    doc = json.loads(_text(tmp_path, output_format="json", include_size=True))

    meta = doc["meta"]
    assert meta["itemsProcessed"] == 3
    assert meta["generationTime"].endswith("ms")
    assert meta["generatedAt"].endswith("Z")
    assert meta["config"]["outputFormat"] == "json"
    assert meta["config"]["includeSize"] is True

    root = doc["structure"]
    assert root["type"] == "directory"
    assert root["path"] == str(tmp_path.resolve())
    assert [c["name"] for c in root["children"]] == ["src", "README.md"]
    src = root["children"][0]
    assert src["children"][0] == {
        "name": "main.py",
        "path": str(tmp_path.resolve() / "src" / "main.py"),
        "type": "file",
        "size": 7,
    }
    assert "children" not in root["children"][1]


def test_xml_document(tmp_path: Path):
    (tmp_path / "empty").mkdir()
    _make_file(tmp_path / "sub/a&b.txt")

    lines = _lines(_text(tmp_path, output_format="xml"))
    name = tmp_path.resolve().name

    assert lines[0] == '<?xml version="1.0" encoding="UTF-8"?>'
    assert lines[1].startswith("<folderStructure generated=")
    assert lines[2:8] == [
        f'  <node name="{name}" type="directory">',
        '    <node name="empty" type="directory" />',
        '    <node name="sub" type="directory">',
        '      <node name="a&amp;b.txt" type="file" />',
        "    </node>",
        "  </node>",
    ]
    assert lines[8] == "</folderStructure>"
    assert lines[9].startswith("<!-- Generated in ") and lines[9].endswith(" ms, 3 items -->")


def test_csv_rows_in_pre_order(tmp_path: Path):
    _make_file(tmp_path / "sub/a.txt", "abc")
    root = tmp_path.resolve()

    lines = _lines(_text(tmp_path, output_format="csv", include_size=True))

    assert lines[0] == "Path,Type,Size (bytes),Permissions,Modified"
    assert lines[1].startswith(f'"{root}",directory,')
    assert lines[2].startswith(f'"{root / "sub"}",directory,')
    assert lines[3] == f'"{root / "sub" / "a.txt"}",file,3,,'
    assert len(lines) == 4


@pytest.mark.skipif(sys.platform.startswith("win"), reason="Quotes are not valid in Windows file names")
def test_csv_escapes_quotes_in_paths(tmp_path: Path):
    _make_file(tmp_path / 'say "hi".txt')

    lines = _lines(_text(tmp_path, output_format="csv"))
    assert lines[2].endswith('say ""hi"".txt",file,,,')


@pytest.mark.parametrize("output_format", ["tree", "markdown", "json", "xml", "csv"])
def test_streaming_output_matches_eager_output(tmp_path: Path, output_format: str):
    _make_file(tmp_path / "src/app/main.py", "x" * 10)
    _make_file(tmp_path / "src/util.py")
    _make_file(tmp_path / "docs/guide.md")
    (tmp_path / "empty").mkdir()
    _make_file(tmp_path / "README.md")
    if os.name == "posix":
        (tmp_path / "link").symlink_to(tmp_path / "README.md")
    for i in range(55):
        _make_file(tmp_path / f"many/item{i}.txt")

    options = {"output_format": output_format, "include_size": True, "icon_style": "emoji"}
    eager = _text(tmp_path, **options)
    streamed = _text(tmp_path, use_streaming=True, **options)

    if output_format == "json":
        eager_doc, streamed_doc = json.loads(eager), json.loads(streamed)
        assert streamed_doc["structure"] == eager_doc["structure"]
        assert streamed_doc["meta"]["itemsProcessed"] == eager_doc["meta"]["itemsProcessed"]
    else:
        assert _without_timing(streamed) == _without_timing(eager)


@pytest.mark.parametrize(
    "style, expected",
    [
        ("emoji", ("📁 ", "🐍 ", "📄 ")),
        ("unicode", ("▸ ", "• ", "• ")),
        ("ascii", ("[D] ", "[F] ", "[F] ")),
        ("none", ("", "", "")),
    ],
)
def test_icon_styles(style: str, expected):
    cfg = resolve_config(icon_style=style)
    directory = FileEntry("src", Path("/p/src"), "directory")
    python = FileEntry("main.py", Path("/p/main.py"), "file")
    unknown = FileEntry("data.zzz", Path("/p/data.zzz"), "file")

    assert (get_icon(directory, cfg), get_icon(python, cfg), get_icon(unknown, cfg)) == expected


def test_custom_icons_take_precedence(tmp_path: Path):
    _make_file(tmp_path / "main.py")
    _make_file(tmp_path / "App.VUE")

    out = _text(tmp_path, icon_style="emoji", custom_icons={"py": "P", ".vue": "V"})

    assert "├── V App.VUE" in out
    assert "└── P main.py" in out
