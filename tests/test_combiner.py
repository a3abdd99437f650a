import builtins

import pytest

from flatten.combiner import (
    NON_UTF8_PLACEHOLDER,
    calculate_directory_size,
    combine_files,
    decode_content,
    format_block,
)
from flatten.filters import FilterSet

from conftest import make_tree


def test_format_block_layout():
    block = format_block("src/main.rs", b'fn main() { println!("Hello, world!"); }\n')
    assert block == (
        "## src/main.rs\n"
        "```rust\n"
        'fn main() { println!("Hello, world!"); }\n'
        "```\n"
        "\n"
    )


def test_empty_file_has_no_content_line():
    assert format_block("empty_file.txt", b"") == "## empty_file.txt\n```plain text\n```\n\n"


def test_missing_trailing_newline_is_added():
    assert format_block("notes", b"no newline") == "## notes\n```plain text\nno newline\n```\n\n"


def test_non_utf8_content_becomes_placeholder():
    assert decode_content(b"\xff\xfe\xfd") == NON_UTF8_PLACEHOLDER
    block = format_block("non_utf8_file.bin", b"\xff\xfe\xfd")
    body = block.split("\n")[2]
    assert body == NON_UTF8_PLACEHOLDER


def test_size_counts_only_admitted_files(root):
    make_tree(root, {"visible.txt": b"0123456789", ".hidden.txt": b"0123456789"})
    filter_set = FilterSet.build(root)
    assert calculate_directory_size(root, filter_set) == 10
    assert calculate_directory_size(root, filter_set, allow_hidden=True) == 20


def test_size_respects_excludes(root):
    make_tree(root, {"test1.txt": "This is test file 1\n", "test2.rs": "fn main() {}\n"})
    filter_set = FilterSet.build(root, excludes=["test1.txt"])
    assert calculate_directory_size(root, filter_set) == (root / "test2.rs").stat().st_size


def test_combine_writes_blocks_in_walk_order(root, tmp_path):
    make_tree(root, {
        "test1.txt": "This is test file 1\n",
        "test2.rs": 'fn main() { println!("Hello, world!"); }\n',
        "sub/empty.py": "",
    })
    output = tmp_path / "out.txt"
    count = combine_files(root, output, FilterSet.build(root))

    assert count == 3
    assert output.read_text(encoding='utf-8') == (
        "## test1.txt\n```plain text\nThis is test file 1\n```\n\n"
        '## test2.rs\n```rust\nfn main() { println!("Hello, world!"); }\n```\n\n'
        "## sub/empty.py\n```python\n```\n\n"
    )


def test_output_inside_root_excludes_itself(root):
    make_tree(root, {"a.txt": "a\n"})
    output = root / "output.txt"
    combine_files(root, output, FilterSet.build(root))
    combine_files(root, output, FilterSet.build(root))

    content = output.read_text(encoding='utf-8')
    assert "## a.txt" in content
    assert "output.txt" not in content


def test_repeated_runs_are_identical(root, tmp_path):
    make_tree(root, {"a.py": "print('a')\n", "b/c.md": "# c\n", "d.bin": b"\x00\xff"})
    first, second = tmp_path / "first.txt", tmp_path / "second.txt"
    filter_set = FilterSet.build(root)
    combine_files(root, first, filter_set)
    combine_files(root, second, FilterSet.build(root))
    assert first.read_bytes() == second.read_bytes()


def test_include_overrides_exclude_in_output(root, tmp_path):
    make_tree(root, {"a.txt": "a\n", "b.txt": "b\n"})
    output = tmp_path / "out.txt"
    combine_files(root, output, FilterSet.build(root, excludes=["a.txt"], includes=["a.txt"]))
    assert "## a.txt" in output.read_text(encoding='utf-8')


def test_ignored_directory_absent_from_output(root, tmp_path):
    make_tree(root, {
        ".gitignore": "node_modules\n",
        "index.js": "console.log(1);\n",
        "node_modules/pkg/index.js": "module.exports = 1;\n",
        "node_modules/top.js": "x\n",
    })
    output = tmp_path / "out.txt"
    combine_files(root, output, FilterSet.build(root))
    content = output.read_text(encoding='utf-8')
    assert "## index.js" in content
    assert "node_modules" not in content


def test_read_error_propagates(root, tmp_path, monkeypatch):
    make_tree(root, {"a.txt": "a\n", "bad.txt": "b\n"})
    real_open = builtins.open

    def failing_open(file, *args, **kwargs):
        if str(file).endswith("bad.txt"):
            raise PermissionError(13, "Permission denied", str(file))
        return real_open(file, *args, **kwargs)

    monkeypatch.setattr("flatten.combiner.open", failing_open, raising=False)
    with pytest.raises(PermissionError):
        combine_files(root, tmp_path / "out.txt", FilterSet.build(root))


def test_crlf_content_written_unchanged(root, tmp_path):
    make_tree(root, {"win.bat": b"echo one\r\necho two\r\n"})
    output = tmp_path / "out.txt"
    combine_files(root, output, FilterSet.build(root))
    assert output.read_bytes() == b"## win.bat\n```batch file\necho one\r\necho two\r\n```\n\n"
