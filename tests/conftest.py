from pathlib import Path

import pytest


def make_tree(root: Path, files: dict[str, bytes | str]) -> Path:
    """Create files (and their parent directories) under root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode('utf-8')
        path.write_bytes(content)
    return root


@pytest.fixture
def root(tmp_path):
    directory = tmp_path / "project"
    directory.mkdir()
    return directory.resolve()
