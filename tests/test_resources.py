"""Tests for roost.resources — per-instance text resource cache."""

from pathlib import Path

import pytest

from roost.resources import ResourceLoader


@pytest.fixture
def root(tmp_path: Path) -> Path:
    (tmp_path / "views").mkdir()
    (tmp_path / "views" / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    return tmp_path


class TestResourceLoader:
    def test_get(self, root: Path) -> None:
        assert ResourceLoader(root).get("views/index.html") == "<h1>Home</h1>"

    def test_leading_slash(self, root: Path) -> None:
        assert ResourceLoader(root).get("/views/index.html") == "<h1>Home</h1>"

    def test_cached_after_first_read(self, root: Path) -> None:
        loader = ResourceLoader(root)
        loader.get("views/index.html")
        (root / "views" / "index.html").write_text("changed")
        assert loader.get("views/index.html") == "<h1>Home</h1>"
        assert "views/index.html" in loader
        assert len(loader) == 1

    def test_remove_rereads(self, root: Path) -> None:
        loader = ResourceLoader(root)
        loader.get("views/index.html")
        (root / "views" / "index.html").write_text("changed")
        loader.remove("views/index.html")
        assert loader.get("views/index.html") == "changed"

    def test_clear(self, root: Path) -> None:
        loader = ResourceLoader(root)
        loader.get("views/index.html")
        loader.clear()
        assert len(loader) == 0

    def test_caches_are_per_instance(self, root: Path) -> None:
        first = ResourceLoader(root)
        first.get("views/index.html")
        assert len(ResourceLoader(root)) == 0

    def test_missing(self, root: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ResourceLoader(root).get("views/missing.html")

    def test_search_order(self, root: Path, tmp_path_factory: pytest.TempPathFactory) -> None:
        other = tmp_path_factory.mktemp("other")
        (other / "views").mkdir()
        (other / "views" / "index.html").write_text("other")
        (other / "only.txt").write_text("only here")
        loader = ResourceLoader(root, other)
        assert loader.get("views/index.html") == "<h1>Home</h1>"
        assert loader.get("only.txt") == "only here"

    def test_traversal_is_refused(self, root: Path) -> None:
        (root.parent / "secret.txt").write_text("secret")
        assert ResourceLoader(root).find("../secret.txt") is None
