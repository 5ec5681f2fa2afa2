"""
Tests for PathResolver - directory layout next to the entry script.
"""
from numberexplorer.PathResolver import CONFIG_FILE_NAME, PathResolver


class TestPathResolver:
    """Test suite for PathResolver functionality."""

    def test_paths_resolved_next_to_script(self, tmp_path):
        script_path = tmp_path / "main.py"
        script_path.write_text("")

        paths = PathResolver(script_path).paths

        root = tmp_path.resolve()
        assert paths.root_dir == root
        assert paths.models_dir == root / "models"
        assert paths.config_dir == root / "config"
        assert paths.logs_dir == root / "logs"

    def test_nested_install_directory_is_not_special(self, tmp_path):
        """Logic: an _internal/app path is treated like any other script directory."""
        script_path = tmp_path / "_internal" / "app" / "main.py"
        script_path.parent.mkdir(parents=True)
        script_path.write_text("")

        paths = PathResolver(script_path).paths

        assert paths.root_dir == script_path.parent.resolve()
        assert paths.logs_dir == script_path.parent.resolve() / "logs"

    def test_get_config_path(self, tmp_path):
        script_path = tmp_path / "main.py"
        script_path.write_text("")

        resolver = PathResolver(script_path)

        assert resolver.get_config_path() == tmp_path.resolve() / "config" / CONFIG_FILE_NAME
        assert resolver.get_config_path("other.json") == tmp_path.resolve() / "config" / "other.json"

    def test_ensure_local_dir_structure(self, tmp_path):
        script_path = tmp_path / "main.py"
        script_path.write_text("")
        resolver = PathResolver(script_path)

        resolver.ensure_local_dir_structure()

        assert (tmp_path / "models").is_dir()
        assert (tmp_path / "config").is_dir()
        assert (tmp_path / "logs").is_dir()
