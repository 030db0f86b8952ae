import pytest

from rb_cli.config import ConfigError, LintConfig
from rb_linter.registry import RuleRegistry


def test_defaults_without_file(tmp_path):
    config = LintConfig(tmp_path / "missing.toml")
    assert config.select is None
    assert config.ignore == []
    assert config.max_fix_passes == 10
    assert config.source is None


def test_load_bare_table(tmp_path):
    path = tmp_path / ".rblint.toml"
    path.write_text('select = ["Performance"]\nignore = []\nmax-fix-passes = 3\n')

    config = LintConfig(path)
    assert config.select == ["Performance"]
    assert config.max_fix_passes == 3
    assert config.source == path


def test_load_tool_table_from_pyproject(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text('[tool.rblint]\nignore = ["Performance/UseZipToWrapArrayContents"]\n')

    config = LintConfig(path)
    assert config.ignore == ["Performance/UseZipToWrapArrayContents"]
    assert config.apply_to_registry(RuleRegistry()) == []


def test_invalid_toml_raises(tmp_path):
    path = tmp_path / ".rblint.toml"
    path.write_text("select = [")
    with pytest.raises(ConfigError):
        LintConfig(path)


@pytest.mark.parametrize(
    "content",
    ['select = "Performance"', "ignore = [1]", "max-fix-passes = 0", "max-fix-passes = true"],
)
def test_invalid_values_raise(tmp_path, content):
    path = tmp_path / ".rblint.toml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        LintConfig(path)


def test_discover_walks_up_parents(tmp_path):
    (tmp_path / ".rblint.toml").write_text("max-fix-passes = 4\n")
    nested = tmp_path / "app" / "models"
    nested.mkdir(parents=True)

    assert LintConfig.discover(nested).max_fix_passes == 4


def test_discover_skips_pyproject_without_section(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
    config = LintConfig.discover(tmp_path)
    assert config.source is None


def test_registry_selection():
    registry = RuleRegistry()
    assert len(registry.get_enabled_rules()) == 1
    assert len(registry.get_enabled_rules(select=["Performance"])) == 1
    assert len(registry.get_enabled_rules(select=["use-zip-to-wrap-array-contents"])) == 1
    assert registry.get_enabled_rules(select=["Style"]) == []
    assert registry.get_enabled_rules(ignore=["Performance"]) == []
    assert registry.get_rule("Performance/UseZipToWrapArrayContents") is not None


def test_registry_rejects_duplicate_ids():
    registry = RuleRegistry()
    with pytest.raises(ValueError):
        registry.register(registry.get_all_rules()[0])
