import tomllib
from pathlib import Path


def _pyproject():
    pyproject_path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    return tomllib.loads(pyproject_path.read_text(encoding="utf-8"))


def test_pyproject_declares_runtime_dependencies():
    dependencies = _pyproject()["tool"]["poetry"]["dependencies"]

    for name in ("typer", "pydantic", "pydantic-settings", "pyyaml", "rich"):
        assert name in dependencies


def test_pyproject_declares_test_extra_and_script():
    poetry = _pyproject()["tool"]["poetry"]

    assert poetry["dependencies"]["pytest"]["optional"] is True
    assert "pytest" in poetry["extras"]["test"]
    assert poetry["scripts"]["stacksync"] == "stacksync.cli.main:app"


def test_package_version_matches_pyproject():
    from stacksync import __version__

    assert _pyproject()["tool"]["poetry"]["version"] == __version__
