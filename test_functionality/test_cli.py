from typer.testing import CliRunner

from adapters.cli.main import __version__, app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_tools_lists_customer_service_schema(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("VECTORSTORE_PATH", str(tmp_path / "vs"))
    result = runner.invoke(app, ["tools", "--variant", "customer_service", "--json"])
    assert result.exit_code == 0
    assert "queryEngineTool" in result.output
    assert "draftSlackMessage" not in result.output


def test_tools_rejects_unknown_variant(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    result = runner.invoke(app, ["tools", "--variant", "sales"])
    assert result.exit_code == 1
