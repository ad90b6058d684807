import pytest
from typer.testing import CliRunner

from ugl.models import RemoteSet
from uglcli import main
from uglcli._version import __version__

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("UGL_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.delenv("UGL_DEBUG", raising=False)


class RecordingProvisioner:
    runs = []

    def __init__(self, ctx, transports=None):
        self.ctx = ctx

    def run(self, addresses):
        RecordingProvisioner.runs.append((self.ctx, list(addresses)))
        remotes = RemoteSet()
        remotes.freeze(self.ctx.branch)
        return remotes


@pytest.fixture
def recorded(monkeypatch):
    RecordingProvisioner.runs = []
    monkeypatch.setattr(main, "Provisioner", RecordingProvisioner)
    return RecordingProvisioner.runs


def test_version():
    result = runner.invoke(main.typer_app, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_addresses_in_command_line_order(tmp_path, recorded):
    result = runner.invoke(
        main.typer_app,
        [str(tmp_path / "proj"), "dev", "-l", "alice/proj", "-g", "alice/proj", "-s", "me@srv:proj"],
    )

    assert result.exit_code == 0, result.output
    ctx, addresses = recorded[0]
    assert addresses == [
        ("gitlab", "alice/proj"),
        ("github", "alice/proj"),
        ("ssh", "me@srv:proj"),
    ]
    assert ctx.branch == "dev"
    assert ctx.path == tmp_path / "proj"


def test_options_reach_the_context(tmp_path, recorded):
    result = runner.invoke(
        main.typer_app,
        [
            str(tmp_path / "proj"),
            "-n",
            "Alice",
            "-e",
            "alice@example.com",
            "-i",
            "/keys/id_a",
            "--socks",
            "127.0.0.1:1080",
        ],
    )

    assert result.exit_code == 0, result.output
    ctx, addresses = recorded[0]
    assert addresses == []
    assert ctx.branch == "main"
    assert ctx.name == "Alice"
    assert ctx.email == "alice@example.com"
    assert [str(k) for k in ctx.keys] == ["/keys/id_a"]
    assert ctx.proxy.port == 1080


def test_branch_from_config_file(tmp_path, recorded):
    config = tmp_path / "config.yaml"
    config.write_text("default_branch: trunk\n")

    result = runner.invoke(main.typer_app, [str(tmp_path / "proj"), "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert recorded[0][0].branch == "trunk"


def test_tor_and_socks_conflict(tmp_path, recorded):
    result = runner.invoke(
        main.typer_app, [str(tmp_path / "proj"), "-t", "--socks", "1080", "-g", "alice/proj"]
    )

    assert result.exit_code == 1
    assert "mutually exclusive" in result.output
    assert recorded == []


def test_bad_address_exits_with_one_line(tmp_path, monkeypatch):
    monkeypatch.setattr("ugl.provision.require_tool", lambda name: name)

    result = runner.invoke(main.typer_app, [str(tmp_path / "proj"), "-g", "alice/"])

    assert result.exit_code == 1
    assert "Error: alice/: missing repository name" in result.output
    assert not (tmp_path / "proj").exists()


def test_unexpected_error_is_one_line(tmp_path, monkeypatch):
    class BrokenProvisioner(RecordingProvisioner):
        def run(self, addresses):
            raise PermissionError("cannot create directory")

    monkeypatch.setattr(main, "Provisioner", BrokenProvisioner)

    result = runner.invoke(main.typer_app, [str(tmp_path / "proj"), "-g", "alice/proj"])

    assert result.exit_code == 1
    assert "Unexpected error: cannot create directory" in result.output
    assert "Traceback" not in result.output


def test_missing_path_is_a_usage_error():
    result = runner.invoke(main.typer_app, [])
    assert result.exit_code == 2
