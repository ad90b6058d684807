"""Shared fixtures: fake collaborators and an isolated git environment."""

import shutil
import subprocess
from pathlib import Path

import httpx
import pytest

from ugl.exceptions import MissingToolError
from ugl.models import InvocationContext
from ugl.transport import KeybaseStatus, SSHClient, SSHResult, Transports
from ugl.transport.keybase import parse_repo_urls

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class FakeSSH:
    """Records calls; answers with `responses[host]` or a success"""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def run(self, user, host, port=22, command=None):
        self.calls.append((user, host, port, command))
        return self.responses.get(host, SSHResult(0, ""))

    def command_line(self):
        return "ssh"


class FakeHttp:
    def __init__(self, statuses=None, default=200):
        self.statuses = statuses or {}
        self.default = default
        self.posts = []
        self.post_status = 201
        self.post_text = "{}"
        self.json = {"IsTor": True}
        self.json_by_url = {}
        self.gets = []

    def status(self, url):
        return self.statuses.get(url, self.default)

    def get_json(self, url, *, token=None):
        self.gets.append((url, token))
        return self.json_by_url.get(url, self.json)

    def post_json(self, url, payload, *, token=None, auth=None):
        self.posts.append((url, payload, token, auth))
        return httpx.Response(self.post_status, text=self.post_text)


class FakeProbe:
    def __init__(self, banner=b"SSH"):
        self.banner = banner
        self.reads = []

    def read(self, host, port, nbytes):
        self.reads.append((host, port))
        return self.banner[:nbytes]

    def connect(self, host, port):
        pass


class FakeKeybase:
    def __init__(self, username="", teams=(), repos=""):
        self.state = KeybaseStatus(
            Username=username, LoggedIn=bool(username), SessionIsValid=bool(username)
        )
        self.teams = set(teams)
        self.repos = repos
        self.calls = []
        self.installed = True

    def require(self, spec=None):
        if not self.installed:
            raise MissingToolError("keybase", spec)

    def status(self):
        return self.state

    def login(self, username):
        self.calls.append(("login", username))
        self.state = KeybaseStatus(Username=username, LoggedIn=True, SessionIsValid=True)

    def logout(self):
        self.calls.append(("logout",))
        self.state = KeybaseStatus()

    def team_memberships(self):
        return self.teams

    def list_repos(self):
        return parse_repo_urls(self.repos)

    def create_repo(self, name, team=None):
        self.calls.append(("create", name, team))


@pytest.fixture
def transports():
    return Transports(ssh=FakeSSH(), http=FakeHttp(), probe=FakeProbe(), keybase=FakeKeybase())


@pytest.fixture
def ctx(tmp_path):
    return InvocationContext(path=tmp_path / "work", branch="main")


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Keep the user's global git config out of the tests"""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("[init]\n\tdefaultBranch = master\n")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    return global_config


def local_shell_ssh(home: Path) -> SSHClient:
    """SSHClient whose 'remote' commands run locally with cwd=home"""

    def runner(args, **kwargs):
        command = args[-1] if "-T" not in args else "true"
        return subprocess.run(["sh", "-c", command], cwd=home, **kwargs)

    return SSHClient(runner=runner)
