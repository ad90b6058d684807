import pytest

from conftest import FakeHttp, FakeProbe
from ugl.address import (
    AddressValidator,
    check_proxy,
    is_valid_branch,
    parse_address,
    validate_branch,
    validate_port,
    validate_user,
)
from ugl.exceptions import (
    InvalidBranchError,
    InvalidPortError,
    InvalidUserError,
    TransportError,
    UnreachableHostError,
    UnreachableProxyError,
)
from ugl.models import ProxyConfig


@pytest.mark.parametrize("raw, expected", [("1", 1), ("22", 22), ("65534", 65534), (2222, 2222)])
def test_valid_ports(raw, expected):
    assert validate_port(raw) == expected


@pytest.mark.parametrize("raw", ["0", "00000", "65535", "100000", "", "1e3", " 22", "+22"])
def test_invalid_ports(raw):
    with pytest.raises(InvalidPortError):
        validate_port(raw, "me@srv:proj")


@pytest.mark.parametrize("user", ["", "git", "a.b_c-d", "User42"])
def test_valid_users(user):
    validate_user(user)


@pytest.mark.parametrize("user", ["a b", "a/b", "a:b", "émile"])
def test_invalid_users(user):
    with pytest.raises(InvalidUserError):
        validate_user(user)


@pytest.mark.parametrize("branch", ["main", "dev", "feature/x", "v1.0", "release-2024", "a@b"])
def test_valid_branches(branch):
    assert is_valid_branch(branch)


@pytest.mark.parametrize(
    "branch",
    [
        "",
        "@",
        "-x",
        "x/",
        "x.",
        "a..b",
        "a@{b",
        "a//b",
        "a b",
        "a~b",
        "a^b",
        "a:b",
        "a?b",
        "a*b",
        "a[b",
        "a\\b",
        ".hidden",
        "x/.y",
        "x.lock",
        "x/y.lock/z",
    ],
)
def test_invalid_branches(branch):
    assert not is_valid_branch(branch)


def test_empty_branch_is_allowed_on_addresses():
    validate_branch("")
    with pytest.raises(InvalidBranchError):
        validate_branch("a..b")


class TestAddressValidator:
    def test_accepts_ssh_banner(self):
        probe = FakeProbe(b"SSH-2.0-OpenSSH_9.6")
        remote = parse_address("ssh", "me@srv:2222:/srv/proj")

        AddressValidator(probe).validate(remote)

        assert probe.reads == [("srv", 2222)]

    def test_rejects_other_banner(self):
        validator = AddressValidator(FakeProbe(b"HTTP/1.1"))
        with pytest.raises(UnreachableHostError):
            validator.validate(parse_address("ssh", "me@srv:proj"))

    def test_unreachable_host(self):
        class DeadProbe(FakeProbe):
            def read(self, host, port, nbytes):
                raise TransportError("connection refused")

        with pytest.raises(UnreachableHostError, match="connection refused"):
            AddressValidator(DeadProbe()).validate(parse_address("ssh", "me@srv:proj"))

    def test_no_probe_without_host(self):
        probe = FakeProbe()
        AddressValidator(probe).validate(parse_address("github", "alice/proj"))
        assert probe.reads == []

    def test_invalid_user_in_address(self):
        with pytest.raises(InvalidUserError):
            AddressValidator(FakeProbe()).validate(parse_address("ssh", "a b@srv:proj"))

    def test_invalid_branch_in_address(self):
        with pytest.raises(InvalidBranchError):
            AddressValidator(FakeProbe()).validate(parse_address("github", "alice/proj@a..b"))


class TestCheckProxy:
    def test_tor_ok(self):
        check_proxy(ProxyConfig(kind="tor"), FakeHttp(), FakeProbe())

    def test_tor_not_routing_through_tor(self):
        http = FakeHttp()
        http.json = {"IsTor": False, "IP": "203.0.113.7"}
        with pytest.raises(UnreachableProxyError, match="does not exit via Tor"):
            check_proxy(ProxyConfig(kind="tor"), http, FakeProbe())

    def test_tor_down(self):
        class DownHttp(FakeHttp):
            def get_json(self, url):
                raise TransportError("proxy refused connection")

        with pytest.raises(UnreachableProxyError):
            check_proxy(ProxyConfig(kind="tor"), DownHttp(), FakeProbe())

    def test_socks_only_needs_a_connection(self):
        http = FakeHttp()
        http.json = {"IsTor": False}
        check_proxy(ProxyConfig(port=1080, kind="socks"), http, FakeProbe())

    def test_socks_down(self):
        class DeadProbe(FakeProbe):
            def connect(self, host, port):
                raise TransportError("connection refused")

        with pytest.raises(UnreachableProxyError, match="127.0.0.1:1080"):
            check_proxy(ProxyConfig(port=1080, kind="socks"), FakeHttp(), DeadProbe())
