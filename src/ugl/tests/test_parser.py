import pytest

from ugl.address import join_address, parse_address, split_address, strip_git_suffix
from ugl.exceptions import InvalidPortError, ParseError


def test_full_address_with_port_and_branch():
    remote = parse_address("gitlab", "git@my-gitlab.tld:22:alice/proj@dev")

    assert remote.user == "git"
    assert remote.host == "my-gitlab.tld"
    assert remote.port == 22
    assert remote.path == "alice"
    assert remote.name == "proj"
    assert remote.branch == "dev"
    assert remote.scope == ""


def test_short_address_with_scope():
    remote = parse_address("github", "alice/proj%public")

    assert remote.host == ""
    assert remote.user == ""
    assert remote.path == "alice"
    assert remote.name == "proj"
    assert remote.scope == "public"


def test_empty_scope_means_public():
    assert parse_address("github", "alice/proj%").scope == "public"


def test_last_percent_introduces_scope():
    remote = parse_address("bitbucket", "ws/proj%a%myteam")
    assert remote.name == "proj%a"
    assert remote.scope == "myteam"


def test_name_only():
    remote = parse_address("keybase", "proj")
    assert remote.path == ""
    assert remote.name == "proj"
    assert remote.port == 22


def test_nested_path():
    remote = parse_address("gitlab", "group/sub/proj")
    assert remote.path == "group/sub"
    assert remote.name == "proj"


def test_absolute_path_on_host():
    remote = parse_address("ssh", "me@srv:2222:/srv/git/proj.git@main")
    assert remote.port == 2222
    assert remote.path == "/srv/git"
    assert remote.name == "proj"
    assert remote.branch == "main"


def test_host_without_user():
    remote = parse_address("ssh", "srv:repos/proj")
    assert remote.user == ""
    assert remote.host == "srv"


def test_scope_and_branch_together():
    remote = parse_address("bitbucket", "ws/proj%myteam@feature/x")
    assert remote.scope == "myteam"
    assert remote.branch == "feature/x"
    assert remote.name == "proj"


def test_provisional_label_and_id():
    remote = parse_address("ssh", "me@srv:proj", index=3)
    assert remote.id == 3
    assert remote.label == "upstream3"
    assert remote.spec == "me@srv:proj"
    assert remote.url == ""
    assert not remote.checked


@pytest.mark.parametrize(
    "name, expected",
    [
        ("proj", "proj"),
        ("proj.git", "proj"),
        ("proj.git.git", "proj"),
        ("proj.github", "proj.github"),
        (".git", ""),
    ],
)
def test_strip_git_suffix(name, expected):
    assert strip_git_suffix(name) == expected
    # stripping twice changes nothing
    assert strip_git_suffix(strip_git_suffix(name)) == expected


def test_git_suffix_stripped_before_scope_is_irrelevant():
    assert parse_address("github", "alice/proj.git%private").name == "proj"


@pytest.mark.parametrize(
    "fields",
    [
        dict(name="proj"),
        dict(name="proj", path="alice"),
        dict(name="proj", path="alice", scope="private"),
        dict(name="proj", path="a/b", branch="dev"),
        dict(name="proj", path="alice", host="srv", port=22),
        dict(name="proj", path="alice", user="git", host="srv", port=2200, branch="x"),
        dict(name="proj", path="/srv/git", user="me", host="srv", port=22, scope="t"),
    ],
)
def test_join_then_split_gives_the_fields_back(fields):
    parts = split_address(join_address(**fields))

    assert parts.name == fields["name"]
    assert parts.path == fields.get("path", "")
    assert parts.user == fields.get("user", "")
    assert parts.host == fields.get("host", "")
    assert parts.port == str(fields.get("port", 22))
    assert parts.scope == fields.get("scope", "")
    assert parts.branch == fields.get("branch", "")


class TestErrors:
    def test_unknown_backend(self):
        with pytest.raises(ParseError, match="unknown backend"):
            parse_address("svn", "alice/proj")

    @pytest.mark.parametrize("address", ["", "   "])
    def test_empty_address(self, address):
        with pytest.raises(ParseError):
            parse_address("github", address)

    def test_surrounding_whitespace(self):
        with pytest.raises(ParseError):
            parse_address("github", " alice/proj")

    @pytest.mark.parametrize("address", ["alice/", "srv:alice/", "alice/%private", "@dev"])
    def test_missing_name(self, address):
        with pytest.raises(ParseError, match="missing repository name"):
            parse_address("ssh", address)

    @pytest.mark.parametrize("port", ["0", "65535", "99999", "abc", "123456", "-1"])
    def test_invalid_port(self, port):
        with pytest.raises(InvalidPortError):
            parse_address("ssh", f"me@srv:{port}:/srv/proj")

    def test_error_names_the_address(self):
        with pytest.raises(ParseError) as exc:
            parse_address("ssh", "me@srv:alice/")
        assert str(exc.value).startswith("me@srv:alice/: ")
