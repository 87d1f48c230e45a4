import pytest

from snipsync.exceptions import ConfigError, ParseError
from snipsync.snippet.model import Snippet
from snipsync.snippet.store import (
    SnippetStore,
    dump_snippets,
    filter_by_tags,
    order_snippets,
    parse_snippets,
)


PRIMARY = '''
[[snippets]]
description = "list files"
command = "ls -la"
tags = ["shell"]
output = ""

[[snippets]]
description = "recent commits"
command = "git log --oneline"
tags = ["git", "vcs"]
output = "abc123 first commit"
'''

AUX = '''
[[snippets]]
description = "pods"
command = "kubectl get pods"
tags = ["k8s"]
output = ""
'''


@pytest.fixture
def primary_file(tmp_path):
    path = tmp_path / "snippet.toml"
    path.write_text(PRIMARY)
    return path


@pytest.fixture
def aux_dir(tmp_path):
    directory = tmp_path / "snippets.d"
    directory.mkdir()
    (directory / "k8s.toml").write_text(AUX)
    return directory


def _commands(snippets):
    return [s.command for s in snippets]


def test_round_trip_keeps_every_field():
    snippets = [
        Snippet(command="echo 'a'\necho \"b\"", description="two lines", tags=["x", "x", "y"], output="a\nb"),
        Snippet(command="date", description="", tags=[], output=""),
    ]

    reparsed = parse_snippets(dump_snippets(snippets))

    assert reparsed == snippets


def test_dump_never_writes_origin_and_uses_four_keys():
    text = dump_snippets([Snippet(command="ls", origin="/somewhere/file.toml")])

    assert "origin" not in text
    assert "/somewhere" not in text
    keys = [line.split("=")[0].strip() for line in text.splitlines() if "=" in line]
    assert keys == ["description", "command", "tags", "output"]


def test_dump_writes_array_of_tables():
    text = dump_snippets([Snippet(command="ls"), Snippet(command="pwd", tags=["a"])])

    assert text.startswith("[[snippets]]\n")
    assert text.count("[[snippets]]") == 2
    assert "{" not in text
    assert _commands(parse_snippets(text)) == ["ls", "pwd"]


def test_dump_keeps_multiline_commands_readable():
    text = dump_snippets([Snippet(command="echo a\necho b")])

    assert "echo a\necho b" in text


@pytest.mark.parametrize(
    "value",
    [
        "a\r\nb",
        "line\r",
        "\r",
        'say """hi"""',
        'ends with quote"',
        "tab\there",
        "back\\slash\nnext",
    ],
)
def test_round_trip_tricky_strings(value):
    snippets = [Snippet(command=value, description=value, tags=[value], output=value)]

    assert parse_snippets(dump_snippets(snippets)) == snippets


def test_dump_empty_collection():
    assert parse_snippets(dump_snippets([])) == []


def test_parse_ignores_unknown_keys_and_reads_legacy_tag():
    text = '''
[[snippets]]
command = "uptime"
tag = ["sys"]
color = "red"
'''
    (snippet,) = parse_snippets(text)

    assert snippet.command == "uptime"
    assert snippet.tags == ["sys"]
    assert snippet.description == ""


def test_parse_rejects_malformed_toml():
    with pytest.raises(ParseError) as exc_info:
        parse_snippets("[[snippets]\ncommand = ", origin="bad.toml")

    assert "bad.toml" in str(exc_info.value)
    assert exc_info.value.path == "bad.toml"


def test_parse_rejects_wrong_types():
    with pytest.raises(ParseError):
        parse_snippets('[[snippets]]\ncommand = "ls"\ntags = "shell"\n')


@pytest.mark.parametrize(
    "sort_by, expected",
    [
        ("command", ["c", "b", "a"]),
        ("+command", ["c", "b", "a"]),
        ("-command", ["a", "b", "c"]),
        ("recency", ["b", "a", "c"]),
        ("-recency", ["c", "a", "b"]),
        ("nonsense", ["b", "a", "c"]),
    ],
)
def test_order_by_command(sort_by, expected):
    snippets = [Snippet(command=c) for c in ["b", "a", "c"]]

    order_snippets(snippets, sort_by)

    assert _commands(snippets) == expected


def test_order_by_description_is_stable():
    snippets = [
        Snippet(command="1", description="same"),
        Snippet(command="2", description="other"),
        Snippet(command="3", description="same"),
    ]

    order_snippets(snippets, "description")

    assert _commands(snippets) == ["1", "3", "2"]


def test_order_by_output_ascending():
    snippets = [Snippet(command="1", output="z"), Snippet(command="2", output="a")]

    order_snippets(snippets, "-output")

    assert _commands(snippets) == ["2", "1"]


def test_filter_by_tags():
    untagged = Snippet(command="untagged", tags=[])
    tagged = Snippet(command="tagged", tags=["x", "y"])
    other = Snippet(command="other", tags=["X"])

    assert filter_by_tags([untagged, tagged, other], ["x"]) == [tagged]
    assert filter_by_tags([untagged, tagged, other], ["y", "z"]) == [tagged]
    assert filter_by_tags([untagged, tagged, other], []) == []


def test_filter_keeps_origin():
    snippet = Snippet(command="ls", tags=["a"], origin="/aux/file.toml")

    (kept,) = filter_by_tags([snippet], ["a"])

    assert kept.origin == "/aux/file.toml"


def test_load_primary_only(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])

    snippets = store.load(include_auxiliary=False)

    assert _commands(snippets) == ["ls -la", "git log --oneline"]
    assert all(s.origin == str(primary_file) for s in snippets)


def test_load_with_auxiliary_dirs_sets_origin(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])

    snippets = store.load(include_auxiliary=True)

    assert _commands(snippets) == ["ls -la", "git log --oneline", "kubectl get pods"]
    assert [s.origin for s in snippets] == [
        str(primary_file),
        str(primary_file),
        str(aux_dir / "k8s.toml"),
    ]


def test_load_applies_sort(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir], sort_by="-command")

    snippets = store.load(include_auxiliary=True)

    assert _commands(snippets) == ["git log --oneline", "kubectl get pods", "ls -la"]


def test_load_missing_primary_file(tmp_path):
    store = SnippetStore(tmp_path / "missing.toml")

    with pytest.raises(ConfigError) as exc_info:
        store.load()

    assert "snipsync configure" in str(exc_info.value)


def test_load_missing_snippet_dir(primary_file, tmp_path):
    store = SnippetStore(primary_file, [tmp_path / "nope"])

    with pytest.raises(ConfigError):
        store.load(include_auxiliary=True)

    # Directories are not checked when they are not requested
    assert len(store.load(include_auxiliary=False)) == 2


def test_load_fails_when_any_file_is_malformed(primary_file, aux_dir):
    (aux_dir / "broken.toml").write_text("[[snippets]\n")
    store = SnippetStore(primary_file, [aux_dir])

    with pytest.raises(ParseError) as exc_info:
        store.load(include_auxiliary=True)

    assert "broken.toml" in str(exc_info.value)


def test_load_skips_files_without_snippet_extension(primary_file, aux_dir):
    (aux_dir / ".k8s.toml.swp").write_bytes(b"\xff\xfe\x00binary")
    (aux_dir / "README.md").write_text("# notes\n")
    (aux_dir / ".DS_Store").write_bytes(b"\x00\x01")
    store = SnippetStore(primary_file, [aux_dir])

    snippets = store.load(include_auxiliary=True)

    assert _commands(snippets) == ["ls -la", "git log --oneline", "kubectl get pods"]


def test_load_uses_configured_extension(primary_file, aux_dir):
    (aux_dir / "extra.snip").write_text('[[snippets]]\ncommand = "hostname"\n')
    store = SnippetStore(primary_file, [aux_dir], extension=".snip")

    snippets = store.load(include_auxiliary=True)

    assert _commands(snippets) == ["ls -la", "git log --oneline", "hostname"]


def test_load_undecodable_file_is_a_parse_error(primary_file, aux_dir):
    (aux_dir / "latin1.toml").write_bytes(b'[[snippets]]\ncommand = "caf\xe9"\n')
    store = SnippetStore(primary_file, [aux_dir])

    with pytest.raises(ParseError) as exc_info:
        store.load(include_auxiliary=True)

    assert exc_info.value.path == str(aux_dir / "latin1.toml")


def test_load_empty_primary_file(tmp_path):
    path = tmp_path / "snippet.toml"
    path.touch()

    assert SnippetStore(path).load() == []


def test_save_writes_back_to_each_origin(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])
    snippets = store.load(include_auxiliary=True)
    snippets[0].description = "list all files"

    store.save(snippets)

    primary = parse_snippets(primary_file.read_text())
    aux = parse_snippets((aux_dir / "k8s.toml").read_text())
    assert _commands(primary) == ["ls -la", "git log --oneline"]
    assert primary[0].description == "list all files"
    assert _commands(aux) == ["kubectl get pods"]


def test_save_routes_new_snippets_to_primary_file(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])
    snippets = store.load(include_auxiliary=True)
    snippets.append(Snippet(command="whoami", tags=["sys"]))

    store.save(snippets)

    assert _commands(parse_snippets(primary_file.read_text())) == [
        "ls -la",
        "git log --oneline",
        "whoami",
    ]
    assert _commands(parse_snippets((aux_dir / "k8s.toml").read_text())) == ["kubectl get pods"]


def test_save_then_load_reproduces_content(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])
    before = store.load(include_auxiliary=True)

    store.save(before)
    after = store.load(include_auxiliary=True)

    assert after == before
    assert [s.origin for s in after] == [s.origin for s in before]


def test_to_text_ignores_origin(primary_file, aux_dir):
    store = SnippetStore(primary_file, [aux_dir])
    snippets = store.load(include_auxiliary=True)

    text = store.to_text(snippets)

    assert _commands(parse_snippets(text)) == _commands(snippets)
