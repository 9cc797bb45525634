"""
托管块渲染和替换的测试
"""

import pytest

from vhoster.hosts_block import BLOCK_END, BLOCK_START, apply, find_block, render
from vhoster.models import ContainerRecord

USER_HOSTS = "127.0.0.1 localhost\n# my own entries\n10.0.0.5 nas.lan\n"


def _block(*lines):
    return "\n".join([BLOCK_START, *lines, BLOCK_END]) + "\n"


def test_render_one_line_per_hostname():
    records = [
        ContainerRecord("c1", ("a.local",)),
        ContainerRecord("c2", ("b.local", "c.local")),
    ]

    block = render("127.0.0.1", records)

    lines = block.splitlines()
    assert lines[0] == BLOCK_START
    assert lines[-1] == BLOCK_END
    assert sorted(lines[1:-1]) == [
        "127.0.0.1 a.local",
        "127.0.0.1 b.local",
        "127.0.0.1 c.local",
    ]


def test_render_empty_registry_keeps_markers():
    assert render("127.0.0.1", []) == f"{BLOCK_START}\n{BLOCK_END}\n"


def test_apply_appends_on_first_run():
    block = _block("127.0.0.1 a.local")

    result = apply(USER_HOSTS, block)

    assert result == USER_HOSTS + "\n" + block
    assert result.startswith(USER_HOSTS)


def test_apply_adds_missing_trailing_newline_before_appending():
    block = _block("127.0.0.1 a.local")

    result = apply("127.0.0.1 localhost", block)

    assert result == "127.0.0.1 localhost\n\n" + block


def test_apply_to_empty_file():
    block = _block()
    assert apply("", block) == block


def test_apply_replaces_only_marker_span():
    before = "127.0.0.1 localhost\r\n\n"
    after = "\n# trailing user line\n192.168.1.2 printer\n"
    old = before + _block("127.0.0.1 old.local") + after
    new_block = _block("127.0.0.1 new.local", "127.0.0.1 other.local")

    result = apply(old, new_block)

    assert result == before + new_block + after
    assert "old.local" not in result


@pytest.mark.parametrize("text", [
    USER_HOSTS,
    "",
    "no newline at end",
    USER_HOSTS + "\n" + _block("127.0.0.1 stale.local") + "10.0.0.9 after\n",
    USER_HOSTS + BLOCK_START + "\nmy own line\n",
])
def test_apply_is_idempotent(text):
    block = _block("127.0.0.1 a.local", "127.0.0.1 b.local")

    once = apply(text, block)

    assert apply(once, block) == once


def test_apply_with_only_start_marker_appends():
    text = USER_HOSTS + BLOCK_START + "\n127.0.0.1 half.local\n"
    block = _block("127.0.0.1 a.local")

    result = apply(text, block)

    assert result == text + "\n" + block


def test_end_marker_before_start_marker_is_not_a_block():
    text = BLOCK_END + "\n" + BLOCK_START + "\n"
    assert find_block(text) is None


def test_markers_must_be_whole_lines():
    text = f"# note: {BLOCK_START}\n127.0.0.1 x\n{BLOCK_END} trailing\n"
    assert find_block(text) is None


def test_end_marker_without_newline_at_eof():
    text = USER_HOSTS + _block("127.0.0.1 a.local").rstrip("\n")

    start, end = find_block(text)

    assert text[start:].startswith(BLOCK_START)
    assert end == len(text)
    assert apply(text, _block()) == USER_HOSTS + _block()


def test_empty_registry_clears_hostnames_but_keeps_markers():
    text = apply(USER_HOSTS, render("127.0.0.1", [ContainerRecord("c1", ("a.local",))]))

    cleared = apply(text, render("127.0.0.1", []))

    assert "a.local" not in cleared
    assert BLOCK_START in cleared and BLOCK_END in cleared
    assert cleared.startswith(USER_HOSTS)


def test_orphan_start_marker_keeps_user_lines():
    text = "127.0.0.1 localhost\n" + BLOCK_START + "\nmy own line\n"
    block = _block("127.0.0.1 a.local")

    once = apply(text, block)
    twice = apply(once, _block("127.0.0.1 b.local"))

    assert once == text + "\n" + block
    assert twice == text + "\n" + _block("127.0.0.1 b.local")
    assert "my own line\n" in twice
