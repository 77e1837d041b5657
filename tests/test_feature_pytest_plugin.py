"""Feature tests for the tmpfs pytest fixture."""

from __future__ import annotations

import textwrap

from tmpfs import TmpFs


def test_fixture_provides_open_sandbox(tmpfs):
    assert isinstance(tmpfs, TmpFs)
    assert tmpfs.root.is_dir()
    assert not tmpfs.closed


def test_fixture_removes_sandbox_after_each_test(pytester, monkeypatch):
    monkeypatch.delenv("TEST_PERSIST_FILES", raising=False)
    pytester.makeconftest('pytest_plugins = ["tmpfs.pytest_plugin"]')
    pytester.makepyfile(
        textwrap.dedent(
            """\
            ROOTS = []

            def test_uses_sandbox(tmpfs):
                tmpfs.write_file("a/b.txt", "b")
                ROOTS.append(tmpfs.root)

            def test_gets_a_fresh_sandbox(tmpfs):
                assert tmpfs.root != ROOTS[0]
                assert not ROOTS[0].exists()
                assert list(tmpfs.root.iterdir()) == []
            """
        )
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=2)


def test_fixture_keeps_sandbox_when_persist_is_set(pytester, monkeypatch):
    monkeypatch.setenv("TEST_PERSIST_FILES", "1")
    monkeypatch.setenv("TMPFS_BASE_DIR", str(pytester.path))
    pytester.makeconftest('pytest_plugins = ["tmpfs.pytest_plugin"]')
    pytester.makepyfile(
        textwrap.dedent(
            """\
            def test_writes(tmpfs):
                tmpfs.write_file("kept.txt", "kept")
            """
        )
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)
    kept = list(pytester.path.glob("tmpfs-*/kept.txt"))
    assert len(kept) == 1
