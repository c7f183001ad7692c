from __future__ import annotations

import threading
from pathlib import Path

import pytest
import yaml

from speccascade.core.utils.io import (
    LockTimeoutError,
    acquire_file_lock,
    atomic_write,
    ensure_directory,
    is_locked,
    iter_yaml_files,
    read_text,
    read_yaml,
    write_text,
)


def test_write_text_creates_parents_and_overwrites(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "out.txt"
    write_text(out, "one")
    write_text(out, "two")
    assert read_text(out) == "two"
    assert [p.name for p in out.parent.iterdir()] == ["out.txt"]


def test_atomic_write_failure_keeps_previous_content(tmp_path: Path) -> None:
    out = tmp_path / "out.txt"
    write_text(out, "original")

    def boom(f) -> None:
        f.write(b"partial")
        raise RuntimeError("write failed")

    with pytest.raises(RuntimeError):
        atomic_write(out, boom)

    assert out.read_text() == "original"
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_concurrent_atomic_writes_leave_whole_content(tmp_path: Path) -> None:
    out = tmp_path / "race.txt"

    def writer(value: str) -> None:
        for _ in range(30):
            write_text(out, value * 100)

    threads = [threading.Thread(target=writer, args=(v,)) for v in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert out.read_text() in ("a" * 100, "b" * 100)


def test_read_text_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_text(tmp_path / "nope.txt")


def test_ensure_directory_rejects_files(tmp_path: Path) -> None:
    f = tmp_path / "file"
    f.write_text("x")
    with pytest.raises(NotADirectoryError):
        ensure_directory(f)
    assert ensure_directory(tmp_path / "a" / "b").is_dir()


def test_lock_times_out_while_held(tmp_path: Path) -> None:
    target = tmp_path / "store" / "write"
    with acquire_file_lock(target, timeout=1.0):
        assert is_locked(target)
        errors = []

        def contender() -> None:
            try:
                with acquire_file_lock(target, timeout=0.2):
                    pass
            except LockTimeoutError as exc:
                errors.append(exc)

        t = threading.Thread(target=contender)
        t.start()
        t.join()
        assert len(errors) == 1

    assert not is_locked(target)


def test_lock_rejects_non_positive_timeout(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        with acquire_file_lock(tmp_path / "x", timeout=0):
            pass


def test_read_yaml_loads_and_reports_errors(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("b: [1, 2]\na: |-\n  multi\n  line\n")
    assert read_yaml(path) == {"a": "multi\nline", "b": [1, 2]}

    path.write_text("a: [broken\n")
    assert read_yaml(path, default={}) == {}
    with pytest.raises(yaml.YAMLError):
        read_yaml(path, raise_on_error=True)


def test_iter_yaml_files_prefers_yaml_extension(tmp_path: Path) -> None:
    for name in ("b.yml", "b.yaml", "a.yml", "notes.txt"):
        (tmp_path / name).write_text("x: 1\n")
    assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yml", "b.yaml"]
