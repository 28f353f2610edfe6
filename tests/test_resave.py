"""
Tests for resave verification.
"""

from pathlib import Path

import pytest

from savedit.bridge import SerializationBridge
from savedit.commands import check_resave
from savedit.errors import DecodeError, ResaveMismatch, StreamError
from savedit.resave import ResaveReport, dump_debug_files, verify_resave


class TestResaveReport:
    def test_match(self) -> None:
        report = ResaveReport(original=b'abc', resaved=b'abc')

        assert report.matches
        assert report.first_difference is None
        assert report.describe() == 'Resave matched (3 bytes)'

    def test_first_difference(self) -> None:
        report = ResaveReport(original=b'abcdef', resaved=b'abXdef')

        assert not report.matches
        assert report.first_difference == 2

    def test_prefix(self) -> None:
        report = ResaveReport(original=b'abc', resaved=b'abcd')

        assert report.first_difference == 3
        assert 'input 3 bytes, output 4 bytes' in report.describe()


def test_verify_canonical(bridge: SerializationBridge, save_bytes: bytes) -> None:
    report = verify_resave(save_bytes, bridge)

    assert report.matches
    assert report.resaved == save_bytes


def test_verify_non_canonical(bridge: SerializationBridge) -> None:
    """Leading zeros decode fine but are not reproduced."""
    report = verify_resave(b'FAKE\nhero\n01,2', bridge)

    assert not report.matches
    assert report.resaved == b'FAKE\nhero\n1,2'
    assert report.first_difference == 10


def test_verify_decode_error(bridge: SerializationBridge) -> None:
    with pytest.raises(DecodeError):
        verify_resave(b'garbage', bridge)


def test_verdict_is_deterministic(perturbing_bridge: SerializationBridge, save_bytes: bytes) -> None:
    first = verify_resave(save_bytes, perturbing_bridge)
    second = verify_resave(save_bytes, perturbing_bridge)

    assert first == second
    assert not first.matches


def test_dump_debug_files(tmp_path: Path) -> None:
    (tmp_path / 'input.sav').write_bytes(b'stale')

    paths = dump_debug_files(ResaveReport(original=b'in', resaved=b'out'), tmp_path)

    assert paths == (tmp_path / 'input.sav', tmp_path / 'output.sav')
    assert (tmp_path / 'input.sav').read_bytes() == b'in'
    assert (tmp_path / 'output.sav').read_bytes() == b'out'


class TestCheckResave:
    def test_success(self, bridge: SerializationBridge, save_path: Path, capsys: pytest.CaptureFixture) -> None:
        report = check_resave(bridge, save_path)

        assert report.matches
        assert capsys.readouterr().out == 'Resave successful\n'

    def test_twice_same_verdict(self, bridge: SerializationBridge, save_path: Path) -> None:
        assert check_resave(bridge, save_path) == check_resave(bridge, save_path)

    def test_mismatch_without_debug(
        self, perturbing_bridge: SerializationBridge, save_path: Path, tmp_path: Path
    ) -> None:
        dump_dir = tmp_path / 'dumps'
        dump_dir.mkdir()

        with pytest.raises(ResaveMismatch, match='first difference at offset 10'):
            check_resave(perturbing_bridge, save_path, dump_dir=dump_dir)

        assert list(dump_dir.iterdir()) == []

    def test_mismatch_with_debug(
        self, perturbing_bridge: SerializationBridge, save_path: Path, save_bytes: bytes, tmp_path: Path
    ) -> None:
        dump_dir = tmp_path / 'dumps'
        dump_dir.mkdir()

        with pytest.raises(ResaveMismatch):
            check_resave(perturbing_bridge, save_path, debug=True, dump_dir=dump_dir)

        assert (dump_dir / 'input.sav').read_bytes() == save_bytes
        assert (dump_dir / 'output.sav').read_bytes() == b'FAKE\nhero\n2,2,3'

    def test_debug_defaults_to_working_directory(
        self, perturbing_bridge: SerializationBridge, save_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        workdir = tmp_path / 'work'
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        with pytest.raises(ResaveMismatch):
            check_resave(perturbing_bridge, save_path, debug=True)

        assert sorted(p.name for p in workdir.iterdir()) == ['input.sav', 'output.sav']

    def test_missing_file(self, bridge: SerializationBridge, tmp_path: Path) -> None:
        with pytest.raises(StreamError):
            check_resave(bridge, tmp_path / 'missing.sav')
