"""
bftool CLI tests — argument handling, bin/sim dispatch and exit codes.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import pytest
import bftool


def _stdin(monkeypatch, data: bytes):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


class TestBin:
    def test_file_to_stdout(self, tmp_path, capsys):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"++.")
        assert bftool.main(["bin", str(src)]) == 0
        out = capsys.readouterr().out
        assert out == "v3.0 hex words plain\n0 1 2 2 4 6 3 7 2 6 7 \n"

    def test_output_file(self, tmp_path):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"+[-]")
        dst = tmp_path / "prog.rom"
        assert bftool.main(["bin", str(src), "-o", str(dst)]) == 0
        lines = dst.read_text().split("\n")
        assert lines[0] == "v3.0 hex words plain"
        assert lines[1].split() == ["0", "1", "2", "6", "3", "7", "6", "3", "7", "2", "6", "7"]

    def test_stdin_source(self, monkeypatch, capsys):
        _stdin(monkeypatch, b"><")
        assert bftool.main(["bin"]) == 0
        assert capsys.readouterr().out.split("\n")[1].split() == \
            ["0", "1", "0", "1", "6", "3", "7", "2", "6", "7"]

    def test_missing_file(self, tmp_path, capsys):
        assert bftool.main(["bin", str(tmp_path / "nope.bf")]) == 1
        assert "Error opening file" in capsys.readouterr().err

    def test_two_files_rejected(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            bftool.main(["bin", "a.bf", "b.bf"])
        assert exc.value.code == 2


class TestSim:
    def test_runs_program(self, tmp_path, monkeypatch, capfdbinary):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"++++++++[>++++++++<-]>+.")
        _stdin(monkeypatch, b"")
        assert bftool.main(["sim", str(src)]) == 0
        assert capfdbinary.readouterr().out == b"A"

    def test_wide_cells(self, tmp_path, monkeypatch, capfdbinary):
        # 256 increments: 0 in 8-bit cells, 256 (low byte 0, non-zero) in 16-bit
        src = tmp_path / "prog.bf"
        src.write_bytes(b"+" * 256 + b"[>+++<[-]]>.")
        _stdin(monkeypatch, b"")
        assert bftool.main(["sim", "-16b", str(src)]) == 0
        assert capfdbinary.readouterr().out == b"\x03"

    def test_default_width_is_8(self, tmp_path, monkeypatch, capfdbinary):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"+" * 256 + b"[>+++<[-]]>.")
        _stdin(monkeypatch, b"")
        assert bftool.main(["sim", str(src)]) == 0
        assert capfdbinary.readouterr().out == b"\x00"

    def test_duplicate_width_rejected(self, capsys):
        with pytest.raises(SystemExit) as exc:
            bftool.main(["sim", "-8b", "-16b"])
        assert exc.value.code == 2
        assert "Cannot specify multiple cell widths" in capsys.readouterr().err

    def test_same_width_twice_rejected(self):
        with pytest.raises(SystemExit):
            bftool.main(["sim", "-32b", "-32b"])

    def test_unbalanced_program(self, tmp_path, monkeypatch, capsys):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"+]")
        _stdin(monkeypatch, b"")
        assert bftool.main(["sim", str(src)]) == 1
        assert "without an open loop" in capsys.readouterr().err

    def test_max_steps(self, tmp_path, monkeypatch):
        src = tmp_path / "prog.bf"
        src.write_bytes(b"+[]")
        _stdin(monkeypatch, b"")
        assert bftool.main(["sim", "--max-steps", "100", str(src)]) == 0


class TestUsage:
    def test_no_command(self, capsys):
        assert bftool.main([]) == 1
        assert "bin" in capsys.readouterr().err

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            bftool.main(["run"])
