"""Tests for the command line interface."""
from __future__ import annotations

import json

import pytest

from conftest import ScriptedTagger

LABELS = {"Jane": "I-<forename>", "Smith": "I-<surname>", "Dupont": "I-<surname>"}


@pytest.fixture
def cli(monkeypatch, tmp_path):
    import medreport.engine
    monkeypatch.setattr(medreport.engine, "load_tagger",
                        lambda name, settings=None: ScriptedTagger(by_token=LABELS))
    from medreport.cli import main

    def run(*argv):
        return main(["--config", str(tmp_path / "none.yaml"), *argv])
    return run


class TestCLI:
    """Test the process and training subcommands."""

    def test_process_text(self, cli, capsys):
        assert cli("process", "--entity", "name", "--text", "Jane Smith") == 0
        records = json.loads(capsys.readouterr().out)
        assert records == [{"forename": "Jane", "surname": "Smith", "raw_name": "Jane Smith"}]

    def test_process_input_file(self, cli, capsys, tmp_path):
        path = tmp_path / "zone.txt"
        path.write_text("Jane Smith\n", encoding="utf-8")
        assert cli("process", "--entity", "name", "--input", str(path)) == 0
        assert json.loads(capsys.readouterr().out)[0]["surname"] == "Smith"

    def test_process_nothing_found(self, cli, capsys):
        assert cli("process", "--entity", "name", "--text", "bonjour") == 0
        assert json.loads(capsys.readouterr().out) == [{"raw_name": "bonjour"}]

    def test_process_blank_text(self, cli, capsys):
        assert cli("process", "--entity", "name", "--text", "   ") == 0
        assert capsys.readouterr().out.strip() == "null"

    def test_training_files(self, cli, tmp_path):
        src = tmp_path / "names.txt"
        src.write_text("Jane Smith\n\nJean Dupont\n", encoding="utf-8")
        out_dir = tmp_path / "out"
        assert cli("training", "--entity", "name", "--output-dir", str(out_dir), str(src)) == 0
        xml = (out_dir / "names.training.name.xml").read_text(encoding="utf-8")
        assert xml.count("<name>") == 2
        assert "<surname>Dupont</surname>" in xml

    def test_training_skips_failing_file(self, cli, tmp_path):
        good = tmp_path / "good.txt"
        good.write_text("Jane Smith\n", encoding="utf-8")
        out_dir = tmp_path / "out"
        code = cli("training", "--entity", "name", "--output-dir", str(out_dir),
                   str(tmp_path / "missing.txt"), str(good))
        assert code == 0
        assert (out_dir / "good.training.name.xml").exists()
        assert not (out_dir / "missing.training.name.xml").exists()

    def test_training_anonymized(self, cli, tmp_path):
        src = tmp_path / "names.txt"
        src.write_text("Jean Dupont\n", encoding="utf-8")
        mapping = tmp_path / "map.csv"
        mapping.write_text("Dupont,XXXXX\n", encoding="utf-8")
        out_dir = tmp_path / "out"
        cli("training", "--entity", "name", "--output-dir", str(out_dir),
            "--anonymize-map", str(mapping), str(src))
        xml = (out_dir / "names.training.name.xml").read_text(encoding="utf-8")
        assert "<surname>XXXXX</surname>" in xml
        assert "Dupont" not in xml
