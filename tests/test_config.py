"""Tests for configuration loading, the CRF tagger backend and the parser engine."""
from __future__ import annotations

from pathlib import Path

from conftest import ScriptedTagger


class TestConfig:
    """Test configuration loading."""

    def test_defaults_when_missing(self, tmp_path):
        from medreport.config import load_settings, read_config
        assert read_config(tmp_path / "missing.yaml") == {}
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.label_prefixes == ["I-"]
        assert settings.model_path("address").name == "address.crf.joblib"

    def test_yaml_values(self, tmp_path):
        from medreport.config import load_settings
        models_dir = tmp_path / "models"
        cities = tmp_path / "cities.txt"
        cfg = tmp_path / "config.yaml"
        cfg.write_text(
            f"paths:\n  models_dir: {models_dir}\n"
            "models:\n  address: addr-v2.joblib\n"
            f"lexicon:\n  cities: {cities}\n"
            "tagging:\n  label_prefixes: ['I-', 'B-']\n"
            "logging:\n  level: debug\n",
            encoding="utf-8",
        )
        settings = load_settings(cfg)
        assert settings.model_path("address") == models_dir / "addr-v2.joblib"
        assert settings.lexicon.cities == cities
        assert settings.lexicon.locations is None
        assert settings.label_prefixes == ["I-", "B-"]
        assert settings.log_level == "DEBUG"

    def test_relative_paths_resolved_from_project(self, tmp_path):
        from medreport.config import PROJECT_ROOT, load_settings
        cfg = tmp_path / "config.yaml"
        cfg.write_text("paths:\n  models_dir: data/models\n", encoding="utf-8")
        assert load_settings(cfg).models_dir == (PROJECT_ROOT / "data/models").resolve()

    def test_invalid_yaml_falls_back(self, tmp_path):
        from medreport.config import load_settings
        cfg = tmp_path / "config.yaml"
        cfg.write_text("paths: [unclosed\n", encoding="utf-8")
        assert load_settings(cfg).log_level == "INFO"

    def test_env_var(self, tmp_path, monkeypatch):
        from medreport.config import CONFIG_ENV_VAR, load_settings
        cfg = tmp_path / "config.yaml"
        cfg.write_text("logging:\n  level: warning\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(cfg))
        assert load_settings().log_level == "WARNING"


class FakeCRF:
    def __init__(self):
        self.seen = None

    def predict(self, x):
        self.seen = x
        return [["I-<forename>" if i == 0 else "I-<surname>" for i in range(len(seq))] for seq in x]


class TestCrfTagger:
    """Test the CRF tagger backend."""

    def test_label_appends_column(self):
        from medreport.core.tagger import CrfTagger
        crf = FakeCRF()
        tagger = CrfTagger("name", Path("unused"), crf=crf)
        out = tagger.label("Jean jean\nDupont dupont\n")
        assert out == "Jean\tjean\tI-<forename>\nDupont\tdupont\tI-<surname>\n"
        first, second = crf.seen[0]
        assert first["f0"] == "Jean" and first["BOS"] and first["+1:f1"] == "dupont"
        assert second["-1:f1"] == "jean" and second["EOS"]

    def test_blank_lines_split_sequences(self):
        from medreport.core.tagger import CrfTagger
        crf = FakeCRF()
        out = CrfTagger("name", Path("unused"), crf=crf).label("a a\n\nb b\n")
        assert len(crf.seen) == 2
        assert out == "a\ta\tI-<forename>\n\nb\tb\tI-<forename>\n"

    def test_empty_features(self):
        from medreport.core.tagger import CrfTagger
        assert CrfTagger("name", Path("unused"), crf=FakeCRF()).label("") == ""

    def test_loads_joblib_dump(self, tmp_path, monkeypatch):
        import joblib
        from medreport.core.tagger import CrfTagger
        calls = []
        monkeypatch.setattr(joblib, "load", lambda path: calls.append(path) or FakeCRF())
        tagger = CrfTagger("name", tmp_path / "name.crf.joblib")
        tagger.label("a a\n")
        tagger.label("b b\n")
        assert calls == [tmp_path / "name.crf.joblib"]

    def test_load_tagger_uses_settings(self, tmp_path):
        from medreport.config import Settings
        from medreport.core.tagger import CrfTagger, load_tagger
        tagger = load_tagger("dateline", Settings(models_dir=tmp_path))
        assert isinstance(tagger, CrfTagger)
        assert tagger.model_path == tmp_path / "dateline.crf.joblib"


class TestEngine:
    """Test the parser engine."""

    def _engine(self):
        from medreport.config import Settings
        from medreport.engine import MedicalParsers
        return MedicalParsers(Settings(), tagger_factory=lambda name: ScriptedTagger())

    def test_parsers_cached(self):
        engine = self._engine()
        assert engine.address_parser is engine.get("address")
        assert engine.person_name_parser.model == "name"

    def test_shared_counter(self):
        engine = self._engine()
        engine.dateline_parser.process("Paris")
        engine.medic_parser.process("Dr")
        assert set(engine.counter.to_dict()) == {"dateline", "medic"}

    def test_unknown_model(self):
        import pytest
        with pytest.raises(KeyError):
            self._engine().get("invoice")
