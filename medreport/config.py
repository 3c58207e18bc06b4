"""Configuration loading: configs/config.yaml -> Settings."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "config.yaml"
CONFIG_ENV_VAR = "MEDREPORT_CONFIG"


def _abs_from_project(p: Optional[str]) -> Optional[Path]:
    if not p:
        return None
    path = Path(p)
    return path if path.is_absolute() else (PROJECT_ROOT / path).resolve()


class LexiconSettings(BaseModel):
    locations: Optional[Path] = None
    cities: Optional[Path] = None
    person_titles: Optional[Path] = None
    person_suffixes: Optional[Path] = None


class Settings(BaseModel):
    models_dir: Path = PROJECT_ROOT / "models"
    # model name -> file name under models_dir
    models: Dict[str, str] = Field(default_factory=lambda: {
        "address": "address.crf.joblib",
        "dateline": "dateline.crf.joblib",
        "medic": "medic.crf.joblib",
        "patient": "patient.crf.joblib",
        "organization": "organization.crf.joblib",
        "name": "name.crf.joblib",
    })
    lexicon: LexiconSettings = Field(default_factory=LexiconSettings)
    label_prefixes: list[str] = Field(default_factory=lambda: ["I-"])
    log_level: str = "INFO"

    def model_path(self, model_name: str) -> Path:
        file_name = self.models.get(model_name, f"{model_name}.crf.joblib")
        return self.models_dir / file_name


def read_config(cfg_path: Path) -> Dict[str, Any]:
    """Flatten the YAML file into Settings keyword arguments."""
    cfg: Dict[str, Any] = {}
    if not cfg_path.exists():
        log.debug("No config file at %s, using defaults", cfg_path)
        return cfg
    with open(cfg_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    paths = raw.get("paths") or {}
    models_dir = _abs_from_project(paths.get("models_dir"))
    if models_dir:
        cfg["models_dir"] = models_dir

    if raw.get("models"):
        cfg["models"] = {str(k): str(v) for k, v in raw["models"].items()}

    lex = raw.get("lexicon") or {}
    cfg["lexicon"] = LexiconSettings(**{
        k: _abs_from_project(v) for k, v in lex.items() if k in LexiconSettings.model_fields
    })

    tagging = raw.get("tagging") or {}
    if "label_prefixes" in tagging:
        cfg["label_prefixes"] = list(tagging["label_prefixes"])

    logging_cfg = raw.get("logging") or {}
    if "level" in logging_cfg:
        cfg["log_level"] = str(logging_cfg["level"]).upper()
    return cfg


def load_settings(cfg_path: Optional[Path] = None) -> Settings:
    if cfg_path is None:
        cfg_path = Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    try:
        return Settings(**read_config(Path(cfg_path)))
    except (yaml.YAMLError, ValueError) as e:
        log.warning("Invalid config %s (%s), using defaults", cfg_path, e)
        return Settings()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
