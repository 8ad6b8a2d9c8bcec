from __future__ import annotations
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .cells import DEFAULT_ABSENT_CODES, DEFAULT_WITHDRAWN_CODES
from .utils import load_json, save_json, rules_path, norm_text

logger = logging.getLogger(__name__)

# identity block of a typical export: # | CARNET | Alumno | Correo | Grupo
DEFAULT_IDENTITY_FIELDS = (
    ("identifier", 1),
    ("display_name", 2),
    ("contact", 3),
    ("group", 4),
)

# accumulated, final exam, instructor evaluation and pass/fail columns
DEFAULT_SUMMARY_PREFIXES = (
    "acum",
    "total",
    "examen final",
    "ex. final",
    "ex final",
    "eval. docente",
    "eval docente",
    "evaluacion docente",
    "nota final",
    "estado",
    "aprob",
    "resultado",
)


@dataclass(frozen=True)
class EngineConfig:
    """
    Read-only constants shared by the normalizer and the status classifier.

    Built once (usually from rules.json) and passed explicitly; nothing in the
    package keeps a module-level copy.
    """
    total_points: float = 100.0
    passing_score: float = 60.0
    on_track_ratio: float = 0.70
    warning_ratio: float = 0.90

    key_header: str = "CARNET"
    identity_columns: int = 5
    identity_fields: Tuple[Tuple[str, int], ...] = DEFAULT_IDENTITY_FIELDS
    required_fields: Tuple[str, ...] = ("identifier",)
    row_offset: int = 0
    summary_prefixes: Tuple[str, ...] = DEFAULT_SUMMARY_PREFIXES

    absent_codes: Tuple[str, ...] = DEFAULT_ABSENT_CODES
    withdrawn_codes: Tuple[str, ...] = DEFAULT_WITHDRAWN_CODES

    _normalized_prefixes: Tuple[str, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.identity_columns < 1:
            raise ValueError("identity_columns must be positive")
        if self.row_offset < 0:
            raise ValueError("row_offset cannot be negative")
        if not 0 < self.on_track_ratio <= self.warning_ratio:
            raise ValueError("expected 0 < on_track_ratio <= warning_ratio")
        for name, idx in self.identity_fields:
            if not 0 <= idx < self.identity_columns:
                raise ValueError(f"identity field '{name}' lies outside the identity block")
        known = {name for name, _ in self.identity_fields}
        for name in self.required_fields:
            if name not in known:
                raise ValueError(f"required field '{name}' is not an identity field")
        prefixes = tuple(p for p in (norm_text(x) for x in self.summary_prefixes) if p)
        object.__setattr__(self, "_normalized_prefixes", prefixes)

    def field_index(self, name: str) -> Optional[int]:
        for n, idx in self.identity_fields:
            if n == name:
                return idx
        return None

    def is_summary_header(self, header: Any) -> bool:
        h = norm_text(header)
        return any(h.startswith(p) for p in self._normalized_prefixes)

    @classmethod
    def from_rules(cls, rules: Dict[str, Any]) -> "EngineConfig":
        # missing sections/keys keep their defaults, unknown keys are ignored
        course = rules.get("course", {}) or {}
        status = rules.get("status", {}) or {}
        codes = rules.get("codes", {}) or {}
        cols = rules.get("columns", {}) or {}

        kwargs: Dict[str, Any] = {}
        if "total_points" in course:
            kwargs["total_points"] = float(course["total_points"])
        if "passing_score" in course:
            kwargs["passing_score"] = float(course["passing_score"])
        if "on_track_ratio" in status:
            kwargs["on_track_ratio"] = float(status["on_track_ratio"])
        if "warning_ratio" in status:
            kwargs["warning_ratio"] = float(status["warning_ratio"])
        if "absent" in codes:
            kwargs["absent_codes"] = tuple(str(x) for x in codes["absent"])
        if "withdrawn" in codes:
            kwargs["withdrawn_codes"] = tuple(str(x) for x in codes["withdrawn"])
        if "key_header" in cols:
            kwargs["key_header"] = str(cols["key_header"])
        if "identity_columns" in cols:
            kwargs["identity_columns"] = int(cols["identity_columns"])
        if "identity_fields" in cols:
            kwargs["identity_fields"] = tuple((str(k), int(v)) for k, v in cols["identity_fields"].items())
        if "required_fields" in cols:
            kwargs["required_fields"] = tuple(str(x) for x in cols["required_fields"])
        if "row_offset" in cols:
            kwargs["row_offset"] = int(cols["row_offset"])
        if "summary_prefixes" in cols:
            kwargs["summary_prefixes"] = tuple(str(x) for x in cols["summary_prefixes"])
        return cls(**kwargs)

    def to_rules(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "course": {"total_points": d["total_points"], "passing_score": d["passing_score"]},
            "status": {"on_track_ratio": d["on_track_ratio"], "warning_ratio": d["warning_ratio"]},
            "codes": {"absent": list(d["absent_codes"]), "withdrawn": list(d["withdrawn_codes"])},
            "columns": {
                "key_header": d["key_header"],
                "identity_columns": d["identity_columns"],
                "identity_fields": {k: v for k, v in d["identity_fields"]},
                "required_fields": list(d["required_fields"]),
                "row_offset": d["row_offset"],
                "summary_prefixes": list(d["summary_prefixes"]),
            },
        }


def load_config(path: Optional[Path] = None) -> EngineConfig:
    p = Path(path) if path is not None else rules_path()
    rules = load_json(p, {})
    if not isinstance(rules, dict):
        logger.warning("rules file %s is not a JSON object, using defaults", p)
        rules = {}
    return EngineConfig.from_rules(rules)


def save_config(config: EngineConfig, path: Path) -> None:
    save_json(Path(path), config.to_rules())
