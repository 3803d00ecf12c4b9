from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from orchestrator.errors import ModelPoolError

DEFAULT_POOL_PATH = Path(__file__).resolve().parent.parent / "config" / "model_pool.yaml"


@dataclass(frozen=True)
class ModelPool:
    """Ordered, read-only list of candidate model identifiers."""

    _candidates: tuple[str, ...]
    _routing_defaults: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_candidates(
        cls, candidates: Iterable[str], routing_defaults: dict[str, Any] | None = None
    ) -> "ModelPool":
        names = tuple(name.strip() for name in candidates if name and name.strip())
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ModelPoolError(f"Duplicate model identifiers in pool: {duplicates}")
        return cls(_candidates=names, _routing_defaults=dict(routing_defaults or {}))

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "ModelPool":
        pool_path = Path(path) if path else DEFAULT_POOL_PATH
        if not pool_path.exists():
            raise ModelPoolError(f"Model pool not found at {pool_path}")

        data = yaml.safe_load(pool_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or "models" not in data:
            raise ModelPoolError("Invalid model pool: missing models")

        models = data["models"] or []
        if not isinstance(models, list):
            raise ModelPoolError("Invalid model pool: models must be a list")

        names: list[str] = []
        for model in models:
            if isinstance(model, str):
                names.append(model)
                continue
            if not isinstance(model, dict) or "name" not in model:
                raise ModelPoolError(f"Invalid model entry: {model!r}")
            if not bool(model.get("enabled", True)):
                continue
            names.append(str(model["name"]))

        routing_defaults = data.get("routing_defaults") or {}
        return cls.from_candidates(names, routing_defaults=routing_defaults)

    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    def routing_defaults(self) -> dict[str, Any]:
        return dict(self._routing_defaults)

    def with_candidates(self, candidates: Iterable[str]) -> "ModelPool":
        """Same routing defaults, different candidate list."""
        return ModelPool.from_candidates(candidates, routing_defaults=self._routing_defaults)

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self):
        return iter(self._candidates)
