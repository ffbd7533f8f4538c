# Model catalog: YAML-backed, read once per path.

from __future__ import annotations
import copy
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

import yaml

from fortec_gateway.settings import settings


@lru_cache(maxsize=4)
def load_models(path: str) -> tuple:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Model catalog not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    return tuple(cfg.get("models", []))


def list_models(path: Optional[str] = None) -> List[Dict[str, Any]]:
    return [copy.deepcopy(m) for m in load_models(path or settings.MODELS_FILE)]


def get_model(model_id: str, path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    for m in load_models(path or settings.MODELS_FILE):
        if m.get("id") == model_id:
            return copy.deepcopy(m)
    return None


__all__ = ["load_models", "list_models", "get_model"]
