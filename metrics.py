"""
Métricas de la revisión de variantes.

Captura:
- Tiempo de parseo/validación/reparación (ms)
- Conteos de variantes y avisos por llamada

Salida: logs estructurados vía logger ([METRIC] + JSON).
"""

import json
import time
from typing import Optional, Dict, Any

from logger_config import logger


def record_metric(name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
    payload = {
        "metric": name,
        "value": value,
        "ts": int(time.time()),
    }
    if labels:
        payload.update(labels)
    try:
        logger.info("[METRIC] %s", json.dumps(payload, ensure_ascii=False))
    except (TypeError, ValueError):
        logger.info("[METRIC] %s=%s labels=%s", name, value, labels)


class Timer:
    def __init__(self, name: str, labels: Optional[Dict[str, Any]] = None):
        self.name = name
        self.labels = labels or {}
        self.start = None
        self.elapsed_ms: Optional[float] = None

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        end = time.perf_counter()
        self.elapsed_ms = round((end - (self.start or end)) * 1000, 2)
        labels = dict(self.labels)
        labels["error"] = bool(exc_type)
        record_metric(self.name, self.elapsed_ms, labels)
