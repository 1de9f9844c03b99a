import logging
from typing import Dict, Any


def emit_structured(payload: Dict[str, Any]) -> None:
    """Emite un dict como jsonPayload vía logging (diagnostics logger)."""
    logging.getLogger("diagnostics").info(payload)


def log_validation_summary(
    field_key: str | None,
    variant_count: int,
    error_count: int,
    warning_count: int,
    summary: str | None,
    **extra,
) -> None:
    """Emite el resumen de una validación de variantes como evento estructurado."""
    p = {
        "event": "variant_validation",
        "field_key": field_key,
        "variant_count": variant_count,
        "error_count": error_count,
        "warning_count": warning_count,
        "valid": error_count == 0,
        "summary": summary,
        "warning_types": extra.get("warning_types"),
        "event_stage": extra.get("event_stage"),
    }
    preserve_none = {"summary"}
    payload = {}
    for key, value in p.items():
        if value is not None or key in preserve_none:
            payload[key] = value
    emit_structured(payload)


class Diagnostics:
    """Utilidad para emitir eventos estructurados con distintos niveles.

    Los eventos de la revisión de variantes (info/warn/error) pasan por aquí
    para que compartan el mismo formato que emit_structured.
    """

    def _build(self, event: str, payload: Dict[str, Any] | None) -> Dict[str, Any]:
        p = {"event": event}
        if payload:
            for k, v in payload.items():
                if k == "event":
                    p["source_event"] = v
                else:
                    p[k] = v
        return p

    def info(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        logging.getLogger("diagnostics").info(self._build(event, payload))

    def warn(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        logging.getLogger("diagnostics").warning(self._build(event, payload))

    def error(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        logging.getLogger("diagnostics").error(self._build(event, payload))


# Instancia global para uso sencillo
diagnostics = Diagnostics()
