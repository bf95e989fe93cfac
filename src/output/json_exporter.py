"""Genera el JSON de resumen de la cohorte."""

import json
import logging
from datetime import datetime
from pathlib import Path

from config import settings
from src.transform.clasificador import siguiente_paso
from src.transform.estadisticas import calcular_estadisticas

logger = logging.getLogger(__name__)


def exportar_resumen(estado_app, output_path=None):
    """Escribe el resumen de la cohorte a disco.

    Parameters
    ----------
    estado_app : EstadoAplicacion
    output_path : Path | str | None
        Ruta del archivo de salida.  Si es ``None`` se usa
        ``settings.JSON_RESUMEN_PATH``.

    Returns
    -------
    dict
        Estructura del JSON generado.
    """
    if output_path is None:
        output_path = settings.JSON_RESUMEN_PATH

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    estructura = construir_resumen(estado_app)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(estructura, f, ensure_ascii=False, indent=2, default=str)

    logger.info("Resumen exportado a %s", output_path)
    return estructura


def construir_resumen(estado_app):
    """Dict con metadata, estadísticas y un registro por estudiante."""
    esperado_hoy = estado_app.puntos_esperados_hoy()
    max_total = estado_app.max_total_puntos

    estudiantes = []
    for e in estado_app.estudiantes:
        registro = e.to_registro()
        registro["rankBadge"] = e.insignia_ranking
        registro["nextStep"] = siguiente_paso(e, max_total)
        estudiantes.append(registro)

    return {
        "metadata": {
            "fecha_procesamiento": datetime.now().isoformat(timespec="seconds"),
            "fecha_referencia": estado_app.hoy().isoformat(),
            "total_estudiantes": len(estudiantes),
            "max_total_puntos": max_total,
            "version": "1.0",
        },
        "estadisticas": calcular_estadisticas(estado_app.estudiantes, esperado_hoy),
        "estudiantes": estudiantes,
    }
