"""Planes para ponerse al día con el cronograma."""

import logging
from datetime import timedelta

from src.cronograma.procesado import dias_unicos
from src.transform.clasificador import Estado

logger = logging.getLogger(__name__)

MODULOS_POR_DIA = 2
POMODOROS_POR_MODULO = 3


def _agrupar_por_curso(items):
    """``{curso: [{"module", "moduleNumber"}]}`` sin módulos repetidos."""
    agrupado = {}
    for item in items:
        modulos = agrupado.setdefault(item.curso, [])
        if not any(m["module"] == item.modulo for m in modulos):
            modulos.append({"module": item.modulo, "moduleNumber": item.numero_modulo})
    return agrupado


def plan_recuperacion(estudiante, procesado):
    """Módulos que separan el puntaje actual del esperado.

    Solo aplica a estudiantes ``ATRASADA`` o ``RIESGO``.

    Returns
    -------
    dict | None
        ``{"puntos_necesarios", "por_curso"}`` o ``None`` si no hay plan.
    """
    if estudiante.estado not in (Estado.ATRASADA, Estado.RIESGO):
        return None

    puntos_necesarios = round(estudiante.puntos_esperados - estudiante.puntos_totales)
    if puntos_necesarios <= 0:
        return None

    dias = dias_unicos(procesado)

    ultimo_completado = -1
    for i in range(len(dias) - 1, -1, -1):
        if dias[i].puntos_esperados <= estudiante.puntos_totales:
            ultimo_completado = i
            break

    objetivo = -1
    for i in range(len(dias) - 1, -1, -1):
        if dias[i].puntos_esperados <= estudiante.puntos_esperados:
            objetivo = i
            break

    if objetivo < 0:
        return None

    fechas = {d.fecha for d in dias[ultimo_completado + 1:objetivo + 1]}
    pendientes = [item for item in procesado if item.fecha in fechas]

    return {
        "puntos_necesarios": puntos_necesarios,
        "por_curso": _agrupar_por_curso(pendientes),
    }


def planificar_desde_modulo(procesado, curso, modulo, hoy, puntos_esperados_hoy):
    """Plan a partir del último módulo que el estudiante completó.

    Los módulos programados después de ese módulo y hasta ``hoy`` se
    reparten a razón de dos por día a partir de ``hoy``.

    Raises
    ------
    KeyError
        Si ``curso``/``modulo`` no está en el cronograma.
    """
    ultimo = None
    inicio = 0
    for i in range(len(procesado) - 1, -1, -1):
        item = procesado[i]
        if item.curso == curso and item.modulo == modulo:
            ultimo = item
            inicio = i + 1
            break
    if ultimo is None:
        raise KeyError(f"Módulo no programado: {curso} / {modulo}")

    puntos_necesarios = round(puntos_esperados_hoy - ultimo.puntos_esperados)
    if puntos_necesarios <= 0:
        return {
            "puntos_necesarios": 0,
            "modulos": [],
            "total_pomodoros": 0,
            "dias_sugeridos": 0,
        }

    fin = inicio
    for i, item in enumerate(procesado):
        if item.fecha <= hoy:
            fin = i + 1

    pendientes = {}
    for item in procesado[inicio:fin]:
        pendientes.setdefault(item.modulo, item)

    modulos = []
    for i, item in enumerate(pendientes.values()):
        modulos.append({
            "course": item.curso,
            "module": item.modulo,
            "moduleNumber": item.numero_modulo,
            "suggestedDate": (hoy + timedelta(days=i // MODULOS_POR_DIA)).isoformat(),
        })

    dias_sugeridos = -(-len(modulos) // MODULOS_POR_DIA)
    logger.debug(
        "Plan desde '%s': %d módulos en %d días", modulo, len(modulos), dias_sugeridos
    )
    return {
        "puntos_necesarios": puntos_necesarios,
        "modulos": modulos,
        "total_pomodoros": len(modulos) * POMODOROS_POR_MODULO,
        "dias_sugeridos": dias_sugeridos,
    }
