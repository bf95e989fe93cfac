"""Estadísticas de la cohorte, ranking y logros por estudiante."""

import logging

import pandas as pd

from src.transform.clasificador import ESTADOS_ORDENADOS, Estado

logger = logging.getLogger(__name__)

# (posición máxima, insignia) en orden ascendente de posición
TRAMOS_RANKING = [(3, "Top 3"), (5, "Top 5"), (10, "Top 10")]


def roster_a_dataframe(estudiantes):
    """Una fila por estudiante con los campos usados en las estadísticas."""
    return pd.DataFrame(
        [
            {
                "id": e.id,
                "nombre": e.nombre,
                "puntos_totales": e.puntos_totales,
                "puntos_esperados": e.puntos_esperados,
                "estado": e.estado.value,
            }
            for e in estudiantes
        ],
        columns=["id", "nombre", "puntos_totales", "puntos_esperados", "estado"],
    )


def asignar_insignias(estudiantes):
    """Asigna ``insignia_ranking`` según el puntaje total (in-place).

    Empates conservan el orden del roster.  Estudiantes sin puntos no
    reciben insignia.
    """
    for e in estudiantes:
        e.insignia_ranking = None

    ranking = sorted(
        (e for e in estudiantes if e.puntos_totales > 0),
        key=lambda e: e.puntos_totales,
        reverse=True,
    )
    for posicion, e in enumerate(ranking, start=1):
        for limite, insignia in TRAMOS_RANKING:
            if posicion <= limite:
                e.insignia_ranking = insignia
                break
        else:
            break
    return estudiantes


def calcular_estadisticas(estudiantes, puntos_esperados_hoy=0):
    """Resumen del grupo.

    Returns
    -------
    dict
        ``total_estudiantes``, ``promedio_puntos``, ``finalizados``,
        ``puntos_esperados_hoy`` y ``por_estado`` (los ocho estados, de
        mayor a menor, con 0 si no hay estudiantes en ese estado).
    """
    df = roster_a_dataframe(estudiantes)

    conteos = df["estado"].value_counts() if not df.empty else pd.Series(dtype=int)
    por_estado = {
        estado.value: int(conteos.get(estado.value, 0))
        for estado in ESTADOS_ORDENADOS
    }

    promedio = float(df["puntos_totales"].mean()) if not df.empty else 0.0

    return {
        "total_estudiantes": int(len(df)),
        "promedio_puntos": round(promedio, 1),
        "finalizados": por_estado[Estado.FINALIZADA.value],
        "puntos_esperados_hoy": round(float(puntos_esperados_hoy), 2),
        "por_estado": por_estado,
    }


def calcular_logros(estudiante, max_total_puntos):
    """Logros derivados del estado y el puntaje de un estudiante."""
    estado = estudiante.estado
    return {
        "racha_perfecta": estado in (Estado.AVANZADA, Estado.ELITE_I, Estado.ELITE_II),
        "madrugador": estado == Estado.ELITE_II,
        "constancia_hierro": estado in (Estado.ELITE_I, Estado.ELITE_II),
        "pionero": (
            any(p == 100 for p in estudiante.progreso_cursos)
            and estudiante.insignia_ranking == "Top 3"
        ),
        "velocidad_luz": (
            estudiante.puntos_esperados > 0
            and estudiante.puntos_totales >= estudiante.puntos_esperados * 1.5
        ),
        "maestro_conocimiento": (
            max_total_puntos > 0 and estudiante.puntos_totales == max_total_puntos
        ),
    }
