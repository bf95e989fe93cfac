"""Cronograma anotado: número de módulo, puntaje esperado y día actual."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from src.cronograma.fechas import lunes_de_semana

logger = logging.getLogger(__name__)

DIAS_SEMANA = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
DIAS_VISTA_SEMANAL = 6  # lunes a sábado


@dataclass(frozen=True)
class EntradaProcesada:
    fecha: date
    curso: str
    modulo: str
    numero_modulo: int
    puntos_esperados: float
    es_hoy: bool

    def to_dict(self):
        return {
            "date": self.fecha.isoformat(),
            "course": self.curso,
            "module": self.modulo,
            "moduleNumber": self.numero_modulo,
            "expectedPoints": self.puntos_esperados,
            "isCurrentDay": self.es_hoy,
        }


def procesar_cronograma(proyeccion, hoy):
    """Anota cada entrada del calendario de ``proyeccion``."""
    numeros = {}
    procesado = []
    for e in proyeccion.calendario:
        modulos = numeros.setdefault(e.curso, {})
        if e.modulo not in modulos:
            modulos[e.modulo] = len(modulos) + 1
        procesado.append(EntradaProcesada(
            fecha=e.fecha,
            curso=e.curso,
            modulo=e.modulo,
            numero_modulo=modulos[e.modulo],
            puntos_esperados=proyeccion.puntos_esperados(e.fecha),
            es_hoy=e.fecha == hoy,
        ))
    return procesado


def dias_unicos(procesado):
    """Primera entrada de cada fecha, en orden cronológico."""
    por_fecha = {}
    for item in procesado:
        por_fecha.setdefault(item.fecha, item)
    return list(por_fecha.values())


def semana_actual(procesado, hoy):
    """Vista lunes–sábado de la semana de ``hoy``.

    Returns
    -------
    list[dict]
        Un dict por día con ``fecha``, ``dia``, ``es_hoy`` y ``actividades``
        (módulos sin repetir de ese día).
    """
    lunes = lunes_de_semana(hoy)
    semana = []
    for i in range(DIAS_VISTA_SEMANAL):
        dia = lunes + timedelta(days=i)
        actividades = {}
        for item in procesado:
            if item.fecha == dia:
                actividades.setdefault(item.modulo, item)
        semana.append({
            "fecha": dia.isoformat(),
            "dia": DIAS_SEMANA[dia.weekday()],
            "es_hoy": dia == hoy,
            "actividades": [a.to_dict() for a in actividades.values()],
        })
    return semana


def posicion_actual(procesado, hoy):
    """Última entrada programada en o antes de ``hoy``; ``None`` si aún no inicia."""
    actual = None
    for item in procesado:
        if item.fecha <= hoy:
            actual = item
        else:
            break
    return actual
