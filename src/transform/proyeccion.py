"""Proyección de puntos esperados a partir de los hitos del calendario.

Cada curso aporta un hito en su última fecha programada con puntaje
acumulado ``índice_curso * max_puntos_por_curso``.  Antes del primer día
del programa se agrega un hito sintético con 0 puntos.  Entre hitos el
puntaje esperado se interpola linealmente.
"""

import bisect
import logging
from dataclasses import dataclass
from datetime import date, timedelta

from config import settings
from src.cronograma.calendario import nombres_cursos, ultima_fecha_por_curso
from src.cronograma.fechas import parse_fecha

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hito:
    fecha: date
    puntos: float

    def to_dict(self):
        return {"date": self.fecha.isoformat(), "points": self.puntos}


def construir_hitos(calendario, max_puntos_por_curso, total_cursos=None):
    """Genera la lista ordenada de hitos.

    Parameters
    ----------
    calendario : list[EntradaCalendario]
        Entradas en orden cronológico.  Puede estar vacío.
    max_puntos_por_curso : int
    total_cursos : int, optional
        Cantidad de cursos del programa.  Debe coincidir con los cursos
        distintos del calendario; por defecto se toma de ahí.

    Returns
    -------
    list[Hito]
        Vacía si el calendario está vacío.

    Raises
    ------
    ValueError
        Si ``total_cursos`` no coincide con los cursos del calendario.
    """
    if not calendario:
        logger.warning("Calendario vacío: sin hitos de proyección")
        return []

    cursos = nombres_cursos(calendario)
    if total_cursos is None:
        total_cursos = len(cursos)
    if total_cursos != len(cursos):
        raise ValueError(
            f"total_cursos={total_cursos} no coincide con los {len(cursos)} "
            "cursos del calendario"
        )

    primera_fecha = min(e.fecha for e in calendario)
    hitos = [Hito(primera_fecha - timedelta(days=1), 0)]

    ultimas = ultima_fecha_por_curso(calendario)
    for indice, curso in enumerate(cursos, start=1):
        fecha = ultimas[curso]
        puntos = indice * max_puntos_por_curso
        if fecha <= hitos[-1].fecha:
            # Cursos intercalados: el hito no puede retroceder en el tiempo
            logger.warning(
                "Curso '%s' termina el %s, antes que el hito previo; se fusiona",
                curso, fecha,
            )
            hitos[-1] = Hito(hitos[-1].fecha, puntos)
            continue
        hitos.append(Hito(fecha, puntos))

    return hitos


class ProyeccionHitos:
    """Función "puntos esperados en el tiempo" del programa."""

    def __init__(self, calendario, max_puntos_por_curso=None, total_cursos=None):
        if max_puntos_por_curso is None:
            max_puntos_por_curso = settings.MAX_PUNTOS_POR_CURSO
        if total_cursos is None:
            total_cursos = settings.TOTAL_CURSOS or len(nombres_cursos(calendario))

        self.calendario = list(calendario)
        self.max_puntos_por_curso = max_puntos_por_curso
        self.total_cursos = total_cursos
        self.hitos = construir_hitos(self.calendario, max_puntos_por_curso, total_cursos)
        self._fechas = [h.fecha for h in self.hitos]

    @property
    def total_max_puntos(self):
        if not self.hitos:
            return 0
        return self.total_cursos * self.max_puntos_por_curso

    def puntos_esperados(self, fecha):
        """Puntaje esperado (sin redondear) para ``fecha``.

        0 antes del primer hito, ``total_max_puntos`` desde el último hito en
        adelante, y una interpolación lineal entre los hitos que lo rodean.
        """
        if not self.hitos:
            return 0

        dia = parse_fecha(fecha)
        if dia < self._fechas[0]:
            return 0
        if dia >= self._fechas[-1]:
            return self.total_max_puntos

        i = bisect.bisect_right(self._fechas, dia) - 1
        anterior = self.hitos[i]
        if anterior.fecha == dia:
            return anterior.puntos

        siguiente = self.hitos[i + 1]
        tramo = (siguiente.fecha - anterior.fecha).days
        avance = (dia - anterior.fecha).days / tramo
        return anterior.puntos + avance * (siguiente.puntos - anterior.puntos)
