"""Clasificación del estado de avance y distancia al siguiente estado."""

import logging
import math
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Estado(str, Enum):
    FINALIZADA = "Finalizada"
    ELITE_II = "Elite II"
    ELITE_I = "Elite I"
    AVANZADA = "Avanzada"
    AL_DIA = "Al Día"
    ATRASADA = "Atrasada"
    RIESGO = "En Riesgo"
    SIN_INICIAR = "Sin Iniciar"

    @classmethod
    def desde_texto(cls, texto):
        """Acepta el valor ("Al Día") o el nombre ("AL_DIA"); ``None`` si no existe."""
        if isinstance(texto, cls):
            return texto
        for estado in cls:
            if texto in (estado.value, estado.name):
                return estado
        return None


# De mayor a menor
ESTADOS_ORDENADOS = [
    Estado.FINALIZADA,
    Estado.ELITE_II,
    Estado.ELITE_I,
    Estado.AVANZADA,
    Estado.AL_DIA,
    Estado.ATRASADA,
    Estado.RIESGO,
    Estado.SIN_INICIAR,
]
ESTADOS_ASCENDENTES = list(reversed(ESTADOS_ORDENADOS))

# Diferencia (puntos - esperado) que delimita cada banda.  Valores fijos.
UMBRAL_ELITE_II = 150   # diff > 150
UMBRAL_ELITE_I = 100    # diff > 100
UMBRAL_AVANZADA = 0     # diff > 0
UMBRAL_AL_DIA = -25     # diff >= -25
UMBRAL_RIESGO = -75     # diff < -75


def clasificar(puntos_totales, puntos_esperados, max_total_puntos):
    """Estado del estudiante según su diferencia con el puntaje esperado.

    Completar el programa siempre da ``FINALIZADA`` y 0 puntos siempre da
    ``SIN_INICIAR``, sin importar el puntaje esperado.
    """
    if puntos_totales == max_total_puntos:
        return Estado.FINALIZADA
    if puntos_totales == 0:
        return Estado.SIN_INICIAR

    diff = puntos_totales - puntos_esperados
    if diff > UMBRAL_ELITE_II:
        return Estado.ELITE_II
    if diff > UMBRAL_ELITE_I:
        return Estado.ELITE_I
    if diff > UMBRAL_AVANZADA:
        return Estado.AVANZADA
    if diff >= UMBRAL_AL_DIA:
        return Estado.AL_DIA
    if diff < UMBRAL_RIESGO:
        return Estado.RIESGO
    return Estado.ATRASADA


def _menor_entero_mayor_que(valor):
    return math.floor(valor) + 1


def _puntaje_objetivo(estado, puntos_esperados):
    """Menor puntaje entero que entra a la banda inmediatamente superior."""
    if estado == Estado.SIN_INICIAR:
        return 1
    if estado == Estado.RIESGO:
        return math.ceil(puntos_esperados + UMBRAL_RIESGO)
    if estado == Estado.ATRASADA:
        return math.ceil(puntos_esperados + UMBRAL_AL_DIA)
    if estado == Estado.AL_DIA:
        return _menor_entero_mayor_que(puntos_esperados + UMBRAL_AVANZADA)
    if estado == Estado.AVANZADA:
        return _menor_entero_mayor_que(puntos_esperados + UMBRAL_ELITE_I)
    if estado == Estado.ELITE_I:
        return _menor_entero_mayor_que(puntos_esperados + UMBRAL_ELITE_II)
    return None


@dataclass(frozen=True)
class SiguienteEstado:
    puntos_necesarios: int
    estado_actual: Estado
    estado_siguiente: Estado

    def to_dict(self):
        return {
            "pointsNeeded": self.puntos_necesarios,
            "currentStatus": self.estado_actual.value,
            "nextStatus": self.estado_siguiente.value,
        }


def puntos_para_siguiente_banda(estado, puntos_totales, puntos_esperados, max_total_puntos):
    """Puntos que faltan para subir de banda, sin considerar la finalización.

    Returns
    -------
    SiguienteEstado | None
        ``None`` desde ``ELITE_II`` o ``FINALIZADA``, o si el objetivo ya
        está alcanzado.
    """
    objetivo = _puntaje_objetivo(estado, puntos_esperados)
    if objetivo is None or objetivo <= puntos_totales:
        return None

    destino = clasificar(objetivo, puntos_esperados, max_total_puntos)
    return SiguienteEstado(objetivo - puntos_totales, estado, destino)


def puntos_para_siguiente_estado(puntos_totales, puntos_esperados, max_total_puntos, estado=None):
    """Lo que requiera menos puntos: la banda siguiente o completar el programa.

    Returns
    -------
    SiguienteEstado | None
        ``None`` si el estudiante ya finalizó.
    """
    if estado is None:
        estado = clasificar(puntos_totales, puntos_esperados, max_total_puntos)
    if estado == Estado.FINALIZADA:
        return None

    banda = puntos_para_siguiente_banda(
        estado, puntos_totales, puntos_esperados, max_total_puntos
    )
    puntos_para_final = max_total_puntos - puntos_totales

    if banda is not None and (
        puntos_para_final <= 0 or banda.puntos_necesarios < puntos_para_final
    ):
        return banda

    if puntos_para_final > 0:
        return SiguienteEstado(puntos_para_final, estado, Estado.FINALIZADA)
    return None


def siguiente_paso(estudiante, max_total_puntos):
    """``nextStep`` de un estudiante como dict; ``None`` si ya finalizó."""
    siguiente = puntos_para_siguiente_estado(
        estudiante.puntos_totales,
        estudiante.puntos_esperados,
        max_total_puntos,
        estudiante.estado,
    )
    return siguiente.to_dict() if siguiente else None
