"""Calendario del programa: (fecha, curso, módulo) en orden cronológico.

El calendario es estático: se carga una sola vez al iniciar.  Por defecto se
usa ``CALENDARIO_PROGRAMA``; ``settings.CALENDARIO_PATH`` permite reemplazarlo
por un JSON con una lista de objetos ``{"date", "course", "module"}``.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from config import settings
from src.cronograma.fechas import parse_fecha

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntradaCalendario:
    fecha: date
    curso: str
    modulo: str

    def to_dict(self):
        return {
            "date": self.fecha.isoformat(),
            "course": self.curso,
            "module": self.modulo,
        }


_CURSO_1 = "1. Fundamentos del soporte técnico"
_CURSO_2 = "2. Los bits y bytes de las redes informáticas"
_CURSO_3 = "3. Los sistemas operativos y usted: Cómo convertirse en un power user"
_CURSO_4 = "4. Administración de sistemas y servicios de infraestructura de TI"
_CURSO_5 = "5. Seguridad informática: Defensa contra las artes oscuras"
_CURSO_6 = "6. Acelere su búsqueda de empleo con IA"

# Cronograma 2025: varias entradas pueden compartir fecha
CALENDARIO_PROGRAMA = [
    ("2025-07-21", _CURSO_1, "Introducción a la informática"),
    ("2025-07-22", _CURSO_1, "Hardware"),
    ("2025-07-23", _CURSO_1, "Sistema operativo"),
    ("2025-07-24", _CURSO_1, "Sistema operativo"),
    ("2025-07-25", _CURSO_1, "Redes"),
    ("2025-07-26", _CURSO_1, "Redes"),
    ("2025-07-27", _CURSO_1, "Software"),
    ("2025-07-28", _CURSO_1, "Software"),
    ("2025-07-29", _CURSO_1, "Resolución de problemas"),
    ("2025-07-30", _CURSO_2, "Introducción a las redes"),
    ("2025-07-31", _CURSO_2, "La capa de red"),
    ("2025-08-01", _CURSO_2, "La capa de red"),
    ("2025-08-02", _CURSO_2, "Las capas de transporte y aplicación"),
    ("2025-08-03", _CURSO_2, "Las capas de transporte y aplicación"),
    ("2025-08-04", _CURSO_2, "Servicios de redes"),
    ("2025-08-05", _CURSO_2, "Servicios de redes"),
    ("2025-08-06", _CURSO_2, "Conexión a Internet"),
    ("2025-08-07", _CURSO_2, "Conexión a Internet"),
    ("2025-08-08", _CURSO_2, "La solución de problemas y el futuro de las redes"),
    ("2025-08-09", _CURSO_2, "La solución de problemas y el futuro de las redes"),
    ("2025-08-10", _CURSO_3, "Navegar por el sistema"),
    ("2025-08-11", _CURSO_3, "Navegar por el sistema"),
    ("2025-08-12", _CURSO_3, "Usuarios y Permisos"),
    ("2025-08-13", _CURSO_3, "Usuarios y Permisos"),
    ("2025-08-14", _CURSO_3, "Gestión de paquetes y software"),
    ("2025-08-15", _CURSO_3, "Gestión de paquetes y software"),
    ("2025-08-16", _CURSO_3, "Sistemas de archivos"),
    ("2025-08-17", _CURSO_3, "Sistemas de archivos"),
    ("2025-08-18", _CURSO_3, "Gestión de procesos"),
    ("2025-08-19", _CURSO_3, "Gestión de procesos"),
    ("2025-08-20", _CURSO_3, "Gestión de procesos"),
    ("2025-08-21", _CURSO_3, "Los sistemas operativos en la práctica"),
    ("2025-08-22", _CURSO_3, "Los sistemas operativos en la práctica"),
    ("2025-08-23", _CURSO_3, "Los sistemas operativos en la práctica"),
    ("2025-08-24", _CURSO_4, "¿Qué es la administración de sistemas?"),
    ("2025-08-25", _CURSO_4, "Servicios de red e infraestructura"),
    ("2025-08-26", _CURSO_4, "Servicios de red e infraestructura"),
    ("2025-08-27", _CURSO_4, "Servicios de red e infraestructura"),
    ("2025-08-28", _CURSO_4, "Servicios de software y plataforma como servicio"),
    ("2025-08-29", _CURSO_4, "Servicios de software y plataforma como servicio"),
    ("2025-08-30", _CURSO_4, "Servicios de directorio"),
    ("2025-08-31", _CURSO_4, "Servicios de directorio"),
    ("2025-09-01", _CURSO_4, "Servicios de directorio"),
    ("2025-09-02", _CURSO_4, "Recuperación de datos y copias de seguridad"),
    ("2025-09-03", _CURSO_4, "Recuperación de datos y copias de seguridad"),
    ("2025-09-04", _CURSO_4, "Proyecto final"),
    ("2025-09-05", _CURSO_4, "Proyecto final"),
    ("2025-09-06", _CURSO_5, "Comprender las Amenazas a la Seguridad"),
    ("2025-09-07", _CURSO_5, "Criptografía"),
    ("2025-09-08", _CURSO_5, "Criptografía"),
    ("2025-09-09", _CURSO_5, "Las 3 A de la ciberseguridad: Autenticación, autorización y contabilidad"),
    ("2025-09-10", _CURSO_5, "Seguridad para sus redes"),
    ("2025-09-11", _CURSO_5, "Seguridad para sus redes"),
    ("2025-09-12", _CURSO_5, "Defensa en profundidad"),
    ("2025-09-13", _CURSO_5, "Defensa en profundidad"),
    ("2025-09-14", _CURSO_5, "Creación de una cultura empresarial para la Seguridad"),
    ("2025-09-15", _CURSO_5, "Agilice los flujos de trabajo con IA"),
    ("2025-09-16", _CURSO_5, "Agilice los flujos de trabajo con IA"),
    ("2025-09-17", _CURSO_6, "Descubra sus Habilidades transferibles con IA"),
    ("2025-09-18", _CURSO_6, "Planifique su búsqueda de empleo con IA"),
    ("2025-09-19", _CURSO_6, "Gestione sus aplicaciones de empleo con IA"),
    ("2025-09-20", _CURSO_6, "Preparar y practicar entrevistas con IA"),
]


def construir_calendario(filas):
    """Convierte tuplas o dicts en una lista ordenada de ``EntradaCalendario``.

    El orden es estable: entradas con la misma fecha conservan su orden
    original.
    """
    entradas = []
    for fila in filas:
        if isinstance(fila, dict):
            fecha, curso, modulo = fila["date"], fila["course"], fila["module"]
        else:
            fecha, curso, modulo = fila
        entradas.append(EntradaCalendario(parse_fecha(fecha), str(curso), str(modulo)))
    return sorted(entradas, key=lambda e: e.fecha)


def cargar_calendario(path=None):
    """Carga el calendario desde ``path`` (JSON) o el calendario embebido."""
    if path is None:
        path = settings.CALENDARIO_PATH

    if path is None:
        calendario = construir_calendario(CALENDARIO_PROGRAMA)
        logger.info("Calendario embebido: %d entradas", len(calendario))
        return calendario

    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        filas = json.load(f)
    if not isinstance(filas, list):
        raise ValueError(f"Calendario inválido en {path}: se esperaba una lista")

    calendario = construir_calendario(filas)
    logger.info("Calendario cargado desde %s: %d entradas", path, len(calendario))
    return calendario


def nombres_cursos(calendario):
    """Cursos distintos en orden de primera aparición (curso 1..N)."""
    return list(dict.fromkeys(e.curso for e in calendario))


def modulos_por_curso(calendario):
    """``{curso: [módulos]}`` con módulos distintos en orden de aparición."""
    resultado = {}
    for e in calendario:
        modulos = resultado.setdefault(e.curso, [])
        if e.modulo not in modulos:
            modulos.append(e.modulo)
    return resultado


def ultima_fecha_por_curso(calendario):
    """``{curso: última fecha programada}`` en orden de primera aparición."""
    ultimas = {}
    for e in calendario:
        if e.curso not in ultimas or e.fecha > ultimas[e.curso]:
            ultimas[e.curso] = e.fecha
    return ultimas
