"""Fusión de cambios locales con el estado remoto.

Tres instantáneas por registro, indexadas por ``id``:

- línea base (B): lo que se cargó en la última sincronización exitosa
- local (L): la copia de trabajo con las ediciones del operador
- remoto (R): lo que tiene la hoja de cálculo ahora

Un registro está en conflicto si cambió tanto en L como en R respecto a B.
En la fusión siempre gana la versión local de los registros editados.
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Campos derivados de la fecha de cálculo: no cuentan como edición
CAMPOS_VOLATILES = ("expectedPoints", "status")


def clave_comparacion(registro):
    """Registro sin campos volátiles, para comparación por igualdad profunda."""
    return {k: v for k, v in registro.items() if k not in CAMPOS_VOLATILES}


def distintos(a, b):
    if a is None or b is None:
        return a is not b
    return clave_comparacion(a) != clave_comparacion(b)


def indexar(registros):
    return {r["id"]: r for r in registros}


def ids_modificados(actual, linea_base):
    """Ids de ``actual`` que difieren de la línea base (o son nuevos)."""
    base = indexar(linea_base) if isinstance(linea_base, list) else linea_base
    return {
        r["id"] for r in actual
        if distintos(r, base.get(r["id"]))
    }


@dataclass
class ResultadoFusion:
    registros: list
    cambios_locales: set = field(default_factory=set)
    cambios_remotos: set = field(default_factory=set)
    conflictos: list = field(default_factory=list)

    @property
    def sin_cambios(self):
        return not self.cambios_locales

    @property
    def hay_conflictos(self):
        return bool(self.conflictos)


def fusionar(linea_base, local, remoto):
    """Fusiona las tres instantáneas (listas de registros remotos).

    Returns
    -------
    ResultadoFusion
        ``registros`` sigue el orden de ``remoto`` y agrega al final los
        registros editados que solo existen localmente.  ``conflictos`` sigue el
        mismo orden.  Un registro editado localmente y borrado en el remoto
        es un conflicto.
    """
    base = indexar(linea_base)
    locales = indexar(local)

    cambios_locales = ids_modificados(local, base)
    if not cambios_locales:
        return ResultadoFusion(registros=list(remoto))

    cambios_remotos = ids_modificados(remoto, base)
    # Borrado en el remoto desde la línea base: también es un cambio remoto
    ids_remotos = {r["id"] for r in remoto}
    cambios_remotos |= {rid for rid in base if rid not in ids_remotos}

    registros = []
    conflictos = []
    vistos = set()
    for r in remoto:
        rid = r["id"]
        vistos.add(rid)
        if rid in cambios_locales:
            registros.append(locales[rid])
            if rid in cambios_remotos:
                conflictos.append(rid)
        else:
            registros.append(r)

    for rid, registro in locales.items():
        if rid not in vistos and rid in cambios_locales:
            registros.append(registro)
            if rid in cambios_remotos:
                conflictos.append(rid)

    if conflictos:
        logger.warning("Conflictos de edición concurrente en ids: %s", conflictos)

    logger.info(
        "Fusión: %d registros, %d cambios locales, %d remotos, %d conflictos",
        len(registros), len(cambios_locales), len(cambios_remotos), len(conflictos),
    )
    return ResultadoFusion(
        registros=registros,
        cambios_locales=cambios_locales,
        cambios_remotos=cambios_remotos,
        conflictos=conflictos,
    )
