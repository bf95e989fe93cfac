"""Carga y guardado del roster contra el registro remoto.

Guardado con detección de conflictos:

1. Leer el estado remoto actual.
2. Calcular qué registros cambiaron localmente respecto a la línea base.
3. Sin cambios locales → adoptar el remoto y no escribir nada.
4. Detectar los registros que además cambiaron en el remoto (conflictos).
5. Fusionar prefiriendo la versión local de los registros editados.
6. Con conflictos, el operador decide abortar (recargar) o sobrescribir.
7. Recalcular derivados, escribir todo en un solo lote y volver a leer.

Los errores de red y de formato se convierten en el estado de
sincronización; nunca se propagan fuera de estas operaciones.
"""

import logging
from dataclasses import dataclass, field

from src.ingest.registro_remoto import PayloadInvalidoError, RegistroRemotoError
from src.sync.fusion import fusionar

logger = logging.getLogger(__name__)

# Resultados posibles de guardar()
SIN_CAMBIOS = "sin_cambios"
GUARDADO = "guardado"
ABORTADO = "abortado"
CONFLICTO = "conflicto"
ERROR = "error"


class GuardadoEnCursoError(RuntimeError):
    """Ya hay un guardado en curso; solo se admite uno a la vez."""
    pass


@dataclass
class ResultadoGuardado:
    resultado: str
    conflictos: list = field(default_factory=list)
    guardados: int = 0
    mensaje: str = ""

    def to_dict(self):
        return {
            "resultado": self.resultado,
            "conflictos": list(self.conflictos),
            "guardados": self.guardados,
            "mensaje": self.mensaje,
        }


class Sincronizador:
    """Orquesta ``EstadoAplicacion`` y un ``AlmacenRemoto``."""

    def __init__(self, estado_app, almacen):
        self.app = estado_app
        self.almacen = almacen

    def cargar(self):
        """Reemplaza el roster local con el contenido remoto.

        Returns
        -------
        bool
            ``True`` si la carga fue exitosa.
        """
        sync = self.app.sync
        sync.iniciar("load")

        try:
            registros = self.almacen.fetch_all()
        except PayloadInvalidoError as e:
            # Mejor vacío que una mezcla de datos viejos e indefinidos
            logger.error("Formato inválido en registro remoto: %s", e)
            self.app.limpiar()
            sync.error(f"Formato de datos inválido: {e}")
            return False
        except RegistroRemotoError as e:
            logger.error("Error cargando registro remoto: %s", e)
            sync.error(f"Error al cargar: {e}")
            return False

        self.app.reemplazar(registros)
        sync.exito(f"{len(self.app.estudiantes)} estudiantes cargados")
        return True

    def guardar(self, decidir=None):
        """Guarda los cambios locales detectando ediciones concurrentes.

        Parameters
        ----------
        decidir : callable, optional
            ``decidir(conflictos) -> bool``; ``True`` sobrescribe el remoto,
            ``False`` aborta y recarga.  Si es ``None`` y hay conflictos, no
            se escribe nada y el resultado es ``CONFLICTO`` (el estado local
            queda intacto para que el operador decida).

        Raises
        ------
        GuardadoEnCursoError
            Si se llama mientras otro guardado está en curso.
        """
        if self.app.guardando:
            raise GuardadoEnCursoError("Ya hay un guardado en curso")

        self.app.guardando = True
        try:
            return self._guardar(decidir)
        finally:
            self.app.guardando = False

    def _guardar(self, decidir):
        sync = self.app.sync
        sync.iniciar("save")

        # 1. Estado remoto actual
        try:
            crudos = self.almacen.fetch_all()
        except RegistroRemotoError as e:
            logger.error("Guardado abortado, no se pudo leer el remoto: %s", e)
            sync.error(f"Error al leer antes de guardar: {e}")
            return ResultadoGuardado(ERROR, mensaje=str(e))

        remoto = self.app.normalizar(crudos)
        local = self.app.registros_locales()

        # 2-5. Cambios, conflictos y fusión
        fusion = fusionar(self.app.linea_base, local, remoto)

        if fusion.sin_cambios:
            self.app.reemplazar(crudos)
            sync.exito("No hay cambios para guardar")
            logger.info("Guardado sin cambios locales, no se escribe")
            return ResultadoGuardado(SIN_CAMBIOS, mensaje="No hay cambios para guardar")

        # 6. Decisión del operador
        if fusion.hay_conflictos:
            if decidir is None:
                sync.pendiente(
                    f"Conflicto: {len(fusion.conflictos)} registros modificados "
                    "por otra persona"
                )
                return ResultadoGuardado(
                    CONFLICTO,
                    conflictos=fusion.conflictos,
                    mensaje="Se requiere confirmación del operador",
                )
            if not decidir(list(fusion.conflictos)):
                logger.info("Operador abortó el guardado, recargando remoto")
                self.app.reemplazar(crudos)
                sync.exito("Guardado cancelado; datos remotos recargados")
                return ResultadoGuardado(
                    ABORTADO,
                    conflictos=fusion.conflictos,
                    mensaje="Cambios locales descartados",
                )
            logger.warning("Operador sobrescribe %d conflictos", len(fusion.conflictos))

        # 7. Recalcular, escribir y volver a leer
        registros = self.app.normalizar(fusion.registros)
        try:
            self.almacen.save_all(registros)
        except RegistroRemotoError as e:
            logger.error("Error guardando en registro remoto: %s", e)
            sync.error(f"Error al guardar: {e}")
            return ResultadoGuardado(ERROR, conflictos=fusion.conflictos, mensaje=str(e))

        try:
            confirmados = self.almacen.fetch_all()
        except RegistroRemotoError as e:
            logger.warning("Guardado OK pero no se pudo releer el remoto: %s", e)
            confirmados = registros

        self.app.reemplazar(confirmados)
        mensaje = f"{len(fusion.cambios_locales)} estudiantes actualizados"
        sync.exito(mensaje)
        return ResultadoGuardado(
            GUARDADO,
            conflictos=fusion.conflictos,
            guardados=len(registros),
            mensaje=mensaje,
        )
