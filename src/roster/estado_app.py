"""Estado de la aplicación: roster local, línea base y estado de sincronización.

Un solo dueño (el proceso que atiende al operador) muta este objeto a
través de sus métodos; no hay otros escritores concurrentes.
"""

import logging
from dataclasses import dataclass

from src.cronograma.fechas import ahora_iso, hoy_referencia
from src.roster.estudiante import Estudiante
from src.sync.fusion import ids_modificados
from src.transform.estadisticas import asignar_insignias

logger = logging.getLogger(__name__)

@dataclass
class EstadoSincronizacion:
    estado: str = "idle"
    ultima_accion: str = None
    ultima_sincronizacion: str = None
    mensaje: str = ""

    def iniciar(self, accion):
        self.estado = "syncing"
        self.ultima_accion = accion
        self.mensaje = ""

    def exito(self, mensaje=""):
        self.estado = "success"
        self.ultima_sincronizacion = ahora_iso()
        self.mensaje = mensaje

    def error(self, mensaje):
        self.estado = "error"
        self.mensaje = mensaje

    def pendiente(self, mensaje):
        """Operación detenida a la espera de una decisión del operador."""
        self.estado = "idle"
        self.mensaje = mensaje

    def to_dict(self):
        return {
            "status": self.estado,
            "lastAction": self.ultima_accion,
            "lastSyncTime": self.ultima_sincronizacion,
            "message": self.mensaje,
        }


class EstadoAplicacion:
    """Roster de estudiantes con su línea base y la proyección del programa.

    Parameters
    ----------
    proyeccion : ProyeccionHitos
    reloj : callable, optional
        Retorna la fecha de referencia "hoy".  Por defecto
        :func:`hoy_referencia`.
    """

    def __init__(self, proyeccion, reloj=None):
        self.proyeccion = proyeccion
        self.reloj = reloj or hoy_referencia
        self.estudiantes = []
        self.linea_base = []
        self.sync = EstadoSincronizacion()
        self.guardando = False
        self._dia_calculo = None

    # ── Consultas ─────────────────────────────────────────

    def hoy(self):
        return self.reloj()

    def puntos_esperados_hoy(self):
        return self.proyeccion.puntos_esperados(self.hoy())

    @property
    def max_total_puntos(self):
        return self.proyeccion.total_max_puntos

    def obtener(self, id_estudiante):
        for e in self.estudiantes:
            if e.id == id_estudiante:
                return e
        raise KeyError(id_estudiante)

    def registros_locales(self):
        return [e.to_registro() for e in self.estudiantes]

    def ids_modificados(self):
        return ids_modificados(self.registros_locales(), self.linea_base)

    # ── Materialización ───────────────────────────────────

    def materializar(self, registros):
        """Registros remotos → ``Estudiante`` con campos derivados al día."""
        self._dia_calculo = self.hoy()
        esperado = self.proyeccion.puntos_esperados(self._dia_calculo)
        estudiantes = [
            Estudiante.desde_registro(r, self.proyeccion.total_cursos).recalcular(
                esperado, self.max_total_puntos
            )
            for r in registros
        ]
        asignar_insignias(estudiantes)
        return estudiantes

    def normalizar(self, registros):
        """Registros remotos con los derivados recalculados, como dicts."""
        return [e.to_registro() for e in self.materializar(registros)]

    # ── Mutaciones ────────────────────────────────────────

    def reemplazar(self, registros):
        """Adopta ``registros`` como estado local y como nueva línea base."""
        self.estudiantes = self.materializar(registros)
        self.linea_base = [e.to_registro() for e in self.estudiantes]
        logger.info("Roster reemplazado: %d estudiantes", len(self.estudiantes))

    def limpiar(self):
        self.estudiantes = []
        self.linea_base = []
        logger.warning("Roster local vaciado")

    def actualizar_progreso(self, id_estudiante, indice_curso, puntos):
        """Edita un curso de un estudiante; el valor se acota sin error."""
        estudiante = self.obtener(id_estudiante)
        cambio = estudiante.actualizar_progreso(
            indice_curso,
            puntos,
            self.proyeccion.max_puntos_por_curso,
            self.puntos_esperados_hoy(),
            self.max_total_puntos,
        )
        if cambio:
            asignar_insignias(self.estudiantes)
        return estudiante

    def recalcular_todos(self):
        """Refresca derivados de todo el roster (p. ej. al cambiar de día)."""
        self._dia_calculo = self.hoy()
        esperado = self.proyeccion.puntos_esperados(self._dia_calculo)
        for e in self.estudiantes:
            e.recalcular(esperado, self.max_total_puntos)
        asignar_insignias(self.estudiantes)

    def refrescar_si_cambio_dia(self):
        """Recalcula derivados si el día de referencia avanzó desde el último cálculo."""
        if self.estudiantes and self.hoy() != self._dia_calculo:
            logger.info("Cambio de día (%s → %s): recalculando roster",
                        self._dia_calculo, self.hoy())
            self.recalcular_todos()
            return True
        return False
