"""Registro de estudiante: conversión desde/hacia el registro remoto.

El registro remoto usa las claves de la hoja de cálculo (``courseProgress``,
``totalPoints``...).  Los campos derivados (``totalPoints``,
``expectedPoints``, ``status``) se recalculan siempre al materializar y
después de cada edición de puntos.
"""

import json
import logging
import math
from dataclasses import dataclass, field

from src.cronograma.fechas import ahora_iso
from src.transform.clasificador import Estado, clasificar

logger = logging.getLogger(__name__)


@dataclass
class UltimaModificacion:
    timestamp: str
    puntos_anteriores: float
    puntos_nuevos: float

    @classmethod
    def desde_registro(cls, registro):
        if not isinstance(registro, dict) or not registro.get("timestamp"):
            return None
        return cls(
            timestamp=str(registro["timestamp"]),
            puntos_anteriores=_a_numero(registro.get("previousTotalPoints")),
            puntos_nuevos=_a_numero(registro.get("newTotalPoints")),
        )

    def to_registro(self):
        return {
            "timestamp": self.timestamp,
            "previousTotalPoints": self.puntos_anteriores,
            "newTotalPoints": self.puntos_nuevos,
        }


@dataclass
class Estudiante:
    id: int
    nombre: str
    progreso_cursos: list
    telefono: str = ""
    institucion: str = ""
    departamento: str = ""
    puntos_totales: float = 0
    puntos_esperados: float = 0
    estado: Estado = Estado.SIN_INICIAR
    identidad_verificada: bool = False
    dos_pasos_verificado: bool = False
    certificados: list = field(default_factory=list)
    certificado_final: bool = False
    estado_dtv: bool = False
    ultima_modificacion: UltimaModificacion = None
    insignia_ranking: str = None

    @classmethod
    def desde_registro(cls, registro, total_cursos):
        """Materializa un registro remoto.

        ``courseProgress`` y ``certificateStatus`` se ajustan a
        ``total_cursos`` posiciones (se rellenan con 0 / ``False``).
        """
        progreso = _a_lista(registro.get("courseProgress"))
        if len(progreso) > total_cursos:
            logger.warning(
                "Estudiante %s: %d cursos en courseProgress, se usan %d",
                registro.get("id"), len(progreso), total_cursos,
            )
        progreso = [_a_numero(p) for p in progreso[:total_cursos]]
        progreso += [0] * (total_cursos - len(progreso))

        certificados = _a_lista(registro.get("certificateStatus"))
        certificados = [_a_bool(c) for c in certificados[:total_cursos]]
        certificados += [False] * (total_cursos - len(certificados))

        estado = Estado.desde_texto(registro.get("status")) or Estado.SIN_INICIAR

        return cls(
            id=_a_id(registro.get("id")),
            nombre=_a_texto(registro.get("name")),
            telefono=_a_texto(registro.get("phone")),
            institucion=_a_texto(registro.get("institucion")),
            departamento=_a_texto(registro.get("departamento")),
            progreso_cursos=progreso,
            puntos_totales=_a_numero(registro.get("totalPoints")),
            puntos_esperados=_a_numero(registro.get("expectedPoints")),
            estado=estado,
            identidad_verificada=_a_bool(registro.get("identityVerified")),
            dos_pasos_verificado=_a_bool(registro.get("twoFactorVerified")),
            certificados=certificados,
            certificado_final=_a_bool(registro.get("finalCertificateStatus")),
            estado_dtv=_a_bool(registro.get("dtvStatus")),
            ultima_modificacion=UltimaModificacion.desde_registro(
                registro.get("lastModification")
            ),
        )

    def to_registro(self):
        """Dict con las claves del registro remoto, listo para JSON."""
        registro = {
            "id": self.id,
            "name": self.nombre,
            "phone": self.telefono,
            "institucion": self.institucion,
            "departamento": self.departamento,
            "courseProgress": list(self.progreso_cursos),
            "totalPoints": self.puntos_totales,
            "expectedPoints": self.puntos_esperados,
            "status": self.estado.value,
            "identityVerified": self.identidad_verificada,
            "twoFactorVerified": self.dos_pasos_verificado,
            "certificateStatus": list(self.certificados),
            "finalCertificateStatus": self.certificado_final,
            "dtvStatus": self.estado_dtv,
        }
        if self.ultima_modificacion is not None:
            registro["lastModification"] = self.ultima_modificacion.to_registro()
        return registro

    def recalcular(self, puntos_esperados, max_total_puntos):
        """Refresca total, puntaje esperado y estado."""
        self.puntos_totales = _a_numero(sum(self.progreso_cursos))
        self.puntos_esperados = puntos_esperados
        self.estado = clasificar(self.puntos_totales, puntos_esperados, max_total_puntos)
        return self

    def actualizar_progreso(self, indice_curso, puntos, max_por_curso,
                            puntos_esperados, max_total_puntos, timestamp=None):
        """Edita el avance de un curso.

        El valor se acota a ``[0, max_por_curso]`` sin error.  Si el total
        cambia se registra la modificación.

        Returns
        -------
        bool
            ``True`` si el total de puntos cambió.
        """
        if not 0 <= indice_curso < len(self.progreso_cursos):
            raise IndexError(f"Curso fuera de rango: {indice_curso}")

        valor = acotar_puntos(puntos, max_por_curso)
        anterior = self.puntos_totales

        self.progreso_cursos[indice_curso] = valor
        self.recalcular(puntos_esperados, max_total_puntos)

        if self.puntos_totales == anterior:
            return False

        self.ultima_modificacion = UltimaModificacion(
            timestamp=timestamp or ahora_iso(),
            puntos_anteriores=anterior,
            puntos_nuevos=self.puntos_totales,
        )
        logger.info(
            "Estudiante %s: curso %d → %s (total %s → %s)",
            self.id, indice_curso + 1, valor, anterior, self.puntos_totales,
        )
        return True


def acotar_puntos(valor, max_por_curso):
    """Convierte a número y acota a ``[0, max_por_curso]``; basura → 0."""
    numero = _a_numero(valor)
    acotado = min(max(numero, 0), max_por_curso)
    if acotado != numero:
        logger.warning("Puntaje %s acotado a %s", valor, acotado)
    return acotado


def _a_numero(val):
    if val is None or isinstance(val, bool):
        return 0
    try:
        numero = float(val)
    except (ValueError, TypeError):
        return 0
    if math.isnan(numero) or math.isinf(numero):
        return 0
    return int(numero) if numero.is_integer() else numero


def _a_bool(val):
    if isinstance(val, str):
        return val.strip().lower() in ("true", "1", "si", "sí", "verdadero")
    return bool(val)


def _a_texto(val):
    if val is None:
        return ""
    s = str(val).strip()
    return "" if s in ("nan", "None") else s


def _a_lista(val):
    # La hoja de cálculo a veces entrega arreglos serializados como texto
    if isinstance(val, str):
        try:
            val = json.loads(val)
        except ValueError:
            logger.warning("Arreglo inválido en registro: '%s'", val)
            return []
    return list(val) if isinstance(val, (list, tuple)) else []


def _a_id(val):
    try:
        return int(float(val))
    except (ValueError, TypeError):
        return val
