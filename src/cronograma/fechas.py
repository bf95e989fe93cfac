"""Fechas a granularidad de día en la zona horaria de referencia (UTC-6).

Todas las comparaciones del cronograma se hacen con ``datetime.date``; la
hora y la zona horaria local del servidor no intervienen.
"""

import logging
from datetime import date, datetime, timedelta

from dateutil import tz

from config import settings

logger = logging.getLogger(__name__)


def zona_referencia(offset_horas=None):
    """Zona horaria fija usada para definir el "día actual"."""
    if offset_horas is None:
        offset_horas = settings.OFFSET_HORAS_REFERENCIA
    return tz.tzoffset(f"UTC{offset_horas:+d}", offset_horas * 3600)


def hoy_referencia(ahora=None, offset_horas=None):
    """Fecha civil de hoy en la zona de referencia.

    Parameters
    ----------
    ahora : datetime, optional
        Instante a convertir.  Si es naive se interpreta como UTC.  Si es
        ``None`` se usa el reloj actual.
    """
    zona = zona_referencia(offset_horas)
    if ahora is None:
        return datetime.now(tz=zona).date()
    if ahora.tzinfo is None:
        ahora = ahora.replace(tzinfo=tz.UTC)
    return ahora.astimezone(zona).date()


def parse_fecha(valor):
    """Normaliza ``valor`` a ``date``.

    Acepta ``date``, ``datetime`` (se descarta la hora) o texto
    ``"YYYY-MM-DD"``.  Lanza ``ValueError`` si el texto no es una fecha.
    """
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if not isinstance(valor, str) or not valor.strip():
        raise ValueError(f"Fecha inválida: {valor!r}")
    try:
        return date.fromisoformat(valor.strip()[:10])
    except ValueError as e:
        raise ValueError(f"Fecha inválida: {valor!r}") from e


def ahora_iso():
    """Instante actual en UTC, formato ISO con milisegundos y sufijo Z."""
    return (
        datetime.now(tz=tz.UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def lunes_de_semana(dia):
    """Lunes de la semana de ``dia``; el domingo pertenece a la semana anterior."""
    return dia - timedelta(days=dia.weekday())
