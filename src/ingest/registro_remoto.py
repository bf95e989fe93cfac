"""Cliente HTTP del registro remoto (hoja de cálculo publicada como web app).

Contrato del endpoint:

- ``GET``  → lista de registros, o un objeto ``{"students": [...]}``
- ``POST`` → campo de formulario ``payload`` con la lista completa en JSON

No hay actualizaciones parciales ni paginación: cada guardado reemplaza el
conjunto completo.  Este módulo no reintenta; los errores se informan al
operador, que decide si volver a intentar.
"""

import json
import logging

import requests

from config import settings

logger = logging.getLogger(__name__)


class RegistroRemotoError(RuntimeError):
    """Error de red o respuesta HTTP no exitosa del registro remoto."""
    pass


class PayloadInvalidoError(RegistroRemotoError):
    """La respuesta no es una lista ni un objeto con ``students``."""
    pass


def extraer_registros(data):
    """Lista de registros contenida en la respuesta del ``GET``.

    Raises
    ------
    PayloadInvalidoError
        Si ``data`` no tiene ninguna de las dos formas aceptadas.
    """
    if isinstance(data, list):
        registros = data
    elif isinstance(data, dict) and isinstance(data.get("students"), list):
        registros = data["students"]
    else:
        raise PayloadInvalidoError(
            f"Formato de datos inesperado: {type(data).__name__}"
        )

    invalidos = [r for r in registros if not isinstance(r, dict) or "id" not in r]
    if invalidos:
        raise PayloadInvalidoError(
            f"{len(invalidos)} registros sin 'id' o con formato inválido"
        )
    return registros


class AlmacenRemoto:
    """Interfaz mínima del almacén: ``fetch_all`` / ``save_all``."""

    def fetch_all(self):
        raise NotImplementedError

    def save_all(self, registros):
        raise NotImplementedError


class AlmacenHTTP(AlmacenRemoto):
    """Implementación sobre ``requests`` contra ``settings.REGISTRO_URL``."""

    def __init__(self, url=None, timeout=None, session=None):
        self.url = url if url is not None else settings.REGISTRO_URL
        self.timeout = timeout if timeout is not None else settings.REGISTRO_TIMEOUT
        self.session = session or requests.Session()

    def _verificar_url(self):
        if not self.url:
            raise RegistroRemotoError(
                "URL del registro remoto no configurada. "
                "Verificar REGISTRO_URL en .env"
            )

    def fetch_all(self):
        """Descarga todos los registros.

        Returns
        -------
        list[dict]

        Raises
        ------
        RegistroRemotoError
            Error de red o HTTP.
        PayloadInvalidoError
            Cuerpo no JSON o con forma inesperada.
        """
        self._verificar_url()
        logger.debug("GET registro remoto: %s", self.url)

        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RegistroRemotoError(f"Timeout leyendo registro remoto: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RegistroRemotoError(f"Error de red leyendo registro remoto: {e}") from e

        if not response.ok:
            raise RegistroRemotoError(
                f"Error HTTP {response.status_code} leyendo registro remoto: "
                f"{response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PayloadInvalidoError(f"Respuesta no es JSON: {e}") from e

        registros = extraer_registros(data)
        logger.info("Registro remoto: %d registros leídos", len(registros))
        return registros

    def save_all(self, registros):
        """Reemplaza el conjunto completo en un solo ``POST``.

        Raises
        ------
        RegistroRemotoError
            Error de red o HTTP.  No hay escritura parcial desde el cliente.
        """
        self._verificar_url()
        payload = json.dumps(registros, ensure_ascii=False, default=str)
        logger.debug("POST registro remoto: %d registros", len(registros))

        try:
            response = self.session.post(
                self.url, data={"payload": payload}, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise RegistroRemotoError(f"Timeout guardando registro remoto: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RegistroRemotoError(f"Error de red guardando registro remoto: {e}") from e

        if not response.ok:
            raise RegistroRemotoError(
                f"Error HTTP {response.status_code} guardando registro remoto: "
                f"{response.text[:200]}"
            )

        logger.info("Registro remoto: %d registros guardados", len(registros))
        return True
