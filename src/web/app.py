"""Servidor web Flask para el monitor de la cohorte."""

import logging

from flask import Flask
from flask_cors import CORS

from config import settings
from src.cronograma.calendario import cargar_calendario
from src.ingest.registro_remoto import AlmacenHTTP
from src.roster.estado_app import EstadoAplicacion
from src.sync.sincronizador import Sincronizador
from src.transform.proyeccion import ProyeccionHitos

logger = logging.getLogger(__name__)


def construir_estado(calendario=None, reloj=None):
    """Estado de la aplicación con la proyección del calendario configurado."""
    if calendario is None:
        calendario = cargar_calendario()
    return EstadoAplicacion(ProyeccionHitos(calendario), reloj=reloj)


def create_app(estado_app=None, almacen=None):
    """Factory para crear la aplicación Flask.

    Parameters
    ----------
    estado_app : EstadoAplicacion, optional
        Por defecto se construye desde el calendario configurado.
    almacen : AlmacenRemoto, optional
        Por defecto :class:`AlmacenHTTP` contra ``settings.REGISTRO_URL``.
    """
    app = Flask(__name__)

    if estado_app is None:
        estado_app = construir_estado()
    if almacen is None:
        almacen = AlmacenHTTP()

    app.config["ESTADO_APP"] = estado_app
    app.config["SINCRONIZADOR"] = Sincronizador(estado_app, almacen)
    app.json.ensure_ascii = False

    CORS(app, origins=settings.CORS_ORIGINS)

    @app.before_request
    def refrescar_derivados():
        estado_app.refrescar_si_cambio_dia()

    # Security headers
    @app.after_request
    def add_security_headers(response):
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response

    # Registrar rutas
    from src.web.routes import register_routes
    register_routes(app)

    return app


if __name__ == "__main__":
    create_app().run(
        host=settings.WEB_HOST,
        port=settings.WEB_PORT,
        debug=False,
        threaded=False,
    )
