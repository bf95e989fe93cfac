"""Punto de entrada del monitor de la cohorte.

Modos de ejecución:
    python -m src.main --web                → levantar servidor web (API)
    python -m src.main --web --port 8080    → servidor web en puerto específico
    python -m src.main --exportar           → cargar registro remoto + JSON resumen
    python -m src.main --exportar --fecha 2025-08-15 → resumen a una fecha dada
"""

import argparse
import logging
import sys

from config import settings

# Configurar logging antes de importar módulos que lo usen
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_exportar(fecha=None, output_path=None):
    """Carga el roster remoto y escribe el resumen de la cohorte."""
    from src.cronograma.fechas import parse_fecha
    from src.ingest.registro_remoto import AlmacenHTTP
    from src.output.json_exporter import exportar_resumen
    from src.sync.sincronizador import Sincronizador
    from src.web.app import construir_estado

    reloj = None
    if fecha:
        dia = parse_fecha(fecha)

        def reloj():
            return dia

    estado_app = construir_estado(reloj=reloj)
    logger.info("=" * 60)
    logger.info("Exportando resumen de la cohorte (fecha %s)", estado_app.hoy())
    logger.info("=" * 60)

    if not Sincronizador(estado_app, AlmacenHTTP()).cargar():
        logger.error("No se pudo cargar el registro remoto: %s", estado_app.sync.mensaje)
        return None

    resumen = exportar_resumen(estado_app, output_path=output_path)
    logger.info(
        "Resumen: %d estudiantes, promedio %.1f puntos, esperado hoy %.2f",
        resumen["estadisticas"]["total_estudiantes"],
        resumen["estadisticas"]["promedio_puntos"],
        resumen["estadisticas"]["puntos_esperados_hoy"],
    )
    return resumen


def run_web(port=None, host=None):
    """Levanta el servidor web Flask con la API del monitor."""
    from src.web.app import create_app

    _port = port or settings.WEB_PORT
    _host = host or settings.WEB_HOST

    app = create_app()
    app.config["SINCRONIZADOR"].cargar()

    logger.info("=" * 60)
    logger.info("Servidor web iniciando en http://%s:%s", _host, _port)
    logger.info("Ctrl+C para detener")
    logger.info("=" * 60)

    # Un request a la vez: el roster en memoria tiene un solo dueño
    app.run(host=_host, port=_port, debug=False, threaded=False)


def main(argv=None):
    """Punto de entrada principal con soporte de argumentos."""
    parser = argparse.ArgumentParser(description="Monitor de progreso de la cohorte")
    parser.add_argument(
        "--web",
        action="store_true",
        help="Levantar servidor web con la API del monitor",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Puerto para el servidor web (default: 5000)",
    )
    parser.add_argument(
        "--exportar",
        action="store_true",
        help="Cargar el registro remoto y exportar el resumen JSON",
    )
    parser.add_argument(
        "--fecha",
        default=None,
        help="Fecha de referencia YYYY-MM-DD para --exportar (default: hoy UTC-6)",
    )
    args = parser.parse_args(argv)

    if not args.web and not args.exportar:
        parser.print_help()
        return None

    if args.exportar:
        resumen = run_exportar(fecha=args.fecha)
        if resumen is None:
            sys.exit(1)
        if not args.web:
            return 0

    run_web(port=args.port)
    return 0


if __name__ == "__main__":
    main()
