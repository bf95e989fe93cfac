"""Rutas de la API del monitor de la cohorte."""

import logging

from flask import current_app, jsonify, request

from src.cronograma.calendario import modulos_por_curso
from src.cronograma.fechas import parse_fecha
from src.cronograma.procesado import posicion_actual, procesar_cronograma, semana_actual
from src.sync.sincronizador import CONFLICTO, ERROR, GuardadoEnCursoError
from src.transform.clasificador import siguiente_paso
from src.transform.estadisticas import calcular_estadisticas, calcular_logros
from src.transform.plan_recuperacion import plan_recuperacion, planificar_desde_modulo

logger = logging.getLogger(__name__)

RESOLUCIONES = ("abortar", "sobrescribir")


def _estado():
    return current_app.config["ESTADO_APP"]


def _sincronizador():
    return current_app.config["SINCRONIZADOR"]


def _id_desde_ruta(valor):
    try:
        return int(valor)
    except ValueError:
        return valor


def _detalle_estudiante(estado_app, estudiante, procesado):
    registro = estudiante.to_registro()
    registro["rankBadge"] = estudiante.insignia_ranking
    registro["nextStep"] = siguiente_paso(estudiante, estado_app.max_total_puntos)
    registro["catchUpPlan"] = plan_recuperacion(estudiante, procesado)
    registro["achievements"] = calcular_logros(estudiante, estado_app.max_total_puntos)
    return registro


def register_routes(app):
    """Registra todas las rutas en la app Flask."""

    # ── API: health ───────────────────────────────────────

    @app.route("/api/health")
    def api_health():
        """Health check con la fecha de referencia y el estado de sync."""
        estado_app = _estado()
        return jsonify({
            "status": "ok",
            "fecha_referencia": estado_app.hoy().isoformat(),
            "sync": estado_app.sync.to_dict(),
        })

    # ── API: estudiantes ──────────────────────────────────

    @app.route("/api/estudiantes")
    def api_estudiantes():
        """Roster local con derivados al día."""
        estado_app = _estado()
        estudiantes = []
        for e in estado_app.estudiantes:
            registro = e.to_registro()
            registro["rankBadge"] = e.insignia_ranking
            estudiantes.append(registro)
        return jsonify({
            "estudiantes": estudiantes,
            "modificados": sorted(estado_app.ids_modificados(), key=str),
            "expectedPointsToday": estado_app.puntos_esperados_hoy(),
        })

    @app.route("/api/estudiantes/<id_estudiante>")
    def api_estudiante(id_estudiante):
        """Perfil: registro, siguiente paso, plan de recuperación y logros."""
        estado_app = _estado()
        try:
            estudiante = estado_app.obtener(_id_desde_ruta(id_estudiante))
        except KeyError:
            return jsonify({"error": f"Estudiante {id_estudiante} no encontrado"}), 404

        procesado = procesar_cronograma(estado_app.proyeccion, estado_app.hoy())
        return jsonify(_detalle_estudiante(estado_app, estudiante, procesado))

    @app.route("/api/estudiantes/<id_estudiante>/progreso", methods=["PATCH"])
    def api_actualizar_progreso(id_estudiante):
        """Edita el puntaje de un curso.  ``{"curso": i, "puntos": n}``."""
        data = request.get_json(silent=True)
        if not data or "curso" not in data or "puntos" not in data:
            return jsonify({"error": "Se requieren 'curso' y 'puntos'"}), 400

        try:
            indice = int(data["curso"])
        except (TypeError, ValueError):
            return jsonify({"error": "'curso' debe ser un índice entero"}), 400

        estado_app = _estado()
        try:
            estudiante = estado_app.actualizar_progreso(
                _id_desde_ruta(id_estudiante), indice, data["puntos"]
            )
        except KeyError:
            return jsonify({"error": f"Estudiante {id_estudiante} no encontrado"}), 404
        except IndexError as e:
            return jsonify({"error": str(e)}), 400

        registro = estudiante.to_registro()
        registro["rankBadge"] = estudiante.insignia_ranking
        return jsonify(registro)

    # ── API: cronograma ───────────────────────────────────

    @app.route("/api/cronograma")
    def api_cronograma():
        """Cronograma procesado y posición actual del programa."""
        estado_app = _estado()
        hoy = estado_app.hoy()
        procesado = procesar_cronograma(estado_app.proyeccion, hoy)
        actual = posicion_actual(procesado, hoy)
        return jsonify({
            "hoy": hoy.isoformat(),
            "expectedPointsToday": estado_app.puntos_esperados_hoy(),
            "actual": actual.to_dict() if actual else None,
            "cursos": modulos_por_curso(estado_app.proyeccion.calendario),
            "hitos": [h.to_dict() for h in estado_app.proyeccion.hitos],
            "cronograma": [item.to_dict() for item in procesado],
        })

    @app.route("/api/cronograma/semana")
    def api_semana():
        """Vista semanal (lunes a sábado) alrededor del día de referencia."""
        estado_app = _estado()
        hoy = estado_app.hoy()
        procesado = procesar_cronograma(estado_app.proyeccion, hoy)
        return jsonify({"hoy": hoy.isoformat(), "semana": semana_actual(procesado, hoy)})

    @app.route("/api/esperado")
    def api_esperado():
        """Puntaje esperado para ``?fecha=YYYY-MM-DD`` (por defecto hoy)."""
        estado_app = _estado()
        texto = request.args.get("fecha")
        try:
            fecha = parse_fecha(texto) if texto else estado_app.hoy()
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({
            "fecha": fecha.isoformat(),
            "expectedPoints": estado_app.proyeccion.puntos_esperados(fecha),
        })

    @app.route("/api/plan", methods=["POST"])
    def api_plan():
        """Plan de recuperación desde el último módulo completado."""
        data = request.get_json(silent=True)
        if not data or not data.get("curso") or not data.get("modulo"):
            return jsonify({"error": "Se requieren 'curso' y 'modulo'"}), 400

        estado_app = _estado()
        hoy = estado_app.hoy()
        procesado = procesar_cronograma(estado_app.proyeccion, hoy)
        try:
            plan = planificar_desde_modulo(
                procesado, data["curso"], data["modulo"], hoy,
                estado_app.puntos_esperados_hoy(),
            )
        except KeyError as e:
            return jsonify({"error": str(e.args[0])}), 404
        return jsonify(plan)

    # ── API: estadísticas ─────────────────────────────────

    @app.route("/api/estadisticas")
    def api_estadisticas():
        estado_app = _estado()
        return jsonify(
            calcular_estadisticas(estado_app.estudiantes, estado_app.puntos_esperados_hoy())
        )

    # ── API: sincronización ───────────────────────────────

    @app.route("/api/sync")
    def api_sync():
        return jsonify(_estado().sync.to_dict())

    @app.route("/api/sync/cargar", methods=["POST"])
    def api_sync_cargar():
        """Recarga el roster desde el registro remoto."""
        ok = _sincronizador().cargar()
        estado_app = _estado()
        return jsonify({
            "ok": ok,
            "sync": estado_app.sync.to_dict(),
            "total_estudiantes": len(estado_app.estudiantes),
        }), (200 if ok else 502)

    @app.route("/api/sync/guardar", methods=["POST"])
    def api_sync_guardar():
        """Guarda cambios locales.  ``{"resolucion": "abortar"|"sobrescribir"}``."""
        data = request.get_json(silent=True) or {}
        resolucion = data.get("resolucion")
        if resolucion is not None and resolucion not in RESOLUCIONES:
            return jsonify({
                "error": f"'resolucion' debe ser uno de {list(RESOLUCIONES)}"
            }), 400

        decidir = None
        if resolucion is not None:
            def decidir(conflictos):
                return resolucion == "sobrescribir"

        try:
            resultado = _sincronizador().guardar(decidir)
        except GuardadoEnCursoError as e:
            return jsonify({"error": str(e)}), 409

        cuerpo = resultado.to_dict()
        cuerpo["sync"] = _estado().sync.to_dict()
        if resultado.resultado == CONFLICTO:
            return jsonify(cuerpo), 409
        if resultado.resultado == ERROR:
            return jsonify(cuerpo), 502
        return jsonify(cuerpo)
