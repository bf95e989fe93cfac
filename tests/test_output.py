"""Tests para estadísticas, insignias de ranking, logros y el resumen JSON."""

import json
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from src.cronograma.calendario import CALENDARIO_PROGRAMA, construir_calendario
from src.output.json_exporter import construir_resumen, exportar_resumen
from src.roster.estado_app import EstadoAplicacion
from src.roster.estudiante import Estudiante
from src.transform.clasificador import Estado
from src.transform.estadisticas import (
    asignar_insignias,
    calcular_estadisticas,
    calcular_logros,
    roster_a_dataframe,
)
from src.transform.proyeccion import ProyeccionHitos

HOY = date(2025, 8, 9)  # 200 puntos esperados


def _registro(id_, progreso):
    return {"id": id_, "name": f"Estudiante {id_}", "courseProgress": progreso}


@pytest.fixture
def estado_app():
    proyeccion = ProyeccionHitos(construir_calendario(CALENDARIO_PROGRAMA), 100, 6)
    app = EstadoAplicacion(proyeccion, reloj=lambda: HOY)
    app.reemplazar([
        _registro(1, [100, 100, 0, 0, 0, 0]),   # Al Día
        _registro(2, [100, 50, 0, 0, 0, 0]),    # Atrasada
        _registro(3, [0, 0, 0, 0, 0, 0]),       # Sin Iniciar
        _registro(4, [100, 100, 100, 0, 0, 0]), # Avanzada
    ])
    return app


class TestInsignias:
    def test_tramos(self):
        estudiantes = [
            Estudiante(id=i, nombre=str(i), progreso_cursos=[], puntos_totales=100 - i)
            for i in range(12)
        ]
        asignar_insignias(estudiantes)
        insignias = [e.insignia_ranking for e in estudiantes]
        assert insignias == (
            ["Top 3"] * 3 + ["Top 5"] * 2 + ["Top 10"] * 5 + [None] * 2
        )

    def test_sin_puntos_sin_insignia(self):
        estudiantes = [
            Estudiante(id=1, nombre="a", progreso_cursos=[], puntos_totales=0),
            Estudiante(id=2, nombre="b", progreso_cursos=[], puntos_totales=10),
        ]
        asignar_insignias(estudiantes)
        assert estudiantes[0].insignia_ranking is None
        assert estudiantes[1].insignia_ranking == "Top 3"

    def test_empates_conservan_orden(self):
        estudiantes = [
            Estudiante(id=i, nombre=str(i), progreso_cursos=[], puntos_totales=50)
            for i in range(5)
        ]
        estudiantes.insert(0, Estudiante(id=99, nombre="x", progreso_cursos=[],
                                         puntos_totales=10))
        asignar_insignias(estudiantes)
        assert [e.insignia_ranking for e in estudiantes] == [
            "Top 10", "Top 3", "Top 3", "Top 3", "Top 5", "Top 5",
        ]

    def test_roster_materializado(self, estado_app):
        insignias = {e.id: e.insignia_ranking for e in estado_app.estudiantes}
        assert insignias == {1: "Top 3", 2: "Top 3", 3: None, 4: "Top 3"}


class TestEstadisticas:
    def test_resumen(self, estado_app):
        stats = calcular_estadisticas(estado_app.estudiantes, 200)

        assert stats["total_estudiantes"] == 4
        assert stats["promedio_puntos"] == 162.5
        assert stats["finalizados"] == 0
        assert stats["puntos_esperados_hoy"] == 200
        assert stats["por_estado"]["Al Día"] == 1
        assert stats["por_estado"]["Atrasada"] == 1
        assert stats["por_estado"]["Sin Iniciar"] == 1
        assert stats["por_estado"]["Avanzada"] == 1
        assert stats["por_estado"]["Elite II"] == 0
        assert len(stats["por_estado"]) == 8

    def test_roster_vacio(self):
        stats = calcular_estadisticas([], 12.345)
        assert stats["total_estudiantes"] == 0
        assert stats["promedio_puntos"] == 0
        assert stats["puntos_esperados_hoy"] == 12.35
        assert all(v == 0 for v in stats["por_estado"].values())

    def test_dataframe(self, estado_app):
        df = roster_a_dataframe(estado_app.estudiantes)
        assert list(df["id"]) == [1, 2, 3, 4]
        assert df.loc[df["id"] == 2, "estado"].item() == "Atrasada"


class TestLogros:
    def test_avanzada_top3(self, estado_app):
        logros = calcular_logros(estado_app.obtener(4), estado_app.max_total_puntos)
        assert logros["racha_perfecta"] is True
        assert logros["madrugador"] is False
        assert logros["constancia_hierro"] is False
        assert logros["pionero"] is True
        assert logros["velocidad_luz"] is True
        assert logros["maestro_conocimiento"] is False

    def test_finalizada(self):
        e = Estudiante(id=1, nombre="a", progreso_cursos=[100] * 6)
        e.recalcular(200, 600)
        assert e.estado == Estado.FINALIZADA
        assert calcular_logros(e, 600)["maestro_conocimiento"] is True

    def test_sin_iniciar(self, estado_app):
        logros = calcular_logros(estado_app.obtener(3), estado_app.max_total_puntos)
        assert not any(logros.values())


class TestResumen:
    def test_estructura(self, estado_app):
        resumen = construir_resumen(estado_app)

        meta = resumen["metadata"]
        assert meta["fecha_referencia"] == "2025-08-09"
        assert meta["total_estudiantes"] == 4
        assert meta["max_total_puntos"] == 600
        assert resumen["estadisticas"]["total_estudiantes"] == 4

        por_id = {e["id"]: e for e in resumen["estudiantes"]}
        assert por_id[1]["status"] == "Al Día"
        assert por_id[1]["rankBadge"] == "Top 3"
        assert por_id[1]["nextStep"] == {
            "pointsNeeded": 1,
            "currentStatus": "Al Día",
            "nextStatus": "Avanzada",
        }
        assert por_id[3]["rankBadge"] is None
        assert por_id[3]["nextStep"]["pointsNeeded"] == 1

    def test_exportar_a_disco(self, estado_app, tmp_path):
        destino = tmp_path / "salida" / "resumen.json"
        resumen = exportar_resumen(estado_app, output_path=destino)

        assert destino.exists()
        with open(destino, encoding="utf-8") as f:
            leido = json.load(f)
        assert leido["metadata"]["total_estudiantes"] == 4
        assert leido["estudiantes"] == resumen["estudiantes"]
        assert "Al Día" in destino.read_text(encoding="utf-8")
