"""Tests para la proyección de puntos esperados y el calendario."""

import json
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from config import settings
from src.cronograma.calendario import (
    CALENDARIO_PROGRAMA,
    cargar_calendario,
    construir_calendario,
    modulos_por_curso,
    nombres_cursos,
)
from src.cronograma.fechas import hoy_referencia, lunes_de_semana, parse_fecha
from src.transform.proyeccion import Hito, ProyeccionHitos, construir_hitos


def _dia(n):
    """Día n del escenario: día 0 = 2024-12-31."""
    return date(2024, 12, 31) + timedelta(days=n)


@pytest.fixture
def calendario_dos_cursos():
    """Curso A del día 1 al 10, curso B del día 11 al 20."""
    filas = [(_dia(n), "A", f"A{(n - 1) // 5 + 1}") for n in range(1, 11)]
    filas += [(_dia(n), "B", f"B{(n - 11) // 5 + 1}") for n in range(11, 21)]
    return construir_calendario(filas)


@pytest.fixture
def proyeccion(calendario_dos_cursos):
    return ProyeccionHitos(calendario_dos_cursos, max_puntos_por_curso=100, total_cursos=2)


class TestConstruirHitos:
    def test_hitos_escenario(self, calendario_dos_cursos):
        hitos = construir_hitos(calendario_dos_cursos, 100)
        assert hitos == [
            Hito(_dia(0), 0),
            Hito(_dia(10), 100),
            Hito(_dia(20), 200),
        ]

    def test_calendario_vacio(self):
        assert construir_hitos([], 100) == []

    def test_dias_compartidos(self):
        """Varias entradas el mismo día no generan hitos extra."""
        calendario = construir_calendario([
            ("2025-03-01", "A", "m1"),
            ("2025-03-01", "A", "m2"),
            ("2025-03-02", "B", "m1"),
        ])
        hitos = construir_hitos(calendario, 50)
        assert [h.puntos for h in hitos] == [0, 50, 100]
        assert hitos[0].fecha == date(2025, 2, 28)

    def test_orden_estricto_calendario_real(self):
        hitos = construir_hitos(construir_calendario(CALENDARIO_PROGRAMA), 100)
        fechas = [h.fecha for h in hitos]
        puntos = [h.puntos for h in hitos]
        assert fechas == sorted(set(fechas))
        assert puntos == sorted(puntos)
        assert puntos[-1] == 600
        assert len(hitos) == 7


class TestPuntosEsperados:
    def test_escenario_dos_cursos(self, proyeccion):
        assert proyeccion.puntos_esperados(_dia(5)) == 50
        assert proyeccion.puntos_esperados(_dia(10)) == 100
        assert proyeccion.puntos_esperados(_dia(15)) == 150
        assert proyeccion.puntos_esperados(_dia(25)) == 200

    def test_antes_del_inicio(self, proyeccion):
        assert proyeccion.puntos_esperados(_dia(0)) == 0
        assert proyeccion.puntos_esperados(_dia(-1)) == 0
        assert proyeccion.puntos_esperados(date(2000, 1, 1)) == 0

    def test_futuro_lejano_sin_sobrepasar(self, proyeccion):
        assert proyeccion.puntos_esperados(_dia(20)) == 200
        assert proyeccion.puntos_esperados(date(2099, 12, 31)) == 200

    def test_hitos_exactos(self, proyeccion):
        for hito in proyeccion.hitos:
            assert proyeccion.puntos_esperados(hito.fecha) == hito.puntos

    def test_valor_fraccional(self):
        calendario = construir_calendario([
            ("2025-01-01", "A", "m"),
            ("2025-01-02", "A", "m"),
            ("2025-01-03", "A", "m"),
        ])
        p = ProyeccionHitos(calendario, max_puntos_por_curso=100, total_cursos=1)
        assert p.puntos_esperados("2025-01-01") == pytest.approx(100 / 3)

    def test_monotonia(self):
        p = ProyeccionHitos(construir_calendario(CALENDARIO_PROGRAMA), 100)
        inicio = date(2025, 7, 1)
        valores = [p.puntos_esperados(inicio + timedelta(days=i)) for i in range(120)]
        assert all(a <= b for a, b in zip(valores, valores[1:]))
        assert valores[0] == 0
        assert valores[-1] == 600

    def test_acepta_texto_y_datetime(self, proyeccion):
        assert proyeccion.puntos_esperados("2025-01-05") == 50
        assert proyeccion.puntos_esperados(datetime(2025, 1, 5, 23, 59)) == 50

    def test_calendario_vacio_retorna_cero(self):
        p = ProyeccionHitos([], max_puntos_por_curso=100, total_cursos=0)
        assert p.hitos == []
        assert p.puntos_esperados(date(2025, 8, 1)) == 0
        assert p.total_max_puntos == 0


class TestCantidadCursos:
    """La cantidad de cursos configurada debe coincidir con el calendario."""

    @pytest.mark.parametrize("total", [1, 3])
    def test_construir_hitos_rechaza_diferencia(self, calendario_dos_cursos, total):
        with pytest.raises(ValueError, match="total_cursos"):
            construir_hitos(calendario_dos_cursos, 100, total_cursos=total)

    @pytest.mark.parametrize("total", [1, 3])
    def test_proyeccion_rechaza_diferencia(self, calendario_dos_cursos, total):
        with pytest.raises(ValueError):
            ProyeccionHitos(calendario_dos_cursos, 100, total_cursos=total)

    def test_settings_no_sobrescribe_en_silencio(self, calendario_dos_cursos):
        with patch.object(settings, "TOTAL_CURSOS", 1):
            with pytest.raises(ValueError):
                ProyeccionHitos(calendario_dos_cursos, 100)

    def test_settings_cero_deriva_del_calendario(self, calendario_dos_cursos):
        with patch.object(settings, "TOTAL_CURSOS", 0):
            p = ProyeccionHitos(calendario_dos_cursos, 100)
        assert p.total_cursos == 2
        assert p.hitos[-1].puntos == p.total_max_puntos

    def test_ultimo_hito_igual_al_maximo(self, proyeccion):
        assert proyeccion.hitos[-1].puntos == proyeccion.total_max_puntos
        valores = [proyeccion.puntos_esperados(_dia(n)) for n in range(-2, 30)]
        assert all(a <= b for a, b in zip(valores, valores[1:]))


class TestCalendario:
    def test_cursos_en_orden_de_aparicion(self):
        calendario = construir_calendario(CALENDARIO_PROGRAMA)
        cursos = nombres_cursos(calendario)
        assert len(cursos) == 6
        assert cursos[0].startswith("1.")
        assert cursos[-1].startswith("6.")

    def test_modulos_sin_repetir(self):
        calendario = construir_calendario(CALENDARIO_PROGRAMA)
        modulos = modulos_por_curso(calendario)
        primero = modulos[nombres_cursos(calendario)[0]]
        assert primero[:3] == ["Introducción a la informática", "Hardware", "Sistema operativo"]
        assert len(primero) == len(set(primero))

    def test_cargar_desde_json(self, tmp_path):
        path = tmp_path / "calendario.json"
        path.write_text(json.dumps([
            {"date": "2025-02-02", "course": "B", "module": "x"},
            {"date": "2025-02-01", "course": "A", "module": "y"},
        ]), encoding="utf-8")
        calendario = cargar_calendario(path)
        assert [e.curso for e in calendario] == ["A", "B"]

    def test_cargar_json_invalido(self, tmp_path):
        path = tmp_path / "calendario.json"
        path.write_text(json.dumps({"date": "2025-02-02"}), encoding="utf-8")
        with pytest.raises(ValueError):
            cargar_calendario(path)


class TestFechas:
    def test_hoy_referencia_utc_menos_6(self):
        # 03:00 UTC del 2 de agosto = 21:00 del 1 de agosto en UTC-6
        assert hoy_referencia(datetime(2025, 8, 2, 3, 0), offset_horas=-6) == date(2025, 8, 1)
        assert hoy_referencia(datetime(2025, 8, 2, 6, 0), offset_horas=-6) == date(2025, 8, 2)

    def test_parse_fecha(self):
        assert parse_fecha("2025-08-01") == date(2025, 8, 1)
        assert parse_fecha("2025-08-01T10:00:00Z") == date(2025, 8, 1)
        with pytest.raises(ValueError):
            parse_fecha("ayer")

    def test_lunes_de_semana(self):
        assert lunes_de_semana(date(2025, 8, 6)) == date(2025, 8, 4)   # miércoles
        assert lunes_de_semana(date(2025, 8, 10)) == date(2025, 8, 4)  # domingo
