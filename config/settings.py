"""Configuración centralizada: lee variables desde .env."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Raíz del proyecto: dos niveles arriba de este archivo (config/settings.py)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Cargar .env desde la raíz del proyecto
load_dotenv(PROJECT_ROOT / ".env")

# ── Registro remoto (hoja de cálculo) ──────────────────────
REGISTRO_URL = os.getenv("REGISTRO_URL", "")
REGISTRO_TIMEOUT = int(os.getenv("REGISTRO_TIMEOUT", "30"))

# ── Programa ───────────────────────────────────────────────
MAX_PUNTOS_POR_CURSO = int(os.getenv("MAX_PUNTOS_POR_CURSO", "100"))
TOTAL_CURSOS = int(os.getenv("TOTAL_CURSOS", "0"))  # 0 = derivar; si no, debe coincidir con el calendario
OFFSET_HORAS_REFERENCIA = int(os.getenv("OFFSET_HORAS_REFERENCIA", "-6"))

CALENDARIO_PATH = os.getenv("CALENDARIO_PATH", "")
if CALENDARIO_PATH:
    CALENDARIO_PATH = Path(CALENDARIO_PATH)
    if not CALENDARIO_PATH.is_absolute():
        CALENDARIO_PATH = PROJECT_ROOT / CALENDARIO_PATH
else:
    CALENDARIO_PATH = None

# ── Rutas de salida ────────────────────────────────────────
OUTPUT_PATH = Path(os.getenv("OUTPUT_PATH", "./data/output"))
if not OUTPUT_PATH.is_absolute():
    OUTPUT_PATH = PROJECT_ROOT / OUTPUT_PATH
JSON_RESUMEN_PATH = OUTPUT_PATH / "resumen_cohorte.json"

# ── Servidor web ───────────────────────────────────────────
WEB_PORT = int(os.getenv("WEB_PORT", "5000"))
WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:*,http://127.0.0.1:*"
    ).split(",")
    if o.strip()
]

# ── Logging ────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
