"""Tests para el cliente HTTP del registro remoto."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from src.ingest.registro_remoto import (
    AlmacenHTTP,
    PayloadInvalidoError,
    RegistroRemotoError,
    extraer_registros,
)

URL = "https://registro.example.com/exec"


def _respuesta(status=200, data=None, texto="", json_error=False):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.text = texto
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = data
    return response


def _almacen(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        session.post.side_effect = error
    else:
        session.get.return_value = response
        session.post.return_value = response
    return AlmacenHTTP(url=URL, timeout=5, session=session), session


class TestExtraerRegistros:
    def test_lista(self):
        assert extraer_registros([{"id": 1}]) == [{"id": 1}]

    def test_objeto_students(self):
        assert extraer_registros({"students": [{"id": 2}]}) == [{"id": 2}]

    def test_lista_vacia(self):
        assert extraer_registros([]) == []

    def test_forma_inesperada(self):
        with pytest.raises(PayloadInvalidoError):
            extraer_registros({"data": []})
        with pytest.raises(PayloadInvalidoError):
            extraer_registros("hola")

    def test_registro_sin_id(self):
        with pytest.raises(PayloadInvalidoError, match="sin 'id'"):
            extraer_registros([{"id": 1}, {"name": "X"}])


class TestFetchAll:
    def test_lee_lista(self):
        almacen, session = _almacen(_respuesta(data=[{"id": 1}, {"id": 2}]))
        assert almacen.fetch_all() == [{"id": 1}, {"id": 2}]
        session.get.assert_called_once_with(URL, timeout=5)

    def test_lee_objeto_students(self):
        almacen, _ = _almacen(_respuesta(data={"students": [{"id": 7}]}))
        assert almacen.fetch_all() == [{"id": 7}]

    def test_cuerpo_no_json(self):
        almacen, _ = _almacen(_respuesta(json_error=True))
        with pytest.raises(PayloadInvalidoError):
            almacen.fetch_all()

    def test_http_no_exitoso(self):
        almacen, _ = _almacen(_respuesta(status=500, texto="boom"))
        with pytest.raises(RegistroRemotoError, match="500") as exc:
            almacen.fetch_all()
        assert not isinstance(exc.value, PayloadInvalidoError)

    def test_error_de_red(self):
        almacen, _ = _almacen(error=requests.exceptions.ConnectionError("caído"))
        with pytest.raises(RegistroRemotoError, match="red"):
            almacen.fetch_all()

    def test_timeout(self):
        almacen, _ = _almacen(error=requests.exceptions.Timeout("lento"))
        with pytest.raises(RegistroRemotoError, match="Timeout"):
            almacen.fetch_all()

    def test_sin_url(self):
        almacen = AlmacenHTTP(url="", session=MagicMock())
        with pytest.raises(RegistroRemotoError, match="REGISTRO_URL"):
            almacen.fetch_all()
        almacen.session.get.assert_not_called()


class TestSaveAll:
    def test_post_con_payload(self):
        almacen, session = _almacen(_respuesta())
        registros = [{"id": 1, "name": "Ñandú Pérez", "courseProgress": [100, 0]}]

        assert almacen.save_all(registros) is True

        args, kwargs = session.post.call_args
        assert args == (URL,)
        assert kwargs["timeout"] == 5
        assert json.loads(kwargs["data"]["payload"]) == registros
        assert "Ñandú" in kwargs["data"]["payload"]

    def test_http_no_exitoso(self):
        almacen, _ = _almacen(_respuesta(status=403, texto="denegado"))
        with pytest.raises(RegistroRemotoError, match="403"):
            almacen.save_all([{"id": 1}])

    def test_error_de_red(self):
        almacen, _ = _almacen(error=requests.exceptions.ConnectionError("caído"))
        with pytest.raises(RegistroRemotoError):
            almacen.save_all([{"id": 1}])
