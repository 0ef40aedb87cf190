"""Pruebas de los endpoints HTTP de inscripción y turnos."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.database import get_db
from app.core.security import ROL_PROFESOR, create_access_token
from app.main import app
from app.models import EstadoTurno
from tests.utils.escenario import (
    crear_equipo,
    crear_escape_room,
    crear_estudiantes,
    crear_turno,
    miembros_de,
)

API = "/api/v1"


def _auth(estudiante_id: int, rol: str | None = None) -> dict[str, str]:
    token = create_access_token(estudiante_id, extra={"rol": rol} if rol else None)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory, coordinador):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.state.coordinador = coordinador
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    del app.state.coordinador


@pytest_asyncio.fixture
async def escenario(db):
    er = await crear_escape_room(db, team_size=2, nmax=4)
    turno = await crear_turno(db, er.id)
    a, b, c, x = await crear_estudiantes(db, 4)
    t1 = await crear_equipo(db, turno.id, "T1", miembros=[a])
    t2 = await crear_equipo(db, turno.id, "T2", miembros=[b, c])
    await db.commit()
    return {"er": er, "turno": turno, "t1": t1, "t2": t2, "x": x, "a": a}


def _ruta_miembros(e, equipo) -> str:
    return f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/equipos/{equipo.id}/miembros"


class TestUnirseAEquipo:

    @pytest.mark.asyncio
    async def test_inscribe_y_repite(self, client, escenario):
        e = escenario
        headers = _auth(e["x"].id)

        primera = await client.put(_ruta_miembros(e, e["t1"]), headers=headers)
        segunda = await client.put(_ruta_miembros(e, e["t1"]), headers=headers)

        assert primera.status_code == 201
        assert primera.json()["resultado"] == "inscrito"
        assert segunda.status_code == 200
        assert segunda.json()["resultado"] == "ya_inscrito_mismo_turno"

    @pytest.mark.asyncio
    async def test_equipo_completo_es_conflicto(self, client, escenario):
        e = escenario

        response = await client.put(_ruta_miembros(e, e["t2"]), headers=_auth(e["x"].id))

        assert response.status_code == 409
        assert response.json()["detail"]["resultado"] == "equipo_completo"
        assert response.json()["detail"]["mensaje"]

    @pytest.mark.asyncio
    async def test_otro_equipo_del_turno_es_conflicto(self, client, escenario):
        e = escenario

        response = await client.put(_ruta_miembros(e, e["t2"]), headers=_auth(e["a"].id))

        assert response.status_code == 409
        assert response.json()["detail"]["resultado"] == "ya_inscrito_en_otro_turno"

    @pytest.mark.asyncio
    async def test_equipo_inexistente(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/equipos/999999/miembros"

        response = await client.put(ruta, headers=_auth(e["x"].id))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_sin_token(self, client, escenario):
        response = await client.put(_ruta_miembros(escenario, escenario["t1"]))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_invalido(self, client, escenario):
        response = await client.put(
            _ruta_miembros(escenario, escenario["t1"]),
            headers={"Authorization": "Bearer no-es-un-jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_profesor_no_se_inscribe(self, client, escenario):
        response = await client.put(
            _ruta_miembros(escenario, escenario["t1"]),
            headers=_auth(escenario["x"].id, rol=ROL_PROFESOR),
        )

        assert response.status_code == 403


class TestCrearYAbandonarEquipo:

    @pytest.mark.asyncio
    async def test_crear_equipo(self, client, session_factory, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/equipos"

        response = await client.post(ruta, json={"nombre": "  Los Enigmas "}, headers=_auth(e["x"].id))

        assert response.status_code == 201
        equipo_id = response.json()["equipo_id"]
        assert await miembros_de(session_factory, equipo_id) == [e["x"].id]

    @pytest.mark.asyncio
    async def test_crear_equipo_nombre_vacio(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/equipos"

        response = await client.post(ruta, json={"nombre": "   "}, headers=_auth(e["x"].id))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_abandonar_equipo(self, client, session_factory, escenario):
        e = escenario

        response = await client.delete(f"{API}/equipos/{e['t1'].id}/miembros", headers=_auth(e["a"].id))

        assert response.status_code == 200
        assert response.json()["resultado"] == "retirado"
        assert await miembros_de(session_factory, e["t1"].id) == []

    @pytest.mark.asyncio
    async def test_abandonar_equipo_ajeno(self, client, escenario):
        e = escenario

        response = await client.delete(f"{API}/equipos/{e['t2'].id}/miembros", headers=_auth(e["x"].id))

        assert response.status_code == 409
        assert response.json()["detail"]["resultado"] == "no_inscrito"


class TestConsultasDeTurnos:

    @pytest.mark.asyncio
    async def test_ocupacion(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/ocupacion"

        response = await client.get(ruta, headers=_auth(e["x"].id))

        data = response.json()
        assert response.status_code == 200
        assert data["ocupacion"] == 3
        assert data["plazas_libres"] == 1
        assert [(eq["nombre"], eq["miembros"]) for eq in data["equipos"]] == [("T1", 1), ("T2", 2)]

    @pytest.mark.asyncio
    async def test_ocupacion_turno_inexistente(self, client, escenario):
        ruta = f"{API}/escape-rooms/{escenario['er'].id}/turnos/999999/ocupacion"

        response = await client.get(ruta, headers=_auth(escenario["x"].id))

        assert response.status_code == 404
        assert response.json()["codigo"] == "NO_ENCONTRADO"

    @pytest.mark.asyncio
    async def test_disponibles_y_mis_turnos(self, client, escenario):
        e = escenario
        headers = _auth(e["x"].id)
        base = f"{API}/escape-rooms/{e['er'].id}"

        disponibles = await client.get(f"{base}/turnos/disponibles", headers=headers)
        await client.put(_ruta_miembros(e, e["t1"]), headers=headers)
        despues = await client.get(f"{base}/turnos/disponibles", headers=headers)
        mis_turnos = await client.get(f"{base}/mis-turnos", headers=headers)

        assert [(t["id"], t["ocupacion"], t["plazas_libres"]) for t in disponibles.json()["turnos"]] == [
            (e["turno"].id, 3, 1)
        ]
        assert despues.json()["turnos"] == []
        assert [t["id"] for t in mis_turnos.json()["turnos"]] == [e["turno"].id]

    @pytest.mark.asyncio
    async def test_disponibles_escape_room_inexistente(self, client, escenario):
        response = await client.get(
            f"{API}/escape-rooms/999999/turnos/disponibles", headers=_auth(escenario["x"].id)
        )

        assert response.status_code == 404
        assert response.json()["codigo"] == "NO_ENCONTRADO"


class TestAdministracionDeTurnos:

    @pytest.mark.asyncio
    async def test_cancelar_turno_bloquea_inscripciones(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/estado"

        response = await client.patch(
            ruta, json={"estado": EstadoTurno.CANCELADO}, headers=_auth(1, rol=ROL_PROFESOR)
        )
        inscripcion = await client.put(_ruta_miembros(e, e["t1"]), headers=_auth(e["x"].id))

        assert response.status_code == 200
        assert response.json()["estado"] == "cancelado"
        assert inscripcion.status_code == 409
        assert inscripcion.json()["detail"]["resultado"] == "turno_cerrado"

    @pytest.mark.asyncio
    async def test_estado_invalido(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/estado"

        response = await client.patch(ruta, json={"estado": "pausado"}, headers=_auth(1, rol=ROL_PROFESOR))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_estudiante_no_cambia_estado(self, client, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/estado"

        response = await client.patch(ruta, json={"estado": "cancelado"}, headers=_auth(e["x"].id))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reiniciar_turno(self, client, session_factory, escenario):
        e = escenario
        ruta = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/reiniciar"

        response = await client.post(ruta, headers=_auth(1, rol=ROL_PROFESOR))

        assert response.status_code == 200
        assert response.json()["membresias_eliminadas"] == 3
        assert await miembros_de(session_factory, e["t2"].id) == []

    @pytest.mark.asyncio
    async def test_reabrir_turno_con_miembro_en_otro_turno(self, client, db, escenario):
        e = escenario
        domingo = await crear_turno(db, e["er"].id)
        equipo_domingo = await crear_equipo(db, domingo.id)
        await db.commit()
        profesor = _auth(1, rol=ROL_PROFESOR)
        estado = f"{API}/escape-rooms/{e['er'].id}/turnos/{e['turno'].id}/estado"
        unirse = (
            f"{API}/escape-rooms/{e['er'].id}/turnos/{domingo.id}"
            f"/equipos/{equipo_domingo.id}/miembros"
        )

        cancelado = await client.patch(estado, json={"estado": "cancelado"}, headers=profesor)
        inscripcion = await client.put(unirse, headers=_auth(e["a"].id))
        reapertura = await client.patch(estado, json={"estado": "programado"}, headers=profesor)
        mis_turnos = await client.get(
            f"{API}/escape-rooms/{e['er'].id}/mis-turnos", headers=_auth(e["a"].id)
        )

        assert cancelado.status_code == 200
        assert inscripcion.status_code == 201
        assert reapertura.status_code == 409
        assert reapertura.json()["detail"]["resultado"] == "miembro_con_otro_turno"
        assert [t["id"] for t in mis_turnos.json()["turnos"]] == [domingo.id]

    @pytest.mark.asyncio
    async def test_cambiar_estado_turno_inexistente(self, client, escenario):
        ruta = f"{API}/escape-rooms/{escenario['er'].id}/turnos/999999/estado"

        response = await client.patch(ruta, json={"estado": "cancelado"}, headers=_auth(1, rol=ROL_PROFESOR))

        assert response.status_code == 404
