import pytest

from gradecore import EngineConfig, RawGrid

HEADERS = ["#", "CARNET", "Alumno", "Correo", "Grupo", "Quiz1", "Parcial 1", "Acumulado", "Eval. Docente", "Final"]

ROWS = [
    ["1", "2021001", "Ana Pérez", "ana@uni.edu", "A", "9/10", "35/40", "44", "5", "APROBADO"],
    ["2", "2021002", "Luis Gómez", "luis@uni.edu", "A", "5/10", "NP", "5", None, "REPROBADO"],
    ["3", "2021003", "Marta Ruiz", "marta@uni.edu", "B", "RM", "RM", None, None, None],
]


@pytest.fixture
def config():
    return EngineConfig(total_points=100.0, passing_score=70.0)


@pytest.fixture
def grid():
    return RawGrid.of(HEADERS, ROWS)
