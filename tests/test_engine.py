import json

import pandas as pd
import pytest

from gradecore import (
    AcademicTable, EngineConfig, GradeEngine, GradebookSummary, MissingIdentityField,
    RawGrid, ThresholdPolicy, analyze, compute_statistics, summarize,
)
from gradecore.rules import AcademicStatus


def test_analyze_end_to_end(grid, config):
    engine = analyze(grid, config)

    statuses = [s.status for s in engine.summary.students]
    assert statuses == [AcademicStatus.ON_TRACK, AcademicStatus.WARNING, AcademicStatus.ON_TRACK]

    c = engine.summary.class_summary
    assert c.student_count == 3
    assert c.overall_average == pytest.approx(24.5)
    assert c.accumulated_possible_points == pytest.approx(50.0)
    assert engine.statistics == compute_statistics(engine.table)


def test_summary_is_json_ready(grid, config):
    engine = analyze(grid, config)
    payload = json.loads(json.dumps(engine.get_summary()))

    assert set(payload) == {"students", "evaluations", "class"}
    assert payload["students"][0]["id"] == "2021001"
    assert payload["students"][0]["status"] == "OnTrack"
    assert payload["students"][2]["accumulated_score"] is None
    assert payload["evaluations"][0]["max_possible_score"] == 10.0
    assert payload["class"]["warning_count"] == 1

    assert GradebookSummary.from_dict(payload) == engine.summary


def test_table_payload_round_trip(grid, config):
    engine = analyze(grid, config)
    restored = AcademicTable.from_dict(json.loads(json.dumps(engine.get_table())))
    assert summarize(restored, config) == engine.summary


def test_policy_is_pluggable(grid, config):
    engine = analyze(grid, config, policy=ThresholdPolicy(approved_at=40.0, warning_at=5.0))
    assert [s.status for s in engine.summary.students] == [
        AcademicStatus.APPROVED, AcademicStatus.WARNING, AcademicStatus.FAILED,
    ]
    # statistics do not depend on the policy
    assert engine.statistics == analyze(grid, config).statistics


def test_failed_ingestion_yields_nothing(config):
    grid = RawGrid.of(
        ["#", "CARNET", "Alumno", "Correo", "Grupo", "Q1", "Final"],
        [["1", "2021001", "Ana", "", "A", "8", ""], ["2", None, "Luis", "", "A", "9", ""]],
    )
    with pytest.raises(MissingIdentityField):
        analyze(grid, config)


def test_from_matrix_and_dataframe():
    matrix = [
        ["Curso X", None, None, None, None, None, None, None],
        ["#", "CARNET", "Alumno", "Correo", "Grupo", "Lab 1", "Acumulado", "Final"],
        [1, 2021001, "Ana", "ana@uni.edu", "A", "18/20", 18, "APROBADO"],
        [2, 2021002, "Luis", "luis@uni.edu", "B", "RM", None, None],
    ]
    cfg = EngineConfig(total_points=20.0, passing_score=12.0)

    from_matrix = GradeEngine.from_matrix(matrix, cfg)
    from_frame = GradeEngine.from_dataframe(pd.DataFrame(matrix), cfg)

    assert from_matrix.table.evaluation_names == ("Lab 1",)
    assert from_matrix.table.records[0].identifier == "2021001"
    assert from_matrix.summary.students[0].status is AcademicStatus.APPROVED
    assert from_frame.summary == from_matrix.summary


def test_tier_counts_follow_student_statuses(grid, config):
    summary = analyze(grid, config, policy=ThresholdPolicy(approved_at=40.0, warning_at=5.0)).summary
    for status in AcademicStatus:
        assert summary.class_summary.count_for(status) == sum(s.status is status for s in summary.students)


def test_oversized_numeral_keeps_summary_json_compliant(config):
    grid = RawGrid.of(
        ["#", "CARNET", "Alumno", "Correo", "Grupo", "Q1", "Final"],
        [["1", "2021001", "Ana", "", "A", "9" * 400, ""], ["2", "2021002", "Luis", "", "A", "5", ""]],
    )
    engine = analyze(grid, config)

    payload = json.dumps(engine.get_summary(), allow_nan=False)
    assert json.loads(payload)["evaluations"][0]["highest_score"] == 5.0
    assert engine.summary.class_summary.overall_average == pytest.approx(5.0)
