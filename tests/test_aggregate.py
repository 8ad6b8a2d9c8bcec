import pytest

from gradecore import EngineConfig, RawGrid, ThresholdPolicy, aggregate, compute_statistics, normalize
from gradecore.aggregate import ClassSummary, Welford
from gradecore.rules import AcademicStatus

HEADERS = ["#", "CARNET", "Alumno", "Correo", "Grupo", "Proyecto", "Final"]


def _scored_table(*cells):
    rows = [[str(i + 1), f"20210{i}", f"S{i}", "", "A", c, ""] for i, c in enumerate(cells)]
    return normalize(RawGrid.of(HEADERS, rows), EngineConfig())


def test_undefined_scores_stay_out_of_the_mean():
    table = _scored_table("89", "50", "RM")
    stats = compute_statistics(table)
    summary = aggregate(table, stats.students, EngineConfig(total_points=100.0, passing_score=70.0))

    assert summary.student_count == 3
    assert summary.overall_average == pytest.approx(69.5)
    assert summary.overall_std_dev == pytest.approx(27.5772, rel=1e-4)


def test_tier_counts_cover_every_student(grid, config):
    table = normalize(grid, config)
    summary = aggregate(table, compute_statistics(table).students, config)

    # Ana 26/50, Luis 65/90, Marta 70/100
    assert summary.on_track_count == 2
    assert summary.warning_count == 1
    assert summary.approved_count == summary.critical_count == summary.failed_count == 0
    assert sum(summary.count_for(s) for s in AcademicStatus) == table.student_count


def test_possible_points_skip_columns_without_maximum(grid, config):
    table = normalize(grid, config)
    stats = compute_statistics(table)
    summary = aggregate(table, stats.students, config)
    assert summary.accumulated_possible_points == pytest.approx(50.0)

    numeric_only = _scored_table("10", "20")
    assert aggregate(numeric_only, compute_statistics(numeric_only).students).accumulated_possible_points == 0.0


def test_alternate_policy():
    table = _scored_table("89", "50", "10")
    summary = aggregate(table, compute_statistics(table).students, policy=ThresholdPolicy(60.0, 40.0))
    assert (summary.approved_count, summary.warning_count, summary.failed_count) == (1, 1, 1)


def test_no_defined_scores():
    table = _scored_table("RM", "NP")
    summary = aggregate(table, compute_statistics(table).students)
    assert summary.overall_average is None
    assert summary.overall_std_dev is None


def test_welford_matches_naive_mean():
    xs = [1e6 + v for v in (0.1, 0.7, 0.3, 12.5, 7.25, 3.0, 99.9, 0.0)]
    w = Welford().extend(xs)
    naive = sum(xs) / len(xs)
    assert w.average == pytest.approx(naive, rel=1e-4)

    var = sum((x - naive) ** 2 for x in xs) / (len(xs) - 1)
    assert w.std_dev == pytest.approx(var ** 0.5, rel=1e-4)


def test_welford_small_counts():
    assert Welford().average is None
    one = Welford().extend([5.0])
    assert one.average == 5.0
    assert one.std_dev is None


def test_class_summary_round_trip(grid, config):
    table = normalize(grid, config)
    summary = aggregate(table, compute_statistics(table).students, config)
    assert ClassSummary.from_dict(summary.to_dict()) == summary


def test_given_statuses_are_counted_as_is(grid, config):
    table = normalize(grid, config)
    students = compute_statistics(table).students
    statuses = [AcademicStatus.APPROVED, AcademicStatus.FAILED, AcademicStatus.FAILED]

    summary = aggregate(table, students, config, statuses=statuses)
    assert (summary.approved_count, summary.failed_count, summary.on_track_count) == (1, 2, 0)


def test_statuses_must_align_with_students(grid, config):
    table = normalize(grid, config)
    with pytest.raises(ValueError):
        aggregate(table, compute_statistics(table).students, config, statuses=[AcademicStatus.APPROVED])
