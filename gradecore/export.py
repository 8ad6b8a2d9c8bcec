from __future__ import annotations
import pandas as pd
from io import BytesIO
from typing import Optional, Tuple

from .cells import display
from .engine import GradebookSummary
from .rules import AcademicStatus, STATUS_LABELS
from .table import AcademicTable

STUDENTS_SHEET = "Estudiantes"
EVALUATIONS_SHEET = "Evaluaciones"
CLASS_SHEET = "Resumen"
GRADES_SHEET = "Notas"

STATUS_COLORS = {
    AcademicStatus.APPROVED: "#E6F4EA",
    AcademicStatus.ON_TRACK: "#E8F0FE",
    AcademicStatus.WARNING: "#FEF7E0",
    AcademicStatus.CRITICAL: "#FCE8E6",
    AcademicStatus.FAILED: "#F1F3F4",
}


def summary_frames(summary: GradebookSummary) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    students_df = pd.DataFrame([{
        "Carnet": s.id,
        "Alumno": s.name,
        "Grupo": s.group,
        "Acumulado": s.accumulated_score,
        "Percentil": s.percentile,
        "Desv. estándar": s.std_dev,
        "Puntos perdidos": s.lost_points,
        "Estado": STATUS_LABELS[s.status],
    } for s in summary.students], columns=[
        "Carnet", "Alumno", "Grupo", "Acumulado", "Percentil",
        "Desv. estándar", "Puntos perdidos", "Estado",
    ])

    evaluations_df = pd.DataFrame([{
        "Evaluación": e.name,
        "Promedio": e.average,
        "Desv. estándar": e.std_dev,
        "Nota más alta": e.highest_score,
        "Nota más baja": e.lowest_score,
        "Puntaje máximo": e.max_possible_score,
        "Evaluados": e.evaluated_count,
        "Sin nota": e.missing_count,
    } for e in summary.evaluations], columns=[
        "Evaluación", "Promedio", "Desv. estándar", "Nota más alta", "Nota más baja",
        "Puntaje máximo", "Evaluados", "Sin nota",
    ])

    c = summary.class_summary
    class_df = pd.DataFrame([
        ("Estudiantes", c.student_count),
        ("Puntos posibles acumulados", c.accumulated_possible_points),
        ("Promedio general", c.overall_average),
        ("Desv. estándar general", c.overall_std_dev),
    ] + [(STATUS_LABELS[st], c.count_for(st)) for st in AcademicStatus], columns=["Indicador", "Valor"])

    for df in (students_df, evaluations_df):
        num = list(df.select_dtypes("number").columns)
        if num:
            df[num] = df[num].round(2)
    return students_df, evaluations_df, class_df


def grades_frame(table: AcademicTable) -> pd.DataFrame:
    # grade cells as the instructor typed them (NP blank, RM kept); rows are
    # positional so repeated evaluation names keep their own columns
    rows = [
        [r.identifier, r.display_name, r.group] + [display(g) for g in r.grades] + [display(r.final_grade)]
        for r in table.records
    ]
    cols = ["Carnet", "Alumno", "Grupo"] + list(table.evaluation_names) + ["Final"]
    return pd.DataFrame(rows, columns=cols)


def export_to_excel_bytes(summary: GradebookSummary, table: Optional[AcademicTable] = None) -> bytes:
    students_df, evaluations_df, class_df = summary_frames(summary)
    grades_df = grades_frame(table) if table is not None else None

    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        students_df.to_excel(writer, index=False, sheet_name=STUDENTS_SHEET)
        evaluations_df.to_excel(writer, index=False, sheet_name=EVALUATIONS_SHEET)
        class_df.to_excel(writer, index=False, sheet_name=CLASS_SHEET)
        if grades_df is not None:
            grades_df.to_excel(writer, index=False, sheet_name=GRADES_SHEET)

        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        def format_df_sheet(sheet_name: str, df: pd.DataFrame, default_width: int = 14, max_width: int = 40):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
            for col, name in enumerate(df.columns):
                ws.write(0, col, name, fmt_header)
                w = max(10, min(max_width, int(len(str(name)) * 1.2) + 4))
                ws.set_column(col, col, max(default_width, w))

        format_df_sheet(STUDENTS_SHEET, students_df)
        format_df_sheet(EVALUATIONS_SHEET, evaluations_df)
        format_df_sheet(CLASS_SHEET, class_df, default_width=28)
        if grades_df is not None:
            format_df_sheet(GRADES_SHEET, grades_df, default_width=10)

        ws = writer.sheets[STUDENTS_SHEET]
        jst = list(students_df.columns).index("Estado")
        last_row = max(1, len(students_df))
        for st, color in STATUS_COLORS.items():
            ws.conditional_format(1, jst, last_row, jst, {
                "type": "cell",
                "criteria": "equal to",
                "value": f'"{STATUS_LABELS[st]}"',
                "format": wb.add_format({"bg_color": color}),
            })

    return bio.getvalue()
