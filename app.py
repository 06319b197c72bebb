from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from roster.ingest import import_document, UPLOAD_TYPES
from roster.storage import add_students, add_upload, get_students, get_uploads, clear_all_data
from roster.stats import summary_stats, students_by_course, students_by_date
from roster.export import export_to_excel_bytes, export_file_name
from roster.errors import RosterImportError
from roster.utils import load_settings, setup_logging

SETTINGS = load_settings()
setup_logging(SETTINGS.get("log_level", "INFO"), bool(SETTINGS.get("log_to_file", True)))
log = logging.getLogger("roster.app")

st.set_page_config(page_title="Instructor Roster", layout="wide")
st.title("Instructor roster")
# =========================

# Helpers
# =========================
def _students_view(students: list[dict]) -> pd.DataFrame:
    if not students:
        return pd.DataFrame(columns=["Student Name", "Course Name", "Date", "Uploaded At"])
    df = pd.DataFrame(students)
    return pd.DataFrame({
        "Student Name": df["name"],
        "Course Name": df["course_name"],
        "Date": df["date"],
        "Uploaded At": df["uploaded_at"].astype(str).str[:10],
    })

def _import_uploads(files) -> None:
    for up in files:
        try:
            parsed = import_document(up.name, up.getvalue())
        except RosterImportError as e:
            # unreadable / unsupported file: nothing reaches the parser
            log.warning("%s: %s", up.name, e)
            st.error(f"{up.name}: {e}")
            continue

        if not parsed:
            st.warning(f"{up.name}: no students found. Check that the table has 'First Name' and 'Last Name' columns.")
            continue

        add_students(parsed)
        add_upload(up.name, len(parsed))
        st.success(f"{up.name}: imported {len(parsed)} students.")
# =========================

# Uploads
# =========================
uploads = st.file_uploader(
    "Upload rosters (Excel, CSV, Word, PDF or text)",
    type=UPLOAD_TYPES,
    accept_multiple_files=True,
)

if uploads and st.button("Import", type="primary"):
    _import_uploads(uploads)

students = get_students()

stats = summary_stats(students)
c1, c2, c3, c4 = st.columns(4)
with c1:
    st.metric("Total Students", stats["total_students"])
with c2:
    st.metric("Courses", stats["courses"])
with c3:
    st.metric("Session Dates", stats["session_dates"])
with c4:
    st.metric("Avg / Course", stats["avg_per_course"])

tab_roster, tab_analytics, tab_history = st.tabs(["Roster", "Analytics", "Upload history"])

with tab_roster:
    q = st.text_input("Search by name or course", value="")
    view = _students_view(students)
    if q.strip():
        mask = (
            view["Student Name"].astype(str).str.contains(q.strip(), case=False, na=False, regex=False)
            | view["Course Name"].astype(str).str.contains(q.strip(), case=False, na=False, regex=False)
        )
        view = view[mask]
    st.dataframe(view, width="stretch", hide_index=True)

    if students:
        st.download_button(
            "Export to Excel",
            data=export_to_excel_bytes(students),
            file_name=export_file_name(),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

with tab_analytics:
    if not students:
        st.info("No data for analytics. Upload some rosters to see insights.")
    else:
        a1, a2 = st.columns(2)
        with a1:
            st.subheader("Students by Course")
            st.bar_chart(students_by_course(students), x="course", y="count", horizontal=True)
        with a2:
            st.subheader("Students by Date")
            st.bar_chart(students_by_date(students), x="date", y="count")

with tab_history:
    history = get_uploads()
    if history:
        hist_df = pd.DataFrame(history)[["file_name", "student_count", "uploaded_at"]]
        hist_df.columns = ["File", "Students", "Uploaded At"]
        st.dataframe(hist_df.iloc[::-1], width="stretch", hide_index=True)
    else:
        st.info("No uploads yet.")

    if st.button("Clear all data"):
        clear_all_data()
        st.success("Cleared.")
        st.rerun()
