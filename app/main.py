"""
Streamlit Frontend for SIPM

This is the interface village staff use to record residents,
review population figures and export reports.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before deleting
3. Clear error messages in plain Indonesian
4. Every list is re-read from the registry after a change

The UI never writes to storage itself. All changes go through
RegistryFlow, which goes through the registry.
"""

from datetime import date
from typing import Optional

import pandas as pd
import streamlit as st

from sipm.auth import LoginError
from sipm.exporters import ExportFormat
from sipm.models import (
    Gender,
    MaritalStatus,
    ReportCriteria,
    ReportPeriod,
    Resident,
    ResidentInput,
    ResidentStatus,
    StatusFilter,
    UserRole,
)
from sipm.orchestrator import RegistryFlow, ReportFlow, create_app_components
from sipm.services.attachment import decode_attachment, is_data_url


NO_SELECTION = "- Pilih -"
FLASH_KEY = "flash"

# Page configuration
st.set_page_config(
    page_title="SIPM PRO",
    page_icon="🏛️",
    layout="wide",
    initial_sidebar_state="expanded",
)


def flash(state, message: str) -> None:
    """Keep a success message for the next run (st.rerun() drops widgets)."""
    state[FLASH_KEY] = message


def pop_flash(state) -> Optional[str]:
    return state.pop(FLASH_KEY, None)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    registry_flow, report_flow, sessions = get_components()

    if "user" not in st.session_state:
        st.session_state.user = None

    if st.session_state.user is None:
        render_login_page(sessions)
        return

    user = st.session_state.user
    message = pop_flash(st.session_state)
    if message:
        st.success(message)

    # Sidebar navigation
    st.sidebar.title("🏛️ SIPM PRO")
    st.sidebar.caption("Village Management")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Menu",
        ["📊 Dashboard", "👥 Registry Penduduk", "📄 Laporan"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**{user.full_name}**  \n{user.username} · {user.role.value}")
    if st.sidebar.button("Keluar"):
        sessions.logout(user)
        st.session_state.user = None
        st.rerun()

    residents = registry_flow.list_residents()

    if page == "📊 Dashboard":
        render_dashboard_page(report_flow, residents)
    elif page == "👥 Registry Penduduk":
        render_registry_page(registry_flow, user.role)
    elif page == "📄 Laporan":
        render_reports_page(report_flow, residents)


def render_login_page(sessions):
    """Render the login form."""
    st.title("SIPM PRO")
    st.caption("Secure Gateway Access")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        role = st.selectbox(
            "Peran",
            options=list(UserRole),
            format_func=lambda r: r.value,
        )
        submitted = st.form_submit_button("Masuk", type="primary")

    if submitted:
        try:
            st.session_state.user = sessions.login(username, password, role)
            st.rerun()
        except LoginError as e:
            st.error(str(e))


def render_dashboard_page(report_flow: ReportFlow, residents: list[Resident]):
    """Render headline figures and charts."""
    st.title("📊 Dashboard")

    stats, trend = report_flow.dashboard(residents)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Penduduk", stats.total)
    col2.metric("Laki-laki", stats.male)
    col3.metric("Perempuan", stats.female)
    col4.metric("Meninggal", stats.deceased)

    st.markdown("---")

    left, right = st.columns([2, 1])
    with left:
        st.subheader("Tren Populasi")
        if trend:
            df = pd.DataFrame([p.model_dump() for p in trend])
            st.area_chart(df, x="label", y=["population", "mortality"])
        else:
            st.info("Belum ada data penduduk.")
    with right:
        st.subheader("Komposisi Gender")
        st.bar_chart(pd.DataFrame(
            {"Jumlah": [stats.male, stats.female]},
            index=[Gender.MALE.value, Gender.FEMALE.value],
        ))


def _residents_table(residents: list[Resident]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "NIK": r.nik,
            "Nama": r.name,
            "Gender": r.gender.value,
            "RT": r.rt,
            "Dusun": r.dusun,
            "Status": r.status.value,
            "Pekerjaan": r.occupation,
        }
        for r in residents
    ])


def render_registry_page(registry_flow: RegistryFlow, role: UserRole):
    """Render the resident table, entry form and delete action."""
    st.title("👥 Registry Penduduk")

    if "editing_id" not in st.session_state:
        st.session_state.editing_id = None

    search = st.text_input("Cari NIK atau Nama...", "")
    residents = registry_flow.list_residents(search)

    if residents:
        st.dataframe(_residents_table(residents), use_container_width=True, hide_index=True)
    else:
        st.info("Tidak ada data yang sesuai.")

    st.markdown("---")

    by_label = {f"{r.nik} · {r.name}": r for r in registry_flow.list_residents()}
    col1, col2 = st.columns(2)
    with col1:
        selected = st.selectbox("Pilih penduduk", options=[NO_SELECTION] + list(by_label))
    with col2:
        if selected != NO_SELECTION:
            if st.button("✏️ Ubah"):
                st.session_state.editing_id = by_label[selected].id
                st.rerun()
            confirm = st.checkbox("Konfirmasi penghapusan data secara permanen?")
            if st.button("🗑️ Hapus", disabled=not confirm or role != UserRole.ADMIN):
                flash(st.session_state, registry_flow.delete_resident(by_label[selected].id))
                st.session_state.editing_id = None
                st.rerun()

    editing = (
        registry_flow.registry.get(st.session_state.editing_id)
        if st.session_state.editing_id else None
    )
    render_resident_form(registry_flow, editing)


def render_resident_form(registry_flow: RegistryFlow, editing: Optional[Resident]):
    """Render the create/edit form."""
    st.subheader("Ubah Record" if editing else "Entri Penduduk Baru")
    initial = editing.to_input() if editing else None

    if initial and is_data_url(initial.death_certificate_img):
        _, image = decode_attachment(initial.death_certificate_img)
        st.image(image, caption="Surat kematian tersimpan", width=240)

    with st.form("resident_form", clear_on_submit=editing is None):
        col1, col2 = st.columns(2)
        with col1:
            nik = st.text_input("NIK *", value=initial.nik if initial else "", max_chars=16)
            name = st.text_input("Nama Lengkap *", value=initial.name if initial else "")
            gender = st.selectbox(
                "Gender",
                options=list(Gender),
                index=list(Gender).index(initial.gender) if initial else 0,
                format_func=lambda g: g.value,
            )
            dob = st.date_input(
                "Tanggal Lahir *",
                value=initial.dob if initial else date(1990, 1, 1),
                min_value=date(1900, 1, 1),
            )
            marital_status = st.selectbox(
                "Status Perkawinan",
                options=list(MaritalStatus),
                index=list(MaritalStatus).index(initial.marital_status) if initial else 0,
                format_func=lambda m: m.value,
            )
        with col2:
            address = st.text_input("Alamat *", value=initial.address if initial else "")
            rt = st.text_input("RT *", value=initial.rt if initial else "")
            dusun = st.text_input("Dusun *", value=initial.dusun if initial else "")
            occupation = st.text_input("Pekerjaan", value=initial.occupation if initial else "")
            status = st.selectbox(
                "Status",
                options=list(ResidentStatus),
                index=list(ResidentStatus).index(initial.status) if initial else 0,
                format_func=lambda s: s.value,
            )

        certificate = st.file_uploader(
            "Surat Kematian (wajib untuk status Meninggal)",
            type=["jpg", "jpeg", "png", "webp"],
        )
        submitted = st.form_submit_button("💾 Simpan", type="primary")

    if editing and st.button("Batal"):
        st.session_state.editing_id = None
        st.rerun()

    if not submitted:
        return

    certificate_url = initial.death_certificate_img if initial else None
    if certificate is not None:
        certificate_url, message = registry_flow.attach_certificate(
            certificate.getvalue(), certificate.name
        )
        if certificate_url is None:
            st.error(message)
            return
    if status == ResidentStatus.ALIVE:
        certificate_url = None

    candidate = ResidentInput(
        nik=nik,
        name=name,
        gender=gender,
        dob=dob,
        address=address,
        rt=rt,
        dusun=dusun,
        marital_status=marital_status,
        occupation=occupation,
        status=status,
        death_certificate_img=certificate_url,
    )

    try:
        resident, message = registry_flow.save_resident(
            candidate, editing_id=editing.id if editing else None
        )
    except Exception as e:
        st.error(f"Gagal menyimpan: {e}")
        return

    if resident is None:
        st.error(message)
    else:
        flash(st.session_state, message)
        st.session_state.editing_id = None
        st.rerun()


def render_reports_page(report_flow: ReportFlow, residents: list[Resident]):
    """Render report filters, preview and export buttons."""
    st.title("📄 Ekspor & Analisis")

    col1, col2, col3, col4, col5 = st.columns(5)
    with col1:
        period = st.selectbox(
            "Timeframe",
            options=list(ReportPeriod),
            index=list(ReportPeriod).index(ReportPeriod.MONTHLY),
            format_func=lambda p: p.value.title(),
        )
    with col2:
        reference_date = st.date_input("Reference Date", value=None)
    with col3:
        rt = st.text_input("Sector (RT)", placeholder="ID RT")
    with col4:
        dusun = st.text_input("Zone (Dusun)", placeholder="Nama Dusun")
    with col5:
        status = st.selectbox(
            "Life Status",
            options=list(StatusFilter),
            format_func=lambda s: "Semua Status" if s == StatusFilter.ANY else s.value,
        )

    criteria = ReportCriteria(
        rt_contains=rt or None,
        dusun_contains=dusun or None,
        status=status,
        period=period,
        reference_date=reference_date,
    )
    filtered = report_flow.filter(residents, criteria)

    st.markdown("---")

    left, right = st.columns(2)
    for column, export_format, label in (
        (left, ExportFormat.XLSX, "XLS EXPORT"),
        (right, ExportFormat.PDF, "GENERATE PDF"),
    ):
        with column:
            if st.button(label, key=f"export_{export_format.value}"):
                artifact, message = report_flow.export(filtered, export_format, period)
                if artifact is None:
                    st.error(message)
                else:
                    st.download_button(
                        label=f"📥 {artifact.filename}",
                        data=artifact.content,
                        file_name=artifact.filename,
                        mime=artifact.mime_type,
                    )

    st.subheader("Preview Data Terpilih")
    st.caption(f"Found {len(filtered)} records matching criteria")
    if filtered:
        df = _residents_table(filtered)
        df["Tanggal Input"] = [report_flow.entry_time(r) for r in filtered]
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("Tidak ada data yang sesuai dengan filter.")


if __name__ == "__main__":
    main()
