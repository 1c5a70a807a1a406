import streamlit as st

# MUST be the first Streamlit command
st.set_page_config(layout="wide", page_title="CV Composer")

import logging
import time
from datetime import datetime

import config
from composer import (
    AcceptSuggestion,
    AddEntry,
    Composer,
    EditField,
    RemoveEntry,
    SetProfilePicture,
    SetStyle,
)
from exceptions import SuggestionBusyError
from exporter import export_html, export_pdf
from field_binder import MULTI_LINE, FieldDescriptor
from image_ingest import to_data_url
from preview_renderer import STYLES, render_styled
from schema_cv import SECTION_ALIASES, SECTION_TITLES

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# seconds between checks while a suggestion is pending
POLL_INTERVAL = 0.5

# Initialize session state variables
if "composer" not in st.session_state:
    st.session_state.composer = Composer()
if "clipboard" not in st.session_state:
    st.session_state.clipboard = ""
if "suggestion_errors" not in st.session_state:
    st.session_state.suggestion_errors = {}
if "pdf" not in st.session_state:
    st.session_state.pdf = None
if "pdf_error" not in st.session_state:
    st.session_state.pdf_error = None

composer: Composer = st.session_state.composer

st.title("📝 CV Composer")
st.markdown("Fill in your details and watch your CV take shape")


# --- Callbacks (run before the script reruns) ---
def on_field_change(key: str, widget_key: str):
    composer.dispatch(EditField(key, st.session_state[widget_key]))


def on_add(section: str):
    composer.dispatch(AddEntry(section))


def on_remove(section: str, ordinal: int):
    composer.dispatch(RemoveEntry(section, ordinal))


def on_style_change():
    composer.dispatch(SetStyle(st.session_state.style_select))


def on_picture_upload():
    uploaded = st.session_state.profile_picture_upload
    if uploaded is not None:
        data_url = to_data_url(uploaded.getvalue(), uploaded.name, uploaded.type)
        composer.dispatch(SetProfilePicture(data_url))


def on_improve(control: str):
    st.session_state.suggestion_errors.pop(control, None)
    try:
        composer.request_suggestion(control)
    except SuggestionBusyError as e:
        st.session_state.suggestion_errors[control] = str(e)


def on_accept(control: str):
    composer.dispatch(AcceptSuggestion(control))


def on_dismiss(control: str):
    composer.suggestions.dismiss(control)
    st.session_state.suggestion_errors.pop(control, None)


def on_copy(control: str):
    if composer.suggestions.copy(control, lambda text: st.session_state.update(clipboard=text)):
        st.toast("Suggestion copied to clipboard!")


def on_reset():
    composer.reset()
    st.session_state.suggestion_errors = {}
    st.session_state.pdf = None


def on_prepare_pdf(fingerprint: str):
    st.session_state.pdf_error = None
    try:
        st.session_state.pdf = (fingerprint, export_pdf(composer.record(), composer.style_id))
    except Exception as e:
        st.session_state.pdf = None
        st.session_state.pdf_error = f"PDF generation failed: {e}"


# --- Widgets ---
def field_widget(d: FieldDescriptor):
    args = dict(
        label=d.placeholder,
        value=d.value,
        key=d.key,
        placeholder=d.placeholder,
        on_change=on_field_change,
        args=(d.address.wire, d.key),
    )
    if d.widget == MULTI_LINE:
        st.text_area(**args)
        suggestion_controls(d)
    else:
        st.text_input(**args)


def suggestion_controls(d: FieldDescriptor):
    control = d.address.wire
    coordinator = composer.suggestions
    busy = coordinator.is_busy(control)
    st.button(
        f"✨ {coordinator.label(control)}",
        key=f"improve:{d.key}",
        disabled=busy,
        on_click=on_improve,
        args=(control,),
    )

    failure = coordinator.error(control)
    if failure is not None:
        st.session_state.suggestion_errors[control] = str(failure)
        coordinator.dismiss(control)
    if control in st.session_state.suggestion_errors:
        st.error(st.session_state.suggestion_errors[control])

    candidate = coordinator.candidate(control)
    if candidate is not None:
        with st.container(border=True):
            st.markdown("**💡 Suggestion**")
            st.write(candidate)
            col_accept, col_copy, col_dismiss = st.columns(3)
            with col_accept:
                st.button("✅ Accept", key=f"accept:{d.key}", type="primary",
                          use_container_width=True, on_click=on_accept, args=(control,))
            with col_copy:
                st.button("📋 Copy", key=f"copy:{d.key}",
                          use_container_width=True, on_click=on_copy, args=(control,))
            with col_dismiss:
                st.button("❌ Dismiss", key=f"dismiss:{d.key}",
                          use_container_width=True, on_click=on_dismiss, args=(control,))


# Resolve finished suggestions before drawing anything
composer.suggestions.poll()

col_form, col_preview = st.columns([1, 1])

with col_form:
    st.markdown("### 👤 Personal Details")
    scalars = composer.binder.scalar_descriptors()
    for d in scalars[:-1]:
        field_widget(d)

    picture = composer.record()["personalDetails"]["profilePicture"]
    if picture:
        st.image(picture, width=120)
    st.file_uploader("Profile Picture", type=["png", "jpg", "jpeg", "gif", "webp"],
                     key="profile_picture_upload", on_change=on_picture_upload)

    st.markdown("### 🧾 Professional Summary")
    field_widget(scalars[-1])

    for short, section in SECTION_ALIASES.items():
        st.markdown(f"### {SECTION_TITLES[section]}")
        for group in composer.binder.groups(section):
            with st.container(border=True):
                for d in group.fields:
                    field_widget(d)
                st.button("Remove", key=f"remove:{group.key}",
                          on_click=on_remove, args=(section, group.ordinal))
        st.button(f"➕ Add {short.title()}", key=f"add:{section}",
                  on_click=on_add, args=(short,))

    st.divider()
    st.button("🗑️ Start Over", on_click=on_reset, help="Clear every field and the saved data")

with col_preview:
    styles = list(STYLES)
    st.selectbox(
        "Style",
        options=styles,
        index=styles.index(composer.style_id) if composer.style_id in styles else 0,
        key="style_select",
        on_change=on_style_change,
        format_func=str.title,
    )

    record = composer.record()
    with st.container(height=900):
        st.html(render_styled(record, composer.style_id))

    # the PDF is only built on request and offered while it still matches the record
    fingerprint = composer.fingerprint()
    col_pdf, col_html = st.columns(2)
    with col_pdf:
        prepared = st.session_state.pdf
        if prepared is not None and prepared[0] == fingerprint:
            st.download_button(
                "📥 Download PDF",
                data=prepared[1],
                file_name=config.PDF_FILENAME,
                mime="application/pdf",
                use_container_width=True,
            )
        else:
            st.button("📄 Prepare PDF", key="prepare_pdf", use_container_width=True,
                      on_click=on_prepare_pdf, args=(fingerprint,))
        if st.session_state.pdf_error:
            st.error(st.session_state.pdf_error)
    with col_html:
        st.download_button(
            "🌐 Download HTML",
            data=export_html(record, composer.style_id),
            file_name=f"cv_{datetime.now().strftime('%Y%m%d')}.html",
            mime="text/html",
            use_container_width=True,
        )

    if st.session_state.clipboard:
        st.markdown("**📋 Copied suggestion** (use the copy icon)")
        st.code(st.session_state.clipboard, language=None)

# Keep checking while a suggestion is on its way
if composer.suggestions.has_pending():
    time.sleep(POLL_INTERVAL)
    st.rerun()
