# ui/app.py
import os

import pandas as pd
import requests
import streamlit as st

API = os.getenv("API_URL", "http://127.0.0.1:8000").rstrip("/")
TIMEOUT = 60

st.set_page_config(page_title="Reclutamiento - Vacantes", layout="wide")

STYLES = {
    0: "Resumen general",
    1: "Resumen por entrevistado",
    2: "Candidato ideal",
}


# ---------------- Helpers ----------------
def _url(path: str) -> str:
    return f"{API}{path}"


def _call(method: str, path: str, **kwargs):
    """Chama a API; devolve (ok, json|texto). Falhas viram mensagem, nunca exceção."""
    try:
        r = requests.request(method, _url(path), timeout=TIMEOUT, **kwargs)
    except Exception as e:
        return False, f"Falha ao chamar API: {e}"
    if r.status_code == 204:
        return True, None
    try:
        body = r.json()
    except ValueError:
        body = r.text
    if not r.ok:
        detail = body.get("detail") if isinstance(body, dict) else body
        return False, detail or f"Erro {r.status_code}"
    return True, body


def _go(**params):
    st.query_params.clear()
    for k, v in params.items():
        if v is not None:
            st.query_params[k] = v
    st.rerun()


def _candidate_base(vacante_id: str, candidato_id: str) -> str:
    return f"/api/vacancies/{vacante_id}/candidates/{candidato_id}"


# ---------------- Dashboard ----------------
def dashboard():
    st.title("Dashboard de Vacantes")
    st.caption("Gestiona tus puestos y procesos de selección.")

    with st.sidebar:
        st.header("Filtros")
        estado = st.selectbox("Estado", ["all", "Abierta", "Cerrada"])
        q = st.text_input("Buscar")

    with st.expander("Crear Nueva Vacante"):
        with st.form("crear_vacante", clear_on_submit=True):
            puesto = st.text_input("Nombre del Puesto", placeholder="Ej: Desarrollador Frontend")
            descripcion = st.text_area("Descripción (Opcional)", placeholder="Responsabilidades, requisitos, etc.")
            if st.form_submit_button("Crear Vacante", type="primary"):
                if not puesto.strip():
                    st.error("El nombre del puesto es obligatorio.")
                else:
                    ok, out = _call("POST", "/api/vacancies", json={"puesto": puesto, "descripcion": descripcion})
                    if ok:
                        st.success("Vacante creada.")
                        st.rerun()
                    else:
                        st.error(out)

    ok, vacantes = _call("GET", "/api/vacancies", params={"estado": estado, "q": q or None})
    if not ok:
        st.error(vacantes)
        return
    if not vacantes:
        st.info("No hay vacantes todavía.")
        return

    cols = st.columns(3)
    for i, v in enumerate(vacantes):
        abierta = v["estado"] == "Abierta"
        with cols[i % 3].container(border=True):
            st.subheader(v["puesto"])
            st.markdown(f"{':green' if abierta else ':red'}[{v['estado']}] · {v.get('candidatos', 0)} Candidatos")
            a, b, c = st.columns(3)
            if a.button("Abrir", key=f"open_{v['id']}"):
                _go(vacanteId=v["id"])
            if b.button("Cerrar" if abierta else "Abrir vacante", key=f"toggle_{v['id']}"):
                ok, out = _call("PUT", f"/api/vacancies/{v['id']}/status",
                                json={"estado": "Cerrada" if abierta else "Abierta"})
                if not ok:
                    st.error(out)
                st.rerun()
            if c.button("Eliminar", key=f"del_{v['id']}"):
                ok, out = _call("DELETE", f"/api/vacancies/{v['id']}")
                if not ok:
                    st.error(out)
                st.rerun()


# ---------------- Vacante ----------------
def vacancy_page(vacante_id: str):
    if st.button("← Volver al Dashboard"):
        _go()

    ok, vacante = _call("GET", f"/api/vacancies/{vacante_id}")
    if not ok:
        st.error(f"Error: No se pudo cargar la vacante. {vacante}")
        return

    st.title(vacante["puesto"])
    st.write(vacante.get("descripcion") or "")
    st.caption(f"Estado: {vacante['estado']}")

    with st.expander("Editar vacante"):
        with st.form("editar_vacante"):
            puesto = st.text_input("Nombre del Puesto", vacante["puesto"])
            descripcion = st.text_area("Descripción", vacante.get("descripcion") or "")
            if st.form_submit_button("Guardar cambios"):
                ok, out = _call("PATCH", f"/api/vacancies/{vacante_id}",
                                json={"puesto": puesto, "descripcion": descripcion})
                if ok:
                    st.success("Vacante actualizada.")
                    st.rerun()
                else:
                    st.error(out)

    with st.expander("Añadir Nuevo Candidato"):
        with st.form("crear_candidato", clear_on_submit=True):
            nombre = st.text_input("Nombre")
            apellido = st.text_input("Apellido")
            correo = st.text_input("Correo Electrónico")
            telefono = st.text_input("Teléfono")
            cv = st.file_uploader("CV (PDF)", type=["pdf"])
            if st.form_submit_button("Crear Candidato", type="primary"):
                if cv is None:
                    st.error("El archivo del CV es obligatorio.")
                else:
                    with st.spinner("Guardando..."):
                        ok, out = _call(
                            "POST",
                            f"/api/vacancies/{vacante_id}/candidates",
                            data={"nombre": nombre, "apellido": apellido, "correo": correo, "telefono": telefono},
                            files={"cv": (cv.name, cv.getvalue(), cv.type or "application/pdf")},
                        )
                    if ok:
                        st.success("Candidato creado.")
                        st.rerun()
                    else:
                        st.error(f"No se pudo crear el candidato. {out}")

    ok, candidatos = _call("GET", f"/api/vacancies/{vacante_id}/candidates")
    if not ok:
        st.error(candidatos)
        return

    st.subheader("Candidatos")
    if not candidatos:
        st.info("Esta vacante no tiene candidatos.")
        return

    df = pd.DataFrame(candidatos)[["nombre", "apellido", "correo", "telefono", "cvUrl"]]
    st.dataframe(df, use_container_width=True, column_config={"cvUrl": st.column_config.LinkColumn("CV")})

    for c in candidatos:
        base = _candidate_base(vacante_id, c["id"])
        with st.container(border=True):
            st.markdown(f"**{c['nombre']} {c['apellido']}** · {c['correo']} · {c['telefono']}")
            a, b, d = st.columns(3)
            if a.button("Resumen del CV", key=f"sum_{c['id']}"):
                with st.spinner("Generando resumen..."):
                    ok, out = _call("POST", f"{base}/cv-summary")
                st.session_state[f"cv_summary_{c['id']}"] = out["summary"] if ok else out
            if b.button("Entrevistar", key=f"int_{c['id']}"):
                _go(vacanteId=vacante_id, candidatoId=c["id"])
            if d.button("Eliminar", key=f"delc_{c['id']}"):
                ok, out = _call("DELETE", base)
                if not ok:
                    st.error(out)
                st.rerun()

            summary = st.session_state.get(f"cv_summary_{c['id']}") or c.get("cvSummary")
            if summary:
                st.info(summary)
                if st.button("Regenerar resumen", key=f"regen_{c['id']}"):
                    ok, out = _call("POST", f"{base}/cv-summary", params={"refresh": "true"})
                    st.session_state[f"cv_summary_{c['id']}"] = out["summary"] if ok else out
                    st.rerun()

            with st.expander("Editar candidato"):
                with st.form(f"edit_{c['id']}"):
                    fields = {
                        "nombre": st.text_input("Nombre", c["nombre"]),
                        "apellido": st.text_input("Apellido", c["apellido"]),
                        "correo": st.text_input("Correo Electrónico", c["correo"]),
                        "telefono": st.text_input("Teléfono", c["telefono"]),
                    }
                    if st.form_submit_button("Guardar"):
                        ok, out = _call("PATCH", base, json=fields)
                        if ok:
                            st.rerun()
                        else:
                            st.error(out)


# ---------------- Entrevista ----------------
def interview_page(vacante_id: str, candidato_id: str):
    base = _candidate_base(vacante_id, candidato_id)
    ck = f"{vacante_id}:{candidato_id}"
    qa_key, summary_key = f"qa_data_{ck}", f"summary_lines_{ck}"
    if st.button("← Volver a la vacante"):
        _call("DELETE", f"{base}/capture")
        _go(vacanteId=vacante_id)

    st.title("¡Tu asistente de IA para entrevistas!")
    ok, cap = _call("GET", f"{base}/capture")
    if not ok:
        st.warning(f"Faltan parámetros de vacante o candidato. {cap}")
        return

    q_col, a_col = st.columns(2)
    if q_col.button("Pregunta", type="primary" if cap["active"] == "question" else "secondary",
                    disabled=cap["question_recorded"], use_container_width=True):
        ok, out = _call("POST", f"{base}/capture/mode", json={"mode": "question"})
        if not ok:
            st.error(out)
        st.rerun()
    if a_col.button("Respuesta", type="primary" if cap["active"] == "answer" else "secondary",
                    disabled=not cap["question_recorded"], use_container_width=True):
        ok, out = _call("POST", f"{base}/capture/mode", json={"mode": "answer"})
        if not ok:
            st.error(out)
        st.rerun()

    # mesmo bloqueio do botão de gravar: pergunta já gravada e modo pergunta
    blocked = cap["question_recorded"] and cap["active"] == "question"
    label = "Grabar pregunta" if cap["active"] == "question" else "Grabar respuesta"
    # a chave muda a cada envio (ok ou erro): o widget volta vazio e o áudio não é reenviado
    nonce_key = f"audio_nonce_{ck}"
    nonce = st.session_state.get(nonce_key, 0)
    audio = st.audio_input(label, disabled=blocked, key=f"audio_{ck}_{nonce}")
    if audio is not None:
        with st.spinner("Reconociendo..."):
            ok, out = _call("POST", f"{base}/capture/record",
                            files={"audio": ("audio.wav", audio.getvalue(), "audio/wav")})
        st.session_state[nonce_key] = nonce + 1
        if ok:
            st.rerun()
        else:
            st.error(out)

    for t in cap["turns"]:
        with st.container(border=True):
            st.markdown(f"**{t['question']}**")
            st.write(t["response"])

    st.divider()
    c1, c2, c3, c4 = st.columns(4)
    if c1.button("Guardar entrevista"):
        ok, out = _call("POST", f"{base}/capture/save")
        if ok:
            st.success("Entrevista guardada correctamente.")
        else:
            st.error(out or "Error al guardar la entrevista.")
    if c2.button("Ver Q&A guardadas"):
        ok, out = _call("GET", f"{base}/interview")
        st.session_state[qa_key] = out if ok else []
    style = c3.selectbox("Tipo de resumen", list(STYLES), format_func=STYLES.get, label_visibility="collapsed")
    if c3.button("Genera un resumen"):
        with st.spinner("Generando..."):
            ok, out = _call("POST", f"{base}/capture/summary", json={"style": style})
        st.session_state[summary_key] = out["lines"] if ok else [out]
    if c4.button("Borrar todo"):
        _call("POST", f"{base}/capture/reset")
        st.session_state.pop(summary_key, None)
        st.rerun()

    if st.session_state.get(summary_key):
        st.subheader("Resumen de los candidatos:")
        st.write("\n\n".join(st.session_state[summary_key]))

    if qa_key in st.session_state:
        st.subheader("Preguntas y respuestas guardadas")
        qa = st.session_state[qa_key]
        if qa:
            st.dataframe(pd.DataFrame(qa), use_container_width=True)
            csv_bytes = pd.DataFrame(qa).to_csv(index=False).encode("utf-8")
            st.download_button("Descargar Q&A (CSV)", data=csv_bytes, file_name="entrevista.csv", mime="text/csv")
        else:
            st.caption("No hay preguntas y respuestas guardadas para este candidato.")


# ---------------- Router ----------------
vacante_id = st.query_params.get("vacanteId")
candidato_id = st.query_params.get("candidatoId")

if vacante_id and candidato_id:
    interview_page(vacante_id, candidato_id)
elif vacante_id:
    vacancy_page(vacante_id)
else:
    dashboard()
