from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

# app.py
import datetime as dt
import os

import requests
import streamlit as st

st.set_page_config(page_title="Visitor E-Pass", layout="centered")

BACKEND = os.getenv("BACKEND_URL", "http://127.0.0.1:3001")


def submit_visitor(payload: dict) -> tuple[bool, dict]:
    """POST the form to the backend. Returns (ok, json-or-message)."""
    r = requests.post(f"{BACKEND}/submit", json=payload, timeout=60)
    try:
        body = r.json()
    except ValueError:
        body = {"message": r.text}
    return r.ok, body


def fetch_pass(link: str) -> bytes:
    r = requests.get(link, timeout=60)
    r.raise_for_status()
    return r.content


st.title("Visitor E-Pass")
st.caption("Register your visit and download your pass.")

with st.form("visitor_form"):
    visitor_name = st.text_input("Visitor name")
    no_of_persons = st.number_input("Number of persons", min_value=1, value=1, step=1)
    purpose = st.text_input("Purpose of visit")
    contact_number = st.text_input("Contact number", max_chars=10, help="10 digits")
    visit_date = st.date_input("Visit date", value=dt.date.today())
    submitted = st.form_submit_button("Generate E-Pass")

if submitted:
    payload = {
        "visitorName": visitor_name,
        "noOfPersons": int(no_of_persons),
        "purpose": purpose,
        "contactNumber": contact_number,
        "visitDate": visit_date.isoformat() if visit_date else "",
    }
    with st.spinner("Generating your pass…"):
        try:
            ok, body = submit_visitor(payload)
        except requests.RequestException as e:
            st.error(f"Oops: {e}")
        else:
            if not ok:
                st.error(body.get("message", "Something went wrong."))
            else:
                st.success(body.get("message", "E-Pass generated."))
                link = body["downloadLink"]
                st.session_state["download_link"] = link
                st.markdown(f"[Open your pass]({link})")

link = st.session_state.get("download_link")
if link:
    try:
        st.download_button(
            "Download E-Pass",
            data=fetch_pass(link),
            file_name=link.rsplit("/", 1)[-1],
            mime="application/pdf",
        )
    except requests.RequestException as e:
        st.warning(f"Pass not downloadable right now: {e}")
