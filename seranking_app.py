from __future__ import annotations

import os
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from seranking.audit_log import AuditLog
from seranking.client import SeRankingClient
from seranking.config import DEFAULT_BASE_URL, TOKEN_ENV_VAR, RunConfig
from seranking.errors import ItemFailedError, RunAbortedError
from seranking.models import Operation, RunMode
from seranking.resolver import split_item_lines
from seranking.runner import run_batch

OPERATION_LABELS = {
    "Create SERP Task": Operation.CREATE_SERP_TASK,
    "Get Task Status": Operation.GET_TASK_STATUS,
}


st.set_page_config(page_title="SE Ranking SERP Tasks", layout="wide")
st.title("SE Ranking SERP Tasks")

if "audit" not in st.session_state:
    st.session_state.audit = AuditLog()
if "records" not in st.session_state:
    st.session_state.records = []

with st.sidebar:
    st.header("Connection")
    api_token = st.text_input("API Token", value=os.getenv(TOKEN_ENV_VAR, ""), type="password")
    base_url = st.text_input("Base URL", value=DEFAULT_BASE_URL)
    continue_on_fail = st.toggle("Continue on fail", value=False)

audit: AuditLog = st.session_state.audit

operation_label = st.selectbox("Operation", list(OPERATION_LABELS.keys()))
operation = OPERATION_LABELS[operation_label]

items: List[Dict[str, Any]] = []
if operation is Operation.CREATE_SERP_TASK:
    engine_id = st.number_input(
        "Search Engine ID",
        min_value=0,
        value=200,
        step=1,
        help="Search engine ID (200 for Google US, 1540 for Google US Mobile)",
    )
    keyword_lines = st.text_area(
        "Keywords (one item per line)",
        placeholder="keyword1, keyword2, keyword3",
        help="Comma-separated list of keywords to search for",
    )
    items = [{"engineId": int(engine_id), "keywords": line} for line in split_item_lines(keyword_lines)]
else:
    task_lines = st.text_area("Task IDs (one item per line)", help="The task ID from a previously created SERP task")
    items = [{"taskId": line} for line in split_item_lines(task_lines)]

run_disabled = not api_token or not items
if not api_token:
    st.warning(f"Set {TOKEN_ENV_VAR} or enter an API token to run.")

if st.button("Run", type="primary", disabled=run_disabled):
    config = RunConfig(
        operation=operation,
        api_token=api_token,
        base_url=base_url,
        mode=RunMode.TOLERANT if continue_on_fail else RunMode.STRICT,
    )
    client = SeRankingClient(api_token=config.api_token, base_url=config.base_url)
    records: List[Dict[str, Any]] = []
    try:
        run_batch(items, config, client=client, audit=audit, output=records)
        st.success(f"Emitted {len(records)} records from {len(items)} items")
    except ItemFailedError as exc:
        st.error(f"{exc} (item {exc.item_index}, {exc.description})")
    except RunAbortedError as exc:
        st.error(str(exc))
    st.session_state.records = records
    with st.expander("Request evidence"):
        st.json(client.evidence_log)

if st.session_state.records:
    st.subheader("Output")
    st.dataframe(pd.DataFrame(st.session_state.records), use_container_width=True)

st.subheader("Audit Log")
summary = audit.summary()
m1, m2, m3, m4 = st.columns(4)
m1.metric("Items", summary["items"])
m2.metric("Succeeded", summary["succeeded"])
m3.metric("Failed", summary["failed"])
m4.metric("Records", summary["records_emitted"])
if summary["error_codes"]:
    st.caption("Error codes: " + ", ".join(f"{code} x{count}" for code, count in summary["error_codes"].items()))
col1, col2 = st.columns(2)
col1.download_button("Export JSON", audit.export_json(), file_name="seranking_audit.json", mime="application/json")
col2.download_button("Export CSV", audit.export_csv(), file_name="seranking_audit.csv", mime="text/csv")
