import streamlit as st

import auth
from infrastructure.repositories.sqlite_audit_repository import AuditAction


def render_activity_log():
    st.title("🛡️ Activity log")
    action_options = ["All"] + [a.value for a in AuditAction]
    c1, c2 = st.columns([3, 1])
    action = c1.selectbox("Action", action_options, index=0)
    limit = c2.number_input("Rows", min_value=10, max_value=1000, value=100, step=10)

    rows = auth.get_audit_repo().get_logs(
        limit=int(limit),
        action_filter=None if action == "All" else action,
    )
    if not rows:
        st.info("No activity recorded yet.")
        return

    records = []
    for row_id, ts, actor_id, actor_role, act, target_type, target_id, meta, result in rows:
        records.append({
            "ID": row_id,
            "Time (UTC)": ts,
            "User": actor_id or "anonymous",
            "Role": actor_role or "",
            "Action": act,
            "Target": f"{target_type}:{target_id}" if target_id else target_type,
            "Details": meta or "",
            "Result": result,
        })
    st.dataframe(records, use_container_width=True, hide_index=True)
