import sqlite3
import json
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime, timezone
import logging
from enum import Enum

log = logging.getLogger(__name__)

class AuditAction(str, Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAIL = "LOGIN_FAIL"
    REGISTER = "REGISTER"
    LOGOUT = "LOGOUT"
    SESSION_RESTORED = "SESSION_RESTORED"
    SESSION_INVALIDATED = "SESSION_INVALIDATED"
    PROFILE_UPDATE = "PROFILE_UPDATE"
    RBAC_DENIED = "RBAC_DENIED"
    RESERVATION_CREATED = "RESERVATION_CREATED"
    RESERVATION_FAILED = "RESERVATION_FAILED"
    PAYMENT_INITIATED = "PAYMENT_INITIATED"
    PAYMENT_FAILED = "PAYMENT_FAILED"

ALLOWED_METADATA_KEYS = {
    "reason", "role", "view", "required_roles", "event_id", "quantity",
    "payment_type", "reservation_id", "payment_id", "status", "error_message",
}

class SQLiteAuditRepository:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    ts TEXT NOT NULL,
                    actor_user_id TEXT,
                    actor_role TEXT,
                    action TEXT NOT NULL,
                    target_type TEXT NOT NULL,
                    target_id TEXT,
                    metadata_json TEXT,
                    result TEXT NOT NULL
                )
            """)
            conn.commit()

    def log_action(
        self,
        action: Any,
        target_type: str,
        actor_user_id: Optional[str] = None,
        actor_role: Optional[str] = None,
        target_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        result: str = "success"
    ):
        """Logs an action to the audit repository. Metadata is JSON serialized and constrained."""
        try:
            meta_str = None
            if metadata is not None:
                safe_meta = {}
                for k, v in metadata.items():
                    if k in ALLOWED_METADATA_KEYS and "password" not in str(v).lower() and "token" not in str(v).lower():
                        safe_meta[k] = v
                try:
                    meta_str = json.dumps(safe_meta)
                    if len(meta_str) > 2000:
                        safe_meta["truncated"] = True
                        meta_str = json.dumps(safe_meta)[:2000]
                except (TypeError, ValueError):
                    meta_str = "{\"error\": \"unserializable\"}"

            ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            action_val = action.value if hasattr(action, "value") else str(action)[:50]
            if not action_val: action_val = "UNKNOWN"

            target_type = str(target_type)[:50] if target_type else "UNKNOWN"
            actor_user_id = str(actor_user_id)[:64] if actor_user_id is not None else None
            actor_role = str(actor_role)[:20] if actor_role is not None else None
            target_id = str(target_id)[:100] if target_id is not None else None
            result = str(result)[:20] if result else "unknown"

            with self._conn() as conn:
                conn.execute("""
                    INSERT INTO audit_log
                    (ts, actor_user_id, actor_role, action, target_type, target_id, metadata_json, result)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (ts, actor_user_id, actor_role, action_val, target_type, target_id, meta_str, result))
                conn.commit()
        except Exception as e:
            # Audit failures must not crash the main application
            log.error(f"Audit log failed for action {action}: {e}", exc_info=True)

    def get_logs(self, limit: int = 100, action_filter: Optional[str] = None) -> List[Tuple]:
        """Fetches the most recent audit entries, newest first."""
        try:
            with self._conn() as conn:
                query = """
                    SELECT id, ts, actor_user_id, actor_role, action, target_type,
                           target_id, metadata_json, result
                    FROM audit_log
                    WHERE 1=1
                """
                params = []
                if action_filter:
                    query += " AND action = ?"
                    params.append(action_filter)
                query += " ORDER BY id DESC LIMIT ?"
                params.append(limit)
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as e:
            log.error(f"Failed to fetch audit logs: {e}", exc_info=True)
            return []
