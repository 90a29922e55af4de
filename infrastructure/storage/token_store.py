import logging
import time
from typing import Optional
from urllib.parse import unquote

import streamlit as st
import streamlit.components.v1 as components

from config import TOKEN_COOKIE_MAX_AGE, TOKEN_COOKIE_NAME

log = logging.getLogger(__name__)

_UNSET = object()

# Delay after emitting cookie JS so the component renders before st.rerun() replaces it.
JS_SETTLE_SECONDS = 1


class MemoryTokenStore:
    """Process-local token store for headless runs and tests."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class CookieTokenStore:
    """
    Persists the auth token in a browser cookie (plus localStorage as backup).
    Cookie writes only become visible to the server on the next page load, so the
    last written value is mirrored in memory for the rest of the browser session.
    """

    def __init__(self, name: str = TOKEN_COOKIE_NAME, max_age: int = TOKEN_COOKIE_MAX_AGE):
        self.name = name
        self.max_age = max_age
        self._written = _UNSET
        self._recovery_flag = f"{name}_recovery_attempted"

    def load(self) -> Optional[str]:
        if self._written is not _UNSET:
            return self._written
        try:
            raw = st.context.cookies.get(self.name)
        except Exception:
            # Outside a running Streamlit script there is no request context
            raw = None
        return unquote(raw) if raw else None

    def save(self, token: str) -> None:
        self._written = token
        components.html(
            f"""
            <script>
                var token = "{token}";
                var cookieStr = "{self.name}=" + encodeURIComponent(token) + "; path=/; max-age={self.max_age}; SameSite=Lax";
                document.cookie = cookieStr;
                localStorage.setItem("{self.name}", token);
                sessionStorage.removeItem("{self._recovery_flag}");
                try {{
                    window.parent.document.cookie = cookieStr;
                }} catch (e) {{
                    console.log("Cross-origin frame block, normal behavior if different origin");
                }}
            </script>
            """,
            height=0,
        )
        time.sleep(JS_SETTLE_SECONDS)  # callers rerun right after; give the script time to run

    def clear(self) -> None:
        self._written = None
        components.html(
            f"""
            <script>
              document.cookie = "{self.name}=; path=/; max-age=0; SameSite=Lax";
              localStorage.removeItem("{self.name}");
              try {{
                  window.parent.document.cookie = "{self.name}=; path=/; max-age=0; SameSite=Lax";
              }} catch (e) {{}}
            </script>
            """,
            height=0,
        )
        time.sleep(JS_SETTLE_SECONDS)
        log.info("Auth token cookie cleared")

    def render_recovery_script(self) -> None:
        """Restores the cookie from localStorage if the browser dropped it (idle/restart), then reloads once."""
        components.html(
            f"""
            <script>
            (function () {{
              try {{
                  const token = localStorage.getItem("{self.name}");
                  const attempted = sessionStorage.getItem("{self._recovery_flag}");
                  const hasCookie = document.cookie.split("; ").some((x) => x.trim().startsWith("{self.name}="));

                  if (token && !hasCookie && !attempted) {{
                    sessionStorage.setItem("{self._recovery_flag}", "1");
                    const cookieStr = "{self.name}=" + encodeURIComponent(token) + "; path=/; max-age={self.max_age}; SameSite=Lax";
                    document.cookie = cookieStr;
                    try {{ window.parent.document.cookie = cookieStr; }} catch(e) {{}}
                    window.parent.location.reload();
                  }}
              }} catch (e) {{
                  console.error("Token recovery error", e);
              }}
            }})();
            </script>
            """,
            height=0,
        )
