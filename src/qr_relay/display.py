"""Viewer pages served at ``/``.

The pages encode the payload into a QR image in the browser; the server
only supplies the payload. Both pages show the current code, its update
time and the last five updates.
"""

from __future__ import annotations

from typing import Final

from .sse import NEW_QR_DATA_EVENT
from .types import NO_DATA_YET, NOT_AVAILABLE, UPDATE_LOG_LIMIT, Variant

POLL_INTERVAL_MS: Final[int] = 1000

_QRCODE_JS: Final[str] = "https://cdn.jsdelivr.net/gh/davidshimjs/qrcodejs@gh-pages/qrcode.min.js"

_PAGE_HEAD: Final[str] = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Real-time QR Code Display ({mode})</title>
<style>
  body {{ display: flex; justify-content: center; align-items: center; height: 100vh;
         margin: 0; background-color: #f0f0f0; font-family: sans-serif; }}
  #container {{ display: flex; flex-direction: column; align-items: center; gap: 20px; }}
  #qrcode {{ padding: 20px; background-color: white; border-radius: 10px;
             box-shadow: 0 4px 8px rgba(0,0,0,0.1); }}
  #info {{ text-align: center; }}
  #log {{ margin-top: 10px; padding: 10px; border: 1px solid #ccc; border-radius: 5px;
          max-height: 150px; overflow-y: auto; width: 400px; background-color: #fff; }}
  #log p {{ margin: 5px 0; font-size: 14px; }}
</style>
</head>
<body>
<div id="container">
  <div id="qrcode"></div>
  <div id="info">
    <p>Last Updated: <span id="last-updated">{not_available}</span></p>
    <h3>Update Log</h3>
    <div id="log"></div>
  </div>
</div>
<script src="{qrcode_js}"></script>
<script>
  const NO_DATA_YET = {no_data_yet_js};
  const NOT_AVAILABLE = {not_available_js};
  const LOG_LIMIT = {log_limit};
  const qrcode = new QRCode(document.getElementById('qrcode'), {{
    text: NO_DATA_YET, width: 400, height: 400,
    colorDark: '#000000', colorLight: '#ffffff', correctLevel: QRCode.CorrectLevel.H
  }});
  const lastUpdatedElem = document.getElementById('last-updated');
  const logElem = document.getElementById('log');

  function formatTime(ts) {{
    if (!ts || ts === NOT_AVAILABLE) return NOT_AVAILABLE;
    const iso = ts.endsWith('Z') ? ts : ts + 'Z';
    return new Date(iso).toLocaleString();
  }}

  function renderLog(entries) {{
    logElem.innerHTML = '';
    if (!entries.length) {{
      logElem.innerHTML = '<p>No updates logged yet.</p>';
      return;
    }}
    entries.forEach(entry => {{
      const p = document.createElement('p');
      const short = entry.data.length > 30 ? entry.data.substring(0, 30) + '...' : entry.data;
      p.textContent = '[' + formatTime(entry.timestamp) + '] - ' + short;
      logElem.appendChild(p);
    }});
  }}
"""

_POLL_SCRIPT: Final[str] = """
  let currentQRData = '';

  async function fetchQRData() {{
    try {{
      const response = await fetch('/qr_data', {{ cache: 'no-store' }});
      if (!response.ok) throw new Error('status ' + response.status);
      const data = await response.json();
      // Re-encode only when the payload changed.
      if (data.current_qr && data.current_qr !== currentQRData) {{
        currentQRData = data.current_qr;
        qrcode.clear();
        qrcode.makeCode(currentQRData);
      }}
      lastUpdatedElem.textContent = formatTime(data.last_updated);
      renderLog(data.update_log || []);
    }} catch (error) {{
      // Keep the last rendered state; the next tick retries.
      console.error('Error fetching QR data:', error);
    }}
  }}

  setInterval(fetchQRData, {interval_ms});
  fetchQRData();
</script>
</body>
</html>
"""

_PUSH_SCRIPT: Final[str] = """
  const entries = [];
  renderLog(entries);
  const source = new EventSource('/events');
  source.addEventListener('{event_name}', event => {{
    const payload = JSON.parse(event.data);
    qrcode.clear();
    qrcode.makeCode(payload);
    const ts = new Date().toISOString();
    lastUpdatedElem.textContent = formatTime(ts);
    entries.unshift({{ data: payload, timestamp: ts }});
    entries.length = Math.min(entries.length, LOG_LIMIT);
    renderLog(entries);
  }});
  source.onerror = () => console.error('Event stream interrupted, reconnecting');
</script>
</body>
</html>
"""


def _head(mode: str) -> str:
    return _PAGE_HEAD.format(
        mode=mode,
        not_available=NOT_AVAILABLE,
        qrcode_js=_QRCODE_JS,
        no_data_yet_js=f"'{NO_DATA_YET}'",
        not_available_js=f"'{NOT_AVAILABLE}'",
        log_limit=UPDATE_LOG_LIMIT,
    )


def render_poll_page(interval_ms: int = POLL_INTERVAL_MS) -> str:
    return _head("Polling") + _POLL_SCRIPT.format(interval_ms=interval_ms)


def render_push_page() -> str:
    return _head("Push") + _PUSH_SCRIPT.format(event_name=NEW_QR_DATA_EVENT)


def render_page(variant: Variant) -> str:
    if variant == "poll":
        return render_poll_page()
    return render_push_page()


__all__ = ["POLL_INTERVAL_MS", "render_page", "render_poll_page", "render_push_page"]
