"""Local control panel: the status icon and menu, served over HTTP."""

import json
import logging
import threading
from http.server import HTTPServer, BaseHTTPRequestHandler
from socketserver import ThreadingMixIn

from peekguard.alerts.events import Preview, Quit, ToggleFlashingMode, ToggleTracking
from peekguard.alerts.state_machine import AlertState
from peekguard.ui.icons import icon_png

log = logging.getLogger("peekguard")


class ThreadingHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True


class ControlState:
    """Shared state between the alert loop and the control server.

    The alert loop publishes status snapshots; request threads read them and
    hand commands back through the submit callback. Request threads never
    touch the state machine directly.
    """

    def __init__(self, submit):
        self.lock = threading.Lock()
        self._submit = submit
        self._status = {
            "state": AlertState.OFF.value,
            "count": 0,
            "flashing_enabled": False,
            "tracking_enabled": True,
            "previewing": False,
            "camera_disabled": False,
            "disabled_reason": "",
            "can_preview": True,
        }

    def publish(self, status: dict):
        with self.lock:
            self._status = dict(status)

    def get_status(self) -> dict:
        with self.lock:
            return dict(self._status)

    def submit(self, command):
        self._submit(command)


_COMMANDS = {
    "/api/flashing": ToggleFlashingMode,
    "/api/tracking": ToggleTracking,
    "/api/preview": Preview,
    "/api/quit": Quit,
}


_INDEX_HTML = b"""\
<html><head><title>PeekGuard</title>
<style>
body { background:#f4f4f4; color:#222; font-family:sans-serif; margin:0; padding:20px; width:260px; }
img.icon { width:32px; height:32px; vertical-align:middle; }
.menu button { display:block; width:100%; margin:6px 0; padding:8px; text-align:left;
    background:#fff; border:1px solid #ccc; border-radius:6px; cursor:pointer; }
.menu button:disabled { color:#aaa; cursor:default; }
#camera-required { display:none; }
#camera-required h3 { margin-bottom:4px; }
</style></head>
<body>
<h2><img class="icon" id="icon" src="/icon.png" /> PeekGuard</h2>
<div id="count"></div>

<div class="menu" id="camera-enabled">
<button id="flash" onclick="send('flashing')">Enable Alert Flashing</button>
<button id="track" onclick="send('tracking')">Pause Monitoring</button>
<button id="preview" onclick="send('preview')">Preview Alert</button>
</div>

<div id="camera-required">
<h3>Camera Access Required</h3>
<div>Grant this application camera access in your system privacy settings.</div>
<div id="disabled-reason"></div>
</div>

<hr>
<div class="menu"><button onclick="send('quit')">Quit</button></div>

<script>
function send(name) {
    fetch('/api/' + name, {method: 'POST'}).then(refresh);
}

function refresh() {
    fetch('/api/status')
        .then(r => r.json())
        .then(s => {
            document.getElementById('icon').src = '/icon.png?state=' + s.state;
            document.getElementById('count').textContent =
                s.count > 0 ? s.count + ' onlooker(s) detected' : '';
            document.getElementById('camera-enabled').style.display =
                s.camera_disabled ? 'none' : 'block';
            document.getElementById('camera-required').style.display =
                s.camera_disabled ? 'block' : 'none';
            document.getElementById('disabled-reason').textContent = s.disabled_reason || '';
            document.getElementById('flash').textContent =
                s.flashing_enabled ? 'Disable Alert Flashing' : 'Enable Alert Flashing';
            document.getElementById('track').textContent =
                s.tracking_enabled ? 'Pause Monitoring' : 'Enable Monitoring';
            document.getElementById('preview').disabled = !s.can_preview;
        })
        .catch(() => {
            document.getElementById('count').textContent = 'Not running';
        });
}

refresh();
setInterval(refresh, 250);
</script>
</body></html>
"""


class ControlHandler(BaseHTTPRequestHandler):
    control_state = None  # Set before starting server
    allowed_hosts = frozenset()  # "host:port" values this server answers to

    def do_GET(self):
        if not self._trusted():
            return
        path = self.path.split("?", 1)[0]
        if path == "/":
            self._send_bytes(_INDEX_HTML, "text/html")
        elif path == "/api/status":
            self._send_json(self.control_state.get_status())
        elif path == "/icon.png":
            state = AlertState(self.control_state.get_status()["state"])
            self._send_bytes(icon_png(state), "image/png")
        else:
            self.send_response(404)
            self.end_headers()

    def do_POST(self):
        if not self._trusted():
            return
        command = _COMMANDS.get(self.path)
        if command is None:
            self.send_response(404)
            self.end_headers()
            return
        self.control_state.submit(command())
        self._send_json({"ok": True})

    def _trusted(self) -> bool:
        """Reject other sites' pages and DNS-rebound hosts."""
        host = self.headers.get("Host", "")
        origin = self.headers.get("Origin")
        if host in self.allowed_hosts and (origin is None or origin == f"http://{host}"):
            return True
        log.warning(f"Refused control request {self.command} {self.path} "
                    f"(Host {host!r}, Origin {origin!r})")
        self._send_json({"error": "forbidden"}, status=403)
        return False

    def _send_bytes(self, content: bytes, content_type: str):
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(content)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(content)

    def _send_json(self, data, status=200):
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging


def start_control_server(control_state: ControlState, host: str = "127.0.0.1",
                         port: int = 8765):
    """Start the control server in a daemon thread."""
    ControlHandler.control_state = control_state
    server = ThreadingHTTPServer((host, port), ControlHandler)
    bound_port = server.server_address[1]
    ControlHandler.allowed_hosts = frozenset(
        f"{name}:{bound_port}" for name in (host, "localhost", "127.0.0.1"))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server
