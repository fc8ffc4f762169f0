#!/usr/bin/env python3
"""
Compliance Service Session

Drives one long-lived PowerShell process that holds an authenticated
Security & Compliance session (ExchangeOnlineManagement module). Commands
are written to the process's stdin; each command answers with exactly one
marker line on stdout carrying either a single-line JSON result or the
service's error message.

Byte arrays in results are tagged on the PowerShell side and come back as
Python bytes; everything else is plain JSON (dicts, lists, scalars).

Usage:
    with ComplianceSession("admin@contoso.com") as session:
        result = session.extract_text(data)
"""

import base64
import json
import subprocess
import uuid
from typing import Any, Callable, Dict, List, Optional

from config import (
    CMDLET_CONNECT,
    CMDLET_DATA_CLASSIFICATION,
    CMDLET_DISCONNECT,
    CMDLET_LIST_RULE_PACKAGES,
    CMDLET_NEW_KEYWORD_DICTIONARY,
    CMDLET_TEXT_EXTRACTION,
    COMPLIANCE_MODULE,
    POWERSHELL_ARGS,
    WIRE_MAX_DEPTH,
)
from src.core.errors import RemoteServiceError
from src.utils.logging_utils import get_logger
from src.utils.platform_utils import find_powershell

logger = get_logger(__name__)

BYTES_TAG = "__bytes__"

# Flattens PowerShell/.NET objects into hashtables that ConvertTo-Json can
# render, tagging byte arrays so they survive the trip as base64.
WIRE_PRELUDE = r"""
$ErrorActionPreference = 'Stop'
$ProgressPreference = 'SilentlyContinue'
function ConvertTo-WireObject($Value, [int]$Depth = 0) {
    if ($null -eq $Value) { return $null }
    if ($Value -is [byte[]]) { return @{ '__bytes__' = [Convert]::ToBase64String($Value) } }
    if ($Value -is [string] -or $Value -is [bool] -or $Value -is [int] -or $Value -is [long] -or $Value -is [double]) { return $Value }
    if ($Value -is [enum] -or $Value -is [guid] -or $Value -is [datetime] -or $Value -is [ValueType]) { return $Value.ToString() }
    if ($Depth -ge %(depth)d) { return $Value.ToString() }
    if ($Value -is [System.Collections.IDictionary]) {
        $h = [ordered]@{}
        foreach ($k in $Value.Keys) { $h[[string]$k] = ConvertTo-WireObject $Value[$k] ($Depth + 1) }
        return $h
    }
    if ($Value -is [System.Collections.IEnumerable]) {
        $items = @()
        foreach ($item in $Value) { $items += ,(ConvertTo-WireObject $item ($Depth + 1)) }
        return ,$items
    }
    $h = [ordered]@{}
    foreach ($p in $Value.PSObject.Properties) {
        try { $h[$p.Name] = ConvertTo-WireObject $p.Value ($Depth + 1) } catch { $h[$p.Name] = $null }
    }
    return $h
}
""" % {"depth": WIRE_MAX_DEPTH}

COMMAND_TEMPLATE = r"""
try {
    $__result = & { %(body)s }
    $__wire = ConvertTo-WireObject $__result
    Write-Output ('%(marker)s OK ' + (ConvertTo-Json -InputObject $__wire -Depth 32 -Compress))
} catch {
    Write-Output ('%(marker)s ERR ' + ($_.Exception.Message -replace '\r?\n', ' '))
}
"""


def ps_literal(value: Any) -> str:
    """
    Render a Python value as a PowerShell literal.

    Args:
        value: str, bool, int, float, bytes, list/tuple of those, or None

    Returns:
        PowerShell source text
    """
    if value is None:
        return "$null"
    if isinstance(value, bool):
        return "$true" if value else "$false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(value)).decode("ascii")
        return f"([Convert]::FromBase64String('{encoded}'))"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if isinstance(value, (list, tuple)):
        return "@(" + ", ".join(ps_literal(v) for v in value) + ")"
    raise TypeError(f"Cannot pass {type(value).__name__} to PowerShell")


def build_command(cmdlet: str, parameters: Dict[str, Any]) -> str:
    """Render a cmdlet call with named parameters; None values are omitted."""
    parts = [cmdlet]
    for name, value in parameters.items():
        if value is None:
            continue
        parts.append(f"-{name}:{ps_literal(value)}")
    return " ".join(parts)


def _decode_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and BYTES_TAG in obj:
        return base64.b64decode(obj[BYTES_TAG])
    return obj


def decode_wire(payload: str) -> Any:
    """Decode the JSON text of one result line"""
    if not payload.strip():
        return None
    return json.loads(payload, object_hook=_decode_hook)


class ComplianceSession:
    """Authenticated session with the compliance service"""

    def __init__(self, user_principal_name: str, powershell_path: Optional[str] = None,
                 process_factory: Callable[..., Any] = subprocess.Popen):
        """
        Initialize the session (nothing is started until connect()).

        Args:
            user_principal_name: Identity used to sign in
            powershell_path: PowerShell executable (detected when None)
            process_factory: Callable with the subprocess.Popen signature
        """
        self.user_principal_name = user_principal_name
        self.powershell_path = powershell_path
        self._process_factory = process_factory
        self._process = None
        self._marker = f"<<{uuid.uuid4().hex}>>"
        self.connected = False

    def __enter__(self) -> "ComplianceSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def _start_process(self) -> None:
        executable = self.powershell_path or find_powershell()
        if not executable:
            raise RemoteServiceError("PowerShell was not found; install PowerShell 7 (pwsh)")
        logger.debug("Starting %s", executable)
        try:
            self._process = self._process_factory(
                [executable] + POWERSHELL_ARGS,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                bufsize=1,
            )
        except OSError as e:
            raise RemoteServiceError(f"Could not start PowerShell ({executable}): {e}")

    def _write(self, script: str) -> None:
        try:
            self._process.stdin.write(script + "\n")
            self._process.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise RemoteServiceError(f"PowerShell process is no longer accepting commands: {e}")

    def _read_result(self, description: str) -> Any:
        prefix = self._marker + " "
        while True:
            line = self._process.stdout.readline()
            if not line:
                raise RemoteServiceError(
                    f"PowerShell exited before answering {description}", command=description
                )
            line = line.rstrip("\r\n")
            if not line.startswith(prefix):
                logger.debug("pwsh: %s", line)
                continue
            status, _, payload = line[len(prefix):].partition(" ")
            if status == "ERR":
                raise RemoteServiceError(payload or f"{description} failed", command=description)
            return decode_wire(payload)

    def run(self, body: str, description: str = "command") -> Any:
        """Run a PowerShell script block and return its decoded output"""
        if self._process is None:
            raise RemoteServiceError("Session is not connected", command=description)
        self._write(COMMAND_TEMPLATE % {"body": body, "marker": self._marker})
        return self._read_result(description)

    def connect(self) -> None:
        """Start PowerShell and sign in; a failed sign-in leaves nothing running"""
        if self.connected:
            return
        self._start_process()
        logger.info("Connecting to the compliance service as %s", self.user_principal_name)
        try:
            self._write(WIRE_PRELUDE)
            self.run(
                f"Import-Module {COMPLIANCE_MODULE}; "
                + build_command(CMDLET_CONNECT, {
                    "UserPrincipalName": self.user_principal_name,
                    "ShowBanner": False,
                }),
                description=CMDLET_CONNECT,
            )
        except BaseException:
            # Includes Ctrl+C during the interactive sign-in
            self._stop_process()
            raise
        self.connected = True

    def disconnect(self) -> None:
        """Sign out and stop PowerShell; safe to call more than once"""
        if self._process is None:
            return
        try:
            if self.connected:
                self.run(build_command(CMDLET_DISCONNECT, {"Confirm": False}),
                         description=CMDLET_DISCONNECT)
        except RemoteServiceError as e:
            logger.warning("Disconnect failed: %s", e.message)
        finally:
            self.connected = False
            self._stop_process()

    def _stop_process(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        try:
            process.stdin.close()
        except OSError:
            pass
        try:
            process.wait(timeout=30)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def invoke(self, cmdlet: str, **parameters: Any) -> Any:
        """Call a remote procedure with named parameters"""
        logger.debug("Invoking %s", cmdlet)
        return self.run(build_command(cmdlet, parameters), description=cmdlet)

    def invoke_single(self, cmdlet: str, **parameters: Any) -> Any:
        """Call a remote procedure that answers with one object"""
        result = self.invoke(cmdlet, **parameters)
        if isinstance(result, list):
            return result[0] if result else None
        return result

    # Remote procedures used by the scripts

    def extract_text(self, file_data: bytes) -> Any:
        return self.invoke_single(CMDLET_TEXT_EXTRACTION, FileData=file_data)

    def classify_text(self, text: str) -> Any:
        return self.invoke_single(CMDLET_DATA_CLASSIFICATION, TextToClassify=text)

    def list_rule_packages(self) -> List[Any]:
        result = self.invoke(CMDLET_LIST_RULE_PACKAGES)
        if result is None:
            return []
        return result if isinstance(result, list) else [result]

    def new_keyword_dictionary(self, name: str, description: str, file_data: bytes) -> Any:
        return self.invoke_single(
            CMDLET_NEW_KEYWORD_DICTIONARY,
            Name=name,
            Description=description,
            FileData=file_data,
        )
