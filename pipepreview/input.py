"""Low-level terminal input decoding.

Reads raw bytes from the terminal and translates them into normalized key tokens.
Handles ESC-sequence timing, UTF-8 input, navigation keys, and SGR mouse events.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x01": "CTRL_A",
    b"\x02": "CTRL_B",
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x05": "CTRL_E",
    b"\x06": "CTRL_F",
    b"\x0b": "CTRL_K",
    b"\x0f": "CTRL_O",
    b"\x10": "CTRL_P",
    b"\x11": "CTRL_Q",
    b"\x15": "CTRL_U",
    b"\x17": "CTRL_W",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}


# Application-mode (SS3) function keys.
_SS3_KEYS: dict[bytes, str] = {
    b"P": "F1",
    b"Q": "F2",
    b"R": "F3",
    b"S": "F4",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "HOME",
    "7": "HOME",
    "4": "END",
    "8": "END",
    "2": "INSERT",
    "3": "DELETE",
    "5": "PGUP",
    "6": "PGDN",
    "11": "F1",
    "12": "F2",
    "13": "F3",
    "14": "F4",
    "15": "F5",
    "17": "F6",
    "18": "F7",
    "19": "F8",
    "20": "F9",
    "21": "F10",
    "23": "F11",
    "24": "F12",
}

# Returned for sequences that were read whole but mean nothing here; only a
# lone escape byte decodes to "ESC".
UNKNOWN_KEY = "UNKNOWN"


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_sequence_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_utf8_char(fd: int, lead: bytes) -> str:
    """Complete a multi-byte UTF-8 character that starts with ``lead``."""
    data = bytearray(lead)
    for _ in range(_utf8_sequence_length(lead[0]) - 1):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data.extend(part)
    return data.decode("utf-8", errors="replace")


def _decode_sgr_mouse(fd: int) -> str:
    """Decode ``ESC [ < btn ; col ; row (M|m)`` into a mouse token."""
    payload = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return UNKNOWN_KEY
        if part in {b"M", b"m"}:
            break
        payload.append(part)
        if len(payload) > 64:
            return UNKNOWN_KEY
    try:
        btn_s, col_s, row_s = b"".join(payload).decode("ascii").split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return UNKNOWN_KEY
    button = btn & 0b11
    is_wheel = (btn & 0b0100_0000) != 0
    if is_wheel:
        if button == 0:
            return f"MOUSE_WHEEL_UP:{col}:{row}"
        if button == 1:
            return f"MOUSE_WHEEL_DOWN:{col}:{row}"
        return "MOUSE"
    if button == 0:
        suffix = "DOWN" if part == b"M" else "UP"
        return f"MOUSE_LEFT_{suffix}:{col}:{row}"
    return "MOUSE"


def _decode_csi_parameters(fd: int, first: bytes) -> str:
    """Decode parameterized CSI sequences such as ``ESC [ 5 ~`` or ``ESC [ 1 ; 3 C``.

    Bytes are consumed up to the final byte (``@`` to ``~``) so that an
    unrecognized sequence never leaks its tail into the editor.
    """
    params = first.decode("ascii")
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return UNKNOWN_KEY
        code = part[0]
        if 0x40 <= code <= 0x7E:
            if part == b"~":
                return _CSI_TILDE_KEYS.get(params.split(";")[0], UNKNOWN_KEY)
            if part not in _CSI_FINAL_KEYS:
                return UNKNOWN_KEY
            fields = params.split(";")
            modifier = fields[1] if len(fields) > 1 else ""
            key = _CSI_FINAL_KEYS[part]
            if modifier in {"3", "9"} and key in {"LEFT", "RIGHT"}:
                return f"ALT_{key}"
            if modifier == "5" and key in {"LEFT", "RIGHT"}:
                return f"CTRL_{key}"
            return key
        if not 0x20 <= code <= 0x3F:
            return UNKNOWN_KEY
        params += part.decode("ascii")
        if len(params) > 16:
            return UNKNOWN_KEY


def _decode_escape(fd: int) -> str:
    """Decode whatever follows an escape byte.

    ``ESC <char>`` is the meta/alt encoding of ``<char>``.
    """
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"\x1b":
        # Double escape, or alt+arrow sent as ESC ESC [ D.
        inner = _decode_escape(fd)
        if inner == "ESC":
            return "ESC"
        if inner in {"LEFT", "RIGHT"}:
            return f"ALT_{inner}"
        return UNKNOWN_KEY
    if seq in {b"b", b"B"}:
        return "ALT_LEFT"
    if seq in {b"f", b"F"}:
        return "ALT_RIGHT"
    if seq in {b"\x7f", b"\x08"}:
        return "ALT_BACKSPACE"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ALT_O"
        return _SS3_KEYS.get(final) or _CSI_FINAL_KEYS.get(final, UNKNOWN_KEY)
    if seq == b"[":
        first = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if first is None:
            return "ALT_["
        if first in _CSI_FINAL_KEYS:
            return _CSI_FINAL_KEYS[first]
        if first == b"<":
            return _decode_sgr_mouse(fd)
        if 0x30 <= first[0] <= 0x3F:
            return _decode_csi_parameters(fd, first)
        return UNKNOWN_KEY
    if seq[0] >= 0x80:
        return f"ALT_{_read_utf8_char(fd, seq)}"
    if 0x20 < seq[0] < 0x7F:
        return f"ALT_{seq.decode('ascii')}"
    return UNKNOWN_KEY


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; return ``""`` when ``timeout_ms`` elapses."""
    if timeout_ms is not None:
        ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return ""

    ch = os.read(fd, 1)
    if not ch:
        return ""

    if ch in _CONTROL_KEYS:
        return _CONTROL_KEYS[ch]
    if ch == b"\x1b":
        return _decode_escape(fd)
    if ch[0] >= 0x80:
        return _read_utf8_char(fd, ch)
    return ch.decode("utf-8", errors="replace")
