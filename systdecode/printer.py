"""Numeric helpers and a C99 printf emulation for a single argument."""

from __future__ import annotations

import math
import re
from fractions import Fraction
from typing import Sequence, Union

__all__ = [
    "PrintfError",
    "string_to_num",
    "to_hex_value",
    "bytes_to_int",
    "host_printf",
]

_MAX_OUTPUT = 64 * 1024

_DEC_RE = re.compile(r"\s*([+-]?)(\d+)\s*")
_HEX_RE = re.compile(r"0[xX]([0-9a-fA-F]+)\s*")

_SPEC_RE = re.compile(
    r"%(?P<flags>[-+ #0]*)"
    r"(?P<width>\*|\d+)?"
    r"(?:\.(?P<prec>\*|\d*))?"
    r"(?P<length>hh|h|ll|l|j|z|t|L|q)?"
    r"(?P<conv>.?)",
    re.S,
)

_LENGTH_BITS = {
    None: 32,
    "hh": 8,
    "h": 16,
    "l": 64,
    "ll": 64,
    "q": 64,
    "j": 64,
    "z": 64,
    "t": 64,
    "L": 64,
}

Value = Union[int, float, str, bytes]


class PrintfError(ValueError):
    """Raised when a printf format cannot be applied to its arguments."""


def string_to_num(text: str, bits: int = 32) -> int:
    """Convert a decimal or "0x"-prefixed hexadecimal string to an unsigned int.

    Raises ValueError if the text is not a complete number or does not fit.
    """
    read_bits = max(bits, 32)
    limit = (1 << read_bits) - 1
    if text.startswith("0x"):
        match = _HEX_RE.fullmatch(text)
        if not match:
            raise ValueError(f"invalid number '{text}'")
        value = int(match.group(1), 16)
        if value > limit:
            raise ValueError(f"number '{text}' out of range")
    else:
        match = _DEC_RE.fullmatch(text)
        if not match:
            raise ValueError(f"invalid number '{text}'")
        value = int(match.group(2))
        if value > limit:
            raise ValueError(f"number '{text}' out of range")
        if match.group(1) == "-":
            value = (-value) & limit
    return value & ((1 << bits) - 1)


def to_hex_value(value: int, bits: int = 32) -> str:
    """Format value as "0x" followed by zero padded upper case hex digits."""
    mask = (1 << bits) - 1
    return f"0x{value & mask:0{bits // 4}X}"


def bytes_to_int(data: bytes, size: int) -> int:
    """Read a little endian unsigned integer of size bytes from data."""
    if len(data) < size:
        raise ValueError(f"need {size} bytes, got {len(data)}")
    return int.from_bytes(bytes(data[:size]), "little")


def _to_signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _pad(prefix: str, body: str, flags: str, width: int, zero_ok: bool) -> str:
    total = len(prefix) + len(body)
    if width <= total:
        return prefix + body
    fill = width - total
    if "-" in flags:
        return prefix + body + " " * fill
    if "0" in flags and zero_ok:
        return prefix + "0" * fill + body
    return " " * fill + prefix + body


def _sign(negative: bool, flags: str) -> str:
    if negative:
        return "-"
    if "+" in flags:
        return "+"
    if " " in flags:
        return " "
    return ""


def _format_int(value: int, conv: str, flags: str, width: int,
                prec: int | None, bits: int) -> str:
    mask = (1 << bits) - 1
    v = int(value) & mask
    if conv in "di" and v >> (bits - 1):
        v -= 1 << bits
    magnitude = abs(v)
    digits = format(magnitude, {"o": "o", "x": "x", "X": "X"}.get(conv, "d"))
    if prec is not None:
        if prec == 0 and magnitude == 0:
            digits = ""
        digits = digits.rjust(prec, "0")
    prefix = _sign(v < 0, flags) if conv in "di" else ""
    if "#" in flags:
        if conv == "o" and not digits.startswith("0"):
            digits = "0" + digits
        elif conv in "xX" and magnitude:
            prefix += "0x" if conv == "x" else "0X"
    return _pad(prefix, digits, flags, width, prec is None)


def _format_hex_float(x: float, flags: str, width: int, prec: int | None,
                      upper: bool) -> str:
    negative = math.copysign(1.0, x) < 0
    sign = _sign(negative, flags)
    if math.isnan(x) or math.isinf(x):
        body = "nan" if math.isnan(x) else "inf"
        return _pad(sign, body.upper() if upper else body, flags, width, False)

    text = float.hex(abs(x))
    mantissa, exp_text = text[2:].split("p")
    lead_text, _, frac = mantissa.partition(".")
    lead = int(lead_text)
    exponent = int(exp_text)

    if abs(x) == 0.0:
        lead, frac, exponent = 0, "", 0
        if prec:
            frac = "0" * prec
    elif prec is None:
        frac = frac.rstrip("0")
    else:
        n = len(frac)
        full = (lead << (4 * n)) | (int(frac, 16) if frac else 0)
        if prec >= n:
            lead_val, frac_val = lead, full & ((1 << (4 * n)) - 1)
            frac = format(frac_val, f"0{n}x") + "0" * (prec - n) if n else "0" * prec
            lead = lead_val
        else:
            rounded = round(Fraction(full, 16 ** (n - prec)))
            lead = rounded >> (4 * prec)
            frac_val = rounded & ((1 << (4 * prec)) - 1)
            frac = format(frac_val, f"0{prec}x") if prec else ""

    digits = str(lead)
    if frac or "#" in flags:
        digits += "." + frac
    digits += f"p{exponent:+d}"
    prefix = sign + "0x"
    if upper:
        prefix, digits = prefix.upper(), digits.upper()
    return _pad(prefix, digits, flags, width, True)


def _format_spec(conv: str, flags: str, width: int, prec: int | None,
                 length: str | None, value: Value) -> str:
    if conv in "diuoxX":
        if isinstance(value, (str, bytes, float)):
            raise PrintfError("integer conversion needs an integer argument")
        return _format_int(value, conv, flags, width, prec, _LENGTH_BITS[length])

    if conv in "eEfFgG":
        if isinstance(value, (str, bytes)):
            raise PrintfError("floating point conversion needs a number")
        spec = "%" + flags + (str(width) if width else "")
        if prec is not None:
            spec += f".{prec}"
        return (spec + conv) % float(value)

    if conv in "aA":
        if isinstance(value, (str, bytes)):
            raise PrintfError("floating point conversion needs a number")
        return _format_hex_float(float(value), flags, width, prec, conv == "A")

    if conv == "c":
        if not isinstance(value, int):
            raise PrintfError("character conversion needs an integer argument")
        code = value if length == "l" else value & 0xFF
        try:
            char = chr(code)
        except (ValueError, OverflowError) as exc:
            raise PrintfError("invalid character value") from exc
        return _pad("", char, flags, width, False)

    if conv == "s":
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        if not isinstance(value, str):
            raise PrintfError("string conversion needs a string argument")
        text = value if prec is None else value[:prec]
        return _pad("", text, flags, width, False)

    if conv == "p":
        if not isinstance(value, int):
            raise PrintfError("pointer conversion needs an integer argument")
        if value & ((1 << 64) - 1) == 0:
            return _pad("", "(nil)", flags, width, False)
        clean = flags.replace("+", "").replace(" ", "") + "#"
        return _format_int(value, "x", clean, width, prec, 64)

    raise PrintfError(f"unsupported conversion '{conv}'")


def host_printf(fmt: str, value: Value, star_args: Sequence[int] = ()) -> str:
    """Format one value with a C99 printf format string.

    star_args supplies up to two '*' width/precision values consumed before
    value. Raises PrintfError with a descriptive message on failure.
    """
    invalid = PrintfError(f" - invalid format '{fmt}' in printf")
    if len(star_args) > 2:
        raise invalid

    pending = [*star_args, value]

    def take() -> Value:
        if not pending:
            raise invalid
        return pending.pop(0)

    out: list[str] = []
    pos = 0
    while pos < len(fmt):
        percent = fmt.find("%", pos)
        if percent < 0:
            out.append(fmt[pos:])
            break
        out.append(fmt[pos:percent])
        match = _SPEC_RE.match(fmt, percent)
        conv = match.group("conv")
        if not conv:
            raise invalid
        pos = match.end()
        if conv == "%":
            out.append("%")
            continue

        flags = match.group("flags")
        width_text = match.group("width")
        width = 0
        if width_text == "*":
            arg = take()
            if not isinstance(arg, int):
                raise invalid
            width = _to_signed32(arg)
            if width < 0:
                flags += "-"
                width = -width
        elif width_text:
            width = int(width_text)

        prec_text = match.group("prec")
        prec: int | None = None
        if prec_text == "*":
            arg = take()
            if not isinstance(arg, int):
                raise invalid
            prec = _to_signed32(arg)
            if prec < 0:
                prec = None
        elif prec_text is not None:
            prec = int(prec_text) if prec_text else 0

        arg = take()
        if conv == "n":
            continue
        try:
            out.append(_format_spec(conv, flags, width, prec,
                                    match.group("length"), arg))
        except PrintfError as exc:
            raise invalid from exc

    result = "".join(out)
    if len(result) >= _MAX_OUTPUT:
        raise PrintfError(f" - printf result using format '{fmt}' is too large")
    return result