# systdecode

Building blocks for working with MIPI SyS-T trace messages: collateral
catalog loading, GUID handling, the CRC-32C checksum, a C99 printf
emulation for single values, and a message model that renders as CSV.

## Installation

```
pip install .
```

The package has no runtime dependencies. For the tests:

```
pip install .[test]
pytest
```

## Modules

### `systdecode.printer`

- `string_to_num(text, bits=32)`: converts a decimal or `0x`-prefixed
  hexadecimal string to an unsigned integer of the given width. Raises
  `ValueError` if the text is not a complete number or does not fit.
- `to_hex_value(value, bits=32)`: formats a value as `0x` followed by
  zero-padded upper case hex digits, e.g. `to_hex_value(0xab, 32)` gives
  `"0x000000AB"`.
- `bytes_to_int(data, size)`: reads a little endian unsigned integer.
- `host_printf(fmt, value, star_args=())`: formats one value with a C99
  printf format string. `star_args` supplies up to two `*` width/precision
  values. Raises `PrintfError` (a `ValueError`) when the format cannot be
  applied.

```python
from systdecode.printer import host_printf

host_printf("%*d", 42, [5])      # '   42'
host_printf("%08.3f", 3.14159)   # '0003.142'
```

### `systdecode.guid`

`Guid` is a frozen 16-byte value written in
`{xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}` notation. `Guid.parse(text)`
raises `ValueError` on malformed text, `Guid.from_bytes(data)` takes the
first 16 bytes, and `to_bytes()` returns them. Guids can be compared,
ordered and combined with a mask through `&`; `str()` gives the brace
notation.

```python
from systdecode.guid import Guid

g = Guid.parse("{494e5443-8a9c-4014-a65a-2f36a36d96a4}")
str(g)  # '{494e5443-8a9c-4014-a65a-2f36a36d96a4}'
```

### `systdecode.crc`

`crc32c(data, crc=0)` computes the Castagnoli CRC-32C and can continue
from an earlier result.

```python
from systdecode.crc import crc32c

crc32c(b"0123456789ABCDEF") == 0xB5D83007  # True
```

### `systdecode.collateral`

`parse_xml(filename)` loads every `syst:Client` of a collateral XML file
and returns a list of `Collateral` objects. It raises `ValueError` if the
file cannot be read or parsed, or if an ID, mask, file or line attribute
is malformed. A `Collateral` offers:

- `match(guid, build)`: whether the guid (and, if non-zero, the build
  number) belongs to this client
- `catalog_entry(ident, bits)` and `short_entry(ident, bits)`: look up a
  `CatalogEntry` (format string, mask, source file and line) for a 32 or
  64 bit ID
- `source_file(ident)` and `write_type(ident)`: names for file IDs and raw
  write subtypes

Lookups go through `MaskedVector`, which compares keys under each item's
mask. Adding an item whose key matches an existing one with a different
value replaces it and prints a notice on standard error.

### `systdecode.message`

`Message` holds a decoded message: state (`DecodeState`), `Header` with
its bit fields, timestamps, build number, guid, `Location`, payload,
client name, length, CRC and collateral. `Message.to_csv(unit_testing)`
renders one CSV line whose columns follow `CSV_HEADER`: decode status,
payload, type, severity, origin, unit, message timestamp, context
timestamp, location, raw length, checksum and collateral file. With
`unit_testing` true, timestamps and checksums are replaced with
placeholders; with `None`, the `SYST_UNITTESTING` environment variable
decides. Messages that are in neither the `OK` nor the
`MISSING_COLLATERAL` state show only status and payload.

```python
from systdecode.message import DecodeState, Message, MessageType, STRING_GENERIC

msg = Message(state=DecodeState.OK, payload='say "hi"', length=12)
msg.header.type = MessageType.STRING
msg.header.subtype = STRING_GENERIC
print(msg.to_csv(True), end="")
```

Helpers `type_to_string`, `location_to_string` and `csv_quote` render the
individual columns.

## What the package does not do

The package does not turn raw message bytes into `Message` objects:
there is no byte-level message decoder, no formatting of catalog or
printf payloads from a packed argument buffer, and no command-line
program that reads trace files and prints them. A `Message` has to be
filled in by the caller before it is rendered.