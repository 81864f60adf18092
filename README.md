# sketchkit

Small, dependency-free utilities for producing compact JSON and
certificate data:

- `sketchkit.jsonbuilder`: `build_json` builds JSON text from a flat
  list of tagged items, such as `"i|count"` for a 32-bit integer,
  `"fP|key"` for a float printed with `P` significant digits, `"b|key"`
  for a boolean, `"o|key"` for raw JSON text, `"{|obj"` … `"}|"` for a
  nested object, `"+|raw"` for a raw fragment, and `"i[key"`, `"s[key"`
  and the like for arrays. A first item of `"-{"` builds a fragment
  instead of a whole object. With `buf_size=` the output is limited to
  that many bytes, terminator included; going over raises
  `BufferSizeError`, and unbalanced objects raise `BracesMismatchError`
  (both subclasses of `JsonBuildError`). `str_replace` is the
  replace-or-`None` helper used for escaping.
- `sketchkit.logger`: `Logger` renders each record as one JSON line,
  starting with optional time and id members and the level, and passes
  `(level, text)` to every sender registered with `add_sender`. Records
  below `min_level` (default `Level.DEBUG`) are dropped; if a record
  does not fit into `max_len` bytes (default 512), senders receive an
  error record at `Level.ERROR` instead. `modify_for_human` rewrites a
  record into a terse console line.
- `sketchkit.jsonvar`: `JSONVar`, a dynamic JSON value with
  JavaScript-like indexing (missing object members and array slots are
  created as `null`, and children share storage with their parent),
  plus `parse`, `stringify`, `typeof` and the `undefined` value.
  `parse` returns an undefined `JSONVar` for invalid text rather than
  raising, and `stringify` returns `None` for an undefined value.
- `sketchkit.der`: DER building blocks: `CertInfo` for issuer and
  subject names, sequence headers, version, public key, ECDSA
  signature, serial number, UTCTime/GeneralizedTime dates, the
  authority key identifier extension, and `pem_encode`.
- `sketchkit.certificate`: `ECP256Certificate`, which builds, signs,
  imports and PEM-encodes P-256 certificates and certificate signing
  requests. Problems such as a missing public key or a value of the
  wrong length raise `CertificateError`.

## Install

```
pip install .
```

## Examples

Building JSON:

```python
from sketchkit.jsonbuilder import build_json

text = build_json("name", "sensor", "i|count", 3, "b|ok", 1)
# '{"name":"sensor","count":3,"ok":true}'
```

Logging:

```python
from sketchkit.logger import Logger, modify_for_human

log = Logger()
log.add_sender(lambda level, text: print(modify_for_human(level, text)))
log.info("i|status", -1, "started")
```

Dynamic JSON values:

```python
from sketchkit.jsonvar import parse, stringify, typeof

doc = parse('{"a": [1, 2, 3]}')
doc["b"] = "text"
print(stringify(doc), typeof(doc["a"]))
# {"a":[1,2,3],"b":"text"} array
```

Certificate signing requests:

```python
from sketchkit.certificate import ECP256Certificate

cert = ECP256Certificate()
cert.subject.common_name = "device-0001"
cert.set_public_key(bytes(64))   # raw X || Y coordinates
info = cert.build_csr()          # DER bytes to be signed
cert.sign_csr(bytes(64))         # raw R || S signature
print(cert.csr_pem())
```

Certificates take their validity from `issue_year`, `issue_month`,
`issue_day`, `issue_hour` and `expire_years`, and their serial number
and authority key identifier from `set_serial_number` and
`set_authority_key_id`; `build_cert` then `sign_cert` produce the DER,
and `cert_pem` the PEM text. `import_cert` reads the authority key
identifier and signature back out of a DER certificate.

## What it does not do

The package computes no signatures and verifies none: signing the bytes
returned by `build_csr` or `build_cert` is left to the caller, who
hands back the raw 64-byte signature. The logger writes nowhere by
itself; output goes only to the senders you register. There is no
command-line tool.

## Tests

```
pip install .[test]
pytest
```