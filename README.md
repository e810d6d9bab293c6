# espcrypt

Small, dependency-free Python implementations of the ciphers and digests
used by ESP and AH packet processing:

- DES key handling: odd-parity fixing and checking, weak-key detection and
  key-schedule generation (`espcrypt.des_key`)
- DES and triple-DES (EDE) block operations and CBC mode
  (`espcrypt.des_cipher`)
- MD5 with an incremental context and RFC 2104 HMAC-MD5 (`espcrypt.md5`)

These are legacy algorithms. Use them to talk to systems that need them,
not to protect new data.

## DES keys

```python
from espcrypt.des_key import (
    set_odd_parity, check_key_parity, is_weak_key,
    set_key_checked, KeyParityError, WeakKeyError,
)

key = set_odd_parity(bytes(range(8)))
assert check_key_parity(key)
assert not is_weak_key(key)

schedule = set_key_checked(key)   # raises KeyParityError or WeakKeyError
```

Every function takes an 8-byte key and raises `ValueError` for any other
length. `set_key_unchecked(key)` builds the 32-word schedule without any
checks, and `set_key(key, checked=False)` picks one of the two.
`KeyParityError` and `WeakKeyError` both derive from `DesKeyError`, which is
a `ValueError`.

## 3DES-CBC

```python
from espcrypt.des_key import set_odd_parity
from espcrypt.des_cipher import cipher_3des_cbc

key = b"".join(set_odd_parity(bytes(range(i, i + 8))) for i in (0, 8, 16))
iv = bytes(8)

ciphertext = cipher_3des_cbc(b"sixteen byte msg", key, iv, True)
plaintext = cipher_3des_cbc(ciphertext, key, iv, False)
```

The key is 24 bytes, three DES keys with odd parity that are not weak;
otherwise a `KeyParityError` or `WeakKeyError` is raised. A trailing partial
block is zero-padded on encryption, so the ciphertext is always a whole
number of 8-byte blocks; decrypting data whose length is not a multiple of
8 raises `ValueError`.

The lower-level functions work on schedules made by the `des_key` module:

- `crypt_block(block, schedule, encrypt=True)` – single DES on one block
- `encrypt3_block(block, ks1, ks2, ks3)` and
  `decrypt3_block(block, ks1, ks2, ks3)` – triple DES (EDE) on one block
- `ncbc_encrypt(data, schedule, iv, encrypt=True)` and
  `ede3_cbc_encrypt(data, ks1, ks2, ks3, iv, encrypt=True)` – CBC mode;
  both return a pair of the output and the chaining value for the next call

## MD5 and HMAC-MD5

```python
from espcrypt.md5 import Md5Context, md5, hmac_md5

md5(b"abc").hex()              # '900150983cd24fb0d6963f7d28e17f72'

ctx = Md5Context()
ctx.update(b"a")
ctx.update(b"bc")
digest = ctx.final()

hmac_md5(b"what do ya want for nothing?", b"Jefe").hex()
# '750c783e6ab0b503eaa86e310a5db738'
```

`Md5Context` also offers `copy()` for an independent snapshot and
`transform(block)` to run the compression function on one 64-byte block.
Its chaining words are `a`, `b`, `c`, `d`, the bit count is in `nl`/`nh`,
and `num` and `data` show the pending partial block.

Keys longer than 64 bytes are hashed first, as RFC 2104 requires.

## What this package does not do

It provides only the cryptographic primitives. It does not parse or build
ESP or AH packets, keep security associations or policies, or hook into a
network stack.