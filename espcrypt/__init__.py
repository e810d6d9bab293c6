"""DES, 3DES-CBC, MD5 and HMAC-MD5 primitives for ESP and AH processing."""

__version__ = "0.1.0"
__all__ = ["des_key", "des_cipher", "md5"]