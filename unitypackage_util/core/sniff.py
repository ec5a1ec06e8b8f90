"""Content-type sniffing by magic bytes.

WHY: Package classification must not trust file extensions (a
``.unitypackage`` is a gzip-tar, but people also hand over plain tars and
extracted folders), and ``dump`` reports a MIME-like content type for
every ``asset`` body so consumers can tell textures from meshes from
serialized YAML without re-reading the bytes.

HOW: An ordered table of (content type, matcher) pairs. The dialect's own
signatures (``%YAML`` and binary FBX) come first, then the payloads most
commonly found in packages. The first matcher that accepts the buffer wins.

RULES:
- Matchers only look at a bounded prefix of the buffer
- Unknown content returns None, never raises
- Tar is detected by the ``ustar`` magic at offset 257; pre-POSIX v7 tars
  without that magic are not recognized
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from unitypackage_util.config import FBX_SIGNATURE, YAML_SIGNATURE

SNIFF_LENGTH = 512
"""Number of leading bytes callers need to read for sniffing."""

GZIP_MAGIC = b"\x1f\x8b"
TAR_MAGIC = b"ustar"
TAR_MAGIC_OFFSET = 257


def _prefix(signature: bytes) -> Callable[[bytes], bool]:
    return lambda buf: buf.startswith(signature)


def is_tar(buf: bytes) -> bool:
    return buf[TAR_MAGIC_OFFSET:TAR_MAGIC_OFFSET + len(TAR_MAGIC)] == TAR_MAGIC


def is_gzip(buf: bytes) -> bool:
    return buf.startswith(GZIP_MAGIC)


def _is_wav(buf: bytes) -> bool:
    return buf[:4] == b"RIFF" and buf[8:12] == b"WAVE"


def _is_mp3(buf: bytes) -> bool:
    if buf.startswith(b"ID3"):
        return True
    # Bare MPEG audio frame sync (11 set bits)
    return len(buf) >= 2 and buf[0] == 0xFF and (buf[1] & 0xE0) == 0xE0


def _is_sfnt(buf: bytes) -> bool:
    return buf[:4] in (b"\x00\x01\x00\x00", b"OTTO")


# Order matters: the first match wins.
_MATCHERS: List[Tuple[str, Callable[[bytes], bool]]] = [
    ("text/yaml", _prefix(YAML_SIGNATURE)),
    ("data/fbx", _prefix(FBX_SIGNATURE)),
    ("image/png", _prefix(b"\x89PNG\r\n\x1a\n")),
    ("image/jpeg", _prefix(b"\xff\xd8\xff")),
    ("image/gif", lambda buf: buf[:6] in (b"GIF87a", b"GIF89a")),
    ("image/bmp", _prefix(b"BM")),
    ("image/vnd.adobe.photoshop", _prefix(b"8BPS")),
    ("audio/ogg", _prefix(b"OggS")),
    ("audio/x-wav", _is_wav),
    ("application/pdf", _prefix(b"%PDF")),
    ("application/zip", _prefix(b"PK\x03\x04")),
    ("application/gzip", is_gzip),
    ("application/x-tar", is_tar),
    ("application/font-sfnt", _is_sfnt),
    ("audio/mpeg", _is_mp3),
]


def sniff_content_type(buf: bytes) -> Optional[str]:
    """Return the MIME-like content type of ``buf``, or None if unknown."""
    head = buf[:SNIFF_LENGTH]
    for content_type, matcher in _MATCHERS:
        if matcher(head):
            return content_type
    return None


def is_dialect_yaml(buf: bytes) -> bool:
    """True when ``buf`` is a YAML-dialect body that should be transformed."""
    return buf.startswith(YAML_SIGNATURE)
