"""Adapters to collaborators outside the core: converters and encoders.

WHY: Media conversion, base64 and hashing are not part of reading a
package, but the extract and xx-hash commands need them. Keeping them
here keeps the core free of subprocess and third-party hashing concerns.

RULES:
- Each adapter lives in its own module under this package
- Adapters take and return plain bytes/str; they never touch a Package
"""

from unitypackage_util.adapters.encoding import base64_encode, xx_hash
from unitypackage_util.adapters.fbx2gltf import convert_fbx2gltf

__all__ = ["base64_encode", "convert_fbx2gltf", "xx_hash"]
