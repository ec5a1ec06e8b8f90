"""Unity package inspection and extraction toolkit.

WHY: A .unitypackage is a tar (usually gzip-compressed) of GUID-named
directories, each holding up to three files: ``pathname``, ``asset`` and
``asset.meta``. The asset and meta bodies are written in Unity's YAML
dialect, which generic YAML/JSON tooling cannot read directly. This package
opens such containers and turns their contents into plain JSON/YAML.

HOW: Three-stage pipeline: open (container abstraction over folder, tar and
tar.gz), clean up (dialect-to-YAML transformer), aggregate (per-GUID records
serialized by pluggable formatters). Each stage is independently testable.

RULES:
- The container layer knows nothing about the dialect, and vice versa
- Transformation is one-way: nothing is ever written back in the dialect
- Adding a new output format = one new formatter module, no core changes
"""

__version__ = "0.1.0"
