"""unity-xrefmap — DocFX cross-reference maps for the Unity scripting API."""

__version__ = "0.1.0"
