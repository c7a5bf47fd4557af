"""patchstate — patch state and version resolution for KernelPatch / APatch."""

__version__ = "0.1.0"
