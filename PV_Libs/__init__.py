"""
PV_Libs - PureVision Library Modules

This package contains core functionality for the PureVision icon workbench,
organized into specialized sub-packages:

- ChromaKeyLib: Background detection, transparency compositing, manual erase
  overlay and AI enhancement
"""

__version__ = "0.1.0"
