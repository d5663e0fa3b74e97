"""kerf: computational geometry kernel for CNC cutting geometry."""

__version__ = "0.1.0"
