"""FIR Desk: hotel maintenance issue tracking (Streamlit + Firebase)."""

__version__ = "0.3.0"
