"""
NMT leak probe: checks that jmethodID block memory does not grow across class unloading
"""

__version__ = "0.1.0"
