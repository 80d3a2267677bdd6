"""
MotionCore - workout statistics, records and JSON backup backend.
"""
__version__ = "1.0.0"
