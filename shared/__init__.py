"""
Marker-file types and decoding shared by the monitor runtime and its tools.
"""
