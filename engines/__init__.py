"""
Encoding engines for Compactor.
"""
