"""
Project configuration: data paths and per-run pipeline options
"""
