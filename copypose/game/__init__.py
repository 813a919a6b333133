"""
Game engine: reference sequence, hold confirmation, controller and the
per-frame loop that drives it.
"""
