"""
Initiative progression: artifact catalog, state machine and engine.
"""
