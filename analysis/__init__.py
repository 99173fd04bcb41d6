"""
Analysis package: session state machine, events, statistics and strategy comparison.
"""
