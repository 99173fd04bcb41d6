"""
Algorithms package for the Resource Allocation Graph Analyzer.
Contains wait-for construction, cycle detection, safety analysis and prevention.
"""
