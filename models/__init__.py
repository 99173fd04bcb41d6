"""
Data models for the Resource Allocation Graph Analyzer.
Processes, resources, edges and the immutable graph snapshot.
"""
