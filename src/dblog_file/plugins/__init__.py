"""
Pluggable stages of the log file pipeline: the gating filter and line sinks.
"""
