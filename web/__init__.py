"""
HTTP interface to the scheduling engine
"""
