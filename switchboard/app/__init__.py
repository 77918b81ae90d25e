"""
Switchboard application layer (FastAPI).
"""
