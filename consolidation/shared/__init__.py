"""
consolidation/shared: data contracts, configuration and errors.
"""
