# GHOST BUYER Plugins
"""
Plugin collection for GHOST BUYER.

Categories:
    execution: Stealth plan execution
    venues: Trade venue adapters
    monitoring: Execution risk monitoring
"""
