"""
Controllers Package

HTTP endpoints exposed as Flask blueprints.
"""
