"""
Web API for the appraisal engine.
"""
