"""
REST API: hub health/metrics/services plus the mock document and template endpoints.
"""
