# =============================================================================
# GIGA WMS v1.0 - BACKEND PACKAGE
# =============================================================================
