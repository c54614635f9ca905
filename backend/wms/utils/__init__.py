# =============================================================================
# GIGA WMS v1.0 - UTILS PACKAGE
# =============================================================================
#   utils/conversions.py - as_int, as_decimal, as_text, as_date
#   utils/response.py    - success_response, error_response, service_envelope
# =============================================================================

from .conversions import as_int, as_decimal, as_text, as_date

from .response import (
    success_response,
    error_response,
    paginated_response,
    service_envelope,
)


__all__ = [
    'as_int',
    'as_decimal',
    'as_text',
    'as_date',
    'success_response',
    'error_response',
    'paginated_response',
    'service_envelope',
]
