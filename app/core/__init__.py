"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps:

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - UnauthenticatedError, ValidationError, NotFoundError,
      PermissionDeniedError, ConflictError, InternalError
    - api_exception_handler: DRF exception handler rendering the above

Views (core.views):
    - health_check: Database and channel layer status

OpenAPI (core.openapi):
    - group_auth_endpoints: drf-spectacular postprocessing hook for tags

Note:
    Nothing is re-exported here. core.exceptions pulls in DRF and
    core.models needs the app registry, so import from the modules directly.
"""
