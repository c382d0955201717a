"""
Custom Exception Classes for the CMS

This module defines custom exceptions for consistent error handling across
the application. Every exception carries an HTTP status code and a
machine-readable ErrorCode that the exception handlers put in the response
body.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes (usable by clients for i18n)."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    PLUGIN_NOT_REGISTERED = "PLUGIN_NOT_REGISTERED"
    PLUGIN_NOT_FOUND = "PLUGIN_NOT_FOUND"
    PLUGIN_NOT_ENABLED = "PLUGIN_NOT_ENABLED"
    PLUGIN_ROUTE_NOT_FOUND = "PLUGIN_ROUTE_NOT_FOUND"
    PLUGIN_LOAD_FAILED = "PLUGIN_LOAD_FAILED"
    PLUGIN_STATE_NOT_FOUND = "PLUGIN_STATE_NOT_FOUND"
    PLUGIN_STATE_UNAVAILABLE = "PLUGIN_STATE_UNAVAILABLE"


class CMSError(Exception):
    """Base exception class for all CMS-related exceptions"""

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authorization
# ============================================================================


class AuthorizationError(CMSError):
    """Raised when the caller lacks permission for an action"""

    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


# ============================================================================
# Resources & validation
# ============================================================================


class ResourceNotFoundError(CMSError):
    """Base class for resource not found errors"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ValidationError(CMSError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class DuplicateResourceError(CMSError):
    """Raised when attempting to create a duplicate resource"""

    error_code = ErrorCode.VALIDATION_DUPLICATE_RESOURCE

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
        )


# ============================================================================
# Plugin system
# ============================================================================


class PluginNotRegisteredError(CMSError):
    """Raised when enabling a plugin whose definition is not in the registry"""

    error_code = ErrorCode.PLUGIN_NOT_REGISTERED

    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(
            message=f'Plugin "{plugin_id}" is not registered',
            status_code=status.HTTP_404_NOT_FOUND,
            details={"plugin_id": plugin_id},
        )


class PluginNotFoundError(CMSError):
    """Raised when routing to a plugin id nothing knows about"""

    error_code = ErrorCode.PLUGIN_NOT_FOUND

    def __init__(self, plugin_id: str | None = None, path: str | None = None):
        self.plugin_id = plugin_id
        if plugin_id is not None:
            message = "Plugin not found"
            details: dict[str, Any] = {"plugin_id": plugin_id}
        else:
            message = "No plugin serves this path"
            details = {"path": path}
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class PluginNotEnabledError(CMSError):
    """Raised when routing to a plugin that exists but is disabled"""

    error_code = ErrorCode.PLUGIN_NOT_ENABLED

    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(
            message="Plugin not enabled",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"plugin_id": plugin_id},
        )


class RouteNotFoundError(CMSError):
    """Raised when no page or API route pattern matches the remaining path"""

    error_code = ErrorCode.PLUGIN_ROUTE_NOT_FOUND

    def __init__(self, plugin_id: str, path: str):
        self.plugin_id = plugin_id
        super().__init__(
            message="Route not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"plugin_id": plugin_id, "path": path},
        )


class MethodNotAllowedError(CMSError):
    """Raised when the matched API route has no handler for the HTTP method"""

    error_code = ErrorCode.METHOD_NOT_ALLOWED

    def __init__(self, plugin_id: str, method: str, allowed_methods: list[str]):
        self.plugin_id = plugin_id
        self.allowed_methods = allowed_methods
        super().__init__(
            message="Method not allowed",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            details={"plugin_id": plugin_id, "method": method, "allowed_methods": allowed_methods},
        )


class ModuleLoadError(CMSError):
    """Raised when a plugin module fails during import/load"""

    error_code = ErrorCode.PLUGIN_LOAD_FAILED

    def __init__(self, plugin_id: str, reason: str | None = None):
        self.plugin_id = plugin_id
        details: dict[str, Any] = {"plugin_id": plugin_id}
        if reason:
            details["reason"] = reason
        super().__init__(
            message="Failed to load plugin",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class PluginStateNotFoundError(CMSError):
    """Raised when an update requires an existing plugin state record"""

    error_code = ErrorCode.PLUGIN_STATE_NOT_FOUND

    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(
            message=f'No state recorded for plugin "{plugin_id}"',
            status_code=status.HTTP_404_NOT_FOUND,
            details={"plugin_id": plugin_id},
        )


class StateStoreUnavailableError(CMSError):
    """Raised by state backends when the backing persistence is unreachable"""

    error_code = ErrorCode.PLUGIN_STATE_UNAVAILABLE

    def __init__(self, message: str = "Plugin state storage is unavailable", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE, details=details)
