"""The request pipeline: executor, resilience, pagination and the resource facade."""

from .cancel import CancelToken
from .executor import ApiRequest, ApiResponse, RequestExecutor
from .ratelimit import RateLimiter
from .breaker import CircuitBreaker, CircuitState
from .retry import RetryPolicy, RetryState
from .resilience import ResilienceController
from .pagination import PaginationEngine
from .resource import ResourceAccess
