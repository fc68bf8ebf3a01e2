"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class MarketplaceClientException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        # update_user_favorites 실패 시 플래그가 반영된 노드 목록
        self.nodes: Optional[list] = None
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 전송(HTTP) 계층 예외
class TransportException(MarketplaceClientException):
    """I/O 실패 (연결 오류, 5xx, 잘못된 응답 본문 등)"""
    def __init__(self, url: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cannot complete request to {url}: {reason}"
        super().__init__(message, "TRANSPORT_ERROR", details or {"url": url, "reason": reason})
        self.url = url


class ResourceNotFoundException(TransportException):
    """HTTP 404 - 요청한 리소스가 서버에 없음"""
    def __init__(self, url: str, details: Optional[dict[str, Any]] = None):
        super().__init__(url, "resource not found", details)
        self.error_code = "RESOURCE_NOT_FOUND"


# 조회/응답 해석 예외
class NotFoundException(MarketplaceClientException):
    """조회 대상(market/category/node)이 존재하지 않음"""
    def __init__(self, kind: str, details: Optional[dict[str, Any]] = None):
        message = f"{kind.capitalize()} not found"
        super().__init__(message, "NOT_FOUND", details or {"kind": kind})
        self.kind = kind


class UnexpectedResponseException(MarketplaceClientException):
    """응답 문서가 기대한 형태가 아님 (단건 기대인데 복수, payload 누락 등)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Unexpected response from marketplace: {reason}"
        super().__init__(message, "UNEXPECTED_RESPONSE", details or {"reason": reason})


class UnsupportedQueryException(MarketplaceClientException):
    """서버가 거부한 검색어"""
    def __init__(self, query: Optional[str], details: Optional[dict[str, Any]] = None):
        message = f"Unsupported search string: {query}"
        super().__init__(message, "UNSUPPORTED_QUERY", details or {"query": query})
        self.query = query


class InvalidArgumentException(MarketplaceClientException, ValueError):
    """잘못된 조회 인자 (id/url 조합 오류 등)"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Invalid argument '{field}': {reason}"
        super().__init__(message, "INVALID_ARGUMENT", details or {"field": field, "reason": reason})


class CancelledException(MarketplaceClientException):
    """진행 모니터를 통해 작업이 취소됨"""
    def __init__(self, operation: str = "operation", details: Optional[dict[str, Any]] = None):
        message = f"{operation} was cancelled"
        super().__init__(message, "CANCELLED", details or {"operation": operation})


# 즐겨찾기 관련 예외
class NotAuthorizedException(MarketplaceClientException):
    """즐겨찾기 접근에 재인증이 필요함"""
    def __init__(self, reason: str = "authorization required", details: Optional[dict[str, Any]] = None):
        super().__init__(f"Not authorized: {reason}", "NOT_AUTHORIZED", details)


class RetrievalFailureException(MarketplaceClientException):
    """전송/제공자 오류를 감싼 조회 실패"""
    def __init__(self, reason: str, cause: Optional[BaseException] = None, details: Optional[dict[str, Any]] = None):
        message = reason if cause is None else f"{reason}: {cause}"
        super().__init__(message, "RETRIEVAL_FAILURE", details or {"reason": reason})
        self.cause = cause


class FavoritesNotSupportedException(MarketplaceClientException):
    """즐겨찾기 제공자가 설정되지 않음"""
    def __init__(self, details: Optional[dict[str, Any]] = None):
        super().__init__("No user favorites service configured", "FAVORITES_UNSUPPORTED", details)


# 캐시 관련 예외
class CacheException(MarketplaceClientException):
    """조회 캐시(Redis) 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 연결/명령 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache unavailable: {reason}"
        super().__init__(message, "CACHE_CONNECTION_ERROR", details or {"reason": reason})


class CacheSerializationException(CacheException):
    """캐시 값 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                         details or {"operation": operation, "reason": reason})
