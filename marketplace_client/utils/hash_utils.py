"""해싱 유틸리티"""
import hashlib


def hash_string(text: str) -> str:
    """
    문자열을 MD5 해시로 변환

    Args:
        text: 해시할 문자열

    Returns:
        MD5 해시 문자열
    """
    return hashlib.md5(text.encode()).hexdigest()


def generate_cache_key(kind: str, identifier: str, base_url: str = "") -> str:
    """
    조회 캐시 키 생성

    같은 id라도 서버(base_url)가 다르면 다른 키가 됩니다.

    Args:
        kind: 조회 종류 (예: "node:id", "category:url", "markets")
        identifier: id 또는 url
        base_url: 카탈로그 서버 URL

    Returns:
        "<kind>:<md5>" 형태의 캐시 키
    """
    hashed = hash_string(f"{base_url}|{identifier}")
    return f"{kind}:{hashed}"
